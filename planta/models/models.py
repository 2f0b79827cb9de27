from datetime import date, datetime
from typing import Optional

from sqlalchemy import (
    String,
    DateTime,
    Date,
    Boolean,
    ForeignKey,
    Integer,
    Index,
)
from sqlalchemy.orm import relationship, Mapped, mapped_column

from ..db import Base


def utcnow() -> datetime:
    return datetime.utcnow().replace(tzinfo=None)


class Usuario(Base):
    __tablename__ = "usuarios"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    rol: Mapped[str] = mapped_column(String(50), nullable=False, default="operario")
    activo: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    fecha_alta: Mapped[Optional[datetime]] = mapped_column(DateTime, default=utcnow)

    vinculos = relationship("TareaVinculo", back_populates="usuario", passive_deletes="all")


class TareaCatalogo(Base):
    __tablename__ = "tareas_catalogo"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    proceso: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    seccion: Mapped[Optional[str]] = mapped_column(String(100))
    label: Mapped[str] = mapped_column(String(255), nullable=False)
    activa: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)


class TareaVinculo(Base):
    """Ownership ledger row: user -> record in one of the area tables. Append-only."""

    __tablename__ = "tareas"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id_usuario: Mapped[int] = mapped_column(Integer, ForeignKey("usuarios.id"), nullable=False)
    tabla_area: Mapped[str] = mapped_column(String(50), nullable=False)
    id_tarea_area: Mapped[int] = mapped_column(Integer, nullable=False)
    fecha_creacion: Mapped[date] = mapped_column(Date, nullable=False)

    usuario = relationship("Usuario", back_populates="vinculos")

    __table_args__ = (
        Index("ix_tareas_area_record", "tabla_area", "id_tarea_area"),
        Index("ix_tareas_usuario", "id_usuario"),
    )
