from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator


Proceso = Literal["pintura", "chasis", "premontaje", "montaje"]


class CatalogoCreate(BaseModel):
    proceso: Proceso
    seccion: Optional[str] = Field(default=None, max_length=100)
    label: str = Field(min_length=1, max_length=255)
    activa: bool

    @field_validator("seccion", mode="before")
    @classmethod
    def empty_to_none(cls, v):
        if v is None:
            return None
        v = str(v).strip()
        return v or None


class CatalogoUpdate(BaseModel):
    proceso: Optional[Proceso] = None
    seccion: Optional[str] = Field(default=None, max_length=100)
    label: Optional[str] = Field(default=None, min_length=1, max_length=255)
    activa: Optional[bool] = None
