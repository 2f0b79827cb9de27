from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class UsuarioBase(BaseModel):
    full_name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    rol: Literal["admin", "user"]
    activo: bool
    password: Optional[str] = Field(default=None, min_length=4)

    @field_validator("full_name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("email", mode="after")
    @classmethod
    def lower_email(cls, v):
        return str(v).lower()


class UsuarioCreate(UsuarioBase):
    pass


class UsuarioUpdate(UsuarioBase):
    pass


class PasswordChange(BaseModel):
    password: str = Field(min_length=4)
