# -*- coding: utf-8 -*-
"""
Схемы аутентификации.
"""

from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field, model_validator

from examhub.api.v1.shared.schemas import CamelModel
from examhub.domain.enums import Role


class RegisterSchema(CamelModel):
    full_name: str = Field(min_length=1)
    urn: int = Field(gt=0)
    email: EmailStr
    password: str = Field(min_length=8, max_length=64)
    city: Optional[str] = Field(default=None, min_length=1)
    contact_number: Optional[str] = Field(default=None, min_length=10, max_length=15)


class LoginSchema(CamelModel):
    email: Optional[EmailStr] = None
    urn: Optional[str] = Field(default=None, min_length=8)
    password: str = Field(min_length=8)

    @model_validator(mode="before")
    @classmethod
    def urn_as_string(cls, data):
        if isinstance(data, dict) and isinstance(data.get("urn"), int):
            data = {**data, "urn": str(data["urn"])}
        return data

    @model_validator(mode="after")
    def email_or_urn(self):
        if self.email is None and self.urn is None:
            raise ValueError("Нужно указать email или URN")
        return self

    @property
    def login(self) -> str:
        return str(self.email) if self.email is not None else self.urn


class TokenSchema(CamelModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class UserReadSchema(CamelModel):
    id: int
    full_name: str
    email: str
    urn: Optional[int] = None
    role: Role
    city: Optional[str] = None
    contact_number: Optional[str] = None
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: datetime


class AdminCreateSchema(CamelModel):
    full_name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=8, max_length=64)
