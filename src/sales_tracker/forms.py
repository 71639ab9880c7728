"""Pydantic models for submitted HTML forms.

Blank inputs are treated as absent: required fields fail with ``missing`` and
optional fields fall back to ``None`` so they are stored as NULL.
"""

from collections.abc import Mapping
from datetime import date
from typing import Any
from uuid import UUID

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)

EMAIL_PATTERN = r"(?i)^[a-z0-9._%+-]+@[a-z0-9.-]+\.[a-z]{2,}$"
PASSWORD_MIN_LENGTH = 6


class FormModel(BaseModel):
    """Base for form payloads; values arrive as plain strings."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def drop_blank_inputs(cls, data: Any) -> Any:
        if isinstance(data, Mapping):
            return {
                key: value
                for key, value in data.items()
                if not (isinstance(value, str) and not value.strip())
            }
        return data


class LoginForm(FormModel):
    email: str = Field(pattern=EMAIL_PATTERN)
    password: str = Field(min_length=PASSWORD_MIN_LENGTH)


class RegisterForm(FormModel):
    full_name: str = Field(min_length=3)
    email: str = Field(pattern=EMAIL_PATTERN)
    password: str = Field(min_length=PASSWORD_MIN_LENGTH)
    confirm_password: str

    @field_validator("confirm_password")
    @classmethod
    def passwords_match(cls, value: str, info: ValidationInfo) -> str:
        password = info.data.get("password")
        if password is not None and value != password:
            raise ValueError("passwords do not match")
        return value


class ForgotPasswordForm(FormModel):
    email: str = Field(pattern=EMAIL_PATTERN)


class ClientForm(FormModel):
    name: str = Field(min_length=2)
    email: str | None = Field(default=None, pattern=EMAIL_PATTERN)
    phone: str | None = None


class NewSaleForm(FormModel):
    client_id: UUID
    sale_date: date
    instagram: str | None = None
    notes: str | None = None


class SaleEditForm(FormModel):
    sale_date: date
    instagram: str | None = None
    notes: str | None = None
    is_completed: bool = False
