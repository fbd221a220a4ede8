"""
Declarative validators for the signup and login forms.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, ValidationError, field_validator
from pydantic_core import PydanticCustomError

from causeconnect.auth_service.utils import normalize_email

PASSWORD_MIN_LENGTH = 5


def _as_str(value: Any) -> str:
    return "" if value is None else str(value)


class _EmailForm(BaseModel):
    model_config = ConfigDict(validate_default=True)

    email: EmailStr = ""

    @field_validator("email", mode="wrap")
    @classmethod
    def validate_email(cls, value: Any, handler) -> str:
        text = _as_str(value).strip().lower()
        try:
            # EmailStr would also accept "Name <addr>"; a form field holds a bare address
            if "<" in text:
                raise ValueError(text)
            email = handler(text)
        except (ValidationError, ValueError):
            raise PydanticCustomError("email_invalid", "Enter a valid email")
        return normalize_email(email)


class LoginForm(_EmailForm):
    password: str = ""

    @field_validator("password", mode="before")
    @classmethod
    def validate_password(cls, value: Any) -> str:
        password = _as_str(value)
        if not password:
            raise PydanticCustomError("password_missing", "Password cannot be empty")
        return password


class SignupForm(_EmailForm):
    password: str = ""

    @field_validator("password", mode="before")
    @classmethod
    def validate_password(cls, value: Any) -> str:
        password = _as_str(value)
        if len(password) < PASSWORD_MIN_LENGTH:
            raise PydanticCustomError(
                "password_too_short",
                "Password must be at least {min_length} characters long",
                {"min_length": PASSWORD_MIN_LENGTH},
            )
        return password


def error_message(exc: ValidationError) -> str:
    """Join every validation message, in field order, into one flash string."""
    return " ".join(err["msg"] for err in exc.errors())
