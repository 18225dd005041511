"""Request and response bodies for the JSON API."""

from __future__ import annotations

import re
from datetime import datetime

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_serializer
from pydantic_core import PydanticCustomError

PASSWORD_PATTERN = re.compile(r"^(?=.*[A-Za-z])(?=.*\d)[A-Za-z\d@$!%*#?&]{6,}$")
MIN_NAME_LENGTH = 2
MIN_PASSWORD_LENGTH = 6


def normalize_email(value: str) -> str:
    """Validate syntax and return the lower-cased canonical address."""
    try:
        # syntax only: no DNS lookups, and .test/.local style domains are fine
        result = validate_email(
            value.strip(),
            check_deliverability=False,
            globally_deliverable=False,
            test_environment=True,
        )
    except EmailNotValidError:
        raise PydanticCustomError("email_invalid", "Valid email is required")
    return result.normalized.lower()


# --- requests ---
class RegisterRequest(BaseModel):
    name: str
    email: str
    password: str

    @field_validator("name")
    @classmethod
    def check_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise PydanticCustomError("name_required", "Name is required")
        if len(value) < MIN_NAME_LENGTH:
            raise PydanticCustomError(
                "name_too_short", "Name must be at least 2 characters long"
            )
        return value

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        return normalize_email(value)

    @field_validator("password")
    @classmethod
    def check_password(cls, value: str) -> str:
        if len(value) < MIN_PASSWORD_LENGTH:
            raise PydanticCustomError(
                "password_too_short", "Password must be at least 6 characters long"
            )
        if not PASSWORD_PATTERN.match(value):
            raise PydanticCustomError(
                "password_format",
                "Password must contain at least one letter and one number",
            )
        return value


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        return normalize_email(value)

    @field_validator("password")
    @classmethod
    def check_password(cls, value: str) -> str:
        if not value:
            raise PydanticCustomError("password_required", "Password is required")
        return value


# --- responses ---
class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    is_admin: bool = Field(default=False, serialization_alias="isAdmin")


class AuthResponse(BaseModel):
    message: str
    token: str
    user: UserOut


class FileSummary(BaseModel):
    """One row of the listing. The storage path is never included."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(serialization_alias="_id")
    filename: str = Field(validation_alias="stored_name")
    originalname: str = Field(validation_alias="original_name")
    mimetype: str = Field(validation_alias="mime_type")
    size: int
    created_at: datetime = Field(serialization_alias="createdAt")


class UploadedFile(BaseModel):
    id: str
    name: str
    size: int
    type: str

    @model_serializer(mode="wrap")
    def with_legacy_id(self, handler):
        # clients read either `_id` or `id`
        return {"_id": self.id, **handler(self)}


class UploadResponse(BaseModel):
    message: str
    file: UploadedFile
