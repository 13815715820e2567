# medlink/modules/users/schemas.py
from __future__ import annotations

import re
from datetime import datetime
from enum import Enum
from typing import Annotated, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, SecretStr, StringConstraints, field_validator

from medlink.core.schemas import CamelModel


class Role(str, Enum):
    patient = "patient"
    doctor = "doctor"
    admin = "admin"


class SignupRole(str, Enum):
    """Roles a visitor may pick at sign-up. Admins are provisioned out of band."""

    patient = "patient"
    doctor = "doctor"


NameStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]
PhoneStr = Annotated[str, StringConstraints(pattern=r"^\+?[1-9]\d{1,14}$")]  # E.164 simple

PASSWORD_RE = re.compile(r"^(?=.*[A-Za-z])(?=.*\d)[A-Za-z\d\S]{8,64}$")


class RegisterRequest(CamelModel):
    email: EmailStr
    password: SecretStr = Field(..., description="8-64 chars, at least one letter and one digit")
    first_name: NameStr
    last_name: NameStr
    role: SignupRole = SignupRole.patient
    phone: Optional[PhoneStr] = None

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("password")
    @classmethod
    def validate_password_strength(cls, v: SecretStr) -> SecretStr:
        if not PASSWORD_RE.match(v.get_secret_value()):
            raise ValueError(
                "Password must be 8-64 chars and include at least one letter and one digit"
            )
        return v


class UserPublic(CamelModel):
    id: UUID
    email: EmailStr
    role: Role
    first_name: str
    last_name: str
    phone: Optional[str] = None
    is_active: bool
    created_at: datetime


RegisterResponse = UserPublic
MeResponse = UserPublic


class LoginRequest(BaseModel):
    email: EmailStr
    password: SecretStr

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class TokenPair(BaseModel):
    # snake_case on purpose: OAuth2 password flow clients expect `access_token`
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    refresh_token: str | None = None
    user: UserPublic | None = None


LoginResponse = TokenPair


class RefreshRequest(BaseModel):
    refresh_token: str
