# medlink/modules/users/service.py
from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from medlink.core.config import settings
from medlink.core.security import (
    create_access_token,
    create_refresh_token,
    hash_password,
    verify_password,
)
from medlink.modules.doctors import repository as doctors_repo
from medlink.modules.log import write_audit_log
from medlink.modules.users import repository as users_repo
from medlink.modules.users.models import User, UserRole
from medlink.modules.users.schemas import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    UserPublic,
)

logger = logging.getLogger(__name__)


# Service-level errors (map them to HTTP in the router)
class EmailAlreadyExists(Exception):
    pass


class InvalidCredentials(Exception):
    pass


def to_public(user: User) -> UserPublic:
    """
    Convert ORM model to public DTO.
    """
    return UserPublic.model_validate(user)


async def register_user(session: AsyncSession, payload: RegisterRequest) -> UserPublic:
    """
    Business flow for user registration:
      1) Check email uniqueness.
      2) Hash password with bcrypt.
      3) Persist user (and an empty profile for doctors).
      4) Return public DTO.
    """
    email = payload.email.strip().lower()

    if await users_repo.get_by_email(session, email):
        raise EmailAlreadyExists("email_already_exists")

    try:
        user = await users_repo.create_user(
            session,
            email=email,
            password_hash=hash_password(payload.password.get_secret_value()),
            first_name=payload.first_name,
            last_name=payload.last_name,
            phone=payload.phone,
            role=payload.role.value,
        )
    except users_repo.EmailAlreadyExistsError as exc:
        raise EmailAlreadyExists("email_already_exists") from exc

    if user.role == UserRole.DOCTOR.value:
        await doctors_repo.create_profile(session, doctor_id=user.id)

    await write_audit_log(session, user.id, "REGISTER", f"role={user.role}")
    logger.info("Registered %s %s", user.role, user.id)
    return to_public(user)


async def login_user(session: AsyncSession, payload: LoginRequest) -> LoginResponse:
    """
    1) Fetch user by email
    2) Verify bcrypt password
    3) Issue access and refresh tokens
    """
    user = await users_repo.get_by_email(session, payload.email)
    if not user or not user.is_active:
        raise InvalidCredentials("invalid_credentials")

    if not verify_password(payload.password.get_secret_value(), user.password_hash):
        raise InvalidCredentials("invalid_credentials")

    return LoginResponse(
        access_token=create_access_token(subject=str(user.id), email=user.email, role=user.role),
        expires_in=settings.ACCESS_EXPIRES_MIN * 60,
        refresh_token=create_refresh_token(subject=str(user.id)),
        user=to_public(user),
    )


async def refresh_access(session: AsyncSession, user_id: UUID, refresh_token: str) -> LoginResponse:
    user = await users_repo.get_by_id(session, user_id)
    if not user or not user.is_active:
        raise InvalidCredentials("user_not_found")
    return LoginResponse(
        access_token=create_access_token(subject=str(user.id), email=user.email, role=user.role),
        expires_in=settings.ACCESS_EXPIRES_MIN * 60,
        refresh_token=refresh_token,
        user=to_public(user),
    )
