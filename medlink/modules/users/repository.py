# medlink/modules/users/repository.py
from __future__ import annotations

from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from medlink.modules.users.models import User, UserRole


class EmailAlreadyExistsError(Exception):
    """Raised when trying to insert a user with an email that already exists."""


class InvalidUserDataError(Exception):
    """Raised when DB-level constraints fail (e.g., bad CHECK constraints)."""


async def get_by_id(session: AsyncSession, user_id: UUID) -> Optional[User]:
    """
    Returns a User by primary key or None if not found.
    """
    return await session.get(User, user_id)


async def get_by_email(session: AsyncSession, email: str) -> Optional[User]:
    email = email.strip().lower()
    result = await session.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def get_with_role(
    session: AsyncSession, user_id: UUID, role: UserRole
) -> Optional[User]:
    """
    Returns the user only if it exists and carries the given role.
    """
    user = await session.get(User, user_id)
    if user is None or user.role != role.value:
        return None
    return user


async def create_user(
    session: AsyncSession,
    *,
    email: str,
    password_hash: str,
    first_name: str,
    last_name: str,
    phone: Optional[str] = None,
    role: UserRole | str = UserRole.PATIENT,
    is_active: bool = True,
) -> User:
    """
    Inserts a new user row and returns the persisted ORM instance.

    Notes:
    - Expects a *hashed* password; never pass plain text.
    - Uniqueness and CHECK violations are mapped to clean Python exceptions.
    """
    role_value = role.value if isinstance(role, UserRole) else str(role)

    user = User(
        email=email.strip().lower(),
        password_hash=password_hash,
        first_name=first_name.strip(),
        last_name=last_name.strip(),
        phone=phone,
        role=role_value,
        is_active=is_active,
    )

    session.add(user)
    try:
        # Flush to force INSERT and surface constraint violations here
        await session.flush()
    except IntegrityError as exc:
        message = str(exc.orig).lower() if exc.orig else str(exc).lower()
        if "uq_users_email" in message or "unique" in message:
            raise EmailAlreadyExistsError("Email already registered") from exc
        raise InvalidUserDataError("User data violates DB constraints") from exc

    await session.refresh(user)
    return user
