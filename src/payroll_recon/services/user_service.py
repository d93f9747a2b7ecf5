"""Portal accounts: creation, lookup and authentication."""

from __future__ import annotations

import logging
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_recon.config import get_settings
from payroll_recon.exceptions import AuthenticationError, NotFoundError, ValidationError
from payroll_recon.models import AppUser, UserRole
from payroll_recon.services.passwords import hash_password, verify_password

logger = logging.getLogger(__name__)


class UserService:
    """Service for portal accounts.

    Password changes after creation go through CredentialChangeService.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_user(self, user_id: UUID) -> AppUser:
        user = await self.session.get(AppUser, user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    async def find_by_email(self, email: str) -> AppUser | None:
        result = await self.session.execute(
            select(AppUser).where(AppUser.email == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def create_user(
        self,
        email: str,
        name: str,
        password: str,
        role: UserRole | str = UserRole.EMPLOYEE,
        employer_id: UUID | None = None,
        hourly_rate: Decimal | None = None,
    ) -> AppUser:
        """Create an account with a hashed password."""
        role_value = role.value if isinstance(role, UserRole) else role
        if role_value not in {r.value for r in UserRole}:
            raise ValidationError(f"Invalid role '{role_value}'", field="role")
        if not email or "@" not in email:
            raise ValidationError("A valid email is required", field="email")
        if len(password or "") < get_settings().min_password_length:
            raise ValidationError(
                f"Password must be at least {get_settings().min_password_length} characters",
                field="password",
            )
        if await self.find_by_email(email) is not None:
            raise ValidationError(f"User with email {email} already exists", field="email")

        user = AppUser(
            email=email.strip().lower(),
            name=name.strip(),
            role=role_value,
            password_hash=hash_password(password),
            employer_id=employer_id,
            hourly_rate=hourly_rate,
            is_active=True,
        )
        self.session.add(user)
        await self.session.flush()
        logger.info("Created %s account %s", role_value, user.user_id)
        return user

    async def authenticate(self, email: str, password: str) -> AppUser:
        """Return the user whose live credential matches ``password``."""
        user = await self.find_by_email(email)
        if user is None or not user.is_active or not verify_password(password, user.password_hash):
            raise AuthenticationError("Invalid credentials")
        return user
