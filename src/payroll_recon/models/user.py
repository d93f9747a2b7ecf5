"""Portal user model (the credential entity)."""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from uuid import UUID, uuid4

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from payroll_recon.models.base import Base, TimestampMixin


class UserRole(str, Enum):
    """Portal roles."""

    ADMIN = "admin"
    EMPLOYER = "employer"
    EMPLOYEE = "employee"


class AppUser(Base, TimestampMixin):
    """A portal account.

    ``password_hash`` is the live credential. After account creation it is
    only replaced by an approved credential change request.
    """

    __tablename__ = "app_user"

    user_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    role: Mapped[str] = mapped_column(String, nullable=False, default=UserRole.EMPLOYEE.value)
    password_hash: Mapped[str] = mapped_column(String, nullable=False)
    employer_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("app_user.user_id", ondelete="SET NULL"),
        nullable=True,
    )
    hourly_rate: Mapped[Decimal | None] = mapped_column(Numeric(12, 4), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        CheckConstraint(
            "role IN ('admin', 'employer', 'employee')",
            name="app_user_role_check",
        ),
    )
