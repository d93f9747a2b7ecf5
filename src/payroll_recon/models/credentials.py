"""Credential change request model."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from payroll_recon.models.base import Base, TimestampMixin, utcnow


class CredentialChangeRequest(Base, TimestampMixin):
    """A queued password change awaiting administrator review.

    The candidate hash is held here, never in ``AppUser.password_hash``,
    until the request is approved.
    """

    __tablename__ = "credential_change_request"

    request_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("app_user.user_id", ondelete="CASCADE"),
        nullable=False,
    )
    candidate_password_hash: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="Pending")
    requested_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    reviewed_by_user_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("app_user.user_id", ondelete="SET NULL"),
        nullable=True,
    )
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('Pending', 'Approved', 'Rejected')",
            name="credential_change_status_check",
        ),
        CheckConstraint(
            "(status = 'Rejected' AND reason IS NOT NULL) OR "
            "(status <> 'Rejected' AND reason IS NULL)",
            name="credential_change_reason_check",
        ),
        Index("credential_change_user_status_idx", "user_id", "status"),
    )
