"""Credential change approval workflow."""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_recon.config import get_settings
from payroll_recon.exceptions import (
    AuthenticationError,
    AuthorizationError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from payroll_recon.models import CredentialChangeRequest
from payroll_recon.models.base import utcnow
from payroll_recon.services.actor import Actor
from payroll_recon.services.audit import record_audit
from payroll_recon.services.passwords import hash_password, verify_password
from payroll_recon.services.state_machine import (
    CredentialChangeStateMachine,
    CredentialRequestStatus,
)
from payroll_recon.services.user_service import UserService

logger = logging.getLogger(__name__)

PENDING = CredentialRequestStatus.PENDING.value
APPROVED = CredentialRequestStatus.APPROVED.value
REJECTED = CredentialRequestStatus.REJECTED.value


class CredentialChangeService:
    """Service for queued password changes.

    Operations:
    - request: verify the current password and queue a candidate hash
    - approve: copy the candidate into the live credential (admin)
    - reject: close the request with a reason (admin)
    - cancel: delete a pending request (requester only)

    The live credential changes only inside ``approve``.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.users = UserService(session)

    async def get_request(self, request_id: UUID) -> CredentialChangeRequest:
        request = await self.session.get(CredentialChangeRequest, request_id)
        if request is None:
            raise NotFoundError("Credential change request", request_id)
        return request

    async def _pending_for_user(self, user_id: UUID) -> CredentialChangeRequest | None:
        result = await self.session.execute(
            select(CredentialChangeRequest).where(
                CredentialChangeRequest.user_id == user_id,
                CredentialChangeRequest.status == PENDING,
            )
        )
        return result.scalars().first()

    async def request(
        self,
        actor: Actor,
        current_password: str,
        new_password: str,
    ) -> CredentialChangeRequest:
        """Queue a password change for review.

        Raises:
            AuthenticationError: current password does not match
            ValidationError: new password too short or unchanged
            InvalidStateError: the user already has a pending request
        """
        user = await self.users.get_user(actor.user_id)
        if not verify_password(current_password, user.password_hash):
            raise AuthenticationError("Current password is incorrect")

        min_length = get_settings().min_password_length
        if len(new_password or "") < min_length:
            raise ValidationError(
                f"New password must be at least {min_length} characters",
                field="new_password",
            )
        # Compared against the stored hash so passwords that only differ past
        # bcrypt's 72-byte limit count as unchanged
        if verify_password(new_password, user.password_hash):
            raise ValidationError(
                "New password must differ from the current password",
                field="new_password",
            )

        if await self._pending_for_user(user.user_id) is not None:
            raise InvalidStateError(
                PENDING, "submit a new request", "a pending password change request already exists"
            )

        change = CredentialChangeRequest(
            user_id=user.user_id,
            candidate_password_hash=hash_password(new_password),
            status=PENDING,
            requested_at=utcnow(),
        )
        self.session.add(change)
        await self.session.flush()
        logger.info("Credential change request %s queued for user %s", change.request_id, user.user_id)
        return change

    async def approve(self, reviewer: Actor, request_id: UUID) -> CredentialChangeRequest:
        """Approve a pending request and replace the live credential."""
        reviewer.require_admin("approve credential changes")
        change = await self.get_request(request_id)
        CredentialChangeStateMachine.validate_transition(change.status, APPROVED)

        user = await self.users.get_user(change.user_id)
        user.password_hash = change.candidate_password_hash

        change.status = APPROVED
        change.reviewed_by_user_id = reviewer.user_id
        change.reviewed_at = utcnow()

        await record_audit(
            self.session,
            entity_type="credential_change_request",
            entity_id=change.request_id,
            action="approved",
            actor_user_id=reviewer.user_id,
            before={"status": PENDING},
            after={"status": APPROVED, "user_id": change.user_id},
        )
        await self.session.flush()
        logger.info("Credential change %s approved by %s", request_id, reviewer.user_id)
        return change

    async def reject(
        self,
        reviewer: Actor,
        request_id: UUID,
        reason: str,
    ) -> CredentialChangeRequest:
        """Reject a pending request; the live credential is untouched."""
        reviewer.require_admin("reject credential changes")
        if not reason or not reason.strip():
            raise ValidationError("Reason for rejection is required", field="reason")

        change = await self.get_request(request_id)
        CredentialChangeStateMachine.validate_transition(change.status, REJECTED)

        change.status = REJECTED
        change.reviewed_by_user_id = reviewer.user_id
        change.reviewed_at = utcnow()
        change.reason = reason.strip()

        await record_audit(
            self.session,
            entity_type="credential_change_request",
            entity_id=change.request_id,
            action="rejected",
            actor_user_id=reviewer.user_id,
            before={"status": PENDING},
            after={"status": REJECTED, "reason": change.reason},
        )
        await self.session.flush()
        logger.info("Credential change %s rejected by %s", request_id, reviewer.user_id)
        return change

    async def cancel(self, actor: Actor, request_id: UUID) -> None:
        """Delete a pending request on behalf of its requester."""
        change = await self.get_request(request_id)
        if change.user_id != actor.user_id:
            raise AuthorizationError("Not authorized to cancel this request")
        if not CredentialChangeStateMachine.can_cancel(change.status):
            raise InvalidStateError(change.status, "cancel", "only pending requests can be cancelled")

        await self.session.delete(change)
        await self.session.flush()

    async def list_requests(
        self,
        reviewer: Actor,
        status: str | None = None,
    ) -> list[CredentialChangeRequest]:
        """All requests, newest first (admin)."""
        reviewer.require_admin("list credential change requests")
        query = select(CredentialChangeRequest)
        if status:
            if status not in CredentialChangeStateMachine.VALID_TRANSITIONS:
                raise ValidationError(f"Invalid status '{status}'", field="status")
            query = query.where(CredentialChangeRequest.status == status)
        result = await self.session.execute(
            query.order_by(CredentialChangeRequest.requested_at.desc())
        )
        return list(result.scalars().all())

    async def list_for_user(self, actor: Actor) -> list[CredentialChangeRequest]:
        """The actor's own requests, newest first."""
        result = await self.session.execute(
            select(CredentialChangeRequest)
            .where(CredentialChangeRequest.user_id == actor.user_id)
            .order_by(CredentialChangeRequest.requested_at.desc())
        )
        return list(result.scalars().all())
