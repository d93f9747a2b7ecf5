"""Audit trail recording shared by the services."""

from __future__ import annotations

import json
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_recon.models import AuditEvent


def snapshot(data: dict[str, Any]) -> dict[str, Any]:
    """JSON-safe copy of a record's fields (dates, decimals, UUIDs as strings)."""
    return json.loads(json.dumps(data, sort_keys=True, default=str))


async def record_audit(
    session: AsyncSession,
    entity_type: str,
    entity_id: UUID,
    action: str,
    actor_user_id: UUID | None = None,
    before: dict[str, Any] | None = None,
    after: dict[str, Any] | None = None,
) -> AuditEvent:
    """Add an audit event to the session."""
    event = AuditEvent(
        actor_user_id=actor_user_id,
        entity_type=entity_type,
        entity_id=entity_id,
        action=action,
        before_json=snapshot(before) if before is not None else None,
        after_json=snapshot(after) if after is not None else None,
    )
    session.add(event)
    return event


async def list_audit_events(
    session: AsyncSession,
    entity_type: str,
    entity_id: UUID,
) -> list[AuditEvent]:
    """Audit events for one entity, oldest first."""
    result = await session.execute(
        select(AuditEvent)
        .where(AuditEvent.entity_type == entity_type, AuditEvent.entity_id == entity_id)
        .order_by(AuditEvent.created_at)
    )
    return list(result.scalars().all())
