"""Credential change request API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, Response, status

from payroll_recon.api.dependencies import CurrentActor, DbSession
from payroll_recon.api.schemas import (
    CredentialChangeCreate,
    CredentialChangeListResponse,
    CredentialChangeReject,
    CredentialChangeResponse,
    ErrorResponse,
)
from payroll_recon.services.credential_service import CredentialChangeService

router = APIRouter(prefix="/credential-changes", tags=["credential-changes"])


@router.post(
    "",
    response_model=CredentialChangeResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def request_credential_change(
    db: DbSession,
    actor: CurrentActor,
    payload: CredentialChangeCreate,
) -> CredentialChangeResponse:
    """Queue a password change for administrator approval."""
    change = await CredentialChangeService(db).request(
        actor, payload.current_password, payload.new_password
    )
    await db.commit()
    return CredentialChangeResponse.model_validate(change)


@router.get(
    "",
    response_model=CredentialChangeListResponse,
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)
async def list_credential_changes(
    db: DbSession,
    actor: CurrentActor,
    status_filter: Annotated[str | None, Query(alias="status")] = None,
) -> CredentialChangeListResponse:
    """List all requests (administrators only)."""
    changes = await CredentialChangeService(db).list_requests(actor, status_filter)
    return CredentialChangeListResponse(
        items=[CredentialChangeResponse.model_validate(c) for c in changes],
        total=len(changes),
    )


@router.get(
    "/mine",
    response_model=CredentialChangeListResponse,
)
async def list_my_credential_changes(
    db: DbSession,
    actor: CurrentActor,
) -> CredentialChangeListResponse:
    """List the caller's own requests."""
    changes = await CredentialChangeService(db).list_for_user(actor)
    return CredentialChangeListResponse(
        items=[CredentialChangeResponse.model_validate(c) for c in changes],
        total=len(changes),
    )


@router.post(
    "/{request_id}/approve",
    response_model=CredentialChangeResponse,
    responses={
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def approve_credential_change(
    db: DbSession,
    actor: CurrentActor,
    request_id: Annotated[UUID, Path()],
) -> CredentialChangeResponse:
    """Approve a pending request; the new password takes effect."""
    change = await CredentialChangeService(db).approve(actor, request_id)
    await db.commit()
    return CredentialChangeResponse.model_validate(change)


@router.post(
    "/{request_id}/reject",
    response_model=CredentialChangeResponse,
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def reject_credential_change(
    db: DbSession,
    actor: CurrentActor,
    request_id: Annotated[UUID, Path()],
    payload: CredentialChangeReject,
) -> CredentialChangeResponse:
    """Reject a pending request with a reason."""
    change = await CredentialChangeService(db).reject(actor, request_id, payload.reason)
    await db.commit()
    return CredentialChangeResponse.model_validate(change)


@router.delete(
    "/{request_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def cancel_credential_change(
    db: DbSession,
    actor: CurrentActor,
    request_id: Annotated[UUID, Path()],
) -> Response:
    """Cancel one of the caller's pending requests."""
    await CredentialChangeService(db).cancel(actor, request_id)
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
