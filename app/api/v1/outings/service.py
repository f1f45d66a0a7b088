"""Outing submit, decide, pending/history/stats with viewer scope and approval history."""

import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.models import Profile, profile_completion
from app.auth.schemas import CurrentUser
from app.core.config import settings
from app.core.enums import Decision, OutingType, RequestStatus, UserRole
from app.core.exceptions import (
    BackendUnavailable,
    InvalidStateTransition,
    ProfileIncomplete,
    RequestNotFound,
    ServiceError,
    WorkflowError,
)
from app.core.models import OutingRequest
from app.db.session import BACKEND_ERRORS

from . import workflow
from .schemas import OutingRequestCreate, OutingRequestResponse, OutingStats
from .scope import ViewerScope, apply_scope, entitled_requests, pending_requests
from .validation import validate_outing_request

logger = logging.getLogger(__name__)


def _request_to_response(r: OutingRequest) -> OutingRequestResponse:
    return OutingRequestResponse.model_validate(r)


async def _check_profile_gate(db: AsyncSession, student_user_id: UUID) -> None:
    result = await db.execute(select(Profile).where(Profile.user_id == student_user_id))
    profile = result.scalar_one_or_none()
    if not profile:
        raise ProfileIncomplete("Student profile not found")
    if profile.is_blocked:
        raise ProfileIncomplete("Account is blocked. Contact the administrator.")
    if not profile.is_approved:
        raise ProfileIncomplete("Profile is awaiting administrator approval")
    completion = profile_completion(profile)
    if settings.require_complete_profile and completion < 100:
        raise ProfileIncomplete(
            f"Profile is {completion}% complete. Complete all required fields before requesting an outing.",
            completion=completion,
        )


async def create_outing_request(
    db: AsyncSession,
    current_user: CurrentUser,
    payload: OutingRequestCreate,
) -> OutingRequestResponse:
    """Validate and store a new request. Local outings start at the warden, hometown visits at the advisor."""
    if current_user.role != UserRole.STUDENT:
        raise ServiceError("Only students can submit outing requests", status.HTTP_403_FORBIDDEN)

    outing_type = validate_outing_request(payload)

    try:
        await _check_profile_gate(db, current_user.id)

        is_local = outing_type == OutingType.LOCAL
        now = datetime.utcnow()
        req = OutingRequest(
            student_id=current_user.id,
            outing_type=outing_type.value,
            destination=payload.destination.strip(),
            from_date=payload.from_date,
            to_date=payload.to_date,
            from_time=payload.from_time if is_local else None,
            to_time=payload.to_time if is_local else None,
            reason=payload.reason.strip(),
            contact_person=None if is_local else payload.contact_person.strip(),
            contact_phone=None if is_local else payload.contact_phone.strip(),
            current_stage=workflow.initial_stage(outing_type).value,
            final_status=RequestStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )
        db.add(req)
        await db.commit()
        await db.refresh(req)
    except BACKEND_ERRORS as e:
        await db.rollback()
        logger.exception("Database unavailable while creating outing request for %s", current_user.id)
        raise BackendUnavailable() from e

    logger.info("Outing request %s (%s) submitted by %s at stage %s", req.id, req.outing_type, req.student_id, req.current_stage)
    return _request_to_response(req)


async def apply_decision(
    db: AsyncSession,
    request_id: UUID,
    actor_role: UserRole,
    actor_id: UUID,
    decision: Decision,
    comment: Optional[str] = None,
    allow_admin_override: Optional[bool] = None,
) -> OutingRequestResponse:
    """
    Approve or reject a request and append its history entry in one transaction.

    The update only matches while the row is still pending at the stage the
    decision was computed for, so of two racing approvers exactly one wins;
    the other gets InvalidStateTransition.
    """
    if allow_admin_override is None:
        allow_admin_override = settings.admin_override_enabled

    try:
        req = await db.get(OutingRequest, request_id)
        if not req:
            raise RequestNotFound()

        try:
            transition = workflow.apply_decision(
                req,
                actor_role,
                actor_id,
                decision,
                comment,
                allow_admin_override=allow_admin_override,
            )
        except WorkflowError as e:
            logger.warning("Refused %s on outing request %s by %s (%s): %s", decision, request_id, actor_id, actor_role, e.message)
            raise

        stmt = (
            update(OutingRequest)
            .where(
                OutingRequest.id == request_id,
                OutingRequest.final_status == RequestStatus.PENDING.value,
                OutingRequest.current_stage == transition.from_stage.value,
            )
            .values(**transition.changes)
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(stmt)
        if result.rowcount != 1:
            await db.rollback()
            logger.warning("Outing request %s changed before %s could decide it", request_id, actor_id)
            raise InvalidStateTransition("Request was already decided by another approver")

        db.add(transition.history)
        await db.commit()
        await db.refresh(req)
    except BACKEND_ERRORS as e:
        await db.rollback()
        logger.exception("Database unavailable while deciding outing request %s", request_id)
        raise BackendUnavailable() from e

    logger.info(
        "Outing request %s %s at stage %s by %s; now stage=%s status=%s",
        req.id,
        transition.history.action,
        transition.from_stage.value,
        actor_id,
        req.current_stage,
        req.final_status,
    )
    return _request_to_response(req)


async def _fetch_requests(db: AsyncSession, stmt) -> List[OutingRequestResponse]:
    try:
        result = await db.execute(stmt.order_by(OutingRequest.created_at.desc()))
    except BACKEND_ERRORS as e:
        logger.exception("Database unavailable while listing outing requests")
        raise BackendUnavailable() from e
    return [_request_to_response(r) for r in result.scalars().all()]


async def get_outing_request(
    db: AsyncSession,
    scope: ViewerScope,
    request_id: UUID,
) -> OutingRequestResponse:
    rows = await _fetch_requests(db, entitled_requests(scope).where(OutingRequest.id == request_id))
    if not rows:
        raise RequestNotFound()
    return rows[0]


async def list_pending(db: AsyncSession, scope: ViewerScope) -> List[OutingRequestResponse]:
    """Requests waiting for the viewer's decision."""
    return await _fetch_requests(db, pending_requests(scope))


async def list_history(
    db: AsyncSession,
    scope: ViewerScope,
    final_status: Optional[RequestStatus] = None,
    outing_type: Optional[OutingType] = None,
) -> List[OutingRequestResponse]:
    """Every request the viewer may see, newest first."""
    stmt = entitled_requests(scope)
    if final_status is not None:
        stmt = stmt.where(OutingRequest.final_status == RequestStatus(final_status).value)
    if outing_type is not None:
        stmt = stmt.where(OutingRequest.outing_type == OutingType(outing_type).value)
    return await _fetch_requests(db, stmt)


async def get_stats(db: AsyncSession, scope: ViewerScope) -> OutingStats:
    """Counts by final_status and by outing_type over the viewer's requests."""
    by_status = apply_scope(
        select(OutingRequest.final_status, func.count(OutingRequest.id)).group_by(OutingRequest.final_status),
        scope,
    )
    by_type = apply_scope(
        select(OutingRequest.outing_type, func.count(OutingRequest.id)).group_by(OutingRequest.outing_type),
        scope,
    )
    try:
        status_rows = (await db.execute(by_status)).all()
        type_rows = (await db.execute(by_type)).all()
    except BACKEND_ERRORS as e:
        logger.exception("Database unavailable while computing outing stats")
        raise BackendUnavailable() from e

    stats = OutingStats()
    for value, count in status_rows:
        if value in (RequestStatus.PENDING.value, RequestStatus.APPROVED.value, RequestStatus.REJECTED.value):
            setattr(stats, value, count)
        stats.total += count
    for value, count in type_rows:
        if value in (OutingType.LOCAL.value, OutingType.HOMETOWN.value):
            setattr(stats, value, count)
    return stats
