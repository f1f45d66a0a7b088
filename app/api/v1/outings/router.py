from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_user
from app.auth.rbac import require_roles
from app.auth.schemas import CurrentUser
from app.core.enums import Decision, OutingType, RequestStatus, UserRole
from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import DecisionRemarks, DecisionRequest, OutingRequestCreate, OutingRequestResponse, OutingStats
from .scope import ViewerScope
from . import service

router = APIRouter(prefix="/api/v1/outings", tags=["outings"])

APPROVER_ROLES = (UserRole.ADVISOR, UserRole.HOD, UserRole.WARDEN)
VIEWER_ROLES = (UserRole.STUDENT, UserRole.ADVISOR, UserRole.HOD, UserRole.WARDEN, UserRole.PRINCIPAL)


@router.post(
    "",
    response_model=OutingRequestResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_outing_request(
    payload: OutingRequestCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> OutingRequestResponse:
    """Submit an outing request. Local outings go to the warden, hometown visits to the advisor first."""
    try:
        return await service.create_outing_request(db, current_user, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.get(
    "/pending",
    response_model=List[OutingRequestResponse],
)
async def list_pending_requests(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(*VIEWER_ROLES)),
) -> List[OutingRequestResponse]:
    """Pending requests at the current user's stage."""
    try:
        return await service.list_pending(db, ViewerScope.for_user(current_user))
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.get(
    "/stats",
    response_model=OutingStats,
)
async def outing_stats(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(*VIEWER_ROLES)),
) -> OutingStats:
    try:
        return await service.get_stats(db, ViewerScope.for_user(current_user))
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.get(
    "",
    response_model=List[OutingRequestResponse],
)
async def list_outing_history(
    final_status: Optional[RequestStatus] = None,
    outing_type: Optional[OutingType] = None,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(*VIEWER_ROLES)),
) -> List[OutingRequestResponse]:
    """All requests visible to the current user, newest first."""
    try:
        return await service.list_history(
            db,
            ViewerScope.for_user(current_user),
            final_status=final_status,
            outing_type=outing_type,
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.get(
    "/{request_id}",
    response_model=OutingRequestResponse,
)
async def get_outing_request(
    request_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(*VIEWER_ROLES)),
) -> OutingRequestResponse:
    try:
        return await service.get_outing_request(db, ViewerScope.for_user(current_user), request_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


async def _decide(
    db: AsyncSession,
    request_id: UUID,
    current_user: CurrentUser,
    decision: Decision,
    comment: Optional[str],
) -> OutingRequestResponse:
    # Hide requests outside the approver's scope before touching them
    scope = ViewerScope.for_user(current_user)
    try:
        await service.get_outing_request(db, scope, request_id)
        return await service.apply_decision(
            db,
            request_id,
            current_user.role,
            current_user.id,
            decision,
            comment,
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.post(
    "/{request_id}/approve",
    response_model=OutingRequestResponse,
)
async def approve_outing_request(
    request_id: UUID,
    payload: DecisionRemarks,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(*APPROVER_ROLES)),
) -> OutingRequestResponse:
    """Approve at the current stage. Hometown visits move advisor -> hod -> warden; the warden's approval is final."""
    return await _decide(db, request_id, current_user, Decision.APPROVE, payload.comment)


@router.post(
    "/{request_id}/reject",
    response_model=OutingRequestResponse,
)
async def reject_outing_request(
    request_id: UUID,
    payload: DecisionRemarks,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(*APPROVER_ROLES)),
) -> OutingRequestResponse:
    """Reject at the current stage. The comment is stored as the rejection reason."""
    return await _decide(db, request_id, current_user, Decision.REJECT, payload.comment)


@router.post(
    "/{request_id}/decision",
    response_model=OutingRequestResponse,
)
async def decide_outing_request(
    request_id: UUID,
    payload: DecisionRequest,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(*APPROVER_ROLES)),
) -> OutingRequestResponse:
    return await _decide(db, request_id, current_user, payload.decision, payload.comment)
