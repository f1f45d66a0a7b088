from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.outings import service as outing_service
from app.api.v1.outings.scope import ViewerScope
from app.api.v1.outings.workflow import ROLE_STAGE
from app.auth.rbac import require_roles
from app.auth.schemas import CurrentUser
from app.core.enums import ApprovalStage, UserRole
from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import ApprovalHistoryResponse
from . import service

router = APIRouter(prefix="/api/v1/approval-history", tags=["approval-history"])


@router.get(
    "/requests/{request_id}",
    response_model=List[ApprovalHistoryResponse],
)
async def request_history(
    request_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(
        require_roles(UserRole.STUDENT, UserRole.ADVISOR, UserRole.HOD, UserRole.WARDEN, UserRole.PRINCIPAL)
    ),
) -> List[ApprovalHistoryResponse]:
    """Decision trail of one request the current user can see."""
    try:
        await outing_service.get_outing_request(db, ViewerScope.for_user(current_user), request_id)
        return await service.list_for_request(db, request_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.get(
    "",
    response_model=List[ApprovalHistoryResponse],
)
async def stage_history(
    stage: Optional[ApprovalStage] = Query(None, description="Defaults to the caller's own stage"),
    since: Optional[datetime] = None,
    until: Optional[datetime] = None,
    mine: bool = Query(False, description="Only decisions taken by the current user"),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(
        require_roles(UserRole.ADVISOR, UserRole.HOD, UserRole.WARDEN, UserRole.PRINCIPAL)
    ),
) -> List[ApprovalHistoryResponse]:
    """Decisions at one stage within an optional time window ("my approval history" with mine=true)."""
    if stage is None:
        stage = ROLE_STAGE.get(current_user.role)
    if stage is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="stage is required for this role")
    try:
        return await service.list_by_stage(
            db,
            stage,
            since=since,
            until=until,
            approver_id=current_user.id if mine else None,
            scope=ViewerScope.for_user(current_user),
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
