"""Read side of the approval audit trail. Entries are written only by the outing workflow."""

import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.outings.scope import ViewerScope, apply_scope
from app.core.enums import ApprovalStage
from app.core.exceptions import BackendUnavailable
from app.core.models import ApprovalHistory, OutingRequest
from app.db.session import BACKEND_ERRORS

from .schemas import ApprovalHistoryResponse

logger = logging.getLogger(__name__)


async def _fetch(db: AsyncSession, stmt) -> List[ApprovalHistoryResponse]:
    try:
        result = await db.execute(stmt)
    except BACKEND_ERRORS as e:
        logger.exception("Database unavailable while reading approval history")
        raise BackendUnavailable() from e
    return [ApprovalHistoryResponse.model_validate(h) for h in result.scalars().all()]


async def list_for_request(db: AsyncSession, request_id: UUID) -> List[ApprovalHistoryResponse]:
    """Every decision taken on a request, oldest first."""
    stmt = (
        select(ApprovalHistory)
        .where(ApprovalHistory.request_id == request_id)
        .order_by(ApprovalHistory.created_at.asc())
    )
    return await _fetch(db, stmt)


async def list_by_stage(
    db: AsyncSession,
    stage: ApprovalStage,
    since: Optional[datetime] = None,
    until: Optional[datetime] = None,
    approver_id: Optional[UUID] = None,
    scope: Optional[ViewerScope] = None,
) -> List[ApprovalHistoryResponse]:
    """
    Decisions taken at stage, newest first. since is inclusive, until exclusive.
    With scope, only decisions on requests the viewer may see are returned.
    """
    stmt = select(ApprovalHistory).where(ApprovalHistory.stage == ApprovalStage(stage).value)
    if scope is not None:
        stmt = apply_scope(stmt.join(OutingRequest, ApprovalHistory.request_id == OutingRequest.id), scope)
    if since is not None:
        stmt = stmt.where(ApprovalHistory.created_at >= since)
    if until is not None:
        stmt = stmt.where(ApprovalHistory.created_at < until)
    if approver_id is not None:
        stmt = stmt.where(ApprovalHistory.approver_id == approver_id)
    stmt = stmt.order_by(ApprovalHistory.created_at.desc())
    return await _fetch(db, stmt)
