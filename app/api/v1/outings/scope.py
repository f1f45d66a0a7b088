"""
Viewer scope: the single place that decides which outing requests a role may see.

admin, principal, warden: everything
hod: students of the HOD's department (none when the HOD has no department)
advisor: students of the advisor's department, or everything when unassigned
student: own requests
"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel
from sqlalchemy import false, select
from sqlalchemy.sql import Select

from app.auth.models import Profile
from app.auth.schemas import CurrentUser
from app.core.enums import RequestStatus, UserRole
from app.core.models import OutingRequest

from .workflow import ROLE_STAGE

UNRESTRICTED_ROLES = (UserRole.ADMIN, UserRole.PRINCIPAL, UserRole.WARDEN)


class ViewerScope(BaseModel):
    role: UserRole
    user_id: UUID
    department_id: Optional[UUID] = None

    @classmethod
    def for_user(cls, current_user: CurrentUser) -> "ViewerScope":
        return cls(
            role=current_user.role,
            user_id=current_user.id,
            department_id=current_user.department_id,
        )


def apply_scope(stmt: Select, scope: ViewerScope) -> Select:
    """Restrict a statement over OutingRequest to the rows scope may see."""
    if scope.role in UNRESTRICTED_ROLES:
        return stmt
    if scope.role == UserRole.STUDENT:
        return stmt.where(OutingRequest.student_id == scope.user_id)
    if scope.role in (UserRole.HOD, UserRole.ADVISOR):
        if scope.department_id is None:
            return stmt.where(false()) if scope.role == UserRole.HOD else stmt
        department_students = select(Profile.user_id).where(Profile.department_id == scope.department_id)
        return stmt.where(OutingRequest.student_id.in_(department_students))
    return stmt.where(false())


def entitled_requests(scope: ViewerScope) -> Select:
    return apply_scope(select(OutingRequest), scope)


def pending_requests(scope: ViewerScope) -> Select:
    """Pending requests waiting on the viewer's stage. Admin, principal and students see all their pending rows."""
    stmt = entitled_requests(scope).where(OutingRequest.final_status == RequestStatus.PENDING.value)
    stage = ROLE_STAGE.get(scope.role)
    if stage is not None:
        stmt = stmt.where(OutingRequest.current_stage == stage.value)
    return stmt
