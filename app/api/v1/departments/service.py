import logging
from typing import List
from uuid import UUID

from fastapi import status
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.models import Profile
from app.core.enums import UserRole
from app.core.exceptions import ServiceError
from app.core.models import Department

from .schemas import DepartmentCreate, DepartmentDetail, DepartmentResponse

logger = logging.getLogger(__name__)


async def create_department(
    db: AsyncSession,
    payload: DepartmentCreate,
) -> DepartmentResponse:
    code = payload.code.strip().upper()
    name = payload.name.strip()
    try:
        dept = Department(code=code, name=name)
        db.add(dept)
        await db.commit()
        await db.refresh(dept)
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Department code or name already exists", status.HTTP_409_CONFLICT)
    logger.info("Department %s (%s) created", dept.code, dept.id)
    return DepartmentResponse.model_validate(dept)


async def list_departments(db: AsyncSession) -> List[DepartmentResponse]:
    result = await db.execute(select(Department).order_by(Department.name))
    return [DepartmentResponse.model_validate(d) for d in result.scalars().all()]


async def get_department(db: AsyncSession, department_id: UUID) -> DepartmentDetail:
    """Department with its student headcount and current HOD (first approved one, if several)."""
    dept = await db.get(Department, department_id)
    if not dept:
        raise ServiceError("Department not found", status.HTTP_404_NOT_FOUND)

    student_count = (
        await db.execute(
            select(func.count(Profile.id)).where(
                Profile.department_id == department_id,
                Profile.role == UserRole.STUDENT.value,
            )
        )
    ).scalar_one()
    hod_name = (
        await db.execute(
            select(Profile.full_name)
            .where(
                Profile.department_id == department_id,
                Profile.role == UserRole.HOD.value,
                Profile.is_approved.is_(True),
            )
            .order_by(Profile.created_at)
            .limit(1)
        )
    ).scalar_one_or_none()

    detail = DepartmentDetail.model_validate(dept)
    detail.student_count = student_count
    detail.hod_name = hod_name
    return detail
