from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_user
from app.auth.rbac import require_admin
from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import DepartmentCreate, DepartmentDetail, DepartmentResponse
from . import service

router = APIRouter(prefix="/api/v1/departments", tags=["departments"])


@router.post(
    "",
    response_model=DepartmentResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_department(
    payload: DepartmentCreate,
    db: AsyncSession = Depends(get_db),
) -> DepartmentResponse:
    try:
        return await service.create_department(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "",
    response_model=List[DepartmentResponse],
    dependencies=[Depends(get_current_user)],
)
async def list_departments(
    db: AsyncSession = Depends(get_db),
) -> List[DepartmentResponse]:
    return await service.list_departments(db)


@router.get(
    "/{department_id}",
    response_model=DepartmentDetail,
    dependencies=[Depends(get_current_user)],
)
async def get_department(
    department_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> DepartmentDetail:
    """Department with student headcount and HOD."""
    try:
        return await service.get_department(db, department_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
