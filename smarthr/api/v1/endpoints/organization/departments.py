from fastapi import APIRouter, Depends, Query, status
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from smarthr.api.dependencies import get_current_user, require_admin_or_manager
from smarthr.core.config import settings
from smarthr.core.database import get_async_session
from smarthr.models.hr.employee import Employee
from smarthr.schemas.common.message import MessageResponse
from smarthr.schemas.common.pagination import PaginatedResponse
from smarthr.schemas.organization.department_schema import DepartmentCreate, DepartmentUpdate, DepartmentResponse
from smarthr.services.organization.department_service import DepartmentService

router = APIRouter()

@router.post("/", response_model=DepartmentResponse, status_code=status.HTTP_201_CREATED)
async def create_department(
    department: DepartmentCreate,
    session: AsyncSession = Depends(get_async_session),
    current_user: Employee = Depends(require_admin_or_manager)
):
    """Create a new department"""
    service = DepartmentService(session)
    return await service.create_department(department, current_user.id)

@router.get("/", response_model=PaginatedResponse[DepartmentResponse])
async def get_departments(
    page_index: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=settings.MAX_PAGE_SIZE),
    sub_company_id: Optional[int] = Query(None),
    search: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None),
    session: AsyncSession = Depends(get_async_session),
    current_user: Employee = Depends(get_current_user)
):
    """Get all departments with filtering"""
    service = DepartmentService(session)
    return await service.get_departments(page_index, page_size, sub_company_id, search, is_active)

@router.get("/{department_id}", response_model=DepartmentResponse)
async def get_department(
    department_id: int,
    session: AsyncSession = Depends(get_async_session),
    current_user: Employee = Depends(get_current_user)
):
    """Get department by ID"""
    service = DepartmentService(session)
    return await service.get_department(department_id)

@router.put("/{department_id}", response_model=DepartmentResponse)
async def update_department(
    department_id: int,
    department: DepartmentUpdate,
    session: AsyncSession = Depends(get_async_session),
    current_user: Employee = Depends(require_admin_or_manager)
):
    """Update department"""
    service = DepartmentService(session)
    return await service.update_department(department_id, department, current_user.id)

@router.delete("/{department_id}", response_model=MessageResponse)
async def delete_department(
    department_id: int,
    session: AsyncSession = Depends(get_async_session),
    current_user: Employee = Depends(require_admin_or_manager)
):
    """Delete department"""
    service = DepartmentService(session)
    await service.delete_department(department_id, current_user.id)
    return MessageResponse(message="Department deleted successfully")
