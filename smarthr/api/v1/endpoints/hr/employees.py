from fastapi import APIRouter, Depends, Query, status
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from smarthr.api.dependencies import get_current_user, require_admin, require_admin_or_manager
from smarthr.core.config import settings
from smarthr.core.database import get_async_session
from smarthr.models.hr.employee import Employee
from smarthr.models.shared.enums import UserRole
from smarthr.schemas.common.message import MessageResponse
from smarthr.schemas.common.pagination import PaginatedResponse
from smarthr.schemas.hr.employee_schema import (
    EmployeeCreate, EmployeeUpdate, EmployeeResponse, EmployeeDetailResponse
)
from smarthr.services.hr.employee_service import EmployeeService

router = APIRouter()

@router.post("/", response_model=EmployeeResponse, status_code=status.HTTP_201_CREATED)
async def create_employee(
    employee: EmployeeCreate,
    session: AsyncSession = Depends(get_async_session),
    current_user: Employee = Depends(require_admin_or_manager)
):
    """Create a new employee (admin or manager)"""
    service = EmployeeService(session)
    return await service.create_employee(employee, current_user.id)

@router.get("/", response_model=PaginatedResponse[EmployeeDetailResponse])
async def get_employees(
    page_index: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=settings.MAX_PAGE_SIZE),
    search: Optional[str] = Query(None, description="Name, code or email"),
    company_id: Optional[int] = Query(None),
    sub_company_id: Optional[int] = Query(None),
    department_id: Optional[int] = Query(None),
    position_id: Optional[int] = Query(None),
    user_role: Optional[UserRole] = Query(None),
    is_active: Optional[bool] = Query(None),
    session: AsyncSession = Depends(get_async_session),
    current_user: Employee = Depends(get_current_user)
):
    """Get employees with filtering"""
    service = EmployeeService(session)
    return await service.get_employees(
        page_index=page_index,
        page_size=page_size,
        search=search,
        company_id=company_id,
        sub_company_id=sub_company_id,
        department_id=department_id,
        position_id=position_id,
        user_role=user_role,
        is_active=is_active
    )

@router.get("/{employee_id}", response_model=EmployeeDetailResponse)
async def get_employee(
    employee_id: int,
    session: AsyncSession = Depends(get_async_session),
    current_user: Employee = Depends(get_current_user)
):
    """Get employee by ID (self, admin or manager)"""
    service = EmployeeService(session)
    return await service.get_employee(employee_id, current_user)

@router.put("/{employee_id}", response_model=EmployeeDetailResponse)
async def update_employee(
    employee_id: int,
    employee: EmployeeUpdate,
    session: AsyncSession = Depends(get_async_session),
    current_user: Employee = Depends(get_current_user)
):
    """Update employee profile; role changes are admin only"""
    service = EmployeeService(session)
    return await service.update_employee(employee_id, employee, current_user)

@router.delete("/{employee_id}", response_model=MessageResponse)
async def delete_employee(
    employee_id: int,
    session: AsyncSession = Depends(get_async_session),
    current_user: Employee = Depends(require_admin)
):
    """Deactivate an employee (admin only)"""
    service = EmployeeService(session)
    await service.delete_employee(employee_id, current_user)
    return MessageResponse(message="Employee deleted successfully")
