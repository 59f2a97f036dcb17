from fastapi import APIRouter, Depends
from typing import List
from sqlalchemy.ext.asyncio import AsyncSession
from smarthr.api.dependencies import get_current_user, require_admin_or_manager
from smarthr.core.database import get_async_session
from smarthr.models.hr.employee import Employee
from smarthr.schemas.hr.assignment_schema import AssignmentCreate, AssignmentResponse, AssignmentResult
from smarthr.services.hr.assignment_service import AssignmentService

router = APIRouter()

@router.post("/{employee_id}/transfer", response_model=AssignmentResult)
async def transfer_employee(
    employee_id: int,
    assignment: AssignmentCreate,
    session: AsyncSession = Depends(get_async_session),
    current_user: Employee = Depends(require_admin_or_manager)
):
    """Move an employee to a new company, sub-company, department or position"""
    assigned_by = current_user.id
    service = AssignmentService(session)
    return await service.assign_employee(employee_id, assignment, assigned_by)

@router.get("/{employee_id}/history", response_model=List[AssignmentResponse])
async def get_assignment_history(
    employee_id: int,
    session: AsyncSession = Depends(get_async_session),
    current_user: Employee = Depends(get_current_user)
):
    """Assignment history, newest first (self, admin or manager)"""
    service = AssignmentService(session)
    return await service.get_assignment_history(employee_id, current_user)
