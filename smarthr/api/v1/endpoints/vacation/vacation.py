from datetime import date
from fastapi import APIRouter, Depends, Query, Request, status
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from smarthr.api.dependencies import get_current_user, require_admin_or_manager
from smarthr.core.config import settings
from smarthr.core.database import get_async_session
from smarthr.core.request_context import get_request_context
from smarthr.models.hr.employee import Employee
from smarthr.models.shared.enums import DocumentStatus
from smarthr.schemas.common.pagination import PaginatedResponse
from smarthr.schemas.vacation.vacation_schema import (
    AnnualLeaveBalance, TeamVacationStatus, VacationRequestCreate, VacationRequestResponse
)
from smarthr.services.vacation.vacation_service import VacationService

router = APIRouter()

@router.post("/request", response_model=VacationRequestResponse, status_code=status.HTTP_201_CREATED)
async def request_vacation(
    vacation: VacationRequestCreate,
    request: Request,
    session: AsyncSession = Depends(get_async_session),
    current_user: Employee = Depends(get_current_user)
):
    """Submit a vacation request for approval"""
    ctx = get_request_context(request)
    service = VacationService(session)
    return await service.request_vacation(
        vacation, current_user, ip_address=ctx["ip_address"], user_agent=ctx["user_agent"]
    )

@router.get("/my-requests", response_model=PaginatedResponse[VacationRequestResponse])
async def get_my_requests(
    status: Optional[DocumentStatus] = Query(None),
    year: Optional[int] = Query(None, ge=2000, le=2100),
    page_index: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=settings.MAX_PAGE_SIZE),
    session: AsyncSession = Depends(get_async_session),
    current_user: Employee = Depends(get_current_user)
):
    service = VacationService(session)
    return await service.get_my_requests(current_user.id, status, year, page_index, page_size)

@router.get("/balance", response_model=AnnualLeaveBalance)
async def get_annual_leave_balance(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    session: AsyncSession = Depends(get_async_session),
    current_user: Employee = Depends(get_current_user)
):
    """Annual leave entitlement, used and remaining days"""
    service = VacationService(session)
    return await service.get_annual_leave_balance(current_user.id, year or date.today().year)

@router.get("/team-status", response_model=TeamVacationStatus)
async def get_team_status(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    department_id: Optional[int] = Query(None),
    session: AsyncSession = Depends(get_async_session),
    current_user: Employee = Depends(require_admin_or_manager)
):
    """Vacation calendar for a department (managers see their own)"""
    service = VacationService(session)
    return await service.get_team_status(current_user, start_date, end_date, department_id)
