from fastapi import APIRouter, Depends, Query, status
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from smarthr.api.dependencies import get_current_user, require_admin_or_manager
from smarthr.core.config import settings
from smarthr.core.database import get_async_session
from smarthr.models.hr.employee import Employee
from smarthr.schemas.common.message import MessageResponse
from smarthr.schemas.common.pagination import PaginatedResponse
from smarthr.schemas.organization.sub_company_schema import (
    SubCompanyCreate, SubCompanyUpdate, SubCompanyResponse
)
from smarthr.services.organization.sub_company_service import SubCompanyService

router = APIRouter()

@router.post("/", response_model=SubCompanyResponse, status_code=status.HTTP_201_CREATED)
async def create_sub_company(
    sub_company: SubCompanyCreate,
    session: AsyncSession = Depends(get_async_session),
    current_user: Employee = Depends(require_admin_or_manager)
):
    """Create a new sub-company under a company"""
    service = SubCompanyService(session)
    return await service.create_sub_company(sub_company, current_user.id)

@router.get("/", response_model=PaginatedResponse[SubCompanyResponse])
async def get_sub_companies(
    page_index: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=settings.MAX_PAGE_SIZE),
    company_id: Optional[int] = Query(None),
    search: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None),
    session: AsyncSession = Depends(get_async_session),
    current_user: Employee = Depends(get_current_user)
):
    service = SubCompanyService(session)
    return await service.get_sub_companies(page_index, page_size, company_id, search, is_active)

@router.get("/{sub_company_id}", response_model=SubCompanyResponse)
async def get_sub_company(
    sub_company_id: int,
    session: AsyncSession = Depends(get_async_session),
    current_user: Employee = Depends(get_current_user)
):
    service = SubCompanyService(session)
    return await service.get_sub_company(sub_company_id)

@router.put("/{sub_company_id}", response_model=SubCompanyResponse)
async def update_sub_company(
    sub_company_id: int,
    sub_company: SubCompanyUpdate,
    session: AsyncSession = Depends(get_async_session),
    current_user: Employee = Depends(require_admin_or_manager)
):
    service = SubCompanyService(session)
    return await service.update_sub_company(sub_company_id, sub_company, current_user.id)

@router.delete("/{sub_company_id}", response_model=MessageResponse)
async def delete_sub_company(
    sub_company_id: int,
    session: AsyncSession = Depends(get_async_session),
    current_user: Employee = Depends(require_admin_or_manager)
):
    service = SubCompanyService(session)
    await service.delete_sub_company(sub_company_id, current_user.id)
    return MessageResponse(message="Sub-company deleted successfully")
