from fastapi import APIRouter, Depends, Query, status
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from smarthr.api.dependencies import get_current_user, require_admin_or_manager
from smarthr.core.config import settings
from smarthr.core.database import get_async_session
from smarthr.models.hr.employee import Employee
from smarthr.schemas.common.message import MessageResponse
from smarthr.schemas.common.pagination import PaginatedResponse
from smarthr.schemas.organization.company_schema import CompanyCreate, CompanyUpdate, CompanyResponse
from smarthr.services.organization.company_service import CompanyService

router = APIRouter()

@router.post("/", response_model=CompanyResponse, status_code=status.HTTP_201_CREATED)
async def create_company(
    company: CompanyCreate,
    session: AsyncSession = Depends(get_async_session),
    current_user: Employee = Depends(require_admin_or_manager)
):
    """Create a new company"""
    service = CompanyService(session)
    return await service.create_company(company, current_user.id)

@router.get("/", response_model=PaginatedResponse[CompanyResponse])
async def get_companies(
    page_index: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=settings.MAX_PAGE_SIZE),
    search: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None),
    session: AsyncSession = Depends(get_async_session),
    current_user: Employee = Depends(get_current_user)
):
    """Get all companies with filtering"""
    service = CompanyService(session)
    return await service.get_companies(page_index, page_size, search, is_active)

@router.get("/{company_id}", response_model=CompanyResponse)
async def get_company(
    company_id: int,
    session: AsyncSession = Depends(get_async_session),
    current_user: Employee = Depends(get_current_user)
):
    """Get company by ID"""
    service = CompanyService(session)
    return await service.get_company(company_id)

@router.put("/{company_id}", response_model=CompanyResponse)
async def update_company(
    company_id: int,
    company: CompanyUpdate,
    session: AsyncSession = Depends(get_async_session),
    current_user: Employee = Depends(require_admin_or_manager)
):
    """Update company"""
    service = CompanyService(session)
    return await service.update_company(company_id, company, current_user.id)

@router.delete("/{company_id}", response_model=MessageResponse)
async def delete_company(
    company_id: int,
    session: AsyncSession = Depends(get_async_session),
    current_user: Employee = Depends(require_admin_or_manager)
):
    """Delete company (soft)"""
    service = CompanyService(session)
    await service.delete_company(company_id, current_user.id)
    return MessageResponse(message="Company deleted successfully")
