from fastapi import APIRouter, Depends, Query, status
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from smarthr.api.dependencies import get_current_user, require_admin_or_manager
from smarthr.core.config import settings
from smarthr.core.database import get_async_session
from smarthr.models.hr.employee import Employee
from smarthr.schemas.common.message import MessageResponse
from smarthr.schemas.common.pagination import PaginatedResponse
from smarthr.schemas.organization.position_schema import PositionCreate, PositionUpdate, PositionResponse
from smarthr.services.organization.position_service import PositionService

router = APIRouter()

@router.post("/", response_model=PositionResponse, status_code=status.HTTP_201_CREATED)
async def create_position(
    position: PositionCreate,
    session: AsyncSession = Depends(get_async_session),
    current_user: Employee = Depends(require_admin_or_manager)
):
    """Create a new position within a department"""
    service = PositionService(session)
    return await service.create_position(position, current_user.id)

@router.get("/", response_model=PaginatedResponse[PositionResponse])
async def get_positions(
    page_index: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=settings.MAX_PAGE_SIZE),
    department_id: Optional[int] = Query(None),
    search: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None),
    session: AsyncSession = Depends(get_async_session),
    current_user: Employee = Depends(get_current_user)
):
    service = PositionService(session)
    return await service.get_positions(page_index, page_size, department_id, search, is_active)

@router.get("/{position_id}", response_model=PositionResponse)
async def get_position(
    position_id: int,
    session: AsyncSession = Depends(get_async_session),
    current_user: Employee = Depends(get_current_user)
):
    service = PositionService(session)
    return await service.get_position(position_id)

@router.put("/{position_id}", response_model=PositionResponse)
async def update_position(
    position_id: int,
    position: PositionUpdate,
    session: AsyncSession = Depends(get_async_session),
    current_user: Employee = Depends(require_admin_or_manager)
):
    service = PositionService(session)
    return await service.update_position(position_id, position, current_user.id)

@router.delete("/{position_id}", response_model=MessageResponse)
async def delete_position(
    position_id: int,
    session: AsyncSession = Depends(get_async_session),
    current_user: Employee = Depends(require_admin_or_manager)
):
    service = PositionService(session)
    await service.delete_position(position_id, current_user.id)
    return MessageResponse(message="Position deleted successfully")
