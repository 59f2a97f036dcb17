from fastapi import APIRouter, Depends
from typing import List
from sqlalchemy.ext.asyncio import AsyncSession
from smarthr.api.dependencies import get_current_user
from smarthr.core.database import get_async_session
from smarthr.models.hr.employee import Employee
from smarthr.schemas.organization.organization_tree_schema import CompanyNode
from smarthr.services.organization.organization_tree_service import OrganizationTreeService

router = APIRouter()

@router.get("/tree", response_model=List[CompanyNode])
async def get_organization_tree(
    session: AsyncSession = Depends(get_async_session),
    current_user: Employee = Depends(get_current_user)
):
    """Active organization as a nested tree"""
    service = OrganizationTreeService(session)
    return await service.get_tree()
