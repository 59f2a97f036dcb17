import logging
from typing import Any, Dict, Optional
from datetime import datetime, timezone
from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_
from smarthr.core.exceptions import ConflictError, InvalidStateError, NotFoundError
from smarthr.models.organization.company import Company
from smarthr.models.organization.sub_company import SubCompany
from smarthr.models.organization.department import Department
from smarthr.models.hr.employee import Employee
from smarthr.schemas.organization.sub_company_schema import (
    SubCompanyCreate, SubCompanyUpdate, SubCompanyResponse
)

logger = logging.getLogger(__name__)


class SubCompanyService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _get_sub_company(self, sub_company_id: int) -> SubCompany:
        result = await self.session.execute(
            select(SubCompany).where(
                SubCompany.id == sub_company_id,
                SubCompany.is_deleted == False
            )
        )
        sub_company = result.scalar_one_or_none()
        if not sub_company:
            raise NotFoundError("Sub-company not found")
        return sub_company

    async def get_sub_company(self, sub_company_id: int) -> SubCompanyResponse:
        return SubCompanyResponse.model_validate(await self._get_sub_company(sub_company_id))

    async def create_sub_company(self, data: SubCompanyCreate, created_by: Optional[int] = None) -> SubCompanyResponse:
        try:
            company = await self.session.scalar(
                select(Company).where(
                    Company.id == data.company_id,
                    Company.is_active == True,
                    Company.is_deleted == False
                )
            )
            if not company:
                raise NotFoundError("Company not found or inactive")

            exists = await self.session.scalar(
                select(SubCompany.id).where(
                    SubCompany.company_id == data.company_id,
                    SubCompany.sub_company_code == data.sub_company_code
                ).limit(1)
            )
            if exists is not None:
                raise ConflictError(f"Sub-company code '{data.sub_company_code}' already exists in this company")

            sub_company = SubCompany(**data.model_dump(), is_active=True, created_by=created_by)
            self.session.add(sub_company)
            await self.session.commit()
            await self.session.refresh(sub_company)
            logger.info(f"Sub-company created: {sub_company.sub_company_code} (company {data.company_id})")
            return SubCompanyResponse.model_validate(sub_company)

        except HTTPException:
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error creating sub-company: {e}")
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Error creating sub-company: {e}")

    async def _ensure_no_active_dependents(self, sub_company_id: int, action: str):
        children = await self.session.scalar(
            select(func.count(Department.id)).where(
                Department.sub_company_id == sub_company_id,
                Department.is_active == True,
                Department.is_deleted == False
            )
        )
        if children:
            raise InvalidStateError(f"Cannot {action} sub-company. It has active departments")

        employees = await self.session.scalar(
            select(func.count(Employee.id)).where(
                Employee.sub_company_id == sub_company_id,
                Employee.is_active == True
            )
        )
        if employees:
            raise InvalidStateError(f"Cannot {action} sub-company. It has active employees")

    async def update_sub_company(
        self, sub_company_id: int, data: SubCompanyUpdate, updated_by: Optional[int] = None
    ) -> SubCompanyResponse:
        try:
            sub_company = await self._get_sub_company(sub_company_id)
            changes = data.model_dump(exclude_unset=True)
            if changes.get("is_active") is False and sub_company.is_active:
                await self._ensure_no_active_dependents(sub_company_id, "deactivate")

            for field, value in changes.items():
                setattr(sub_company, field, value)

            sub_company.updated_by = updated_by
            sub_company.updated_at = datetime.now(timezone.utc)
            await self.session.commit()
            await self.session.refresh(sub_company)
            logger.info(f"Sub-company updated: {sub_company.sub_company_code}")
            return SubCompanyResponse.model_validate(sub_company)

        except HTTPException:
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error updating sub-company {sub_company_id}: {e}")
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Error updating sub-company: {e}")

    async def delete_sub_company(self, sub_company_id: int, deleted_by: Optional[int] = None) -> bool:
        try:
            sub_company = await self._get_sub_company(sub_company_id)
            await self._ensure_no_active_dependents(sub_company_id, "delete")

            sub_company.is_active = False
            sub_company.is_deleted = True
            sub_company.updated_by = deleted_by
            sub_company.updated_at = datetime.now(timezone.utc)
            await self.session.commit()
            logger.info(f"Sub-company deleted (soft): {sub_company.sub_company_code}")
            return True

        except HTTPException:
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error deleting sub-company {sub_company_id}: {e}")
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Error deleting sub-company: {e}")

    async def get_sub_companies(
        self,
        page_index: int = 1,
        page_size: int = 100,
        company_id: Optional[int] = None,
        search: Optional[str] = None,
        is_active: Optional[bool] = None
    ) -> Dict[str, Any]:
        query = select(SubCompany).where(SubCompany.is_deleted == False)
        if company_id is not None:
            query = query.where(SubCompany.company_id == company_id)
        if is_active is not None:
            query = query.where(SubCompany.is_active == is_active)
        if search:
            like = f"%{search}%"
            query = query.where(
                or_(
                    SubCompany.sub_company_code.ilike(like),
                    SubCompany.sub_company_name.ilike(like)
                )
            )

        total = await self.session.scalar(select(func.count()).select_from(query.subquery()))

        skip = (page_index - 1) * page_size
        result = await self.session.execute(
            query.order_by(SubCompany.company_id, SubCompany.sub_company_code).offset(skip).limit(page_size)
        )

        return {
            "page_index": page_index,
            "page_size": page_size,
            "count": total or 0,
            "data": [SubCompanyResponse.model_validate(s) for s in result.scalars().all()]
        }
