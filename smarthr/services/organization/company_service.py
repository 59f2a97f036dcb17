import logging
from typing import Any, Dict, Optional
from datetime import datetime, timezone
from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_
from smarthr.core.exceptions import ConflictError, InvalidStateError, NotFoundError
from smarthr.models.organization.company import Company
from smarthr.models.organization.sub_company import SubCompany
from smarthr.models.hr.employee import Employee
from smarthr.schemas.organization.company_schema import CompanyCreate, CompanyUpdate, CompanyResponse

logger = logging.getLogger(__name__)


class CompanyService:
    def __init__(self, session: AsyncSession):
        self.session = session

    # ---------- Getters ----------
    async def _get_company(self, company_id: int) -> Company:
        result = await self.session.execute(
            select(Company).where(
                Company.id == company_id,
                Company.is_deleted == False
            )
        )
        company = result.scalar_one_or_none()
        if not company:
            raise NotFoundError("Company not found")
        return company

    async def get_company(self, company_id: int) -> CompanyResponse:
        company = await self._get_company(company_id)
        return CompanyResponse.model_validate(company)

    # ---------- Create / Update / Delete ----------
    async def create_company(self, data: CompanyCreate, created_by: Optional[int] = None) -> CompanyResponse:
        try:
            exists = await self.session.execute(
                select(Company.id).where(Company.company_code == data.company_code).limit(1)
            )
            if exists.scalar_one_or_none() is not None:
                raise ConflictError(f"Company code '{data.company_code}' already exists")

            company = Company(
                **data.model_dump(),
                is_active=True,
                created_by=created_by
            )
            self.session.add(company)
            await self.session.commit()
            await self.session.refresh(company)
            logger.info(f"Company created: {company.company_code} by user {created_by}")
            return CompanyResponse.model_validate(company)

        except HTTPException:
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error creating company: {e}")
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Error creating company: {e}")

    async def _ensure_no_active_dependents(self, company_id: int, action: str):
        children = await self.session.scalar(
            select(func.count(SubCompany.id)).where(
                SubCompany.company_id == company_id,
                SubCompany.is_active == True,
                SubCompany.is_deleted == False
            )
        )
        if children:
            raise InvalidStateError(f"Cannot {action} company. It has active sub-companies")

        employees = await self.session.scalar(
            select(func.count(Employee.id)).where(
                Employee.company_id == company_id,
                Employee.is_active == True
            )
        )
        if employees:
            raise InvalidStateError(f"Cannot {action} company. It has active employees")

    async def update_company(self, company_id: int, data: CompanyUpdate, updated_by: Optional[int] = None) -> CompanyResponse:
        try:
            company = await self._get_company(company_id)
            changes = data.model_dump(exclude_unset=True)
            if changes.get("is_active") is False and company.is_active:
                await self._ensure_no_active_dependents(company_id, "deactivate")

            for field, value in changes.items():
                setattr(company, field, value)

            company.updated_by = updated_by
            company.updated_at = datetime.now(timezone.utc)
            await self.session.commit()
            await self.session.refresh(company)
            logger.info(f"Company updated: {company.company_code}")
            return CompanyResponse.model_validate(company)

        except HTTPException:
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error updating company {company_id}: {e}")
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Error updating company: {e}")

    async def delete_company(self, company_id: int, deleted_by: Optional[int] = None) -> bool:
        try:
            company = await self._get_company(company_id)
            await self._ensure_no_active_dependents(company_id, "delete")

            company.is_active = False
            company.is_deleted = True
            company.updated_by = deleted_by
            company.updated_at = datetime.now(timezone.utc)
            await self.session.commit()
            logger.info(f"Company deleted (soft): {company.company_code}")
            return True

        except HTTPException:
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error deleting company {company_id}: {e}")
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Error deleting company: {e}")

    # ---------- Listing ----------
    async def get_companies(
        self,
        page_index: int = 1,
        page_size: int = 100,
        search: Optional[str] = None,
        is_active: Optional[bool] = None
    ) -> Dict[str, Any]:
        """Get companies with pagination"""
        query = select(Company).where(Company.is_deleted == False)
        if is_active is not None:
            query = query.where(Company.is_active == is_active)
        if search:
            like = f"%{search}%"
            query = query.where(
                or_(
                    Company.company_code.ilike(like),
                    Company.company_name.ilike(like),
                    Company.company_name_eng.ilike(like)
                )
            )

        total = await self.session.scalar(select(func.count()).select_from(query.subquery()))

        skip = (page_index - 1) * page_size
        result = await self.session.execute(
            query.order_by(Company.company_code).offset(skip).limit(page_size)
        )
        companies = result.scalars().all()

        return {
            "page_index": page_index,
            "page_size": page_size,
            "count": total or 0,
            "data": [CompanyResponse.model_validate(c) for c in companies]
        }
