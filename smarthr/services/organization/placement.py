from dataclasses import dataclass
from typing import Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from smarthr.core.exceptions import NotFoundError, ValidationError
from smarthr.models.organization.company import Company
from smarthr.models.organization.sub_company import SubCompany
from smarthr.models.organization.department import Department
from smarthr.models.organization.position import Position


@dataclass
class Placement:
    company: Company
    sub_company: SubCompany
    department: Department
    position: Position

    @property
    def ids(self):
        return (self.company.id, self.sub_company.id, self.department.id, self.position.id)


async def _get_active(session: AsyncSession, model, entity_id: Optional[int]):
    if entity_id is None:
        return None
    result = await session.execute(
        select(model).where(
            model.id == entity_id,
            model.is_active == True,
            model.is_deleted == False
        )
    )
    return result.scalar_one_or_none()


async def validate_placement(
    session: AsyncSession,
    company_id: int,
    sub_company_id: int,
    department_id: int,
    position_id: int
) -> Placement:
    """Check that every level exists, is active, and belongs to the level above it"""
    company = await _get_active(session, Company, company_id)
    if not company:
        raise NotFoundError(f"Company {company_id} not found or inactive")

    sub_company = await _get_active(session, SubCompany, sub_company_id)
    if not sub_company:
        raise NotFoundError(f"Sub-company {sub_company_id} not found or inactive")
    if sub_company.company_id != company.id:
        raise ValidationError("Sub-company does not belong to the selected company")

    department = await _get_active(session, Department, department_id)
    if not department:
        raise NotFoundError(f"Department {department_id} not found or inactive")
    if department.sub_company_id != sub_company.id:
        raise ValidationError("Department does not belong to the selected sub-company")

    position = await _get_active(session, Position, position_id)
    if not position:
        raise NotFoundError(f"Position {position_id} not found or inactive")
    if position.department_id != department.id:
        raise ValidationError("Position does not belong to the selected department")

    return Placement(company, sub_company, department, position)
