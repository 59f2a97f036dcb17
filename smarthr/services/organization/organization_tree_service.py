import logging
from typing import List
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from smarthr.models.organization.company import Company
from smarthr.models.organization.sub_company import SubCompany
from smarthr.models.organization.department import Department
from smarthr.schemas.organization.organization_tree_schema import (
    CompanyNode, SubCompanyNode, DepartmentNode, PositionNode
)

logger = logging.getLogger(__name__)


def _active(items):
    return [i for i in items if i.is_active and not i.is_deleted]


class OrganizationTreeService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_tree(self) -> List[CompanyNode]:
        """Nested active company -> sub-company -> department -> position tree"""
        result = await self.session.execute(
            select(Company)
            .options(
                selectinload(Company.sub_companies)
                .selectinload(SubCompany.departments)
                .selectinload(Department.positions)
            )
            .where(Company.is_active == True, Company.is_deleted == False)
            .order_by(Company.company_code)
        )
        companies = result.scalars().all()

        return [
            CompanyNode(
                id=company.id,
                company_code=company.company_code,
                company_name=company.company_name,
                sub_companies=[
                    SubCompanyNode(
                        id=sub.id,
                        sub_company_code=sub.sub_company_code,
                        sub_company_name=sub.sub_company_name,
                        departments=[
                            DepartmentNode(
                                id=dept.id,
                                dept_code=dept.dept_code,
                                dept_name=dept.dept_name,
                                positions=[
                                    PositionNode(
                                        id=pos.id,
                                        pos_code=pos.pos_code,
                                        pos_name=pos.pos_name,
                                        pos_grade=pos.pos_grade,
                                    )
                                    for pos in sorted(_active(dept.positions), key=lambda p: (p.pos_grade or 0, p.pos_code))
                                ],
                            )
                            for dept in sorted(_active(sub.departments), key=lambda d: d.dept_code)
                        ],
                    )
                    for sub in sorted(_active(company.sub_companies), key=lambda s: s.sub_company_code)
                ],
            )
            for company in companies
        ]
