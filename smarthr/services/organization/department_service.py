import logging
from typing import Any, Dict, Optional
from datetime import datetime, timezone
from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_
from smarthr.core.exceptions import ConflictError, InvalidStateError, NotFoundError, ValidationError
from smarthr.models.organization.sub_company import SubCompany
from smarthr.models.organization.department import Department
from smarthr.models.organization.position import Position
from smarthr.models.hr.employee import Employee
from smarthr.schemas.organization.department_schema import (
    DepartmentCreate, DepartmentUpdate, DepartmentResponse
)

logger = logging.getLogger(__name__)


class DepartmentService:
    def __init__(self, session: AsyncSession):
        self.session = session

    # ---------- Getters ----------
    async def _get_department(self, department_id: int) -> Department:
        result = await self.session.execute(
            select(Department).where(
                Department.id == department_id,
                Department.is_deleted == False
            )
        )
        department = result.scalar_one_or_none()
        if not department:
            raise NotFoundError("Department not found")
        return department

    async def get_department(self, department_id: int) -> DepartmentResponse:
        return DepartmentResponse.model_validate(await self._get_department(department_id))

    async def _check_parent_department(self, parent_id: Optional[int], sub_company_id: int, department_id: Optional[int] = None):
        if parent_id is None:
            return
        if department_id is not None and parent_id == department_id:
            raise ValidationError("A department cannot be its own parent")
        parent = await self.session.scalar(
            select(Department).where(
                Department.id == parent_id,
                Department.is_active == True,
                Department.is_deleted == False
            )
        )
        if not parent:
            raise NotFoundError("Parent department not found or inactive")
        if parent.sub_company_id != sub_company_id:
            raise ValidationError("Parent department must belong to the same sub-company")

    # ---------- Create / Update / Delete ----------
    async def create_department(self, data: DepartmentCreate, created_by: Optional[int] = None) -> DepartmentResponse:
        try:
            sub_company = await self.session.scalar(
                select(SubCompany).where(
                    SubCompany.id == data.sub_company_id,
                    SubCompany.is_active == True,
                    SubCompany.is_deleted == False
                )
            )
            if not sub_company:
                raise NotFoundError("Sub-company not found or inactive")

            exists = await self.session.scalar(
                select(Department.id).where(
                    Department.sub_company_id == data.sub_company_id,
                    Department.dept_code == data.dept_code
                ).limit(1)
            )
            if exists is not None:
                raise ConflictError(f"Department code '{data.dept_code}' already exists in this sub-company")

            await self._check_parent_department(data.parent_department_id, data.sub_company_id)

            dept = Department(**data.model_dump(), is_active=True, created_by=created_by)
            self.session.add(dept)
            await self.session.commit()
            await self.session.refresh(dept)
            logger.info(f"Department created: {dept.dept_code} (sub-company {data.sub_company_id})")
            return DepartmentResponse.model_validate(dept)

        except HTTPException:
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error creating department: {e}")
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Error creating department: {e}")

    async def _ensure_no_active_dependents(self, department_id: int, action: str):
        children = await self.session.scalar(
            select(func.count(Department.id)).where(
                Department.parent_department_id == department_id,
                Department.is_active == True,
                Department.is_deleted == False
            )
        )
        if children:
            raise InvalidStateError(f"Cannot {action} department. It has active child departments")

        positions = await self.session.scalar(
            select(func.count(Position.id)).where(
                Position.department_id == department_id,
                Position.is_active == True,
                Position.is_deleted == False
            )
        )
        if positions:
            raise InvalidStateError(f"Cannot {action} department. It has active positions")

        employees = await self.session.scalar(
            select(func.count(Employee.id)).where(
                Employee.department_id == department_id,
                Employee.is_active == True
            )
        )
        if employees:
            raise InvalidStateError(f"Cannot {action} department. It has active employees")

    async def update_department(
        self, department_id: int, data: DepartmentUpdate, updated_by: Optional[int] = None
    ) -> DepartmentResponse:
        try:
            dept = await self._get_department(department_id)
            changes = data.model_dump(exclude_unset=True)

            if changes.get("parent_department_id") is not None:
                await self._check_parent_department(
                    changes["parent_department_id"], dept.sub_company_id, department_id
                )
            if changes.get("is_active") is False and dept.is_active:
                await self._ensure_no_active_dependents(department_id, "deactivate")

            for field, value in changes.items():
                setattr(dept, field, value)

            dept.updated_by = updated_by
            dept.updated_at = datetime.now(timezone.utc)
            await self.session.commit()
            await self.session.refresh(dept)
            logger.info(f"Department updated: {dept.dept_code}")
            return DepartmentResponse.model_validate(dept)

        except HTTPException:
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error updating department {department_id}: {e}")
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Error updating department: {e}")

    async def delete_department(self, department_id: int, deleted_by: Optional[int] = None) -> bool:
        try:
            dept = await self._get_department(department_id)
            await self._ensure_no_active_dependents(department_id, "delete")

            dept.is_active = False
            dept.is_deleted = True
            dept.updated_by = deleted_by
            dept.updated_at = datetime.now(timezone.utc)
            await self.session.commit()
            logger.info(f"Department deleted (soft): {dept.dept_code}")
            return True

        except HTTPException:
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error deleting department {department_id}: {e}")
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Error deleting department: {e}")

    # ---------- Listing ----------
    async def get_departments(
        self,
        page_index: int = 1,
        page_size: int = 100,
        sub_company_id: Optional[int] = None,
        search: Optional[str] = None,
        is_active: Optional[bool] = None
    ) -> Dict[str, Any]:
        """Get departments with pagination"""
        query = select(Department).where(Department.is_deleted == False)
        if sub_company_id is not None:
            query = query.where(Department.sub_company_id == sub_company_id)
        if is_active is not None:
            query = query.where(Department.is_active == is_active)
        if search:
            like = f"%{search}%"
            query = query.where(
                or_(
                    Department.dept_code.ilike(like),
                    Department.dept_name.ilike(like),
                    Department.description.ilike(like)
                )
            )

        total = await self.session.scalar(select(func.count()).select_from(query.subquery()))

        skip = (page_index - 1) * page_size
        result = await self.session.execute(
            query.order_by(Department.sub_company_id, Department.dept_code).offset(skip).limit(page_size)
        )

        return {
            "page_index": page_index,
            "page_size": page_size,
            "count": total or 0,
            "data": [DepartmentResponse.model_validate(d) for d in result.scalars().all()]
        }
