import logging
from typing import Any, Dict, Optional
from datetime import datetime, timezone
from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_
from sqlalchemy.orm import selectinload

from smarthr.auth.permissions import PermissionChecker
from smarthr.core.exceptions import (
    ConflictError, InvalidStateError, NotFoundError, UnauthorizedError, ValidationError
)
from smarthr.core.security import get_password_hash, validate_password_strength
from smarthr.models.hr.employee import Employee
from smarthr.models.shared.enums import UserRole
from smarthr.schemas.hr.employee_schema import (
    EmployeeCreate, EmployeeUpdate, EmployeeResponse, EmployeeDetailResponse
)
from smarthr.services.organization.placement import validate_placement

logger = logging.getLogger(__name__)


def to_employee_detail(employee: Employee) -> EmployeeDetailResponse:
    detail = EmployeeDetailResponse.model_validate(employee)
    detail.company_name = employee.company.company_name if employee.company else None
    detail.sub_company_name = employee.sub_company.sub_company_name if employee.sub_company else None
    detail.department_name = employee.department.dept_name if employee.department else None
    detail.position_name = employee.position.pos_name if employee.position else None
    return detail


class EmployeeService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _generate_employee_code(self) -> str:
        prefix = "EMP"
        timestamp = datetime.now(timezone.utc).strftime("%y%m")
        result = await self.session.execute(
            select(Employee.employee_code).where(Employee.employee_code.like(f"{prefix}{timestamp}%"))
        )
        head = len(prefix) + len(timestamp)
        sequences = [int(code[head:]) for code in result.scalars().all() if code[head:].isdigit()]
        return f"{prefix}{timestamp}{max(sequences, default=0) + 1:04d}"

    async def _load_employee(self, employee_id: int) -> Optional[Employee]:
        result = await self.session.execute(
            select(Employee)
            .options(
                selectinload(Employee.company),
                selectinload(Employee.sub_company),
                selectinload(Employee.department),
                selectinload(Employee.position),
            )
            .where(Employee.id == employee_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _ensure_email_available(self, email: str, exclude_id: Optional[int] = None):
        query = select(Employee.id).where(func.lower(Employee.email) == email.lower())
        if exclude_id is not None:
            query = query.where(Employee.id != exclude_id)
        if await self.session.scalar(query.limit(1)) is not None:
            raise ConflictError(f"Email '{email}' is already registered")

    # ---------- Create / Update / Delete ----------
    async def create_employee(self, data: EmployeeCreate, current_user_id: int) -> EmployeeResponse:
        try:
            await validate_placement(
                self.session, data.company_id, data.sub_company_id, data.department_id, data.position_id
            )
            await self._ensure_email_available(data.email)

            weakness = validate_password_strength(data.password)
            if weakness:
                raise ValidationError(weakness)

            employee_code = data.employee_code or await self._generate_employee_code()
            code_taken = await self.session.scalar(
                select(Employee.id).where(Employee.employee_code == employee_code).limit(1)
            )
            if code_taken is not None:
                raise ConflictError(f"Employee code '{employee_code}' already exists")

            employee = Employee(
                employee_code=employee_code,
                hashed_password=get_password_hash(data.password),
                login_fail_count=0,
                account_locked=False,
                is_active=True,
                created_by=current_user_id,
                **data.model_dump(exclude={"employee_code", "password"}),
            )
            self.session.add(employee)
            await self.session.commit()
            await self.session.refresh(employee)

            logger.info(f"Employee created: {employee.employee_code} - {employee.full_name} by user {current_user_id}")
            return EmployeeResponse.model_validate(employee)

        except HTTPException:
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error creating employee: {e}")
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Error creating employee: {e}")

    async def update_employee(self, employee_id: int, data: EmployeeUpdate, actor: Employee) -> EmployeeDetailResponse:
        try:
            checker = PermissionChecker(actor)
            checker.require_self_or_privileged(employee_id)

            employee = await self._load_employee(employee_id)
            if not employee:
                raise NotFoundError("Employee not found")

            changes = data.model_dump(exclude_unset=True)
            if not changes:
                raise ValidationError("Nothing to update")

            if "user_role" in changes and changes["user_role"] != employee.user_role:
                if not checker.is_admin:
                    raise UnauthorizedError("Only administrators can change roles")

            if changes.get("email") and changes["email"].lower() != employee.email.lower():
                await self._ensure_email_available(changes["email"], exclude_id=employee_id)

            for field, value in changes.items():
                if value is None and field in ("first_name", "last_name", "email", "user_role"):
                    continue
                setattr(employee, field, value)

            employee.updated_by = actor.id
            employee.updated_at = datetime.now(timezone.utc)
            await self.session.commit()

            logger.info(f"Employee updated: {employee_id} by user {actor.id}")
            return to_employee_detail(await self._load_employee(employee_id))

        except HTTPException:
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error updating employee {employee_id}: {e}")
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Error updating employee: {e}")

    async def delete_employee(self, employee_id: int, actor: Employee) -> bool:
        """Soft delete: the row is kept, flagged inactive and given a retire date"""
        try:
            if employee_id == actor.id:
                raise ValidationError("You cannot delete your own account")

            employee = await self.session.scalar(select(Employee).where(Employee.id == employee_id))
            if not employee:
                raise NotFoundError("Employee not found")
            if not employee.is_active:
                raise InvalidStateError("Employee is already deleted")

            employee.is_active = False
            employee.retire_date = datetime.now(timezone.utc)
            employee.updated_by = actor.id
            employee.updated_at = datetime.now(timezone.utc)
            await self.session.commit()

            logger.info(f"Employee deactivated: {employee.employee_code} by user {actor.id}")
            return True

        except HTTPException:
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error deleting employee {employee_id}: {e}")
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Error deleting employee: {e}")

    # ---------- Getters ----------
    async def get_employee(self, employee_id: int, actor: Employee) -> EmployeeDetailResponse:
        PermissionChecker(actor).require_self_or_privileged(employee_id)

        employee = await self._load_employee(employee_id)
        if not employee:
            raise NotFoundError("Employee not found")
        return to_employee_detail(employee)

    async def get_employees(
        self,
        page_index: int = 1,
        page_size: int = 20,
        search: Optional[str] = None,
        company_id: Optional[int] = None,
        sub_company_id: Optional[int] = None,
        department_id: Optional[int] = None,
        position_id: Optional[int] = None,
        user_role: Optional[UserRole] = None,
        is_active: Optional[bool] = None
    ) -> Dict[str, Any]:
        """Get employees with pagination"""
        conditions = []
        if search:
            like = f"%{search}%"
            conditions.append(
                or_(
                    Employee.first_name.ilike(like),
                    Employee.last_name.ilike(like),
                    Employee.name_eng.ilike(like),
                    Employee.employee_code.ilike(like),
                    Employee.email.ilike(like)
                )
            )
        if company_id is not None:
            conditions.append(Employee.company_id == company_id)
        if sub_company_id is not None:
            conditions.append(Employee.sub_company_id == sub_company_id)
        if department_id is not None:
            conditions.append(Employee.department_id == department_id)
        if position_id is not None:
            conditions.append(Employee.position_id == position_id)
        if user_role is not None:
            conditions.append(Employee.user_role == user_role)
        if is_active is not None:
            conditions.append(Employee.is_active == is_active)

        total = await self.session.scalar(select(func.count(Employee.id)).where(*conditions))

        skip = (page_index - 1) * page_size
        result = await self.session.execute(
            select(Employee)
            .options(
                selectinload(Employee.company),
                selectinload(Employee.sub_company),
                selectinload(Employee.department),
                selectinload(Employee.position),
            )
            .where(*conditions)
            .order_by(Employee.employee_code)
            .offset(skip)
            .limit(page_size)
        )

        return {
            "page_index": page_index,
            "page_size": page_size,
            "count": total or 0,
            "data": [to_employee_detail(e) for e in result.scalars().all()]
        }
