import logging
from typing import List, Optional
from datetime import date
from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from smarthr.auth.permissions import PermissionChecker
from smarthr.core.exceptions import InvalidStateError, NotFoundError, ValidationError
from smarthr.models.hr.employee import Employee
from smarthr.models.hr.employee_assignment import EmployeeAssignment
from smarthr.schemas.hr.assignment_schema import AssignmentCreate, AssignmentResponse, AssignmentResult
from smarthr.services.hr.assignment_policy import ORG_FIELDS, AssignmentTypePolicy
from smarthr.services.organization.placement import validate_placement

logger = logging.getLogger(__name__)


class AssignmentService:
    def __init__(self, session: AsyncSession, policy: Optional[AssignmentTypePolicy] = None):
        self.session = session
        self.policy = policy or AssignmentTypePolicy()

    async def assign_employee(self, employee_id: int, data: AssignmentCreate, assigned_by: int) -> AssignmentResult:
        """Move an employee within the organization and record the move"""
        try:
            requested = {
                "company": data.company_id,
                "sub_company": data.sub_company_id,
                "department": data.department_id,
                "position": data.position_id,
            }
            if all(v is None for v in requested.values()):
                raise ValidationError("At least one organization field to change is required")

            employee = await self.session.scalar(
                select(Employee).where(Employee.id == employee_id).with_for_update()
            )
            if not employee:
                raise NotFoundError("Employee not found")
            if not employee.is_active:
                raise InvalidStateError("Cannot assign an inactive employee")

            current = dict(zip(ORG_FIELDS, employee.org_tuple))
            target = {field: requested[field] if requested[field] is not None else current[field] for field in ORG_FIELDS}
            changed = [field for field in ORG_FIELDS if target[field] != current[field]]

            if not changed:
                raise ValidationError("The requested organization is identical to the current one")

            await validate_placement(
                self.session,
                target["company"],
                target["sub_company"],
                target["department"],
                target["position"],
            )

            assignment_type = self.policy.classify(changed)
            reason = (data.assignment_reason or "").strip() or f"{assignment_type} assignment"

            assignment = EmployeeAssignment(
                employee_id=employee.id,
                previous_company_id=current["company"],
                previous_sub_company_id=current["sub_company"],
                previous_department_id=current["department"],
                previous_position_id=current["position"],
                new_company_id=target["company"],
                new_sub_company_id=target["sub_company"],
                new_department_id=target["department"],
                new_position_id=target["position"],
                assignment_type=assignment_type,
                change_count=len(changed),
                effective_date=data.effective_date or date.today(),
                assignment_reason=reason,
                assigned_by=assigned_by,
                created_by=assigned_by,
            )
            self.session.add(assignment)

            employee.company_id = target["company"]
            employee.sub_company_id = target["sub_company"]
            employee.department_id = target["department"]
            employee.position_id = target["position"]
            employee.updated_by = assigned_by

            await self.session.commit()
            await self.session.refresh(assignment)

            message = f"{assignment_type} completed"
            if len(changed) > 1:
                message += f" ({len(changed)} changes)"
            logger.info(
                f"Employee {employee_id} assigned: {assignment_type} "
                f"fields={changed} by user {assigned_by}"
            )
            return AssignmentResult(message=message, assignment=AssignmentResponse.model_validate(assignment))

        except HTTPException:
            await self.session.rollback()
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error assigning employee {employee_id}: {e}")
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Error assigning employee: {e}")

    async def get_assignment_history(self, employee_id: int, actor: Employee) -> List[AssignmentResponse]:
        PermissionChecker(actor).require_self_or_privileged(employee_id)

        exists = await self.session.scalar(select(Employee.id).where(Employee.id == employee_id))
        if exists is None:
            raise NotFoundError("Employee not found")

        result = await self.session.execute(
            select(EmployeeAssignment)
            .where(EmployeeAssignment.employee_id == employee_id)
            .order_by(EmployeeAssignment.effective_date.desc(), EmployeeAssignment.id.desc())
        )
        return [AssignmentResponse.model_validate(a) for a in result.scalars().all()]
