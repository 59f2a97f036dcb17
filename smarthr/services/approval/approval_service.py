import logging
from typing import Any, Dict, List, Optional
from datetime import datetime, timezone
from fastapi import HTTPException, status
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from smarthr.auth.permissions import PermissionChecker
from smarthr.core.config import settings
from smarthr.core.exceptions import (
    ConflictError, InvalidStateError, NotFoundError, UnauthorizedError, ValidationError
)
from smarthr.models.approval.approval_document import ApprovalDocument
from smarthr.models.approval.approval_form import ApprovalForm
from smarthr.models.approval.approval_history import ApprovalHistory
from smarthr.models.approval.approval_line import ApprovalLine
from smarthr.models.approval.approval_member import ApprovalMember
from smarthr.models.hr.employee import Employee
from smarthr.models.organization.department import Department
from smarthr.models.shared.enums import (
    ApprovalAction, ApprovalHistoryAction, ApprovalLineStatus, DocumentStatus, UserRole
)
from smarthr.schemas.approval.approval_document_schema import (
    ApprovalDocumentDetailResponse, ApprovalDocumentResponse
)
from smarthr.schemas.approval.approval_form_schema import ApprovalFormCreate, ApprovalFormResponse
from smarthr.schemas.approval.approval_member_schema import ApprovalMemberCreate, ApprovalMemberResponse

logger = logging.getLogger(__name__)

ACTIONABLE_STATUSES = (DocumentStatus.PENDING, DocumentStatus.IN_PROGRESS)

# Role tokens that fall back to a manager of the requester's own department
DEPARTMENT_MANAGER_ROLES = ("DEPT_MANAGER", "TEAM_MANAGER")


def to_document_response(document: ApprovalDocument) -> ApprovalDocumentResponse:
    response = ApprovalDocumentResponse.model_validate(document)
    response.form_code = document.form.form_code if document.form else None
    response.form_name = document.form.form_name if document.form else None
    response.requester_name = document.requester.full_name if document.requester else None
    return response


def to_document_detail(document: ApprovalDocument) -> ApprovalDocumentDetailResponse:
    detail = ApprovalDocumentDetailResponse.model_validate(document)
    detail.form_code = document.form.form_code if document.form else None
    detail.form_name = document.form.form_name if document.form else None
    detail.requester_name = document.requester.full_name if document.requester else None
    for line_response, line in zip(detail.lines, document.lines):
        line_response.approver_name = line.approver.full_name if line.approver else None
    return detail


class ApprovalService:
    def __init__(self, session: AsyncSession):
        self.session = session

    # region ========== Approval Forms ==========

    async def get_forms(self, include_inactive: bool = False) -> List[ApprovalFormResponse]:
        """Get approval forms ordered for display"""
        conditions = [ApprovalForm.is_deleted == False]
        if not include_inactive:
            conditions.append(ApprovalForm.is_active == True)

        result = await self.session.execute(
            select(ApprovalForm)
            .where(*conditions)
            .order_by(ApprovalForm.display_order, ApprovalForm.form_code)
        )
        return [ApprovalFormResponse.model_validate(f) for f in result.scalars().all()]

    async def get_form_by_code(self, form_code: str) -> Optional[ApprovalForm]:
        return await self.session.scalar(
            select(ApprovalForm).where(
                ApprovalForm.form_code == form_code.upper(),
                ApprovalForm.is_deleted == False
            )
        )

    async def create_form(self, data: ApprovalFormCreate, created_by: int) -> ApprovalFormResponse:
        try:
            if await self.get_form_by_code(data.form_code) is not None:
                raise ConflictError(f"Approval form '{data.form_code}' already exists")

            form = ApprovalForm(
                form_code=data.form_code,
                form_name=data.form_name,
                form_name_eng=data.form_name_eng,
                category_code=data.category_code,
                category_name=data.category_name,
                form_template=data.form_template,
                required_fields=",".join(data.required_fields),
                auto_approval_line=",".join(data.approval_line),
                max_approval_level=data.max_approval_level,
                display_order=data.display_order,
                description=data.description,
                is_active=True,
                created_by=created_by
            )
            self.session.add(form)
            await self.session.commit()
            await self.session.refresh(form)

            logger.info(f"Approval form created: {form.form_code} ({form.auto_approval_line}) by user {created_by}")
            return ApprovalFormResponse.model_validate(form)

        except HTTPException:
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error creating approval form: {e}")
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Error creating approval form: {e}")

    async def deactivate_form(self, form_id: int, updated_by: int) -> ApprovalFormResponse:
        try:
            form = await self.session.scalar(
                select(ApprovalForm).where(ApprovalForm.id == form_id, ApprovalForm.is_deleted == False)
            )
            if not form:
                raise NotFoundError("Approval form not found")
            if not form.is_active:
                raise InvalidStateError("Approval form is already inactive")

            form.is_active = False
            form.updated_by = updated_by
            form.updated_at = datetime.now(timezone.utc)
            await self.session.commit()
            await self.session.refresh(form)

            logger.info(f"Approval form deactivated: {form.form_code} by user {updated_by}")
            return ApprovalFormResponse.model_validate(form)

        except HTTPException:
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error deactivating approval form {form_id}: {e}")
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Error deactivating approval form: {e}")

    # endregion

    # region ========== Approval Members ==========

    async def add_approval_member(self, data: ApprovalMemberCreate, added_by: int) -> ApprovalMemberResponse:
        """Register an employee to act for an approval-line role"""
        try:
            employee = await self.session.scalar(
                select(Employee).where(Employee.id == data.employee_id, Employee.is_active == True)
            )
            if not employee:
                raise NotFoundError("Employee not found or inactive")

            if data.department_id is not None:
                department = await self.session.scalar(
                    select(Department.id).where(
                        Department.id == data.department_id,
                        Department.is_active == True,
                        Department.is_deleted == False
                    )
                )
                if department is None:
                    raise NotFoundError("Department not found or inactive")

            scope = (
                ApprovalMember.department_id.is_(None)
                if data.department_id is None
                else ApprovalMember.department_id == data.department_id
            )
            existing = await self.session.scalar(
                select(ApprovalMember.id).where(
                    ApprovalMember.role_code == data.role_code,
                    ApprovalMember.employee_id == data.employee_id,
                    scope,
                    ApprovalMember.is_active == True
                )
            )
            if existing is not None:
                raise ConflictError("Employee is already registered for this role")

            member = ApprovalMember(
                role_code=data.role_code,
                employee_id=data.employee_id,
                department_id=data.department_id,
                added_by=added_by,
                created_by=added_by,
                is_active=True
            )
            self.session.add(member)
            await self.session.commit()
            await self.session.refresh(member)

            logger.info(
                f"Approval member added: Employee {data.employee_id} as {data.role_code} "
                f"(department {data.department_id or 'ALL'}) by user {added_by}"
            )
            response = ApprovalMemberResponse.model_validate(member)
            response.employee_name = employee.full_name
            return response

        except HTTPException:
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error adding approval member: {e}")
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Error adding approval member: {e}")

    async def remove_approval_member(self, member_id: int, removed_by: int) -> bool:
        try:
            member = await self.session.scalar(
                select(ApprovalMember).where(
                    ApprovalMember.id == member_id,
                    ApprovalMember.is_active == True
                )
            )
            if not member:
                raise NotFoundError("Approval member not found")

            member.is_active = False
            member.is_deleted = True
            member.updated_by = removed_by
            await self.session.commit()

            logger.info(f"Approval member {member_id} ({member.role_code}) removed by user {removed_by}")
            return True

        except HTTPException:
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error removing approval member: {e}")
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Error removing approval member: {e}")

    async def get_approval_members(
        self,
        page_index: int = 1,
        page_size: int = 100,
        role_code: Optional[str] = None
    ) -> Dict[str, Any]:
        """Get paginated active approval members"""
        conditions = [ApprovalMember.is_active == True]
        if role_code:
            conditions.append(ApprovalMember.role_code == role_code.upper())

        total_count = await self.session.scalar(
            select(func.count(ApprovalMember.id)).where(*conditions)
        )

        skip = (page_index - 1) * page_size
        result = await self.session.execute(
            select(ApprovalMember)
            .options(selectinload(ApprovalMember.employee))
            .where(*conditions)
            .order_by(ApprovalMember.role_code, ApprovalMember.id)
            .offset(skip)
            .limit(page_size)
        )

        data = []
        for member in result.scalars().all():
            response = ApprovalMemberResponse.model_validate(member)
            response.employee_name = member.employee.full_name if member.employee else None
            data.append(response)

        return {
            "page_index": page_index,
            "page_size": page_size,
            "count": total_count or 0,
            "data": data
        }

    async def _resolve_approver(self, role_code: str, requester: Employee) -> int:
        """Pick the employee who approves ``role_code`` for this requester.

        Department-scoped members win over company-wide ones. Manager tokens fall
        back to a manager of the requester's department.
        """
        base = (
            select(ApprovalMember.employee_id)
            .join(Employee, Employee.id == ApprovalMember.employee_id)
            .where(
                ApprovalMember.role_code == role_code,
                ApprovalMember.is_active == True,
                Employee.is_active == True
            )
            .order_by(ApprovalMember.id)
            .limit(1)
        )

        if requester.department_id is not None:
            scoped = await self.session.scalar(
                base.where(ApprovalMember.department_id == requester.department_id)
            )
            if scoped is not None:
                return scoped

        company_wide = await self.session.scalar(base.where(ApprovalMember.department_id.is_(None)))
        if company_wide is not None:
            return company_wide

        if role_code in DEPARTMENT_MANAGER_ROLES and requester.department_id is not None:
            manager = await self.session.scalar(
                select(Employee.id)
                .where(
                    Employee.department_id == requester.department_id,
                    Employee.user_role == UserRole.MANAGER,
                    Employee.is_active == True,
                    Employee.id != requester.id
                )
                .order_by(Employee.id)
                .limit(1)
            )
            if manager is not None:
                return manager

        raise ValidationError(f"No approver configured for role {role_code}")

    # endregion

    # region ========== Approval Documents ==========

    async def _generate_document_no(self, form_code: str) -> str:
        """``{FormCode}-{YYYYMM}-{seq:04d}``, sequence scoped to form and month"""
        prefix = f"{form_code}-{datetime.now(timezone.utc).strftime('%Y%m')}-"
        result = await self.session.execute(
            select(ApprovalDocument.document_no).where(ApprovalDocument.document_no.like(f"{prefix}%"))
        )
        sequences = [
            int(no[len(prefix):])
            for no in result.scalars().all()
            if no.startswith(prefix) and no[len(prefix):].isdigit()
        ]
        return f"{prefix}{max(sequences, default=0) + 1:04d}"

    async def _load_document(self, document_id: int) -> Optional[ApprovalDocument]:
        result = await self.session.execute(
            select(ApprovalDocument)
            .options(
                selectinload(ApprovalDocument.form),
                selectinload(ApprovalDocument.requester),
                selectinload(ApprovalDocument.lines).selectinload(ApprovalLine.approver),
                selectinload(ApprovalDocument.histories),
            )
            .where(ApprovalDocument.id == document_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def create_document(
        self,
        form_id: int,
        title: str,
        content: Dict[str, Any],
        requester_id: int,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        allow_vacation_form: bool = False
    ) -> ApprovalDocumentDetailResponse:
        """Create a document and its approval line in one transaction.

        Vacation documents carry content the vacation views depend on, so they
        are only accepted from the vacation service (``allow_vacation_form``).
        """
        try:
            if not form_id or not requester_id:
                raise ValidationError("Form and requester are required")
            if not title or not title.strip():
                raise ValidationError("Title is required")
            if len(title.strip()) > 200:
                raise ValidationError("Title must be 200 characters or fewer")
            if content is None:
                raise ValidationError("Content is required")

            requester = await self.session.scalar(
                select(Employee).where(Employee.id == requester_id, Employee.is_active == True)
            )
            if not requester:
                raise NotFoundError("Requester not found or inactive")

            form = await self.session.scalar(
                select(ApprovalForm).where(
                    ApprovalForm.id == form_id,
                    ApprovalForm.is_active == True,
                    ApprovalForm.is_deleted == False
                )
            )
            if not form:
                raise NotFoundError("Approval form not found or inactive")
            if form.form_code == settings.VACATION_FORM_CODE and not allow_vacation_form:
                raise ValidationError("Vacation requests must be submitted through /api/vacation/request")

            roles = form.approval_roles
            if not roles or len(roles) != form.max_approval_level:
                raise ValidationError(f"Approval form {form.form_code} has an invalid approval line")

            missing = [f for f in form.required_field_list if content.get(f) in (None, "", [], {})]
            if missing:
                raise ValidationError(f"Missing required fields: {', '.join(missing)}")

            now = datetime.now(timezone.utc)
            document = ApprovalDocument(
                document_no=await self._generate_document_no(form.form_code),
                form_id=form.id,
                title=title.strip(),
                content=content,
                requester_id=requester.id,
                requester_department_id=requester.department_id,
                current_status=DocumentStatus.DRAFT,
                current_level=0,
                total_level=form.max_approval_level,
                created_by=requester.id
            )
            self.session.add(document)
            await self.session.flush()

            for level, role_code in enumerate(roles, start=1):
                approver_id = await self._resolve_approver(role_code, requester)
                self.session.add(ApprovalLine(
                    document_id=document.id,
                    approval_level=level,
                    approver_role=role_code,
                    approver_employee_id=approver_id,
                    status=ApprovalLineStatus.PENDING,
                    created_by=requester.id
                ))

            self.session.add(ApprovalHistory(
                document_id=document.id,
                approval_level=0,
                action_type=ApprovalHistoryAction.DRAFT,
                action_by=requester.id,
                action_date=now,
                previous_status=None,
                new_status=DocumentStatus.PENDING,
                ip_address=ip_address,
                user_agent=user_agent,
                created_by=requester.id
            ))
            document.current_status = DocumentStatus.PENDING

            await self.session.commit()
            document_id = document.id

            logger.info(
                f"Approval document created: {document.document_no} "
                f"form={form.form_code} requester={requester_id} levels={len(roles)}"
            )
            return to_document_detail(await self._load_document(document_id))

        except HTTPException:
            await self.session.rollback()
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error creating approval document: {e}")
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Error creating approval document: {e}")

    async def process_approval(
        self,
        document_id: int,
        approver_id: int,
        action: str,
        comment: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> ApprovalDocumentDetailResponse:
        """Approve or reject the line at ``current_level + 1``"""
        try:
            try:
                action = ApprovalAction(str(action).strip().upper())
            except ValueError:
                raise ValidationError("Action must be APPROVE or REJECT")
            if comment is not None and len(comment) > 1000:
                raise ValidationError("Comment must be 1000 characters or fewer")

            document = await self.session.scalar(
                select(ApprovalDocument)
                .where(ApprovalDocument.id == document_id)
                .with_for_update()
                .execution_options(populate_existing=True)
            )
            if not document:
                raise NotFoundError("Approval document not found")
            if document.current_status not in ACTIONABLE_STATUSES:
                raise InvalidStateError(f"Document is {document.current_status.value} and cannot be processed")

            target_level = document.current_level + 1
            line = await self.session.scalar(
                select(ApprovalLine)
                .where(
                    ApprovalLine.document_id == document_id,
                    ApprovalLine.approval_level == target_level
                )
                .execution_options(populate_existing=True)
            )
            if (
                not line
                or line.approver_employee_id != approver_id
                or line.status != ApprovalLineStatus.PENDING
            ):
                raise UnauthorizedError("No approval authority for this document")

            now = datetime.now(timezone.utc)
            previous_status = document.current_status
            line.approval_date = now
            line.approval_comment = comment
            line.updated_by = approver_id

            if action == ApprovalAction.REJECT:
                line.status = ApprovalLineStatus.REJECT
                document.current_status = DocumentStatus.REJECTED
                document.processed_at = now
                history_action = ApprovalHistoryAction.REJECT
            else:
                line.status = ApprovalLineStatus.APPROVE
                document.current_level = target_level
                if target_level == document.total_level:
                    document.current_status = DocumentStatus.APPROVED
                    document.processed_at = now
                else:
                    document.current_status = DocumentStatus.IN_PROGRESS
                history_action = ApprovalHistoryAction.APPROVE
            document.updated_by = approver_id

            self.session.add(ApprovalHistory(
                document_id=document.id,
                line_id=line.id,
                approval_level=target_level,
                action_type=history_action,
                action_by=approver_id,
                action_date=now,
                previous_status=previous_status,
                new_status=document.current_status,
                comment=comment,
                ip_address=ip_address,
                user_agent=user_agent,
                created_by=approver_id
            ))

            new_status = document.current_status
            await self.session.commit()

            logger.info(
                f"Approval document {document_id} level {target_level} {action.value} "
                f"by {approver_id}: {previous_status.value} -> {new_status.value}"
            )
            return to_document_detail(await self._load_document(document_id))

        except HTTPException:
            await self.session.rollback()
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error processing approval for document {document_id}: {e}")
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Error processing approval: {e}")

    async def get_document(self, document_id: int, viewer: Employee) -> ApprovalDocumentDetailResponse:
        """Document with form, requester, approval line and history"""
        document = await self._load_document(document_id)
        if not document:
            raise NotFoundError("Approval document not found")

        approver_ids = {line.approver_employee_id for line in document.lines}
        if (
            viewer.id != document.requester_id
            and viewer.id not in approver_ids
            and not PermissionChecker(viewer).is_admin
        ):
            raise UnauthorizedError("You are not allowed to view this document")

        return to_document_detail(document)

    async def _paginate_documents(self, conditions, page_index: int, page_size: int, join_lines: bool = False) -> Dict[str, Any]:
        count_query = select(func.count(ApprovalDocument.id)).select_from(ApprovalDocument)
        query = select(ApprovalDocument).options(
            selectinload(ApprovalDocument.form),
            selectinload(ApprovalDocument.requester),
        )
        if join_lines:
            count_query = count_query.join(ApprovalLine, ApprovalLine.document_id == ApprovalDocument.id)
            query = query.join(ApprovalLine, ApprovalLine.document_id == ApprovalDocument.id)

        total = await self.session.scalar(count_query.where(*conditions))

        skip = (page_index - 1) * page_size
        result = await self.session.execute(
            query.where(*conditions)
            .order_by(ApprovalDocument.id.desc())
            .offset(skip)
            .limit(page_size)
        )

        return {
            "page_index": page_index,
            "page_size": page_size,
            "count": total or 0,
            "data": [to_document_response(d) for d in result.scalars().all()]
        }

    async def get_pending_documents(self, approver_id: int, page_index: int = 1, page_size: int = 20) -> Dict[str, Any]:
        """Documents currently waiting on this approver"""
        conditions = [
            ApprovalDocument.current_status.in_(ACTIONABLE_STATUSES),
            ApprovalLine.approver_employee_id == approver_id,
            ApprovalLine.status == ApprovalLineStatus.PENDING,
            ApprovalLine.approval_level == ApprovalDocument.current_level + 1,
        ]
        return await self._paginate_documents(conditions, page_index, page_size, join_lines=True)

    async def get_my_documents(
        self,
        requester_id: int,
        status_filter: Optional[DocumentStatus] = None,
        page_index: int = 1,
        page_size: int = 20,
        form_id: Optional[int] = None
    ) -> Dict[str, Any]:
        conditions = [ApprovalDocument.requester_id == requester_id]
        if status_filter is not None:
            conditions.append(ApprovalDocument.current_status == status_filter)
        if form_id is not None:
            conditions.append(ApprovalDocument.form_id == form_id)
        return await self._paginate_documents(conditions, page_index, page_size)

    # endregion
