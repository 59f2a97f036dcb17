import re
import pytest
from sqlalchemy import func, select

from smarthr.core.exceptions import InvalidStateError, NotFoundError, UnauthorizedError, ValidationError
from smarthr.models.approval.approval_document import ApprovalDocument
from smarthr.models.approval.approval_history import ApprovalHistory
from smarthr.models.approval.approval_line import ApprovalLine
from smarthr.models.hr.employee import Employee
from smarthr.models.shared.enums import (
    ApprovalHistoryAction, ApprovalLineStatus, DocumentStatus, UserRole
)
from smarthr.schemas.approval.approval_form_schema import ApprovalFormCreate
from smarthr.schemas.approval.approval_member_schema import ApprovalMemberCreate
from smarthr.services.approval.approval_service import ApprovalService


@pytest.fixture
async def workflow(session, org, make_employee, make_form, add_member):
    """Requester and department manager in Development, company-wide HR manager elsewhere"""
    requester = await make_employee()
    manager = await make_employee(role=UserRole.MANAGER, position_id=org.p2)
    hr = await make_employee(
        role=UserRole.MANAGER, company_id=org.c2, sub_company_id=org.s3,
        department_id=org.d4, position_id=org.p5
    )
    outsider = await make_employee(department_id=org.d2, position_id=org.p3)
    await add_member("HR_MANAGER", hr.id)
    form = await make_form(form_code="GENERAL", required_fields="reason")
    return {
        "requester": requester.id,
        "manager": manager.id,
        "hr": hr.id,
        "outsider": outsider.id,
        "form": form.id,
    }


async def _submit(service, workflow, title="Request", content=None):
    return await service.create_document(
        form_id=workflow["form"],
        title=title,
        content=content if content is not None else {"reason": "testing"},
        requester_id=workflow["requester"],
        ip_address="10.0.0.1",
        user_agent="pytest",
    )


class TestCreateDocument:
    async def test_creates_pending_document_with_resolved_line(self, session, workflow):
        service = ApprovalService(session)
        document = await _submit(service, workflow)

        assert document.current_status == DocumentStatus.PENDING
        assert document.current_level == 0
        assert document.total_level == 2
        assert [line.approver_employee_id for line in document.lines] == [workflow["manager"], workflow["hr"]]
        assert [line.approver_role for line in document.lines] == ["DEPT_MANAGER", "HR_MANAGER"]
        assert all(line.status == ApprovalLineStatus.PENDING for line in document.lines)

        assert len(document.histories) == 1
        draft = document.histories[0]
        assert draft.action_type == ApprovalHistoryAction.DRAFT
        assert draft.approval_level == 0
        assert draft.ip_address == "10.0.0.1"
        assert draft.user_agent == "pytest"

    async def test_document_numbers_are_sequential_per_form_and_month(self, session, workflow):
        service = ApprovalService(session)
        first = await _submit(service, workflow, title="First")
        second = await _submit(service, workflow, title="Second")

        assert re.fullmatch(r"GENERAL-\d{6}-0001", first.document_no)
        assert second.document_no == first.document_no[:-4] + "0002"

    async def test_unresolvable_approver_rolls_back_everything(self, session, workflow, make_form):
        form = await make_form(form_code="NOAPPROVER", approval_line="DEPT_MANAGER,CFO")
        form_id = form.id
        service = ApprovalService(session)

        with pytest.raises(ValidationError):
            await service.create_document(
                form_id=form_id, title="Orphan", content={}, requester_id=workflow["requester"]
            )

        assert await session.scalar(select(func.count(ApprovalDocument.id))) == 0
        assert await session.scalar(select(func.count(ApprovalLine.id))) == 0
        assert await session.scalar(select(func.count(ApprovalHistory.id))) == 0

    async def test_missing_required_field_is_rejected(self, session, workflow):
        service = ApprovalService(session)
        with pytest.raises(ValidationError):
            await _submit(service, workflow, content={"other": "value"})

    async def test_blank_title_is_rejected(self, session, workflow):
        service = ApprovalService(session)
        with pytest.raises(ValidationError):
            await _submit(service, workflow, title="   ")

    async def test_inactive_form_is_not_found(self, session, workflow, make_form):
        form = await make_form(form_code="OLD", is_active=False)
        form_id = form.id
        service = ApprovalService(session)
        with pytest.raises(NotFoundError):
            await service.create_document(
                form_id=form_id, title="Old", content={}, requester_id=workflow["requester"]
            )

    async def test_department_scoped_member_wins_over_manager(self, session, org, workflow, make_employee, add_member):
        delegate = await make_employee(role=UserRole.EMPLOYEE)
        await add_member("DEPT_MANAGER", delegate.id, department_id=org.d1)
        delegate_id = delegate.id

        document = await _submit(ApprovalService(session), workflow)
        assert document.lines[0].approver_employee_id == delegate_id


class TestProcessApproval:
    async def test_full_approval(self, session, workflow):
        service = ApprovalService(session)
        document = await _submit(service, workflow)

        document = await service.process_approval(document.id, workflow["manager"], "approve", "ok")
        assert document.current_status == DocumentStatus.IN_PROGRESS
        assert document.current_level == 1
        assert document.lines[0].status == ApprovalLineStatus.APPROVE
        assert document.lines[0].approval_comment == "ok"

        document = await service.process_approval(document.id, workflow["hr"], "APPROVE")
        assert document.current_status == DocumentStatus.APPROVED
        assert document.current_level == 2
        assert document.processed_at is not None
        assert [h.action_type for h in document.histories] == [
            ApprovalHistoryAction.DRAFT, ApprovalHistoryAction.APPROVE, ApprovalHistoryAction.APPROVE
        ]
        assert document.histories[-1].previous_status == DocumentStatus.IN_PROGRESS
        assert document.histories[-1].new_status == DocumentStatus.APPROVED

    async def test_rejection_is_terminal(self, session, workflow):
        service = ApprovalService(session)
        document = await _submit(service, workflow)
        document_id = document.id

        document = await service.process_approval(document_id, workflow["manager"], "REJECT", "no budget")
        assert document.current_status == DocumentStatus.REJECTED
        assert document.current_level == 0
        assert document.lines[0].status == ApprovalLineStatus.REJECT
        assert document.lines[1].status == ApprovalLineStatus.PENDING

        with pytest.raises(InvalidStateError):
            await service.process_approval(document_id, workflow["hr"], "APPROVE")

    async def test_approver_must_own_the_current_level(self, session, workflow):
        service = ApprovalService(session)
        document = await _submit(service, workflow)
        document_id = document.id

        # second-level approver cannot act before the first
        with pytest.raises(UnauthorizedError):
            await service.process_approval(document_id, workflow["hr"], "APPROVE")
        with pytest.raises(UnauthorizedError):
            await service.process_approval(document_id, workflow["outsider"], "APPROVE")

        history_count = await session.scalar(
            select(func.count(ApprovalHistory.id)).where(ApprovalHistory.document_id == document_id)
        )
        assert history_count == 1

    async def test_unknown_action_is_rejected(self, session, workflow):
        service = ApprovalService(session)
        document = await _submit(service, workflow)
        with pytest.raises(ValidationError):
            await service.process_approval(document.id, workflow["manager"], "MAYBE")

    async def test_missing_document(self, session, workflow):
        with pytest.raises(NotFoundError):
            await ApprovalService(session).process_approval(999, workflow["manager"], "APPROVE")


class TestQueries:
    async def test_pending_follows_current_level(self, session, workflow):
        service = ApprovalService(session)
        document = await _submit(service, workflow)

        pending = await service.get_pending_documents(workflow["manager"])
        assert [d.id for d in pending["data"]] == [document.id]
        assert (await service.get_pending_documents(workflow["hr"]))["count"] == 0

        await service.process_approval(document.id, workflow["manager"], "APPROVE")
        assert (await service.get_pending_documents(workflow["manager"]))["count"] == 0
        assert (await service.get_pending_documents(workflow["hr"]))["count"] == 1

    async def test_my_documents_filters_by_status(self, session, workflow):
        service = ApprovalService(session)
        first = await _submit(service, workflow, title="First")
        await _submit(service, workflow, title="Second")
        await service.process_approval(first.id, workflow["manager"], "REJECT")

        mine = await service.get_my_documents(workflow["requester"])
        assert mine["count"] == 2
        rejected = await service.get_my_documents(workflow["requester"], DocumentStatus.REJECTED)
        assert [d.title for d in rejected["data"]] == ["First"]

    async def test_document_visibility(self, session, workflow):
        service = ApprovalService(session)
        document = await _submit(service, workflow)

        outsider = await session.get(Employee, workflow["outsider"])
        with pytest.raises(UnauthorizedError):
            await service.get_document(document.id, outsider)

        hr = await session.get(Employee, workflow["hr"])
        detail = await service.get_document(document.id, hr)
        assert detail.requester_name is not None


class TestFormsAndMembers:
    async def test_create_and_deactivate_form(self, session, workflow):
        service = ApprovalService(session)
        form = await service.create_form(
            ApprovalFormCreate(
                form_code="overtime",
                form_name="Overtime",
                approval_line=["dept_manager"],
                max_approval_level=1,
                required_fields=["hours"],
            ),
            created_by=workflow["manager"],
        )
        assert form.form_code == "OVERTIME"
        assert form.approval_roles == ["DEPT_MANAGER"]
        assert form.required_field_list == ["hours"]

        deactivated = await service.deactivate_form(form.id, workflow["manager"])
        assert deactivated.is_active is False
        assert "OVERTIME" not in [f.form_code for f in await service.get_forms()]

        with pytest.raises(InvalidStateError):
            await service.deactivate_form(form.id, workflow["manager"])

    def test_form_line_length_must_match_max_level(self):
        with pytest.raises(ValueError):
            ApprovalFormCreate(
                form_code="BAD", form_name="Bad", approval_line=["A", "B"], max_approval_level=3
            )

    async def test_member_registration(self, session, workflow):
        service = ApprovalService(session)
        member = await service.add_approval_member(
            ApprovalMemberCreate(role_code="cfo", employee_id=workflow["hr"]), added_by=workflow["hr"]
        )
        assert member.role_code == "CFO"
        assert member.employee_name is not None

        members = await service.get_approval_members(role_code="CFO")
        assert members["count"] == 1

        await service.remove_approval_member(member.id, workflow["hr"])
        assert (await service.get_approval_members(role_code="CFO"))["count"] == 0
