import pytest
from datetime import date, timedelta

from smarthr.core.exceptions import NotFoundError, UnauthorizedError, ValidationError
from smarthr.models.hr.employee import Employee
from smarthr.models.shared.enums import DocumentStatus, UserRole, VacationType
from smarthr.schemas.vacation.vacation_schema import VacationRequestCreate
from smarthr.services.approval.approval_service import ApprovalService
from smarthr.services.vacation.vacation_service import VacationService

START = date.today() + timedelta(days=14)


def _leave(days: float, offset: int = 0, vacation_type: VacationType = VacationType.ANNUAL) -> VacationRequestCreate:
    start = START + timedelta(days=offset)
    return VacationRequestCreate(
        vacation_type=vacation_type,
        start_date=start,
        end_date=start + timedelta(days=max(int(days) - 1, 0)),
        days=days,
        reason="Family trip",
    )


@pytest.fixture
async def team(session, org, make_employee, make_form):
    await make_form(
        form_code="VACATION",
        approval_line="DEPT_MANAGER",
        required_fields="vacationType,startDate,endDate,days,reason",
    )
    requester = await make_employee()
    manager = await make_employee(role=UserRole.MANAGER, position_id=org.p2)
    sales_manager = await make_employee(role=UserRole.MANAGER, department_id=org.d2, position_id=org.p3)
    sales_rep = await make_employee(department_id=org.d2, position_id=org.p3)
    return {
        "requester": requester.id,
        "manager": manager.id,
        "sales_manager": sales_manager.id,
        "sales_rep": sales_rep.id,
    }


async def _employee(session, employee_id):
    return await session.get(Employee, employee_id)


class TestRequestVacation:
    async def test_submits_vacation_document(self, session, team):
        requester = await _employee(session, team["requester"])
        response = await VacationService(session).request_vacation(_leave(3), requester, "10.0.0.2", "pytest")

        assert response.status == DocumentStatus.PENDING
        assert response.vacation_type == VacationType.ANNUAL
        assert response.days == 3
        assert response.start_date == START
        assert response.document_no.startswith("VACATION-")
        assert response.title == f"ANNUAL leave ({START.isoformat()} ~ {(START + timedelta(days=2)).isoformat()})"
        assert response.total_level == 1

    async def test_annual_balance_is_enforced(self, session, team):
        service = VacationService(session)
        requester = await _employee(session, team["requester"])
        await service.request_vacation(_leave(10), requester)

        balance = await service.get_annual_leave_balance(team["requester"], START.year)
        assert balance.used_days == 10
        assert balance.remaining_days == 5

        requester = await _employee(session, team["requester"])
        with pytest.raises(ValidationError):
            await service.request_vacation(_leave(6, offset=20), requester)

        # sick leave does not draw on the annual balance
        requester = await _employee(session, team["requester"])
        sick = await service.request_vacation(_leave(6, offset=20, vacation_type=VacationType.SICK), requester)
        assert sick.vacation_type == VacationType.SICK

    async def test_rejected_request_frees_balance(self, session, team):
        service = VacationService(session)
        requester = await _employee(session, team["requester"])
        first = await service.request_vacation(_leave(15), requester)

        await ApprovalService(session).process_approval(first.document_id, team["manager"], "REJECT")

        balance = await service.get_annual_leave_balance(team["requester"], START.year)
        assert balance.remaining_days == 15

    async def test_start_date_in_the_past(self, session, team):
        requester = await _employee(session, team["requester"])
        past = date.today() - timedelta(days=1)
        data = VacationRequestCreate(
            vacation_type=VacationType.ANNUAL, start_date=past, end_date=past, days=1, reason="Late"
        )
        with pytest.raises(ValidationError):
            await VacationService(session).request_vacation(data, requester)

    async def test_missing_vacation_form(self, session, org, make_employee):
        employee = await make_employee()
        with pytest.raises(NotFoundError):
            await VacationService(session).request_vacation(_leave(1), employee)

    def test_end_before_start_is_invalid(self):
        with pytest.raises(ValueError):
            VacationRequestCreate(
                vacation_type=VacationType.ANNUAL,
                start_date=START,
                end_date=START - timedelta(days=1),
                days=1,
                reason="Backwards",
            )


class TestQueries:
    async def test_my_requests_filters(self, session, team):
        service = VacationService(session)
        requester = await _employee(session, team["requester"])
        first = await service.request_vacation(_leave(1), requester)
        requester = await _employee(session, team["requester"])
        await service.request_vacation(_leave(1, offset=3), requester)
        await ApprovalService(session).process_approval(first.document_id, team["manager"], "APPROVE")

        mine = await service.get_my_requests(team["requester"])
        assert mine["count"] == 2

        approved = await service.get_my_requests(team["requester"], DocumentStatus.APPROVED)
        assert [r.document_id for r in approved["data"]] == [first.document_id]

        other_year = await service.get_my_requests(team["requester"], year=START.year + 5)
        assert other_year["count"] == 0

    async def test_team_status_overlap_and_scope(self, session, team):
        service = VacationService(session)
        requester = await _employee(session, team["requester"])
        await service.request_vacation(_leave(5), requester)
        rep = await _employee(session, team["sales_rep"])
        await service.request_vacation(_leave(2), rep)

        window_start = START + timedelta(days=2)
        window_end = START + timedelta(days=10)

        manager = await _employee(session, team["manager"])
        status = await service.get_team_status(manager, window_start, window_end, department_id=None)
        assert [r.requester_id for r in status.requests] == [team["requester"]]
        assert status.department_id == manager.department_id

        # the two-day sales request ends before the window
        sales_manager = await _employee(session, team["sales_manager"])
        status = await service.get_team_status(sales_manager, window_start, window_end)
        assert status.requests == []

    async def test_team_status_requires_manager(self, session, team):
        employee = await _employee(session, team["requester"])
        with pytest.raises(UnauthorizedError):
            await VacationService(session).get_team_status(employee)


class TestGenericRoute:
    async def test_vacation_form_refused_outside_vacation_service(self, session, team):
        approvals = ApprovalService(session)
        form_id = (await approvals.get_form_by_code("VACATION")).id
        content = {
            "vacationType": "ANNUAL",
            "startDate": START.isoformat(),
            "endDate": (START + timedelta(days=199)).isoformat(),
            "days": 200,
            "reason": "Sabbatical",
        }
        with pytest.raises(ValidationError):
            await approvals.create_document(form_id, "Long leave", content, team["requester"])

        balance = await VacationService(session).get_annual_leave_balance(team["requester"], START.year)
        assert balance.used_days == 0

    async def test_malformed_documents_are_skipped(self, session, team):
        approvals = ApprovalService(session)
        form_id = (await approvals.get_form_by_code("VACATION")).id
        content = {
            "vacationType": "ANNUAL",
            "startDate": "2026/12/01",
            "endDate": "2026/12/02",
            "days": 2,
            "reason": "Imported",
        }
        await approvals.create_document(form_id, "Imported leave", content, team["requester"], allow_vacation_form=True)

        service = VacationService(session)
        manager = await _employee(session, team["manager"])
        status = await service.get_team_status(manager, START, START + timedelta(days=10))
        assert status.requests == []

        requester = await _employee(session, team["requester"])
        response = await service.request_vacation(_leave(1), requester)
        assert response.days == 1

        mine = await service.get_my_requests(team["requester"])
        assert [r.document_id for r in mine["data"]] == [response.document_id]
