import pytest
from datetime import date, timedelta
from httpx import AsyncClient
from fastapi import status

from smarthr.models.shared.enums import UserRole


@pytest.fixture
async def actors(org, make_employee, make_form, add_member):
    admin = await make_employee(role=UserRole.ADMIN, company_id=org.c2, sub_company_id=org.s3,
                                department_id=org.d4, position_id=org.p5)
    requester = await make_employee()
    manager = await make_employee(role=UserRole.MANAGER, position_id=org.p2)
    await add_member("HR_MANAGER", admin.id)
    general = await make_form(form_code="GENERAL", required_fields="reason")
    await make_form(
        form_code="VACATION", approval_line="DEPT_MANAGER,HR_MANAGER",
        required_fields="vacationType,startDate,endDate,days,reason",
    )
    return {"admin": admin, "requester": requester, "manager": manager, "form_id": general.id}


@pytest.mark.asyncio
class TestApprovalDocuments:
    """Test approval workflow endpoints"""

    async def test_submit_and_approve(self, client: AsyncClient, actors, headers_for):
        response = await client.post(
            "/api/approval/documents",
            json={"form_id": actors["form_id"], "title": "New laptop", "content": {"reason": "broken"}},
            headers={**headers_for(actors["requester"]), "X-Forwarded-For": "203.0.113.7, 10.0.0.1"},
        )
        assert response.status_code == status.HTTP_201_CREATED
        document = response.json()
        assert document["current_status"] == "PENDING"
        assert [line["approver_employee_id"] for line in document["lines"]] == [
            actors["manager"].id, actors["admin"].id
        ]
        assert document["histories"][0]["ip_address"] == "203.0.113.7"
        document_id = document["id"]

        response = await client.get("/api/approval/pending", headers=headers_for(actors["manager"]))
        assert response.status_code == status.HTTP_200_OK
        assert [d["id"] for d in response.json()["data"]] == [document_id]

        response = await client.post(
            f"/api/approval/documents/{document_id}/process",
            json={"action": "approve", "comment": "fine"},
            headers=headers_for(actors["manager"]),
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["current_status"] == "IN_PROGRESS"

        response = await client.post(
            f"/api/approval/documents/{document_id}/process",
            json={"action": "APPROVE"},
            headers=headers_for(actors["admin"]),
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["current_status"] == "APPROVED"

        response = await client.get(f"/api/approval/documents/{document_id}", headers=headers_for(actors["requester"]))
        assert response.status_code == status.HTTP_200_OK
        assert len(response.json()["histories"]) == 3

    async def test_wrong_approver_and_terminal_state(self, client: AsyncClient, actors, headers_for):
        response = await client.post(
            "/api/approval/documents",
            json={"form_id": actors["form_id"], "title": "Desk", "content": {"reason": "ergonomics"}},
            headers=headers_for(actors["requester"]),
        )
        document_id = response.json()["id"]

        response = await client.post(
            f"/api/approval/documents/{document_id}/process",
            json={"action": "APPROVE"},
            headers=headers_for(actors["requester"]),
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["detail"] == "No approval authority for this document"

        response = await client.post(
            f"/api/approval/documents/{document_id}/process",
            json={"action": "REJECT", "comment": "not now"},
            headers=headers_for(actors["manager"]),
        )
        assert response.json()["current_status"] == "REJECTED"

        response = await client.post(
            f"/api/approval/documents/{document_id}/process",
            json={"action": "APPROVE"},
            headers=headers_for(actors["admin"]),
        )
        assert response.status_code == status.HTTP_409_CONFLICT

    async def test_invalid_action(self, client: AsyncClient, actors, headers_for):
        response = await client.post(
            "/api/approval/documents/1/process",
            json={"action": "MAYBE"},
            headers=headers_for(actors["manager"]),
        )
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    async def test_my_documents(self, client: AsyncClient, actors, headers_for):
        headers = headers_for(actors["requester"])
        for title in ("One", "Two"):
            await client.post(
                "/api/approval/documents",
                json={"form_id": actors["form_id"], "title": title, "content": {"reason": "x"}},
                headers=headers,
            )

        response = await client.get("/api/approval/my-documents", params={"status": "PENDING"}, headers=headers)
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["count"] == 2

        response = await client.get("/api/approval/my-documents", params={"status": "APPROVED"}, headers=headers)
        assert response.json()["count"] == 0

    async def test_vacation_form_needs_vacation_endpoint(self, client: AsyncClient, actors, headers_for):
        headers = headers_for(actors["requester"])
        forms = (await client.get("/api/approval/forms", headers=headers)).json()
        vacation_form_id = next(f["id"] for f in forms if f["form_code"] == "VACATION")

        response = await client.post(
            "/api/approval/documents",
            json={
                "form_id": vacation_form_id,
                "title": "Leave",
                "content": {
                    "vacationType": "ANNUAL", "startDate": "2030/01/01", "endDate": "2030/01/02",
                    "days": 200, "reason": "x",
                },
            },
            headers=headers,
        )
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

        response = await client.get("/api/approval/my-documents", headers=headers)
        assert response.json()["count"] == 0


@pytest.mark.asyncio
class TestApprovalAdministration:
    """Test approval form and member endpoints"""

    async def test_forms(self, client: AsyncClient, actors, headers_for):
        response = await client.get("/api/approval/forms", headers=headers_for(actors["requester"]))
        assert response.status_code == status.HTTP_200_OK
        assert {f["form_code"] for f in response.json()} == {"GENERAL", "VACATION"}

        payload = {
            "form_code": "overtime",
            "form_name": "Overtime",
            "approval_line": ["DEPT_MANAGER"],
            "max_approval_level": 1,
        }
        response = await client.post("/api/approval/forms", json=payload, headers=headers_for(actors["manager"]))
        assert response.status_code == status.HTTP_403_FORBIDDEN

        response = await client.post("/api/approval/forms", json=payload, headers=headers_for(actors["admin"]))
        assert response.status_code == status.HTTP_201_CREATED
        form_id = response.json()["id"]

        response = await client.post(f"/api/approval/forms/{form_id}/deactivate", headers=headers_for(actors["admin"]))
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["is_active"] is False

    async def test_members(self, client: AsyncClient, actors, headers_for):
        headers = headers_for(actors["admin"])
        response = await client.post(
            "/api/approval/members",
            json={"role_code": "ceo", "employee_id": actors["admin"].id},
            headers=headers,
        )
        assert response.status_code == status.HTTP_201_CREATED
        member_id = response.json()["id"]

        response = await client.get("/api/approval/members", params={"role_code": "CEO"}, headers=headers)
        assert response.json()["count"] == 1

        response = await client.delete(f"/api/approval/members/{member_id}", headers=headers)
        assert response.status_code == status.HTTP_200_OK


@pytest.mark.asyncio
class TestVacation:
    """Test vacation endpoints"""

    async def test_request_and_list(self, client: AsyncClient, actors, headers_for):
        start = date.today() + timedelta(days=10)
        payload = {
            "vacation_type": "ANNUAL",
            "start_date": start.isoformat(),
            "end_date": (start + timedelta(days=1)).isoformat(),
            "days": 2,
            "reason": "Wedding",
        }
        headers = headers_for(actors["requester"])

        response = await client.post("/api/vacation/request", json=payload, headers=headers)
        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["status"] == "PENDING"

        response = await client.get("/api/vacation/my-requests", headers=headers)
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["count"] == 1

        response = await client.get("/api/vacation/balance", params={"year": start.year}, headers=headers)
        assert response.json()["remaining_days"] == 13

    async def test_over_balance_is_rejected(self, client: AsyncClient, actors, headers_for):
        start = date.today() + timedelta(days=10)
        payload = {
            "vacation_type": "ANNUAL",
            "start_date": start.isoformat(),
            "end_date": (start + timedelta(days=19)).isoformat(),
            "days": 20,
            "reason": "Sabbatical",
        }
        response = await client.post("/api/vacation/request", json=payload, headers=headers_for(actors["requester"]))
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    async def test_team_status_permissions(self, client: AsyncClient, actors, headers_for):
        response = await client.get("/api/vacation/team-status", headers=headers_for(actors["requester"]))
        assert response.status_code == status.HTTP_403_FORBIDDEN

        response = await client.get("/api/vacation/team-status", headers=headers_for(actors["manager"]))
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["department_id"] == actors["manager"].department_id
