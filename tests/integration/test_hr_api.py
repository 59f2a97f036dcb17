import pytest
from httpx import AsyncClient
from fastapi import status

from smarthr.models.shared.enums import UserRole


@pytest.mark.asyncio
class TestEmployees:
    """Test employee endpoints"""

    async def test_create_employee(self, client: AsyncClient, org, make_employee, headers_for):
        admin = await make_employee(role=UserRole.ADMIN)
        payload = {
            "first_name": "Min",
            "last_name": "Park",
            "email": "min.park@example.com",
            "hire_date": "2024-02-01",
            "password": "Str0ng!Pass",
            "company_id": org.c1,
            "sub_company_id": org.s1,
            "department_id": org.d1,
            "position_id": org.p1,
        }

        response = await client.post("/api/employees/", json=payload, headers=headers_for(admin))
        assert response.status_code == status.HTTP_201_CREATED

        data = response.json()
        assert data["email"] == "min.park@example.com"
        assert data["employee_code"].startswith("EMP")
        assert "password" not in data
        assert "hashed_password" not in data

    async def test_employee_cannot_create(self, client: AsyncClient, org, make_employee, headers_for):
        employee = await make_employee()
        payload = {
            "first_name": "Min",
            "last_name": "Park",
            "email": "min.park@example.com",
            "hire_date": "2024-02-01",
            "password": "Str0ng!Pass",
            "company_id": org.c1,
            "sub_company_id": org.s1,
            "department_id": org.d1,
            "position_id": org.p1,
        }
        response = await client.post("/api/employees/", json=payload, headers=headers_for(employee))
        assert response.status_code == status.HTTP_403_FORBIDDEN

    async def test_list_employees(self, client: AsyncClient, org, make_employee, headers_for):
        admin = await make_employee(role=UserRole.ADMIN)
        await make_employee(department_id=org.d2, position_id=org.p3)

        response = await client.get(
            "/api/employees/", params={"department_id": org.d2}, headers=headers_for(admin)
        )
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["count"] == 1
        assert data["data"][0]["department_name"] == "Sales"

    async def test_employee_reads_only_self(self, client: AsyncClient, make_employee, headers_for):
        employee = await make_employee()
        other = await make_employee()
        headers = headers_for(employee)

        response = await client.get(f"/api/employees/{employee.id}", headers=headers)
        assert response.status_code == status.HTTP_200_OK

        response = await client.get(f"/api/employees/{other.id}", headers=headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN

    async def test_delete_employee(self, client: AsyncClient, make_employee, headers_for):
        admin = await make_employee(role=UserRole.ADMIN)
        target = await make_employee()
        headers = headers_for(admin)

        response = await client.delete(f"/api/employees/{admin.id}", headers=headers)
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

        response = await client.delete(f"/api/employees/{target.id}", headers=headers)
        assert response.status_code == status.HTTP_200_OK

        response = await client.delete(f"/api/employees/{target.id}", headers=headers)
        assert response.status_code == status.HTTP_409_CONFLICT

        # deleted employees can no longer authenticate
        response = await client.get("/api/auth/me", headers=headers_for(target))
        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.asyncio
class TestAssignments:
    """Test transfer endpoints"""

    async def test_transfer_and_history(self, client: AsyncClient, org, make_employee, headers_for):
        manager = await make_employee(role=UserRole.MANAGER)
        target = await make_employee()
        headers = headers_for(manager)

        response = await client.post(
            f"/api/assignments/{target.id}/transfer",
            json={"sub_company_id": org.s2, "department_id": org.d3, "position_id": org.p4},
            headers=headers,
        )
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["assignment"]["assignment_type"] == "COMPREHENSIVE"
        assert data["message"] == "COMPREHENSIVE completed (3 changes)"

        response = await client.get(f"/api/assignments/{target.id}/history", headers=headers_for(target))
        assert response.status_code == status.HTTP_200_OK
        history = response.json()
        assert len(history) == 1
        assert history[0]["previous_department_id"] == org.d1
        assert history[0]["new_department_id"] == org.d3

    async def test_noop_transfer_is_rejected(self, client: AsyncClient, org, make_employee, headers_for):
        manager = await make_employee(role=UserRole.MANAGER)
        target = await make_employee()

        response = await client.post(
            f"/api/assignments/{target.id}/transfer",
            json={"position_id": org.p1},
            headers=headers_for(manager),
        )
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    async def test_employee_cannot_transfer(self, client: AsyncClient, org, make_employee, headers_for):
        employee = await make_employee()
        response = await client.post(
            f"/api/assignments/{employee.id}/transfer",
            json={"position_id": org.p2},
            headers=headers_for(employee),
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.asyncio
class TestOrganization:
    """Test organization endpoints"""

    async def test_create_company(self, client: AsyncClient, make_employee, headers_for):
        admin = await make_employee(role=UserRole.ADMIN)
        response = await client.post(
            "/api/organization/companies/",
            json={"company_code": "initech", "company_name": "Initech"},
            headers=headers_for(admin),
        )
        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["company_code"] == "INITECH"

    async def test_employee_cannot_write(self, client: AsyncClient, make_employee, headers_for):
        employee = await make_employee()
        response = await client.post(
            "/api/organization/companies/",
            json={"company_code": "initech", "company_name": "Initech"},
            headers=headers_for(employee),
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN

    async def test_delete_guard(self, client: AsyncClient, org, make_employee, headers_for):
        admin = await make_employee(role=UserRole.ADMIN)
        response = await client.delete(f"/api/organization/departments/{org.d1}", headers=headers_for(admin))
        assert response.status_code == status.HTTP_409_CONFLICT

    async def test_tree(self, client: AsyncClient, org, make_employee, headers_for):
        employee = await make_employee()
        response = await client.get("/api/organization/tree", headers=headers_for(employee))
        assert response.status_code == status.HTTP_200_OK

        tree = response.json()
        assert [c["company_code"] for c in tree] == ["ACME", "GLOBEX"]
        seoul = next(s for s in tree[0]["sub_companies"] if s["sub_company_code"] == "SEOUL")
        assert [d["dept_code"] for d in seoul["departments"]] == ["DEV", "SALES"]
