import os

# Settings are read at import time
os.environ["JWT_SECRET"] = "test-secret-key"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["LOG_TO_FILE"] = "false"
os.environ["BCRYPT_SALT_ROUNDS"] = "4"
os.environ["ENVIRONMENT"] = "test"

import pytest
from datetime import date
from types import SimpleNamespace
from typing import AsyncGenerator
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from smarthr.main import app
from smarthr.auth.jwt_handler import build_access_claims, build_refresh_claims
from smarthr.core.database import get_async_session
from smarthr.core.security import create_access_token, create_refresh_token, get_password_hash
from smarthr.models.base import Base
import smarthr.models  # noqa: F401
from smarthr.models.approval.approval_form import ApprovalForm
from smarthr.models.approval.approval_member import ApprovalMember
from smarthr.models.hr.employee import Employee
from smarthr.models.organization.company import Company
from smarthr.models.organization.department import Department
from smarthr.models.organization.position import Position
from smarthr.models.organization.sub_company import SubCompany
from smarthr.models.shared.enums import UserRole

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
DEFAULT_PASSWORD = "Passw0rd!"


@pytest.fixture
async def engine():
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as db_session:
        yield db_session


@pytest.fixture
async def client(session_maker) -> AsyncGenerator[AsyncClient, None]:
    """Test client bound to the per-test database"""
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as db_session:
            yield db_session

    app.dependency_overrides[get_async_session] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def org(session: AsyncSession) -> SimpleNamespace:
    """Two companies; the first has two sub-companies, the first of which has two departments.

    Returns the ids of every node.
    """
    c1 = Company(company_code="ACME", company_name="Acme", is_active=True)
    c2 = Company(company_code="GLOBEX", company_name="Globex", is_active=True)
    session.add_all([c1, c2])
    await session.flush()

    s1 = SubCompany(company_id=c1.id, sub_company_code="SEOUL", sub_company_name="Seoul", is_active=True)
    s2 = SubCompany(company_id=c1.id, sub_company_code="BUSAN", sub_company_name="Busan", is_active=True)
    s3 = SubCompany(company_id=c2.id, sub_company_code="HQ", sub_company_name="Globex HQ", is_active=True)
    session.add_all([s1, s2, s3])
    await session.flush()

    d1 = Department(sub_company_id=s1.id, dept_code="DEV", dept_name="Development", is_active=True)
    d2 = Department(sub_company_id=s1.id, dept_code="SALES", dept_name="Sales", is_active=True)
    d3 = Department(sub_company_id=s2.id, dept_code="OPS", dept_name="Operations", is_active=True)
    d4 = Department(sub_company_id=s3.id, dept_code="HR", dept_name="Human Resources", is_active=True)
    session.add_all([d1, d2, d3, d4])
    await session.flush()

    p1 = Position(department_id=d1.id, pos_code="ENG", pos_name="Engineer", pos_grade=5, is_active=True)
    p2 = Position(department_id=d1.id, pos_code="LEAD", pos_name="Lead Engineer", pos_grade=3, is_active=True)
    p3 = Position(department_id=d2.id, pos_code="REP", pos_name="Sales Rep", pos_grade=5, is_active=True)
    p4 = Position(department_id=d3.id, pos_code="OPR", pos_name="Operator", pos_grade=5, is_active=True)
    p5 = Position(department_id=d4.id, pos_code="HRM", pos_name="HR Manager", pos_grade=2, is_active=True)
    session.add_all([p1, p2, p3, p4, p5])
    await session.commit()

    return SimpleNamespace(
        c1=c1.id, c2=c2.id,
        s1=s1.id, s2=s2.id, s3=s3.id,
        d1=d1.id, d2=d2.id, d3=d3.id, d4=d4.id,
        p1=p1.id, p2=p2.id, p3=p3.id, p4=p4.id, p5=p5.id,
    )


@pytest.fixture
def make_employee(session: AsyncSession, org: SimpleNamespace):
    """Factory inserting an active employee placed at Acme/Seoul/Development/Engineer by default"""
    counter = {"n": 0}

    async def _make(
        role: UserRole = UserRole.EMPLOYEE,
        email: str = None,
        password: str = DEFAULT_PASSWORD,
        company_id: int = None,
        sub_company_id: int = None,
        department_id: int = None,
        position_id: int = None,
        **fields
    ) -> Employee:
        counter["n"] += 1
        n = counter["n"]
        values = dict(
            employee_code=f"T{n:05d}",
            first_name="Test",
            last_name=f"User{n}",
            hire_date=date(2020, 1, 1),
            login_fail_count=0,
            account_locked=False,
            is_active=True,
        )
        values.update(fields)
        employee = Employee(
            email=email or f"user{n}@example.com",
            hashed_password=get_password_hash(password),
            user_role=role,
            company_id=company_id or org.c1,
            sub_company_id=sub_company_id or org.s1,
            department_id=department_id or org.d1,
            position_id=position_id or org.p1,
            **values
        )
        session.add(employee)
        await session.commit()
        await session.refresh(employee)
        return employee

    return _make


@pytest.fixture
def make_form(session: AsyncSession):
    async def _make(
        form_code: str = "GENERAL",
        approval_line: str = "DEPT_MANAGER,HR_MANAGER",
        required_fields: str = None,
        is_active: bool = True
    ) -> ApprovalForm:
        form = ApprovalForm(
            form_code=form_code,
            form_name=form_code.title(),
            required_fields=required_fields,
            auto_approval_line=approval_line,
            max_approval_level=len(approval_line.split(",")),
            is_active=is_active,
        )
        session.add(form)
        await session.commit()
        await session.refresh(form)
        return form

    return _make


@pytest.fixture
def add_member(session: AsyncSession):
    async def _add(role_code: str, employee_id: int, department_id: int = None) -> ApprovalMember:
        member = ApprovalMember(
            role_code=role_code, employee_id=employee_id, department_id=department_id,
            added_by=employee_id, is_active=True
        )
        session.add(member)
        await session.commit()
        return member

    return _add


def auth_headers(employee: Employee) -> dict:
    return {"Authorization": f"Bearer {create_access_token(build_access_claims(employee))}"}


def refresh_token_for(employee: Employee) -> str:
    return create_refresh_token(build_refresh_claims(employee))


@pytest.fixture
def headers_for():
    return auth_headers


@pytest.fixture
def refresh_for():
    return refresh_token_for


@pytest.fixture
def default_password():
    return DEFAULT_PASSWORD
