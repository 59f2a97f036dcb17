import pytest
from sqlalchemy import select

from smarthr.core.config import settings
from smarthr.core.exceptions import AccountLockedError, AuthenticationError, ValidationError
from smarthr.core.security import verify_password
from smarthr.auth.jwt_handler import decode_access_token
from smarthr.models.hr.employee import Employee
from smarthr.services.auth.auth_service import AuthService


async def _reload(session, employee_id):
    return await session.scalar(
        select(Employee).where(Employee.id == employee_id).execution_options(populate_existing=True)
    )


class TestAuthenticate:
    async def test_login_returns_tokens_and_resets_counter(self, session, make_employee, default_password):
        employee = await make_employee(email="alice@example.com", login_fail_count=2)
        employee_id = employee.id

        tokens = await AuthService(session).login("Alice@Example.com", default_password, "127.0.0.1")

        claims = decode_access_token(tokens.access_token)
        assert claims["employeeId"] == employee_id
        assert claims["email"] == "alice@example.com"
        assert claims["role"] == "employee"
        assert claims["iss"] == settings.JWT_ISSUER
        assert tokens.user.id == employee_id

        employee = await _reload(session, employee_id)
        assert employee.login_fail_count == 0
        assert employee.last_login_at is not None

    async def test_unknown_email(self, session, make_employee, default_password):
        await make_employee()
        with pytest.raises(AuthenticationError) as exc:
            await AuthService(session).authenticate_employee("ghost@example.com", default_password)
        assert exc.value.detail == "Email is not registered"

    async def test_blank_credentials(self, session):
        with pytest.raises(ValidationError):
            await AuthService(session).authenticate_employee(" ", "")

    async def test_wrong_password_counts_and_locks(self, session, make_employee, default_password):
        employee = await make_employee(email="bob@example.com")
        employee_id = employee.id
        service = AuthService(session)

        for attempt in range(1, settings.LOGIN_MAX_FAILED_ATTEMPTS):
            with pytest.raises(AuthenticationError):
                await service.authenticate_employee("bob@example.com", "wrong")
            employee = await _reload(session, employee_id)
            assert employee.login_fail_count == attempt
            assert employee.account_locked is False

        with pytest.raises(AuthenticationError):
            await service.authenticate_employee("bob@example.com", "wrong")
        employee = await _reload(session, employee_id)
        assert employee.account_locked is True

        # even the right password is refused once locked
        with pytest.raises(AccountLockedError):
            await service.authenticate_employee("bob@example.com", default_password)

    async def test_threshold_reached_locks_before_password_check(self, session, make_employee, default_password):
        employee = await make_employee(
            email="carol@example.com", login_fail_count=settings.LOGIN_MAX_FAILED_ATTEMPTS
        )
        employee_id = employee.id

        with pytest.raises(AccountLockedError):
            await AuthService(session).authenticate_employee("carol@example.com", default_password)
        employee = await _reload(session, employee_id)
        assert employee.account_locked is True

    async def test_inactive_account(self, session, make_employee, default_password):
        await make_employee(email="dave@example.com", is_active=False)
        with pytest.raises(AuthenticationError):
            await AuthService(session).authenticate_employee("dave@example.com", default_password)


class TestTokensAndPasswords:
    async def test_refresh_issues_new_access_token(self, session, make_employee, refresh_for):
        employee = await make_employee()
        response = await AuthService(session).refresh_access_token(refresh_for(employee))
        assert decode_access_token(response.access_token)["employeeId"] == employee.id

    async def test_access_token_is_not_a_refresh_token(self, session, make_employee, headers_for):
        employee = await make_employee()
        access = headers_for(employee)["Authorization"].split()[1]
        with pytest.raises(AuthenticationError):
            await AuthService(session).refresh_access_token(access)

    async def test_change_password(self, session, make_employee, default_password):
        employee = await make_employee()
        service = AuthService(session)

        with pytest.raises(ValidationError):
            await service.change_password(employee, "not-current", "N3w-Passw0rd")
        employee = await _reload(session, employee.id)
        with pytest.raises(ValidationError):
            await service.change_password(employee, default_password, "weakpass")

        employee = await _reload(session, employee.id)
        assert await service.change_password(employee, default_password, "N3w-Passw0rd") is True
        employee = await _reload(session, employee.id)
        assert verify_password("N3w-Passw0rd", employee.hashed_password)
        assert employee.password_changed_at is not None
