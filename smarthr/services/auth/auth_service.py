import logging
from typing import Any, Dict, Optional
from datetime import datetime, timezone
from fastapi import HTTPException, status
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from smarthr.auth.jwt_handler import build_access_claims, build_refresh_claims, decode_refresh_token
from smarthr.core.config import settings
from smarthr.core.exceptions import AccountLockedError, AuthenticationError, ValidationError
from smarthr.core.security import (
    create_access_token, create_refresh_token, get_password_hash,
    validate_password_strength, verify_password
)
from smarthr.models.hr.employee import Employee
from smarthr.schemas.auth.token import AccessTokenResponse, TokenResponse
from smarthr.schemas.hr.employee_schema import EmployeeResponse

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.max_failed_attempts = settings.LOGIN_MAX_FAILED_ATTEMPTS

    async def authenticate_employee(
        self,
        email: str,
        password: str,
        ip_address: Optional[str] = None
    ) -> Employee:
        """Check credentials and maintain the lockout counters.

        Order of checks: unknown email, locked flag, inactive account, failed
        counter at threshold, then password. The password hash is never compared
        for an account that is locked or has exhausted its attempts.
        """
        try:
            if not email or not email.strip() or not password or not password.strip():
                raise ValidationError("Email and password are required")

            employee = await self.session.scalar(
                select(Employee).where(func.lower(Employee.email) == email.strip().lower())
            )

            if not employee:
                logger.warning(f"Login failed for {email}: not registered (ip={ip_address})")
                raise AuthenticationError("Email is not registered")

            if employee.account_locked:
                logger.warning(f"Login refused for {email}: account locked (ip={ip_address})")
                raise AccountLockedError()

            if not employee.is_active:
                logger.warning(f"Login refused for {email}: account inactive (ip={ip_address})")
                raise AuthenticationError("Account is inactive")

            if (employee.login_fail_count or 0) >= self.max_failed_attempts:
                employee.account_locked = True
                await self.session.commit()
                logger.warning(f"Account locked for {email} after {employee.login_fail_count} failed attempts")
                raise AccountLockedError(
                    f"Account locked after {self.max_failed_attempts} failed login attempts"
                )

            if not verify_password(password, employee.hashed_password):
                await self._handle_failed_login(employee)
                raise AuthenticationError("Invalid email or password")

            employee.login_fail_count = 0
            employee.last_login_at = datetime.now(timezone.utc)
            await self.session.commit()

            logger.info(f"Employee {employee.employee_code} logged in (ip={ip_address})")
            return employee

        except HTTPException:
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error authenticating employee: {e}")
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Error during login: {e}")

    async def _handle_failed_login(self, employee: Employee):
        employee.login_fail_count = (employee.login_fail_count or 0) + 1
        if employee.login_fail_count >= self.max_failed_attempts:
            employee.account_locked = True
            logger.warning(
                f"Account locked for {employee.email} after {employee.login_fail_count} failed attempts"
            )
        else:
            logger.warning(
                f"Failed login for {employee.email} "
                f"({employee.login_fail_count}/{self.max_failed_attempts})"
            )
        await self.session.commit()

    def create_tokens(self, employee: Employee) -> Dict[str, Any]:
        """Create access and refresh tokens for employee"""
        return {
            "access_token": create_access_token(build_access_claims(employee)),
            "refresh_token": create_refresh_token(build_refresh_claims(employee)),
            "token_type": "bearer",
            "expires_in": int(settings.access_token_expires.total_seconds()),
        }

    async def login(self, email: str, password: str, ip_address: Optional[str] = None) -> TokenResponse:
        employee = await self.authenticate_employee(email, password, ip_address)
        await self.session.refresh(employee)
        return TokenResponse(
            **self.create_tokens(employee),
            user=EmployeeResponse.model_validate(employee),
        )

    async def refresh_access_token(self, refresh_token: str) -> AccessTokenResponse:
        payload = decode_refresh_token(refresh_token)
        if payload is None:
            raise AuthenticationError("Invalid or expired refresh token")

        employee = await self.session.scalar(
            select(Employee).where(Employee.id == int(payload["sub"]))
        )
        if not employee or not employee.is_active or employee.account_locked:
            raise AuthenticationError("Employee not found or inactive")

        return AccessTokenResponse(
            access_token=create_access_token(build_access_claims(employee)),
            expires_in=int(settings.access_token_expires.total_seconds()),
        )

    async def change_password(self, employee: Employee, current_password: str, new_password: str) -> bool:
        try:
            if not verify_password(current_password, employee.hashed_password):
                raise ValidationError("Current password is incorrect")
            if current_password == new_password:
                raise ValidationError("New password must differ from the current password")

            weakness = validate_password_strength(new_password)
            if weakness:
                raise ValidationError(weakness)

            employee.hashed_password = get_password_hash(new_password)
            employee.password_changed_at = datetime.now(timezone.utc)
            await self.session.commit()

            logger.info(f"Password changed for employee {employee.employee_code}")
            return True

        except HTTPException:
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error changing password: {e}")
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Error changing password: {e}")
