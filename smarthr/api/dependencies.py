import logging
from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from smarthr.auth.jwt_handler import decode_access_token
from smarthr.auth.permissions import PermissionChecker
from smarthr.core.database import get_async_session
from smarthr.core.exceptions import AuthenticationError
from smarthr.models.hr.employee import Employee
from smarthr.models.shared.enums import UserRole

security = HTTPBearer(auto_error=False)
logger = logging.getLogger(__name__)

async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(security),
    session: AsyncSession = Depends(get_async_session)
) -> Employee:
    """Get current authenticated employee"""
    try:
        if credentials is None:
            raise AuthenticationError("Not authenticated")

        # Decode token
        payload = decode_access_token(credentials.credentials)
        if payload is None:
            raise AuthenticationError("Invalid or expired token")

        employee_id = int(payload.get("sub"))

        employee = await session.scalar(select(Employee).where(Employee.id == employee_id))
        if employee is None or not employee.is_active:
            raise AuthenticationError("Employee not found or inactive")
        if employee.account_locked:
            raise AuthenticationError("Account is locked")

        # Add request info to context
        request.state.current_user = employee
        return employee

    except HTTPException:
        raise
    except ValueError:
        raise AuthenticationError("Invalid authentication credentials")
    except Exception as e:
        logger.error(f"Authentication failed: {e}")
        raise AuthenticationError("Authentication failed")

def require_roles(*roles: UserRole):
    """
    Dependency to require one of the given roles for an endpoint

    Examples:
        require_roles(UserRole.ADMIN)                     # admin only
        require_roles(UserRole.ADMIN, UserRole.MANAGER)   # admin or manager
    """
    async def role_dependency(current_user: Employee = Depends(get_current_user)) -> Employee:
        PermissionChecker(current_user).require_role(*roles)
        return current_user

    return role_dependency

require_admin = require_roles(UserRole.ADMIN)
require_admin_or_manager = require_roles(UserRole.ADMIN, UserRole.MANAGER)
