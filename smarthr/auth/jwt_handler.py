from typing import Any, Dict, Optional

from smarthr.core.security import verify_token
from smarthr.models.hr.employee import Employee
from smarthr.models.shared.enums import UserRole


def build_access_claims(employee: Employee) -> Dict[str, Any]:
    """Claims carried by an access token for the given employee"""
    return {
        "sub": str(employee.id),
        "employeeId": employee.id,
        "employeeCode": employee.employee_code,
        "email": employee.email,
        "role": UserRole(employee.user_role).value,
        "departmentId": employee.department_id,
        "firstName": employee.first_name,
        "lastName": employee.last_name,
    }


def build_refresh_claims(employee: Employee) -> Dict[str, Any]:
    return {"sub": str(employee.id), "employeeId": employee.id}


def _decode(token: str, token_type: str) -> Optional[dict]:
    payload = verify_token(token)
    if payload is None:
        return None

    # Check token type
    if payload.get("type") != token_type:
        return None

    if payload.get("sub") is None:
        return None

    return payload


def decode_access_token(token: str) -> Optional[dict]:
    """Decode and validate access token"""
    return _decode(token, "access")


def decode_refresh_token(token: str) -> Optional[dict]:
    """Decode and validate refresh token"""
    return _decode(token, "refresh")
