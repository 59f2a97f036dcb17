# smarthr/auth/permissions.py

import logging
from smarthr.core.exceptions import UnauthorizedError
from smarthr.models.hr.employee import Employee
from smarthr.models.shared.enums import UserRole

logger = logging.getLogger(__name__)

PRIVILEGED_ROLES = (UserRole.ADMIN, UserRole.MANAGER)


class PermissionChecker:
    """
    Role based checks for the acting employee
    """

    def __init__(self, actor: Employee):
        self.actor = actor
        self.role = UserRole(actor.user_role)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_privileged(self) -> bool:
        return self.role in PRIVILEGED_ROLES

    def has_role(self, *roles: UserRole) -> bool:
        return self.role in roles

    def require_role(self, *roles: UserRole) -> None:
        if not self.has_role(*roles):
            logger.debug(f"Role check failed for employee {self.actor.id}: {self.role.value} not in {[r.value for r in roles]}")
            raise UnauthorizedError(
                f"Insufficient permissions. Required role: {', '.join(r.value for r in roles)}"
            )

    def require_self_or_privileged(self, employee_id: int) -> None:
        """Employees may act on their own record; admins and managers on anyone's"""
        if self.actor.id != employee_id and not self.is_privileged:
            raise UnauthorizedError("You can only access your own information")
