"""Role-based authorization gate, called before every staff operation."""

import enum
import logging
from uuid import UUID

from salonbook.core.exceptions import AuthorizationError
from salonbook.models.salon import MemberRole, User
from salonbook.repositories.container import Repositories

logger = logging.getLogger(__name__)


class Permission(str, enum.Enum):
    VIEW_APPOINTMENTS = "appointments:view"
    CREATE_APPOINTMENTS = "appointments:create"
    EDIT_APPOINTMENTS = "appointments:edit"
    MANAGE_WAITING_LIST = "appointments:manage_waiting_list"
    MANAGE_TIME_BLOCKS = "schedule:manage_time_blocks"
    MANAGE_BOOKING_CONFIG = "settings:manage_booking"


_ALL = frozenset(Permission)

ROLE_PERMISSIONS = {
    MemberRole.OWNER: _ALL,
    MemberRole.MANAGER: _ALL,
    MemberRole.RECEPTIONIST: frozenset({
        Permission.VIEW_APPOINTMENTS,
        Permission.CREATE_APPOINTMENTS,
        Permission.EDIT_APPOINTMENTS,
        Permission.MANAGE_WAITING_LIST,
    }),
    MemberRole.STAFF: frozenset({
        Permission.VIEW_APPOINTMENTS,
        Permission.CREATE_APPOINTMENTS,
        Permission.MANAGE_TIME_BLOCKS,
    }),
}


def role_allows(role: MemberRole, permission: Permission) -> bool:
    return permission in ROLE_PERMISSIONS.get(role, frozenset())


async def require_permission(repos: Repositories, user: User, salon_id: UUID, permission: Permission) -> None:
    """Raise AuthorizationError unless the user's role in the salon grants ``permission``."""
    membership = await repos.salons.get_membership(salon_id, user.id)
    if membership is None:
        logger.info("User %s is not a member of salon %s", user.id, salon_id)
        raise AuthorizationError("You do not have access to this salon")

    if not role_allows(membership.role, permission):
        logger.info("User %s (%s) denied %s in salon %s", user.id, membership.role.value, permission.value, salon_id)
        raise AuthorizationError(f"Permission denied: {permission.value}")
