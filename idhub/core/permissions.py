"""Permission table: (role, permission) -> access control strategy."""

from enum import StrEnum
from typing import assert_never

from idhub.core.acs import ACS, AccessDeniedACS, EditOwnObjectACS, GrandAccessACS
from idhub.models.enums import UserRole


class Permission(StrEnum):
    MODERATION = "moderation"
    USER_PROFILES = "user_profiles"
    OWN_PROFILE = "own_profile"


def resolve_acs(role: UserRole, permission: Permission, user_uid: str) -> ACS:
    """Return the ACS the given role gets for permission, acting as user_uid."""
    match role:
        case UserRole.ADMINISTRATOR:
            if permission is Permission.OWN_PROFILE:
                return EditOwnObjectACS(user_uid)
            return GrandAccessACS()
        case UserRole.MODERATOR:
            if permission in (Permission.MODERATION, Permission.OWN_PROFILE):
                return EditOwnObjectACS(user_uid)
            return AccessDeniedACS()
        case UserRole.JOURNALIST | UserRole.PRIVATE | UserRole.LEGAL:
            if permission is Permission.OWN_PROFILE:
                return EditOwnObjectACS(user_uid)
            return AccessDeniedACS()
        case UserRole.ANONYMOUS | UserRole.DELETED:
            return AccessDeniedACS()
        case _:
            assert_never(role)
