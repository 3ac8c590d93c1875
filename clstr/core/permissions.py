from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from uuid import UUID


class Role(str, Enum):
    STUDENT = "Student"
    ALUMNI = "Alumni"
    FACULTY = "Faculty"
    CLUB = "Club"


# Legacy role names still present on older profile rows
_ROLE_ALIASES = {
    "organization": Role.ALUMNI,
    "principal": Role.FACULTY,
    "dean": Role.FACULTY,
}


def normalize_role(raw: str | None) -> Role | None:
    if not raw:
        return None

    key = raw.strip().lower()
    for role in Role:
        if role.value.lower() == key:
            return role
    return _ROLE_ALIASES.get(key)


@dataclass(frozen=True)
class Permissions:
    can_browse_mentors: bool = False
    can_request_mentorship: bool = False
    can_offer_mentorship: bool = False
    can_manage_mentorship_requests: bool = False
    can_access_notifications: bool = False
    can_message: bool = False


_ROLE_PERMISSIONS: dict[Role, Permissions] = {
    Role.STUDENT: Permissions(
        can_browse_mentors=True,
        can_request_mentorship=True,
        can_access_notifications=True,
        can_message=True,
    ),
    Role.ALUMNI: Permissions(
        can_browse_mentors=True,
        can_offer_mentorship=True,
        can_manage_mentorship_requests=True,
        can_access_notifications=True,
        can_message=True,
    ),
    Role.FACULTY: Permissions(
        can_browse_mentors=True,
        can_offer_mentorship=True,
        can_manage_mentorship_requests=True,
        can_access_notifications=True,
        can_message=True,
    ),
    Role.CLUB: Permissions(
        can_access_notifications=True,
        can_message=True,
    ),
}


@lru_cache
def permissions_for(role: str | None) -> Permissions:
    """Capability set for a raw profile role; unknown roles get nothing."""
    normalized = normalize_role(role)
    if normalized is None:
        return Permissions()
    return _ROLE_PERMISSIONS[normalized]


@dataclass(frozen=True)
class Actor:
    """The authenticated caller, with capabilities resolved once per session."""

    id: UUID
    role: Role | None
    permissions: Permissions
    college_domain: str | None = None
