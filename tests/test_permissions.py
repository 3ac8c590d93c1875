import pytest

from clstr.core.permissions import Role, normalize_role, permissions_for


@pytest.mark.parametrize(
    "raw, role",
    [
        ("Student", Role.STUDENT),
        ("alumni", Role.ALUMNI),
        (" Faculty ", Role.FACULTY),
        ("Organization", Role.ALUMNI),
        ("Principal", Role.FACULTY),
        ("Club", Role.CLUB),
        ("astronaut", None),
        (None, None),
    ],
)
def test_normalize_role(raw, role):
    assert normalize_role(raw) == role


def test_student_requests_but_never_offers():
    perms = permissions_for("Student")
    assert perms.can_browse_mentors and perms.can_request_mentorship
    assert not perms.can_offer_mentorship
    assert not perms.can_manage_mentorship_requests


@pytest.mark.parametrize("role", ["Alumni", "Faculty"])
def test_mentors_offer_but_never_request(role):
    perms = permissions_for(role)
    assert perms.can_offer_mentorship and perms.can_manage_mentorship_requests
    assert not perms.can_request_mentorship


def test_club_has_no_mentorship():
    perms = permissions_for("Club")
    assert not perms.can_browse_mentors
    assert not perms.can_request_mentorship
    assert not perms.can_offer_mentorship
    assert perms.can_access_notifications


def test_unknown_role_gets_nothing():
    perms = permissions_for("astronaut")
    assert not any(vars(perms).values())
