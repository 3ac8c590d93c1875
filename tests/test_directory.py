from datetime import timedelta
from uuid import uuid4

from clstr.schemas.mentorship import BadgeStatus, HelpType, MentorOffer, MentorOfferUpdate
from clstr.services.directory import (
    MentorDirectory,
    compute_badge_status,
    compute_highlights,
    is_accepting_requests,
)

from conftest import add_user


def _offer(**fields) -> MentorOffer:
    return MentorOffer(mentor_id=uuid4(), **fields)


def test_badge_status():
    assert compute_badge_status(None) == BadgeStatus.INACTIVE
    assert compute_badge_status(_offer(is_active=False)) == BadgeStatus.INACTIVE
    assert compute_badge_status(_offer(is_paused=True)) == BadgeStatus.PAUSED
    assert compute_badge_status(_offer(available_slots=2, current_mentees=2)) == BadgeStatus.SLOTS_FULL
    assert compute_badge_status(_offer(available_slots=2, current_mentees=1)) == BadgeStatus.AVAILABLE

    assert is_accepting_requests(_offer())
    assert not is_accepting_requests(_offer(is_paused=True))


def test_highlights(clock):
    now = clock()
    offer = _offer(
        total_mentees_helped=1,
        last_active_at=now - timedelta(days=3),
        total_requests_received=4,
        total_requests_accepted=3,
    )

    labels = [h.label for h in compute_highlights(offer, now)]

    assert labels == ["Helped 1 student", "Active this month", "Frequently mentors students"]


def test_highlights_quiet_mentor(clock):
    now = clock()
    offer = _offer(
        last_active_at=now - timedelta(days=45),
        total_requests_received=10,
        total_requests_accepted=2,
    )

    assert compute_highlights(offer, now) == []
    assert compute_highlights(None, now) == []


def test_list_mentors_scoped_and_sorted(store, service, clock):
    zed = add_user(store, "Alumni", "Zed")
    amy = add_user(store, "Faculty", "Amy")
    full = add_user(store, "Alumni", "Bob")
    paused = add_user(store, "Alumni", "Pat")
    outsider = add_user(store, "Alumni", "Olga", college_domain="other.edu")

    service.save_offer(zed, MentorOfferUpdate(help_type=HelpType.CAREER_ADVICE))
    service.save_offer(amy, MentorOfferUpdate())
    service.save_offer(full, MentorOfferUpdate(available_slots=0))
    service.save_offer(paused, MentorOfferUpdate(is_paused=True))
    service.save_offer(outsider, MentorOfferUpdate())

    directory = MentorDirectory(store, clock)
    listings = directory.list_mentors("uni.edu")

    assert [m.full_name for m in listings] == ["Amy", "Zed", "Bob"]
    assert listings[-1].badge_status == BadgeStatus.SLOTS_FULL
    assert listings[-1].remaining_slots == 0

    career = directory.list_mentors("uni.edu", HelpType.CAREER_ADVICE)
    assert [m.full_name for m in career] == ["Zed"]

    assert directory.list_mentors(None) == []


def test_find_alternative_mentor_prefers_experience(store, service, clock):
    current = add_user(store, "Alumni", "Current")
    rookie = add_user(store, "Alumni", "Rookie")
    veteran = add_user(store, "Alumni", "Veteran")
    for actor in (current, rookie, veteran):
        service.save_offer(actor, MentorOfferUpdate())
    store.update_offer_if(veteran.id, {}, {"total_mentees_helped": 7})

    directory = MentorDirectory(store, clock)
    alternative = directory.find_alternative_mentor("uni.edu", exclude_mentor_id=current.id)

    assert alternative.mentor_id == veteran.id
    assert directory.find_alternative_mentor("nowhere.edu", current.id) is None
