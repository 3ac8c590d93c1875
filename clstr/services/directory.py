from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from uuid import UUID

from clstr.core.exceptions import NotFound
from clstr.repositories.base import MentorshipStore
from clstr.schemas.mentorship import (
    BadgeStatus,
    HelpType,
    MentorHighlight,
    MentorListing,
    MentorOffer,
    Profile,
)

_ACTIVE_WINDOW = timedelta(days=30)
# "Frequently mentors students" needs this acceptance rate over at least
# _FREQUENT_MIN_REQUESTS received requests
_FREQUENT_ACCEPT_RATE = 0.7
_FREQUENT_MIN_REQUESTS = 3


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def compute_badge_status(offer: MentorOffer | None) -> BadgeStatus:
    if offer is None or not offer.is_active:
        return BadgeStatus.INACTIVE
    if offer.is_paused:
        return BadgeStatus.PAUSED
    if offer.available_slots <= offer.current_mentees:
        return BadgeStatus.SLOTS_FULL
    return BadgeStatus.AVAILABLE


def compute_highlights(offer: MentorOffer | None, now: datetime) -> list[MentorHighlight]:
    """Soft credibility signals shown on mentor cards. Not ratings."""
    if offer is None:
        return []

    highlights: list[MentorHighlight] = []

    helped = offer.total_mentees_helped
    if helped > 0:
        plural = "" if helped == 1 else "s"
        highlights.append(MentorHighlight(label=f"Helped {helped} student{plural}", icon="🎓"))

    if offer.last_active_at and now - offer.last_active_at <= _ACTIVE_WINDOW:
        highlights.append(MentorHighlight(label="Active this month", icon="✨"))

    received = offer.total_requests_received
    if received >= _FREQUENT_MIN_REQUESTS:
        if offer.total_requests_accepted / received >= _FREQUENT_ACCEPT_RATE:
            highlights.append(MentorHighlight(label="Frequently mentors students", icon="🤝"))

    return highlights


def is_accepting_requests(offer: MentorOffer | None) -> bool:
    return compute_badge_status(offer) == BadgeStatus.AVAILABLE


class MentorDirectory:
    """
    Read-only projection of mentor profiles joined with their offers.

    Rebuilt from the store on every call.
    """

    def __init__(
        self,
        store: MentorshipStore,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.store = store
        self.clock = clock

    def _listing(self, offer: MentorOffer, profile: Profile | None, now: datetime) -> MentorListing:
        profile = profile or Profile(id=offer.mentor_id)
        return MentorListing(
            mentor_id=offer.mentor_id,
            full_name=profile.full_name or "Unknown",
            avatar_url=profile.avatar_url,
            role=profile.role,
            university=profile.university,
            bio=profile.bio,
            offer=offer,
            remaining_slots=offer.remaining_slots,
            badge_status=compute_badge_status(offer),
            highlights=compute_highlights(offer, now),
        )

    def list_mentors(
        self,
        college_domain: str | None,
        help_type: HelpType | None = None,
    ) -> list[MentorListing]:
        """Active, unpaused mentors of a college, including those whose slots are full."""
        if not college_domain:
            return []

        offers = [
            offer
            for offer in self.store.list_offers(college_domain)
            if offer.is_active
            and not offer.is_paused
            and (help_type is None or offer.help_type == help_type)
        ]
        if not offers:
            return []

        profiles = self.store.get_profiles(o.mentor_id for o in offers)
        now = self.clock()
        listings = [self._listing(o, profiles.get(o.mentor_id), now) for o in offers]
        listings.sort(key=lambda m: (m.remaining_slots == 0, m.full_name.lower()))
        return listings

    def lookup_mentor(self, mentor_id: UUID) -> MentorListing:
        offer = self.store.get_offer(mentor_id)
        if offer is None:
            raise NotFound("Mentor not found.")

        return self._listing(offer, self.store.get_profile(mentor_id), self.clock())

    def find_alternative_mentor(
        self,
        college_domain: str | None,
        exclude_mentor_id: UUID,
        help_type: HelpType | None = None,
    ) -> MentorListing | None:
        """Best available mentor other than ``exclude_mentor_id``; proven mentors first."""
        candidates = [
            m
            for m in self.list_mentors(college_domain, help_type)
            if m.mentor_id != exclude_mentor_id and m.badge_status == BadgeStatus.AVAILABLE
        ]
        if not candidates:
            return None

        candidates.sort(key=lambda m: m.offer.total_mentees_helped, reverse=True)
        return candidates[0]
