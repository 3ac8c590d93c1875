"""
Mentorship request lifecycle.

    pending  -> accepted | rejected | cancelled
    accepted -> completed | cancelled
    rejected, cancelled, completed are terminal

Every status change is a conditional write on the request's current status,
so concurrent actors cannot both win. The mentor's ``current_mentees``
counter is only touched through compare-and-set loops on the offer row. On
accept the slot is reserved first and released again if the status write
loses, which keeps ``0 <= current_mentees <= available_slots`` at every
instant.

Retrying a transition that already happened raises ``AlreadyApplied`` and
never repeats slot accounting.
"""

import logging
from collections.abc import Callable, Mapping
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID, uuid4

from fastapi.encoders import jsonable_encoder

from clstr.core.config import settings
from clstr.core.exceptions import (
    AlreadyApplied,
    BackendUnavailable,
    DuplicateActiveRequest,
    InvalidRequest,
    InvalidTransition,
    MentorUnavailable,
    MentorshipError,
    NotAuthorized,
    NotFound,
    SlotsExhausted,
)
from clstr.core.notifications import Notifier
from clstr.core.permissions import Actor
from clstr.core.realtime import InvalidationRouter
from clstr.repositories.base import MentorshipStore
from clstr.schemas.mentorship import (
    MentorListing,
    MentorOffer,
    MentorOfferUpdate,
    MentorshipRequest,
    RequestStatus,
)
from clstr.schemas.notification import NotificationType
from clstr.schemas.realtime import ChangeEvent, ChangeType
from clstr.services.directory import MentorDirectory, is_accepting_requests

log = logging.getLogger(__name__)

TRANSITIONS: dict[RequestStatus, frozenset[RequestStatus]] = {
    RequestStatus.PENDING: frozenset(
        {RequestStatus.ACCEPTED, RequestStatus.REJECTED, RequestStatus.CANCELLED}
    ),
    RequestStatus.ACCEPTED: frozenset({RequestStatus.COMPLETED, RequestStatus.CANCELLED}),
    RequestStatus.REJECTED: frozenset(),
    RequestStatus.CANCELLED: frozenset(),
    RequestStatus.COMPLETED: frozenset(),
}


def can_transition(current: RequestStatus, target: RequestStatus) -> bool:
    return target in TRANSITIONS[current]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MentorshipService:
    def __init__(
        self,
        store: MentorshipStore,
        notifier: Notifier | None = None,
        events: InvalidationRouter | None = None,
        clock: Callable[[], datetime] = _utcnow,
        expiry_days: int = settings.MENTORSHIP_EXPIRY_DAYS,
        slot_retries: int = settings.SLOT_UPDATE_RETRIES,
    ) -> None:
        self.store = store
        self.notifier = notifier or Notifier(store, clock)
        self.events = events
        self.clock = clock
        self.expiry = timedelta(days=expiry_days)
        self.slot_retries = slot_retries
        self.directory = MentorDirectory(store, clock)

    # ==================================================================
    # Helpers
    # ==================================================================

    def _get_request(self, request_id: UUID) -> MentorshipRequest:
        request = self.store.get_request(request_id)
        if request is None:
            raise NotFound("Request not found.")
        return request

    def _display_name(self, user_id: UUID, fallback: str) -> str:
        try:
            profile = self.store.get_profile(user_id)
        except MentorshipError as e:
            log.warning("Profile lookup for %s failed: %s", user_id, e)
            return fallback
        return profile.full_name if profile and profile.full_name else fallback

    def _require_mentor(self, actor: Actor, request: MentorshipRequest, verb: str) -> None:
        if actor.id != request.mentor_id:
            raise NotAuthorized(f"Only the mentor can {verb} this request.")
        if not actor.permissions.can_manage_mentorship_requests:
            raise NotAuthorized("Your account type cannot manage mentorship requests.")

    def _check_transition(
        self,
        request: MentorshipRequest,
        source: RequestStatus,
        target: RequestStatus,
    ) -> None:
        if request.status == target:
            raise AlreadyApplied(f"Request is already {target.value}.")
        if request.status != source or not can_transition(source, target):
            raise InvalidTransition(
                f"Cannot move a {request.status.value} request to {target.value}.",
                details={"status": request.status.value},
            )

    def _apply_transition(
        self,
        request: MentorshipRequest,
        target: RequestStatus,
        extra: Mapping[str, Any] | None = None,
    ) -> MentorshipRequest:
        changes = {"status": target, "updated_at": self.clock(), **(extra or {})}
        updated = self.store.update_request_if(
            request.id, {"status": request.status}, changes
        )
        if updated is None:
            self._raise_lost_race(request.id, target)

        log.info(
            "Mentorship request %s: %s -> %s",
            request.id,
            request.status.value,
            target.value,
        )
        self._publish_request(updated, previous=request.status)
        return updated

    def _raise_lost_race(self, request_id: UUID, target: RequestStatus) -> None:
        current = self.store.get_request(request_id)
        if current is not None and current.status == target:
            raise AlreadyApplied(f"Request is already {target.value}.")

        log.warning("Transition of %s to %s lost a concurrent update", request_id, target.value)
        raise InvalidTransition(
            "Request was updated by someone else; refresh and try again.",
            details={"status": current.status.value if current else None},
        )

    def _publish_request(
        self, request: MentorshipRequest, previous: RequestStatus | None = None
    ) -> None:
        if self.events is None:
            return
        self.events.publish(
            ChangeEvent(
                type=ChangeType.INSERT if previous is None else ChangeType.UPDATE,
                table="mentorship_requests",
                record=jsonable_encoder(request),
                old_record={"status": previous.value} if previous else None,
            )
        )

    def _publish_offer(self, offer: MentorOffer) -> None:
        if self.events is None:
            return
        self.events.publish(
            ChangeEvent(
                type=ChangeType.UPDATE,
                table="mentorship_offers",
                record=jsonable_encoder(offer),
            )
        )

    # --- Slot accounting ---------------------------------------------

    def _reserve_slot(self, mentor_id: UUID) -> MentorOffer:
        for _ in range(self.slot_retries):
            offer = self.store.get_offer(mentor_id)
            if offer is None:
                raise NotFound("Mentor offer not found.")
            if offer.current_mentees >= offer.available_slots:
                raise SlotsExhausted("This mentor has no open mentorship slots.")

            updated = self.store.update_offer_if(
                mentor_id,
                {
                    "current_mentees": offer.current_mentees,
                    "available_slots": offer.available_slots,
                },
                {"current_mentees": offer.current_mentees + 1, "updated_at": self.clock()},
            )
            if updated is not None:
                return updated
            log.warning("Slot reservation for mentor %s raced; retrying", mentor_id)

        raise BackendUnavailable("Could not update mentor capacity; please retry.")

    def _release_slot(self, mentor_id: UUID) -> None:
        for _ in range(self.slot_retries):
            offer = self.store.get_offer(mentor_id)
            if offer is None:
                log.warning("Mentor %s has no offer; no slot to release", mentor_id)
                return
            if offer.current_mentees == 0:
                log.warning("Mentor %s has no mentees; no slot to release", mentor_id)
                return

            updated = self.store.update_offer_if(
                mentor_id,
                {"current_mentees": offer.current_mentees},
                {"current_mentees": offer.current_mentees - 1, "updated_at": self.clock()},
            )
            if updated is not None:
                return
            log.warning("Slot release for mentor %s raced; retrying", mentor_id)

        raise BackendUnavailable("Could not update mentor capacity; please retry.")

    def _bump_offer(
        self,
        mentor_id: UUID,
        mutate: Callable[[MentorOffer], dict[str, Any]],
    ) -> None:
        """Best-effort update of the offer's soft statistics."""
        try:
            for _ in range(self.slot_retries):
                offer = self.store.get_offer(mentor_id)
                if offer is None:
                    return
                changes = mutate(offer)
                expected = {
                    column: getattr(offer, column)
                    for column in changes
                    if isinstance(getattr(offer, column), int)
                }
                if self.store.update_offer_if(
                    mentor_id, expected, {**changes, "updated_at": self.clock()}
                ):
                    return
            log.warning("Gave up updating statistics for mentor %s", mentor_id)
        except MentorshipError as e:
            log.warning("Statistics update for mentor %s failed: %s", mentor_id, e)

    def _record_response(self, request: MentorshipRequest, accepted: bool) -> None:
        now = self.clock()
        hours = max(0.0, (now - request.created_at).total_seconds() / 3600)

        def mutate(offer: MentorOffer) -> dict[str, Any]:
            # averaged over answered requests only; pending ones have no response time
            responded = offer.total_requests_responded
            if offer.avg_response_hours is None or responded == 0:
                avg = hours
            else:
                avg = (offer.avg_response_hours * responded + hours) / (responded + 1)
            changes: dict[str, Any] = {
                "avg_response_hours": round(avg, 2),
                "total_requests_responded": responded + 1,
                "last_active_at": now,
            }
            if accepted:
                changes["total_requests_accepted"] = offer.total_requests_accepted + 1
            return changes

        self._bump_offer(request.mentor_id, mutate)

    # ==================================================================
    # Requests
    # ==================================================================

    def create_request(
        self,
        actor: Actor,
        mentor_id: UUID,
        topic: str,
        message: str | None = None,
    ) -> MentorshipRequest:
        if not actor.permissions.can_request_mentorship:
            raise NotAuthorized("Your account type cannot request mentorship.")
        if mentor_id == actor.id:
            raise InvalidRequest("Cannot request mentorship from yourself.")
        if not topic or not topic.strip():
            raise InvalidRequest("A topic is required.")

        offer = self.store.get_offer(mentor_id)
        if offer is None or (
            actor.college_domain
            and offer.college_domain
            and offer.college_domain != actor.college_domain
        ):
            raise NotFound("Mentor not found.")
        if not offer.is_active or offer.is_paused:
            raise MentorUnavailable("This mentor is not accepting requests right now.")
        if self.store.find_active_request(actor.id, mentor_id):
            raise DuplicateActiveRequest(
                "You already have a pending or active mentorship with this mentor."
            )
        if offer.current_mentees >= offer.available_slots:
            raise SlotsExhausted("This mentor has no open mentorship slots.")

        now = self.clock()
        request = self.store.insert_request(
            MentorshipRequest(
                id=uuid4(),
                mentee_id=actor.id,
                mentor_id=mentor_id,
                college_domain=offer.college_domain or actor.college_domain,
                topics=[topic.strip()],
                message=(message or "").strip() or None,
                status=RequestStatus.PENDING,
                auto_expired=False,
                created_at=now,
                updated_at=now,
            )
        )
        log.info("Mentorship request %s created: %s -> %s", request.id, actor.id, mentor_id)

        self._bump_offer(
            mentor_id,
            lambda o: {"total_requests_received": o.total_requests_received + 1},
        )
        mentee_name = self._display_name(actor.id, "A student")
        self.notifier.notify(
            recipient_id=mentor_id,
            notification_type=NotificationType.MENTORSHIP,
            content=f"{mentee_name} sent you a mentorship request.",
            related_id=request.id,
            actor_id=actor.id,
        )
        self._publish_request(request)
        return request

    def accept(self, actor: Actor, request_id: UUID) -> MentorshipRequest:
        request = self._get_request(request_id)
        self._require_mentor(actor, request, "accept")
        self._check_transition(request, RequestStatus.PENDING, RequestStatus.ACCEPTED)

        self._reserve_slot(request.mentor_id)
        now = self.clock()
        try:
            updated = self._apply_transition(
                request,
                RequestStatus.ACCEPTED,
                {"accepted_at": now, "responded_at": request.responded_at or now},
            )
        except (AlreadyApplied, InvalidTransition):
            self._release_slot(request.mentor_id)
            raise
        except BackendUnavailable:
            self._settle_uncertain_accept(request)
            raise

        self._record_response(request, accepted=True)
        try:
            self.store.ensure_accepted_connection(
                request.mentor_id, request.mentee_id, "Connected via mentorship"
            )
        except MentorshipError as e:
            log.warning("Could not connect %s and %s: %s", request.mentor_id, request.mentee_id, e)

        mentor_name = self._display_name(request.mentor_id, "A mentor")
        self.notifier.notify(
            recipient_id=request.mentee_id,
            notification_type=NotificationType.MENTORSHIP,
            content=f"{mentor_name} accepted your mentorship request!",
            related_id=request.id,
            actor_id=actor.id,
        )
        return updated

    def _settle_uncertain_accept(self, request: MentorshipRequest) -> None:
        # The status write may or may not have landed; keep the slot only if it did
        try:
            current = self.store.get_request(request.id)
        except BackendUnavailable:
            log.error(
                "Could not verify accept of %s; slot for mentor %s left reserved",
                request.id,
                request.mentor_id,
            )
            return
        if current is None or current.status != RequestStatus.ACCEPTED:
            self._release_slot(request.mentor_id)

    def reject(
        self,
        actor: Actor,
        request_id: UUID,
        suggested_mentor_id: UUID | None = None,
    ) -> MentorshipRequest:
        request = self._get_request(request_id)
        self._require_mentor(actor, request, "reject")
        self._check_transition(request, RequestStatus.PENDING, RequestStatus.REJECTED)

        extra: dict[str, Any] = {"responded_at": request.responded_at or self.clock()}
        if suggested_mentor_id is not None:
            if suggested_mentor_id in (request.mentor_id, request.mentee_id):
                raise InvalidRequest("Suggest a mentor other than yourself or the student.")
            if self.store.get_offer(suggested_mentor_id) is None:
                raise NotFound("Suggested mentor not found.")
            extra["suggested_mentor_id"] = suggested_mentor_id

        updated = self._apply_transition(request, RequestStatus.REJECTED, extra)
        self._record_response(request, accepted=False)

        mentor_name = self._display_name(request.mentor_id, "A mentor")
        content = f"{mentor_name} was unable to accept your mentorship request at this time."
        if suggested_mentor_id is not None:
            content += " They suggested another mentor for you."
        self.notifier.notify(
            recipient_id=request.mentee_id,
            notification_type=NotificationType.MENTORSHIP,
            content=content,
            related_id=request.id,
            actor_id=actor.id,
        )
        return updated

    def cancel_pending(self, actor: Actor, request_id: UUID) -> MentorshipRequest:
        request = self._get_request(request_id)
        if actor.id not in (request.mentee_id, request.mentor_id):
            raise NotAuthorized("Only the student or the mentor can cancel this request.")
        self._check_transition(request, RequestStatus.PENDING, RequestStatus.CANCELLED)

        updated = self._apply_transition(request, RequestStatus.CANCELLED)

        if actor.id == request.mentee_id:
            name = self._display_name(request.mentee_id, "A student")
            recipient = request.mentor_id
            content = f"{name} withdrew their mentorship request."
        else:
            name = self._display_name(request.mentor_id, "A mentor")
            recipient = request.mentee_id
            content = f"{name} cancelled your pending mentorship request."
        self.notifier.notify(
            recipient_id=recipient,
            notification_type=NotificationType.MENTORSHIP,
            content=content,
            related_id=request.id,
            actor_id=actor.id,
        )
        return updated

    def cancel_accepted(self, actor: Actor, request_id: UUID) -> MentorshipRequest:
        request = self._get_request(request_id)
        if actor.id != request.mentee_id:
            raise NotAuthorized("Only the student can leave this mentorship.")
        self._check_transition(request, RequestStatus.ACCEPTED, RequestStatus.CANCELLED)

        updated = self._apply_transition(request, RequestStatus.CANCELLED)
        self._release_slot(request.mentor_id)

        mentee_name = self._display_name(request.mentee_id, "A student")
        self.notifier.notify(
            recipient_id=request.mentor_id,
            notification_type=NotificationType.MENTORSHIP,
            content=f"{mentee_name} has left the mentorship.",
            related_id=request.id,
            actor_id=actor.id,
        )
        return updated

    def complete(self, request_id: UUID, actor: Actor | None = None) -> MentorshipRequest:
        """Mark an accepted mentorship completed; ``actor=None`` is the system path."""
        request = self._get_request(request_id)
        if actor is not None:
            self._require_mentor(actor, request, "complete")
        self._check_transition(request, RequestStatus.ACCEPTED, RequestStatus.COMPLETED)

        updated = self._apply_transition(
            request, RequestStatus.COMPLETED, {"completed_at": self.clock()}
        )
        self._release_slot(request.mentor_id)
        self._bump_offer(
            request.mentor_id,
            lambda o: {"total_mentees_helped": o.total_mentees_helped + 1},
        )

        mentor_name = self._display_name(request.mentor_id, "your mentor")
        self.notifier.notify(
            recipient_id=request.mentee_id,
            notification_type=NotificationType.MENTORSHIP,
            content=f"Your mentorship with {mentor_name} is complete. Was it helpful?",
            related_id=request.id,
            actor_id=actor.id if actor else None,
        )
        return updated

    def submit_feedback(
        self,
        actor: Actor,
        request_id: UUID,
        helpful: bool,
        as_mentor: bool = False,
    ) -> MentorshipRequest:
        request = self._get_request(request_id)
        party = request.mentor_id if as_mentor else request.mentee_id
        if actor.id != party:
            side = "mentor" if as_mentor else "student"
            raise NotAuthorized(f"Only the {side} can leave this feedback.")
        if request.status != RequestStatus.COMPLETED:
            raise InvalidTransition("Feedback opens once the mentorship is completed.")

        column = "mentor_feedback" if as_mentor else "mentee_feedback"
        self._check_feedback(request, column, helpful)

        updated = self.store.update_request_if(
            request.id,
            {"status": RequestStatus.COMPLETED, column: None},
            {column: helpful, "updated_at": self.clock()},
        )
        if updated is None:
            self._check_feedback(self._get_request(request.id), column, helpful)
            raise InvalidTransition("Request was updated by someone else; refresh and try again.")

        log.info("Feedback %s=%s recorded on %s", column, helpful, request.id)
        self._publish_request(updated, previous=request.status)
        return updated

    @staticmethod
    def _check_feedback(request: MentorshipRequest, column: str, helpful: bool) -> None:
        existing = getattr(request, column)
        if existing is None:
            return
        if existing == helpful:
            raise AlreadyApplied("Feedback already recorded.")
        raise InvalidTransition("Feedback has already been submitted.")

    def auto_expire_sweep(self, now: datetime | None = None) -> list[MentorshipRequest]:
        """Cancel requests left pending longer than the expiry window. Idempotent."""
        now = now or self.clock()
        cutoff = now - self.expiry

        expired: list[MentorshipRequest] = []
        for request in self.store.list_stale_pending(cutoff):
            updated = self.store.update_request_if(
                request.id,
                {"status": RequestStatus.PENDING, "auto_expired": False},
                {"status": RequestStatus.CANCELLED, "auto_expired": True, "updated_at": now},
            )
            if updated is None:
                log.info("Request %s changed before it could expire; skipping", request.id)
                continue

            expired.append(updated)
            self._publish_request(updated, previous=RequestStatus.PENDING)
            self._bump_offer(
                request.mentor_id,
                lambda o: {"total_requests_ignored": o.total_requests_ignored + 1},
            )

            days = self.expiry.days
            mentor_name = self._display_name(request.mentor_id, "a mentor")
            mentee_name = self._display_name(request.mentee_id, "a student")
            self.notifier.notify(
                recipient_id=request.mentee_id,
                notification_type=NotificationType.MENTORSHIP,
                content=(
                    f"Your mentorship request to {mentor_name} has expired after "
                    f"{days} days. Feel free to try another mentor!"
                ),
                related_id=request.id,
            )
            self.notifier.notify(
                recipient_id=request.mentor_id,
                notification_type=NotificationType.MENTORSHIP,
                content=(
                    f"A mentorship request from {mentee_name} expired after "
                    f"{days} days without response."
                ),
                related_id=request.id,
            )

        log.info("Auto-expired %d mentorship request(s)", len(expired))
        return expired

    # --- Suggested alternative -----------------------------------------

    def _suggestion(self, actor: Actor, request: MentorshipRequest) -> MentorListing | None:
        if actor.id != request.mentee_id:
            raise NotAuthorized("Only the student can see this suggestion.")
        if request.status != RequestStatus.REJECTED or request.suggested_mentor_id is None:
            return None

        suggested = request.suggested_mentor_id
        if not is_accepting_requests(self.store.get_offer(suggested)):
            return None
        if self.store.find_active_request(actor.id, suggested):
            return None
        return self.directory.lookup_mentor(suggested)

    def suggestion_for(self, actor: Actor, request_id: UUID) -> MentorListing | None:
        """The suggested mentor, or ``None`` when the follow-up must not be offered."""
        return self._suggestion(actor, self._get_request(request_id))

    def request_suggested_mentor(self, actor: Actor, request_id: UUID) -> MentorshipRequest:
        request = self._get_request(request_id)
        if request.suggested_mentor_id is None:
            raise InvalidTransition("This request has no suggested mentor.")

        listing = self._suggestion(actor, request)
        if listing is None:
            raise MentorUnavailable("The suggested mentor is no longer available.")

        return self.create_request(
            actor, listing.mentor_id, request.topic or "Mentorship", request.message
        )

    # --- Queries -------------------------------------------------------

    def list_sent(
        self, actor: Actor, status: RequestStatus | None = None
    ) -> list[MentorshipRequest]:
        return self.store.list_requests(
            mentee_id=actor.id, statuses=[status] if status else None
        )

    def list_received(
        self, actor: Actor, status: RequestStatus | None = None
    ) -> list[MentorshipRequest]:
        return self.store.list_requests(
            mentor_id=actor.id, statuses=[status] if status else None
        )

    # ==================================================================
    # Offers
    # ==================================================================

    def get_offer(self, actor: Actor) -> MentorOffer:
        offer = self.store.get_offer(actor.id)
        if offer is None:
            raise NotFound("No mentorship offer found.")
        return offer

    def save_offer(self, actor: Actor, form: MentorOfferUpdate) -> MentorOffer:
        if not actor.permissions.can_offer_mentorship:
            raise NotAuthorized("Your account type cannot offer mentorship.")

        now = self.clock()
        fields = form.model_dump()
        fields["preferred_communication"] = [
            c.strip() for c in form.preferred_communication if c.strip()
        ]
        fields["last_active_at"] = now
        if fields["is_paused"] is None:
            del fields["is_paused"]

        for _ in range(self.slot_retries):
            current = self.store.get_offer(actor.id)
            if current is None:
                try:
                    created = self.store.insert_offer(
                        MentorOffer(
                            mentor_id=actor.id,
                            college_domain=actor.college_domain,
                            created_at=now,
                            updated_at=now,
                            **fields,
                        )
                    )
                except InvalidTransition:
                    continue
                log.info("Mentorship offer created for %s", actor.id)
                self._publish_offer(created)
                return created

            if form.available_slots < current.current_mentees:
                raise InvalidRequest(
                    f"You currently mentor {current.current_mentees} student(s); "
                    "slots cannot go below that."
                )

            updated = self.store.update_offer_if(
                actor.id,
                {"current_mentees": current.current_mentees, "is_paused": current.is_paused},
                {**fields, "updated_at": now},
            )
            if updated is None:
                continue

            if updated.is_paused and not current.is_paused:
                self._cancel_pending_for(actor.id)
            self._publish_offer(updated)
            return updated

        raise BackendUnavailable("Could not save mentorship offer; please retry.")

    def set_paused(self, actor: Actor, paused: bool) -> MentorOffer:
        if not actor.permissions.can_offer_mentorship:
            raise NotAuthorized("Your account type cannot offer mentorship.")

        for _ in range(self.slot_retries):
            current = self.get_offer(actor)
            if current.is_paused == paused:
                return current

            updated = self.store.update_offer_if(
                actor.id,
                {"is_paused": current.is_paused},
                {"is_paused": paused, "updated_at": self.clock()},
            )
            if updated is None:
                continue

            log.info("Mentor %s %s mentorship", actor.id, "paused" if paused else "resumed")
            if paused:
                self._cancel_pending_for(actor.id)
            self._publish_offer(updated)
            return updated

        raise BackendUnavailable("Could not update mentorship status; please retry.")

    def _cancel_pending_for(self, mentor_id: UUID) -> int:
        """Cancel every pending request addressed to a mentor who just paused."""
        mentor_name = self._display_name(mentor_id, "A mentor")
        cancelled = 0
        for request in self.store.list_requests(
            mentor_id=mentor_id, statuses=[RequestStatus.PENDING]
        ):
            updated = self.store.update_request_if(
                request.id,
                {"status": RequestStatus.PENDING},
                {"status": RequestStatus.CANCELLED, "updated_at": self.clock()},
            )
            if updated is None:
                continue

            cancelled += 1
            self._publish_request(updated, previous=RequestStatus.PENDING)
            self.notifier.notify(
                recipient_id=request.mentee_id,
                notification_type=NotificationType.MENTORSHIP,
                content=(
                    f"{mentor_name} is currently unavailable. Your pending request "
                    "has been cancelled. Try another mentor!"
                ),
                related_id=request.id,
                actor_id=mentor_id,
            )

        if cancelled:
            log.info("Cancelled %d pending request(s) for paused mentor %s", cancelled, mentor_id)
        return cancelled
