"""
Storage interface consumed by the mentorship core.

Every mutation that can race is a conditional write: it applies only if the
row still matches ``expected`` and returns ``None`` otherwise. Callers treat
``None`` as "someone else got there first" and re-read to find out what
happened. Nothing here ever performs a read followed by an unconditional
write.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any
from uuid import UUID

from clstr.schemas.mentorship import (
    MentorOffer,
    MentorshipRequest,
    Profile,
    RequestStatus,
)
from clstr.schemas.notification import Connection, Notification, PushSubscription


class MentorshipStore(ABC):
    # --- Requests -----------------------------------------------------

    @abstractmethod
    def get_request(self, request_id: UUID) -> MentorshipRequest | None: ...

    @abstractmethod
    def find_active_request(
        self, mentee_id: UUID, mentor_id: UUID
    ) -> MentorshipRequest | None: ...

    @abstractmethod
    def insert_request(self, request: MentorshipRequest) -> MentorshipRequest:
        """Insert a pending request; raises DuplicateActiveRequest on pair conflict."""

    @abstractmethod
    def update_request_if(
        self,
        request_id: UUID,
        expected: Mapping[str, Any],
        changes: Mapping[str, Any],
    ) -> MentorshipRequest | None:
        """Apply ``changes`` only if every ``expected`` column still matches."""

    @abstractmethod
    def list_requests(
        self,
        *,
        mentee_id: UUID | None = None,
        mentor_id: UUID | None = None,
        statuses: Iterable[RequestStatus] | None = None,
    ) -> list[MentorshipRequest]:
        """Newest first."""

    @abstractmethod
    def list_stale_pending(self, created_before: datetime) -> list[MentorshipRequest]:
        """Pending, not yet auto-expired, created strictly before the cutoff."""

    # --- Offers -------------------------------------------------------

    @abstractmethod
    def get_offer(self, mentor_id: UUID) -> MentorOffer | None: ...

    @abstractmethod
    def list_offers(self, college_domain: str | None = None) -> list[MentorOffer]: ...

    @abstractmethod
    def insert_offer(self, offer: MentorOffer) -> MentorOffer:
        """Create the mentor's offer; raises InvalidTransition if one exists."""

    @abstractmethod
    def update_offer_if(
        self,
        mentor_id: UUID,
        expected: Mapping[str, Any],
        changes: Mapping[str, Any],
    ) -> MentorOffer | None: ...

    # --- Profiles -----------------------------------------------------

    @abstractmethod
    def get_profiles(self, user_ids: Iterable[UUID]) -> dict[UUID, Profile]: ...

    def get_profile(self, user_id: UUID) -> Profile | None:
        return self.get_profiles([user_id]).get(user_id)

    # --- Connections --------------------------------------------------

    @abstractmethod
    def get_connections(self, connection_ids: Iterable[UUID]) -> dict[UUID, Connection]: ...

    @abstractmethod
    def ensure_accepted_connection(
        self, requester_id: UUID, receiver_id: UUID, message: str | None = None
    ) -> Connection:
        """Create or upgrade the pair's connection to accepted (blocked pairs stay blocked)."""

    # --- Notifications ------------------------------------------------

    @abstractmethod
    def insert_notification(self, notification: Notification) -> Notification: ...

    @abstractmethod
    def list_notifications(
        self,
        user_id: UUID,
        *,
        limit: int,
        offset: int,
        unread_only: bool = False,
    ) -> tuple[list[Notification], int]:
        """Newest first, with the total matching count."""

    @abstractmethod
    def count_unread(self, user_id: UUID) -> int: ...

    @abstractmethod
    def mark_notifications_read(
        self, user_id: UUID, notification_id: UUID | None = None
    ) -> int:
        """Mark one (or, with no id, every) notification read; returns rows matched."""

    # --- Push subscriptions -------------------------------------------

    @abstractmethod
    def list_push_subscriptions(self, user_id: UUID) -> list[PushSubscription]: ...

    @abstractmethod
    def delete_push_subscription(self, subscription_id: UUID) -> None: ...

    @abstractmethod
    def save_push_subscription(self, subscription: PushSubscription) -> PushSubscription:
        """Insert, replacing any subscription registered for the same endpoint."""

    @abstractmethod
    def remove_push_subscription(self, user_id: UUID, endpoint: str) -> None: ...
