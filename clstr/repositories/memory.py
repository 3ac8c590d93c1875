"""In-process store used for local development and the test-suite."""

import threading
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel

from clstr.core.exceptions import DuplicateActiveRequest, InvalidTransition
from clstr.repositories.base import MentorshipStore
from clstr.schemas.mentorship import (
    ACTIVE_STATUSES,
    MentorOffer,
    MentorshipRequest,
    Profile,
    RequestStatus,
)
from clstr.schemas.notification import (
    Connection,
    ConnectionStatus,
    Notification,
    PushSubscription,
)


def _matches(row: BaseModel, expected: Mapping[str, Any]) -> bool:
    return all(getattr(row, column) == value for column, value in expected.items())


def _apply(row: BaseModel, changes: Mapping[str, Any]) -> BaseModel:
    return type(row).model_validate({**row.model_dump(), **changes})


class MemoryStore(MentorshipStore):
    """
    Dict-backed tables behind a single lock.

    Each public method holds the lock for its whole body, which gives every
    conditional write the same atomicity a single SQL ``UPDATE ... WHERE``
    statement has.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self.requests: dict[UUID, MentorshipRequest] = {}
        self.offers: dict[UUID, MentorOffer] = {}
        self.profiles: dict[UUID, Profile] = {}
        self.connections: dict[UUID, Connection] = {}
        self.notifications: dict[UUID, Notification] = {}
        self.push_subscriptions: dict[UUID, PushSubscription] = {}

    # --- Seeding ------------------------------------------------------

    def add_profile(self, profile: Profile) -> Profile:
        with self._lock:
            self.profiles[profile.id] = profile
            return profile

    def add_connection(self, connection: Connection) -> Connection:
        with self._lock:
            self.connections[connection.id] = connection
            return connection

    def add_push_subscription(self, subscription: PushSubscription) -> PushSubscription:
        with self._lock:
            self.push_subscriptions[subscription.id] = subscription
            return subscription

    # --- Requests -----------------------------------------------------

    def get_request(self, request_id: UUID) -> MentorshipRequest | None:
        with self._lock:
            row = self.requests.get(request_id)
            return row.model_copy(deep=True) if row else None

    def find_active_request(
        self, mentee_id: UUID, mentor_id: UUID
    ) -> MentorshipRequest | None:
        with self._lock:
            for row in self.requests.values():
                if (
                    row.mentee_id == mentee_id
                    and row.mentor_id == mentor_id
                    and row.status in ACTIVE_STATUSES
                ):
                    return row.model_copy(deep=True)
            return None

    def insert_request(self, request: MentorshipRequest) -> MentorshipRequest:
        with self._lock:
            if self.find_active_request(request.mentee_id, request.mentor_id):
                raise DuplicateActiveRequest(
                    "You already have a pending or active mentorship with this mentor."
                )
            self.requests[request.id] = request.model_copy(deep=True)
            return request

    def update_request_if(
        self,
        request_id: UUID,
        expected: Mapping[str, Any],
        changes: Mapping[str, Any],
    ) -> MentorshipRequest | None:
        with self._lock:
            row = self.requests.get(request_id)
            if row is None or not _matches(row, expected):
                return None
            updated = _apply(row, changes)
            self.requests[request_id] = updated
            return updated.model_copy(deep=True)

    def list_requests(
        self,
        *,
        mentee_id: UUID | None = None,
        mentor_id: UUID | None = None,
        statuses: Iterable[RequestStatus] | None = None,
    ) -> list[MentorshipRequest]:
        wanted = set(statuses) if statuses is not None else None
        with self._lock:
            rows = [
                row.model_copy(deep=True)
                for row in self.requests.values()
                if (mentee_id is None or row.mentee_id == mentee_id)
                and (mentor_id is None or row.mentor_id == mentor_id)
                and (wanted is None or row.status in wanted)
            ]
        rows.sort(key=lambda r: r.created_at, reverse=True)
        return rows

    def list_stale_pending(self, created_before: datetime) -> list[MentorshipRequest]:
        with self._lock:
            rows = [
                row.model_copy(deep=True)
                for row in self.requests.values()
                if row.status == RequestStatus.PENDING
                and not row.auto_expired
                and row.created_at < created_before
            ]
        rows.sort(key=lambda r: r.created_at)
        return rows

    # --- Offers -------------------------------------------------------

    def get_offer(self, mentor_id: UUID) -> MentorOffer | None:
        with self._lock:
            row = self.offers.get(mentor_id)
            return row.model_copy(deep=True) if row else None

    def list_offers(self, college_domain: str | None = None) -> list[MentorOffer]:
        with self._lock:
            return [
                row.model_copy(deep=True)
                for row in self.offers.values()
                if college_domain is None or row.college_domain == college_domain
            ]

    def insert_offer(self, offer: MentorOffer) -> MentorOffer:
        with self._lock:
            if offer.mentor_id in self.offers:
                raise InvalidTransition("Mentorship offer already exists.")
            self.offers[offer.mentor_id] = offer.model_copy(deep=True)
            return offer

    def update_offer_if(
        self,
        mentor_id: UUID,
        expected: Mapping[str, Any],
        changes: Mapping[str, Any],
    ) -> MentorOffer | None:
        with self._lock:
            row = self.offers.get(mentor_id)
            if row is None or not _matches(row, expected):
                return None
            updated = _apply(row, changes)
            self.offers[mentor_id] = updated
            return updated.model_copy(deep=True)

    # --- Profiles -----------------------------------------------------

    def get_profiles(self, user_ids: Iterable[UUID]) -> dict[UUID, Profile]:
        with self._lock:
            return {
                uid: self.profiles[uid].model_copy()
                for uid in set(user_ids)
                if uid in self.profiles
            }

    # --- Connections --------------------------------------------------

    def get_connections(self, connection_ids: Iterable[UUID]) -> dict[UUID, Connection]:
        with self._lock:
            return {
                cid: self.connections[cid].model_copy()
                for cid in set(connection_ids)
                if cid in self.connections
            }

    def ensure_accepted_connection(
        self, requester_id: UUID, receiver_id: UUID, message: str | None = None
    ) -> Connection:
        with self._lock:
            for row in self.connections.values():
                if {row.requester_id, row.receiver_id} != {requester_id, receiver_id}:
                    continue
                if row.status != ConnectionStatus.BLOCKED:
                    row = _apply(row, {"status": ConnectionStatus.ACCEPTED})
                    self.connections[row.id] = row
                return row.model_copy()

            connection = Connection(
                id=uuid4(),
                requester_id=requester_id,
                receiver_id=receiver_id,
                status=ConnectionStatus.ACCEPTED,
                message=message,
            )
            self.connections[connection.id] = connection
            return connection.model_copy()

    # --- Notifications ------------------------------------------------

    def insert_notification(self, notification: Notification) -> Notification:
        with self._lock:
            self.notifications[notification.id] = notification.model_copy()
            return notification

    def list_notifications(
        self,
        user_id: UUID,
        *,
        limit: int,
        offset: int,
        unread_only: bool = False,
    ) -> tuple[list[Notification], int]:
        with self._lock:
            rows = [
                row.model_copy()
                for row in self.notifications.values()
                if row.user_id == user_id and not (unread_only and row.read)
            ]
        rows.sort(key=lambda n: n.created_at, reverse=True)
        return rows[offset : offset + limit], len(rows)

    def count_unread(self, user_id: UUID) -> int:
        with self._lock:
            return sum(
                1
                for row in self.notifications.values()
                if row.user_id == user_id and not row.read
            )

    def mark_notifications_read(
        self, user_id: UUID, notification_id: UUID | None = None
    ) -> int:
        touched = 0
        with self._lock:
            for nid, row in list(self.notifications.items()):
                if row.user_id != user_id:
                    continue
                if notification_id is not None and nid != notification_id:
                    continue
                if not row.read:
                    self.notifications[nid] = _apply(row, {"read": True})
                touched += 1
        return touched

    # --- Push subscriptions -------------------------------------------

    def list_push_subscriptions(self, user_id: UUID) -> list[PushSubscription]:
        with self._lock:
            return [
                row.model_copy()
                for row in self.push_subscriptions.values()
                if row.user_id == user_id
            ]

    def delete_push_subscription(self, subscription_id: UUID) -> None:
        with self._lock:
            self.push_subscriptions.pop(subscription_id, None)

    def save_push_subscription(self, subscription: PushSubscription) -> PushSubscription:
        with self._lock:
            for row_id, row in list(self.push_subscriptions.items()):
                if row.endpoint == subscription.endpoint:
                    del self.push_subscriptions[row_id]
            self.push_subscriptions[subscription.id] = subscription
            return subscription.model_copy()

    def remove_push_subscription(self, user_id: UUID, endpoint: str) -> None:
        with self._lock:
            for row_id, row in list(self.push_subscriptions.items()):
                if row.user_id == user_id and row.endpoint == endpoint:
                    del self.push_subscriptions[row_id]
