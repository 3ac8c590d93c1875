import logging
from collections.abc import Iterable, Mapping
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

import httpx
from fastapi.encoders import jsonable_encoder
from postgrest import CountMethod
from postgrest.exceptions import APIError
from supabase import Client

from clstr.core.exceptions import (
    BackendUnavailable,
    DuplicateActiveRequest,
    InvalidTransition,
)
from clstr.repositories.base import MentorshipStore
from clstr.schemas.mentorship import (
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

log = logging.getLogger(__name__)

_UNIQUE_VIOLATION = "23505"

_PROFILE_COLUMNS = "id, full_name, avatar_url, role, college_domain, university, bio"


def _encode(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def _where(query, expected: Mapping[str, Any]):
    for column, value in expected.items():
        if value is None:
            query = query.is_(column, "null")
        else:
            query = query.eq(column, _encode(value))
    return query


class SupabaseStore(MentorshipStore):
    """PostgREST-backed store; conditional writes become filtered UPDATEs."""

    def __init__(self, client: Client) -> None:
        self.client = client

    def _execute(self, query):
        try:
            return query.execute()
        except APIError as e:
            log.warning("Supabase request failed: %s (%s)", e.message, e.code)
            raise BackendUnavailable(
                e.message or "Storage request failed.", details={"code": e.code}
            ) from e
        except httpx.HTTPError as e:
            log.warning("Supabase transport error: %s", e)
            raise BackendUnavailable("Storage is unreachable.") from e

    # --- Requests -----------------------------------------------------

    def get_request(self, request_id: UUID) -> MentorshipRequest | None:
        result = self._execute(
            self.client.table("mentorship_requests")
            .select("*")
            .eq("id", str(request_id))
            .limit(1)
        )
        return MentorshipRequest.model_validate(result.data[0]) if result.data else None

    def find_active_request(
        self, mentee_id: UUID, mentor_id: UUID
    ) -> MentorshipRequest | None:
        result = self._execute(
            self.client.table("mentorship_requests")
            .select("*")
            .eq("mentee_id", str(mentee_id))
            .eq("mentor_id", str(mentor_id))
            .in_("status", [RequestStatus.PENDING.value, RequestStatus.ACCEPTED.value])
            .limit(1)
        )
        return MentorshipRequest.model_validate(result.data[0]) if result.data else None

    def insert_request(self, request: MentorshipRequest) -> MentorshipRequest:
        # mentorship_requests_active_pair_uniq guards the pair atomically
        try:
            result = (
                self.client.table("mentorship_requests")
                .insert(jsonable_encoder(request))
                .execute()
            )
        except APIError as e:
            if e.code == _UNIQUE_VIOLATION:
                raise DuplicateActiveRequest(
                    "You already have a pending or active mentorship with this mentor."
                ) from e
            raise BackendUnavailable(
                e.message or "Failed to create mentorship request.",
                details={"code": e.code},
            ) from e
        except httpx.HTTPError as e:
            raise BackendUnavailable("Storage is unreachable.") from e

        if not result.data:
            raise BackendUnavailable("Failed to create mentorship request.")
        return MentorshipRequest.model_validate(result.data[0])

    def update_request_if(
        self,
        request_id: UUID,
        expected: Mapping[str, Any],
        changes: Mapping[str, Any],
    ) -> MentorshipRequest | None:
        query = (
            self.client.table("mentorship_requests")
            .update(jsonable_encoder(dict(changes)))
            .eq("id", str(request_id))
        )
        result = self._execute(_where(query, expected))
        return MentorshipRequest.model_validate(result.data[0]) if result.data else None

    def list_requests(
        self,
        *,
        mentee_id: UUID | None = None,
        mentor_id: UUID | None = None,
        statuses: Iterable[RequestStatus] | None = None,
    ) -> list[MentorshipRequest]:
        query = self.client.table("mentorship_requests").select("*")
        if mentee_id is not None:
            query = query.eq("mentee_id", str(mentee_id))
        if mentor_id is not None:
            query = query.eq("mentor_id", str(mentor_id))
        if statuses is not None:
            query = query.in_("status", [RequestStatus(s).value for s in statuses])

        result = self._execute(query.order("created_at", desc=True))
        return [MentorshipRequest.model_validate(row) for row in result.data or []]

    def list_stale_pending(self, created_before: datetime) -> list[MentorshipRequest]:
        result = self._execute(
            self.client.table("mentorship_requests")
            .select("*")
            .eq("status", RequestStatus.PENDING.value)
            .eq("auto_expired", "false")
            .lt("created_at", created_before.isoformat())
            .order("created_at")
        )
        return [MentorshipRequest.model_validate(row) for row in result.data or []]

    # --- Offers -------------------------------------------------------

    def get_offer(self, mentor_id: UUID) -> MentorOffer | None:
        result = self._execute(
            self.client.table("mentorship_offers")
            .select("*")
            .eq("mentor_id", str(mentor_id))
            .order("created_at", desc=True)
            .limit(1)
        )
        return MentorOffer.model_validate(result.data[0]) if result.data else None

    def list_offers(self, college_domain: str | None = None) -> list[MentorOffer]:
        query = self.client.table("mentorship_offers").select("*")
        if college_domain is not None:
            query = query.eq("college_domain", college_domain)
        result = self._execute(query)
        return [MentorOffer.model_validate(row) for row in result.data or []]

    def insert_offer(self, offer: MentorOffer) -> MentorOffer:
        try:
            result = (
                self.client.table("mentorship_offers")
                .insert(jsonable_encoder(offer))
                .execute()
            )
        except APIError as e:
            if e.code == _UNIQUE_VIOLATION:
                raise InvalidTransition("Mentorship offer already exists.") from e
            raise BackendUnavailable(
                e.message or "Failed to save mentorship offer.",
                details={"code": e.code},
            ) from e
        except httpx.HTTPError as e:
            raise BackendUnavailable("Storage is unreachable.") from e

        if not result.data:
            raise BackendUnavailable("Failed to save mentorship offer.")
        return MentorOffer.model_validate(result.data[0])

    def update_offer_if(
        self,
        mentor_id: UUID,
        expected: Mapping[str, Any],
        changes: Mapping[str, Any],
    ) -> MentorOffer | None:
        query = (
            self.client.table("mentorship_offers")
            .update(jsonable_encoder(dict(changes)))
            .eq("mentor_id", str(mentor_id))
        )
        result = self._execute(_where(query, expected))
        return MentorOffer.model_validate(result.data[0]) if result.data else None

    # --- Profiles -----------------------------------------------------

    def get_profiles(self, user_ids: Iterable[UUID]) -> dict[UUID, Profile]:
        ids = [str(uid) for uid in set(user_ids)]
        if not ids:
            return {}

        result = self._execute(
            self.client.table("profiles").select(_PROFILE_COLUMNS).in_("id", ids)
        )
        profiles = [Profile.model_validate(row) for row in result.data or []]
        return {p.id: p for p in profiles}

    # --- Connections --------------------------------------------------

    def get_connections(self, connection_ids: Iterable[UUID]) -> dict[UUID, Connection]:
        ids = [str(cid) for cid in set(connection_ids)]
        if not ids:
            return {}

        result = self._execute(
            self.client.table("connections")
            .select("id, requester_id, receiver_id, status, message, created_at")
            .in_("id", ids)
        )
        connections = [Connection.model_validate(row) for row in result.data or []]
        return {c.id: c for c in connections}

    def ensure_accepted_connection(
        self, requester_id: UUID, receiver_id: UUID, message: str | None = None
    ) -> Connection:
        existing = self._execute(
            self.client.table("connections")
            .select("*")
            .or_(
                f"and(requester_id.eq.{requester_id},receiver_id.eq.{receiver_id}),"
                f"and(requester_id.eq.{receiver_id},receiver_id.eq.{requester_id})"
            )
            .limit(1)
        )

        if existing.data:
            row = Connection.model_validate(existing.data[0])
            if row.status == ConnectionStatus.BLOCKED:
                return row
            result = self._execute(
                self.client.table("connections")
                .update({"status": ConnectionStatus.ACCEPTED.value})
                .eq("id", str(row.id))
                .neq("status", ConnectionStatus.BLOCKED.value)
            )
            return Connection.model_validate(result.data[0]) if result.data else row

        result = self._execute(
            self.client.table("connections").insert(
                {
                    "requester_id": str(requester_id),
                    "receiver_id": str(receiver_id),
                    "status": ConnectionStatus.ACCEPTED.value,
                    "message": message,
                }
            )
        )
        return Connection.model_validate(result.data[0])

    # --- Notifications ------------------------------------------------

    def insert_notification(self, notification: Notification) -> Notification:
        self._execute(
            self.client.table("notifications").insert(jsonable_encoder(notification))
        )
        return notification

    def list_notifications(
        self,
        user_id: UUID,
        *,
        limit: int,
        offset: int,
        unread_only: bool = False,
    ) -> tuple[list[Notification], int]:
        query = (
            self.client.table("notifications")
            .select("*", count=CountMethod.exact)
            .eq("user_id", str(user_id))
        )
        if unread_only:
            query = query.eq("read", "false")

        result = self._execute(
            query.order("created_at", desc=True).range(offset, offset + limit - 1)
        )
        rows = [Notification.model_validate(row) for row in result.data or []]
        return rows, result.count or len(rows)

    def count_unread(self, user_id: UUID) -> int:
        result = self._execute(
            self.client.table("notifications")
            .select("id", count=CountMethod.exact)
            .eq("user_id", str(user_id))
            .eq("read", "false")
        )
        return result.count or 0

    def mark_notifications_read(
        self, user_id: UUID, notification_id: UUID | None = None
    ) -> int:
        query = (
            self.client.table("notifications")
            .update({"read": True})
            .eq("user_id", str(user_id))
        )
        if notification_id is not None:
            query = query.eq("id", str(notification_id))
        else:
            query = query.eq("read", "false")

        result = self._execute(query)
        return len(result.data or [])

    # --- Push subscriptions -------------------------------------------

    def list_push_subscriptions(self, user_id: UUID) -> list[PushSubscription]:
        result = self._execute(
            self.client.table("push_subscriptions")
            .select("id, user_id, endpoint, p256dh, auth")
            .eq("user_id", str(user_id))
        )
        return [PushSubscription.model_validate(row) for row in result.data or []]

    def delete_push_subscription(self, subscription_id: UUID) -> None:
        self._execute(
            self.client.table("push_subscriptions")
            .delete()
            .eq("id", str(subscription_id))
        )

    def save_push_subscription(self, subscription: PushSubscription) -> PushSubscription:
        result = self._execute(
            self.client.table("push_subscriptions").upsert(
                jsonable_encoder(subscription.model_dump(exclude={"id"})),
                on_conflict="endpoint",
            )
        )
        return PushSubscription.model_validate(result.data[0]) if result.data else subscription

    def remove_push_subscription(self, user_id: UUID, endpoint: str) -> None:
        self._execute(
            self.client.table("push_subscriptions")
            .delete()
            .eq("endpoint", endpoint)
            .eq("user_id", str(user_id))
        )
