"""
Decides which notifications still offer accept/decline controls.

A connection notification only records that a request was sent. By the time
it is rendered, the connection row may have been accepted, declined or
withdrawn elsewhere, so the row's current status is always re-checked.
"""

import logging
from collections.abc import Callable, Iterable
from uuid import UUID

from clstr.core.exceptions import MentorshipError
from clstr.repositories.base import MentorshipStore
from clstr.schemas.notification import (
    Connection,
    ConnectionStatus,
    Notification,
    NotificationType,
    NotificationView,
)

log = logging.getLogger(__name__)

ConnectionLookup = Callable[[UUID], Connection | None]


def resolve_actionability(
    notification: Notification,
    connection_lookup: ConnectionLookup,
    current_user_id: UUID,
) -> bool:
    if notification.type != NotificationType.CONNECTION or notification.related_id is None:
        return False

    try:
        connection = connection_lookup(notification.related_id)
    except Exception:
        log.warning(
            "Connection lookup failed for notification %s; hiding actions",
            notification.id,
            exc_info=True,
        )
        return False

    return (
        connection is not None
        and connection.status == ConnectionStatus.PENDING
        and connection.receiver_id == current_user_id
    )


def annotate_notifications(
    notifications: Iterable[Notification],
    store: MentorshipStore,
    current_user_id: UUID,
) -> list[NotificationView]:
    """Attach ``actionable`` to each notification with one batched connection fetch."""
    notifications = list(notifications)
    related_ids = {
        n.related_id
        for n in notifications
        if n.type == NotificationType.CONNECTION and n.related_id is not None
    }

    connections: dict[UUID, Connection] | None = {}
    if related_ids:
        try:
            connections = store.get_connections(related_ids)
        except MentorshipError as e:
            log.warning("Connection status fetch failed; hiding actions: %s", e)
            connections = None

    def lookup(connection_id: UUID) -> Connection | None:
        if connections is None:
            raise LookupError("connection status unavailable")
        return connections.get(connection_id)

    return [
        NotificationView(
            **n.model_dump(),
            actionable=resolve_actionability(n, lookup, current_user_id),
        )
        for n in notifications
    ]
