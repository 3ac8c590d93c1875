import logging
from collections.abc import Callable
from datetime import datetime, timezone
from uuid import UUID, uuid4

from clstr.core.exceptions import MentorshipError
from clstr.core.push import send_push_to_user
from clstr.repositories.base import MentorshipStore
from clstr.schemas.notification import Notification, NotificationType

log = logging.getLogger(__name__)

_PUSH_TITLES = {
    NotificationType.CONNECTION: "Connection request",
    NotificationType.MESSAGE: "New message",
    NotificationType.MENTORSHIP: "Mentorship",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Notifier:
    """
    Fire-and-forget notification dispatch.

    Writes the notification row and forwards a Web Push payload. Failures are
    logged and never propagate: a transition that already happened must not
    be reported as failed because its side notification could not be sent.
    """

    def __init__(
        self,
        store: MentorshipStore,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.store = store
        self.clock = clock

    def notify(
        self,
        recipient_id: UUID,
        notification_type: NotificationType,
        content: str,
        related_id: UUID | None = None,
        actor_id: UUID | None = None,
    ) -> Notification | None:
        if actor_id and actor_id == recipient_id:
            return None

        notification = Notification(
            id=uuid4(),
            user_id=recipient_id,
            type=notification_type,
            content=content,
            related_id=related_id,
            read=False,
            created_at=self.clock(),
        )

        try:
            self.store.insert_notification(notification)
        except MentorshipError as e:
            log.warning("Could not store notification for %s: %s", recipient_id, e)
            notification = None

        payload = {
            "type": notification_type.value,
            "title": _PUSH_TITLES.get(notification_type, "clstr"),
            "body": content,
        }
        if related_id:
            payload["related_id"] = str(related_id)

        send_push_to_user(self.store, recipient_id, payload)
        return notification
