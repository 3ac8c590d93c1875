"""
Change-feed topics mapped to the cache keys they invalidate.

Every table change the backend can push (or that the service itself
performs) is described by a ``ChangeEvent``. ``InvalidationRouter.resolve``
turns it into the realtime channel names that carry it and the client cache
keys it makes stale; ``publish`` additionally notifies in-process
subscribers whose key prefix matches.
"""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass

from clstr.schemas.realtime import ChangeEvent

log = logging.getLogger(__name__)

CacheKey = tuple[str, ...]


class CacheKeys:
    ALL: CacheKey = ("mentorship",)

    @staticmethod
    def mentors(domain: str) -> CacheKey:
        return ("mentorship", "mentors", domain)

    @staticmethod
    def my_requests(mentee_id: str) -> CacheKey:
        return ("mentorship", "my-requests", mentee_id)

    @staticmethod
    def incoming_requests(mentor_id: str) -> CacheKey:
        return ("mentorship", "incoming-requests", mentor_id)

    @staticmethod
    def active_relationships(mentor_id: str) -> CacheKey:
        return ("mentorship", "active-relationships", mentor_id)

    @staticmethod
    def completed_relationships(mentor_id: str) -> CacheKey:
        return ("mentorship", "completed", mentor_id)

    @staticmethod
    def my_offer(mentor_id: str) -> CacheKey:
        return ("mentorship", "my-offer", mentor_id)

    @staticmethod
    def notifications(user_id: str) -> CacheKey:
        return ("notifications", user_id)

    @staticmethod
    def connection_status(user_id: str) -> CacheKey:
        return ("notifications", user_id, "connection-status")


@dataclass(frozen=True)
class Topic:
    table: str
    column: str
    channel: Callable[[str], str] | None
    keys: Callable[[str], list[CacheKey]]


TOPICS: tuple[Topic, ...] = (
    Topic(
        "mentorship_offers",
        "college_domain",
        lambda v: f"mentorship-offers-{v}",
        lambda v: [CacheKeys.mentors(v)],
    ),
    Topic(
        "mentorship_offers",
        "mentor_id",
        None,
        lambda v: [CacheKeys.my_offer(v)],
    ),
    Topic(
        "profiles",
        "college_domain",
        lambda v: f"mentorship-profiles-{v}",
        lambda v: [CacheKeys.mentors(v)],
    ),
    Topic(
        "mentorship_requests",
        "mentee_id",
        lambda v: f"mentorship-requests-mentee-{v}",
        lambda v: [CacheKeys.my_requests(v)],
    ),
    Topic(
        "mentorship_requests",
        "mentor_id",
        lambda v: f"mentorship-requests-mentor-{v}",
        lambda v: [
            CacheKeys.incoming_requests(v),
            CacheKeys.active_relationships(v),
            CacheKeys.completed_relationships(v),
        ],
    ),
    # Blocking a connection cancels mentorships, so the whole namespace goes
    Topic(
        "connections",
        "requester_id",
        lambda v: f"mentorship-connections-{v}",
        lambda v: [CacheKeys.ALL, CacheKeys.connection_status(v)],
    ),
    Topic(
        "connections",
        "receiver_id",
        lambda v: f"mentorship-connections-{v}",
        lambda v: [CacheKeys.ALL, CacheKeys.connection_status(v)],
    ),
    Topic(
        "notifications",
        "user_id",
        lambda v: f"notifications-realtime-{v}",
        lambda v: [CacheKeys.notifications(v)],
    ),
)


def _overlaps(a: CacheKey, b: CacheKey) -> bool:
    # invalidating ("mentorship",) also reaches ("mentorship", "mentors", ...)
    shorter = min(len(a), len(b))
    return a[:shorter] == b[:shorter]


class InvalidationRouter:
    def __init__(self, topics: tuple[Topic, ...] = TOPICS) -> None:
        self.topics = topics
        self._lock = threading.Lock()
        self._subscribers: list[tuple[CacheKey, Callable[[CacheKey], None]]] = []

    def resolve(self, event: ChangeEvent) -> tuple[list[str], list[CacheKey]]:
        channels: list[str] = []
        keys: list[CacheKey] = []
        for topic in self.topics:
            if topic.table != event.table:
                continue
            value = event.value(topic.column)
            if value is None:
                continue
            value = str(value)
            if topic.channel is not None:
                channel = topic.channel(value)
                if channel not in channels:
                    channels.append(channel)
            for key in topic.keys(value):
                if key not in keys:
                    keys.append(key)
        return channels, keys

    def subscribe(
        self, prefix: CacheKey, callback: Callable[[CacheKey], None]
    ) -> Callable[[], None]:
        """Register ``callback`` for every invalidated key under ``prefix``."""
        entry = (prefix, callback)
        with self._lock:
            self._subscribers.append(entry)

        def unsubscribe() -> None:
            with self._lock:
                if entry in self._subscribers:
                    self._subscribers.remove(entry)

        return unsubscribe

    def publish(self, event: ChangeEvent) -> list[CacheKey]:
        _, keys = self.resolve(event)
        with self._lock:
            subscribers = list(self._subscribers)

        for key in keys:
            for prefix, callback in subscribers:
                if not _overlaps(prefix, key):
                    continue
                try:
                    callback(key)
                except Exception:
                    log.exception("Invalidation subscriber failed for %s", key)
        return keys


router = InvalidationRouter()
