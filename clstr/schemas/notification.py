from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field


class NotificationType(str, Enum):
    CONNECTION = "connection"
    LIKE = "like"
    COMMENT = "comment"
    MENTION = "mention"
    EVENT = "event"
    MESSAGE = "message"
    MENTORSHIP = "mentorship"
    JOB = "job"
    CLUB = "club"
    PROJECT = "project"
    SYSTEM = "system"


class ConnectionStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    BLOCKED = "blocked"


class Connection(BaseModel):
    id: UUID
    requester_id: UUID
    receiver_id: UUID
    status: ConnectionStatus
    message: str | None = None
    created_at: datetime | None = None


class Notification(BaseModel):
    id: UUID
    user_id: UUID
    # other features write types this service does not know; keep them as text
    type: NotificationType | str = Field(union_mode="left_to_right")
    content: str | None = None
    related_id: UUID | None = None
    read: bool = False
    created_at: datetime


class NotificationView(Notification):
    actionable: bool = False


class NotificationListResponse(BaseModel):
    notifications: list[NotificationView]
    total: int
    unread_count: int


class PushSubscription(BaseModel):
    id: UUID
    user_id: UUID
    endpoint: str
    p256dh: str
    auth: str


class PushSubscriptionCreate(BaseModel):
    endpoint: str
    p256dh: str
    auth: str
