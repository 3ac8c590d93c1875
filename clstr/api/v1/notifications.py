from uuid import UUID, uuid4

from fastapi import APIRouter, Query, status

from clstr.core.config import settings
from clstr.core.deps import AuthenticatedUser, Store
from clstr.core.exceptions import NotFound
from clstr.schemas.notification import (
    NotificationListResponse,
    PushSubscription,
    PushSubscriptionCreate,
)
from clstr.services.reconciliation import annotate_notifications

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationListResponse)
async def get_notifications(
    user: AuthenticatedUser,
    store: Store,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    unread_only: bool = Query(False),
):
    """Newest first. Connection requests carry ``actionable`` from their live status."""
    rows, total = store.list_notifications(
        user.id, limit=limit, offset=offset, unread_only=unread_only
    )

    return NotificationListResponse(
        notifications=annotate_notifications(rows, store, user.id),
        total=total,
        unread_count=store.count_unread(user.id),
    )


@router.patch("/read-all", status_code=status.HTTP_200_OK)
async def mark_all_read(user: AuthenticatedUser, store: Store):
    store.mark_notifications_read(user.id)
    return {"message": "All notifications marked as read"}


@router.patch("/{notification_id}/read", status_code=status.HTTP_200_OK)
async def mark_notification_read(
    notification_id: UUID, user: AuthenticatedUser, store: Store
):
    if not store.mark_notifications_read(user.id, notification_id):
        raise NotFound("Notification not found.")
    return {"message": "Notification marked as read"}


@router.get("/push/vapid-key")
async def get_vapid_public_key(user: AuthenticatedUser):
    return {"vapid_public_key": settings.VAPID_PUBLIC_KEY}


@router.post("/push/subscribe", status_code=status.HTTP_201_CREATED)
async def subscribe_to_push(
    subscription: PushSubscriptionCreate, user: AuthenticatedUser, store: Store
):
    store.save_push_subscription(
        PushSubscription(id=uuid4(), user_id=user.id, **subscription.model_dump())
    )
    return {"message": "Push subscription registered"}


@router.delete("/push/subscribe", status_code=status.HTTP_200_OK)
async def unsubscribe_from_push(
    subscription: PushSubscriptionCreate, user: AuthenticatedUser, store: Store
):
    store.remove_push_subscription(user.id, subscription.endpoint)
    return {"message": "Push subscription removed"}
