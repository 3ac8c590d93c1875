import json
import logging
from uuid import UUID

from pywebpush import WebPushException, webpush

from clstr.core.config import settings
from clstr.core.exceptions import MentorshipError
from clstr.repositories.base import MentorshipStore

log = logging.getLogger(__name__)


def send_push_to_user(store: MentorshipStore, user_id: UUID, payload: dict) -> int:
    """Send a Web Push notification to all of a user's subscriptions.

    Silently skips if VAPID keys are not configured.
    Removes stale subscriptions (expired/unsubscribed endpoints).
    Returns the number of deliveries accepted by the push services.
    """
    if not settings.VAPID_PRIVATE_KEY or not settings.VAPID_PUBLIC_KEY:
        return 0

    try:
        subscriptions = store.list_push_subscriptions(user_id)
    except MentorshipError as e:
        log.warning("Could not load push subscriptions for %s: %s", user_id, e)
        return 0

    delivered = 0
    for sub in subscriptions:
        try:
            webpush(
                subscription_info={
                    "endpoint": sub.endpoint,
                    "keys": {
                        "p256dh": sub.p256dh,
                        "auth": sub.auth,
                    },
                },
                data=json.dumps(payload),
                vapid_private_key=settings.VAPID_PRIVATE_KEY,
                vapid_claims={
                    "sub": settings.VAPID_SUBJECT,
                },
            )
            delivered += 1
        except WebPushException as e:
            if e.response is not None and e.response.status_code in (404, 410):
                log.info("Dropping stale push subscription %s", sub.id)
                try:
                    store.delete_push_subscription(sub.id)
                except MentorshipError as err:
                    log.warning("Could not delete push subscription %s: %s", sub.id, err)
            else:
                log.warning("Web push to %s failed: %s", sub.endpoint, e)
        except Exception:
            log.exception("Unexpected error sending web push to %s", sub.endpoint)

    return delivered
