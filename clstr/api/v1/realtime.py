import logging

from fastapi import APIRouter, Depends

from clstr.core.deps import require_internal_secret
from clstr.core.realtime import router as invalidation_router
from clstr.schemas.realtime import ChangeEvent, InvalidationResponse

log = logging.getLogger(__name__)

router = APIRouter(
    prefix="/realtime",
    tags=["realtime"],
    dependencies=[Depends(require_internal_secret)],
)


@router.post("/changes", response_model=InvalidationResponse)
async def receive_change(event: ChangeEvent):
    """
    Database webhook target.

    Resolves which realtime channels carry the change and which client cache
    keys it makes stale, and notifies in-process subscribers.
    """
    channels, _ = invalidation_router.resolve(event)
    keys = invalidation_router.publish(event)
    log.debug("%s on %s invalidated %d key(s)", event.type.value, event.table, len(keys))

    return InvalidationResponse(
        channels=channels,
        invalidate=[list(key) for key in keys],
    )
