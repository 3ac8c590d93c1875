from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from clstr.core.deps import CurrentActor, Directory, Mentorship, Store, require_internal_secret
from clstr.core.exceptions import NotAuthorized, NotFound
from clstr.repositories.base import MentorshipStore
from clstr.schemas.mentorship import (
    ExpireSweepResponse,
    HelpType,
    MentorListing,
    MentorListResponse,
    MentorOffer,
    MentorOfferPause,
    MentorOfferUpdate,
    MentorshipActionResponse,
    MentorshipFeedback,
    MentorshipReject,
    MentorshipRequest,
    MentorshipRequestCreate,
    MentorshipRequestListResponse,
    MentorshipRequestResponse,
    RequestParty,
    RequestStatus,
)

router = APIRouter(prefix="/mentorship", tags=["mentorship"])


def _build_request_responses(
    store: MentorshipStore, requests: list[MentorshipRequest]
) -> list[MentorshipRequestResponse]:
    user_ids = {r.mentee_id for r in requests} | {r.mentor_id for r in requests}
    profiles = store.get_profiles(user_ids) if user_ids else {}

    def party(user_id: UUID) -> RequestParty:
        profile = profiles.get(user_id)
        return RequestParty(
            id=user_id,
            full_name=(profile.full_name if profile else None) or "Unknown",
            avatar_url=profile.avatar_url if profile else None,
        )

    return [
        MentorshipRequestResponse(
            id=r.id,
            mentee=party(r.mentee_id),
            mentor=party(r.mentor_id),
            topics=r.topics,
            message=r.message,
            status=r.status,
            auto_expired=r.auto_expired,
            suggested_mentor_id=r.suggested_mentor_id,
            mentee_feedback=r.mentee_feedback,
            mentor_feedback=r.mentor_feedback,
            created_at=r.created_at,
            updated_at=r.updated_at,
            accepted_at=r.accepted_at,
            completed_at=r.completed_at,
        )
        for r in requests
    ]


# ==========================================
# Directory
# ==========================================


@router.get("/mentors", response_model=MentorListResponse)
async def list_mentors(
    actor: CurrentActor,
    directory: Directory,
    help_type: HelpType | None = Query(None),
):
    """Mentors of the caller's college; full mentors are listed last."""
    if not actor.permissions.can_browse_mentors:
        raise NotAuthorized("Your account type cannot browse mentors.")

    mentors = directory.list_mentors(actor.college_domain, help_type)
    return MentorListResponse(mentors=mentors, total=len(mentors))


@router.get("/mentors/{mentor_id}", response_model=MentorListing)
async def get_mentor(mentor_id: UUID, actor: CurrentActor, directory: Directory):
    if not actor.permissions.can_browse_mentors:
        raise NotAuthorized("Your account type cannot browse mentors.")

    listing = directory.lookup_mentor(mentor_id)
    domain = listing.offer.college_domain
    if actor.college_domain and domain and domain != actor.college_domain:
        raise NotFound("Mentor not found.")
    return listing


# ==========================================
# Mentor offer
# ==========================================


@router.get("/offer/me", response_model=MentorOffer)
async def get_my_offer(actor: CurrentActor, service: Mentorship):
    return service.get_offer(actor)


@router.put("/offer/me", response_model=MentorOffer)
async def save_my_offer(
    body: MentorOfferUpdate, actor: CurrentActor, service: Mentorship
):
    """Create or update the caller's offer. Pausing cancels pending requests."""
    return service.save_offer(actor, body)


@router.post("/offer/me/pause", response_model=MentorOffer)
async def pause_my_offer(
    body: MentorOfferPause, actor: CurrentActor, service: Mentorship
):
    return service.set_paused(actor, body.paused)


# ==========================================
# Requests
# ==========================================


@router.post(
    "/requests",
    response_model=MentorshipRequestResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_request(
    body: MentorshipRequestCreate,
    actor: CurrentActor,
    service: Mentorship,
    store: Store,
):
    request = service.create_request(actor, body.mentor_id, body.topic, body.message)
    return _build_request_responses(store, [request])[0]


@router.get("/requests/sent", response_model=MentorshipRequestListResponse)
async def list_sent_requests(
    actor: CurrentActor,
    service: Mentorship,
    store: Store,
    request_status: RequestStatus | None = Query(None, alias="status"),
):
    requests = service.list_sent(actor, request_status)
    return MentorshipRequestListResponse(
        requests=_build_request_responses(store, requests), total=len(requests)
    )


@router.get("/requests/received", response_model=MentorshipRequestListResponse)
async def list_received_requests(
    actor: CurrentActor,
    service: Mentorship,
    store: Store,
    request_status: RequestStatus | None = Query(None, alias="status"),
):
    requests = service.list_received(actor, request_status)
    return MentorshipRequestListResponse(
        requests=_build_request_responses(store, requests), total=len(requests)
    )


@router.post("/requests/{request_id}/accept", response_model=MentorshipActionResponse)
async def accept_request(request_id: UUID, actor: CurrentActor, service: Mentorship):
    """Accept a pending request (mentor only). Retries answer ``already_applied``."""
    service.accept(actor, request_id)
    return MentorshipActionResponse(message="Mentorship request accepted")


@router.post("/requests/{request_id}/reject", response_model=MentorshipActionResponse)
async def reject_request(
    request_id: UUID,
    actor: CurrentActor,
    service: Mentorship,
    body: MentorshipReject | None = None,
):
    suggested = body.suggested_mentor_id if body else None
    service.reject(actor, request_id, suggested)
    return MentorshipActionResponse(message="Mentorship request rejected")


@router.post("/requests/{request_id}/cancel", response_model=MentorshipActionResponse)
async def cancel_request(request_id: UUID, actor: CurrentActor, service: Mentorship):
    service.cancel_pending(actor, request_id)
    return MentorshipActionResponse(message="Mentorship request cancelled")


@router.post("/requests/{request_id}/leave", response_model=MentorshipActionResponse)
async def leave_mentorship(request_id: UUID, actor: CurrentActor, service: Mentorship):
    service.cancel_accepted(actor, request_id)
    return MentorshipActionResponse(message="You have left the mentorship")


@router.post("/requests/{request_id}/complete", response_model=MentorshipActionResponse)
async def complete_mentorship(
    request_id: UUID, actor: CurrentActor, service: Mentorship
):
    service.complete(request_id, actor)
    return MentorshipActionResponse(message="Mentorship completed")


@router.post("/requests/{request_id}/feedback", response_model=MentorshipActionResponse)
async def submit_feedback(
    request_id: UUID,
    body: MentorshipFeedback,
    actor: CurrentActor,
    service: Mentorship,
):
    service.submit_feedback(actor, request_id, body.helpful, body.as_mentor)
    return MentorshipActionResponse(message="Thanks for your feedback")


@router.get("/requests/{request_id}/suggestion", response_model=MentorListing | None)
async def get_suggestion(request_id: UUID, actor: CurrentActor, service: Mentorship):
    """The mentor suggested on rejection, or null when they cannot take requests."""
    return service.suggestion_for(actor, request_id)


@router.post(
    "/requests/{request_id}/suggestion/request",
    response_model=MentorshipRequestResponse,
    status_code=status.HTTP_201_CREATED,
)
async def request_suggested_mentor(
    request_id: UUID,
    actor: CurrentActor,
    service: Mentorship,
    store: Store,
):
    request = service.request_suggested_mentor(actor, request_id)
    return _build_request_responses(store, [request])[0]


# ==========================================
# Maintenance
# ==========================================


@router.post(
    "/maintenance/expire",
    response_model=ExpireSweepResponse,
    dependencies=[Depends(require_internal_secret)],
)
async def expire_stale_requests(service: Mentorship):
    """Cancel requests left pending past the expiry window. Safe to call repeatedly."""
    expired = service.auto_expire_sweep()
    return ExpireSweepResponse(
        expired=len(expired), request_ids=[r.id for r in expired]
    )
