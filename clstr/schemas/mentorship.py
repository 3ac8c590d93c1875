from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field


class RequestStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


ACTIVE_STATUSES = frozenset({RequestStatus.PENDING, RequestStatus.ACCEPTED})


class HelpType(str, Enum):
    OCCASIONAL_GUIDANCE = "occasional_guidance"
    CAREER_ADVICE = "career_advice"
    PROJECT_GUIDANCE = "project_guidance"
    EXAM_GUIDANCE = "exam_guidance"
    GENERAL = "general"


class CommitmentLevel(str, Enum):
    OCCASIONAL = "occasional"
    MODERATE = "moderate"
    DEDICATED = "dedicated"


class BadgeStatus(str, Enum):
    AVAILABLE = "available"
    SLOTS_FULL = "slots_full"
    PAUSED = "paused"
    INACTIVE = "inactive"


# ------------------------------------------------------------------
# Rows
# ------------------------------------------------------------------


class Profile(BaseModel):
    id: UUID
    full_name: str | None = None
    avatar_url: str | None = None
    role: str | None = None
    college_domain: str | None = None
    university: str | None = None
    bio: str | None = None


class MentorshipRequest(BaseModel):
    id: UUID
    mentee_id: UUID
    mentor_id: UUID
    college_domain: str | None = None
    topics: list[str] = Field(default_factory=list)
    message: str | None = None
    status: RequestStatus = RequestStatus.PENDING
    accepted_at: datetime | None = None
    responded_at: datetime | None = None
    completed_at: datetime | None = None
    auto_expired: bool = False
    suggested_mentor_id: UUID | None = None
    mentee_feedback: bool | None = None
    mentor_feedback: bool | None = None
    created_at: datetime
    updated_at: datetime

    @property
    def topic(self) -> str:
        return self.topics[0] if self.topics else ""


class MentorOffer(BaseModel):
    mentor_id: UUID
    college_domain: str | None = None
    expertise_areas: list[str] = Field(default_factory=list)
    mentorship_type: str | None = None
    help_type: HelpType = HelpType.GENERAL
    commitment_level: CommitmentLevel = CommitmentLevel.OCCASIONAL
    session_duration: str | None = None
    preferred_communication: list[str] = Field(default_factory=list)
    availability_schedule: str | None = None
    available_slots: int = Field(3, ge=0)
    current_mentees: int = Field(0, ge=0)
    is_active: bool = True
    is_paused: bool = False
    last_active_at: datetime | None = None
    avg_response_hours: float | None = None
    total_requests_received: int = 0
    total_requests_accepted: int = 0
    total_requests_responded: int = 0
    total_requests_ignored: int = 0
    total_mentees_helped: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def remaining_slots(self) -> int:
        return max(0, self.available_slots - self.current_mentees)


# ------------------------------------------------------------------
# Request bodies
# ------------------------------------------------------------------


class MentorshipRequestCreate(BaseModel):
    mentor_id: UUID
    topic: str = Field(..., min_length=1, max_length=200)
    message: str | None = Field(None, max_length=1000)


class MentorshipReject(BaseModel):
    suggested_mentor_id: UUID | None = None


class MentorshipFeedback(BaseModel):
    helpful: bool
    as_mentor: bool = False


class MentorOfferUpdate(BaseModel):
    is_active: bool = True
    # None leaves the current pause state untouched
    is_paused: bool | None = None
    mentorship_type: str | None = Field("One-on-One", max_length=100)
    session_duration: str | None = Field("30 minutes", max_length=100)
    available_slots: int = Field(5, ge=0, le=50)
    preferred_communication: list[str] = Field(default_factory=list)
    availability_schedule: str | None = Field(None, max_length=500)
    expertise_areas: list[str] = Field(default_factory=list)
    help_type: HelpType = HelpType.GENERAL
    commitment_level: CommitmentLevel = CommitmentLevel.OCCASIONAL


class MentorOfferPause(BaseModel):
    paused: bool


# ------------------------------------------------------------------
# Responses
# ------------------------------------------------------------------


class MentorHighlight(BaseModel):
    label: str
    icon: str


class MentorListing(BaseModel):
    mentor_id: UUID
    full_name: str
    avatar_url: str | None = None
    role: str | None = None
    university: str | None = None
    bio: str | None = None
    offer: MentorOffer
    remaining_slots: int
    badge_status: BadgeStatus
    highlights: list[MentorHighlight] = Field(default_factory=list)


class MentorListResponse(BaseModel):
    mentors: list[MentorListing]
    total: int


class RequestParty(BaseModel):
    id: UUID
    full_name: str
    avatar_url: str | None = None


class MentorshipRequestResponse(BaseModel):
    id: UUID
    mentee: RequestParty
    mentor: RequestParty
    topics: list[str]
    message: str | None = None
    status: RequestStatus
    auto_expired: bool
    suggested_mentor_id: UUID | None = None
    mentee_feedback: bool | None = None
    mentor_feedback: bool | None = None
    created_at: datetime
    updated_at: datetime
    accepted_at: datetime | None = None
    completed_at: datetime | None = None


class MentorshipRequestListResponse(BaseModel):
    requests: list[MentorshipRequestResponse]
    total: int


class MentorshipActionResponse(BaseModel):
    message: str
    already_applied: bool = False


class ExpireSweepResponse(BaseModel):
    expired: int
    request_ids: list[UUID]
