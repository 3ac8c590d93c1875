import hmac
from functools import lru_cache
from typing import Annotated
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel
from supabase_auth import UserResponse

from clstr.core.config import settings
from clstr.core.database import get_supabase
from clstr.core.notifications import Notifier
from clstr.core.permissions import Actor, normalize_role, permissions_for
from clstr.core.realtime import router as invalidation_router
from clstr.repositories.base import MentorshipStore
from clstr.repositories.memory import MemoryStore
from clstr.repositories.supabase_store import SupabaseStore
from clstr.services.directory import MentorDirectory
from clstr.services.mentorship import MentorshipService

security = HTTPBearer(
    scheme_name="Access Token",
)


class CurrentUser(BaseModel):
    id: UUID
    email: str | None = None


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
) -> CurrentUser:
    token = credentials.credentials

    try:
        user_response: UserResponse = get_supabase().auth.get_user(token)

        if not user_response or not user_response.user:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
            )

        return CurrentUser(
            id=UUID(user_response.user.id), email=user_response.user.email
        )
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))


AuthenticatedUser = Annotated[CurrentUser, Depends(get_current_user)]


@lru_cache
def get_store() -> MentorshipStore:
    if settings.STORE_BACKEND == "memory":
        return MemoryStore()
    return SupabaseStore(get_supabase())


Store = Annotated[MentorshipStore, Depends(get_store)]


def get_actor(user: AuthenticatedUser, store: Store) -> Actor:
    """Resolve role, college and capabilities for the caller once per request."""
    profile = store.get_profile(user.id)
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Complete your profile first.",
        )

    return Actor(
        id=user.id,
        role=normalize_role(profile.role),
        permissions=permissions_for(profile.role),
        college_domain=profile.college_domain,
    )


CurrentActor = Annotated[Actor, Depends(get_actor)]


def get_mentorship_service(store: Store) -> MentorshipService:
    return MentorshipService(store, Notifier(store), events=invalidation_router)


def get_directory(store: Store) -> MentorDirectory:
    return MentorDirectory(store)


Mentorship = Annotated[MentorshipService, Depends(get_mentorship_service)]
Directory = Annotated[MentorDirectory, Depends(get_directory)]


async def require_internal_secret(
    x_internal_secret: Annotated[str | None, Header()] = None,
) -> None:
    """Guard for cron and database-webhook callers that share SECRET_KEY."""
    if x_internal_secret is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    if not hmac.compare_digest(x_internal_secret, settings.SECRET_KEY):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid internal secret.",
        )
