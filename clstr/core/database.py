from functools import lru_cache

from supabase import Client, create_client

from clstr.core.config import settings


@lru_cache
def get_supabase() -> Client:
    """Service-role client, created on first use so imports never hit the network."""
    if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_KEY:
        raise RuntimeError("Missing SUPABASE_URL or SUPABASE_SERVICE_KEY")

    return create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_KEY)
