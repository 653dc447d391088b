# classy_backend/core/supabase_client.py
from functools import lru_cache
from supabase import create_client, Client

from classy_backend.core.config import get_settings


@lru_cache
def supabase_admin() -> Client:
    """
    Service-role Supabase client, built on first use.

    Only Storage uploads/deletes (product and custom-design photos) need it,
    so the API boots without the key and fails only when an image is sent.
    The service role bypasses RLS: keep it server-side.

    Raises:
        RuntimeError: SUPABASE_SERVICE_ROLE_KEY is not set.
    """
    settings = get_settings()
    if not settings.SUPABASE_SERVICE_ROLE_KEY:
        raise RuntimeError("Missing SUPABASE_SERVICE_ROLE_KEY in .env")
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)
