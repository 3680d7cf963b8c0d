"""Supabase client initialization."""

from functools import lru_cache

from supabase import Client, create_client

from ..config.settings import SUPABASE_CONFIG


def supabase_configured() -> bool:
    return bool(SUPABASE_CONFIG["url"] and SUPABASE_CONFIG["service_role_key"])


@lru_cache(maxsize=1)
def get_supabase() -> Client:
    """
    Get Supabase client instance (cached singleton).

    Returns:
        Supabase client configured with service role key

    Raises:
        RuntimeError: If client initialization fails
    """
    try:
        return create_client(SUPABASE_CONFIG["url"], SUPABASE_CONFIG["service_role_key"])
    except Exception as e:
        raise RuntimeError(f"Failed to initialize Supabase client: {e}") from e
