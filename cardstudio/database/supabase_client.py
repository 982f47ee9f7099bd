import threading

from supabase import create_client, Client

from cardstudio.core.config import settings

# Thread-local storage for Supabase client to avoid connection pool sharing issues
_thread_local = threading.local()


def get_supabase_client() -> Client:
    """Get a thread-local Supabase client.

    FastAPI runs sync routes in a thread pool; each thread keeps its own
    client so pooled HTTP/2 connections are never shared across threads.
    """
    if not is_configured():
        raise RuntimeError(
            "Supabase credentials not configured. "
            "Set SUPABASE_URL and SUPABASE_SECRET_KEY environment variables."
        )

    if not hasattr(_thread_local, "client"):
        _thread_local.client = create_client(
            settings.supabase_url,
            settings.supabase_secret_key,
        )
    return _thread_local.client


def reset_supabase_client() -> None:
    """Drop the thread-local client so the next call opens a fresh connection."""
    if hasattr(_thread_local, "client"):
        delattr(_thread_local, "client")


def is_configured() -> bool:
    return bool(settings.supabase_url and settings.supabase_secret_key)
