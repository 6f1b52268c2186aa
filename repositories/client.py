"""
Ledger configuration and Supabase client initialization.

This module reads settings from the environment (optionally from a `.env`
file at the project root) and builds the Supabase client used by the
Supabase ledger adapter.

Environment variables:
- LEDGER_BACKEND: "memory" (default) or "supabase"
- LEDGER_TABLE: Supabase table holding ledger state (default: ledger_state)
- SUPABASE_URL: Your Supabase project URL (supabase backend only)
- SUPABASE_KEY: Your Supabase API key (use a server-side key only on the backend)
- LOG_LEVEL: logging level for the API process (default: INFO)
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from supabase import Client, create_client  # type: ignore[import-not-found]

# Load environment variables from .env file in the project root
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

LEDGER_BACKEND: str = os.getenv("LEDGER_BACKEND", "memory").strip().lower()
LEDGER_TABLE: str = os.getenv("LEDGER_TABLE", "ledger_state")
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()


@lru_cache(maxsize=1)
def get_supabase_client() -> Client:
    """
    Create the Supabase client from SUPABASE_URL / SUPABASE_KEY.

    Credentials are only required when the Supabase backend is actually used,
    so the in-memory backend and the test suite run without them.
    """

    supabase_url = os.getenv("SUPABASE_URL")
    supabase_key = os.getenv("SUPABASE_KEY")

    if not supabase_url:
        raise RuntimeError(
            "Missing environment variable: SUPABASE_URL. "
            "Set SUPABASE_URL to your Supabase project URL."
        )

    if not supabase_key:
        raise RuntimeError(
            "Missing environment variable: SUPABASE_KEY. "
            "Set SUPABASE_KEY to your Supabase API key."
        )

    return create_client(supabase_url, supabase_key)


__all__ = ["LEDGER_BACKEND", "LEDGER_TABLE", "LOG_LEVEL", "get_supabase_client"]
