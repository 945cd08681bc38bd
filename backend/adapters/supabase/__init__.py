"""
Supabase integration.
"""

from .supabase_adapter import (
    SupabaseAdapter,
    SupabaseConfigError,
    SupabaseStatus,
    get_supabase_adapter,
)

__all__ = [
    "SupabaseAdapter",
    "SupabaseConfigError",
    "SupabaseStatus",
    "get_supabase_adapter",
]
