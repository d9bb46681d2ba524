"""Clients for external collaborators."""

from .supabase import EntityStore, SupabaseStore

__all__ = ["EntityStore", "SupabaseStore"]
