"""Remote stores for cafe-checkin."""

from cafe_checkin.store.base import BaseStore, Collection, Record
from cafe_checkin.store.memory import MemoryStore
from cafe_checkin.store.supabase import SupabaseStore

__all__ = ["BaseStore", "Collection", "MemoryStore", "Record", "SupabaseStore"]
