"""Build an application context from settings."""

from cafe_checkin.config import Settings
from cafe_checkin.context import AppContext
from cafe_checkin.navigation import (
    JsonFilePreferences,
    MemoryPreferences,
    NavigationHistory,
    PreferenceStore,
)
from cafe_checkin.notifications import Notifier
from cafe_checkin.store.base import BaseStore


def _build_supabase_store(settings: Settings) -> BaseStore:
    from cafe_checkin.store.supabase import SupabaseStore

    return SupabaseStore(
        settings.supabase_url,
        settings.supabase_anon_key,
        timeout_sec=settings.timeout_sec,
    )


def _build_memory_store() -> BaseStore:
    from cafe_checkin.store.memory import MemoryStore

    return MemoryStore()


def _select_store(settings: Settings) -> BaseStore:
    if settings.store == "supabase":
        return _build_supabase_store(settings)
    if settings.store == "memory":
        return _build_memory_store()
    raise ValueError(f"Unsupported store: {settings.store}")


def _select_preferences(settings: Settings) -> PreferenceStore:
    if settings.preferences_path:
        return JsonFilePreferences(settings.preferences_path)
    return MemoryPreferences()


def create_app_context(
    settings: Settings | None = None,
    *,
    store: BaseStore | None = None,
    notifier: Notifier | None = None,
    history: NavigationHistory | None = None,
    preferences: PreferenceStore | None = None,
) -> AppContext:
    """Create an unloaded AppContext.

    Args:
        settings: Settings to use. Defaults to ``Settings.from_env()``.
        store: Store to use instead of the one named by the settings.
        notifier: Notification sink. Defaults to logging.
        history: Navigation history. Defaults to an in-memory stack.
        preferences: Preference slot. Defaults to the settings' JSON file,
            or memory when no path is set.

    Returns:
        AppContext; call ``await context.load()`` before use.
    """
    settings = settings or Settings.from_env()
    return AppContext(
        store if store is not None else _select_store(settings),
        notifier=notifier,
        history=history,
        preferences=preferences if preferences is not None else _select_preferences(settings),
    )
