"""Tenant settings caching."""

from eslsync.settings.cache import SettingsCache

__all__ = ["SettingsCache"]
