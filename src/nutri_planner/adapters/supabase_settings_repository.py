"""Supabase repository for system-wide settings."""

from dataclasses import dataclass

from supabase import Client

from nutri_planner.services.system_settings import SettingsRepository


@dataclass
class SupabaseSettingsRepository(SettingsRepository):
    """Supabase implementation over the key/value settings table."""

    client: Client

    def get_value(self, key: str) -> object | None:
        """Return the stored value for a key."""
        response = (
            self.client.table("system_settings")
            .select("value")
            .eq("key", key)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return response.data[0].get("value")
