"""Supabase repository for planning fields on user profiles."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from nutri_planner.domain.structures import MealStructure, PlanningProfile, parse_slots
from nutri_planner.services.structures import ProfileRepository

PROFILES_TABLE = "profiles"


@dataclass
class SupabaseProfileRepository(ProfileRepository):
    """Stores meal structures under ``preferences`` and calories under ``targets``."""

    client: Client

    def get_planning_profile(self, user_id: UUID) -> PlanningProfile | None:
        """Return the planning fields of a profile."""
        row = self._fetch(user_id)
        if row is None:
            return None
        preferences = _as_dict(row.get("preferences"))
        targets = _as_dict(row.get("targets"))
        calories = targets.get("daily_calories")
        return PlanningProfile(
            user_id=user_id,
            daily_calories=int(calories) if isinstance(calories, int | float) else None,
            meal_structure=parse_slots(preferences.get("meal_structure")),
            fasting_meal_structure=parse_slots(
                preferences.get("fasting_meal_structure")
            ),
        )

    def save_meal_structure(
        self, user_id: UUID, structure: MealStructure, *, fasting: bool
    ) -> None:
        """Merge a meal structure into the profile preferences."""
        row = self._require(user_id)
        preferences = _as_dict(row.get("preferences"))
        key = "fasting_meal_structure" if fasting else "meal_structure"
        preferences[key] = [slot.as_dict() for slot in structure]
        self._update(user_id, {"preferences": preferences})

    def save_daily_calories(self, user_id: UUID, daily_calories: int) -> None:
        """Merge the daily calorie target into the profile targets."""
        row = self._require(user_id)
        targets = _as_dict(row.get("targets"))
        targets["daily_calories"] = daily_calories
        self._update(user_id, {"targets": targets})

    def _fetch(self, user_id: UUID) -> dict[str, object] | None:
        response = (
            self.client.table(PROFILES_TABLE)
            .select("id, preferences, targets")
            .eq("id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return response.data[0]

    def _require(self, user_id: UUID) -> dict[str, object]:
        row = self._fetch(user_id)
        if row is None:
            raise RuntimeError(f"Profile not found: {user_id}")
        return row

    def _update(self, user_id: UUID, payload: dict[str, object]) -> None:
        response = (
            self.client.table(PROFILES_TABLE)
            .update({**payload, "updated_at": datetime.now(tz=UTC).isoformat()})
            .eq("id", str(user_id))
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to update profile")


def _as_dict(value: object) -> dict[str, object]:
    return dict(value) if isinstance(value, dict) else {}
