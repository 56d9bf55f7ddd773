"""Daily plan domain models."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from uuid import UUID

from nutri_planner.domain.nutrition import ZERO_NUTRITION, NutritionValues


class PlanVariant(str, Enum):
    """Independent plan variants stored per user and date."""

    STANDARD = "standard"
    FASTING = "fasting"


@dataclass(frozen=True)
class PlanEntry:
    """A chosen item and how many base servings of it."""

    item_id: str
    servings: float = 1.0

    def as_dict(self) -> dict[str, object]:
        """Return a JSON-friendly representation."""
        return {"item_id": self.item_id, "servings": self.servings}


PlanSlots = dict[str, list[PlanEntry]]


@dataclass(frozen=True)
class DailyPlan:
    """One variant of a user's plan for a date."""

    user_id: UUID
    plan_date: date
    variant: PlanVariant
    slots: PlanSlots = field(default_factory=dict)
    totals: NutritionValues = ZERO_NUTRITION
    version: int = 0

    @property
    def is_empty(self) -> bool:
        """Return True when no slot has an assignment."""
        return not any(self.slots.values())

    def as_dict(self) -> dict[str, object]:
        """Return a JSON-friendly representation."""
        return {
            "user_id": str(self.user_id),
            "plan_date": self.plan_date.isoformat(),
            "variant": self.variant.value,
            "slots": {
                name: [entry.as_dict() for entry in entries]
                for name, entries in self.slots.items()
            },
            "totals": self.totals.as_dict(),
            "version": self.version,
        }


def slots_to_payload(slots: PlanSlots) -> dict[str, list[dict[str, object]]]:
    """Serialize plan slots for storage."""
    return {
        name: [entry.as_dict() for entry in entries]
        for name, entries in slots.items()
        if entries
    }


def slots_from_payload(payload: dict[str, object] | None) -> PlanSlots:
    """Parse stored plan slots, accepting single-entry or list slots."""
    slots: PlanSlots = {}
    for name, raw in (payload or {}).items():
        rows = raw if isinstance(raw, list) else [raw]
        entries = []
        for row in rows:
            if not isinstance(row, dict):
                continue
            item_id = row.get("item_id") or row.get("recipe_id")
            if not item_id:
                continue
            servings = row.get("servings")
            entries.append(
                PlanEntry(
                    item_id=str(item_id),
                    servings=(
                        float(servings) if isinstance(servings, int | float) else 1.0
                    ),
                )
            )
        if entries:
            slots[str(name)] = entries
    return slots
