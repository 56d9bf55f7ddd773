"""Meal structure domain models."""

from dataclasses import dataclass, field, replace
from uuid import UUID

from nutri_planner.domain.errors import InvalidStructure, SlotViolation
from nutri_planner.domain.nutrition import round_half_up


@dataclass(frozen=True)
class MealSlot:
    """Named share of the daily calorie budget."""

    name: str
    label: str
    percentage: float
    target_calories: int | None = None

    def with_target(self, daily_calories: float) -> "MealSlot":
        """Return a copy with target calories derived from the budget."""
        return replace(
            self,
            target_calories=int(round_half_up(daily_calories * self.percentage / 100)),
        )

    def as_dict(self) -> dict[str, object]:
        """Return a JSON-friendly representation."""
        payload: dict[str, object] = {
            "name": self.name,
            "label": self.label,
            "percentage": self.percentage,
        }
        if self.target_calories is not None:
            payload["target_calories"] = self.target_calories
        return payload


MealStructure = list[MealSlot]


@dataclass(frozen=True)
class SlotBounds:
    """Inclusive percentage range for a named slot."""

    minimum: float = 0.0
    maximum: float = 100.0

    def contains(self, percentage: float) -> bool:
        """Return True when the percentage is inside the range."""
        return self.minimum <= percentage <= self.maximum

    def describe(self) -> str:
        """Return a short human-readable range."""
        if self.minimum <= 0:
            return f"at most {self.maximum:g}%"
        return f"{self.minimum:g}-{self.maximum:g}%"


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating a meal structure."""

    structure: MealStructure
    total_percentage: float
    violations: list[SlotViolation] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        """Return True when there are no violations."""
        return not self.violations

    def violations_for(self, slot_name: str) -> list[SlotViolation]:
        """Return violations reported against a slot."""
        return [v for v in self.violations if v.slot_name == slot_name]

    def raise_for_errors(self) -> MealStructure:
        """Return the normalized structure or raise InvalidStructure."""
        if self.violations:
            raise InvalidStructure(self.violations)
        return self.structure

    def as_dict(self) -> dict[str, object]:
        """Return a JSON-friendly representation."""
        return {
            "valid": self.is_valid,
            "total_percentage": self.total_percentage,
            "structure": [slot.as_dict() for slot in self.structure],
            "violations": [violation.as_dict() for violation in self.violations],
        }


def parse_slots(rows: list[dict[str, object]] | None) -> MealStructure:
    """Parse stored slot rows into meal slots."""
    slots: MealStructure = []
    for row in rows or []:
        target = row.get("target_calories")
        slots.append(
            MealSlot(
                name=str(row.get("name", "")),
                label=str(row.get("label") or row.get("name", "")),
                percentage=float(row.get("percentage") or 0.0),
                target_calories=(
                    int(target) if isinstance(target, int | float) else None
                ),
            )
        )
    return slots


@dataclass(frozen=True)
class PlanningProfile:
    """Planning-relevant fields stored on a user profile."""

    user_id: UUID
    daily_calories: int | None
    meal_structure: MealStructure = field(default_factory=list)
    fasting_meal_structure: MealStructure = field(default_factory=list)
