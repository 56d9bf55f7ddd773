"""Meal structure building, validation and persistence."""

import logging
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, replace
from typing import Protocol
from uuid import UUID

from nutri_planner.domain.errors import InvalidStructure, NotFound, SlotViolation
from nutri_planner.domain.structures import (
    MealSlot,
    MealStructure,
    PlanningProfile,
    ValidationResult,
)
from nutri_planner.templates import (
    BOUNDS_EXEMPT_TEMPLATES,
    FASTING_SLOT_BOUNDS,
    FASTING_TEMPLATES,
    TEMPLATES,
    template_slots,
    templates_for,
)

FULL_DAY_PCT = 100
PERCENT_TOLERANCE = 0.5
LEGACY_FRACTION_CEILING = 1.5

_logger = logging.getLogger(__name__)


def build_from_template(template_id: str, daily_calories: float) -> MealStructure:
    """Build a structure from a named template with target calories."""
    template = TEMPLATES.get(template_id)
    if template is None:
        raise NotFound("template", template_id)
    return recalculate_targets(template_slots(template), daily_calories)


def template_for_meal_count(count: int, *, fasting: bool = False) -> MealStructure:
    """Return the template slots for a number of meals per day."""
    for template in templates_for(fasting=fasting):
        if template.meal_count == count:
            return template_slots(template)
    kind = "fasting template" if fasting else "template"
    raise NotFound(kind, f"{count} meals")


def build_fasting_structure(
    selected_meals: list[str], daily_calories: float
) -> MealStructure | None:
    """Resolve a checklist of fasting meals to the matching template."""
    selected = sorted(set(selected_meals))
    for template in FASTING_TEMPLATES:
        if sorted(slot.name for slot in template.slots) == selected:
            return recalculate_targets(template_slots(template), daily_calories)
    return None


def normalize_percentages(structure: MealStructure) -> MealStructure:
    """Scale legacy fractional percentages (summing to <= 1.5) up to 0-100."""
    negative = [slot for slot in structure if slot.percentage < 0]
    if negative:
        raise InvalidStructure(
            [
                SlotViolation(
                    slot_name=slot.name,
                    message=f"{slot.name}: percentage cannot be negative",
                    actual=slot.percentage,
                    minimum=0,
                    maximum=100,
                )
                for slot in negative
            ]
        )
    total = sum(slot.percentage for slot in structure)
    if 0 < total <= LEGACY_FRACTION_CEILING:
        return [
            replace(slot, percentage=slot.percentage * FULL_DAY_PCT)
            for slot in structure
        ]
    return list(structure)


def validate(structure: MealStructure, *, fasting: bool = False) -> ValidationResult:
    """Validate a structure, reporting every violation found."""
    normalized = normalize_percentages(structure)
    total = sum(slot.percentage for slot in normalized)
    violations: list[SlotViolation] = []

    if not normalized:
        violations.append(SlotViolation(None, "Meal structure has no slots"))
    elif abs(total - FULL_DAY_PCT) > PERCENT_TOLERANCE:
        violations.append(
            SlotViolation(
                slot_name=None,
                message=f"Percentages must sum to 100% (currently {total:.1f}%)",
                actual=total,
                minimum=FULL_DAY_PCT - PERCENT_TOLERANCE,
                maximum=FULL_DAY_PCT + PERCENT_TOLERANCE,
            )
        )

    counts = Counter(slot.name for slot in normalized)
    for name, count in counts.items():
        if count > 1:
            violations.append(
                SlotViolation(name, f"{name}: slot name appears {count} times")
            )

    if fasting and not _is_exempt_template(normalized):
        violations.extend(_fasting_violations(normalized))

    return ValidationResult(
        structure=normalized, total_percentage=total, violations=violations
    )


def recalculate_targets(
    structure: MealStructure, daily_calories: float
) -> MealStructure:
    """Re-derive target calories for every slot, keeping percentages."""
    return [slot.with_target(daily_calories) for slot in structure]


def _shares(slots: Iterable[MealSlot]) -> list[tuple[str, float]]:
    return sorted((slot.name, float(slot.percentage)) for slot in slots)


def _is_exempt_template(structure: MealStructure) -> bool:
    """Return True when the structure is exactly a bounds-exempt template."""
    shares = _shares(structure)
    return any(
        shares == _shares(TEMPLATES[template_id].slots)
        for template_id in BOUNDS_EXEMPT_TEMPLATES
    )


def _fasting_violations(structure: MealStructure) -> list[SlotViolation]:
    violations = []
    for slot in structure:
        bounds = FASTING_SLOT_BOUNDS.get(slot.name)
        if bounds is None or bounds.contains(slot.percentage):
            continue
        violations.append(
            SlotViolation(
                slot_name=slot.name,
                message=(
                    f"{slot.label or slot.name} must be {bounds.describe()} "
                    f"(currently {slot.percentage:g}%)"
                ),
                actual=slot.percentage,
                minimum=bounds.minimum,
                maximum=bounds.maximum,
            )
        )
    return violations


class ProfileRepository(Protocol):
    """Persistence interface for planning fields on user profiles."""

    def get_planning_profile(self, user_id: UUID) -> PlanningProfile | None:
        """Return the user's planning profile, if present."""

    def save_meal_structure(
        self, user_id: UUID, structure: MealStructure, *, fasting: bool
    ) -> None:
        """Persist the standard or fasting meal structure."""

    def save_daily_calories(self, user_id: UUID, daily_calories: int) -> None:
        """Persist the user's daily calorie target."""


@dataclass
class MealStructureService:
    """Assigns validated meal structures to user profiles."""

    repository: ProfileRepository

    def assign_structure(
        self,
        user_id: UUID,
        structure: MealStructure,
        *,
        fasting: bool = False,
        daily_calories: int | None = None,
    ) -> MealStructure:
        """Validate, stamp targets and persist a structure for a user."""
        profile = self._require_profile(user_id)
        normalized = validate(structure, fasting=fasting).raise_for_errors()
        calories = daily_calories or profile.daily_calories
        if calories:
            normalized = recalculate_targets(normalized, calories)
        else:
            normalized = [replace(slot, target_calories=None) for slot in normalized]
        if daily_calories:
            self.repository.save_daily_calories(user_id, daily_calories)
        self.repository.save_meal_structure(user_id, normalized, fasting=fasting)
        _logger.info(
            "Assigned %s meal structure: user=%s slots=%s",
            "fasting" if fasting else "standard",
            user_id,
            len(normalized),
        )
        return normalized

    def update_daily_calories(
        self, user_id: UUID, daily_calories: int
    ) -> PlanningProfile:
        """Change the calorie budget and regenerate both structures' targets."""
        profile = self._require_profile(user_id)
        self.repository.save_daily_calories(user_id, daily_calories)
        standard = recalculate_targets(
            normalize_percentages(profile.meal_structure), daily_calories
        )
        fasting = recalculate_targets(
            normalize_percentages(profile.fasting_meal_structure), daily_calories
        )
        if standard:
            self.repository.save_meal_structure(user_id, standard, fasting=False)
        if fasting:
            self.repository.save_meal_structure(user_id, fasting, fasting=True)
        return PlanningProfile(
            user_id=user_id,
            daily_calories=daily_calories,
            meal_structure=standard,
            fasting_meal_structure=fasting,
        )

    def _require_profile(self, user_id: UUID) -> PlanningProfile:
        profile = self.repository.get_planning_profile(user_id)
        if profile is None:
            raise NotFound("profile", user_id)
        return profile
