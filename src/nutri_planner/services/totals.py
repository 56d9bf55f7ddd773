"""Daily totals aggregation."""

from collections.abc import Callable

from nutri_planner.domain.nutrition import (
    ZERO_NUTRITION,
    NutritionValues,
    round_half_up,
)
from nutri_planner.domain.plans import PlanSlots

NutritionLookup = Callable[[str], NutritionValues | None]


def aggregate(
    plan_slots: PlanSlots, nutrition_lookup: NutritionLookup
) -> NutritionValues:
    """Sum per-serving nutrition times servings across every slot entry.

    Unresolvable item ids contribute nothing. Calories are rounded to whole
    numbers and macros to one decimal place.
    """
    total = ZERO_NUTRITION
    for entries in plan_slots.values():
        for entry in entries:
            per_serving = nutrition_lookup(entry.item_id)
            if per_serving is None or entry.servings <= 0:
                continue
            total = total + per_serving.scaled(entry.servings)
    return NutritionValues(
        calories=round_half_up(total.calories),
        protein_g=round_half_up(total.protein_g, 1),
        carbs_g=round_half_up(total.carbs_g, 1),
        fat_g=round_half_up(total.fat_g, 1),
    )


def unresolved_items(
    plan_slots: PlanSlots, nutrition_lookup: NutritionLookup
) -> list[str]:
    """Return item ids the lookup cannot resolve, in plan order."""
    missing: list[str] = []
    for entries in plan_slots.values():
        for entry in entries:
            if entry.item_id not in missing and nutrition_lookup(entry.item_id) is None:
                missing.append(entry.item_id)
    return missing
