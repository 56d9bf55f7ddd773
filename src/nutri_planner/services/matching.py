"""Portion scaling matcher for meal slots."""

import logging

from nutri_planner.domain.catalog import CandidateItem, DietaryFilters, ScaledCandidate
from nutri_planner.domain.nutrition import ScalingLimits
from nutri_planner.services.catalog import CatalogRepository

DEFAULT_CANDIDATE_LIMIT = 20
DEFAULT_ALTERNATIVE_LIMIT = 10
CATALOG_FETCH_LIMIT = 100
FALLBACK_TARGET_CALORIES = 500

_SNACK_TAGS = ("snacks & sweetes", "smoothies")

# Slot category -> catalog meal_type tags. Dinner reuses lunch tags because the
# catalog has no dedicated dinner tag.
SLOT_CATEGORY_TAGS: dict[str, tuple[str, ...]] = {
    "breakfast": ("breakfast", "smoothies"),
    "lunch": ("lunch", "one pot"),
    "dinner": ("lunch", "one pot", "breakfast"),
    "snack": _SNACK_TAGS,
    "snacks": _SNACK_TAGS,
    "snack_1": _SNACK_TAGS,
    "snack_2": _SNACK_TAGS,
    "snack_3": _SNACK_TAGS,
    "mid_morning": _SNACK_TAGS,
    "afternoon": _SNACK_TAGS,
    "pre-iftar": ("pre-iftar", "smoothies"),
    "iftar": ("lunch",),
    "full-meal-taraweeh": ("lunch", "dinner"),
    "snack-taraweeh": ("snack", "snacks & sweetes"),
    "suhoor": ("breakfast", "dinner"),
}

_logger = logging.getLogger(__name__)


def accepted_tags(slot_category: str) -> tuple[str, ...]:
    """Return catalog tags accepted for a slot, defaulting to the slot name."""
    return SLOT_CATEGORY_TAGS.get(slot_category, (slot_category,))


def scale_candidates(
    items: list[CandidateItem],
    target_calories: float,
    scaling_limits: ScalingLimits,
) -> list[ScaledCandidate]:
    """Scale items to the target, drop out-of-range ones, rank by naturalness."""
    scaled = []
    for item in items:
        base_calories = item.nutrition.calories
        if base_calories <= 0:
            continue
        scale_factor = target_calories / base_calories
        if not scaling_limits.allows(scale_factor):
            continue
        scaled.append(
            ScaledCandidate(
                item=item,
                scale_factor=scale_factor,
                scaled_calories=target_calories,
            )
        )
    scaled.sort(key=lambda candidate: abs(candidate.scale_factor - 1.0))
    return scaled


def find_candidates(  # noqa: PLR0913
    slot_category: str,
    target_calories: float,
    scaling_limits: ScalingLimits,
    catalog: CatalogRepository,
    dietary_filters: DietaryFilters | None = None,
    limit: int = DEFAULT_CANDIDATE_LIMIT,
) -> list[ScaledCandidate]:
    """Return recipes for a slot that scale to the target within limits."""
    tags = accepted_tags(slot_category)
    items = catalog.find_by_category(tags, dietary_filters, CATALOG_FETCH_LIMIT)
    tag_set = set(tags)
    items = [
        item
        for item in items
        if tag_set.intersection(item.category_tags) and item.satisfies(dietary_filters)
    ]
    ranked = scale_candidates(items, target_calories, scaling_limits)
    if not ranked:
        _logger.info(
            "No candidates: slot=%s target=%s fetched=%s",
            slot_category,
            target_calories,
            len(items),
        )
    return ranked[:limit]


def find_alternatives(
    original: CandidateItem,
    catalog: CatalogRepository,
    scaling_limits: ScalingLimits,
    target_calories: float | None = None,
    limit: int = DEFAULT_ALTERNATIVE_LIMIT,
) -> list[ScaledCandidate]:
    """Return recipes sharing a category with the original, scaled to a target."""
    if not original.category_tags:
        return []
    target = (
        target_calories or original.nutrition.calories or FALLBACK_TARGET_CALORIES
    )
    items = catalog.find_by_group(
        "recipe", original.category_tags, original.id, CATALOG_FETCH_LIMIT
    )
    items = [item for item in items if item.id != original.id]
    return scale_candidates(items, target, scaling_limits)[:limit]
