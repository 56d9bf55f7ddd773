"""Swap resolver for ingredients and recipes."""

import logging
from dataclasses import dataclass

from nutri_planner.domain.catalog import CandidateItem, SwapOption
from nutri_planner.domain.nutrition import (
    DEFAULT_WEIGHTS,
    SimilarityWeights,
    round_half_up,
)
from nutri_planner.services.catalog import CatalogRepository, require_item
from nutri_planner.services.macros import (
    DEFAULT_DECAY,
    quality_tier,
    similarity,
    to_macro_profile,
)
from nutri_planner.services.system_settings import SystemSettingsService

DEFAULT_SWAP_LIMIT = 30

_logger = logging.getLogger(__name__)


def group_keys(item: CandidateItem) -> tuple[str, ...]:
    """Return the keys an item is grouped by for substitution."""
    if item.kind == "ingredient":
        return (item.food_group,) if item.food_group else ()
    return item.category_tags


def find_swaps(  # noqa: PLR0913
    original: CandidateItem,
    catalog: CatalogRepository,
    target_amount: float | None = None,
    target_calories: float | None = None,
    weights: SimilarityWeights = DEFAULT_WEIGHTS,
    decay: float = DEFAULT_DECAY,
    limit: int = DEFAULT_SWAP_LIMIT,
) -> list[SwapOption]:
    """Return same-group substitutes, same subgroup first, then by name.

    The calorie target is, in order of precedence, the explicit
    ``target_calories``, the original's density times ``target_amount``, or
    the original's calories at its base serving.
    """
    keys = group_keys(original)
    if not keys:
        return []
    target = _resolve_target(original, target_amount, target_calories)
    original_profile = to_macro_profile(original.nutrition)

    options = []
    for candidate in catalog.find_by_group(original.kind, keys, original.id, limit):
        if candidate.id == original.id:
            continue
        suggested_amount, diff_percent = _equivalent_amount(candidate, target)
        score = similarity(
            original_profile, to_macro_profile(candidate.nutrition), weights, decay
        )
        options.append(
            SwapOption(
                item=candidate,
                suggested_amount=suggested_amount,
                calorie_diff_percent=diff_percent,
                macro_similarity_score=score,
                swap_quality=quality_tier(score),
            )
        )

    options.sort(
        key=lambda option: (
            option.item.subgroup != original.subgroup,
            option.item.name.casefold(),
        )
    )
    return options


def _resolve_target(
    original: CandidateItem,
    target_amount: float | None,
    target_calories: float | None,
) -> float:
    if target_calories is not None:
        return target_calories
    if target_amount is not None:
        return original.calories_per_unit * target_amount
    return original.nutrition.calories


def _equivalent_amount(
    candidate: CandidateItem, target_calories: float
) -> tuple[float | None, int | None]:
    density = candidate.calories_per_unit
    if target_calories <= 0 or density <= 0:
        return None, None
    suggested = round_half_up(target_calories / density, 1)
    actual = suggested * density
    diff_percent = round_half_up((actual - target_calories) / target_calories * 100)
    return suggested, int(diff_percent)


@dataclass
class SwapService:
    """Resolves swaps for catalog items by id."""

    catalog: CatalogRepository
    settings_service: SystemSettingsService
    decay: float = DEFAULT_DECAY
    limit: int = DEFAULT_SWAP_LIMIT

    def find_swaps_for(
        self,
        item_id: str,
        target_amount: float | None = None,
        target_calories: float | None = None,
    ) -> tuple[CandidateItem, list[SwapOption]]:
        """Return the original item and its ranked swap options."""
        original = require_item(self.catalog, item_id)
        options = find_swaps(
            original,
            self.catalog,
            target_amount=target_amount,
            target_calories=target_calories,
            weights=self.settings_service.get_similarity_weights(),
            decay=self.decay,
            limit=self.limit,
        )
        _logger.info("Swaps resolved: item=%s options=%s", item_id, len(options))
        return original, options
