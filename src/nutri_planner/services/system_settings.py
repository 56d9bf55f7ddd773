"""System settings lookups with documented defaults."""

import json
import logging
from dataclasses import dataclass, field
from typing import Protocol

from nutri_planner.domain.nutrition import (
    DEFAULT_SCALING_LIMITS,
    DEFAULT_WEIGHTS,
    ScalingLimits,
    SimilarityWeights,
)
from nutri_planner.domain.structures import MealSlot, MealStructure
from nutri_planner.services.structures import normalize_percentages
from nutri_planner.templates import DEFAULT_MEAL_DISTRIBUTION

SCALING_LIMITS_KEY = "scaling_limits"
SIMILARITY_WEIGHTS_KEY = "macro_similarity_weights"
MEAL_DISTRIBUTION_KEY = "meal_distribution"

_logger = logging.getLogger(__name__)


class SettingsRepository(Protocol):
    """Persistence interface for system-wide settings."""

    def get_value(self, key: str) -> object | None:
        """Return the raw stored value for a key, if present."""


@dataclass
class SystemSettingsService:
    """Reads tuning values, falling back to defaults when unset."""

    repository: SettingsRepository
    default_scaling_limits: ScalingLimits = DEFAULT_SCALING_LIMITS
    default_weights: SimilarityWeights = DEFAULT_WEIGHTS
    default_distribution: dict[str, float] = field(
        default_factory=lambda: dict(DEFAULT_MEAL_DISTRIBUTION)
    )

    def get_scaling_limits(self) -> ScalingLimits:
        """Return portion scaling limits."""
        value = self._load(SCALING_LIMITS_KEY)
        if not isinstance(value, dict):
            return self.default_scaling_limits
        defaults = self.default_scaling_limits
        try:
            return ScalingLimits(
                min_scale_factor=float(
                    value.get("min_scale_factor", defaults.min_scale_factor)
                ),
                max_scale_factor=float(
                    value.get("max_scale_factor", defaults.max_scale_factor)
                ),
            )
        except (TypeError, ValueError) as exc:
            _logger.warning(
                "Invalid %s setting, using defaults: %s", SCALING_LIMITS_KEY, exc
            )
            return defaults

    def get_similarity_weights(self) -> SimilarityWeights:
        """Return macro similarity weights."""
        value = self._load(SIMILARITY_WEIGHTS_KEY)
        if not isinstance(value, dict):
            return self.default_weights
        try:
            return SimilarityWeights(
                protein=float(value.get("protein", self.default_weights.protein)),
                carbs=float(value.get("carbs", self.default_weights.carbs)),
                fat=float(value.get("fat", self.default_weights.fat)),
            )
        except (TypeError, ValueError) as exc:
            _logger.warning(
                "Invalid %s setting, using defaults: %s", SIMILARITY_WEIGHTS_KEY, exc
            )
            return self.default_weights

    def get_default_structure(self) -> MealStructure:
        """Return the configured default meal distribution as a structure."""
        value = self._load(MEAL_DISTRIBUTION_KEY)
        distribution = value if isinstance(value, dict) else self.default_distribution
        try:
            slots = [
                MealSlot(
                    name=str(name),
                    label=str(name).replace("_", " ").title(),
                    percentage=float(share),
                )
                for name, share in distribution.items()
            ]
        except (TypeError, ValueError) as exc:
            _logger.warning(
                "Invalid %s setting, using defaults: %s", MEAL_DISTRIBUTION_KEY, exc
            )
            slots = [
                MealSlot(name=name, label=name.title(), percentage=share)
                for name, share in self.default_distribution.items()
            ]
        return normalize_percentages(slots)

    def _load(self, key: str) -> object | None:
        value = self.repository.get_value(key)
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except json.JSONDecodeError:
                _logger.warning("Setting %s is not valid JSON", key)
                return None
        if value is None:
            _logger.warning("Setting %s is not configured, using defaults", key)
        return value
