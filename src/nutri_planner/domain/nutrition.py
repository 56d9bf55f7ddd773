"""Nutrition value types."""

import math
from dataclasses import dataclass

PROTEIN_KCAL_PER_G = 4
CARBS_KCAL_PER_G = 4
FAT_KCAL_PER_G = 9


@dataclass(frozen=True)
class NutritionValues:
    """Absolute calories and macro grams."""

    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float

    def __post_init__(self) -> None:
        for field_name in ("calories", "protein_g", "carbs_g", "fat_g"):
            value = getattr(self, field_name)
            if value != value or value < 0:
                raise ValueError(f"{field_name} must be non-negative, got {value}")

    @classmethod
    def from_macros(
        cls,
        protein_g: float,
        carbs_g: float,
        fat_g: float,
        calories: float | None = None,
    ) -> "NutritionValues":
        """Build values, deriving calories from macros only when not stated."""
        if calories is None:
            calories = (
                protein_g * PROTEIN_KCAL_PER_G
                + carbs_g * CARBS_KCAL_PER_G
                + fat_g * FAT_KCAL_PER_G
            )
        return cls(
            calories=float(calories),
            protein_g=float(protein_g),
            carbs_g=float(carbs_g),
            fat_g=float(fat_g),
        )

    def scaled(self, factor: float) -> "NutritionValues":
        """Return values multiplied by a non-negative factor."""
        return NutritionValues(
            calories=self.calories * factor,
            protein_g=self.protein_g * factor,
            carbs_g=self.carbs_g * factor,
            fat_g=self.fat_g * factor,
        )

    def __add__(self, other: "NutritionValues") -> "NutritionValues":
        return NutritionValues(
            calories=self.calories + other.calories,
            protein_g=self.protein_g + other.protein_g,
            carbs_g=self.carbs_g + other.carbs_g,
            fat_g=self.fat_g + other.fat_g,
        )

    def as_dict(self) -> dict[str, float]:
        """Return a JSON-friendly representation."""
        return {
            "calories": self.calories,
            "protein_g": self.protein_g,
            "carbs_g": self.carbs_g,
            "fat_g": self.fat_g,
        }


ZERO_NUTRITION = NutritionValues(0.0, 0.0, 0.0, 0.0)


@dataclass(frozen=True)
class MacroProfile:
    """Macros expressed as whole-number percentages of total calories."""

    protein_pct: int
    carbs_pct: int
    fat_pct: int

    def __post_init__(self) -> None:
        for field_name in ("protein_pct", "carbs_pct", "fat_pct"):
            if getattr(self, field_name) < 0:
                raise ValueError(f"{field_name} must be non-negative")

    def as_dict(self) -> dict[str, int]:
        """Return a JSON-friendly representation."""
        return {
            "protein_pct": self.protein_pct,
            "carbs_pct": self.carbs_pct,
            "fat_pct": self.fat_pct,
        }


@dataclass(frozen=True)
class SimilarityWeights:
    """Per-macro weights for similarity scoring."""

    protein: float = 0.5
    carbs: float = 0.3
    fat: float = 0.2

    def __post_init__(self) -> None:
        if min(self.protein, self.carbs, self.fat) < 0:
            raise ValueError("similarity weights must be non-negative")


@dataclass(frozen=True)
class ScalingLimits:
    """Allowed portion scale factor range."""

    min_scale_factor: float = 0.5
    max_scale_factor: float = 2.0

    def __post_init__(self) -> None:
        if self.min_scale_factor <= 0:
            raise ValueError("min_scale_factor must be positive")
        if self.max_scale_factor < self.min_scale_factor:
            raise ValueError("max_scale_factor must be >= min_scale_factor")

    def allows(self, scale_factor: float) -> bool:
        """Return True when the factor lies inside the inclusive range."""
        return self.min_scale_factor <= scale_factor <= self.max_scale_factor


DEFAULT_WEIGHTS = SimilarityWeights()
DEFAULT_SCALING_LIMITS = ScalingLimits()


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves upward, matching the stored-data rounding convention."""
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor
