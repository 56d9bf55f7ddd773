"""Catalog domain models for recipes and ingredients."""

from dataclasses import dataclass, field
from typing import Literal

from nutri_planner.domain.nutrition import NutritionValues

ItemKind = Literal["recipe", "ingredient"]


@dataclass(frozen=True)
class DietaryFilters:
    """Hard dietary excludes applied to catalog queries."""

    vegetarian: bool = False
    vegan: bool = False
    gluten_free: bool = False
    dairy_free: bool = False

    def active(self) -> list[str]:
        """Return the names of the enabled filters."""
        return [
            name
            for name in ("vegetarian", "vegan", "gluten_free", "dairy_free")
            if getattr(self, name)
        ]


@dataclass(frozen=True)
class CandidateItem:
    """A recipe or ingredient as exposed by the catalog."""

    id: str
    name: str
    kind: ItemKind
    nutrition: NutritionValues
    category_tags: tuple[str, ...] = ()
    base_unit_size: float = 1.0
    serving_unit: str = "serving"
    food_group: str | None = None
    subgroup: str | None = None
    flags: frozenset[str] = field(default_factory=frozenset)

    @property
    def calories_per_unit(self) -> float:
        """Return calories per single unit of the base serving."""
        if self.base_unit_size <= 0:
            return 0.0
        return self.nutrition.calories / self.base_unit_size

    def satisfies(self, filters: DietaryFilters | None) -> bool:
        """Return True when the item carries every requested dietary flag."""
        if filters is None:
            return True
        return all(flag in self.flags for flag in filters.active())

    def as_dict(self) -> dict[str, object]:
        """Return a JSON-friendly representation."""
        return {
            "id": self.id,
            "name": self.name,
            "kind": self.kind,
            "category_tags": list(self.category_tags),
            "nutrition": self.nutrition.as_dict(),
            "base_unit_size": self.base_unit_size,
            "serving_unit": self.serving_unit,
            "food_group": self.food_group,
            "subgroup": self.subgroup,
        }


@dataclass(frozen=True)
class ScaledCandidate:
    """A candidate scaled to hit a calorie target."""

    item: CandidateItem
    scale_factor: float
    scaled_calories: float

    @property
    def servings(self) -> float:
        """Return the scale factor rounded for storage and display."""
        return round(self.scale_factor, 2)

    def as_dict(self) -> dict[str, object]:
        """Return a JSON-friendly representation."""
        return {
            "item": self.item.as_dict(),
            "scale_factor": self.scale_factor,
            "servings": self.servings,
            "scaled_calories": self.scaled_calories,
        }


@dataclass(frozen=True)
class SwapOption:
    """A same-group substitute with equivalence and similarity data."""

    item: CandidateItem
    suggested_amount: float | None
    calorie_diff_percent: int | None
    macro_similarity_score: int
    swap_quality: str

    def as_dict(self) -> dict[str, object]:
        """Return a JSON-friendly representation."""
        return {
            "item": self.item.as_dict(),
            "suggested_amount": self.suggested_amount,
            "calorie_diff_percent": self.calorie_diff_percent,
            "macro_similarity_score": self.macro_similarity_score,
            "swap_quality": self.swap_quality,
        }
