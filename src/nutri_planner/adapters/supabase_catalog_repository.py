"""Supabase implementation for the recipe and ingredient catalog."""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from supabase import Client

from nutri_planner.domain.catalog import CandidateItem, DietaryFilters, ItemKind
from nutri_planner.domain.nutrition import NutritionValues
from nutri_planner.services.catalog import CatalogRepository

RECIPES_TABLE = "recipes"
INGREDIENTS_TABLE = "ingredients"
DEFAULT_INGREDIENT_SERVING = 100.0

_FLAG_COLUMNS = {
    "vegetarian": "is_vegetarian",
    "vegan": "is_vegan",
    "gluten_free": "is_gluten_free",
    "dairy_free": "is_dairy_free",
}

_logger = logging.getLogger(__name__)


@dataclass
class SupabaseCatalogRepository(CatalogRepository):
    """Supabase-backed read access to recipes and ingredients."""

    client: Client

    def find_by_category(
        self, tags: tuple[str, ...], filters: DietaryFilters | None, limit: int
    ) -> list[CandidateItem]:
        """Return public recipes whose meal types overlap the given tags."""
        if not tags:
            return []
        query = (
            self.client.table(RECIPES_TABLE)
            .select("*")
            .eq("is_public", True)
            .overlaps("meal_type", list(tags))
        )
        for name in filters.active() if filters else []:
            query = query.eq(_FLAG_COLUMNS[name], True)
        response = query.limit(limit).execute()
        return _parse_rows(response.data, _parse_recipe)

    def find_by_group(
        self,
        kind: ItemKind,
        group_keys: tuple[str, ...],
        exclude_id: str,
        limit: int,
    ) -> list[CandidateItem]:
        """Return items sharing a food group or a meal type with another item."""
        if not group_keys:
            return []
        if kind == "ingredient":
            response = (
                self.client.table(INGREDIENTS_TABLE)
                .select("*")
                .in_("food_group", list(group_keys))
                .neq("id", exclude_id)
                .limit(limit)
                .execute()
            )
            return _parse_rows(response.data, _parse_ingredient)
        response = (
            self.client.table(RECIPES_TABLE)
            .select("*")
            .eq("is_public", True)
            .overlaps("meal_type", list(group_keys))
            .neq("id", exclude_id)
            .limit(limit)
            .execute()
        )
        return _parse_rows(response.data, _parse_recipe)

    def get_by_id(self, item_id: str) -> CandidateItem | None:
        """Return a recipe or ingredient by id, recipes first."""
        for table, parser in (
            (RECIPES_TABLE, _parse_recipe),
            (INGREDIENTS_TABLE, _parse_ingredient),
        ):
            response = (
                self.client.table(table)
                .select("*")
                .eq("id", item_id)
                .limit(1)
                .execute()
            )
            if response.data:
                return parser(response.data[0])
        return None


def _parse_rows(
    rows: list[dict[str, object]] | None,
    parser: Callable[[dict[str, object]], CandidateItem],
) -> list[CandidateItem]:
    items = []
    for row in rows or []:
        try:
            items.append(parser(row))
        except ValueError as exc:
            _logger.warning("Skipping catalog row %s: %s", row.get("id"), exc)
    return items


def _parse_nutrition(raw: object) -> NutritionValues:
    """Parse a stored macro object, accepting ``protein`` or ``protein_g`` keys."""
    data = raw if isinstance(raw, dict) else {}

    def number(*keys: str) -> float:
        for key in keys:
            value = data.get(key)
            if value is not None:
                return float(value)
        return 0.0

    return NutritionValues(
        calories=number("calories"),
        protein_g=number("protein_g", "protein"),
        carbs_g=number("carbs_g", "carbs"),
        fat_g=number("fat_g", "fat"),
    )


def _parse_recipe(row: dict[str, object]) -> CandidateItem:
    """Parse a recipe row; one serving is the base unit."""
    return CandidateItem(
        id=str(row["id"]),
        name=str(row.get("name", "")),
        kind="recipe",
        nutrition=_parse_nutrition(row.get("nutrition_per_serving")),
        category_tags=tuple(str(tag) for tag in row.get("meal_type") or []),
        subgroup=row.get("cuisine"),
        flags=frozenset(
            name for name, column in _FLAG_COLUMNS.items() if row.get(column)
        ),
    )


def _parse_ingredient(row: dict[str, object]) -> CandidateItem:
    """Parse an ingredient row; macros are stored per serving size."""
    return CandidateItem(
        id=str(row["id"]),
        name=str(row.get("name", "")),
        kind="ingredient",
        nutrition=_parse_nutrition(row.get("macros")),
        base_unit_size=float(row.get("serving_size") or DEFAULT_INGREDIENT_SERVING),
        serving_unit=str(row.get("serving_unit") or "g"),
        food_group=row.get("food_group"),
        subgroup=row.get("subgroup"),
    )
