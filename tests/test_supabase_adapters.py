"""Tests for Supabase adapter implementations."""

from dataclasses import dataclass, field
from datetime import date
from uuid import UUID, uuid4

import pytest
from postgrest.exceptions import APIError

from nutri_planner.adapters.supabase_catalog_repository import (
    SupabaseCatalogRepository,
)
from nutri_planner.adapters.supabase_plan_repository import SupabasePlanRepository
from nutri_planner.adapters.supabase_profile_repository import (
    SupabaseProfileRepository,
)
from nutri_planner.adapters.supabase_settings_repository import (
    SupabaseSettingsRepository,
)
from nutri_planner.domain.catalog import DietaryFilters
from nutri_planner.domain.errors import PlanConflict
from nutri_planner.domain.nutrition import NutritionValues
from nutri_planner.domain.plans import DailyPlan, PlanEntry, PlanVariant
from nutri_planner.domain.structures import MealSlot
from nutri_planner.services.plans import DailyPlanService

PLAN_DATE = date(2026, 3, 3)


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None


@dataclass
class FakeTable:
    name: str
    response_queue: dict[str, list[list[dict[str, object]]]] = field(
        default_factory=lambda: {"select": [], "insert": [], "update": [], "delete": []}
    )
    last_payload: object | None = None
    last_filters: list[tuple[str, object]] = field(default_factory=list)
    actions: list[str] = field(default_factory=list)

    def queue(self, action: str, data: list[dict[str, object]]) -> None:
        self.response_queue[action].append(data)

    def select(self, *_args) -> "FakeTable":
        self._action = "select"
        return self

    def insert(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "insert"
        self.last_payload = payload
        return self

    def update(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "update"
        self.last_payload = payload
        return self

    def delete(self) -> "FakeTable":
        self._action = "delete"
        return self

    def eq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def neq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((f"!{column}", value))
        return self

    def in_(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def overlaps(  # type: ignore[no-untyped-def]
        self, column: str, value
    ) -> "FakeTable":
        self.last_filters.append((column, value))
        return self

    def limit(self, _count: int) -> "FakeTable":
        return self

    def execute(self) -> FakeResponse:
        action = getattr(self, "_action", "select")
        self.actions.append(action)
        queue = self.response_queue.get(action, [])
        data = queue.pop(0) if queue else []
        return FakeResponse(data=data)


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)

    def table(self, name: str) -> FakeTable:
        if name not in self.tables:
            self.tables[name] = FakeTable(name=name)
        return self.tables[name]


def _recipe_row(**overrides: object) -> dict[str, object]:
    row: dict[str, object] = {
        "id": "r-1",
        "name": "Lentil Stew",
        "meal_type": ["lunch", "one pot"],
        "cuisine": "mediterranean",
        "nutrition_per_serving": {
            "calories": 500,
            "protein": 25,
            "carbs": 70,
            "fat": 10,
        },
        "is_vegetarian": True,
        "is_vegan": True,
        "is_gluten_free": False,
        "is_dairy_free": True,
    }
    row.update(overrides)
    return row


def test_catalog_find_by_category_applies_filters() -> None:
    client = FakeSupabaseClient()
    recipes = client.table("recipes")
    recipes.queue("select", [_recipe_row()])

    items = SupabaseCatalogRepository(client).find_by_category(
        ("lunch",), DietaryFilters(vegan=True), 20
    )

    assert ("meal_type", ["lunch"]) in recipes.last_filters
    assert ("is_vegan", True) in recipes.last_filters
    item = items[0]
    assert item.kind == "recipe"
    assert item.nutrition == NutritionValues(500, 25, 70, 10)
    assert item.category_tags == ("lunch", "one pot")
    assert item.subgroup == "mediterranean"
    assert item.flags == frozenset({"vegetarian", "vegan", "dairy_free"})


def test_catalog_skips_invalid_rows() -> None:
    client = FakeSupabaseClient()
    bad = _recipe_row(id="r-bad", nutrition_per_serving={"calories": -5})
    client.table("recipes").queue("select", [bad, _recipe_row()])

    items = SupabaseCatalogRepository(client).find_by_category(("lunch",), None, 20)

    assert [item.id for item in items] == ["r-1"]


def test_catalog_get_by_id_falls_back_to_ingredients() -> None:
    client = FakeSupabaseClient()
    client.table("recipes").queue("select", [])
    client.table("ingredients").queue(
        "select",
        [
            {
                "id": "i-1",
                "name": "White Rice",
                "food_group": "grains",
                "subgroup": "rice",
                "serving_size": 100,
                "serving_unit": "g",
                "macros": {
                    "calories": 130,
                    "protein_g": 2.7,
                    "carbs_g": 28,
                    "fat_g": 0.3,
                },
            }
        ],
    )

    item = SupabaseCatalogRepository(client).get_by_id("i-1")

    assert item is not None
    assert item.kind == "ingredient"
    assert item.food_group == "grains"
    assert item.calories_per_unit == pytest.approx(1.3)


def test_catalog_find_by_group_for_ingredients() -> None:
    client = FakeSupabaseClient()
    ingredients = client.table("ingredients")
    ingredients.queue("select", [])

    repository = SupabaseCatalogRepository(client)
    repository.find_by_group("ingredient", ("grains",), "i-1", 30)

    assert ("food_group", ["grains"]) in ingredients.last_filters
    assert ("!id", "i-1") in ingredients.last_filters


def test_settings_repository_reads_value() -> None:
    client = FakeSupabaseClient()
    client.table("system_settings").queue(
        "select", [{"value": {"min_scale_factor": 0.5}}]
    )
    repository = SupabaseSettingsRepository(client)

    assert repository.get_value("scaling_limits") == {"min_scale_factor": 0.5}
    assert repository.get_value("missing") is None


def test_profile_repository_reads_planning_fields() -> None:
    client = FakeSupabaseClient()
    user_id = uuid4()
    client.table("profiles").queue(
        "select",
        [
            {
                "id": str(user_id),
                "preferences": {
                    "meal_structure": [
                        {"name": "lunch", "label": "Lunch", "percentage": 100}
                    ]
                },
                "targets": {"daily_calories": 1800},
            }
        ],
    )

    profile = SupabaseProfileRepository(client).get_planning_profile(user_id)

    assert profile is not None
    assert profile.daily_calories == 1800
    assert profile.meal_structure == [MealSlot("lunch", "Lunch", 100)]
    assert profile.fasting_meal_structure == []


def test_profile_repository_merges_preferences() -> None:
    client = FakeSupabaseClient()
    user_id = uuid4()
    profiles = client.table("profiles")
    profiles.queue(
        "select",
        [{"id": str(user_id), "preferences": {"units": "metric"}, "targets": {}}],
    )
    profiles.queue("update", [{"id": str(user_id)}])

    SupabaseProfileRepository(client).save_meal_structure(
        user_id, [MealSlot("iftar", "Iftar", 100, 2000)], fasting=True
    )

    assert isinstance(profiles.last_payload, dict)
    preferences = profiles.last_payload["preferences"]
    assert preferences["units"] == "metric"
    assert preferences["fasting_meal_structure"][0]["target_calories"] == 2000


def test_profile_repository_update_requires_row() -> None:
    client = FakeSupabaseClient()
    client.table("profiles").queue("select", [])

    with pytest.raises(RuntimeError):
        SupabaseProfileRepository(client).save_daily_calories(uuid4(), 2000)


def test_plan_repository_reads_one_variant() -> None:
    client = FakeSupabaseClient()
    user_id = uuid4()
    row = {
        "id": "plan-1",
        "plan": {"lunch": {"recipe_id": "r-1", "servings": 1.5}},
        "daily_totals": {"calories": 750, "protein_g": 30, "carbs_g": 90, "fat_g": 15},
        "plan_version": 4,
        "fasting_plan": None,
    }
    plans = client.table("daily_plans")
    plans.queue("select", [row])
    plans.queue("select", [row])
    repository = SupabasePlanRepository(client)

    standard = repository.read_plan(user_id, PLAN_DATE, PlanVariant.STANDARD)
    fasting = repository.read_plan(user_id, PLAN_DATE, PlanVariant.FASTING)

    assert standard is not None
    assert standard.slots == {"lunch": [PlanEntry("r-1", 1.5)]}
    assert standard.totals.calories == 750
    assert standard.version == 4
    assert fasting is None


def test_plan_repository_inserts_new_row() -> None:
    client = FakeSupabaseClient()
    plans = client.table("daily_plans")
    plans.queue("select", [])
    plans.queue("insert", [{"id": "plan-1"}])
    plan = DailyPlan(
        user_id=uuid4(),
        plan_date=PLAN_DATE,
        variant=PlanVariant.FASTING,
        slots={"iftar": [PlanEntry("r-1")]},
    )

    saved = SupabasePlanRepository(client).write_plan(plan, expected_version=0)

    assert saved.version == 1
    assert isinstance(plans.last_payload, dict)
    assert plans.last_payload["fasting_plan"] == {
        "iftar": [{"item_id": "r-1", "servings": 1.0}]
    }
    assert plans.last_payload["fasting_plan_version"] == 1
    assert plans.last_payload["plan_version"] == 0
    assert "plan" not in plans.last_payload


def test_plan_repository_rejects_stale_version() -> None:
    client = FakeSupabaseClient()
    plans = client.table("daily_plans")
    plans.queue("select", [{"id": "plan-1", "plan": {}, "plan_version": 3}])
    plan = DailyPlan(user_id=uuid4(), plan_date=PLAN_DATE, variant=PlanVariant.STANDARD)

    with pytest.raises(PlanConflict):
        SupabasePlanRepository(client).write_plan(plan, expected_version=2)

    assert "update" not in plans.actions


def test_plan_repository_delete_keeps_sibling_variant() -> None:
    client = FakeSupabaseClient()
    plans = client.table("daily_plans")
    plans.queue(
        "select",
        [{"id": "plan-1", "plan": {"lunch": {}}, "fasting_plan": {"iftar": {}}}],
    )

    SupabasePlanRepository(client).delete_plan(
        uuid4(), PLAN_DATE, PlanVariant.FASTING
    )

    assert plans.actions[-1] == "update"
    assert isinstance(plans.last_payload, dict)
    assert plans.last_payload["fasting_plan"] is None
    assert "plan" not in plans.last_payload


def test_plan_repository_delete_removes_last_variant() -> None:
    client = FakeSupabaseClient()
    plans = client.table("daily_plans")
    plans.queue("select", [{"id": "plan-1", "plan": {"lunch": {}}}])

    SupabasePlanRepository(client).delete_plan(
        uuid4(), PLAN_DATE, PlanVariant.STANDARD
    )

    assert plans.actions[-1] == "delete"


@dataclass
class RowQuery:
    table: "RowStoreTable"
    action: str
    payload: dict[str, object] | None = None
    filters: list[tuple[str, object]] = field(default_factory=list)

    def eq(self, column: str, value) -> "RowQuery":  # type: ignore[no-untyped-def]
        self.filters.append((column, value))
        return self

    def is_(self, column: str, _value: str) -> "RowQuery":
        self.filters.append((column, None))
        return self

    def limit(self, _count: int) -> "RowQuery":
        return self

    def matches(self, row: dict[str, object]) -> bool:
        for column, value in self.filters:
            stored = row.get(column)
            if value is None:
                if stored is not None:
                    return False
            elif stored is None or stored != value:
                return False
        return True

    def execute(self) -> FakeResponse:
        return self.table.run(self)


@dataclass
class RowStoreTable:
    """Stores rows, comparing NULLs the way SQL does.

    ``hidden_selects`` makes the next selects miss every row, as when another
    writer inserts between our read and our insert.
    """

    rows: list[dict[str, object]] = field(default_factory=list)
    hidden_selects: int = 0

    def select(self, *_args) -> RowQuery:
        return RowQuery(self, "select")

    def insert(self, payload: dict[str, object]) -> RowQuery:
        return RowQuery(self, "insert", payload)

    def update(self, payload: dict[str, object]) -> RowQuery:
        return RowQuery(self, "update", payload)

    def delete(self) -> RowQuery:
        return RowQuery(self, "delete")

    def run(self, query: RowQuery) -> FakeResponse:
        if query.action == "select":
            if self.hidden_selects:
                self.hidden_selects -= 1
                return FakeResponse(data=[])
            return FakeResponse(data=[dict(r) for r in self.rows if query.matches(r)])
        if query.action == "insert":
            assert query.payload is not None
            key = (query.payload["user_id"], query.payload["plan_date"])
            if any((r["user_id"], r["plan_date"]) == key for r in self.rows):
                raise APIError({"code": "23505", "message": "duplicate key value"})
            row = {"id": f"plan-{len(self.rows) + 1}", **query.payload}
            self.rows.append(row)
            return FakeResponse(data=[dict(row)])
        matched = [r for r in self.rows if query.matches(r)]
        if query.action == "update":
            assert query.payload is not None
            for row in matched:
                row.update(query.payload)
        else:
            self.rows = [r for r in self.rows if r not in matched]
        return FakeResponse(data=[dict(r) for r in matched])


@dataclass
class RowStoreClient:
    plans: RowStoreTable = field(default_factory=RowStoreTable)

    def table(self, _name: str) -> RowStoreTable:
        return self.plans


def _stored_row(user_id: UUID, **columns: object) -> dict[str, object]:
    return {
        "id": "plan-1",
        "user_id": str(user_id),
        "plan_date": PLAN_DATE.isoformat(),
        **columns,
    }


def test_plan_repository_keeps_both_variants_on_one_row() -> None:
    client = RowStoreClient()
    repository = SupabasePlanRepository(client)
    user_id = uuid4()

    repository.write_plan(
        DailyPlan(user_id, PLAN_DATE, PlanVariant.STANDARD, {"lunch": [_entry()]}),
        expected_version=0,
    )
    fasting = repository.write_plan(
        DailyPlan(user_id, PLAN_DATE, PlanVariant.FASTING, {"iftar": [_entry()]}),
        expected_version=0,
    )

    assert fasting.version == 1
    [row] = client.plans.rows
    assert row["plan_version"] == 1
    assert row["fasting_plan_version"] == 1
    assert repository.read_plan(user_id, PLAN_DATE, PlanVariant.STANDARD) is not None


def test_plan_repository_updates_row_with_null_version() -> None:
    user_id = uuid4()
    client = RowStoreClient()
    client.plans.rows.append(
        _stored_row(user_id, plan={"lunch": [{"item_id": "r-1"}]}, plan_version=1)
    )

    saved = SupabasePlanRepository(client).write_plan(
        DailyPlan(user_id, PLAN_DATE, PlanVariant.FASTING, {"iftar": [_entry()]}),
        expected_version=0,
    )

    assert saved.version == 1
    assert client.plans.rows[0]["fasting_plan_version"] == 1


def test_plan_repository_maps_duplicate_insert_to_conflict() -> None:
    user_id = uuid4()
    client = RowStoreClient()
    client.plans.rows.append(_stored_row(user_id, plan_version=0))
    client.plans.hidden_selects = 1

    with pytest.raises(PlanConflict):
        SupabasePlanRepository(client).write_plan(
            DailyPlan(user_id, PLAN_DATE, PlanVariant.STANDARD, {"lunch": [_entry()]}),
            expected_version=0,
        )

    assert len(client.plans.rows) == 1


def test_plan_service_retries_after_duplicate_insert(catalog) -> None:
    user_id = uuid4()
    client = RowStoreClient()
    client.plans.rows.append(
        _stored_row(
            user_id,
            fasting_plan={"iftar": [{"item_id": "r-stew", "servings": 1}]},
            fasting_plan_version=1,
            plan_version=0,
        )
    )
    client.plans.hidden_selects = 2
    service = DailyPlanService(SupabasePlanRepository(client), catalog)

    plan = service.assign_slot(
        user_id, PLAN_DATE, PlanVariant.STANDARD, "breakfast", [PlanEntry("r-oats")]
    )

    assert plan is not None
    assert plan.version == 1
    [row] = client.plans.rows
    assert row["plan"] == {"breakfast": [{"item_id": "r-oats", "servings": 1.0}]}
    assert row["fasting_plan_version"] == 1


def _entry() -> PlanEntry:
    return PlanEntry("r-1")
