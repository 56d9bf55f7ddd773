"""Shared test fixtures."""

from dataclasses import dataclass, field, replace
from datetime import date
from uuid import UUID, uuid4

import pytest

from nutri_planner.config import Settings
from nutri_planner.containers import AppContainer, wire_container
from nutri_planner.domain.catalog import CandidateItem, DietaryFilters, ItemKind
from nutri_planner.domain.errors import PlanConflict
from nutri_planner.domain.nutrition import NutritionValues
from nutri_planner.domain.plans import DailyPlan, PlanVariant
from nutri_planner.domain.structures import MealStructure, PlanningProfile
from nutri_planner.services.catalog import CatalogRepository
from nutri_planner.services.plans import PlanRepository
from nutri_planner.services.structures import ProfileRepository
from nutri_planner.services.system_settings import SettingsRepository


def recipe(  # noqa: PLR0913
    item_id: str,
    name: str,
    tags: tuple[str, ...],
    calories: float,
    protein_g: float,
    carbs_g: float,
    fat_g: float,
    *,
    cuisine: str | None = None,
    flags: tuple[str, ...] = (),
) -> CandidateItem:
    return CandidateItem(
        id=item_id,
        name=name,
        kind="recipe",
        nutrition=NutritionValues(calories, protein_g, carbs_g, fat_g),
        category_tags=tags,
        subgroup=cuisine,
        flags=frozenset(flags),
    )


def ingredient(  # noqa: PLR0913
    item_id: str,
    name: str,
    food_group: str,
    subgroup: str | None,
    calories: float,
    protein_g: float,
    carbs_g: float,
    fat_g: float,
    base_unit_size: float = 100.0,
) -> CandidateItem:
    return CandidateItem(
        id=item_id,
        name=name,
        kind="ingredient",
        nutrition=NutritionValues(calories, protein_g, carbs_g, fat_g),
        base_unit_size=base_unit_size,
        serving_unit="g",
        food_group=food_group,
        subgroup=subgroup,
    )


def sample_items() -> list[CandidateItem]:
    return [
        recipe(
            "r-oats",
            "Overnight Oats",
            ("breakfast",),
            400,
            20,
            50,
            13,
            flags=("vegetarian",),
        ),
        recipe(
            "r-omelette",
            "Veggie Omelette",
            ("breakfast",),
            300,
            21,
            6,
            21,
            flags=("vegetarian", "gluten_free"),
        ),
        recipe("r-smoothie", "Berry Smoothie", ("smoothies",), 250, 10, 45, 4),
        recipe(
            "r-bowl",
            "Chicken Rice Bowl",
            ("lunch",),
            600,
            45,
            60,
            15,
            cuisine="asian",
        ),
        recipe(
            "r-stew",
            "Lentil Stew",
            ("lunch", "one pot"),
            500,
            25,
            70,
            10,
            cuisine="mediterranean",
            flags=("vegetarian", "vegan", "dairy_free"),
        ),
        recipe("r-bar", "Protein Bar", ("snacks & sweetes",), 200, 15, 20, 7),
        recipe("r-lasagna", "Family Lasagna", ("lunch",), 2000, 90, 200, 90),
        ingredient("i-rice", "White Rice", "grains", "rice", 130, 2.7, 28, 0.3),
        ingredient("i-brown", "Brown Rice", "grains", "rice", 112, 2.6, 23.5, 0.9),
        ingredient("i-quinoa", "Quinoa", "grains", "pseudo", 120, 4.4, 21, 1.9),
        ingredient(
            "i-chicken", "Chicken Breast", "protein", "poultry", 165, 31, 0, 3.6
        ),
    ]


@dataclass
class InMemoryCatalogRepository(CatalogRepository):
    """In-memory catalog for tests."""

    items: dict[str, CandidateItem] = field(default_factory=dict)
    category_calls: list[tuple[str, ...]] = field(default_factory=list)

    def add(self, *items: CandidateItem) -> None:
        for item in items:
            self.items[item.id] = item

    def find_by_category(
        self, tags: tuple[str, ...], filters: DietaryFilters | None, limit: int
    ) -> list[CandidateItem]:
        self.category_calls.append(tags)
        matches = [
            item
            for item in self.items.values()
            if item.kind == "recipe"
            and set(tags).intersection(item.category_tags)
            and item.satisfies(filters)
        ]
        return matches[:limit]

    def find_by_group(
        self,
        kind: ItemKind,
        group_keys: tuple[str, ...],
        exclude_id: str,
        limit: int,
    ) -> list[CandidateItem]:
        matches = []
        for item in self.items.values():
            if item.kind != kind or item.id == exclude_id:
                continue
            keys = (item.food_group,) if kind == "ingredient" else item.category_tags
            if set(group_keys).intersection(keys):
                matches.append(item)
        return matches[:limit]

    def get_by_id(self, item_id: str) -> CandidateItem | None:
        return self.items.get(item_id)


@dataclass
class InMemorySettingsRepository(SettingsRepository):
    """In-memory system settings for tests."""

    values: dict[str, object] = field(default_factory=dict)

    def get_value(self, key: str) -> object | None:
        return self.values.get(key)


@dataclass
class InMemoryProfileRepository(ProfileRepository):
    """In-memory profile store for tests."""

    profiles: dict[UUID, PlanningProfile] = field(default_factory=dict)

    def create(self, daily_calories: int | None = 2000) -> UUID:
        user_id = uuid4()
        self.profiles[user_id] = PlanningProfile(
            user_id=user_id, daily_calories=daily_calories
        )
        return user_id

    def get_planning_profile(self, user_id: UUID) -> PlanningProfile | None:
        return self.profiles.get(user_id)

    def save_meal_structure(
        self, user_id: UUID, structure: MealStructure, *, fasting: bool
    ) -> None:
        key = "fasting_meal_structure" if fasting else "meal_structure"
        self.profiles[user_id] = replace(
            self.profiles[user_id], **{key: list(structure)}
        )

    def save_daily_calories(self, user_id: UUID, daily_calories: int) -> None:
        self.profiles[user_id] = replace(
            self.profiles[user_id], daily_calories=daily_calories
        )


@dataclass
class InMemoryPlanRepository(PlanRepository):
    """In-memory plan store with version checks.

    ``pending_conflicts`` simulates concurrent writers: each pending conflict
    bumps the stored version right before a write is checked.
    """

    plans: dict[tuple[UUID, date, PlanVariant], DailyPlan] = field(
        default_factory=dict
    )
    pending_conflicts: int = 0
    writes: int = 0

    def read_plan(
        self, user_id: UUID, plan_date: date, variant: PlanVariant
    ) -> DailyPlan | None:
        return self.plans.get((user_id, plan_date, variant))

    def write_plan(self, plan: DailyPlan, expected_version: int) -> DailyPlan:
        key = (plan.user_id, plan.plan_date, plan.variant)
        if self.pending_conflicts:
            self.pending_conflicts -= 1
            current = self.plans.get(key, plan)
            self.plans[key] = replace(current, version=current.version + 1)
        stored = self.plans.get(key)
        stored_version = stored.version if stored else 0
        if stored_version != expected_version:
            raise PlanConflict(f"expected {expected_version}, found {stored_version}")
        self.writes += 1
        saved = replace(plan, version=expected_version + 1)
        self.plans[key] = saved
        return saved

    def delete_plan(self, user_id: UUID, plan_date: date, variant: PlanVariant) -> None:
        self.plans.pop((user_id, plan_date, variant), None)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service.key.signature",
        admin_token="admin-token",
    )


@pytest.fixture
def catalog() -> InMemoryCatalogRepository:
    repository = InMemoryCatalogRepository()
    repository.add(*sample_items())
    return repository


@pytest.fixture
def settings_repository() -> InMemorySettingsRepository:
    return InMemorySettingsRepository()


@pytest.fixture
def profile_repository() -> InMemoryProfileRepository:
    return InMemoryProfileRepository()


@pytest.fixture
def plan_repository() -> InMemoryPlanRepository:
    return InMemoryPlanRepository()


@pytest.fixture
def container(  # noqa: PLR0913
    settings: Settings,
    catalog: InMemoryCatalogRepository,
    settings_repository: InMemorySettingsRepository,
    profile_repository: InMemoryProfileRepository,
    plan_repository: InMemoryPlanRepository,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return wire_container(
        settings=settings,
        catalog=catalog,
        settings_repository=settings_repository,
        profile_repository=profile_repository,
        plan_repository=plan_repository,
        close_resources=close_resources,
    )
