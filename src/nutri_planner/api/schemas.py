"""Pydantic models for admin API payloads."""

from pydantic import BaseModel, Field

from nutri_planner.domain.catalog import DietaryFilters
from nutri_planner.domain.energy import ActivityLevel, BodyProfile, Goal, Pace, Sex
from nutri_planner.domain.plans import PlanEntry
from nutri_planner.domain.structures import MealSlot, MealStructure


class MealSlotPayload(BaseModel):
    """Meal slot payload."""

    name: str
    label: str | None = None
    percentage: float
    target_calories: int | None = None

    def to_slot(self) -> MealSlot:
        """Convert to a domain slot."""
        return MealSlot(
            name=self.name,
            label=self.label or self.name,
            percentage=self.percentage,
            target_calories=self.target_calories,
        )


class DietaryFiltersPayload(BaseModel):
    """Dietary filter flags."""

    vegetarian: bool = False
    vegan: bool = False
    gluten_free: bool = False
    dairy_free: bool = False

    def to_filters(self) -> DietaryFilters:
        """Convert to domain filters."""
        return DietaryFilters(
            vegetarian=self.vegetarian,
            vegan=self.vegan,
            gluten_free=self.gluten_free,
            dairy_free=self.dairy_free,
        )


class StructurePayload(BaseModel):
    """A meal structure to validate or assign."""

    slots: list[MealSlotPayload]
    fasting: bool = False
    daily_calories: int | None = Field(default=None, gt=0)

    def to_structure(self) -> MealStructure:
        """Convert to a domain structure."""
        return [slot.to_slot() for slot in self.slots]


class MealPlanRequest(BaseModel):
    """Request for a generated day of candidates."""

    daily_calories: float = Field(gt=0)
    template_id: str | None = None
    slots: list[MealSlotPayload] | None = None
    fasting: bool = False
    filters: DietaryFiltersPayload = Field(default_factory=DietaryFiltersPayload)


class GeneratePlanRequest(MealPlanRequest):
    """Request to store a generated plan for a user."""

    overwrite: bool = False


class PlanEntryPayload(BaseModel):
    """One item assigned to a slot."""

    item_id: str
    servings: float = Field(default=1.0, ge=0)

    def to_entry(self) -> PlanEntry:
        """Convert to a domain entry."""
        return PlanEntry(item_id=self.item_id, servings=self.servings)


class SlotAssignmentPayload(BaseModel):
    """Items to assign to one slot."""

    entries: list[PlanEntryPayload]


class DailyCaloriesPayload(BaseModel):
    """New daily calorie budget."""

    daily_calories: int = Field(gt=0)


class EnergyRequest(BaseModel):
    """Body measurements for a daily calorie estimate."""

    age: int = Field(gt=0, le=120)
    sex: Sex
    weight_kg: float = Field(gt=0)
    height_cm: float = Field(gt=0)
    activity_level: ActivityLevel
    goal: Goal
    pace: Pace = Pace.MODERATE
    template_id: str | None = None
    calorie_tolerance: float = Field(default=0.25, ge=0, lt=1)

    def to_profile(self) -> BodyProfile:
        """Convert to a domain body profile."""
        return BodyProfile(
            age=self.age,
            sex=self.sex,
            weight_kg=self.weight_kg,
            height_cm=self.height_cm,
            activity_level=self.activity_level,
            goal=self.goal,
            pace=self.pace,
        )
