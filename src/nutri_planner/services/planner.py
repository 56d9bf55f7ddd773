"""Day plan suggestion and generation."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from uuid import UUID

from nutri_planner.domain.catalog import DietaryFilters, ScaledCandidate
from nutri_planner.domain.plans import DailyPlan, PlanEntry, PlanVariant
from nutri_planner.domain.structures import MealSlot, MealStructure
from nutri_planner.services.catalog import CatalogRepository
from nutri_planner.services.matching import DEFAULT_CANDIDATE_LIMIT, find_candidates
from nutri_planner.services.plans import DailyPlanService
from nutri_planner.services.structures import recalculate_targets, validate
from nutri_planner.services.system_settings import SystemSettingsService

_logger = logging.getLogger(__name__)


@dataclass
class SlotSuggestion:
    """Ranked candidates for one slot of a day."""

    slot: MealSlot
    candidates: list[ScaledCandidate]

    @property
    def best(self) -> ScaledCandidate | None:
        """Return the top-ranked candidate, if any."""
        return self.candidates[0] if self.candidates else None

    @property
    def alternative_count(self) -> int:
        """Return how many candidates rank below the best one."""
        return max(len(self.candidates) - 1, 0)


@dataclass
class DaySuggestion:
    """Suggested candidates for every slot in a structure."""

    slots: list[SlotSuggestion]

    @property
    def total_calories(self) -> float:
        """Return the sum of scaled calories of the best candidates."""
        return sum(s.best.scaled_calories for s in self.slots if s.best is not None)

    @property
    def unmatched_slots(self) -> list[str]:
        """Return names of slots with no suitable candidate."""
        return [s.slot.name for s in self.slots if s.best is None]


@dataclass
class MealPlannerService:
    """Resolves meal structures against the catalog."""

    catalog: CatalogRepository
    settings_service: SystemSettingsService
    plan_service: DailyPlanService
    candidate_limit: int = DEFAULT_CANDIDATE_LIMIT

    async def suggest_day(
        self,
        daily_calories: float,
        structure: MealStructure,
        filters: DietaryFilters | None = None,
        *,
        fasting: bool = False,
    ) -> DaySuggestion:
        """Validate a structure and rank candidates for every slot concurrently."""
        slots = recalculate_targets(
            validate(structure, fasting=fasting).raise_for_errors(), daily_calories
        )
        limits = self.settings_service.get_scaling_limits()
        results = await asyncio.gather(
            *(
                asyncio.to_thread(
                    find_candidates,
                    slot.name,
                    slot.target_calories or 0,
                    limits,
                    self.catalog,
                    filters,
                    self.candidate_limit,
                )
                for slot in slots
            )
        )
        suggestion = DaySuggestion(
            slots=[
                SlotSuggestion(slot=slot, candidates=candidates)
                for slot, candidates in zip(slots, results, strict=True)
            ]
        )
        for name in suggestion.unmatched_slots:
            _logger.info("No suitable recipe for slot %s", name)
        return suggestion

    async def generate_plan(  # noqa: PLR0913
        self,
        user_id: UUID,
        plan_date: date,
        daily_calories: float,
        structure: MealStructure,
        variant: PlanVariant = PlanVariant.STANDARD,
        filters: DietaryFilters | None = None,
        *,
        overwrite: bool = False,
    ) -> DailyPlan | None:
        """Assign each slot's best candidate into the user's plan variant.

        An existing plan for the variant is kept unless ``overwrite`` is set,
        in which case all of its slots are replaced in one write.
        """
        existing = await asyncio.to_thread(
            self.plan_service.get_plan, user_id, plan_date, variant
        )
        if existing is not None and not overwrite:
            _logger.info(
                "Plan exists, skipping generation: user=%s date=%s variant=%s",
                user_id,
                plan_date,
                variant.value,
            )
            return existing

        suggestion = await self.suggest_day(
            daily_calories,
            structure,
            filters,
            fasting=variant is PlanVariant.FASTING,
        )
        slots = {
            s.slot.name: [PlanEntry(item_id=s.best.item.id, servings=s.best.servings)]
            for s in suggestion.slots
            if s.best is not None
        }
        return await asyncio.to_thread(
            self.plan_service.replace_slots, user_id, plan_date, variant, slots
        )
