"""Daily plan editing with cached totals."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import date
from typing import Protocol
from uuid import UUID

from nutri_planner.domain.errors import PlanConflict
from nutri_planner.domain.nutrition import NutritionValues
from nutri_planner.domain.plans import DailyPlan, PlanEntry, PlanSlots, PlanVariant
from nutri_planner.services.catalog import CatalogRepository
from nutri_planner.services.totals import aggregate, unresolved_items

_logger = logging.getLogger(__name__)


class PlanRepository(Protocol):
    """Persistence interface for daily plans.

    Each variant is stored in its own fields of the (user, date) record and
    carries its own version counter.
    """

    def read_plan(
        self, user_id: UUID, plan_date: date, variant: PlanVariant
    ) -> DailyPlan | None:
        """Return one variant of a plan, if present."""

    def write_plan(self, plan: DailyPlan, expected_version: int) -> DailyPlan:
        """Store a plan variant if its version still matches.

        Raises PlanConflict when the stored version differs.
        """

    def delete_plan(self, user_id: UUID, plan_date: date, variant: PlanVariant) -> None:
        """Remove one variant of a plan, leaving the other intact."""


@dataclass
class DailyPlanService:
    """Application service for per-slot plan edits."""

    repository: PlanRepository
    catalog: CatalogRepository
    max_retries: int = 2

    def get_plan(
        self, user_id: UUID, plan_date: date, variant: PlanVariant
    ) -> DailyPlan | None:
        """Return a plan variant for a date."""
        return self.repository.read_plan(user_id, plan_date, variant)

    def assign_slot(  # noqa: PLR0913
        self,
        user_id: UUID,
        plan_date: date,
        variant: PlanVariant,
        slot_name: str,
        entries: list[PlanEntry],
    ) -> DailyPlan | None:
        """Replace one slot's assignment and refresh the day's totals."""

        def mutate(slots: PlanSlots) -> None:
            if entries:
                slots[slot_name] = list(entries)
            else:
                slots.pop(slot_name, None)

        return self._edit(user_id, plan_date, variant, mutate)

    def replace_slots(
        self,
        user_id: UUID,
        plan_date: date,
        variant: PlanVariant,
        slots: PlanSlots,
    ) -> DailyPlan | None:
        """Swap every slot of a variant for ``slots`` in a single write."""

        def mutate(current: PlanSlots) -> None:
            current.clear()
            current.update({name: list(entries) for name, entries in slots.items()})

        return self._edit(user_id, plan_date, variant, mutate)

    def remove_slot(
        self,
        user_id: UUID,
        plan_date: date,
        variant: PlanVariant,
        slot_name: str,
    ) -> DailyPlan | None:
        """Clear one slot; the variant is deleted once no slot is left."""
        return self._edit(
            user_id, plan_date, variant, lambda slots: slots.pop(slot_name, None)
        )

    def delete_plan(self, user_id: UUID, plan_date: date, variant: PlanVariant) -> None:
        """Delete a whole plan variant."""
        self.repository.delete_plan(user_id, plan_date, variant)

    def compute_totals(self, slots: PlanSlots) -> NutritionValues:
        """Aggregate totals for plan slots against the catalog."""
        missing = unresolved_items(slots, self._nutrition_for)
        if missing:
            _logger.warning("Plan references unknown items: %s", ", ".join(missing))
        return aggregate(slots, self._nutrition_for)

    def _nutrition_for(self, item_id: str) -> NutritionValues | None:
        item = self.catalog.get_by_id(item_id)
        return item.nutrition if item else None

    def _edit(
        self,
        user_id: UUID,
        plan_date: date,
        variant: PlanVariant,
        mutate: Callable[[PlanSlots], object],
    ) -> DailyPlan | None:
        attempt = 0
        while True:
            current = self.repository.read_plan(user_id, plan_date, variant)
            if current is None:
                current = DailyPlan(
                    user_id=user_id, plan_date=plan_date, variant=variant
                )
            slots = {name: list(entries) for name, entries in current.slots.items()}
            mutate(slots)
            slots = {name: entries for name, entries in slots.items() if entries}
            if not slots:
                if current.version:
                    self.repository.delete_plan(user_id, plan_date, variant)
                return None
            updated = replace(current, slots=slots, totals=self.compute_totals(slots))
            try:
                return self.repository.write_plan(
                    updated, expected_version=current.version
                )
            except PlanConflict:
                attempt += 1
                _logger.warning(
                    "Plan write conflict (attempt %s/%s): user=%s date=%s variant=%s",
                    attempt,
                    self.max_retries + 1,
                    user_id,
                    plan_date,
                    variant.value,
                )
                if attempt > self.max_retries:
                    raise
