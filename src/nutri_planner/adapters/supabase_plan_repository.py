"""Supabase repository for daily plans."""

from dataclasses import dataclass, replace
from datetime import UTC, date, datetime
from uuid import UUID

from postgrest.exceptions import APIError
from supabase import Client

from nutri_planner.domain.errors import PlanConflict
from nutri_planner.domain.nutrition import ZERO_NUTRITION, NutritionValues
from nutri_planner.domain.plans import (
    DailyPlan,
    PlanVariant,
    slots_from_payload,
    slots_to_payload,
)
from nutri_planner.services.plans import PlanRepository

PLANS_TABLE = "daily_plans"
UNIQUE_VIOLATION = "23505"

# Each variant owns its slot, totals and version columns.
_COLUMNS: dict[PlanVariant, tuple[str, str, str]] = {
    PlanVariant.STANDARD: ("plan", "daily_totals", "plan_version"),
    PlanVariant.FASTING: (
        "fasting_plan",
        "fasting_daily_totals",
        "fasting_plan_version",
    ),
}


@dataclass
class SupabasePlanRepository(PlanRepository):
    """Supabase implementation keyed by user and date."""

    client: Client

    def read_plan(
        self, user_id: UUID, plan_date: date, variant: PlanVariant
    ) -> DailyPlan | None:
        """Return one variant of a stored plan."""
        row = self._fetch(user_id, plan_date)
        if row is None:
            return None
        plan_column, totals_column, version_column = _COLUMNS[variant]
        if not row.get(plan_column):
            return None
        return DailyPlan(
            user_id=user_id,
            plan_date=plan_date,
            variant=variant,
            slots=slots_from_payload(row.get(plan_column)),
            totals=_parse_totals(row.get(totals_column)),
            version=int(row.get(version_column) or 0),
        )

    def write_plan(self, plan: DailyPlan, expected_version: int) -> DailyPlan:
        """Write a variant when the stored version still matches."""
        plan_column, totals_column, version_column = _COLUMNS[plan.variant]
        new_version = expected_version + 1
        payload = {
            plan_column: slots_to_payload(plan.slots),
            totals_column: plan.totals.as_dict(),
            version_column: new_version,
            "updated_at": datetime.now(tz=UTC).isoformat(),
        }
        row = self._fetch(plan.user_id, plan.plan_date)
        if row is None:
            if expected_version:
                raise PlanConflict("Plan was deleted concurrently")
            sibling_version_column = _COLUMNS[_sibling(plan.variant)][2]
            try:
                response = (
                    self.client.table(PLANS_TABLE)
                    .insert(
                        {
                            "user_id": str(plan.user_id),
                            "plan_date": plan.plan_date.isoformat(),
                            sibling_version_column: 0,
                            **payload,
                        }
                    )
                    .execute()
                )
            except APIError as exc:
                if exc.code == UNIQUE_VIOLATION:
                    raise PlanConflict("Plan was created concurrently") from exc
                raise
            if not response.data:
                raise RuntimeError("Failed to create daily plan")
        else:
            stored_version = int(row.get(version_column) or 0)
            if stored_version != expected_version:
                raise PlanConflict(
                    f"Plan version changed: expected {expected_version}, "
                    f"found {stored_version}"
                )
            query = self.client.table(PLANS_TABLE).update(payload).eq("id", row["id"])
            if row.get(version_column) is None:
                query = query.is_(version_column, "null")
            else:
                query = query.eq(version_column, expected_version)
            response = query.execute()
            if not response.data:
                raise PlanConflict("Plan was modified concurrently")
        return replace(plan, version=new_version)

    def delete_plan(self, user_id: UUID, plan_date: date, variant: PlanVariant) -> None:
        """Clear a variant, deleting the row once neither variant remains."""
        row = self._fetch(user_id, plan_date)
        if row is None:
            return
        if row.get(_COLUMNS[_sibling(variant)][0]):
            plan_column, totals_column, version_column = _COLUMNS[variant]
            self.client.table(PLANS_TABLE).update(
                {
                    plan_column: None,
                    totals_column: None,
                    version_column: 0,
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                }
            ).eq("id", row["id"]).execute()
            return
        self.client.table(PLANS_TABLE).delete().eq("id", row["id"]).execute()

    def _fetch(self, user_id: UUID, plan_date: date) -> dict[str, object] | None:
        response = (
            self.client.table(PLANS_TABLE)
            .select("*")
            .eq("user_id", str(user_id))
            .eq("plan_date", plan_date.isoformat())
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return response.data[0]


def _parse_totals(raw: object) -> NutritionValues:
    if not isinstance(raw, dict):
        return ZERO_NUTRITION
    return NutritionValues(
        calories=float(raw.get("calories") or 0.0),
        protein_g=float(raw.get("protein_g") or 0.0),
        carbs_g=float(raw.get("carbs_g") or 0.0),
        fat_g=float(raw.get("fat_g") or 0.0),
    )


def _sibling(variant: PlanVariant) -> PlanVariant:
    if variant is PlanVariant.STANDARD:
        return PlanVariant.FASTING
    return PlanVariant.STANDARD
