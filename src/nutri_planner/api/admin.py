"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from datetime import date  # noqa: TC003
from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from nutri_planner.api.schemas import (
    DailyCaloriesPayload,
    EnergyRequest,
    GeneratePlanRequest,
    MealPlanRequest,
    SlotAssignmentPayload,
    StructurePayload,
)
from nutri_planner.domain.catalog import DietaryFilters
from nutri_planner.domain.plans import PlanVariant
from nutri_planner.services.catalog import require_item
from nutri_planner.services.energy import calorie_range, estimate_energy, meal_budgets
from nutri_planner.services.macros import (
    classify_macro_profile,
    format_macro_profile,
    protein_difference,
    similarity,
    to_macro_profile,
)
from nutri_planner.services.matching import find_alternatives, find_candidates
from nutri_planner.services.structures import build_from_template, validate
from nutri_planner.templates import templates_for

if TYPE_CHECKING:
    from nutri_planner.containers import AppContainer
    from nutri_planner.domain.structures import MealStructure

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


def _dietary_filters(
    vegetarian: bool = False,
    vegan: bool = False,
    gluten_free: bool = False,
    dairy_free: bool = False,
) -> DietaryFilters:
    return DietaryFilters(
        vegetarian=vegetarian,
        vegan=vegan,
        gluten_free=gluten_free,
        dairy_free=dairy_free,
    )


@router.get("/health", dependencies=[Depends(require_admin)])
async def admin_health() -> dict[str, str]:
    """Admin health check endpoint."""
    return {"status": "ok"}


@router.post("/structures/validate", dependencies=[Depends(require_admin)])
async def validate_structure(payload: StructurePayload) -> dict[str, object]:
    """Return validation results without persisting anything."""
    return validate(payload.to_structure(), fasting=payload.fasting).as_dict()


@router.get("/templates", dependencies=[Depends(require_admin)])
async def list_templates(fasting: bool = False) -> dict[str, object]:
    """Return the standard or fasting templates."""
    return {
        "templates": [
            {
                "template_id": template.template_id,
                "description": template.description,
                "meal_count": template.meal_count,
                "slots": [slot.as_dict() for slot in template.slots],
            }
            for template in templates_for(fasting=fasting)
        ]
    }


@router.get("/templates/{template_id}", dependencies=[Depends(require_admin)])
async def template_structure(
    template_id: str, daily_calories: float = 2000
) -> dict[str, object]:
    """Return a template stamped with per-slot calorie targets."""
    structure = build_from_template(template_id, daily_calories)
    return {
        "template_id": template_id,
        "slots": [slot.as_dict() for slot in structure],
    }


@router.get("/candidates", dependencies=[Depends(require_admin)])
async def candidates(
    request: Request,
    slot: str,
    target_calories: float,
    filters: DietaryFilters = Depends(_dietary_filters),
) -> dict[str, object]:
    """Return ranked recipes for a slot and calorie target."""
    container: AppContainer = request.app.state.container
    ranked = find_candidates(
        slot,
        target_calories,
        container.settings_service.get_scaling_limits(),
        container.catalog,
        filters,
        container.settings.candidate_limit,
    )
    return {"slot": slot, "candidates": [candidate.as_dict() for candidate in ranked]}


@router.get("/recipes/{recipe_id}/alternatives", dependencies=[Depends(require_admin)])
async def alternatives(
    recipe_id: str, request: Request, target_calories: float | None = None
) -> dict[str, object]:
    """Return same-category recipes scaled to the original's calories."""
    container: AppContainer = request.app.state.container
    original = require_item(container.catalog, recipe_id)
    original_profile = to_macro_profile(original.nutrition)
    weights = container.settings_service.get_similarity_weights()
    decay = container.settings.similarity_decay
    ranked = find_alternatives(
        original,
        container.catalog,
        container.settings_service.get_scaling_limits(),
        target_calories=target_calories,
    )
    rows = []
    for candidate in ranked:
        profile = to_macro_profile(candidate.item.nutrition)
        rows.append(
            {
                **candidate.as_dict(),
                "macro_profile": format_macro_profile(profile),
                "macro_similarity_score": similarity(
                    original_profile, profile, weights, decay
                ),
                "protein_difference_g": protein_difference(
                    original.nutrition.protein_g,
                    candidate.item.nutrition.protein_g,
                    candidate.scale_factor,
                ),
            }
        )
    return {
        "original": original.as_dict(),
        "macro_profile": format_macro_profile(original_profile),
        "classification": classify_macro_profile(original_profile),
        "alternatives": rows,
    }


@router.get("/items/{item_id}/swaps", dependencies=[Depends(require_admin)])
async def swaps(
    item_id: str,
    request: Request,
    target_amount: float | None = None,
    target_calories: float | None = None,
) -> dict[str, object]:
    """Return same-group substitutes for a catalog item."""
    container: AppContainer = request.app.state.container
    original, options = container.swap_service.find_swaps_for(
        item_id, target_amount=target_amount, target_calories=target_calories
    )
    return {
        "original": original.as_dict(),
        "swaps": [option.as_dict() for option in options],
    }


@router.post("/meal-plan", dependencies=[Depends(require_admin)])
async def meal_plan(payload: MealPlanRequest, request: Request) -> dict[str, object]:
    """Return the best candidate for every slot of a structure."""
    container: AppContainer = request.app.state.container
    suggestion = await container.planner_service.suggest_day(
        payload.daily_calories,
        _resolve_structure(container, payload),
        payload.filters.to_filters(),
        fasting=payload.fasting,
    )
    return {
        "daily_calories": payload.daily_calories,
        "total_calories": suggestion.total_calories,
        "unmatched_slots": suggestion.unmatched_slots,
        "slots": [
            {
                "slot": slot.slot.as_dict(),
                "best": slot.best.as_dict() if slot.best else None,
                "alternative_count": slot.alternative_count,
            }
            for slot in suggestion.slots
        ],
    }


@router.post("/energy", dependencies=[Depends(require_admin)])
async def energy(payload: EnergyRequest, request: Request) -> dict[str, object]:
    """Estimate daily calories and split them across meals."""
    container: AppContainer = request.app.state.container
    estimate = estimate_energy(payload.to_profile())
    daily_calories = estimate.daily_calories
    if payload.template_id:
        structure = build_from_template(payload.template_id, daily_calories)
    else:
        structure = meal_budgets(
            daily_calories, container.settings_service.get_default_structure()
        )
    low, high = calorie_range(daily_calories, payload.calorie_tolerance)
    return {
        "estimate": estimate.as_dict(),
        "calorie_range": {"min": low, "max": high},
        "meals": [slot.as_dict() for slot in structure],
    }


@router.get("/users/{user_id}/plans/{plan_date}", dependencies=[Depends(require_admin)])
async def get_plan(
    user_id: UUID,
    plan_date: date,
    request: Request,
    variant: PlanVariant = PlanVariant.STANDARD,
) -> dict[str, object]:
    """Return one variant of a user's plan."""
    container: AppContainer = request.app.state.container
    plan = container.plan_service.get_plan(user_id, plan_date, variant)
    if plan is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return plan.as_dict()


@router.put("/users/{user_id}/plans/{plan_date}", dependencies=[Depends(require_admin)])
async def generate_plan(
    user_id: UUID,
    plan_date: date,
    payload: GeneratePlanRequest,
    request: Request,
) -> dict[str, object]:
    """Generate and store a plan variant from a structure."""
    container: AppContainer = request.app.state.container
    plan = await container.planner_service.generate_plan(
        user_id,
        plan_date,
        payload.daily_calories,
        _resolve_structure(container, payload),
        PlanVariant.FASTING if payload.fasting else PlanVariant.STANDARD,
        payload.filters.to_filters(),
        overwrite=payload.overwrite,
    )
    return {"plan": plan.as_dict() if plan else None}


@router.delete(
    "/users/{user_id}/plans/{plan_date}", dependencies=[Depends(require_admin)]
)
async def delete_plan(
    user_id: UUID,
    plan_date: date,
    request: Request,
    variant: PlanVariant = PlanVariant.STANDARD,
) -> dict[str, str]:
    """Delete one variant of a user's plan."""
    container: AppContainer = request.app.state.container
    container.plan_service.delete_plan(user_id, plan_date, variant)
    return {"status": "ok"}


@router.put(
    "/users/{user_id}/plans/{plan_date}/slots/{slot_name}",
    dependencies=[Depends(require_admin)],
)
async def assign_slot(  # noqa: PLR0913
    user_id: UUID,
    plan_date: date,
    slot_name: str,
    payload: SlotAssignmentPayload,
    request: Request,
    variant: PlanVariant = PlanVariant.STANDARD,
) -> dict[str, object]:
    """Replace one slot's items and return the refreshed plan."""
    container: AppContainer = request.app.state.container
    plan = container.plan_service.assign_slot(
        user_id,
        plan_date,
        variant,
        slot_name,
        [entry.to_entry() for entry in payload.entries],
    )
    return {"plan": plan.as_dict() if plan else None}


@router.delete(
    "/users/{user_id}/plans/{plan_date}/slots/{slot_name}",
    dependencies=[Depends(require_admin)],
)
async def remove_slot(
    user_id: UUID,
    plan_date: date,
    slot_name: str,
    request: Request,
    variant: PlanVariant = PlanVariant.STANDARD,
) -> dict[str, object]:
    """Clear one slot and return the refreshed plan."""
    container: AppContainer = request.app.state.container
    plan = container.plan_service.remove_slot(user_id, plan_date, variant, slot_name)
    return {"plan": plan.as_dict() if plan else None}


@router.put("/users/{user_id}/meal-structure", dependencies=[Depends(require_admin)])
async def assign_meal_structure(
    user_id: UUID, payload: StructurePayload, request: Request
) -> dict[str, object]:
    """Validate and store a user's standard or fasting structure."""
    container: AppContainer = request.app.state.container
    structure = container.structure_service.assign_structure(
        user_id,
        payload.to_structure(),
        fasting=payload.fasting,
        daily_calories=payload.daily_calories,
    )
    return {
        "fasting": payload.fasting,
        "slots": [slot.as_dict() for slot in structure],
    }


@router.put("/users/{user_id}/daily-calories", dependencies=[Depends(require_admin)])
async def update_daily_calories(
    user_id: UUID, payload: DailyCaloriesPayload, request: Request
) -> dict[str, object]:
    """Change a user's calorie budget and refresh slot targets."""
    container: AppContainer = request.app.state.container
    profile = container.structure_service.update_daily_calories(
        user_id, payload.daily_calories
    )
    return {
        "daily_calories": profile.daily_calories,
        "meal_structure": [slot.as_dict() for slot in profile.meal_structure],
        "fasting_meal_structure": [
            slot.as_dict() for slot in profile.fasting_meal_structure
        ],
    }


def _resolve_structure(
    container: AppContainer, payload: MealPlanRequest
) -> MealStructure:
    if payload.slots:
        return [slot.to_slot() for slot in payload.slots]
    if payload.template_id:
        return build_from_template(payload.template_id, payload.daily_calories)
    return container.settings_service.get_default_structure()
