"""Daily calorie estimates from the Mifflin-St Jeor equation."""

from nutri_planner.domain.energy import (
    ActivityLevel,
    BodyProfile,
    EnergyEstimate,
    Goal,
    Pace,
    Sex,
)
from nutri_planner.domain.nutrition import round_half_up
from nutri_planner.domain.structures import MealStructure
from nutri_planner.services.structures import normalize_percentages, recalculate_targets

ACTIVITY_MULTIPLIERS: dict[ActivityLevel, float] = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHT: 1.375,
    ActivityLevel.MODERATE: 1.55,
    ActivityLevel.ACTIVE: 1.725,
    ActivityLevel.VERY_ACTIVE: 1.9,
}

# Share of TDEE added to (or removed from) the daily target.
GOAL_ADJUSTMENTS: dict[Goal, dict[Pace, float]] = {
    Goal.LOSE_WEIGHT: {Pace.SLOW: -0.10, Pace.MODERATE: -0.20, Pace.AGGRESSIVE: -0.25},
    Goal.MAINTAIN: {Pace.SLOW: 0.0, Pace.MODERATE: 0.0, Pace.AGGRESSIVE: 0.0},
    Goal.BUILD_MUSCLE: {Pace.SLOW: 0.10, Pace.MODERATE: 0.15, Pace.AGGRESSIVE: 0.20},
    Goal.RECOMPOSITION: {Pace.SLOW: -0.05, Pace.MODERATE: 0.0, Pace.AGGRESSIVE: 0.05},
}

SEX_OFFSETS: dict[Sex, float] = {Sex.MALE: 5, Sex.FEMALE: -161}

PROTEIN_G_PER_KG = 2.0
PROTEIN_CALORIE_SHARE = 0.30
FAT_CALORIE_SHARE = 0.25
PROTEIN_KCAL_PER_G = 4
CARBS_KCAL_PER_G = 4
FAT_KCAL_PER_G = 9
DEFAULT_CALORIE_TOLERANCE = 0.25


def _whole(value: float) -> int:
    return int(round_half_up(value))


def basal_metabolic_rate(
    weight_kg: float, height_cm: float, age: float, sex: Sex
) -> int:
    """Return resting energy in kcal per day."""
    return _whole(10 * weight_kg + 6.25 * height_cm - 5 * age + SEX_OFFSETS[sex])


def estimate_energy(profile: BodyProfile) -> EnergyEstimate:
    """Estimate daily calories and a macro split for a body profile.

    Protein is the larger of 2 g/kg and 30% of calories, fat takes 25% of
    calories and carbs fill the remainder.
    """
    bmr = basal_metabolic_rate(
        profile.weight_kg, profile.height_cm, profile.age, profile.sex
    )
    multiplier = ACTIVITY_MULTIPLIERS[profile.activity_level]
    tdee = _whole(bmr * multiplier)
    adjustment_share = GOAL_ADJUSTMENTS[profile.goal][profile.pace]
    adjustment = _whole(tdee * adjustment_share)
    daily_calories = tdee + adjustment

    protein_g = max(
        _whole(profile.weight_kg * PROTEIN_G_PER_KG),
        _whole(daily_calories * PROTEIN_CALORIE_SHARE / PROTEIN_KCAL_PER_G),
    )
    fat_g = _whole(daily_calories * FAT_CALORIE_SHARE / FAT_KCAL_PER_G)
    carb_calories = (
        daily_calories - protein_g * PROTEIN_KCAL_PER_G - fat_g * FAT_KCAL_PER_G
    )
    carbs_g = max(_whole(carb_calories / CARBS_KCAL_PER_G), 0)

    return EnergyEstimate(
        bmr=bmr,
        tdee=tdee,
        daily_calories=daily_calories,
        calorie_adjustment=adjustment,
        protein_g=protein_g,
        carbs_g=carbs_g,
        fat_g=fat_g,
        activity_multiplier=multiplier,
        goal_adjustment=adjustment_share,
    )


def meal_budgets(daily_calories: float, structure: MealStructure) -> MealStructure:
    """Split a daily calorie target across a structure's slots."""
    return recalculate_targets(normalize_percentages(structure), daily_calories)


def calorie_range(
    target_calories: float, tolerance: float = DEFAULT_CALORIE_TOLERANCE
) -> tuple[int, int]:
    """Return the accepted (min, max) calories around a target."""
    return (
        _whole(target_calories * (1 - tolerance)),
        _whole(target_calories * (1 + tolerance)),
    )
