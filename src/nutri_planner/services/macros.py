"""Macro profile conversion and similarity scoring.

Profiles express protein, carbs and fat as whole-number percentages of total
calories (4/4/9 kcal per gram). Similarity compares two profiles axis by axis
with a linear decay and combines the axes with configurable weights.
"""

from nutri_planner.domain.nutrition import (
    CARBS_KCAL_PER_G,
    DEFAULT_WEIGHTS,
    FAT_KCAL_PER_G,
    PROTEIN_KCAL_PER_G,
    MacroProfile,
    NutritionValues,
    SimilarityWeights,
    round_half_up,
)

DEFAULT_DECAY = 1.5
MAX_PCT = 100
HIGH_PROTEIN_PCT = 35
HIGH_CARB_PCT = 50
HIGH_FAT_PCT = 40

ZERO_PROFILE = MacroProfile(0, 0, 0)

_QUALITY_TIERS = (
    (80, "excellent"),
    (60, "good"),
    (40, "acceptable"),
)


def to_macro_profile(values: NutritionValues) -> MacroProfile:
    """Convert absolute macros into percentage-of-calories profile."""
    if values.calories <= 0:
        return ZERO_PROFILE
    return MacroProfile(
        protein_pct=_pct(values.protein_g * PROTEIN_KCAL_PER_G, values.calories),
        carbs_pct=_pct(values.carbs_g * CARBS_KCAL_PER_G, values.calories),
        fat_pct=_pct(values.fat_g * FAT_KCAL_PER_G, values.calories),
    )


def similarity(
    a: MacroProfile,
    b: MacroProfile,
    weights: SimilarityWeights = DEFAULT_WEIGHTS,
    decay: float = DEFAULT_DECAY,
) -> int:
    """Return a 0-100 similarity score between two profiles."""
    protein = _component(a.protein_pct, b.protein_pct, decay)
    carbs = _component(a.carbs_pct, b.carbs_pct, decay)
    fat = _component(a.fat_pct, b.fat_pct, decay)
    total = protein * weights.protein + carbs * weights.carbs + fat * weights.fat
    return max(0, min(MAX_PCT, int(round_half_up(total))))


def quality_tier(score: int) -> str:
    """Map a similarity score to a swap quality label."""
    for threshold, label in _QUALITY_TIERS:
        if score >= threshold:
            return label
    return "poor"


def classify_macro_profile(profile: MacroProfile) -> str:
    """Label a profile by its dominant macro."""
    if profile.protein_pct > HIGH_PROTEIN_PCT:
        return "high-protein"
    if profile.carbs_pct > HIGH_CARB_PCT:
        return "high-carb"
    if profile.fat_pct > HIGH_FAT_PCT:
        return "high-fat"
    return "balanced"


def format_macro_profile(profile: MacroProfile) -> str:
    """Format a profile as a compact label."""
    return f"P:{profile.protein_pct}% C:{profile.carbs_pct}% F:{profile.fat_pct}%"


def protein_difference(
    original_protein_g: float, alternative_protein_g: float, scale_factor: float
) -> float:
    """Return scaled alternative protein minus original protein, in grams."""
    return round_half_up(alternative_protein_g * scale_factor - original_protein_g, 1)


def _pct(part_kcal: float, total_kcal: float) -> int:
    return min(MAX_PCT, int(round_half_up(part_kcal / total_kcal * 100)))


def _component(a_pct: int, b_pct: int, decay: float) -> float:
    return max(0.0, 100 - abs(a_pct - b_pct) * decay)
