"""Meal structure templates and fasting slot bounds."""

from dataclasses import dataclass

from nutri_planner.domain.structures import MealSlot, MealStructure, SlotBounds


@dataclass(frozen=True)
class MealTemplate:
    """Declarative meal structure template."""

    template_id: str
    description: str
    slots: tuple[MealSlot, ...]
    fasting: bool = False

    @property
    def meal_count(self) -> int:
        """Return the number of slots in the template."""
        return len(self.slots)


def _slot(name: str, label: str, percentage: float) -> MealSlot:
    return MealSlot(name=name, label=label, percentage=percentage)


STANDARD_TEMPLATES: tuple[MealTemplate, ...] = (
    MealTemplate(
        "3_meals",
        "Breakfast, lunch and dinner",
        (
            _slot("breakfast", "Breakfast", 25),
            _slot("lunch", "Lunch", 40),
            _slot("dinner", "Dinner", 35),
        ),
    ),
    MealTemplate(
        "4_meals",
        "Three meals and a snack",
        (
            _slot("breakfast", "Breakfast", 25),
            _slot("lunch", "Lunch", 30),
            _slot("dinner", "Dinner", 30),
            _slot("snacks", "Snacks", 15),
        ),
    ),
    MealTemplate(
        "5_meals",
        "Three meals and two snacks",
        (
            _slot("breakfast", "Breakfast", 25),
            _slot("mid_morning", "Mid-Morning", 10),
            _slot("lunch", "Lunch", 30),
            _slot("afternoon", "Afternoon", 10),
            _slot("dinner", "Dinner", 25),
        ),
    ),
)

FASTING_TEMPLATES: tuple[MealTemplate, ...] = (
    MealTemplate(
        "fasting_1",
        "Single meal",
        (_slot("iftar", "Iftar", 100),),
        fasting=True,
    ),
    MealTemplate(
        "fasting_2",
        "Iftar and suhoor",
        (
            _slot("iftar", "Iftar", 50),
            _slot("suhoor", "Suhoor", 50),
        ),
        fasting=True,
    ),
    MealTemplate(
        "fasting_3",
        "Pre-iftar, iftar and suhoor",
        (
            _slot("pre-iftar", "Pre-Iftar", 10),
            _slot("iftar", "Iftar", 45),
            _slot("suhoor", "Suhoor", 45),
        ),
        fasting=True,
    ),
    MealTemplate(
        "fasting_4",
        "Adds a snack after Taraweeh",
        (
            _slot("pre-iftar", "Pre-Iftar", 10),
            _slot("iftar", "Iftar", 40),
            _slot("snack-taraweeh", "Snack (After Taraweeh)", 15),
            _slot("suhoor", "Suhoor", 35),
        ),
        fasting=True,
    ),
    # The usual 10/30/15/20/25 split leaves the full meal under its 25%
    # minimum, so iftar gives it 5 points.
    MealTemplate(
        "fasting_5",
        "Adds a full meal after Taraweeh",
        (
            _slot("pre-iftar", "Pre-Iftar", 10),
            _slot("iftar", "Iftar", 25),
            _slot("snack-taraweeh", "Snack (After Taraweeh)", 15),
            _slot("full-meal-taraweeh", "Full Meal (After Taraweeh)", 25),
            _slot("suhoor", "Suhoor", 25),
        ),
        fasting=True,
    ),
)

TEMPLATES: dict[str, MealTemplate] = {
    template.template_id: template
    for template in (*STANDARD_TEMPLATES, *FASTING_TEMPLATES)
}

# pre-fast, break-fast, late-snack, supplemental-meal and pre-dawn slots.
FASTING_SLOT_BOUNDS: dict[str, SlotBounds] = {
    "pre-iftar": SlotBounds(maximum=10),
    "iftar": SlotBounds(minimum=25, maximum=45),
    "snack-taraweeh": SlotBounds(minimum=15, maximum=20),
    "full-meal-taraweeh": SlotBounds(minimum=25, maximum=30),
    "suhoor": SlotBounds(minimum=25, maximum=45),
}

FASTING_SLOT_NAMES = frozenset(FASTING_SLOT_BOUNDS)

# Single and two-meal fasting days cannot fit the per-slot bounds, so only
# their exact template shares are accepted without bound checks.
BOUNDS_EXEMPT_TEMPLATES = frozenset({"fasting_1", "fasting_2"})

DEFAULT_MEAL_DISTRIBUTION: dict[str, float] = {
    "breakfast": 0.25,
    "lunch": 0.35,
    "dinner": 0.30,
    "snacks": 0.10,
}


def template_slots(template: MealTemplate) -> MealStructure:
    """Return a fresh list of slots for a template."""
    return list(template.slots)


def templates_for(*, fasting: bool) -> list[MealTemplate]:
    """Return the standard or fasting templates."""
    return list(FASTING_TEMPLATES if fasting else STANDARD_TEMPLATES)
