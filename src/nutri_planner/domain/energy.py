"""Body profile inputs and daily energy estimates."""

from dataclasses import asdict, dataclass
from enum import Enum


class Sex(str, Enum):
    """Sex used by the BMR equation."""

    MALE = "male"
    FEMALE = "female"


class ActivityLevel(str, Enum):
    """Typical weekly activity."""

    SEDENTARY = "sedentary"
    LIGHT = "light"
    MODERATE = "moderate"
    ACTIVE = "active"
    VERY_ACTIVE = "very_active"


class Goal(str, Enum):
    """Body composition goal."""

    LOSE_WEIGHT = "lose_weight"
    MAINTAIN = "maintain"
    BUILD_MUSCLE = "build_muscle"
    RECOMPOSITION = "recomposition"


class Pace(str, Enum):
    """How hard a goal is pushed."""

    SLOW = "slow"
    MODERATE = "moderate"
    AGGRESSIVE = "aggressive"


@dataclass(frozen=True)
class BodyProfile:
    """Inputs for a daily energy estimate."""

    age: int
    sex: Sex
    weight_kg: float
    height_cm: float
    activity_level: ActivityLevel
    goal: Goal
    pace: Pace = Pace.MODERATE

    def __post_init__(self) -> None:
        for field_name in ("age", "weight_kg", "height_cm"):
            if getattr(self, field_name) <= 0:
                raise ValueError(f"{field_name} must be positive")


@dataclass(frozen=True)
class EnergyEstimate:
    bmr: int
    tdee: int
    daily_calories: int
    calorie_adjustment: int
    protein_g: int
    carbs_g: int
    fat_g: int
    activity_multiplier: float
    goal_adjustment: float

    def as_dict(self) -> dict[str, float]:
        """Return a JSON-friendly representation."""
        return asdict(self)
