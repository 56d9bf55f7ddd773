"""Domain errors for the planning engine."""

from dataclasses import dataclass


class PlannerError(Exception):
    """Base class for planner errors."""


@dataclass(frozen=True)
class SlotViolation:
    """A single validation problem, optionally tied to a slot."""

    slot_name: str | None
    message: str
    actual: float | None = None
    minimum: float | None = None
    maximum: float | None = None

    def as_dict(self) -> dict[str, object]:
        """Return a JSON-friendly representation."""
        return {
            "slot_name": self.slot_name,
            "message": self.message,
            "actual": self.actual,
            "minimum": self.minimum,
            "maximum": self.maximum,
        }


class InvalidStructure(PlannerError):
    """Raised when a meal structure cannot be used."""

    def __init__(self, violations: list[SlotViolation]) -> None:
        self.violations = violations
        super().__init__("; ".join(violation.message for violation in violations))


class NotFound(PlannerError):
    """Raised when a referenced record does not exist."""

    def __init__(self, kind: str, key: object) -> None:
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} not found: {key}")


class PlanConflict(PlannerError):
    """Raised when a plan changed between read and write."""
