"""Pipeline step data models.

Steps hold callables, so these are plain dataclasses rather than pydantic models.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum


class StepStatus(str, Enum):
    """Step lifecycle status."""

    PENDING = "pending"
    SKIPPED = "skipped"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class Step:
    """A named, precondition-gated unit of pipeline work.

    Attributes:
        name: Step name shown in logs and plans.
        action: Performs the work; raises on failure.
        precondition: Side-effect free completion check. None means the step
            always runs.
        description: Human readable summary.
    """

    name: str
    action: Callable[[], object]
    precondition: Callable[[], bool] | None = None
    description: str = ""

    def is_satisfied(self) -> bool:
        """Return True when the step's precondition already holds."""
        if self.precondition is None:
            return False
        return bool(self.precondition())


@dataclass
class StepOutcome:
    """What happened to a single step during a run."""

    name: str
    status: StepStatus
    error: str | None = None
    exit_code: int | None = None
    duration_seconds: float = 0.0


@dataclass
class PipelineResult:
    """Ordered outcomes of a pipeline run."""

    outcomes: list[StepOutcome] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """Return True when no step failed."""
        return all(o.status != StepStatus.FAILED for o in self.outcomes)

    @property
    def failed_step(self) -> str | None:
        """Return the name of the failed step, if any."""
        for outcome in self.outcomes:
            if outcome.status == StepStatus.FAILED:
                return outcome.name
        return None

    @property
    def exit_code(self) -> int:
        """Return the process exit status for this result (never 0 on failure)."""
        for outcome in self.outcomes:
            if outcome.status == StepStatus.FAILED:
                return outcome.exit_code or 1
        return 0

    @property
    def executed(self) -> list[str]:
        """Return names of steps whose action ran to completion."""
        return [o.name for o in self.outcomes if o.status == StepStatus.COMPLETED]

    @property
    def skipped(self) -> list[str]:
        """Return names of steps skipped because their precondition held."""
        return [o.name for o in self.outcomes if o.status == StepStatus.SKIPPED]
