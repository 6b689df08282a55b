"""Sequential, precondition-gated step execution."""

import time
from collections.abc import Sequence

from skiaboot.core.exceptions.errors import BootstrapError, StepFailedError
from skiaboot.core.logger.logger import get_logger
from skiaboot.models.steps import PipelineResult, Step, StepOutcome, StepStatus

logger = get_logger(__name__)


class StepPlanner:
    """Runs steps in order, skipping those whose precondition already holds.

    The first failing action aborts the run. Work done by earlier steps is
    left in place so the next run resumes at the failed step.
    """

    def __init__(self, steps: Sequence[Step]) -> None:
        names = [s.name for s in steps]
        duplicates = {n for n in names if names.count(n) > 1}
        if duplicates:
            raise ValueError(f"Duplicate step names: {sorted(duplicates)}")
        self.steps = list(steps)

    def plan(self) -> list[StepOutcome]:
        """Evaluate preconditions only and report what run() would do."""
        return [
            StepOutcome(
                name=step.name,
                status=StepStatus.SKIPPED if step.is_satisfied() else StepStatus.PENDING,
            )
            for step in self.steps
        ]

    def run(self) -> PipelineResult:
        """Execute the pipeline.

        Returns:
            PipelineResult with one outcome per step.

        Raises:
            StepFailedError: On the first failing action. Its ``result``
                holds the outcomes recorded so far.
        """
        result = PipelineResult()
        total = len(self.steps)

        for index, step in enumerate(self.steps, start=1):
            label = f"[{index}/{total}] {step.name}"

            if step.is_satisfied():
                logger.info(f"{label}: already satisfied, skipping")
                result.outcomes.append(StepOutcome(name=step.name, status=StepStatus.SKIPPED))
                continue

            logger.info(f"{label}: {step.description or 'running'}")
            start_time = time.monotonic()
            try:
                step.action()
            except (BootstrapError, OSError) as e:
                duration = time.monotonic() - start_time
                failure = StepFailedError(step.name, e, result=result)
                result.outcomes.append(
                    StepOutcome(
                        name=step.name,
                        status=StepStatus.FAILED,
                        error=str(e),
                        exit_code=failure.process_exit_code,
                        duration_seconds=duration,
                    )
                )
                logger.error(f"{label} failed: {failure}")
                raise failure from e

            duration = time.monotonic() - start_time
            result.outcomes.append(
                StepOutcome(
                    name=step.name,
                    status=StepStatus.COMPLETED,
                    duration_seconds=duration,
                )
            )
            logger.info(f"{label}: done in {duration:.1f}s")

        return result
