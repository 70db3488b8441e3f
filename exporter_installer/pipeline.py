from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Sequence

from .config import Settings
from .errors import InstallError
from .exporters import ExporterDescriptor

logger = logging.getLogger(__name__)

OK = "ok"
SKIPPED = "skipped"
WARNING = "warning"


@dataclass(frozen=True)
class InstallContext:
    exporter: ExporterDescriptor
    settings: Settings

    @property
    def dry_run(self) -> bool:
        return self.settings.dry_run


@dataclass(frozen=True)
class StepResult:
    step_id: str
    status: str = OK
    message: str = ""

    @classmethod
    def ok(cls, step_id: str, message: str = "") -> "StepResult":
        return cls(step_id=step_id, status=OK, message=message)

    @classmethod
    def skipped(cls, step_id: str, message: str = "") -> "StepResult":
        return cls(step_id=step_id, status=SKIPPED, message=message)

    @classmethod
    def warning(cls, step_id: str, message: str) -> "StepResult":
        return cls(step_id=step_id, status=WARNING, message=message)


class Step(Protocol):
    """A single step. Fatal problems raise InstallError; best-effort ones return a warning."""

    step_id: str

    def run(self, ctx: InstallContext) -> StepResult:
        ...


@dataclass
class PipelineResult:
    exporter: str
    results: List[StepResult] = field(default_factory=list)

    @property
    def ran_steps(self) -> List[str]:
        return [r.step_id for r in self.results if r.status != SKIPPED]

    @property
    def skipped_steps(self) -> List[str]:
        return [r.step_id for r in self.results if r.status == SKIPPED]

    @property
    def warnings(self) -> List[StepResult]:
        return [r for r in self.results if r.status == WARNING]


def run_pipeline(
    *,
    ctx: InstallContext,
    steps: Sequence[Step],
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
) -> PipelineResult:
    """Run steps in order; the first InstallError stops the run."""

    known = [s.step_id for s in steps]
    for option, value in (("start_at", start_at), ("stop_after", stop_after)):
        if value is not None and value not in known:
            raise InstallError(f"Unknown step for {option}: {value} (steps: {', '.join(known)})")

    result = PipelineResult(exporter=ctx.exporter.name)
    started = start_at is None

    for step in steps:
        if not started:
            if step.step_id == start_at:
                started = True
            else:
                continue

        logger.debug("Running step %s", step.step_id)
        try:
            outcome = step.run(ctx)
        except InstallError as e:
            if e.step_id is None:
                e.step_id = step.step_id
            raise

        if outcome.status == WARNING:
            logger.warning("Warning: %s", outcome.message)
        elif outcome.message:
            logger.info("✓ %s", outcome.message)
        result.results.append(outcome)

        if stop_after is not None and step.step_id == stop_after:
            logger.info("Stopping after %s", stop_after)
            break

    return result
