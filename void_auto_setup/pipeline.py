from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence

from .config import Configuration
from .lib.env import Paths
from .lib.resolver import PackageResolver
from .lib.services import ResourceEnabler
from .progress import ProgressEstimator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StepResult:
    ok: bool
    message: str = ""

    @classmethod
    def success(cls, message: str = "") -> "StepResult":
        return cls(ok=True, message=message)

    @classmethod
    def failure(cls, message: str) -> "StepResult":
        return cls(ok=False, message=message)


@dataclass
class RunContext:
    """Everything a step may touch. ``cfg`` is read-only for the whole run."""

    cfg: Configuration
    resolver: PackageResolver
    services: ResourceEnabler
    paths: Paths
    manifest: Dict[str, Any]
    dry_run: bool = False
    decisions: Dict[str, Any] = field(default_factory=dict)


class Step(Protocol):
    """A single unit of provisioning work at a fixed position in the order."""

    step_id: str
    label: str

    def include(self, cfg: Configuration) -> bool:
        ...

    def run(self, ctx: RunContext) -> StepResult:
        ...


@dataclass(frozen=True)
class PipelineResult:
    ran_steps: List[str]
    failed_step: Optional[str]
    error: Optional[str]
    progress: ProgressEstimator

    @property
    def ok(self) -> bool:
        return self.failed_step is None


def schedule(cfg: Configuration, steps: Sequence[Step]) -> List[Step]:
    """Evaluate every inclusion predicate once against the final configuration."""

    included = [s for s in steps if s.include(cfg)]
    skipped = [s.step_id for s in steps if s not in included]
    logger.info("Scheduled %d steps (not included: %s)", len(included), ", ".join(skipped) or "none")
    return included


def run_pipeline(
    ctx: RunContext,
    steps: Sequence[Step],
    *,
    progress_factory: Callable[[int], ProgressEstimator] = ProgressEstimator,
) -> PipelineResult:
    """Run already-scheduled steps in order, stopping at the first failure.

    Nothing is retried or rolled back. The progress total is taken from
    ``steps`` before the first step runs.
    """

    progress = progress_factory(len(steps))
    ran: List[str] = []

    for step in steps:
        progress.render(f"Running: {step.label}")
        logger.info("Running step %s", step.step_id)

        try:
            result = step.run(ctx)
        except Exception as e:
            logger.debug("Step %s raised", step.step_id, exc_info=True)
            result = StepResult.failure(str(e) or type(e).__name__)
        except BaseException:
            # Ctrl-C: terminate the progress line before the caller reports it.
            progress.finish_line()
            raise

        if not result.ok:
            progress.finish_line()
            logger.error("Step failed: %s: %s", step.label, result.message)
            return PipelineResult(ran_steps=ran, failed_step=step.step_id, error=result.message, progress=progress)

        progress.advance()
        progress.render(f"Done: {step.label}")
        progress.finish_line()
        ran.append(step.step_id)

    return PipelineResult(ran_steps=ran, failed_step=None, error=None, progress=progress)
