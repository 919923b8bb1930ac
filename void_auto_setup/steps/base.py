from __future__ import annotations

from ..config import Configuration
from ..pipeline import RunContext, StepResult


class ProvisionStep:
    """Unconditional step; subclasses override ``include`` to become optional."""

    step_id = ""
    label = ""

    def include(self, cfg: Configuration) -> bool:
        return True

    def run(self, ctx: RunContext) -> StepResult:
        raise NotImplementedError
