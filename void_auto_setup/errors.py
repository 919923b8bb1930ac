from __future__ import annotations

from typing import Sequence


class ProvisionError(RuntimeError):
    """Base class for failures that end a provisioning run."""


class PreconditionError(ProvisionError):
    """Raised before scheduling when the machine or answers are unusable."""


class CommandError(ProvisionError):
    def __init__(self, argv: Sequence[str], returncode: int, stderr: str = "") -> None:
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"Command failed ({returncode}): {' '.join(self.argv)}\n{stderr}".rstrip())


class ResolutionError(ProvisionError):
    """No candidate of a mandatory candidate set is available."""

    def __init__(self, label: str, candidates: Sequence[str]) -> None:
        self.label = label
        self.candidates = list(candidates)
        super().__init__(f"No installable package for {label} (tried: {', '.join(self.candidates)})")
