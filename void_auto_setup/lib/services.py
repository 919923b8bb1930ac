from __future__ import annotations

import enum
import logging
import os
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class EnableOutcome(str, enum.Enum):
    ALREADY_ENABLED = "already_enabled"
    SOURCE_MISSING = "source_missing"
    ACTIVATED = "activated"


class ServiceBackend(Protocol):
    def source_exists(self, name: str) -> bool:
        ...

    def is_active(self, name: str) -> bool:
        ...

    def activate(self, name: str) -> None:
        ...


class RunitServiceDir:
    """runit services: /etc/sv/NAME is enabled by linking it into /var/service."""

    def __init__(self, sv_dir: str = "/etc/sv", service_dir: str = "/var/service", *, dry_run: bool = False) -> None:
        self.sv_dir = Path(sv_dir)
        self.service_dir = Path(service_dir)
        self.dry_run = dry_run

    def source(self, name: str) -> Path:
        return self.sv_dir / name

    def link(self, name: str) -> Path:
        return self.service_dir / name

    def source_exists(self, name: str) -> bool:
        return self.source(name).is_dir()

    def is_active(self, name: str) -> bool:
        dst = self.link(name)
        return dst.is_symlink() or dst.is_dir()

    def activate(self, name: str) -> None:
        src, dst = self.source(name), self.link(name)
        if self.dry_run:
            logger.info("Would link %s -> %s", dst, src)
            return
        os.symlink(src, dst)


class ResourceEnabler:
    """Idempotently enable long-running services.

    Never disables anything. A missing service definition is a warning, not an
    error; activation errors from the backend propagate.
    """

    def __init__(self, backend: ServiceBackend) -> None:
        self.backend = backend

    def enable(self, name: str) -> EnableOutcome:
        if self.backend.is_active(name):
            logger.info("Service enabled: %s", name)
            return EnableOutcome.ALREADY_ENABLED

        if not self.backend.source_exists(name):
            logger.warning("Service %s not found (package might not provide a runit service).", name)
            return EnableOutcome.SOURCE_MISSING

        self.backend.activate(name)
        logger.info("Enabled service: %s", name)
        return EnableOutcome.ACTIVATED
