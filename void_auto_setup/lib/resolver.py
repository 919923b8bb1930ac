"""Turn "I need capability X" into concrete XBPS package installs.

Three contracts share one probe primitive (``available``):

- ``install``: mandatory, failures propagate and end the run.
- ``install_if_available``: best-effort subset, never fails on missing names.
- ``install_first_available``: ordered fallback, first match wins.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol, Sequence

logger = logging.getLogger(__name__)


class AvailabilityProbe(Protocol):
    def available(self, package: str) -> bool:
        ...


class Installer(Protocol):
    def install(self, packages: Sequence[str]) -> None:
        ...

    def sync(self) -> None:
        ...

    def refresh(self) -> None:
        ...


class PackageResolver:
    def __init__(self, probe: AvailabilityProbe, installer: Installer) -> None:
        self.probe = probe
        self.installer = installer

    def available(self, package: str) -> bool:
        return self.probe.available(package)

    def sync(self) -> None:
        self.installer.sync()

    def refresh(self) -> None:
        self.installer.refresh()

    def install(self, *names: str) -> List[str]:
        packages = list(names)
        self.installer.install(packages)
        return packages

    def install_if_available(self, *names: str) -> List[str]:
        to_install: List[str] = []
        for name in names:
            if self.probe.available(name):
                to_install.append(name)
            else:
                logger.warning("Package not found (skipping): %s", name)

        if to_install:
            self.installer.install(to_install)
        return to_install

    def install_first_available(self, label: str, *candidates: str) -> Optional[str]:
        """Install the first available candidate and return its name.

        Candidates are probed strictly left to right; nothing after the first
        match is probed. Returns None when no candidate is available.
        """
        if not candidates:
            raise ValueError(f"Empty candidate set for {label}")

        for name in candidates:
            if self.probe.available(name):
                logger.info("Selected %s for %s", name, label)
                self.installer.install([name])
                return name
            logger.debug("Candidate %s for %s not available", name, label)

        logger.info("No candidate available for %s (tried: %s)", label, ", ".join(candidates))
        return None
