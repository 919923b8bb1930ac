from __future__ import annotations

import logging
from typing import Sequence

from .command import run_cmd

logger = logging.getLogger(__name__)


class XbpsIndex:
    """Availability probe backed by the remote XBPS repository index."""

    def __init__(self, *, dry_run: bool = False) -> None:
        self.dry_run = dry_run

    def available(self, package: str) -> bool:
        """Return True if any configured remote repository carries ``package``."""
        if self.dry_run:
            # Be permissive in dry-run so planning doesn't fail.
            return True
        r = run_cmd(["xbps-query", "-R", package], check=False)
        return r.returncode == 0


class XbpsInstaller:
    def __init__(self, *, dry_run: bool = False) -> None:
        self.dry_run = dry_run

    def install(self, packages: Sequence[str]) -> None:
        if not packages:
            return
        logger.info("Installing: %s", " ".join(packages))
        run_cmd(["xbps-install", "-y", *packages], dry_run=self.dry_run)

    def sync(self) -> None:
        logger.info("Syncing XBPS indexes...")
        run_cmd(["xbps-install", "-Sy"], dry_run=self.dry_run)

    def refresh(self) -> None:
        # May stop on an unknown repo fingerprint; the next install reports it.
        run_cmd(["xbps-install", "-S"], check=False, dry_run=self.dry_run)
