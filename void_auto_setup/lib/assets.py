from __future__ import annotations

import logging
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)


def install_file(src: str, dst: str, *, mode: int = 0o644, dry_run: bool = False) -> bool:
    """Copy one shipped asset into place. Returns False if the source is missing."""
    s = Path(src)
    d = Path(dst)
    if not s.is_file():
        return False

    if dry_run:
        logger.info("Would copy %s -> %s", str(s), str(d))
        return True

    d.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(s, d)
    d.chmod(mode)
    return True
