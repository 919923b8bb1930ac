from __future__ import annotations

import grp
import logging
import pwd
from pathlib import Path
from typing import Iterable, List

from ..errors import PreconditionError
from .command import run_cmd

logger = logging.getLogger(__name__)


def user_exists(username: str) -> bool:
    try:
        pwd.getpwnam(username)
    except KeyError:
        return False
    return True


def ensure_user(username: str) -> None:
    if not user_exists(username):
        raise PreconditionError(f"User does not exist: {username}")


def home_dir(username: str) -> Path:
    return Path(pwd.getpwnam(username).pw_dir)


def group_exists(group: str) -> bool:
    try:
        grp.getgrnam(group)
    except KeyError:
        return False
    return True


def add_to_groups(username: str, groups: Iterable[str], *, dry_run: bool = False) -> List[str]:
    """Best-effort ``usermod -aG``; returns the groups the user was added to."""
    added: List[str] = []
    for g in groups:
        if not group_exists(g):
            logger.debug("Group %s does not exist; skipping", g)
            continue
        r = run_cmd(["usermod", "-aG", g, username], check=False, dry_run=dry_run)
        if r.returncode == 0:
            added.append(g)
        else:
            logger.warning("Could not add %s to group %s", username, g)
    return added


def as_user(username: str, command: str, *, check: bool = False, dry_run: bool = False):
    return run_cmd(["sudo", "-u", username, "-H", "bash", "-lc", command], check=check, dry_run=dry_run)
