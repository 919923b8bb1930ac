from __future__ import annotations

import logging

from ..config import SeatManagement
from ..lib.artifacts import configure_session_files, write_autostart_entries
from ..lib.users import add_to_groups, as_user, group_exists, home_dir
from ..pipeline import RunContext, StepResult
from .base import ProvisionStep
from .step_50_desktop import desktop_profile

logger = logging.getLogger(__name__)

_COMMON_GROUPS = ("audio", "video", "input")


class UserGroupsStep(ProvisionStep):
    step_id = "70_user_groups"
    label = "Ensure user groups"

    def run(self, ctx: RunContext) -> StepResult:
        user = ctx.cfg.target_user
        if ctx.cfg.seat_management is SeatManagement.SEATD:
            # Void uses the 'seat' group for seatd access.
            if group_exists("seat"):
                if add_to_groups(user, ["seat"], dry_run=ctx.dry_run):
                    logger.info("Added %s to group 'seat' (seatd access).", user)
            else:
                logger.warning("Group 'seat' not found. seatd access may require manual adjustment.")

        ctx.decisions["groups"] = add_to_groups(user, _COMMON_GROUPS, dry_run=ctx.dry_run)
        return StepResult.success()


class AutostartStep(ProvisionStep):
    step_id = "72_autostart"
    label = "Set up user autostart bits"

    def run(self, ctx: RunContext) -> StepResult:
        user = ctx.cfg.target_user
        logger.info("Setting up common user directories and autostart bits for %s...", user)
        as_user(user, "xdg-user-dirs-update", dry_run=ctx.dry_run)
        write_autostart_entries(home_dir(user), user, dry_run=ctx.dry_run)
        return StepResult.success()


class SessionFilesStep(ProvisionStep):
    step_id = "74_session_files"
    label = "Generate session/config files"

    def run(self, ctx: RunContext) -> StepResult:
        written = configure_session_files(
            ctx.cfg,
            desktop_profile(ctx),
            ctx.paths,
            home_dir(ctx.cfg.target_user),
            dry_run=ctx.dry_run,
        )
        ctx.decisions["session_files"] = written
        return StepResult.success()
