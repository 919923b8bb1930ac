from __future__ import annotations

import logging

from ..config import Configuration
from ..lib.command import have_cmd, run_cmd
from ..lib.manifests import package_list
from ..pipeline import RunContext, StepResult
from .base import ProvisionStep

logger = logging.getLogger(__name__)


class FontsStep(ProvisionStep):
    step_id = "30_fonts"
    label = "Install common fonts"

    def include(self, cfg: Configuration) -> bool:
        return cfg.fonts

    def run(self, ctx: RunContext) -> StepResult:
        fonts = ctx.manifest.get("fonts") or {}
        logger.info("Installing common fonts...")
        ctx.resolver.install_if_available(*package_list(fonts, "config"))

        baseline = package_list(fonts, "baseline")
        chosen = ctx.resolver.install_first_available("baseline fonts", *baseline)
        if chosen is None:
            logger.warning(
                "No baseline font packages found (%s). Skipping font installation.", " / ".join(baseline)
            )
            return StepResult.success("no baseline fonts")
        ctx.decisions["baseline_fonts"] = chosen

        ctx.resolver.install_if_available(*package_list(fonts, "extras"))

        if ctx.dry_run or have_cmd("xbps-reconfigure"):
            run_cmd(["xbps-reconfigure", "-f", "fontconfig"], check=False, dry_run=ctx.dry_run)
        return StepResult.success()


class VibeToolStep(ProvisionStep):
    step_id = "32_vibe_tool"
    label = "Install fastfetch"

    def include(self, cfg: Configuration) -> bool:
        return cfg.vibe_tool

    def run(self, ctx: RunContext) -> StepResult:
        logger.info("Installing fastfetch (for the vibes)...")
        ctx.resolver.install_if_available(*package_list(ctx.manifest.get("vibe_tool") or {}, "packages"))
        return StepResult.success()
