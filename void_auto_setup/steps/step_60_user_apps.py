from __future__ import annotations

import logging

from ..config import Configuration, FileManager, Launcher, WallpaperManager
from ..lib.assets import install_file
from ..lib.manifests import package_list
from ..pipeline import RunContext, StepResult
from .base import ProvisionStep

logger = logging.getLogger(__name__)


class LauncherStep(ProvisionStep):
    step_id = "60_launcher"
    label = "Install app launcher"

    def include(self, cfg: Configuration) -> bool:
        return cfg.launcher is not Launcher.NONE

    def run(self, ctx: RunContext) -> StepResult:
        ctx.resolver.install_if_available(ctx.cfg.launcher.value)
        return StepResult.success()


class FileManagerStep(ProvisionStep):
    step_id = "62_file_manager"
    label = "Install file manager"

    def include(self, cfg: Configuration) -> bool:
        return cfg.file_manager is not FileManager.NONE

    def run(self, ctx: RunContext) -> StepResult:
        ctx.resolver.install_if_available(ctx.cfg.file_manager.value)
        return StepResult.success()


class WallpaperManagerStep(ProvisionStep):
    step_id = "64_wallpaper_manager"
    label = "Install wallpaper manager"

    def include(self, cfg: Configuration) -> bool:
        return cfg.wallpaper_manager is not WallpaperManager.NONE

    def run(self, ctx: RunContext) -> StepResult:
        backends = package_list(ctx.manifest.get("wallpaper_backends") or {}, ctx.cfg.session_kind.value)
        ctx.resolver.install_if_available(ctx.cfg.wallpaper_manager.value, *backends)
        return StepResult.success()


class SampleWallpaperStep(ProvisionStep):
    step_id = "66_sample_wallpaper"
    label = "Install sample wallpaper"

    def run(self, ctx: RunContext) -> StepResult:
        src, dst = ctx.paths.wallpaper_source, ctx.paths.wallpaper_target
        logger.info("Installing sample wallpaper to %s...", dst)
        if not install_file(src, dst, mode=0o644, dry_run=ctx.dry_run):
            logger.warning("Sample wallpaper not found at %s. Skipping wallpaper install.", src)
        return StepResult.success()
