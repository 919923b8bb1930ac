from __future__ import annotations

import logging

from ..config import Configuration
from ..errors import ResolutionError
from ..lib.command import run_cmd
from ..lib.hwdetect import detect_arch
from ..lib.manifests import package_list
from ..pipeline import RunContext, StepResult
from .base import ProvisionStep

logger = logging.getLogger(__name__)


class BrowserStep(ProvisionStep):
    step_id = "80_browser"
    label = "Install browser"

    def run(self, ctx: RunContext) -> StepResult:
        choice = ctx.cfg.browser.value
        fallback = str((ctx.manifest.get("browser") or {}).get("fallback") or "firefox")
        logger.info("Installing browser: %s", choice)

        candidates = [choice] if choice == fallback else [choice, fallback]
        chosen = ctx.resolver.install_first_available("browser", *candidates)
        if chosen is None:
            raise ResolutionError("browser", candidates)
        if chosen != choice:
            logger.warning("Browser package not found: %s. Installed %s instead.", choice, chosen)
        ctx.decisions["browser"] = chosen
        return StepResult.success()


class FlatpakStep(ProvisionStep):
    step_id = "82_flatpak"
    label = "Install Flatpak + Flathub"

    def include(self, cfg: Configuration) -> bool:
        return cfg.app_store

    def run(self, ctx: RunContext) -> StepResult:
        spec = ctx.manifest.get("flatpak") or {}
        remote = str(spec.get("remote_name") or "flathub")
        logger.info("Installing Flatpak and enabling Flathub...")
        ctx.resolver.install(*package_list(spec, "packages"))

        r = run_cmd(["flatpak", "remote-list", "--system"], check=False, dry_run=ctx.dry_run)
        remotes = {ln.split()[0] for ln in r.stdout.splitlines() if ln.strip()}
        if remote in remotes:
            logger.info("Flathub already present.")
        else:
            run_cmd(
                ["flatpak", "remote-add", "--system", "--if-not-exists", remote, str(spec["remote_url"])],
                dry_run=ctx.dry_run,
            )
            logger.info("Flathub remote added.")
        return StepResult.success()


class GamingStep(ProvisionStep):
    step_id = "84_gaming"
    label = "Install gaming/multilib extras"

    def run(self, ctx: RunContext) -> StepResult:
        arch = detect_arch()
        if arch != "x86_64":
            logger.warning("Non-x86_64 architecture; skipping 32-bit gaming libs.")
            return StepResult.success("not x86_64")

        spec = ctx.manifest.get("gaming") or {}
        logger.info("Installing common gaming-related packages and 32-bit libs...")
        ctx.resolver.install(*package_list(spec, "packages"))
        ctx.resolver.install_if_available(*package_list(spec, "multilib"))
        if ctx.cfg.steam:
            ctx.decisions["steam"] = bool(ctx.resolver.install_if_available(*package_list(spec, "steam")))
        return StepResult.success()
