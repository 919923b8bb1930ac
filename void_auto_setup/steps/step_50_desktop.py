from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict

from ..config import BETA_ENVIRONMENT, Configuration, LoginManager
from ..lib.hwdetect import detect_arch, detect_libc_flavor
from ..lib.manifests import package_list
from ..pipeline import RunContext, StepResult
from .base import ProvisionStep

logger = logging.getLogger(__name__)

# (arch, libc) -> void-extra repository suffix
_EXTRA_REPO_ARCHES = {
    ("x86_64", "gnu"): "x86_64",
    ("x86_64", "musl"): "x86_64-musl",
    ("aarch64", "gnu"): "aarch64",
    ("aarch64", "musl"): "aarch64-musl",
}


def desktop_profile(ctx: RunContext) -> Dict[str, Any]:
    desktops = ctx.manifest.get("desktops") or {}
    profile = desktops.get(ctx.cfg.environment.value)
    if not isinstance(profile, dict):
        raise RuntimeError(f"manifests/desktops.yaml: no profile for {ctx.cfg.environment.value}")
    return profile


class SessionBaseStep(ProvisionStep):
    step_id = "50_session_base"
    label = "Install session base (X11/Wayland)"

    def run(self, ctx: RunContext) -> StepResult:
        kind = ctx.cfg.session_kind
        logger.info("Installing %s session base...", kind.value)
        ctx.resolver.install(*package_list(ctx.manifest.get("session_base") or {}, kind.value))
        return StepResult.success()


class DesktopStep(ProvisionStep):
    step_id = "52_desktop"
    label = "Install desktop/WM"

    def run(self, ctx: RunContext) -> StepResult:
        profile = desktop_profile(ctx)
        env = ctx.cfg.environment
        logger.info("Installing %s (%s)...", profile.get("title", env.value), ctx.cfg.session_kind.value)

        candidates = package_list(profile, "first_available")
        if candidates:
            chosen = ctx.resolver.install_first_available(env.value, *candidates)
            if chosen is None:
                fallback = package_list(profile, "fallback")
                if fallback:
                    ctx.resolver.install(*fallback)
                else:
                    logger.warning(
                        "%s package not found in repos. You may need to build it from source.", candidates[0]
                    )
            ctx.decisions["desktop_package"] = chosen

        packages = package_list(profile, "packages")
        if packages:
            ctx.resolver.install(*packages)
        ctx.resolver.install_if_available(*package_list(profile, "optional"))
        return StepResult.success()


class HyprlandStep(ProvisionStep):
    step_id = "54_hyprland_experimental"
    label = "Install Hyprland (experimental workaround)"

    def include(self, cfg: Configuration) -> bool:
        return cfg.environment is BETA_ENVIRONMENT

    def _enable_extra_repo(self, ctx: RunContext, spec: Dict[str, Any]) -> bool:
        """Configure the void-extra prebuilt repo (not affiliated with Void Linux)."""
        arch, libc = detect_arch(), detect_libc_flavor()
        repo_arch = _EXTRA_REPO_ARCHES.get((arch, libc))
        if repo_arch is None:
            logger.warning(
                "void-extra repo does not provide prebuilt packages for %s (%s). Hyprland install will be skipped.",
                arch,
                libc,
            )
            return False

        conf = Path(ctx.paths.xbps_conf_dir) / str(spec.get("extra_repo_conf", "20-repository-extra.conf"))
        line = "repository=" + str(spec["extra_repo_url"]).format(repo_arch=repo_arch) + "\n"
        if conf.is_file() and line.strip() in conf.read_text(encoding="utf-8"):
            logger.info("void-extra repo already configured (%s).", conf)
        elif ctx.dry_run:
            logger.info("Would write %s", conf)
        else:
            logger.info("Configuring void-extra prebuilt repo (%s)...", repo_arch)
            conf.parent.mkdir(parents=True, exist_ok=True)
            conf.write_text(line, encoding="utf-8")

        logger.info("Refreshing repositories (you may be prompted to accept a fingerprint)...")
        ctx.resolver.refresh()
        return True

    def run(self, ctx: RunContext) -> StepResult:
        spec = ctx.manifest.get("hyprland") or {}
        logger.info("Installing Hyprland (EXPERIMENTAL/BETA) from void-extra...")
        if not self._enable_extra_repo(ctx, spec):
            return StepResult.success("unsupported architecture")

        chosen = ctx.resolver.install_first_available("Hyprland", *package_list(spec, "candidates"))
        if chosen is None:
            logger.warning("hyprland package not found even after enabling void-extra. Skipping Hyprland install.")
        ctx.decisions["hyprland"] = chosen

        ctx.resolver.install_if_available(*package_list(spec, "optional"))
        return StepResult.success()


class LoginManagerStep(ProvisionStep):
    step_id = "56_login_manager"
    label = "Install login manager"

    def run(self, ctx: RunContext) -> StepResult:
        lm = ctx.cfg.login_manager
        ctx.decisions["login_manager"] = lm.value
        if lm is LoginManager.NONE:
            logger.info("No login manager selected.")
            return StepResult.success()

        spec = (ctx.manifest.get("login_managers") or {}).get(lm.value) or {}
        logger.info("Installing %s...", lm.value)
        ctx.resolver.install(*package_list(spec, "packages"))
        ctx.services.enable(str(spec.get("service") or lm.value))
        return StepResult.success()
