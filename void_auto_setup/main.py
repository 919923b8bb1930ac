from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Any, Dict, List, Optional

from . import __version__
from .config import Configuration, load_answers, normalize
from .errors import PreconditionError, ProvisionError
from .lib.command import run_cmd
from .lib.env import PATHS, Paths
from .lib.hwdetect import read_os_release
from .lib.manifests import load_manifest, package_list
from .lib.resolver import PackageResolver
from .lib.services import ResourceEnabler, RunitServiceDir
from .lib.users import ensure_user
from .lib.xbps import XbpsIndex, XbpsInstaller
from .logging_utils import DEFAULT_LOG_PATH, configure_logging
from .pipeline import PipelineResult, RunContext, Step, run_pipeline, schedule
from .progress import ProgressEstimator, open_progress_stream
from .prompts import NonInteractivePrompter, Prompter, ask_configuration
from .steps import (
    AudioBluetoothStep,
    AutostartStep,
    BrowserStep,
    CoreServicesStep,
    DesktopStep,
    DevToolsStep,
    EnableReposStep,
    FileManagerStep,
    FinalNotesStep,
    FlatpakStep,
    FontsStep,
    GamingStep,
    GpuDriversStep,
    HyprlandStep,
    LauncherStep,
    LoginManagerStep,
    SampleWallpaperStep,
    SessionBaseStep,
    SessionFilesStep,
    UserGroupsStep,
    VibeToolStep,
    WallpaperManagerStep,
)

logger = logging.getLogger(__name__)


def build_steps() -> List[Step]:
    """Every step, in the one order they may run."""
    return [
        EnableReposStep(),
        CoreServicesStep(),
        AudioBluetoothStep(),
        DevToolsStep(),
        FontsStep(),
        VibeToolStep(),
        GpuDriversStep(),
        SessionBaseStep(),
        DesktopStep(),
        HyprlandStep(),
        LoginManagerStep(),
        LauncherStep(),
        FileManagerStep(),
        WallpaperManagerStep(),
        SampleWallpaperStep(),
        UserGroupsStep(),
        AutostartStep(),
        SessionFilesStep(),
        BrowserStep(),
        FlatpakStep(),
        GamingStep(),
        FinalNotesStep(),
    ]


def require_root() -> None:
    if os.geteuid() != 0:
        raise PreconditionError("Please run as root (e.g. sudo void-auto-setup).")


def detect_void(os_release: str) -> None:
    try:
        info = read_os_release(os_release)
    except FileNotFoundError as e:
        raise PreconditionError(f"{os_release} missing") from e
    if info.get("ID") != "void":
        logger.warning("This does not look like Void Linux (ID=%s). Continuing anyway.", info.get("ID", "unknown"))


def bootstrap(resolver: PackageResolver, manifest: Dict[str, Any]) -> None:
    """Make sure sudo and CA certificates exist before anything else talks to the network."""
    try:
        resolver.install(*package_list(manifest.get("bootstrap") or {}, "packages"))
    except ProvisionError as e:
        logger.warning("Bootstrap install failed (continuing): %s", e)
    resolver.sync()


def resolve_configuration(
    prompter: Prompter,
    *,
    answers_path: Optional[str] = None,
    default_user: str = "",
) -> Configuration:
    answers = load_answers(answers_path) if answers_path else {}
    cfg = ask_configuration(prompter, answers, default_user=default_user)
    ensure_user(cfg.target_user)
    cfg = normalize(cfg)
    logger.info("Configuration: %s", cfg.as_dict())
    return cfg


def maybe_reboot(prompter: Prompter, *, dry_run: bool) -> None:
    if prompter.yes_no("Reboot now to apply drivers/services fully?", True):
        logger.info("Rebooting...")
        run_cmd(["reboot"], dry_run=dry_run)
    else:
        logger.info("Reboot skipped. You should reboot later.")


def run(
    *,
    log_path: str = DEFAULT_LOG_PATH,
    answers_path: Optional[str] = None,
    non_interactive: bool = False,
    dry_run: bool = False,
    reboot_prompt: bool = True,
    paths: Paths = PATHS,
) -> PipelineResult:
    """Resolve choices, schedule the steps and run them."""

    actual_log_path = configure_logging(log_path=log_path)
    logger.info("Void auto setup starting (version %s)", __version__)

    if not dry_run:
        require_root()
    detect_void(paths.os_release)

    manifest = load_manifest()
    resolver = PackageResolver(XbpsIndex(dry_run=dry_run), XbpsInstaller(dry_run=dry_run))
    bootstrap(resolver, manifest)

    prompter: Prompter = NonInteractivePrompter() if non_interactive else Prompter()
    cfg = resolve_configuration(
        prompter,
        answers_path=answers_path,
        default_user=os.environ.get("SUDO_USER", ""),
    )

    ctx = RunContext(
        cfg=cfg,
        resolver=resolver,
        services=ResourceEnabler(RunitServiceDir(paths.sv_dir, paths.service_dir, dry_run=dry_run)),
        paths=paths,
        manifest=manifest,
        dry_run=dry_run,
    )
    ctx.decisions["log_path"] = actual_log_path

    steps = schedule(cfg, build_steps())
    stream = open_progress_stream()
    try:
        result = run_pipeline(ctx, steps, progress_factory=lambda total: ProgressEstimator(total, stream=stream))
    finally:
        if stream is not sys.stdout:
            stream.close()

    if result.ok and reboot_prompt:
        maybe_reboot(prompter, dry_run=dry_run)
    return result


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="void-auto-setup", description="Post-install configurator for Void Linux")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to the setup log")
    p.add_argument("--answers", default=None, help="Pre-answered questions (yaml|json)")
    p.add_argument("--non-interactive", action="store_true", help="Use defaults for every unanswered question")
    p.add_argument("--dry-run", action="store_true", help="Log commands and files without changing the system")
    p.add_argument("--no-reboot", action="store_true", help="Do not offer to reboot at the end")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    args = p.parse_args(argv)

    try:
        result = run(
            log_path=args.log,
            answers_path=args.answers,
            non_interactive=bool(args.non_interactive),
            dry_run=bool(args.dry_run),
            reboot_prompt=not args.no_reboot,
        )
    except KeyboardInterrupt:
        logger.error("Interrupted.")
        return 130
    except ProvisionError as e:
        logger.error("%s", e)
        return 1
    except Exception:
        logger.exception("Setup failed")
        return 1

    if not result.ok:
        logger.error(
            "Setup stopped at step %s after %d completed step(s).",
            result.failed_step,
            len(result.ran_steps),
        )
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
