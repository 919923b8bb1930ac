"""Step list, inclusion predicates and individual step behaviour."""

from __future__ import annotations

import io
from pathlib import Path

import pytest

from void_auto_setup.config import (
    Browser,
    Configuration,
    Environment,
    FileManager,
    GpuPreference,
    Launcher,
    LoginManager,
    SeatManagement,
    WallpaperManager,
)
from void_auto_setup.lib.hwdetect import GpuVendor
from void_auto_setup.main import build_steps
from void_auto_setup.pipeline import run_pipeline, schedule
from void_auto_setup.progress import ProgressEstimator
from void_auto_setup.steps import (
    BrowserStep,
    CoreServicesStep,
    DesktopStep,
    FontsStep,
    GpuDriversStep,
    HyprlandStep,
    LoginManagerStep,
)
from void_auto_setup.steps import step_40_gpu_drivers, step_50_desktop

from .conftest import FakeClock, FakeInstaller, FakeProbe, FakeServiceBackend

OPTIONAL_STEPS = {
    "30_fonts",
    "32_vibe_tool",
    "54_hyprland_experimental",
    "60_launcher",
    "62_file_manager",
    "64_wallpaper_manager",
    "82_flatpak",
}


def minimal(user: str = "alice", **overrides) -> Configuration:
    """Configuration with every optional step switched off."""
    values = dict(
        target_user=user,
        environment=Environment.I3,
        login_manager=LoginManager.LIGHTDM,
        gpu=GpuPreference.INTEL,
        launcher=Launcher.NONE,
        file_manager=FileManager.NONE,
        wallpaper_manager=WallpaperManager.NONE,
        fonts=False,
        app_store=False,
        vibe_tool=False,
    )
    values.update(overrides)
    return Configuration(**values)


def test_step_ids_are_unique_and_ordered() -> None:
    ids = [s.step_id for s in build_steps()]
    assert len(ids) == len(set(ids)) == 22
    assert ids == sorted(ids)
    assert ids[0] == "10_enable_repos"
    assert ids[-1] == "90_final_notes"


def test_base_schedule_has_fifteen_steps() -> None:
    scheduled = schedule(minimal(), build_steps())
    assert len(scheduled) == 15
    assert not OPTIONAL_STEPS.intersection(s.step_id for s in scheduled)


def test_every_option_on_schedules_everything() -> None:
    cfg = minimal(
        environment=Environment.HYPRLAND,
        launcher=Launcher.WOFI,
        file_manager=FileManager.THUNAR,
        wallpaper_manager=WallpaperManager.AZOTE,
        fonts=True,
        app_store=True,
        vibe_tool=True,
    )
    assert len(schedule(cfg, build_steps())) == 22


def test_two_flags_make_seventeen_and_run_to_completion(make_ctx, current_user: str, capsys) -> None:
    cfg = minimal(current_user, app_store=True, vibe_tool=True)
    steps = schedule(cfg, build_steps())
    assert len(steps) == 17

    installer = FakeInstaller()
    ctx = make_ctx(cfg, installer=installer, backend=FakeServiceBackend(sources={"dbus", "elogind", "bluetoothd", "lightdm"}))
    clock = FakeClock()
    out = io.StringIO()

    result = run_pipeline(ctx, steps, progress_factory=lambda total: ProgressEstimator(total, clock=clock, stream=out))

    assert result.ok, result.error
    assert result.progress.total == 17
    assert result.progress.completed == 17
    assert result.progress.percent() == 100
    assert len(result.ran_steps) == 17
    assert "fastfetch" in installer.installed
    assert "flatpak" in installer.installed
    assert "(17/17)" in out.getvalue()
    assert "Done." in capsys.readouterr().out


def test_mandatory_failure_stops_the_run(make_ctx) -> None:
    cfg = minimal()
    steps = schedule(cfg, build_steps())
    installer = FakeInstaller(fail_on={"dbus"})

    result = run_pipeline(make_ctx(cfg, installer=installer), steps, progress_factory=lambda t: ProgressEstimator(t, clock=FakeClock()))

    assert result.failed_step == "20_core_services"
    assert result.ran_steps == ["10_enable_repos"]
    assert result.progress.completed == 1
    assert "network unreachable" in (result.error or "")


def test_core_services_enable_seat_stack(make_ctx) -> None:
    backend = FakeServiceBackend(sources={"dbus", "seatd"})
    installer = FakeInstaller()
    ctx = make_ctx(minimal(seat_management=SeatManagement.SEATD), installer=installer, backend=backend)

    assert CoreServicesStep().run(ctx).ok
    assert installer.calls == [["dbus", "polkit"], ["seatd"]]
    assert backend.activated == ["dbus", "seatd"]


def test_fonts_fall_back_to_second_baseline(make_ctx) -> None:
    probe = FakeProbe({"fontconfig", "xorg-fonts", "noto-fonts-ttf"})
    installer = FakeInstaller()
    ctx = make_ctx(minimal(fonts=True), probe=probe, installer=installer)

    assert FontsStep().run(ctx).ok
    assert installer.calls == [["fontconfig"], ["xorg-fonts"], ["noto-fonts-ttf"]]
    assert ctx.decisions["baseline_fonts"] == "xorg-fonts"


def test_fonts_without_baseline_is_not_fatal(make_ctx) -> None:
    installer = FakeInstaller()
    ctx = make_ctx(minimal(fonts=True), probe=FakeProbe(), installer=installer)
    assert FontsStep().run(ctx).ok
    assert installer.calls == []


def test_browser_falls_back_to_firefox(make_ctx) -> None:
    probe = FakeProbe({"firefox"})
    installer = FakeInstaller()
    ctx = make_ctx(minimal(browser=Browser.LIBREWOLF), probe=probe, installer=installer)

    assert BrowserStep().run(ctx).ok
    assert installer.calls == [["firefox"]]
    assert probe.probed == ["librewolf", "firefox"]


def test_browser_without_candidates_fails_the_run(make_ctx) -> None:
    ctx = make_ctx(minimal(browser=Browser.CHROMIUM), probe=FakeProbe())
    result = run_pipeline(ctx, [BrowserStep()], progress_factory=lambda t: ProgressEstimator(t, clock=FakeClock()))
    assert result.failed_step == "80_browser"
    assert "chromium" in (result.error or "")


def test_plasma_uses_fallback_set_when_meta_package_missing(make_ctx) -> None:
    installer = FakeInstaller()
    ctx = make_ctx(minimal(environment=Environment.PLASMA), probe=FakeProbe(), installer=installer)

    assert DesktopStep().run(ctx).ok
    assert installer.calls == [["plasma-desktop", "konsole", "dolphin", "kdegraphics-thumbnailers"]]


def test_niri_missing_is_only_a_warning(make_ctx) -> None:
    installer = FakeInstaller()
    ctx = make_ctx(minimal(environment=Environment.NIRI), probe=FakeProbe(), installer=installer)

    assert DesktopStep().run(ctx).ok
    assert installer.calls == [["foot", "swaybg", "grim", "slurp", "wl-clipboard"]]


def test_login_manager_none_installs_nothing(make_ctx) -> None:
    installer = FakeInstaller()
    backend = FakeServiceBackend()
    ctx = make_ctx(minimal(login_manager=LoginManager.NONE), installer=installer, backend=backend)
    assert LoginManagerStep().run(ctx).ok
    assert installer.calls == []
    assert backend.activated == []


def test_greetd_installs_and_enables(make_ctx) -> None:
    installer = FakeInstaller()
    backend = FakeServiceBackend(sources={"greetd"})
    ctx = make_ctx(minimal(login_manager=LoginManager.GREETD), installer=installer, backend=backend)
    assert LoginManagerStep().run(ctx).ok
    assert installer.calls == [["greetd", "tuigreet"]]
    assert backend.activated == ["greetd"]


def test_nvidia_without_dkms(make_ctx, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(step_40_gpu_drivers, "detect_gpu_vendor", lambda **kw: GpuVendor.NVIDIA)
    installer = FakeInstaller()
    probe = FakeProbe({"nvidia-libs-32bit"})
    ctx = make_ctx(minimal(gpu=GpuPreference.AUTO), probe=probe, installer=installer)

    assert GpuDriversStep().run(ctx).ok
    assert installer.calls == [["linux-headers"], ["nvidia"], ["nvidia-libs-32bit"]]
    assert ctx.decisions["gpu_vendor"] == "nvidia"


def test_amd_with_amdvlk(make_ctx) -> None:
    installer = FakeInstaller()
    ctx = make_ctx(minimal(gpu=GpuPreference.AMD, amdvlk=True), probe=FakeProbe({"amdvlk"}), installer=installer)
    assert GpuDriversStep().run(ctx).ok
    assert installer.calls == [["mesa", "mesa-dri", "vulkan-loader"], ["amdvlk"]]


def test_undetected_gpu_installs_nothing(make_ctx, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(step_40_gpu_drivers, "detect_gpu_vendor", lambda **kw: GpuVendor.NONE)
    installer = FakeInstaller()
    ctx = make_ctx(minimal(gpu=GpuPreference.AUTO), installer=installer)
    assert GpuDriversStep().run(ctx).ok
    assert installer.calls == []


def test_hyprland_configures_extra_repo_once(make_ctx, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(step_50_desktop, "detect_arch", lambda: "x86_64")
    monkeypatch.setattr(step_50_desktop, "detect_libc_flavor", lambda: "musl")
    installer = FakeInstaller()
    ctx = make_ctx(minimal(environment=Environment.HYPRLAND), installer=installer, dry_run=False)

    assert HyprlandStep().run(ctx).ok
    conf = Path(ctx.paths.xbps_conf_dir) / "20-repository-extra.conf"
    assert conf.read_text(encoding="utf-8").strip().endswith("repository-x86_64-musl")
    assert installer.calls[0] == ["hyprland"]
    assert installer.refreshes == 1

    before = conf.stat().st_mtime_ns
    assert HyprlandStep().run(ctx).ok
    assert conf.stat().st_mtime_ns == before


def test_hyprland_unsupported_arch_is_skipped(make_ctx, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(step_50_desktop, "detect_arch", lambda: "armv7l")
    monkeypatch.setattr(step_50_desktop, "detect_libc_flavor", lambda: "gnu")
    installer = FakeInstaller()
    ctx = make_ctx(minimal(environment=Environment.HYPRLAND), installer=installer)

    assert HyprlandStep().run(ctx).ok
    assert installer.calls == []
    assert installer.refreshes == 0
