"""Command-line entry point and configuration resolution."""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import List

import pytest

from void_auto_setup import main as main_mod
from void_auto_setup.config import Environment, LoginManager, SeatManagement
from void_auto_setup.errors import PreconditionError
from void_auto_setup.lib.env import Paths
from void_auto_setup.main import build_steps, detect_void, resolve_configuration
from void_auto_setup.pipeline import PipelineResult
from void_auto_setup.progress import ProgressEstimator
from void_auto_setup.prompts import NonInteractivePrompter

from .conftest import FakeInstaller, FakeProbe


def _result(failed: str | None = None) -> PipelineResult:
    return PipelineResult(ran_steps=["10_enable_repos"], failed_step=failed, error=None if failed is None else "boom", progress=ProgressEstimator(1))


def test_exit_zero_on_success(monkeypatch: pytest.MonkeyPatch) -> None:
    seen = {}

    def fake_run(**kw):
        seen.update(kw)
        return _result()

    monkeypatch.setattr(main_mod, "run", fake_run)
    assert main_mod.main(["--dry-run", "--no-reboot", "--log", "/tmp/x.log"]) == 0
    assert seen["dry_run"] is True
    assert seen["reboot_prompt"] is False
    assert seen["log_path"] == "/tmp/x.log"


def test_exit_one_on_failed_step(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(main_mod, "run", lambda **kw: _result("20_core_services"))
    assert main_mod.main([]) == 1


def test_exit_one_on_precondition(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(**kw):
        raise PreconditionError("Please run as root")

    monkeypatch.setattr(main_mod, "run", fake_run)
    assert main_mod.main([]) == 1


def test_exit_130_on_interrupt(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(**kw):
        raise KeyboardInterrupt

    monkeypatch.setattr(main_mod, "run", fake_run)
    assert main_mod.main([]) == 130


def test_detect_void(tmp_path: Path) -> None:
    with pytest.raises(PreconditionError):
        detect_void(str(tmp_path / "missing"))

    osr = tmp_path / "os-release"
    osr.write_text('NAME="Debian"\nID=debian\n', encoding="utf-8")
    detect_void(str(osr))


def test_resolve_configuration_normalizes_answers(tmp_path: Path, current_user: str) -> None:
    answers = tmp_path / "answers.yaml"
    answers.write_text(
        f"target_user: {current_user}\nseat_management: seatd\nenvironment: sway\nlogin_manager: sddm\n",
        encoding="utf-8",
    )

    cfg = resolve_configuration(NonInteractivePrompter(), answers_path=str(answers))

    assert cfg.target_user == current_user
    assert cfg.environment is Environment.SWAY
    assert cfg.seat_management is SeatManagement.ELOGIND
    assert cfg.login_manager is LoginManager.SDDM


def test_resolve_configuration_rejects_unknown_user() -> None:
    with pytest.raises(PreconditionError):
        resolve_configuration(NonInteractivePrompter(), default_user="no-such-user-zz9")


def test_build_steps_returns_fresh_instances() -> None:
    assert build_steps()[0] is not build_steps()[0]


class TtyStream(io.StringIO):
    """Keeps its contents after ``close`` so the run's output can be inspected."""

    def __init__(self) -> None:
        super().__init__()
        self.was_closed = False

    def close(self) -> None:
        self.was_closed = True


@pytest.fixture
def system(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, clean_root_logger):
    """A fake Void root under tmp_path with xbps replaced by in-memory fakes."""

    paths = Paths.under(tmp_path / "root")
    Path(paths.os_release).parent.mkdir(parents=True)
    Path(paths.os_release).write_text('NAME="Void"\nID="void"\n', encoding="utf-8")

    state = {"installer": FakeInstaller(), "streams": []}

    def open_stream() -> TtyStream:
        s = TtyStream()
        state["streams"].append(s)
        return s

    monkeypatch.setattr(main_mod, "XbpsIndex", lambda dry_run: FakeProbe(everything=True))
    monkeypatch.setattr(main_mod, "XbpsInstaller", lambda dry_run: state["installer"])
    monkeypatch.setattr(main_mod, "open_progress_stream", open_stream)
    monkeypatch.setattr(main_mod.os, "geteuid", lambda: 1000)
    state["paths"] = paths
    state["log"] = str(tmp_path / "setup.log")
    return state


def _answers(tmp_path: Path, user: str) -> str:
    p = tmp_path / "answers.yaml"
    p.write_text(
        "\n".join(
            [
                f"target_user: {user}",
                "environment: i3",
                "login_manager: lightdm",
                "gpu: intel",
                "launcher: none",
                "file_manager: none",
                "wallpaper_manager: none",
                "fonts: false",
                "app_store: true",
                "vibe_tool: true",
            ]
        )
        + "\n",
        encoding="utf-8",
    )
    return str(p)


def test_dry_run_completes_without_root(system, tmp_path: Path, current_user: str) -> None:
    result = main_mod.run(
        log_path=system["log"],
        answers_path=_answers(tmp_path, current_user),
        non_interactive=True,
        dry_run=True,
        reboot_prompt=False,
        paths=system["paths"],
    )

    assert result.ok, result.error
    assert result.progress.total == 17
    assert result.progress.completed == 17
    assert len(result.ran_steps) == 17

    installer: FakeInstaller = system["installer"]
    assert installer.calls[0] == ["ca-certificates", "sudo"]
    assert installer.syncs >= 1

    (stream,) = system["streams"]
    assert "(17/17)" in stream.getvalue()
    assert stream.was_closed


def test_root_is_required_outside_dry_run(system, tmp_path: Path, current_user: str) -> None:
    with pytest.raises(PreconditionError, match="root"):
        main_mod.run(
            log_path=system["log"],
            answers_path=_answers(tmp_path, current_user),
            non_interactive=True,
            reboot_prompt=False,
            paths=system["paths"],
        )
    assert system["installer"].calls == []


def test_failed_bootstrap_only_warns(system, tmp_path: Path, current_user: str, caplog: pytest.LogCaptureFixture) -> None:
    system["installer"].fail_on = {"sudo"}
    caplog.set_level(logging.WARNING)

    result = main_mod.run(
        log_path=system["log"],
        answers_path=_answers(tmp_path, current_user),
        non_interactive=True,
        dry_run=True,
        reboot_prompt=False,
        paths=system["paths"],
    )

    assert result.ok, result.error
    assert result.progress.completed == 17
    assert "Bootstrap install failed" in caplog.text


def test_unknown_user_stops_before_scheduling(system, tmp_path: Path) -> None:
    with pytest.raises(PreconditionError, match="no-such-user-zz9"):
        main_mod.run(
            log_path=system["log"],
            answers_path=_answers(tmp_path, "no-such-user-zz9"),
            non_interactive=True,
            dry_run=True,
            reboot_prompt=False,
            paths=system["paths"],
        )

    streams: List[TtyStream] = system["streams"]
    assert streams == []
    assert system["installer"].calls == [["ca-certificates", "sudo"]]
