"""Shared pytest fixtures and fakes for the external package/service layers."""

from __future__ import annotations

import getpass
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Set

import pytest

from void_auto_setup.config import Configuration
from void_auto_setup.errors import CommandError
from void_auto_setup.lib.env import Paths
from void_auto_setup.lib.manifests import load_manifest
from void_auto_setup.lib.resolver import PackageResolver
from void_auto_setup.lib.services import ResourceEnabler
from void_auto_setup.pipeline import RunContext


class FakeProbe:
    def __init__(self, available: Iterable[str] = (), *, everything: bool = False) -> None:
        self.packages: Set[str] = set(available)
        self.everything = everything
        self.probed: List[str] = []

    def available(self, package: str) -> bool:
        self.probed.append(package)
        return self.everything or package in self.packages


class FakeInstaller:
    def __init__(self, fail_on: Iterable[str] = ()) -> None:
        self.fail_on = set(fail_on)
        self.calls: List[List[str]] = []
        self.syncs = 0
        self.refreshes = 0

    def install(self, packages: Sequence[str]) -> None:
        packages = list(packages)
        if not packages:
            return
        if self.fail_on.intersection(packages):
            raise CommandError(["xbps-install", "-y", *packages], 1, "network unreachable")
        self.calls.append(packages)

    def sync(self) -> None:
        self.syncs += 1

    def refresh(self) -> None:
        self.refreshes += 1

    @property
    def installed(self) -> List[str]:
        return [p for call in self.calls for p in call]


class FakeServiceBackend:
    def __init__(self, sources: Iterable[str] = (), active: Iterable[str] = ()) -> None:
        self.sources = set(sources)
        self.active = set(active)
        self.activated: List[str] = []

    def source_exists(self, name: str) -> bool:
        return name in self.sources

    def is_active(self, name: str) -> bool:
        return name in self.active

    def activate(self, name: str) -> None:
        self.activated.append(name)
        self.active.add(name)


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def tick(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def current_user() -> str:
    """A user that exists on the test machine and that we may chown files to."""
    return getpass.getuser()


@pytest.fixture
def manifest():
    return load_manifest()


@pytest.fixture
def paths(tmp_path: Path) -> Paths:
    return Paths.under(tmp_path / "root")


@pytest.fixture
def make_ctx(manifest, paths):
    def _make(
        cfg: Configuration,
        *,
        probe: Optional[FakeProbe] = None,
        installer: Optional[FakeInstaller] = None,
        backend: Optional[FakeServiceBackend] = None,
        dry_run: bool = True,
    ) -> RunContext:
        return RunContext(
            cfg=cfg,
            resolver=PackageResolver(probe or FakeProbe(everything=True), installer or FakeInstaller()),
            services=ResourceEnabler(backend or FakeServiceBackend()),
            paths=paths,
            manifest=manifest,
            dry_run=dry_run,
        )

    return _make


@pytest.fixture
def clean_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for h in list(root.handlers):
        if h not in handlers:
            root.removeHandler(h)
            h.close()
    root.setLevel(level)
    for attr in ("_vas_configured", "_vas_log_path"):
        if hasattr(root, attr):
            delattr(root, attr)
