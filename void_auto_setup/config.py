"""Resolved user choices for one provisioning run.

A :class:`Configuration` is frozen: prompts and answers files produce one,
:func:`normalize` is applied exactly once, and every step only reads it.
"""

from __future__ import annotations

import dataclasses
import enum
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Type, TypeVar

import yaml

from .errors import PreconditionError

logger = logging.getLogger(__name__)


class SeatManagement(str, enum.Enum):
    ELOGIND = "elogind"
    SEATD = "seatd"


class Environment(str, enum.Enum):
    I3 = "i3"
    PLASMA = "plasma"
    RIVER = "river"
    DWM = "dwm"
    NIRI = "niri"
    HYPRLAND = "hyprland"
    SWAY = "sway"
    XFCE = "xfce"
    GNOME = "gnome"
    CINNAMON = "cinnamon"
    MATE = "mate"
    OPENBOX = "openbox"
    BSPWM = "bspwm"
    LABWC = "labwc"


class SessionKind(str, enum.Enum):
    X11 = "x11"
    WAYLAND = "wayland"


class LoginManager(str, enum.Enum):
    SDDM = "sddm"
    LIGHTDM = "lightdm"
    GREETD = "greetd"
    NONE = "none"


class Browser(str, enum.Enum):
    FIREFOX = "firefox"
    CHROMIUM = "chromium"
    BRAVE = "brave-browser"
    LIBREWOLF = "librewolf"


class GpuPreference(str, enum.Enum):
    AUTO = "auto"
    NVIDIA = "nvidia"
    AMD = "amd"
    INTEL = "intel"


class Launcher(str, enum.Enum):
    ROFI = "rofi"
    DMENU = "dmenu"
    WOFI = "wofi"
    FUZZEL = "fuzzel"
    NONE = "none"


class FileManager(str, enum.Enum):
    NEMO = "nemo"
    THUNAR = "thunar"
    PCMANFM = "pcmanfm"
    DOLPHIN = "dolphin"
    NONE = "none"


class WallpaperManager(str, enum.Enum):
    NITROGEN = "nitrogen"
    AZOTE = "azote"
    NONE = "none"


BETA_ENVIRONMENT = Environment.HYPRLAND

_WAYLAND_ENVIRONMENTS = frozenset(
    {
        Environment.RIVER,
        Environment.NIRI,
        Environment.HYPRLAND,
        Environment.SWAY,
        Environment.GNOME,
        Environment.LABWC,
    }
)

_LAUNCHER_CMDS = {
    Launcher.ROFI: "rofi -show drun",
    Launcher.DMENU: "dmenu_run",
    Launcher.WOFI: "wofi --show drun",
    Launcher.FUZZEL: "fuzzel",
    Launcher.NONE: "",
}


def session_kind_for(environment: Environment) -> SessionKind:
    if environment in _WAYLAND_ENVIRONMENTS:
        return SessionKind.WAYLAND
    return SessionKind.X11


def default_file_manager(environment: Environment) -> FileManager:
    if environment is Environment.PLASMA:
        return FileManager.DOLPHIN
    if session_kind_for(environment) is SessionKind.WAYLAND:
        return FileManager.THUNAR
    return FileManager.NEMO


def default_wallpaper_manager(kind: SessionKind) -> WallpaperManager:
    return WallpaperManager.AZOTE if kind is SessionKind.WAYLAND else WallpaperManager.NITROGEN


@dataclass(frozen=True)
class Configuration:
    target_user: str
    seat_management: SeatManagement = SeatManagement.ELOGIND
    environment: Environment = Environment.I3
    login_manager: LoginManager = LoginManager.SDDM
    browser: Browser = Browser.FIREFOX
    gpu: GpuPreference = GpuPreference.AUTO
    launcher: Launcher = Launcher.ROFI
    file_manager: FileManager = FileManager.NEMO
    wallpaper_manager: WallpaperManager = WallpaperManager.NONE
    fonts: bool = True
    app_store: bool = True
    vibe_tool: bool = True
    amdvlk: bool = False
    steam: bool = True

    @property
    def session_kind(self) -> SessionKind:
        return session_kind_for(self.environment)

    @property
    def launcher_cmd(self) -> str:
        return _LAUNCHER_CMDS[self.launcher]

    def as_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            out[f.name] = value.value if isinstance(value, enum.Enum) else value
        out["session_kind"] = self.session_kind.value
        return out


def normalize(cfg: Configuration) -> Configuration:
    """sddm and the beta compositor both need elogind; force it."""

    if cfg.seat_management is SeatManagement.ELOGIND:
        return cfg

    reason = None
    if cfg.login_manager is LoginManager.SDDM:
        reason = "sddm"
    elif cfg.environment is BETA_ENVIRONMENT:
        reason = BETA_ENVIRONMENT.value

    if reason is None:
        return cfg

    logger.info("Seat management forced to elogind (required by %s)", reason)
    return dataclasses.replace(cfg, seat_management=SeatManagement.ELOGIND)


E = TypeVar("E", bound=enum.Enum)

_ENUM_FIELDS: Dict[str, Type[enum.Enum]] = {
    "seat_management": SeatManagement,
    "environment": Environment,
    "login_manager": LoginManager,
    "browser": Browser,
    "gpu": GpuPreference,
    "launcher": Launcher,
    "file_manager": FileManager,
    "wallpaper_manager": WallpaperManager,
}

_BOOL_FIELDS = ("fonts", "app_store", "vibe_tool", "amdvlk", "steam")

ANSWER_KEYS = frozenset({"target_user", *_ENUM_FIELDS, *_BOOL_FIELDS})


def parse_enum(enum_cls: Type[E], value: Any) -> E:
    if isinstance(value, enum_cls):
        return value
    text = str(value).strip().lower()
    for member in enum_cls:
        if text in {member.value, member.name.lower()}:
            return member
    choices = ", ".join(m.value for m in enum_cls)
    raise PreconditionError(f"Invalid {enum_cls.__name__} {value!r} (expected one of: {choices})")


def parse_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in {"y", "yes", "true", "1", "on", "j", "ja"}:
        return True
    if text in {"n", "no", "false", "0", "off", "nein"}:
        return False
    raise PreconditionError(f"Invalid boolean for {key}: {value!r}")


def coerce_answers(raw: Mapping[str, Any]) -> Dict[str, Any]:
    """Validate an answers mapping and convert values to their field types."""

    unknown = sorted((k for k in raw if k not in ANSWER_KEYS), key=str)
    if unknown:
        raise PreconditionError(f"Unknown answer keys: {', '.join(map(str, unknown))}")

    out: Dict[str, Any] = {}
    for key, value in raw.items():
        if value is None:
            continue
        if key in _ENUM_FIELDS:
            out[key] = parse_enum(_ENUM_FIELDS[key], value)
        elif key in _BOOL_FIELDS:
            out[key] = parse_bool(key, value)
        else:
            out[key] = str(value).strip()
    return out


def load_answers(path: str) -> Dict[str, Any]:
    """Load a YAML or JSON answers file (format picked by extension)."""

    p = Path(path)
    if not p.exists():
        raise PreconditionError(f"Answers file not found: {path}")

    text = p.read_text(encoding="utf-8")
    try:
        if p.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text) or {}
    except (ValueError, yaml.YAMLError) as e:
        raise PreconditionError(f"Cannot parse answers file {path}: {e}") from e

    if not isinstance(data, dict):
        raise PreconditionError(f"Answers file must contain a mapping, got {type(data).__name__}")
    return coerce_answers(data)
