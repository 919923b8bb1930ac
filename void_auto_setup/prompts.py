from __future__ import annotations

import logging
import sys
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, TextIO, Tuple, TypeVar

from .config import (
    Browser,
    Configuration,
    Environment,
    FileManager,
    GpuPreference,
    Launcher,
    LoginManager,
    SeatManagement,
    SessionKind,
    WallpaperManager,
    default_file_manager,
    default_wallpaper_manager,
    session_kind_for,
)
from .errors import PreconditionError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_YES = {"y", "yes", "j", "ja"}
_NO = {"n", "no", "nein"}


class Prompter:
    """Line-based prompts. Empty input (or EOF) always yields the default."""

    def __init__(self, input_fn: Callable[[str], str] = input, output: Optional[TextIO] = None) -> None:
        self.input_fn = input_fn
        self.output = output if output is not None else sys.stdout

    def _read(self, prompt: str) -> str:
        try:
            return self.input_fn(prompt).strip()
        except EOFError:
            return ""

    def ask(self, prompt: str, default: str) -> str:
        value = self._read(f"{prompt} [{default}]: ")
        return value or default

    def yes_no(self, prompt: str, default: bool) -> bool:
        shown = "Y/n" if default else "y/N"
        while True:
            answer = self._read(f"{prompt} [{shown}]: ").lower()
            if not answer:
                return default
            if answer in _YES:
                return True
            if answer in _NO:
                return False
            print("Please answer y or n.", file=self.output)

    def choose(self, title: str, options: Sequence[Tuple[T, str]], default: int = 1) -> T:
        """Numbered menu; anything that is not a listed number picks the default."""
        lines = [f"\n{title}:"]
        lines += [f"  {i}) {label}" for i, (_, label) in enumerate(options, start=1)]
        print("\n".join(lines), file=self.output)
        raw = self.ask("Choose", str(default))
        try:
            index = int(raw)
        except ValueError:
            index = default
        if not 1 <= index <= len(options):
            index = default
        return options[index - 1][0]


class NonInteractivePrompter(Prompter):
    """Answers every question with its default."""

    def __init__(self) -> None:
        super().__init__(input_fn=lambda _prompt: "")

    def choose(self, title: str, options: Sequence[Tuple[T, str]], default: int = 1) -> T:
        return options[default - 1][0]

    def yes_no(self, prompt: str, default: bool) -> bool:
        return default

    def ask(self, prompt: str, default: str) -> str:
        return default


_SEAT_OPTIONS = [
    (SeatManagement.ELOGIND, "elogind (recommended, broad compatibility, KDE/SDDM friendly)"),
    (SeatManagement.SEATD, "seatd  (lean, good for Wayland compositors)"),
]

_ENVIRONMENT_OPTIONS = [
    (Environment.I3, "i3 (default, X11)"),
    (Environment.PLASMA, "KDE Plasma (X11/Wayland, heavier)"),
    (Environment.RIVER, "river (Wayland)"),
    (Environment.DWM, "dwm (X11, minimal)"),
    (Environment.NIRI, "niri (Wayland)"),
    (Environment.HYPRLAND, "Hyprland (Wayland, EXPERIMENTAL/BETA via void-extra)"),
    (Environment.SWAY, "sway (Wayland)"),
    (Environment.XFCE, "Xfce (X11)"),
    (Environment.GNOME, "GNOME (Wayland)"),
    (Environment.CINNAMON, "Cinnamon (X11)"),
    (Environment.MATE, "MATE (X11)"),
    (Environment.OPENBOX, "Openbox (X11, floating)"),
    (Environment.BSPWM, "bspwm (X11, tiling)"),
    (Environment.LABWC, "labwc (Wayland, floating)"),
]

_LOGIN_MANAGER_OPTIONS = [
    (LoginManager.SDDM, "sddm (default, recommended for KDE and fine for others)"),
    (LoginManager.LIGHTDM, "lightdm (GTK greeter)"),
    (LoginManager.GREETD, "greetd + tuigreet (simple, good for Wayland WMs)"),
    (LoginManager.NONE, "none (startx/tty)"),
]

_BROWSER_OPTIONS = [
    (Browser.FIREFOX, "Firefox (default)"),
    (Browser.CHROMIUM, "Chromium"),
    (Browser.BRAVE, "Brave"),
    (Browser.LIBREWOLF, "Librewolf (if available in repos)"),
]

_GPU_OPTIONS = [
    (GpuPreference.AUTO, "auto-detect (default)"),
    (GpuPreference.NVIDIA, "NVIDIA (proprietary)"),
    (GpuPreference.AMD, "AMD (Mesa + Vulkan; optional AMDVLK)"),
    (GpuPreference.INTEL, "Intel (Mesa)"),
]


def _launcher_options(kind: SessionKind):
    if kind is SessionKind.WAYLAND:
        return "App launcher (Wayland)", [
            (Launcher.WOFI, "wofi   (recommended)"),
            (Launcher.FUZZEL, "fuzzel"),
            (Launcher.NONE, "none"),
        ]
    return "App launcher (X11)", [
        (Launcher.ROFI, "rofi   (recommended)"),
        (Launcher.DMENU, "dmenu  (already installed on i3/dwm)"),
        (Launcher.NONE, "none"),
    ]


def _file_manager_options(environment: Environment):
    recommended = default_file_manager(environment)
    rest = [m for m in (FileManager.NEMO, FileManager.THUNAR, FileManager.PCMANFM, FileManager.DOLPHIN) if m is not recommended]
    options = [(recommended, f"{recommended.value} (recommended)")]
    options += [(m, m.value) for m in rest]
    options.append((FileManager.NONE, "none"))
    return options


def _wallpaper_options(kind: SessionKind):
    recommended = default_wallpaper_manager(kind)
    label = "Wayland GUI" if kind is SessionKind.WAYLAND else "X11 GUI"
    return f"Wallpaper manager ({label})", [
        (recommended, f"{recommended.value} (recommended)"),
        (WallpaperManager.NONE, "none"),
    ]


def ask_configuration(
    prompter: Prompter,
    answers: Optional[Mapping[str, Any]] = None,
    *,
    default_user: str = "",
) -> Configuration:
    """Run the questionnaire; keys present in ``answers`` are not asked.

    The result is not normalized yet.
    """

    a: Dict[str, Any] = dict(answers or {})

    def pick(key: str, ask: Callable[[], Any]) -> Any:
        if key not in a:
            a[key] = ask()
        return a[key]

    user = pick("target_user", lambda: prompter.ask("Enter the main (non-root) username to configure", default_user))
    if not user:
        raise PreconditionError("No user provided.")

    pick("seat_management", lambda: prompter.choose("Seat management", _SEAT_OPTIONS))
    environment = pick("environment", lambda: prompter.choose("Desktop/WM selection", _ENVIRONMENT_OPTIONS))
    pick("login_manager", lambda: prompter.choose("Login manager", _LOGIN_MANAGER_OPTIONS))
    pick("browser", lambda: prompter.choose("Browser selection", _BROWSER_OPTIONS))
    gpu = pick("gpu", lambda: prompter.choose("GPU selection (for drivers)", _GPU_OPTIONS))

    kind = session_kind_for(environment)
    pick("launcher", lambda: prompter.choose(*_launcher_options(kind)))
    pick("file_manager", lambda: prompter.choose("File manager", _file_manager_options(environment)))

    pick("fonts", lambda: prompter.yes_no("Install common fonts (DejaVu + Noto + Nerd Fonts if available)?", True))
    pick("app_store", lambda: prompter.yes_no("Install Flatpak + add Flathub?", True))
    pick("vibe_tool", lambda: prompter.yes_no("Install fastfetch (for the vibes)?", True))

    def ask_wallpaper() -> WallpaperManager:
        if not prompter.yes_no("Install a wallpaper GUI manager?", False):
            return WallpaperManager.NONE
        return prompter.choose(*_wallpaper_options(kind))

    pick("wallpaper_manager", ask_wallpaper)

    if gpu in (GpuPreference.AUTO, GpuPreference.AMD):
        pick("amdvlk", lambda: prompter.yes_no("Install AMDVLK (optional alternative Vulkan driver) if an AMD GPU is used?", False))
    pick("steam", lambda: prompter.yes_no("Install Steam (if available)?", True))

    return Configuration(**a)
