"""Session and window-manager files written for the target user.

Templates are intentionally small starter configs; the user is expected to
edit them. Every writer honors ``dry_run`` and returns the path it targets.
"""

from __future__ import annotations

import logging
import shlex
import shutil
from pathlib import Path
from typing import Dict, Optional

from ..config import Configuration, Environment, LoginManager, SessionKind
from .env import Paths

logger = logging.getLogger(__name__)

_AUTOSTART = """[Desktop Entry]
Type=Application
Name={name}
Exec={exec_cmd}
X-GNOME-Autostart-enabled=true
"""

_SESSION_DESKTOP = """[Desktop Entry]
Name={name}
Comment=Generated session
Exec={exec_cmd}
Type=Application
"""

_XINITRC = """#!/usr/bin/env sh
# generated
export XDG_CURRENT_DESKTOP="{name}"
export XDG_SESSION_TYPE="x11"
command -v feh >/dev/null 2>&1 && feh --bg-scale {wallpaper} >/dev/null 2>&1 || true
exec {session_cmd}
"""

_X11_WRAPPER = """#!/usr/bin/env sh
set -eu
if command -v feh >/dev/null 2>&1; then
  feh --bg-scale {wallpaper} >/dev/null 2>&1 || true
fi
exec {session_cmd}
"""

_GREETD = """[terminal]
vt = 1

[default_session]
command = "tuigreet --time --cmd {cmd}"
user = "{user}"
"""

_I3 = """# i3 config (generated)
set $mod Mod4
font pango:monospace 10

bindsym $mod+Return exec alacritty
{launcher}bindsym $mod+Shift+q kill
bindsym $mod+Shift+r restart
bindsym $mod+Shift+e exec "i3-nagbar -t warning -m 'Exit i3?' -b 'Yes' 'i3-msg exit'"
bindsym $mod+h focus left
bindsym $mod+j focus down
bindsym $mod+k focus up
bindsym $mod+l focus right
bindsym $mod+f fullscreen toggle
bindsym $mod+1 workspace 1
bindsym $mod+2 workspace 2
bindsym $mod+3 workspace 3
bindsym $mod+Shift+1 move container to workspace 1
bindsym $mod+Shift+2 move container to workspace 2
bindsym $mod+Shift+3 move container to workspace 3

bar {{
  status_command i3status
}}

exec --no-startup-id picom
exec --no-startup-id feh --bg-scale {wallpaper}
exec --no-startup-id pipewire
exec --no-startup-id wireplumber
exec --no-startup-id blueman-applet
"""

_SWAY = """# sway config (generated)
set $mod Mod4
output * bg {wallpaper} fill
bindsym $mod+Return exec foot
{launcher}bindsym $mod+Shift+q kill
bindsym $mod+Shift+c reload
bindsym $mod+Shift+e exec swaynag -t warning -m 'Exit sway?' -B 'Yes' 'swaymsg exit'
bindsym $mod+1 workspace number 1
bindsym $mod+2 workspace number 2
bindsym $mod+3 workspace number 3
bar {{
  position top
}}
exec pipewire
exec wireplumber
"""

_RIVER = """#!/bin/sh
# river init (generated)
riverctl map normal Super Return spawn foot
{launcher}riverctl map normal Super Q close
riverctl map normal Super+Shift E exit
riverctl map normal Super J focus-view next
riverctl map normal Super K focus-view previous
riverctl default-layout rivertile
riverctl spawn "swaybg -m fill -i {wallpaper}"
riverctl spawn pipewire
riverctl spawn wireplumber
rivertile -view-padding 4 -outer-padding 4 &
"""

_NIRI = """// niri config (generated)
spawn-at-startup "swaybg" "-m" "fill" "-i" "{wallpaper}"
spawn-at-startup "pipewire"
spawn-at-startup "wireplumber"

binds {{
    Mod+Return {{ spawn "foot"; }}
{launcher}    Mod+Q {{ close-window; }}
    Mod+Shift+E {{ quit; }}
}}
"""

_HYPRLAND = """# Hyprland config (generated)
$mod = SUPER
exec-once = swaybg -m fill -i {wallpaper}
exec-once = pipewire
exec-once = wireplumber
bind = $mod, Return, exec, foot
{launcher}bind = $mod, Q, killactive,
bind = $mod SHIFT, E, exit,
bind = $mod, 1, workspace, 1
bind = $mod, 2, workspace, 2
bind = $mod, 3, workspace, 3
"""

_I3STATUS = """general {
  colors = true
  interval = 5
}
order += "disk /"
order += "wireless _first_"
order += "ethernet _first_"
order += "battery all"
order += "volume master"
order += "tztime local"

disk "/" { format = "Disk %avail" }
wireless "_first_" { format_up = "W: %quality at %essid %ip" format_down = "W: down" }
ethernet "_first_" { format_up = "E: %ip" format_down = "E: down" }
battery "all" { format = "%status %percentage %remaining" }
volume "master" { format = "Vol %volume" }
tztime "local" { format = "%Y-%m-%d %H:%M" }
"""

# environment -> (relative config path, template, launcher line format, executable)
_WM_CONFIGS: Dict[Environment, tuple] = {
    Environment.I3: (".config/i3/config", _I3, "bindsym $mod+d exec --no-startup-id {cmd}\n", False),
    Environment.SWAY: (".config/sway/config", _SWAY, "bindsym $mod+d exec {cmd}\n", False),
    Environment.RIVER: (".config/river/init", _RIVER, "riverctl map normal Super D spawn \"{cmd}\"\n", True),
    Environment.NIRI: (".config/niri/config.kdl", _NIRI, "    Mod+D {{ spawn \"sh\" \"-c\" \"{cmd}\"; }}\n", False),
    Environment.HYPRLAND: (".config/hypr/hyprland.conf", _HYPRLAND, "bind = $mod, D, exec, {cmd}\n", False),
}

_DEFAULT_LAUNCHER = {
    SessionKind.X11: "dmenu_run",
    SessionKind.WAYLAND: "wofi --show drun",
}


def write_file(path: Path, contents: str, *, mode: Optional[int] = None, owner: Optional[str] = None, dry_run: bool = False) -> Path:
    if dry_run:
        logger.info("Would write %s", str(path))
        return path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(contents, encoding="utf-8")
    if mode is not None:
        path.chmod(mode)
    if owner:
        shutil.chown(path, user=owner, group=owner)
    return path


def _chown_tree(root: Path, stop: Path, owner: str) -> None:
    """chown ``root`` and every parent below ``stop`` (the home directory)."""
    p = root
    while p != stop and stop in p.parents:
        shutil.chown(p, user=owner, group=owner)
        p = p.parent


def write_user_file(home: Path, rel: str, contents: str, *, owner: str, mode: Optional[int] = None, dry_run: bool = False) -> Path:
    path = home / rel
    write_file(path, contents, mode=mode, owner=owner, dry_run=dry_run)
    if not dry_run:
        _chown_tree(path.parent, home, owner)
    return path


def write_autostart_entries(home: Path, owner: str, *, dry_run: bool = False) -> list[Path]:
    """PipeWire and WirePlumber have no user services on runit; start them from the session."""
    out = []
    for name, exec_cmd in (("PipeWire", "pipewire"), ("WirePlumber", "wireplumber")):
        out.append(
            write_user_file(
                home,
                f".config/autostart/{exec_cmd}.desktop",
                _AUTOSTART.format(name=name, exec_cmd=exec_cmd),
                owner=owner,
                dry_run=dry_run,
            )
        )
    return out


def write_wm_config(cfg: Configuration, home: Path, wallpaper: str, *, dry_run: bool = False) -> Optional[Path]:
    spec = _WM_CONFIGS.get(cfg.environment)
    if spec is None:
        return None
    rel, template, launcher_fmt, executable = spec
    cmd = cfg.launcher_cmd or _DEFAULT_LAUNCHER[cfg.session_kind]
    contents = template.format(launcher=launcher_fmt.format(cmd=cmd), wallpaper=wallpaper)
    logger.info("Generating %s config for %s...", cfg.environment.value, cfg.target_user)
    return write_user_file(home, rel, contents, owner=cfg.target_user, mode=0o755 if executable else None, dry_run=dry_run)


def write_xinitrc(home: Path, owner: str, name: str, session_cmd: str, wallpaper: str, *, dry_run: bool = False) -> Path:
    contents = _XINITRC.format(name=name, session_cmd=session_cmd, wallpaper=shlex.quote(wallpaper))
    return write_user_file(home, ".xinitrc", contents, owner=owner, mode=0o755, dry_run=dry_run)


def write_session_desktop(paths: Paths, kind: SessionKind, name: str, exec_cmd: str, *, dry_run: bool = False) -> Path:
    base = paths.wayland_sessions_dir if kind is SessionKind.WAYLAND else paths.xsessions_dir
    return write_file(Path(base) / f"{name}.desktop", _SESSION_DESKTOP.format(name=name, exec_cmd=exec_cmd), dry_run=dry_run)


def write_x11_wallpaper_wrapper(paths: Paths, name: str, session_cmd: str, wallpaper: str, *, dry_run: bool = False) -> Path:
    path = Path(paths.bin_dir) / f"void-auto-setup-{name}"
    contents = _X11_WRAPPER.format(session_cmd=session_cmd, wallpaper=shlex.quote(wallpaper))
    return write_file(path, contents, mode=0o755, dry_run=dry_run)


def write_greetd_config(paths: Paths, user: str, session_cmd: str, *, dry_run: bool = False) -> Path:
    return write_file(Path(paths.greetd_dir) / "config.toml", _GREETD.format(cmd=session_cmd, user=user), dry_run=dry_run)


def configure_session_files(
    cfg: Configuration,
    desktop: Dict[str, object],
    paths: Paths,
    home: Path,
    *,
    dry_run: bool = False,
) -> Dict[str, str]:
    """Write everything needed to start ``cfg.environment``; returns what was written."""

    written: Dict[str, str] = {}
    wallpaper = paths.wallpaper_target
    title = str(desktop.get("title") or cfg.environment.value)
    session_cmd = str(desktop.get("session_cmd") or cfg.environment.value)
    provides_session = bool(desktop.get("provides_session", False))

    wm = write_wm_config(cfg, home, wallpaper, dry_run=dry_run)
    if wm is not None:
        written["wm_config"] = str(wm)
    if cfg.environment is Environment.I3:
        # the i3 bar runs i3status
        status = write_user_file(home, ".config/i3status/config", _I3STATUS, owner=cfg.target_user, dry_run=dry_run)
        written["i3status"] = str(status)

    if cfg.session_kind is SessionKind.X11:
        if not provides_session:
            wrapper = write_x11_wallpaper_wrapper(paths, cfg.environment.value, session_cmd, wallpaper, dry_run=dry_run)
            written["wrapper"] = str(wrapper)
            written["session"] = str(write_session_desktop(paths, SessionKind.X11, title, str(wrapper), dry_run=dry_run))
        # startx fallback
        written["xinitrc"] = str(
            write_xinitrc(home, cfg.target_user, cfg.environment.value, session_cmd, wallpaper, dry_run=dry_run)
        )
    elif not provides_session:
        written["session"] = str(write_session_desktop(paths, SessionKind.WAYLAND, title, session_cmd, dry_run=dry_run))

    if cfg.login_manager is LoginManager.GREETD:
        greeter_cmd = "startx" if cfg.session_kind is SessionKind.X11 else session_cmd
        written["greetd"] = str(write_greetd_config(paths, cfg.target_user, greeter_cmd, dry_run=dry_run))
        logger.info("Configured greetd to start: %s", greeter_cmd)

    return written
