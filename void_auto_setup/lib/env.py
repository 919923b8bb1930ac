from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path

_PACKAGE_DIR = Path(__file__).resolve().parents[1]


@dataclass(frozen=True)
class Paths:
    log_default: str = "/var/log/void-auto-setup.log"
    os_release: str = "/etc/os-release"
    sv_dir: str = "/etc/sv"
    service_dir: str = "/var/service"
    xbps_conf_dir: str = "/etc/xbps.d"
    wallpaper_source: str = str(_PACKAGE_DIR / "assets" / "wallpaper" / "sample.jpg")
    wallpaper_target: str = "/usr/share/backgrounds/void-auto-setup/sample.jpg"
    xsessions_dir: str = "/usr/share/xsessions"
    wayland_sessions_dir: str = "/usr/share/wayland-sessions"
    bin_dir: str = "/usr/local/bin"
    greetd_dir: str = "/etc/greetd"

    @classmethod
    def under(cls, root: str | Path) -> "Paths":
        """Re-root every absolute system location below ``root``.

        ``wallpaper_source`` ships with the package and is left alone.
        """
        base = Path(root)
        values = {}
        for f in fields(cls):
            value = f.default
            if f.name != "wallpaper_source":
                value = str(base / str(value).lstrip("/"))
            values[f.name] = value
        return cls(**values)


PATHS = Paths()
