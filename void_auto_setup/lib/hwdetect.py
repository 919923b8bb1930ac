from __future__ import annotations

import enum
import logging
import platform
import re
from pathlib import Path
from typing import Dict, List, Optional

from .command import have_cmd, run_cmd

logger = logging.getLogger(__name__)

_DISPLAY_LINE = re.compile(r"vga|3d|display", re.IGNORECASE)

# Checked in order; the first vendor found anywhere in the display lines wins.
_VENDOR_PATTERNS = (
    ("nvidia", re.compile(r"nvidia", re.IGNORECASE)),
    ("amd", re.compile(r"\b(amd|ati|radeon)\b", re.IGNORECASE)),
    ("intel", re.compile(r"intel", re.IGNORECASE)),
)

_MANUAL = "GPU drivers will NOT be installed; please install them manually."


class GpuVendor(str, enum.Enum):
    NVIDIA = "nvidia"
    AMD = "amd"
    INTEL = "intel"
    NONE = "none"


def normalize_arch(machine: str) -> str:
    m = machine.lower()
    return {
        "x86_64": "x86_64",
        "amd64": "x86_64",
        "aarch64": "aarch64",
        "arm64": "aarch64",
    }.get(m, m)


def detect_arch() -> str:
    return normalize_arch(platform.machine())


def detect_libc_flavor() -> str:
    """Return 'musl' or 'gnu' for the running system."""
    if have_cmd("ldd"):
        # musl's ldd prints its banner to stderr and exits non-zero.
        r = run_cmd(["ldd", "--version"], check=False)
        if "musl" in (r.stdout + r.stderr).lower():
            return "musl"
    return "gnu"


def read_os_release(path: str = "/etc/os-release") -> Dict[str, str]:
    data: Dict[str, str] = {}
    for line in Path(path).read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        data[key] = value.strip().strip('"').strip("'")
    return data


def classify_gpu_vendor(lspci_output: Optional[str]) -> GpuVendor:
    """Classify raw ``lspci -nn`` output into a driver vendor.

    ``None`` means the enumeration tool itself was unavailable. Only display
    controller lines are considered; precedence is nvidia > amd > intel.
    """

    if lspci_output is None:
        logger.warning("Could not detect GPU (no lspci available). %s", _MANUAL)
        return GpuVendor.NONE

    lines: List[str] = [ln for ln in lspci_output.splitlines() if _DISPLAY_LINE.search(ln)]
    if not lines:
        logger.warning("No GPU devices detected via lspci. %s", _MANUAL)
        return GpuVendor.NONE

    text = "\n".join(lines)
    for vendor, pattern in _VENDOR_PATTERNS:
        if pattern.search(text):
            return GpuVendor(vendor)

    logger.warning("GPU devices detected but vendor could not be classified. %s", _MANUAL)
    return GpuVendor.NONE


def detect_gpu_vendor(*, install_pciutils=None, dry_run: bool = False) -> GpuVendor:
    """Run lspci (installing pciutils first if needed) and classify the GPU.

    ``install_pciutils`` is a best-effort callable; its failure is only logged.
    """

    if not have_cmd("lspci") and install_pciutils is not None:
        try:
            install_pciutils()
        except Exception as e:
            logger.warning("Installing pciutils failed: %s", e)

    if not have_cmd("lspci"):
        return classify_gpu_vendor(None)

    r = run_cmd(["lspci", "-nn"], check=False, dry_run=dry_run)
    return classify_gpu_vendor(r.stdout)
