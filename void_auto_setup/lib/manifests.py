from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List

import yaml


def _manifest_dir() -> Path:
    # void_auto_setup/lib/manifests.py -> void_auto_setup/manifests
    return Path(__file__).resolve().parents[1] / "manifests"


def load_yaml_rel(rel_path: str) -> Dict[str, Any]:
    """Load a YAML manifest shipped inside the package."""
    p = _manifest_dir() / rel_path.lstrip("/")
    data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Manifest must be a mapping/dict: {p}")
    return data


def load_manifest() -> Dict[str, Any]:
    """Package lists plus desktop profiles, merged into one mapping."""
    manifest = load_yaml_rel("packages.yaml")
    manifest["desktops"] = load_yaml_rel("desktops.yaml")
    return manifest


def package_list(section: Dict[str, Any], key: str) -> List[str]:
    pkgs = section.get(key) or []
    if not isinstance(pkgs, list):
        raise ValueError(f"Manifest entry {key!r} must be a list of package names")
    return [str(p).strip() for p in pkgs if str(p).strip()]
