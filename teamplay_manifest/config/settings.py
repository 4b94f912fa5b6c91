from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from teamplay_manifest.core.serialization import LEGACY_STATUS_ALIASES

PROJECT_CONFIG_NAMES = ("teamplay_manifest.yaml", "teamplay_manifest.yml")


class ConfigError(ValueError):
    """Raised when a configuration file cannot be parsed or validated."""


@dataclass
class ManifestSettings:
    """
    User-tunable defaults for writing, reading and packaging manifests.

    Attributes:
        pretty_indent: Indentation used when writing manifest files.
        compression_level: Zip compression level (0-9).
        archive_dir: Directory receiving archives; None means the current directory.
        accept_legacy_status: Read the legacy "done" status as "completed".
        sources: Config files the values were loaded from, for debugging.
    """

    pretty_indent: int = 2
    compression_level: int = 6
    archive_dir: Optional[str] = None
    accept_legacy_status: bool = True
    sources: List[str] = field(default_factory=list)

    @property
    def status_aliases(self) -> Dict[str, str]:
        return dict(LEGACY_STATUS_ALIASES) if self.accept_legacy_status else {}


_FIELD_TYPES = {
    "pretty_indent": int,
    "compression_level": int,
    "archive_dir": (str, type(None)),
    "accept_legacy_status": bool,
}


def _load_yaml(path: Path) -> Dict[str, Any]:
    """
    Read one settings file.

    An absent file contributes no settings; anything other than a YAML
    mapping is a ConfigError.
    """
    if not path.is_file():
        return {}
    try:
        data = yaml.safe_load(path.read_text()) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Config file {path} is not valid YAML: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping at top-level.")
    return data


def _find_project_config_file() -> Optional[Path]:
    """
    Nearest project settings file, looking in the working directory and then
    each parent in turn. Returns None when no directory has one.
    """
    current = Path.cwd()

    while True:
        for filename in PROJECT_CONFIG_NAMES:
            candidate = current / filename
            if candidate.is_file():
                return candidate
        if current.parent == current:
            break
        current = current.parent
    return None


def _validate(data: Dict[str, Any], source: Path) -> Dict[str, Any]:
    for key, value in data.items():
        if key not in _FIELD_TYPES:
            raise ConfigError(f"Unknown setting {key!r} in {source}.")
        expected = _FIELD_TYPES[key]
        # bool is an int subclass; keep "pretty_indent: true" out.
        if isinstance(value, bool) and expected is int:
            raise ConfigError(f"Setting {key!r} in {source} must be an integer.")
        if not isinstance(value, expected):
            raise ConfigError(f"Setting {key!r} in {source} has invalid value {value!r}.")
    level = data.get("compression_level")
    if level is not None and not 0 <= level <= 9:
        raise ConfigError(f"compression_level in {source} must be between 0 and 9, got {level}.")
    return data


def load_settings(config_path: Optional[str] = None) -> ManifestSettings:
    """
    Load settings from configuration.

    Resolution rules:

    * If ``config_path`` is provided, only that file is used.
    * Otherwise, user-level config is loaded from
      ``~/.teamplay_manifest/config.yaml`` and project-level config is searched
      for by walking upwards from the current working directory looking for
      ``teamplay_manifest.yaml`` or ``teamplay_manifest.yml``. Project values
      override user values.
    """
    if config_path is not None:
        paths = [Path(os.path.expanduser(config_path))]
    else:
        paths = [Path.home() / ".teamplay_manifest" / "config.yaml"]
        project_path = _find_project_config_file()
        if project_path is not None:
            paths.append(project_path)

    merged: Dict[str, Any] = {}
    sources: List[str] = []
    for path in paths:
        data = _load_yaml(path)
        if data:
            merged.update(_validate(data, path))
            sources.append(str(path))

    return ManifestSettings(**merged, sources=sources)
