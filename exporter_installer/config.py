from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .errors import ConfigError
from .exporters import EXPORTERS, ExporterDescriptor

SETTINGS_FIELDS = ("settle_seconds", "activation_timeout", "poll_interval")


@dataclass(frozen=True)
class Settings:
    settle_seconds: float = 2.0
    activation_timeout: float = 10.0
    poll_interval: float = 1.0
    dry_run: bool = False

    def with_overrides(self, **overrides: Any) -> "Settings":
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes)


@dataclass(frozen=True)
class InstallerConfig:
    settings: Settings
    exporters: Dict[str, ExporterDescriptor]

    def exporter(self, name: str) -> ExporterDescriptor:
        try:
            return self.exporters[name]
        except KeyError:
            known = ", ".join(sorted(self.exporters))
            raise ConfigError(f"Unknown exporter {name!r} (known: {known})") from None


def default_config() -> InstallerConfig:
    return InstallerConfig(settings=Settings(), exporters=dict(EXPORTERS))


def _parse_settings(raw: Any) -> Settings:
    if raw is None:
        return Settings()
    if not isinstance(raw, dict):
        raise ConfigError("'settings' must be a mapping")

    values: Dict[str, float] = {}
    for key, value in raw.items():
        if key not in SETTINGS_FIELDS:
            raise ConfigError(f"Unknown setting {key!r} (allowed: {', '.join(SETTINGS_FIELDS)})")
        try:
            values[key] = float(value)
        except (TypeError, ValueError):
            raise ConfigError(f"Setting {key!r} must be a number, got {value!r}") from None
        if values[key] < 0:
            raise ConfigError(f"Setting {key!r} must not be negative")
    return Settings(**values)


def _apply_exporter_overrides(raw: Any) -> Dict[str, ExporterDescriptor]:
    exporters = dict(EXPORTERS)
    if raw is None:
        return exporters
    if not isinstance(raw, dict):
        raise ConfigError("'exporters' must be a mapping of exporter name -> overrides")

    for name, overrides in raw.items():
        if name not in exporters:
            raise ConfigError(f"Unknown exporter {name!r} in config")
        if not overrides:
            continue
        if not isinstance(overrides, Mapping):
            raise ConfigError(f"Overrides for {name!r} must be a mapping")
        try:
            exporters[name] = exporters[name].with_overrides(overrides)
        except KeyError as e:
            raise ConfigError(f"Unknown field {e.args[0]!r} for exporter {name!r}") from None
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid override for exporter {name!r}: {e}") from None
    return exporters


def load_config(path: Optional[str]) -> InstallerConfig:
    """Load the optional YAML overrides file.

    Layout::

        settings:
          settle_seconds: 2
          activation_timeout: 10
        exporters:
          blackbox:
            version: 0.27.0
            port: 9115
    """

    if path is None:
        return default_config()

    p = Path(path)
    if not p.exists():
        raise ConfigError(f"Config file not found: {path}")
    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ConfigError("Installer config must be YAML")

    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Could not parse {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"{path} must contain a mapping/object")

    unknown = set(raw) - {"settings", "exporters"}
    if unknown:
        raise ConfigError(f"Unknown top-level keys in {path}: {', '.join(sorted(unknown))}")

    return InstallerConfig(
        settings=_parse_settings(raw.get("settings")),
        exporters=_apply_exporter_overrides(raw.get("exporters")),
    )
