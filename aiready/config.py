"""Configuration loading for aiready (.aiready.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".aiready.yml"

POLICIES = ("risk", "score")
FORMATS = ("table", "json", "markdown")

DEFAULT_EXTENSIONS = (".ts", ".tsx", ".js", ".jsx")
DEFAULT_MANIFEST_FILES = ("package.json",)


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class GateConfig:
    """Exit-code gate for the score policy."""

    min_score: Optional[int] = None


@dataclass
class ReportConfig:
    """Rendering preferences."""

    top: Optional[int] = None
    format: str = "table"


@dataclass
class ScanConfig:
    """File discovery settings."""

    extensions: List[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    exclude_paths: List[str] = field(default_factory=list)
    manifest_files: List[str] = field(default_factory=lambda: list(DEFAULT_MANIFEST_FILES))


@dataclass
class AiReadyConfig:
    """Represents the settings defined in .aiready.yml."""

    root: Path
    policy: str = "risk"
    gate: GateConfig = field(default_factory=GateConfig)
    report: ReportConfig = field(default_factory=ReportConfig)
    scan: ScanConfig = field(default_factory=ScanConfig)


def load_config(config_path: Path) -> AiReadyConfig:
    """Load configuration from a directory or an explicit .aiready.yml path."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return AiReadyConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    policy = _as_str(data.get("policy")) or "risk"
    policy = policy.lower()
    if policy not in POLICIES:
        raise ConfigError(f"Unknown policy '{policy}' (expected one of: {', '.join(POLICIES)})")

    gate = GateConfig()
    gate_data = _as_dict(data.get("gate"))
    if gate_data:
        gate.min_score = _as_int(gate_data.get("min_score"))
        if gate.min_score is not None and not 0 <= gate.min_score <= 100:
            raise ConfigError("gate.min_score must be between 0 and 100")

    report = ReportConfig()
    report_data = _as_dict(data.get("report"))
    if report_data:
        report.top = _as_int(report_data.get("top"))
        fmt = (_as_str(report_data.get("format")) or "table").lower()
        if fmt not in FORMATS:
            raise ConfigError(f"Unknown report format '{fmt}'")
        report.format = fmt

    scan = ScanConfig()
    scan_data = _as_dict(data.get("scan"))
    if scan_data:
        extensions = _as_str_list(scan_data.get("extensions"))
        if extensions:
            scan.extensions = [ext if ext.startswith(".") else f".{ext}" for ext in extensions]
        scan.exclude_paths = _as_str_list(scan_data.get("exclude_paths"))
        manifests = _as_str_list(scan_data.get("manifest_files"))
        if manifests:
            scan.manifest_files = manifests

    return AiReadyConfig(root=root, policy=policy, gate=gate, report=report, scan=scan)


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "AiReadyConfig",
    "CONFIG_FILENAME",
    "ConfigError",
    "DEFAULT_EXTENSIONS",
    "DEFAULT_MANIFEST_FILES",
    "FORMATS",
    "GateConfig",
    "POLICIES",
    "ReportConfig",
    "ScanConfig",
    "load_config",
]
