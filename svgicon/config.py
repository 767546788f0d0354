"""Configuration loading for svgicon (.svgicon.yml)."""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

CONFIG_FILENAME = ".svgicon.yml"
DEFAULT_EXTENSION = "js"
DEFAULT_ID_PREFIX = "svgicon-"
DEFAULT_SIZE = 16.0


class ConfigError(RuntimeError):
    """Raised when configuration is missing, unreadable, or inconsistent."""


@dataclass(frozen=True)
class SvgIconConfig:
    """Effective settings for a conversion run.

    Values come from built-in defaults, then ``.svgicon.yml``, then CLI flags.
    ``template_path`` of ``None`` selects the bundled template.
    """

    root: Path
    extension: str = DEFAULT_EXTENSION
    template_path: Optional[Path] = None
    es6: bool = False
    id_prefix: str = DEFAULT_ID_PREFIX
    default_size: float = DEFAULT_SIZE
    workers: Optional[int] = None

    def merge(self, **overrides: Any) -> "SvgIconConfig":
        """Return a copy with every non-``None`` override applied."""
        applied = {key: value for key, value in overrides.items() if value is not None}
        if "extension" in applied:
            applied["extension"] = normalise_extension(applied["extension"])
        return replace(self, **applied)


def normalise_extension(value: str) -> str:
    """Strip a leading dot and whitespace; reject empty extensions."""
    cleaned = str(value).strip().lstrip(".")
    if not cleaned:
        raise ConfigError("Output extension must not be empty")
    if "/" in cleaned or "\\" in cleaned:
        raise ConfigError(f"Output extension must not contain path separators: {value!r}")
    return cleaned


def load_config(config_path: Path) -> SvgIconConfig:
    """Load configuration from disk, returning defaults when the file is absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent

    if not config_file.exists():
        return SvgIconConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{config_file.name} must contain a mapping at the root")

    config = SvgIconConfig(root=root)

    ext = _as_str(data.get("ext"))
    if ext is not None:
        config = replace(config, extension=normalise_extension(ext))

    tpl = _as_str(data.get("tpl"))
    if tpl:
        config = replace(config, template_path=(root / tpl).resolve())

    es6 = _as_bool(data.get("es6"))
    if es6 is not None:
        config = replace(config, es6=es6)

    id_prefix = _as_str(data.get("id_prefix"))
    if id_prefix is not None:
        config = replace(config, id_prefix=id_prefix)

    default_size = _as_float(data.get("default_size"))
    if default_size is not None:
        if default_size <= 0:
            raise ConfigError("default_size must be a positive number")
        config = replace(config, default_size=default_size)

    workers = _as_int(data.get("workers"))
    if workers is not None:
        if workers < 1:
            raise ConfigError("workers must be at least 1")
        config = replace(config, workers=workers)

    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return None
    return str(value) if isinstance(value, (str, int, float)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


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


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "DEFAULT_EXTENSION",
    "DEFAULT_ID_PREFIX",
    "DEFAULT_SIZE",
    "SvgIconConfig",
    "load_config",
    "normalise_extension",
]
