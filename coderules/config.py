"""Configuration loading for coderules (.coderules.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".coderules.yml"

DEFAULT_EXTENSIONS: tuple[str, ...] = (".md", ".mdc")
DEFAULT_MAX_CONCURRENCY = 4
DEFAULT_SHORT_CONTENT_THRESHOLD = 500
DEFAULT_SMALL_BATCH_THRESHOLD = 3


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class LLMConfig:
    """LLM runtime settings from .coderules.yml."""

    runner: Optional[str] = None
    model: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    base_url: Optional[str] = None
    api_key: Optional[str] = None
    request_timeout: Optional[float] = None
    max_retries: Optional[int] = None


@dataclass
class PipelineConfig:
    """Tuning knobs for discovery, filtering and scheduling."""

    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    short_content_threshold: int = DEFAULT_SHORT_CONTENT_THRESHOLD
    small_batch_threshold: int = DEFAULT_SMALL_BATCH_THRESHOLD
    extensions: List[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    exclude_dirs: List[str] = field(default_factory=list)


@dataclass
class CodeRulesConfig:
    """Represents the settings defined in .coderules.yml."""

    root: Path
    llm: Optional[LLMConfig] = None
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)


def load_config(config_path: Path) -> CodeRulesConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return CodeRulesConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    return CodeRulesConfig(
        root=root,
        llm=_parse_llm(_as_dict(data.get("llm"))),
        pipeline=_parse_pipeline(_as_dict(data.get("pipeline"))),
    )


def _parse_llm(section: Dict[str, Any]) -> Optional[LLMConfig]:
    parsers = {
        "runner": _as_str,
        "model": _as_str,
        "temperature": _as_float,
        "max_tokens": _as_int,
        "base_url": _as_str,
        "api_key": _as_str,
        "request_timeout": _as_float,
        "max_retries": _as_int,
    }
    values = {name: parse(section.get(name)) for name, parse in parsers.items()}
    if all(value is None for value in values.values()):
        return None
    return LLMConfig(**values)


def _parse_pipeline(section: Dict[str, Any]) -> PipelineConfig:
    defaults = PipelineConfig()
    extensions = _as_str_list(section.get("extensions"))
    return PipelineConfig(
        max_concurrency=_positive_int(section, "max_concurrency", defaults.max_concurrency),
        short_content_threshold=_positive_int(
            section, "short_content_threshold", defaults.short_content_threshold
        ),
        small_batch_threshold=_positive_int(
            section, "small_batch_threshold", defaults.small_batch_threshold
        ),
        extensions=[_normalise_extension(ext) for ext in extensions] or defaults.extensions,
        exclude_dirs=_as_str_list(section.get("exclude_dirs")),
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.suffix not in {".yml", ".yaml"}:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _normalise_extension(value: str) -> str:
    value = value.strip().lower()
    return value if value.startswith(".") else f".{value}"


def _positive_int(section: Dict[str, Any], name: str, default: int) -> int:
    value = section.get(name)
    if value is None:
        return default
    parsed = _as_int(value)
    if parsed is None or parsed < 1:
        raise ConfigError(f"pipeline.{name} must be a positive integer")
    return parsed


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_float(value: Any) -> Optional[float]:
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


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "CodeRulesConfig",
    "ConfigError",
    "LLMConfig",
    "PipelineConfig",
    "load_config",
]
