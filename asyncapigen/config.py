"""Configuration loading for asyncapigen (.asyncapigen.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

from .constants import DEFAULT_TITLE, DEFAULT_VERSION
from .errors import EmitterError, ErrorCategory

CONFIG_FILENAME = ".asyncapigen.yml"
ENV_FAIL_ON_INVALID = "ASYNCAPIGEN_FAIL_ON_INVALID"
ENV_FILE_TYPE = "ASYNCAPIGEN_FILE_TYPE"


@dataclass
class InfoConfig:
    """Values for the document ``info`` object."""

    title: str = DEFAULT_TITLE
    version: str = DEFAULT_VERSION
    description: Optional[str] = None


@dataclass
class OutputConfig:
    """Where and how the document is written."""

    file: str = "asyncapi"
    file_type: str = "yaml"
    dir: str = "asyncapi-output"


@dataclass
class SecurityOptions:
    """Keying of ``components.securitySchemes`` (``name`` or ``type``)."""

    key_strategy: str = "name"


@dataclass
class ValidationConfig:
    """Validation toggles."""

    enabled: bool = True
    fail_on_invalid: bool = False
    report: bool = True


@dataclass
class EmitterConfig:
    """Represents the settings defined in .asyncapigen.yml."""

    root: Path = field(default_factory=Path.cwd)
    info: InfoConfig = field(default_factory=InfoConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    protocol_bindings: List[str] = field(default_factory=list)
    security: SecurityOptions = field(default_factory=SecurityOptions)
    validation: ValidationConfig = field(default_factory=ValidationConfig)
    debug: bool = False

    @property
    def output_dir(self) -> Path:
        path = Path(self.output.dir).expanduser()
        return path if path.is_absolute() else self.root / path


def load_config(config_path: Path) -> EmitterConfig:
    """Load configuration from disk; a missing file yields the defaults."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return EmitterConfig(root=root)

    data = _read_config(config_file)
    return parse_config(data, root=root, source=config_file.name)


def parse_config(data: Any, *, root: Path | None = None, source: str = CONFIG_FILENAME) -> EmitterConfig:
    """Build an :class:`EmitterConfig` from an already-parsed mapping."""
    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise _config_error(f"{source} must contain a mapping at the root")

    config = EmitterConfig(root=root or Path.cwd())

    info_data = _as_dict(data.get("info"))
    if info_data:
        config.info = InfoConfig(
            title=_as_str(info_data.get("title")) or DEFAULT_TITLE,
            version=_as_str(info_data.get("version")) or DEFAULT_VERSION,
            description=_as_str(info_data.get("description")),
        )

    output_data = _as_dict(data.get("output"))
    if output_data:
        file_type = (_as_str(output_data.get("file_type")) or "yaml").lower()
        if file_type not in {"yaml", "yml", "json"}:
            raise _config_error(f"output.file_type must be 'yaml' or 'json', got '{file_type}'")
        config.output = OutputConfig(
            file=_as_str(output_data.get("file")) or "asyncapi",
            file_type="yaml" if file_type == "yml" else file_type,
            dir=_as_str(output_data.get("dir")) or "asyncapi-output",
        )

    config.protocol_bindings = _as_str_list(data.get("protocol_bindings"))

    security_data = _as_dict(data.get("security"))
    if security_data:
        strategy = (_as_str(security_data.get("key_strategy")) or "name").lower()
        if strategy not in {"name", "type"}:
            raise _config_error(f"security.key_strategy must be 'name' or 'type', got '{strategy}'")
        config.security = SecurityOptions(key_strategy=strategy)

    validation_data = _as_dict(data.get("validation"))
    if validation_data:
        config.validation = ValidationConfig(
            enabled=_bool_or(validation_data.get("enabled"), True),
            fail_on_invalid=_bool_or(validation_data.get("fail_on_invalid"), False),
            report=_bool_or(validation_data.get("report"), True),
        )

    config.debug = _bool_or(data.get("debug"), False)
    return config


def apply_env_overrides(config: EmitterConfig, environ: Mapping[str, str] | None = None) -> EmitterConfig:
    """Apply ``ASYNCAPIGEN_*`` environment overrides in place."""
    environ = os.environ if environ is None else environ

    fail_on_invalid = _parse_env_bool(environ.get(ENV_FAIL_ON_INVALID))
    if fail_on_invalid is not None:
        config.validation.fail_on_invalid = fail_on_invalid

    file_type = environ.get(ENV_FILE_TYPE)
    if file_type:
        lowered = file_type.strip().lower()
        if lowered not in {"yaml", "yml", "json"}:
            raise _config_error(f"{ENV_FILE_TYPE} must be 'yaml' or 'json', got '{file_type}'")
        config.output.file_type = "yaml" if lowered == "yml" else lowered
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
        raise _config_error(f"Unable to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise _config_error(f"Failed to parse {path.name}: {exc}") from exc
    if loaded is not None and not isinstance(loaded, dict):
        raise _config_error(f"{path.name} must contain a mapping at the root")
    return loaded or {}


def _config_error(message: str) -> EmitterError:
    return EmitterError(ErrorCategory.CONFIGURATION, "INVALID_CONFIG", message, recoverable=False)


def _parse_env_bool(value: Optional[str]) -> Optional[bool]:
    if value is None:
        return None
    lowered = value.strip().lower()
    if lowered in {"1", "true", "yes", "on"}:
        return True
    if lowered in {"0", "false", "no", "off"}:
        return False
    return None


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return _parse_env_bool(value)
    return None


def _bool_or(value: Any, default: bool) -> bool:
    parsed = _as_bool(value)
    return default if parsed is None else parsed


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
    "ENV_FAIL_ON_INVALID",
    "ENV_FILE_TYPE",
    "EmitterConfig",
    "InfoConfig",
    "OutputConfig",
    "SecurityOptions",
    "ValidationConfig",
    "apply_env_overrides",
    "load_config",
    "parse_config",
]
