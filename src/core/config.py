"""
User Settings for Work

Settings live in <DATA_ROOT>/config.json. Keys the file leaves out take
their values from DEFAULT_CONFIG, and the result is checked against the
WorkSettings model before the CLI uses it.

File layout:
    {
        "report": {
            "time_format": "human-readable",
            "output": "human"
        },
        "shell": null
    }
"""

import json
import logging
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError, field_validator

from src.core.errors import UserError
from src.core.paths import ensure_parent_directory, get_config_path

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: dict[str, Any] = {
    "report": {
        "time_format": "human-readable",
        "output": "human",  # One of human, csv, json
    },
    "shell": None,  # None = use $SHELL, then sh
}


class ReportSettings(BaseModel):
    """Defaults for the `of` command."""

    time_format: str = Field("human-readable", description="Time format alias")
    output: Literal["human", "csv", "json"] = Field("human", description="Output style")

    @field_validator("time_format")
    @classmethod
    def validate_time_format(cls, v: str) -> str:
        from src.report.formats import TimeFormat

        try:
            TimeFormat.parse(v)
        except UserError as e:
            raise ValueError(str(e)) from e
        return v


class WorkSettings(BaseModel):
    """Validated view of config.json."""

    report: ReportSettings = Field(default_factory=ReportSettings)
    shell: str | None = Field(None, description="Shell used by the `while` command")


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively overlay `override` on `base`; nested dicts merge key by key."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _defaults() -> dict[str, Any]:
    return json.loads(json.dumps(DEFAULT_CONFIG))


def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """
    Read config.json and overlay it on DEFAULT_CONFIG.

    Args:
        config_path: Override for the settings file location

    Returns:
        The merged settings dict. A missing or unreadable file yields the defaults.
    """
    path = config_path or get_config_path()
    if not path.exists():
        logger.debug(f"Config file not found, using defaults: {path}")
        return _defaults()

    try:
        with open(path) as f:
            user_config = json.load(f)
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in config file: {e}")
        return _defaults()
    except OSError as e:
        logger.error(f"Failed to load config: {e}")
        return _defaults()

    if not isinstance(user_config, dict):
        logger.error(f"Config file must hold a JSON object: {path}")
        return _defaults()

    config = _deep_merge(_defaults(), user_config)
    logger.debug(f"Loaded config from {path}")
    return config


def save_config(config: dict[str, Any], config_path: Path | None = None) -> bool:
    """
    Write the settings dict to config.json, creating its directory.

    Args:
        config: Settings to write
        config_path: Override for the settings file location

    Returns:
        Whether the file was written
    """
    path = config_path or get_config_path()
    try:
        ensure_parent_directory(path)
        with open(path, "w") as f:
            json.dump(config, f, indent=2)
    except OSError as e:
        logger.error(f"Failed to save config: {e}")
        return False

    logger.info(f"Saved config to {path}")
    return True


def get_config_value(key_path: str, default: Any = None, config_path: Path | None = None) -> Any:
    """
    Look up one setting by its dotted key.

    Args:
        key_path: Dot-separated path like "report.time_format"
        default: Returned when any part of the key is missing
        config_path: Override for the settings file location

    Returns:
        The stored value, or `default`
    """
    value: Any = load_config(config_path)
    for key in key_path.split("."):
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default
    return value


def set_config_value(key_path: str, value: Any, config_path: Path | None = None) -> bool:
    """
    Store one setting under its dotted key, creating intermediate tables.

    Args:
        key_path: Dot-separated path like "report.output"
        value: New value
        config_path: Override for the settings file location

    Returns:
        True if saved successfully, False otherwise
    """
    config = load_config(config_path)
    keys = key_path.split(".")

    current = config
    for key in keys[:-1]:
        if not isinstance(current.get(key), dict):
            current[key] = {}
        current = current[key]

    current[keys[-1]] = value
    return save_config(config, config_path)


def validate_config(config: dict[str, Any]) -> list[str]:
    """
    Check a settings dict against WorkSettings.

    Returns:
        One "<dotted.location>: <message>" string per problem; empty when valid
    """
    try:
        WorkSettings.model_validate(config)
    except ValidationError as e:
        return [
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
        ]
    return []


def get_settings(config_path: Path | None = None) -> WorkSettings:
    """
    Load and validate settings.

    Invalid settings are reported and replaced by the defaults, so a broken
    config file never blocks time tracking.
    """
    config = load_config(config_path)
    errors = validate_config(config)
    if errors:
        for error in errors:
            logger.warning(f"Ignoring invalid config: {error}")
        return WorkSettings()
    return WorkSettings.model_validate(config)


def reset_to_defaults(config_path: Path | None = None) -> bool:
    """Overwrite config.json with DEFAULT_CONFIG."""
    return save_config(_defaults(), config_path)


if __name__ == "__main__":
    import fire

    def path():
        """Print where settings are read from."""
        return str(get_config_path())

    def settings():
        """Print the effective settings, after validation."""
        return get_settings().model_dump()

    def get(key_path: str):
        """Read one value, e.g. 'report.time_format'."""
        return get_config_value(key_path)

    def set_value(key_path: str, value: Any):
        """Write one value, e.g. set report.output csv."""
        if not set_config_value(key_path, value):
            return f"Could not write {get_config_path()}"
        problems = validate_config(load_config())
        return problems or "ok"

    def check():
        """List problems with the settings file."""
        return validate_config(load_config()) or "ok"

    fire.Fire(
        {
            "path": path,
            "settings": settings,
            "get": get,
            "set": set_value,
            "check": check,
            "reset": reset_to_defaults,
        }
    )
