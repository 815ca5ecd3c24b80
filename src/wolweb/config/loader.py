"""YAML settings loader and validator."""

import ipaddress
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

from wolweb.core.wake import DEFAULT_DEVICES_FILE, Settings

logger = logging.getLogger(__name__)

_SECTIONS = ("settings", "web")


class ConfigError(Exception):
    """Raised for invalid configuration."""


@dataclass(frozen=True)
class WebSettings:
    """Presentation settings for the web front end."""

    title: str = "Wake-on-LAN Control"
    # Signs flash cookies; a random secret is generated per process when empty.
    session_secret: str = ""


def load_config(path: Path) -> Optional[dict[str, Any]]:
    """
    Load configuration from a YAML file.

    Args:
        path: Path to the YAML config file

    Returns:
        Parsed configuration dictionary, or None if file is empty

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
    """
    with open(path) as f:
        result: Optional[dict[str, Any]] = yaml.safe_load(f)
        return result


def _is_positive_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0


def _section(config: dict[str, Any], name: str) -> dict[str, Any]:
    # An empty section (``settings:`` with nothing under it) loads as None.
    return config.get(name) or {}


def _value(section: dict[str, Any], key: str, default: Any) -> Any:
    value = section.get(key)
    return default if value is None else value


def validate_config(config: dict[str, Any]) -> list[str]:
    """
    Validate a loaded configuration dictionary.

    Returns:
        List of validation error messages (empty list = valid)
    """
    errors: list[str] = []

    if not isinstance(config, dict):
        return ["Config root must be a YAML mapping"]

    for section in _SECTIONS:
        if config.get(section) is not None and not isinstance(config[section], dict):
            errors.append(f"'{section}' must be a mapping")
    if errors:
        return errors

    devices_file = config.get("devices_file")
    if devices_file is not None and not (isinstance(devices_file, str) and devices_file):
        errors.append("'devices_file' must be a non-empty path string")

    settings = _section(config, "settings")
    port = settings.get("port")
    if port is not None and (
        not isinstance(port, int) or isinstance(port, bool) or not 1 <= port <= 65535
    ):
        errors.append(f"settings.port: must be an integer between 1 and 65535, got {port!r}")
    for key in ("send_timeout", "request_timeout"):
        value = settings.get(key)
        if value is not None and not _is_positive_number(value):
            errors.append(f"settings.{key}: must be a positive number, got {value!r}")
    broadcast = settings.get("broadcast")
    if broadcast is not None:
        try:
            ipaddress.IPv4Address(str(broadcast))
        except ValueError:
            errors.append(f"settings.broadcast: invalid IPv4 address '{broadcast}'")
    reject = settings.get("reject_suspicious")
    if reject is not None and not isinstance(reject, bool):
        errors.append("settings.reject_suspicious: must be true or false")

    return errors


def settings_from_config(config: dict[str, Any]) -> Settings:
    """
    Construct Settings from a validated config dict.

    Keys that are absent or left empty in the YAML take their defaults.

    Args:
        config: Parsed and validated config dictionary

    Returns:
        Settings instance, with defaults for anything not configured
    """
    defaults = Settings()
    settings = _section(config, "settings")
    return Settings(
        devices_file=Path(_value(config, "devices_file", DEFAULT_DEVICES_FILE)),
        broadcast=str(_value(settings, "broadcast", defaults.broadcast)),
        port=int(_value(settings, "port", defaults.port)),
        send_timeout=float(_value(settings, "send_timeout", defaults.send_timeout)),
        request_timeout=float(_value(settings, "request_timeout", defaults.request_timeout)),
        reject_suspicious=bool(
            _value(settings, "reject_suspicious", defaults.reject_suspicious)
        ),
    )


def web_settings_from_config(config: dict[str, Any]) -> WebSettings:
    """Construct WebSettings from the ``web`` section of a validated config dict."""
    defaults = WebSettings()
    web = _section(config, "web")
    return WebSettings(
        title=str(_value(web, "title", defaults.title)),
        session_secret=str(_value(web, "session_secret", defaults.session_secret)),
    )


def load_app_config(path: Path) -> tuple[Settings, WebSettings]:
    """
    Load, validate and convert the settings file at *path*.

    A missing or empty file yields defaults for both halves.

    Returns:
        Tuple of (wake Settings, WebSettings)

    Raises:
        ConfigError: If the file is unreadable, not valid YAML, or fails validation
    """
    if not path.exists():
        logger.warning("Config not found at %s, using defaults", path)
        return Settings(), WebSettings()
    try:
        raw = load_config(path)
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"cannot load {path}: {exc}") from exc
    if not raw:
        return Settings(), WebSettings()
    errors = validate_config(raw)
    if errors:
        raise ConfigError("; ".join(errors))
    return settings_from_config(raw), web_settings_from_config(raw)


def load_settings(path: Path) -> Settings:
    """Load only the wake Settings from *path*. See load_app_config()."""
    settings, _ = load_app_config(path)
    return settings
