"""Configuration loading and validation for ServiceNow change automation."""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

API_URL_TEMPLATE = "https://{instance}/api/sn_chg_rest/change"


@dataclass
class HTTPConfig:
    """Change API transport configuration."""
    timeout_seconds: int = 60


@dataclass
class PollingConfig:
    """Approval polling configuration."""
    interval_seconds: int = 30


@dataclass
class CloseConfig:
    """Fields sent when closing a change request."""
    close_code: str = "successful"
    close_notes: str = "Closed via GitHub Actions"


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    format: str = "text"
    file: Optional[str] = None


@dataclass
class Settings:
    """Tunables read from the optional settings file."""
    http: HTTPConfig = field(default_factory=HTTPConfig)
    polling: PollingConfig = field(default_factory=PollingConfig)
    close: CloseConfig = field(default_factory=CloseConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


@dataclass(frozen=True)
class RunConfig:
    """Validated inputs of a single invocation."""
    action: str
    instance: str
    token: str
    body: str = ""
    cr_id: str = ""
    timeout_minutes: Optional[int] = None

    @property
    def api_url(self) -> str:
        return build_api_url(self.instance)


def build_api_url(instance: str) -> str:
    """Build the change collection URL for a ServiceNow instance hostname."""
    return API_URL_TEMPLATE.format(instance=instance.strip().rstrip('/'))


def _expand_env_vars(value: str) -> str:
    """Expand environment variables in the format ${VAR_NAME}."""
    pattern = r'\$\{([^}]+)\}'

    def replacer(match):
        var_name = match.group(1)
        return os.environ.get(var_name, "")

    return re.sub(pattern, replacer, value)


def _expand_env_vars_recursive(obj):
    """Recursively expand environment variables in a data structure."""
    if isinstance(obj, str):
        return _expand_env_vars(obj)
    elif isinstance(obj, dict):
        return {k: _expand_env_vars_recursive(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars_recursive(item) for item in obj]
    return obj


def load_settings(config_path: Optional[str] = None) -> Settings:
    """
    Load settings from an optional YAML file and the environment.

    Supports environment variable interpolation using ${VAR_NAME} syntax.
    Without a path, defaults are used and only environment overrides apply.

    Args:
        config_path: Path to the YAML settings file, or None.

    Returns:
        Settings object.

    Raises:
        FileNotFoundError: If a path is given and the file doesn't exist.
        yaml.YAMLError: If the file is invalid YAML.
        ConfigValidationError: If a value is out of range.
    """
    raw_config = {}
    if config_path:
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(path, 'r', encoding='utf-8') as f:
            raw_config = yaml.safe_load(f) or {}

    raw_config = _expand_env_vars_recursive(raw_config)

    settings = Settings()

    if 'http' in raw_config:
        http_raw = raw_config['http'] or {}
        settings.http = HTTPConfig(
            timeout_seconds=int(http_raw.get('timeout_seconds', settings.http.timeout_seconds)),
        )

    if 'polling' in raw_config:
        poll_raw = raw_config['polling'] or {}
        settings.polling = PollingConfig(
            interval_seconds=int(poll_raw.get('interval_seconds', settings.polling.interval_seconds)),
        )

    if 'close' in raw_config:
        close_raw = raw_config['close'] or {}
        settings.close = CloseConfig(
            close_code=close_raw.get('close_code', settings.close.close_code),
            close_notes=close_raw.get('close_notes', settings.close.close_notes),
        )

    if 'logging' in raw_config:
        log_raw = raw_config['logging'] or {}
        settings.logging = LoggingConfig(
            level=log_raw.get('level', settings.logging.level),
            format=log_raw.get('format', settings.logging.format),
            file=log_raw.get('file'),
        )

    # Apply environment variable overrides for logging
    if os.environ.get('SNOW_CHANGE_LOG_LEVEL'):
        settings.logging.level = os.environ['SNOW_CHANGE_LOG_LEVEL']
    if os.environ.get('SNOW_CHANGE_LOG_FORMAT'):
        settings.logging.format = os.environ['SNOW_CHANGE_LOG_FORMAT']
    if is_debug_enabled():
        settings.logging.level = 'DEBUG'

    validate_settings(settings)

    return settings


def is_debug_enabled() -> bool:
    """Whether verbose tracing was requested through DEBUG=true."""
    return os.environ.get('DEBUG') == 'true'


class ConfigValidationError(ValueError):
    """Raised when configuration validation fails."""
    pass


def validate_settings(settings: Settings) -> None:
    """
    Validate settings have valid values.

    Raises:
        ConfigValidationError: If validation fails.
    """
    errors = []

    if settings.http.timeout_seconds <= 0:
        errors.append("http.timeout_seconds must be positive")
    if settings.polling.interval_seconds <= 0:
        errors.append("polling.interval_seconds must be positive")
    if not settings.close.close_code:
        errors.append("close.close_code must not be empty")

    valid_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
    if settings.logging.level.upper() not in valid_levels:
        errors.append(f"logging.level must be one of: {valid_levels}")

    valid_formats = {'json', 'text'}
    if settings.logging.format.lower() not in valid_formats:
        errors.append(f"logging.format must be one of: {valid_formats}")

    if errors:
        raise ConfigValidationError(
            "Configuration validation failed:\n  - " + "\n  - ".join(errors)
        )


def get_default_settings() -> Settings:
    """Return a Settings object with default values."""
    return Settings()
