"""
camt_reader - Configuration Management

Reader settings loaded from defaults, a YAML file or environment variables.
"""

import os
import yaml
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union
from pathlib import Path
from enum import Enum
import logging

from .exceptions import ConfigurationException

logger = logging.getLogger(__name__)

CAMT_053_001_02_NAMESPACE = "urn:iso:std:iso:20022:tech:xsd:camt.053.001.02"


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@dataclass
class ReaderConfig:
    """Main configuration class."""

    log_level: LogLevel = LogLevel.WARNING

    # Namespace the documents are expected to declare; a mismatch is only logged
    expected_namespace: Optional[str] = CAMT_053_001_02_NAMESPACE

    # Treat ISODateTime values without a UTC offset as UTC instead of failing
    assume_utc: bool = False

    # Indentation of the JSON report
    json_indent: int = 2

    @classmethod
    def load_from_file(cls, config_path: Union[str, Path]) -> "ReaderConfig":
        """Load configuration from YAML file."""
        config_path = Path(config_path)

        if not config_path.exists():
            raise ConfigurationException(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationException(f"Invalid YAML in configuration file: {e}")
        except OSError as e:
            raise ConfigurationException(f"Error loading configuration file: {e}")

        if config_data is None:
            config_data = {}
        if not isinstance(config_data, dict):
            raise ConfigurationException(
                f"Configuration file must contain a mapping: {config_path}"
            )

        return cls._from_dict(config_data)

    @classmethod
    def load_from_env(
        cls, prefix: str = "CAMT_READER_", base: Optional["ReaderConfig"] = None
    ) -> "ReaderConfig":
        """Load configuration from environment variables."""
        config = base or cls()

        if os.getenv(f"{prefix}LOG_LEVEL"):
            config.log_level = _log_level(os.getenv(f"{prefix}LOG_LEVEL", ""))

        if os.getenv(f"{prefix}EXPECTED_NAMESPACE") is not None:
            config.expected_namespace = os.getenv(f"{prefix}EXPECTED_NAMESPACE") or None

        if os.getenv(f"{prefix}ASSUME_UTC"):
            config.assume_utc = os.getenv(f"{prefix}ASSUME_UTC", "").lower() == "true"

        if os.getenv(f"{prefix}JSON_INDENT"):
            try:
                config.json_indent = int(os.getenv(f"{prefix}JSON_INDENT", ""))
            except ValueError:
                raise ConfigurationException(
                    "JSON indent must be an integer", config_key="json_indent"
                )

        return config

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> "ReaderConfig":
        """Create configuration from dictionary."""
        config = cls()

        unknown = set(data) - {"log_level", "expected_namespace", "assume_utc", "json_indent"}
        if unknown:
            raise ConfigurationException(
                f"Unknown configuration keys: {', '.join(sorted(unknown))}"
            )

        if "log_level" in data:
            config.log_level = _log_level(str(data["log_level"]))
        if "expected_namespace" in data:
            namespace = data["expected_namespace"]
            if namespace is not None and not isinstance(namespace, str):
                raise ConfigurationException(
                    f"Expected namespace must be a string: {namespace!r}",
                    config_key="expected_namespace",
                )
            config.expected_namespace = namespace or None
        if "assume_utc" in data:
            config.assume_utc = _flag(data["assume_utc"], "assume_utc")
        if "json_indent" in data:
            config.json_indent = data["json_indent"]

        return config

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "log_level": self.log_level.value,
            "expected_namespace": self.expected_namespace,
            "assume_utc": self.assume_utc,
            "json_indent": self.json_indent,
        }

    def validate(self) -> None:
        """Validate configuration settings."""
        errors = []

        if not isinstance(self.json_indent, int) or self.json_indent < 0:
            errors.append("JSON indent must be a non-negative integer")
        if self.expected_namespace is not None and not (
            isinstance(self.expected_namespace, str)
            and self.expected_namespace.startswith("urn:")
        ):
            errors.append("Expected namespace must be a URN")
        if not isinstance(self.assume_utc, bool):
            errors.append("assume_utc must be a boolean")

        if errors:
            raise ConfigurationException(
                f"Configuration validation failed: {'; '.join(errors)}"
            )


def _log_level(value: str) -> LogLevel:
    try:
        return LogLevel(value.upper())
    except ValueError:
        raise ConfigurationException(f"Invalid log level: {value}", config_key="log_level")


def _flag(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    raise ConfigurationException(f"{key} must be true or false: {value!r}", config_key=key)


# Global configuration instance
_config: Optional[ReaderConfig] = None


def get_config() -> ReaderConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = ReaderConfig.load_from_env()
    return _config


def set_config(config: ReaderConfig) -> None:
    """Set the global configuration instance."""
    global _config
    config.validate()
    _config = config


def load_config(config_path: Union[str, Path]) -> ReaderConfig:
    """Load and set configuration from file, then apply environment overrides."""
    config = ReaderConfig.load_from_env(base=ReaderConfig.load_from_file(config_path))
    set_config(config)
    logger.debug(f"Loaded configuration from {config_path}")
    return config
