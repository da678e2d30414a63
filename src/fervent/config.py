"""Configuration management for fervent using Pydantic models."""

import json
import logging
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

CONFIG_FILE_NAME = ".fervent.json"


class LogLevel(str, Enum):
    """Logging levels."""
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"


class MessageTemplates(str, Enum):
    """Source of message templates when no custom message matches."""
    RAW = "raw"
    ENGLISH = "english"


class ResolverConfig(BaseModel):
    """Rule resolution configuration section."""
    self_placeholder: str = Field(alias="selfPlaceholder", default="{self}")
    strict_rules: bool = Field(alias="strictRules", default=True)

    @field_validator("self_placeholder")
    @classmethod
    def validate_self_placeholder(cls, v):
        if not v or not v.strip():
            raise ValueError("self_placeholder must not be blank")
        if any(ch in v for ch in ",|:"):
            raise ValueError(f"self_placeholder cannot contain rule separators, got: {v}")
        return v

    model_config = ConfigDict(populate_by_name=True)


class GateConfig(BaseModel):
    """Save-gating configuration section."""
    throw_on_validation: bool = Field(alias="throwOnValidation", default=False)
    force_save: bool = Field(alias="forceSave", default=False)
    auto_purge_redundant_attributes: bool = Field(alias="autoPurgeRedundantAttributes", default=False)

    model_config = ConfigDict(populate_by_name=True)


class MessagesConfig(BaseModel):
    """Error message configuration section."""
    templates: MessageTemplates = MessageTemplates.RAW
    custom: dict[str, str] = Field(default_factory=dict)
    attribute_names: dict[str, str] = Field(alias="attributeNames", default_factory=dict)

    model_config = ConfigDict(use_enum_values=True, populate_by_name=True)


class LoggingConfig(BaseModel):
    """Logging configuration section."""
    level: LogLevel = LogLevel.WARN

    model_config = ConfigDict(use_enum_values=True)


class FerventConfig(BaseModel):
    """Complete fervent configuration model."""
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)
    gate: GateConfig = Field(default_factory=GateConfig)
    messages: MessagesConfig = Field(default_factory=MessagesConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(extra="forbid")


_LEVELS = {
    LogLevel.ERROR: logging.ERROR,
    LogLevel.WARN: logging.WARNING,
    LogLevel.INFO: logging.INFO,
    LogLevel.DEBUG: logging.DEBUG,
}


def configure_logging(config: FerventConfig) -> None:
    """Apply the configured level to the fervent logger. No handlers are added."""
    logging.getLogger("fervent").setLevel(_LEVELS[LogLevel(config.logging.level)])


def load_config(config_path: str | Path | None = None) -> FerventConfig:
    """Load configuration from file with fallback to defaults.

    Args:
        config_path: Optional path to configuration file. If None, searches
                    current directory and parents for .fervent.json

    Returns:
        FerventConfig: Loaded and validated configuration

    Raises:
        ValueError: If configuration is invalid
    """
    if config_path is None:
        config_path = find_config_file()
    else:
        config_path = Path(config_path)

    if config_path and config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                config_data = json.load(f)
            return FerventConfig(**config_data)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in config file {config_path}: {e}")
        except Exception as e:
            raise ValueError(f"Failed to load config from {config_path}: {e}")
    return FerventConfig()


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Find .fervent.json by searching up the directory tree.

    Args:
        start_dir: Directory to start search from (default: current directory)

    Returns:
        Path to config file if found, None otherwise
    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = Path(start_dir).resolve()

    while True:
        config_file = current / CONFIG_FILE_NAME
        if config_file.exists():
            return config_file

        parent = current.parent
        if parent == current:  # Reached root directory
            break
        current = parent

    return None
