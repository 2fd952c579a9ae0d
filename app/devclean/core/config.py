"""Application configuration and settings.

This module provides the configuration model and I/O functions for
devclean. Settings cover the AI collaborator (model and timeout) and
the location of the quarantine area.

Configuration is stored in ~/.config/devclean/config.toml. The Gemini
API key is never written to this file; it is read from the
GEMINI_API_KEY environment variable.
"""

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from devclean.core.paths import get_config_path, get_quarantine_dir

logger = logging.getLogger(__name__)

DEFAULT_AI_MODEL = "gemini-2.5-flash-lite"
API_KEY_ENV = "GEMINI_API_KEY"
MODEL_ENV = "GEMINI_MODEL"


class DevcleanConfig(BaseModel):
    """Configuration for devclean.

    Attributes:
        ai_model: Gemini model name. If None, uses GEMINI_MODEL or the default.
        ai_timeout_seconds: Request timeout for a single AI assessment.
        quarantine_dir: Holding area for quarantined items. If None, uses
            the default under the application data directory.
    """

    model_config = ConfigDict(extra="forbid")

    ai_model: Annotated[
        str | None,
        Field(description="Gemini model name (None = environment or default)"),
    ] = None
    ai_timeout_seconds: Annotated[
        int,
        Field(ge=1, le=300, description="AI request timeout in seconds (1-300)"),
    ] = 30
    quarantine_dir: Annotated[
        Path | None,
        Field(description="Quarantine directory (None = default location)"),
    ] = None

    @property
    def effective_model(self) -> str:
        """Get the effective model name.

        GEMINI_MODEL wins over the configured model, which wins over the
        built-in default.
        """
        env_model = os.environ.get(MODEL_ENV, "").strip()
        if env_model:
            return env_model
        if self.ai_model:
            return self.ai_model
        return DEFAULT_AI_MODEL

    @property
    def effective_quarantine_dir(self) -> Path:
        """Get the quarantine directory, falling back to the default."""
        if self.quarantine_dir is not None:
            return self.quarantine_dir.expanduser()
        return get_quarantine_dir()


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when the config file is not found."""


class ConfigParseError(ConfigError):
    """Raised when the config file cannot be parsed."""


def get_api_key() -> str | None:
    """Return the Gemini API key from the environment, if set."""
    key = os.environ.get(API_KEY_ENV, "").strip()
    return key or None


def load_config(path: Path | None = None) -> DevcleanConfig:
    """Load configuration from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated DevcleanConfig object.

    Raises:
        ConfigNotFoundError: If the config file doesn't exist.
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the content doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        raise ConfigNotFoundError(f"Config not found: {config_path}")

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config: {e}") from e

    try:
        return DevcleanConfig.model_validate(data)
    except (ValueError, ValidationError) as e:
        raise ConfigError(f"Invalid config content: {e}") from e


def load_config_or_default(path: Path | None = None) -> DevcleanConfig:
    """Load configuration, returning defaults when no file exists.

    Invalid files still raise, so a typo is never silently ignored.

    Raises:
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the content doesn't match the schema.
    """
    try:
        return load_config(path)
    except ConfigNotFoundError:
        logger.debug("No config file found, using defaults")
        return DevcleanConfig()


def save_config(config: DevcleanConfig, path: Path | None = None) -> Path:
    """Save configuration to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        config: The DevcleanConfig object to save.
        path: Path to save the config. If None, uses the default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data = _config_to_dict(config)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path


def _config_to_dict(config: DevcleanConfig) -> dict[str, object]:
    """Convert DevcleanConfig to a dictionary for TOML serialization.

    TOML has no null, so unset optional values are left out.
    """
    result: dict[str, object] = {"ai_timeout_seconds": config.ai_timeout_seconds}

    if config.ai_model is not None:
        result["ai_model"] = config.ai_model

    if config.quarantine_dir is not None:
        result["quarantine_dir"] = str(config.quarantine_dir)

    return result
