"""Configuration loader for YAML files and base64-encoded environment values."""

import base64
import binascii
import os
from pathlib import Path
from typing import Any

import yaml

from vcs_agent.core.exceptions.errors import ConfigurationError


class ConfigLoader:
    """Load configuration from YAML files or encoded environment variables."""

    def __init__(self, config_path: Path | None = None) -> None:
        """Initialize the config loader.

        Args:
            config_path: Path to configuration file.
        """
        self.config_path = config_path
        self._config: dict[str, Any] = {}

    def load(self, path: Path | None = None) -> dict[str, Any]:
        """Load configuration from a YAML file.

        Args:
            path: Path to YAML file. Uses config_path if not provided.

        Returns:
            Loaded configuration dictionary.

        Raises:
            ConfigurationError: If file cannot be loaded.
        """
        load_path = path or self.config_path
        if not load_path:
            return {}

        try:
            with open(load_path, encoding="utf-8") as f:
                text = f.read()
        except FileNotFoundError as e:
            raise ConfigurationError(
                f"Configuration file not found: {load_path}",
                config_key=str(load_path),
                details={"path": str(load_path)},
            ) from e

        return self.load_text(text, source=str(load_path))

    def load_text(self, text: str, source: str = "<string>") -> dict[str, Any]:
        """Parse YAML text into a configuration dictionary.

        Raises:
            ConfigurationError: On invalid YAML or a non-mapping document.
        """
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in configuration: {source}",
                config_key=source,
                details={"error": str(e)},
            ) from e

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Configuration must be a mapping: {source}",
                config_key=source,
            )

        self._config = data
        return self._config

    def load_env(self, env_var: str) -> dict[str, Any] | None:
        """Load a base64-encoded YAML document from an environment variable.

        Args:
            env_var: Name of the environment variable.

        Returns:
            Configuration dictionary, or None when the variable is unset or empty.

        Raises:
            ConfigurationError: If the value cannot be decoded or parsed.
        """
        encoded = os.environ.get(env_var)
        if not encoded:
            return None

        try:
            text = base64.b64decode(encoded, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as e:
            raise ConfigurationError(
                f"Failed to decode environment variable '{env_var}'",
                config_key=env_var,
                details={"error": str(e)},
            ) from e

        return self.load_text(text, source=env_var)

    def get_section(self, section: str) -> dict[str, Any]:
        """Get an entire configuration section."""
        result = self._config.get(section, {})
        return result if isinstance(result, dict) else {}
