"""
Configuration management for the CoMapeo Cloud client.

Usage:
    from comapeo_cloud.config.settings import Config
    config = Config(server_url="https://comapeo.example.org")
    client = config.create_client()

Settings are resolved in order of preference:
    1. Explicit arguments (CLI flags)
    2. Environment variables (optionally loaded from a .env file)
    3. YAML configuration file
    4. Built-in defaults

Environment Variables:
    SERVER_URL: Base URL of the CoMapeo Cloud server
    SERVER_BEARER_TOKEN: Bearer token for the server
    REQUEST_TIMEOUT: Per-request timeout in seconds
    EXPORT_SCRATCH_DIR: Scratch directory used while building an export
    EXPORT_MAX_WORKERS: Upper bound on concurrent attachment downloads
    COMAPEO_CONFIG: Path to a YAML configuration file
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_EXPORT_OUTPUT = "comapeo_export.zip"
DEFAULT_SCRATCH_DIR = "tmp_export"
DEFAULT_REQUEST_TIMEOUT = 300.0


@dataclass
class ServerCredentials:
    """CoMapeo Cloud server connection configuration."""
    server_url: str
    bearer_token: str

    def __post_init__(self):
        """Validate and normalize connection settings."""
        if not self.server_url.startswith(('http://', 'https://')):
            raise ValueError("Server URL must include protocol (http:// or https://)")

        self.server_url = self.server_url.rstrip('/')

        if not self.bearer_token:
            raise ValueError("Bearer token cannot be empty")


@dataclass
class ExportConfig:
    """GeoJSON/ZIP export configuration."""
    output: str = DEFAULT_EXPORT_OUTPUT
    scratch_dir: str = DEFAULT_SCRATCH_DIR
    max_workers: Optional[int] = None  # None means one worker per attachment

    def __post_init__(self):
        """Validate export configuration."""
        if not self.output:
            raise ValueError("Export output path cannot be empty")
        if not self.scratch_dir:
            raise ValueError("Scratch directory cannot be empty")
        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError("Max workers must be positive")


class ConfigurationError(Exception):
    """Raised when configuration is invalid or incomplete."""
    pass


class Config:
    """
    Centralized configuration for the CoMapeo Cloud client.

    Credentials come from CLI flags or environment variables; a YAML file can
    supply the server URL and export defaults shared across runs.

    Example:
        # Credentials from the environment / .env file
        config = Config()

        # Explicit overrides, as passed by --server-url/--server-token
        config = Config(server_url="http://localhost:3000", server_token="secret")

        # Shared defaults from YAML
        config = Config(config_file=Path("comapeo.yml"))
    """

    def __init__(self,
                 server_url: Optional[str] = None,
                 server_token: Optional[str] = None,
                 env_file: Optional[Path] = None,
                 config_file: Optional[Path] = None):
        """
        Initialize configuration.

        Args:
            server_url: Server URL override (wins over SERVER_URL)
            server_token: Bearer token override (wins over SERVER_BEARER_TOKEN)
            env_file: Explicit path to environment file
            config_file: Explicit path to YAML configuration file

        Raises:
            ConfigurationError: If required settings are missing or invalid
        """
        self._load_environment_variables(env_file)
        self._file_settings = self._load_config_file(config_file)

        self._load_server_config(server_url, server_token)
        self._load_request_config()
        self._load_export_config()

    def _load_environment_variables(self, env_file: Optional[Path]) -> None:
        """Load environment variables from an explicit or working-directory .env file."""
        if env_file:
            if not env_file.exists():
                raise ConfigurationError(f"Specified env file not found: {env_file}")
            load_dotenv(env_file)
            logger.debug(f"Loaded configuration from {env_file}")
            return

        default_env_file = Path.cwd() / ".env"
        if default_env_file.exists():
            load_dotenv(default_env_file)
            logger.debug(f"Loaded configuration from {default_env_file}")
        else:
            logger.debug("No .env file found, using system environment variables only")

    def _load_config_file(self, config_file: Optional[Path]) -> dict[str, Any]:
        """Read optional YAML settings."""
        if config_file is None:
            env_path = os.getenv("COMAPEO_CONFIG")
            if not env_path:
                return {}
            config_file = Path(env_path)

        if not config_file.exists():
            raise ConfigurationError(f"Configuration file not found: {config_file}")

        try:
            with open(config_file, encoding='utf-8') as f:
                settings = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file {config_file}: {e}")

        if not isinstance(settings, dict):
            raise ConfigurationError(f"Configuration file {config_file} must contain a mapping")

        logger.debug(f"Loaded settings file: {config_file}")
        return settings

    def _load_server_config(self, server_url: Optional[str], server_token: Optional[str]) -> None:
        """Resolve and validate server credentials."""
        url = server_url or os.getenv("SERVER_URL") or self._file_settings.get("server_url")
        token = server_token or os.getenv("SERVER_BEARER_TOKEN") or self._file_settings.get("server_token")

        if not url:
            raise ConfigurationError(
                "SERVER_URL must be provided either as environment variable or --server-url option"
            )
        if not token:
            raise ConfigurationError(
                "SERVER_BEARER_TOKEN must be provided either as environment variable or --server-token option"
            )

        try:
            self.server = ServerCredentials(server_url=str(url), bearer_token=str(token))
        except ValueError as e:
            raise ConfigurationError(f"Invalid server configuration: {e}")

    def _load_request_config(self) -> None:
        """Load HTTP request settings."""
        timeout = self._setting("REQUEST_TIMEOUT", self._file_settings.get("request_timeout"), DEFAULT_REQUEST_TIMEOUT)
        try:
            self.request_timeout = float(timeout)
        except (TypeError, ValueError):
            raise ConfigurationError(f"Invalid request timeout: {timeout!r}")

        if self.request_timeout <= 0:
            raise ConfigurationError("Request timeout must be positive")

    def _load_export_config(self) -> None:
        """Load export settings."""
        export_settings = self._file_settings.get("export") or {}

        output = export_settings.get("output", DEFAULT_EXPORT_OUTPUT)
        scratch_dir = self._setting("EXPORT_SCRATCH_DIR", export_settings.get("scratch_dir"), DEFAULT_SCRATCH_DIR)
        max_workers = self._setting("EXPORT_MAX_WORKERS", export_settings.get("max_workers"), None)

        try:
            self.export = ExportConfig(
                output=str(output),
                scratch_dir=str(scratch_dir),
                max_workers=int(max_workers) if max_workers is not None else None
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid export configuration: {e}")

    @staticmethod
    def _setting(env_name: str, file_value: Any, default: Any) -> Any:
        """Environment variable, then YAML value, then default."""
        value = os.getenv(env_name)
        if value:
            return value
        if file_value is not None:
            return file_value
        return default

    def create_client(self):
        """
        Create an authenticated API client for the configured server.

        Returns:
            ComapeoClient bound to the configured server and token
        """
        from ..client import ComapeoClient
        return ComapeoClient(self.server, timeout=self.request_timeout)

    def get_export_settings(self) -> dict[str, Any]:
        """
        Get export configuration settings as dictionary.

        Returns:
            Dictionary of export settings
        """
        return {
            'output': self.export.output,
            'scratch_dir': self.export.scratch_dir,
            'max_workers': self.export.max_workers,
        }

    def __repr__(self) -> str:
        """Safe string representation without credentials."""
        return (
            f"Config(server={self.server.server_url}, "
            f"timeout={self.request_timeout}, "
            f"scratch_dir={self.export.scratch_dir})"
        )
