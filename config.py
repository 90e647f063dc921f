"""Centralized configuration management for the Symb0l API."""

import os
import logging
from typing import Optional, List, Dict, Any
from dataclasses import dataclass, field, asdict
from pathlib import Path
import json

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ServerConfig:
    """HTTP server configuration."""
    host: str = "0.0.0.0"
    port: int = 3000
    debug: bool = False


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    format: str = "json"  # json or text
    file: Optional[str] = None
    max_file_size: int = 10485760  # 10MB
    backup_count: int = 5


@dataclass
class AppConfig:
    """Main application configuration."""
    environment: str = "development"
    service_name: str = "Symb0l API"
    versions_file: Optional[str] = None  # JSON version config; built-in data when unset
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def __post_init__(self):
        """Apply environment variable overrides."""
        self.environment = os.getenv("SYMBOL_API_ENV", self.environment)

        if os.getenv("SYMBOL_API_VERSIONS_FILE"):
            self.versions_file = os.getenv("SYMBOL_API_VERSIONS_FILE")

        if os.getenv("SYMBOL_API_HOST"):
            self.server.host = os.getenv("SYMBOL_API_HOST")
        if os.getenv("SYMBOL_API_PORT"):
            try:
                self.server.port = int(os.getenv("SYMBOL_API_PORT"))
            except ValueError:
                logger.warning(f"Ignoring non-numeric SYMBOL_API_PORT: {os.getenv('SYMBOL_API_PORT')}")
        if os.getenv("SYMBOL_API_DEBUG"):
            self.server.debug = os.getenv("SYMBOL_API_DEBUG").lower() in ("1", "true", "yes")

        if os.getenv("SYMBOL_API_LOG_LEVEL"):
            self.logging.level = os.getenv("SYMBOL_API_LOG_LEVEL").upper()
        if os.getenv("SYMBOL_API_LOG_FORMAT"):
            self.logging.format = os.getenv("SYMBOL_API_LOG_FORMAT").lower()
        if os.getenv("SYMBOL_API_LOG_FILE"):
            self.logging.file = os.getenv("SYMBOL_API_LOG_FILE")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_config(config_file: Optional[str] = None) -> AppConfig:
    """Load configuration from file and environment variables."""

    config_data: Dict[str, Any] = {}
    if config_file and Path(config_file).exists():
        try:
            with open(config_file, 'r') as f:
                config_data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to load config file {config_file}: {e}")

    config = AppConfig(
        server=ServerConfig(**config_data.get("server", {})),
        logging=LoggingConfig(**config_data.get("logging", {})),
        **{key: value for key, value in config_data.items()
           if key in ("environment", "service_name", "versions_file")},
    )
    return config


def validate_config(config: AppConfig) -> List[str]:
    """Validate configuration and return list of errors."""
    errors = []

    if not 0 < config.server.port < 65536:
        errors.append(f"Invalid port: {config.server.port}")

    if config.logging.level.upper() not in LOG_LEVELS:
        errors.append(f"Invalid log level: {config.logging.level}")

    if config.logging.format not in ("json", "text"):
        errors.append(f"Invalid log format: {config.logging.format} (expected json or text)")

    if config.versions_file and not Path(config.versions_file).exists():
        errors.append(f"Version configuration file not found: {config.versions_file}")

    return errors
