#!/usr/bin/env python3
"""
Configuration Management for the Neo4j MCP Server.

This module provides centralized configuration management including:
- Environment variable loading (.env support)
- Default Neo4j connection settings and driver options
- Server, CORS and environment-mode settings
- Logging configuration
"""

import os
import logging
from typing import Dict, Any, Optional
from dotenv import load_dotenv


# ================================
# Environment Setup
# ================================

# Load environment variables from .env file
load_dotenv()


# ================================
# Configuration Classes
# ================================

class DatabaseConfig:
    """Neo4j connection defaults sourced from the environment."""

    DEFAULT_URI = "neo4j://localhost:7687"
    DEFAULT_USERNAME = "neo4j"

    def get_connection_settings(self) -> Dict[str, Optional[str]]:
        """
        Read the default connection settings.

        The environment is read on every call so that a running server
        picks up changes made after import (e.g. by a reloaded .env file).

        Returns:
            Dict[str, Optional[str]]: uri, username, password and database
        """
        return {
            "uri": os.getenv("NEO4J_URI", self.DEFAULT_URI),
            "username": os.getenv("NEO4J_USERNAME", self.DEFAULT_USERNAME),
            "password": os.getenv("NEO4J_PASSWORD", ""),
            "database": os.getenv("NEO4J_DATABASE") or None,
        }

    def get_driver_options(self) -> Dict[str, Any]:
        """
        Options passed straight through to the Neo4j driver.

        Returns:
            Dict[str, Any]: Keyword arguments for AsyncGraphDatabase.driver
        """
        return {
            "max_connection_pool_size": int(os.getenv("MAX_CONNECTION_POOL_SIZE", "10")),
            "connection_acquisition_timeout": float(os.getenv("DATABASE_TIMEOUT", "30")),
        }


class ServerConfig:
    """Server configuration management."""

    def __init__(self):
        self.host = os.getenv("MCP_SERVER_HOST", "localhost")
        self.port = int(os.getenv("MCP_SERVER_PORT", "8000"))
        self.debug = os.getenv("DEBUG", "false").lower() == "true"
        self.environment = os.getenv("ENVIRONMENT", "development")

        # CORS settings
        self.cors_origins = self._parse_cors_origins()
        self.cors_credentials = os.getenv("CORS_ALLOW_CREDENTIALS", "true").lower() == "true"
        self.cors_methods = ["GET", "POST", "OPTIONS"]
        self.cors_headers = ["Content-Type"]

    def _parse_cors_origins(self) -> list:
        """Parse CORS origins from environment variable."""
        origins_str = os.getenv("CORS_ORIGINS", "*")
        if origins_str == "*":
            return ["*"]
        return [origin.strip() for origin in origins_str.split(",") if origin.strip()]


class LoggingConfig:
    """Logging configuration management."""

    # Third-party loggers that follow the configured level
    LIBRARY_LOGGERS = ["neo4j", "mcp", "uvicorn"]

    def __init__(self):
        self.level = os.getenv("LOG_LEVEL", "INFO").upper()
        self.log_file = os.getenv("LOG_FILE", "logs/mcp-server.log")
        self.format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

        # Ensure logs directory exists
        if self.log_file:
            log_dir = os.path.dirname(self.log_file)
            if log_dir and not os.path.exists(log_dir):
                os.makedirs(log_dir, exist_ok=True)

    def configure_logging(self, level: Optional[str] = None):
        """
        Configure Python logging.

        The stream handler writes to stderr; stdout carries the stdio
        transport and must only ever contain protocol messages.

        Args:
            level: Optional level name overriding LOG_LEVEL
        """
        if level:
            self.level = level.upper()

        numeric_level = getattr(logging, self.level, None)
        if not isinstance(numeric_level, int):
            raise ValueError(f"Invalid log level: {self.level}")

        handlers = [logging.StreamHandler()]
        if self.log_file:
            handlers.append(logging.FileHandler(self.log_file))

        logging.basicConfig(
            level=numeric_level,
            format=self.format,
            handlers=handlers,
            force=True
        )

        for logger_name in self.LIBRARY_LOGGERS:
            logging.getLogger(logger_name).setLevel(numeric_level)


# ================================
# Global Configuration Instance
# ================================

class Config:
    """Main configuration class that aggregates all configuration sections."""

    def __init__(self):
        self.database = DatabaseConfig()
        self.server = ServerConfig()
        self.logging = LoggingConfig()

        # Configure logging on initialization
        self.logging.configure_logging()

    def validate_configuration(self) -> Dict[str, Any]:
        """
        Validate the configuration and return status.

        Returns:
            Dict[str, Any]: Validation results with any errors or warnings
        """
        settings = self.database.get_connection_settings()
        results = {
            "valid": True,
            "errors": [],
            "warnings": [],
            "environment": self.server.environment
        }

        for field in ("uri", "username", "password"):
            if not settings[field]:
                results["valid"] = False
                results["errors"].append(f"NEO4J_{field.upper()} is not set")

        if self.server.debug and self.server.environment == "production":
            results["warnings"].append("Debug mode enabled in production environment")

        if "localhost" in (settings["uri"] or ""):
            results["warnings"].append("Using localhost Neo4j URI - ensure Neo4j is running")

        return results


# Create global configuration instance
config = Config()

# Convenience access to specific configurations
db_config = config.database
server_config = config.server
logging_config = config.logging


# ================================
# Environment Helpers
# ================================

def include_stack_traces() -> bool:
    """Stack traces are attached to error payloads outside production."""
    return os.getenv("ENVIRONMENT", "development").lower() != "production"


def get_environment_info() -> Dict[str, Any]:
    """
    Get environment information for debugging.

    Never includes the Neo4j password.

    Returns:
        Dict[str, Any]: Environment details and configuration status
    """
    settings = config.database.get_connection_settings()
    return {
        "neo4j_uri": settings["uri"],
        "neo4j_username": settings["username"],
        "neo4j_database": settings["database"] or "default",
        "server_host": config.server.host,
        "server_port": config.server.port,
        "environment": config.server.environment,
        "debug_mode": config.server.debug,
        "log_level": config.logging.level,
        "configuration_valid": config.validate_configuration()["valid"]
    }


def load_env_file(env_file: Optional[str] = None) -> bool:
    """
    Load environment variables from a specific file.

    Args:
        env_file: Path to environment file (defaults to .env)

    Returns:
        bool: True if file was loaded successfully
    """
    if env_file:
        return load_dotenv(env_file)
    return load_dotenv()


# ================================
# Module Exports
# ================================

__all__ = [
    # Configuration classes
    "Config",
    "DatabaseConfig",
    "ServerConfig",
    "LoggingConfig",

    # Global instances
    "config",
    "db_config",
    "server_config",
    "logging_config",

    # Environment helpers
    "include_stack_traces",
    "get_environment_info",
    "load_env_file"
]
