"""
Database package: Neo4j connection management and value normalization.
"""

from typing import Optional

from .base import (
    Neo4jMCPError,
    ValidationError,
    DatabaseConnectionError,
    QueryExecutionError,
    ConnectionStateError,
    NotInitializedError,
    NotConnectedError
)
from .neo4j_adapter import Neo4jConnectionManager
from .normalizer import normalize_record, normalize_value


_connection_manager: Optional[Neo4jConnectionManager] = None


def get_connection_manager() -> Neo4jConnectionManager:
    """
    Get the process-wide connection manager, creating it on first use.

    Returns:
        Neo4jConnectionManager: The shared manager instance
    """
    global _connection_manager
    if _connection_manager is None:
        _connection_manager = Neo4jConnectionManager()
    return _connection_manager


def reset_connection_manager() -> None:
    """Forget the shared manager (the next call creates a fresh one)."""
    global _connection_manager
    _connection_manager = None


# Export all public classes and functions
__all__ = [
    # Exceptions
    "Neo4jMCPError",
    "ValidationError",
    "DatabaseConnectionError",
    "QueryExecutionError",
    "ConnectionStateError",
    "NotInitializedError",
    "NotConnectedError",
    # Connection management
    "Neo4jConnectionManager",
    "get_connection_manager",
    "reset_connection_manager",
    # Normalization
    "normalize_record",
    "normalize_value"
]
