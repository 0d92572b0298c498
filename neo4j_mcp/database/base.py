"""
Exception taxonomy for the Neo4j connection layer.

The connection manager raises these internally and converts them to
ErrorResponse values at its public boundary.
"""

from typing import Optional


class Neo4jMCPError(Exception):
    """Base class for all connection-layer errors."""

    default_code: Optional[str] = None

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code or self.default_code


class ValidationError(Neo4jMCPError):
    """Raised when input fails validation before any network call."""
    default_code = "ValidationError"


class DatabaseConnectionError(Neo4jMCPError):
    """Raised when the handshake or verification query fails."""
    pass


class QueryExecutionError(Neo4jMCPError):
    """Raised when a query or an administrative info query fails."""
    pass


class ConnectionStateError(Neo4jMCPError):
    """Raised when an operation needs a connection that is not available."""
    pass


class NotInitializedError(ConnectionStateError):
    """Raised when no driver handle exists."""
    default_code = "DriverNotInitialized"


class NotConnectedError(ConnectionStateError):
    """Raised when a driver exists but the connection is not verified."""
    default_code = "NotConnected"
