"""
Connection models for the Neo4j MCP server.

This module defines the connection configuration supplied to the connection
manager and the status report it hands back to tools and transports.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ConnectionState(str, Enum):
    """Lifecycle states of the connection manager."""
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    ERROR = "error"


class ConnectionConfig(BaseModel):
    """
    Credentials and target of a Neo4j connection.

    Required fields default to empty strings so that missing values reach the
    connection manager, which reports them with a descriptive message instead
    of a schema error.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "uri": "neo4j://localhost:7687",
                "username": "neo4j",
                "password": "secret",
                "database": "neo4j"
            }
        }
    )

    uri: str = Field(default="", description="Neo4j database URI (e.g., neo4j://localhost:7687)")
    username: str = Field(default="", description="Neo4j database username")
    password: str = Field(default="", repr=False, description="Neo4j database password")
    database: Optional[str] = Field(default=None, description="Neo4j database name (optional)")

    @field_validator("uri", "username")
    @classmethod
    def strip_whitespace(cls, v):
        """Surrounding whitespace is never meaningful in a URI or username."""
        return v.strip() if isinstance(v, str) else v

    @field_validator("database")
    @classmethod
    def blank_database_is_default(cls, v):
        """An empty database name selects the server default."""
        if v is not None and not v.strip():
            return None
        return v

    def masked(self) -> "ConnectionInfo":
        """Connection details safe to report (no password)."""
        return ConnectionInfo(uri=self.uri, username=self.username, database=self.database)


class ConnectionInfo(BaseModel):
    """Connection details without credentials."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    uri: str
    username: str
    database: Optional[str] = None


class ConnectionStatus(BaseModel):
    """Snapshot of the connection manager state."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    status: ConnectionState = Field(
        default=ConnectionState.DISCONNECTED,
        description="Current connection state"
    )
    config: Optional[ConnectionInfo] = Field(
        default=None,
        description="Masked connection details, None when no configuration is held"
    )
    connection_time: Optional[datetime] = Field(
        default=None,
        description="When the current connection was verified (UTC)"
    )
    last_error: Optional[str] = Field(
        default=None,
        description="Reason of the most recent connection failure"
    )

    @property
    def is_connected(self) -> bool:
        return self.status == ConnectionState.CONNECTED
