#!/usr/bin/env python3
"""
Connection Management Tools for the Neo4j MCP Server.

This module provides the connect, connect-with-environment, status and
disconnect tools. Each tool delegates to the shared connection manager and
renders the outcome as a ToolResponse.
"""

import logging
from typing import Optional

from ..database import get_connection_manager
from ..models import ConnectionConfig, ConnectionState, ToolResponse, is_error_response
from .registry import tool_boundary

logger = logging.getLogger(__name__)


# ================================
# Connection Tools
# ================================

@tool_boundary("Error connecting to Neo4j")
async def connect(
    uri: str,
    username: str,
    password: str,
    database: Optional[str] = None
) -> ToolResponse:
    """
    Connect to a Neo4j database with explicit credentials.

    Args:
        uri: Neo4j database URI (e.g., neo4j://localhost:7687)
        username: Neo4j database username
        password: Neo4j database password
        database: Optional database name (server default when omitted)

    Returns:
        ToolResponse: Confirmation or error text
    """
    manager = get_connection_manager()
    result = await manager.connect(ConnectionConfig(
        uri=uri or "",
        username=username or "",
        password=password or "",
        database=database
    ))

    if is_error_response(result):
        return ToolResponse.text(f"Error connecting to Neo4j: {result.error}", is_error=True)

    return ToolResponse.text("Successfully connected to Neo4j database")


@tool_boundary("Error connecting to Neo4j")
async def connect_with_env() -> ToolResponse:
    """
    Connect to Neo4j using NEO4J_URI, NEO4J_USERNAME, NEO4J_PASSWORD and NEO4J_DATABASE.

    Returns:
        ToolResponse: Resolved URI and database, or error text
    """
    manager = get_connection_manager()
    config = manager.get_default_config()
    result = await manager.connect(config)

    if is_error_response(result):
        return ToolResponse.text(f"Error connecting to Neo4j: {result.error}", is_error=True)

    return ToolResponse.text(
        f"Successfully connected to Neo4j database at {config.uri}",
        f"Using database: {config.database or 'default'}"
    )


@tool_boundary("Error retrieving connection status")
async def get_connection_status() -> ToolResponse:
    """
    Get the current Neo4j connection status.

    Returns:
        ToolResponse: Status line, connection details when connected, last error if any
    """
    status = get_connection_manager().status()

    lines = [f"Connection Status: {status.status.value.capitalize()}"]

    if status.status == ConnectionState.CONNECTED:
        uri = status.config.uri if status.config else "Unknown"
        database = (status.config.database if status.config else None) or "default"
        since = status.connection_time.isoformat() if status.connection_time else "Unknown"
        lines.extend([
            f"Connected to: {uri}",
            f"Database: {database}",
            f"Connected since: {since}",
        ])

    if status.last_error:
        lines.append(f"Last error: {status.last_error}")

    return ToolResponse.text(*lines)


@tool_boundary("Error disconnecting from Neo4j")
async def disconnect() -> ToolResponse:
    """
    Disconnect from the Neo4j database.

    Returns:
        ToolResponse: Confirmation text
    """
    await get_connection_manager().disconnect()
    return ToolResponse.text("Disconnected from Neo4j database")
