"""
Tools package: the Neo4j operations exposed to agents.

TOOL_REGISTRY maps the public tool names to their handlers; both transports
dispatch through it.
"""

from ..models import ConnectionConfig, QueryRequest
from .registry import ToolDefinition, ToolRegistry, tool_boundary
from .connection_tools import connect, connect_with_env, get_connection_status, disconnect
from .query_tools import query, get_database_info


def build_registry() -> ToolRegistry:
    """Create a registry holding every Neo4j tool."""
    registry = ToolRegistry()
    registry.register(ToolDefinition(
        name="Connect",
        description="Connect to a Neo4j database with explicit credentials",
        handler=connect,
        input_model=ConnectionConfig
    ))
    registry.register(ToolDefinition(
        name="ConnectWithEnv",
        description="Connect to Neo4j using environment variables",
        handler=connect_with_env
    ))
    registry.register(ToolDefinition(
        name="Query",
        description="Execute a Cypher query against the Neo4j database",
        handler=query,
        input_model=QueryRequest
    ))
    registry.register(ToolDefinition(
        name="GetDatabaseInfo",
        description="Retrieve information about the connected Neo4j database",
        handler=get_database_info
    ))
    registry.register(ToolDefinition(
        name="GetConnectionStatus",
        description="Get the current Neo4j connection status",
        handler=get_connection_status
    ))
    registry.register(ToolDefinition(
        name="Disconnect",
        description="Disconnect from the Neo4j database",
        handler=disconnect
    ))
    return registry


TOOL_REGISTRY = build_registry()


__all__ = [
    "ToolDefinition",
    "ToolRegistry",
    "tool_boundary",
    "build_registry",
    "TOOL_REGISTRY",
    "connect",
    "connect_with_env",
    "get_connection_status",
    "disconnect",
    "query",
    "get_database_info",
]
