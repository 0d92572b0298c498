"""
Models package for the Neo4j MCP server.

This package contains the data models shared by the connection manager,
the tools and the transports:
- connection: configuration, state and status report
- query: query request/response and database info
- errors: error responses
- tool: transport-agnostic tool replies
"""

from .connection import ConnectionConfig, ConnectionInfo, ConnectionState, ConnectionStatus
from .query import DatabaseInfo, QueryRequest, QueryResponse, QuerySummary
from .errors import ErrorResponse, create_error_response, is_error_response
from .tool import ContentItem, ResourceItem, TextItem, ToolResponse

__all__ = [
    "ConnectionConfig",
    "ConnectionInfo",
    "ConnectionState",
    "ConnectionStatus",
    "DatabaseInfo",
    "QueryRequest",
    "QueryResponse",
    "QuerySummary",
    "ErrorResponse",
    "create_error_response",
    "is_error_response",
    "ContentItem",
    "ResourceItem",
    "TextItem",
    "ToolResponse",
]
