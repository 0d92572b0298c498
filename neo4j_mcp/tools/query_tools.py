#!/usr/bin/env python3
"""
Query Tools for the Neo4j MCP Server.

This module provides Cypher execution and database introspection tools.
Query records are returned as an embedded JSON resource next to a short
textual summary.
"""

import logging
from typing import Any, Dict, List, Optional

from ..database import get_connection_manager
from ..models import (
    ErrorResponse,
    ResourceItem,
    TextItem,
    ToolResponse,
    is_error_response
)
from .registry import tool_boundary

logger = logging.getLogger(__name__)


def _error_lines(prefix: str, error: ErrorResponse, always_show_code: bool = False) -> List[str]:
    lines = [f"{prefix}: {error.error}"]
    if error.code or always_show_code:
        lines.append(f"Error code: {error.code or 'N/A'}")
    if error.stack:
        lines.append(f"Stack trace: {error.stack}")
    return lines


# ================================
# Query Tools
# ================================

@tool_boundary("Error executing query")
async def query(query: str, params: Optional[Dict[str, Any]] = None) -> ToolResponse:
    """
    Execute a Cypher query against the Neo4j database.

    Args:
        query: Cypher query to execute
        params: Optional query parameters

    Returns:
        ToolResponse: Record count, records as a JSON resource and query time,
        or the error message, code and (outside production) stack trace
    """
    result = await get_connection_manager().execute_query({"query": query, "params": params})

    if is_error_response(result):
        logger.error(f"Error response from Neo4j service: {result.error}")
        return ToolResponse.text(
            *_error_lines("Error executing query", result, always_show_code=True),
            is_error=True
        )

    return ToolResponse(content=[
        TextItem(text=f"Query executed successfully. Found {len(result.records)} records."),
        ResourceItem.from_json(result.records),
        TextItem(text=f"Query time: {result.summary.result_available_after}ms"),
    ])


@tool_boundary("Error retrieving database info")
async def get_database_info() -> ToolResponse:
    """
    Retrieve information about the connected Neo4j database.

    Returns:
        ToolResponse: Version, edition, database name, counts, labels and
        relationship types, or error text
    """
    info = await get_connection_manager().get_database_info()

    if is_error_response(info):
        return ToolResponse.text(*_error_lines("Error retrieving database info", info), is_error=True)

    return ToolResponse.text(
        "Neo4j Database Information:",
        f"Version: {info.version} ({info.edition})",
        f"Database: {info.database}",
        f"Node count: {info.node_count}",
        f"Relationship count: {info.relationship_count}",
        f"Available labels: {', '.join(info.labels)}",
        f"Relationship types: {', '.join(info.relationship_types)}",
    )


__all__ = ["query", "get_database_info"]
