#!/usr/bin/env python3
"""
Neo4j MCP Server Module

This module implements a Model Context Protocol (MCP) server that gives
agents access to a Neo4j database. It exposes connection management, Cypher
execution and database introspection tools through FastMCP, over stdio by
default or streamable HTTP.

The same tools can be served as plain JSON over HTTP (see neo4j_mcp.server)
with the --http flag.
"""

import argparse
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional, Union

from mcp.server.fastmcp import FastMCP
from mcp.types import EmbeddedResource, TextContent, TextResourceContents

from . import __version__
from .config import logging_config, server_config
from .database import get_connection_manager
from .models import ResourceItem, ToolResponse
from .tools import TOOL_REGISTRY


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(server: FastMCP):
    """Release the Neo4j driver when the MCP session ends."""
    logger.info(f"Starting Neo4j MCP Server v{__version__}...")
    try:
        yield {}
    finally:
        await get_connection_manager().disconnect()
        logger.info("Shutting down Neo4j MCP Server...")


mcp = FastMCP(
    "neo4j-mcp",
    instructions="""
    This provides access to a Neo4j graph database. Connect first (Connect or
    ConnectWithEnv), then run Cypher with Query or inspect the database with
    GetDatabaseInfo.
    """,
    lifespan=lifespan
)


def to_mcp_content(response: ToolResponse) -> List[Union[TextContent, EmbeddedResource]]:
    """
    Render a ToolResponse as MCP content blocks.

    Args:
        response: Transport-agnostic tool reply

    Returns:
        List[Union[TextContent, EmbeddedResource]]: MCP content, in order
    """
    blocks = []
    for item in response.content:
        if isinstance(item, ResourceItem):
            blocks.append(EmbeddedResource(
                type="resource",
                resource=TextResourceContents(uri=item.uri, mimeType=item.mime_type, text=item.text)
            ))
        else:
            blocks.append(TextContent(type="text", text=item.text))
    return blocks


async def _call(name: str, **arguments):
    return to_mcp_content(await TOOL_REGISTRY.get(name).handler(**arguments))


@mcp.tool(name="Connect",
        description="Connect to a Neo4j database with explicit credentials")
async def connect_tool(uri: str, username: str, password: str, database: Optional[str] = None):
    """Connect to a Neo4j database.

    Args:
        uri (str): Neo4j database URI (e.g., neo4j://localhost:7687)
        username (str): Neo4j database username
        password (str): Neo4j database password
        database (str, optional): Neo4j database name
    """
    return await _call("Connect", uri=uri, username=username, password=password, database=database)


@mcp.tool(name="ConnectWithEnv",
        description="Connect to Neo4j using environment variables")
async def connect_with_env_tool():
    """Connect using NEO4J_URI, NEO4J_USERNAME, NEO4J_PASSWORD and NEO4J_DATABASE."""
    return await _call("ConnectWithEnv")


@mcp.tool(name="Query",
        description="Execute a Cypher query against the Neo4j database")
async def query_tool(query: str, params: Optional[Dict[str, Any]] = None):
    """Execute a Cypher query.

    Args:
        query (str): Cypher query to execute
        params (dict, optional): Query parameters
    """
    return await _call("Query", query=query, params=params)


@mcp.tool(name="GetDatabaseInfo",
        description="Retrieve information about the connected Neo4j database")
async def get_database_info_tool():
    """Retrieve version, counts, labels and relationship types."""
    return await _call("GetDatabaseInfo")


@mcp.tool(name="GetConnectionStatus",
        description="Get the current Neo4j connection status")
async def get_connection_status_tool():
    """Report the connection status."""
    return await _call("GetConnectionStatus")


@mcp.tool(name="Disconnect",
        description="Disconnect from the Neo4j database")
async def disconnect_tool():
    """Disconnect from Neo4j."""
    return await _call("Disconnect")


def run_http_server(host: str, port: int, log_level: str) -> None:
    """Serve the tools as JSON over HTTP with uvicorn."""
    import uvicorn

    logger.info(f"Starting HTTP command server on {host}:{port}")
    uvicorn.run("neo4j_mcp.server:app", host=host, port=port, log_level=log_level.lower())


def main():
    """Run the MCP server with CLI argument support.

    Command line arguments:
        --transport: stdio (default) or streamable-http
        --http: Serve the JSON-over-HTTP command API instead of MCP
        --host / --port: Bind address for HTTP transports
        --log-level: Set logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Errors escaping the transport are logged and do not produce a traceback
    exit; Ctrl+C shuts down cleanly.
    """
    parser = argparse.ArgumentParser(description='Neo4j Model Context Protocol (MCP) server')
    parser.add_argument('--transport', choices=['stdio', 'streamable-http'], default='stdio',
                        help='MCP transport (default: stdio)')
    parser.add_argument('--http', action='store_true',
                        help='Serve the JSON-over-HTTP command API instead of MCP')
    parser.add_argument('--host', type=str, default=server_config.host,
                        help='Host for HTTP transports')
    parser.add_argument('--port', type=int, default=server_config.port,
                        help='Port for HTTP transports')
    parser.add_argument('--log-level', type=str, default=logging_config.level,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        help='Set logging level (default: LOG_LEVEL or INFO)')

    args = parser.parse_args()

    # Configure logging first
    logging_config.configure_logging(args.log_level)

    try:
        if args.http:
            run_http_server(args.host, args.port, args.log_level)
        elif args.transport == 'streamable-http':
            mcp.settings.host = args.host
            mcp.settings.port = args.port
            logger.info(f"Neo4j MCP Server running on streamable HTTP at {args.host}:{args.port}")
            mcp.run(transport='streamable-http')
        else:
            logger.info("Neo4j MCP Server running on stdio")
            mcp.run()
    except KeyboardInterrupt:
        logger.info("Shutting down MCP server...")
    except Exception:
        logger.exception("Fatal error in Neo4j MCP Server")


if __name__ == '__main__':
    main()
