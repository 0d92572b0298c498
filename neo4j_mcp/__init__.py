"""
Neo4j MCP Server

Exposes a Neo4j database to AI agents as a small set of tools:
- Connection management: connect, connection status, disconnect
- Querying: Cypher execution with graph values normalized to plain data
- Introspection: version, counts, labels and relationship types
"""

__version__ = "1.0.0"
__author__ = "Neo4j MCP Team"
__description__ = "Model Context Protocol server for Neo4j graph databases"
