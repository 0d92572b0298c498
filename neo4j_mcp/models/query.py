"""
Query models for the Neo4j MCP server.

Requests carry Cypher text plus parameters; responses carry records that have
already been through the value normalizer, so they contain plain data only.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class QueryRequest(BaseModel):
    """A Cypher query with optional parameters."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "query": "MATCH (p:Person {name: $name}) RETURN p",
                "params": {"name": "Alice"}
            }
        }
    )

    query: str = Field(..., description="Cypher query to execute")
    params: Optional[Dict[str, Any]] = Field(default=None, description="Query parameters (optional)")

    @field_validator("query")
    @classmethod
    def validate_query(cls, v):
        """Validate query text."""
        if not v.strip():
            raise ValueError("Query cannot be empty or whitespace only")
        return v


class QuerySummary(BaseModel):
    """Server-side timings of a query, in milliseconds."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    result_available_after: int = 0
    result_consumed_after: int = 0


class QueryResponse(BaseModel):
    """Normalized records and timing summary of an executed query."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    records: List[Dict[str, Any]] = Field(default_factory=list)
    summary: QuerySummary = Field(default_factory=QuerySummary)


class DatabaseInfo(BaseModel):
    """Consolidated result of the administrative info queries."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    version: str
    edition: str
    database: str
    node_count: int
    relationship_count: int
    labels: List[str] = Field(default_factory=list)
    relationship_types: List[str] = Field(default_factory=list)
