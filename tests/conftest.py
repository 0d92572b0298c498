#!/usr/bin/env python3
"""
Pytest configuration and shared fixtures for the test suite.

This module provides stand-ins for the Neo4j driver (driver, session,
result), a factory for real driver graph values (nodes, relationships,
paths), and connection manager fixtures wired to the stand-ins.
"""

import os
import sys
from typing import Any, Dict, Iterable, List, Optional
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import pytest_asyncio

# Keep test runs from writing log files
os.environ.setdefault("LOG_FILE", "")

# Add project root to path for all tests
sys.path.insert(0, '.')

from neo4j.graph import Graph, Node, Path, Relationship

from neo4j_mcp.database import Neo4jConnectionManager, reset_connection_manager, get_connection_manager


# ================================
# Graph Value Factories
# ================================

class GraphFactory:
    """
    Builds real driver graph values sharing one Graph.

    Relationships are wired to their endpoints the way the driver's
    hydration does it, so Path can walk them.
    """

    def __init__(self):
        self.graph = Graph()

    def node(self, number: int, labels: Iterable[str], properties: Optional[Dict[str, Any]] = None) -> Node:
        """Node with a Neo4j 5 style element id."""
        return Node(self.graph, f"4:7f3c2a:{number}", number, labels, properties)

    def relationship(
        self,
        number: int,
        rel_type: str,
        start: Node,
        end: Node,
        properties: Optional[Dict[str, Any]] = None
    ) -> Relationship:
        relationship_class = self.graph.relationship_type(rel_type)
        relationship = relationship_class(self.graph, f"5:7f3c2a:{number}", number, properties or {})
        relationship._start_node = start
        relationship._end_node = end
        return relationship

    def path(self, nodes: List[Node], relationships: List[Relationship]) -> Path:
        """Path starting at nodes[0]; the remaining nodes follow from the relationships."""
        return Path(nodes[0], *relationships)


@pytest.fixture
def graph_factory():
    """Factory for driver graph values."""
    return GraphFactory()


# ================================
# Driver Fixtures
# ================================

def make_result(
    records: Optional[List[Dict[str, Any]]] = None,
    single: Optional[Dict[str, Any]] = None,
    available_after: int = 3,
    consumed_after: int = 1
) -> MagicMock:
    """Build an AsyncResult stand-in supporting async iteration, consume() and single()."""
    result = MagicMock()
    result.__aiter__.return_value = records or []
    result.consume = AsyncMock(return_value=MagicMock(
        result_available_after=available_after,
        result_consumed_after=consumed_after
    ))
    result.single = AsyncMock(return_value=single)
    return result


@pytest.fixture
def result_factory():
    """Factory for AsyncResult stand-ins."""
    return make_result


@pytest.fixture
def mock_session():
    """AsyncSession stand-in; run() answers the verification query by default."""
    session = MagicMock()
    session.run = AsyncMock(return_value=make_result())
    session.close = AsyncMock()
    return session


@pytest.fixture
def mock_driver(mock_session):
    """AsyncDriver stand-in handing out mock_session."""
    driver = MagicMock()
    driver.session = MagicMock(return_value=mock_session)
    driver.close = AsyncMock()
    return driver


@pytest.fixture
def patched_graph_database(mock_driver):
    """Route AsyncGraphDatabase.driver() to mock_driver."""
    with patch('neo4j_mcp.database.neo4j_adapter.AsyncGraphDatabase') as mock_graph_database:
        mock_graph_database.driver.return_value = mock_driver
        yield mock_graph_database


@pytest.fixture
def connection_config() -> Dict[str, Any]:
    """Valid explicit connection settings."""
    return {
        "uri": "neo4j://db.example.com:7687",
        "username": "neo4j",
        "password": "s3cret",
        "database": "movies"
    }


@pytest.fixture
def manager() -> Neo4jConnectionManager:
    """A fresh connection manager with no driver options."""
    return Neo4jConnectionManager(driver_options={})


@pytest_asyncio.fixture
async def connected_manager(manager, patched_graph_database, connection_config, mock_session):
    """A manager connected through the mock driver, with call history cleared."""
    await manager.connect(connection_config)
    mock_session.run.reset_mock()
    mock_session.close.reset_mock()
    return manager


@pytest.fixture
def shared_manager():
    """Reset the process-wide manager around a test and return it."""
    reset_connection_manager()
    manager = get_connection_manager()
    manager._driver_options = {}
    yield manager
    reset_connection_manager()


# ================================
# Test Environment Configuration
# ================================

def pytest_configure(config):
    """Configure pytest environment."""
    config.addinivalue_line("markers", "integration: mark test as integration test")
    config.addinivalue_line("markers", "edge_case: mark test as edge case test")


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers based on test names."""
    for item in items:
        if "integration" in item.name.lower() or "lifecycle" in item.name.lower():
            item.add_marker(pytest.mark.integration)
        if "edge" in item.name.lower() or "invalid" in item.name.lower():
            item.add_marker(pytest.mark.edge_case)
