#!/usr/bin/env python3
"""
Tests for the Neo4j connection manager.

The driver is replaced by the mock_driver / mock_session fixtures, so these
tests exercise the state machine, session handling and error reporting
without a running database.
"""

import asyncio
import json

import pytest

from neo4j_mcp.database import Neo4jConnectionManager
from neo4j_mcp.database.neo4j_adapter import COMPONENTS_QUERY, VERIFY_QUERY
from neo4j_mcp.models import (
    ConnectionConfig,
    ConnectionState,
    ConnectionStatus,
    DatabaseInfo,
    ErrorResponse,
    QueryRequest,
    QueryResponse,
    is_error_response
)


class CodedError(Exception):
    """Driver-style exception carrying a status code."""

    def __init__(self, message, code):
        super().__init__(message)
        self.code = code


class TestConnectValidation:
    """Test that incomplete settings are rejected before any network call."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("missing,message", [
        ("uri", "Neo4j URI is required"),
        ("username", "Neo4j username is required"),
        ("password", "Neo4j password is required"),
    ])
    async def test_missing_field_invalid(self, manager, patched_graph_database, connection_config, missing, message):
        connection_config[missing] = ""

        result = await manager.connect(connection_config)

        assert isinstance(result, ErrorResponse)
        assert result.error == message
        assert result.code == "ValidationError"
        patched_graph_database.driver.assert_not_called()

    @pytest.mark.asyncio
    async def test_validation_failure_keeps_state(self, manager, patched_graph_database):
        result = await manager.connect({"uri": "neo4j://localhost:7687"})

        assert is_error_response(result)
        assert manager.state == ConnectionState.DISCONNECTED
        assert manager.config is None
        assert manager.driver is None

    @pytest.mark.asyncio
    async def test_whitespace_uri_invalid(self, manager, patched_graph_database, connection_config):
        connection_config["uri"] = "   "

        result = await manager.connect(connection_config)

        assert result.error == "Neo4j URI is required"

    @pytest.mark.asyncio
    async def test_env_defaults_used_without_config(self, manager, patched_graph_database, monkeypatch):
        monkeypatch.setenv("NEO4J_URI", "neo4j://env-host:7687")
        monkeypatch.setenv("NEO4J_USERNAME", "reader")
        monkeypatch.setenv("NEO4J_PASSWORD", "")

        result = await manager.connect()

        assert result.error == "Neo4j password is required"
        patched_graph_database.driver.assert_not_called()


class TestConnect:
    """Test the connect handshake."""

    @pytest.mark.asyncio
    async def test_connect_success(self, manager, patched_graph_database, connection_config, mock_session):
        result = await manager.connect(connection_config)

        assert isinstance(result, ConnectionStatus)
        assert result.status == ConnectionState.CONNECTED
        assert result.connection_time is not None
        assert result.connection_time.tzinfo is not None
        assert result.last_error is None
        assert manager.is_connected

        patched_graph_database.driver.assert_called_once_with(
            "neo4j://db.example.com:7687",
            auth=("neo4j", "s3cret")
        )
        mock_session.run.assert_awaited_once_with(VERIFY_QUERY)
        mock_session.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_verification_uses_configured_database(
        self, manager, patched_graph_database, connection_config, mock_driver
    ):
        await manager.connect(connection_config)

        mock_driver.session.assert_called_with(database="movies")

    @pytest.mark.asyncio
    async def test_status_masks_password(self, manager, patched_graph_database, connection_config):
        await manager.connect(connection_config)

        dumped = manager.status().model_dump(mode="json", by_alias=True)

        assert dumped["config"] == {
            "uri": "neo4j://db.example.com:7687",
            "username": "neo4j",
            "database": "movies"
        }
        assert "s3cret" not in json.dumps(dumped)
        assert "connectionTime" in dumped

    @pytest.mark.asyncio
    async def test_accepts_model_config(self, manager, patched_graph_database, connection_config):
        result = await manager.connect(ConnectionConfig(**connection_config))

        assert result.status == ConnectionState.CONNECTED

    @pytest.mark.asyncio
    async def test_verification_failure(self, manager, patched_graph_database, connection_config, mock_session, mock_driver):
        """A failed verification query leaves the error state with the handle kept."""
        mock_session.run.side_effect = Exception("Connection refused")

        result = await manager.connect(connection_config)

        assert isinstance(result, ErrorResponse)
        assert result.error == "Failed to connect to Neo4j: Connection refused"
        assert manager.state == ConnectionState.ERROR
        assert manager.last_error == "Connection refused"
        assert manager.connection_time is None
        assert manager.driver is mock_driver
        assert not manager.is_connected
        mock_session.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_verification_failure_keeps_code(self, manager, patched_graph_database, connection_config, mock_session):
        mock_session.run.side_effect = CodedError("bad credentials", "Neo.ClientError.Security.Unauthorized")

        result = await manager.connect(connection_config)

        assert result.code == "Neo.ClientError.Security.Unauthorized"

    @pytest.mark.asyncio
    async def test_verification_session_open_failure(self, manager, patched_graph_database, connection_config, mock_driver):
        mock_driver.session.side_effect = Exception("Driver closed")

        result = await manager.connect(connection_config)

        assert result.error == "Failed to connect to Neo4j: Driver closed"
        assert manager.state == ConnectionState.ERROR

    @pytest.mark.asyncio
    async def test_driver_creation_failure(self, manager, patched_graph_database, connection_config):
        patched_graph_database.driver.side_effect = ValueError("Unsupported URI scheme")

        result = await manager.connect(connection_config)

        assert is_error_response(result)
        assert "Unsupported URI scheme" in result.error
        assert manager.driver is None
        assert manager.state == ConnectionState.ERROR

    @pytest.mark.asyncio
    async def test_reconnect_closes_previous_driver(self, manager, patched_graph_database, connection_config, mock_driver):
        await manager.connect(connection_config)
        mock_driver.close.assert_not_awaited()

        await manager.connect(connection_config)

        mock_driver.close.assert_awaited_once()
        assert patched_graph_database.driver.call_count == 2
        assert manager.is_connected

    @pytest.mark.asyncio
    async def test_reconnect_after_error_recovers(self, manager, patched_graph_database, connection_config, mock_session):
        mock_session.run.side_effect = Exception("Connection refused")
        await manager.connect(connection_config)

        mock_session.run.side_effect = None
        result = await manager.connect(connection_config)

        assert result.status == ConnectionState.CONNECTED
        assert result.last_error is None

    @pytest.mark.asyncio
    async def test_concurrent_connects_are_serialized(self, manager, patched_graph_database, connection_config, mock_driver):
        results = await asyncio.gather(
            manager.connect(connection_config),
            manager.connect(connection_config)
        )

        assert all(r.status == ConnectionState.CONNECTED for r in results)
        assert patched_graph_database.driver.call_count == 2
        mock_driver.close.assert_awaited_once()

    def test_default_driver_options_from_env(self, patched_graph_database, monkeypatch):
        monkeypatch.setenv("MAX_CONNECTION_POOL_SIZE", "25")
        monkeypatch.setenv("DATABASE_TIMEOUT", "12.5")

        options = Neo4jConnectionManager()._get_driver_options()

        assert options == {"max_connection_pool_size": 25, "connection_acquisition_timeout": 12.5}

    def test_get_default_config(self, manager, monkeypatch):
        monkeypatch.setenv("NEO4J_URI", "bolt://graph:7687")
        monkeypatch.setenv("NEO4J_USERNAME", "admin")
        monkeypatch.setenv("NEO4J_PASSWORD", "pw")
        monkeypatch.setenv("NEO4J_DATABASE", "")

        config = manager.get_default_config()

        assert config.uri == "bolt://graph:7687"
        assert config.username == "admin"
        assert config.password == "pw"
        assert config.database is None


class TestDisconnect:
    """Test releasing the driver."""

    @pytest.mark.asyncio
    async def test_disconnect_clears_state(self, connected_manager, mock_driver):
        await connected_manager.disconnect()

        mock_driver.close.assert_awaited_once()
        status = connected_manager.status()
        assert status.status == ConnectionState.DISCONNECTED
        assert status.config is None
        assert status.connection_time is None
        assert status.last_error is None
        assert connected_manager.driver is None

    @pytest.mark.asyncio
    async def test_disconnect_without_driver_is_noop(self, manager):
        await manager.disconnect()

        assert manager.status().status == ConnectionState.DISCONNECTED

    @pytest.mark.asyncio
    async def test_disconnect_twice(self, connected_manager, mock_driver):
        await connected_manager.disconnect()
        await connected_manager.disconnect()

        mock_driver.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_disconnect_clears_error_state(self, manager, patched_graph_database, connection_config, mock_session):
        mock_session.run.side_effect = Exception("Connection refused")
        await manager.connect(connection_config)

        await manager.disconnect()

        assert manager.state == ConnectionState.DISCONNECTED
        assert manager.last_error is None

    @pytest.mark.asyncio
    async def test_disconnect_after_driver_creation_failure(self, manager, patched_graph_database, connection_config):
        patched_graph_database.driver.side_effect = ValueError("Unsupported URI scheme")
        await manager.connect(connection_config)
        assert manager.driver is None
        assert manager.state == ConnectionState.ERROR

        await manager.disconnect()

        status = manager.status()
        assert status.status == ConnectionState.DISCONNECTED
        assert status.config is None
        assert status.connection_time is None
        assert status.last_error is None

    @pytest.mark.asyncio
    async def test_failed_close_still_disconnects(self, connected_manager, mock_driver):
        mock_driver.close.side_effect = Exception("socket already closed")

        await connected_manager.disconnect()

        assert connected_manager.state == ConnectionState.DISCONNECTED
        assert connected_manager.driver is None


class TestExecuteQuery:
    """Test Cypher execution."""

    @pytest.mark.asyncio
    async def test_query_before_connect(self, manager):
        result = await manager.execute_query({"query": "RETURN 1"})

        assert isinstance(result, ErrorResponse)
        assert result.code == "DriverNotInitialized"
        assert result.error == "Neo4j driver not initialized. Call connect() first."

    @pytest.mark.asyncio
    async def test_query_in_error_state(self, manager, patched_graph_database, connection_config, mock_session):
        mock_session.run.side_effect = Exception("Connection refused")
        await manager.connect(connection_config)
        mock_session.run.side_effect = None
        mock_session.run.reset_mock()

        result = await manager.execute_query({"query": "RETURN 1"})

        assert result.code == "NotConnected"
        assert "status: error" in result.error
        mock_session.run.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_query_success(self, connected_manager, mock_session, mock_driver, result_factory, graph_factory):
        node = graph_factory.node(7, ["Person"], {"name": "Alice"})
        mock_session.run.return_value = result_factory(
            records=[{"n": node, "total": 1}],
            available_after=5,
            consumed_after=2
        )

        result = await connected_manager.execute_query({
            "query": "MATCH (n:Person {name: $name}) RETURN n, 1 AS total",
            "params": {"name": "Alice"}
        })

        assert isinstance(result, QueryResponse)
        assert result.records == [{"n": {"name": "Alice", "id": 7, "labels": ["Person"]}, "total": 1}]
        assert result.summary.result_available_after == 5
        assert result.summary.result_consumed_after == 2
        mock_session.run.assert_awaited_once_with(
            "MATCH (n:Person {name: $name}) RETURN n, 1 AS total",
            {"name": "Alice"}
        )
        mock_driver.session.assert_called_with(database="movies")
        mock_session.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_query_without_params_sends_empty_map(self, connected_manager, mock_session):
        await connected_manager.execute_query(QueryRequest(query="RETURN 1"))

        mock_session.run.assert_awaited_once_with("RETURN 1", {})

    @pytest.mark.asyncio
    async def test_empty_result(self, connected_manager):
        result = await connected_manager.execute_query({"query": "MATCH (n:Nothing) RETURN n"})

        assert result.records == []

    @pytest.mark.asyncio
    async def test_summary_timings_default_to_zero(self, connected_manager, mock_session, result_factory):
        mock_session.run.return_value = result_factory(available_after=None, consumed_after=None)

        result = await connected_manager.execute_query({"query": "RETURN 1"})

        assert result.summary.result_available_after == 0
        assert result.summary.result_consumed_after == 0

    @pytest.mark.asyncio
    async def test_query_failure(self, connected_manager, mock_session):
        """A failing query closes its session once and keeps the connection."""
        mock_session.run.side_effect = CodedError("Invalid input 'MATC'", "Neo.ClientError.Statement.SyntaxError")

        result = await connected_manager.execute_query({"query": "MATC (n) RETURN n"})

        assert isinstance(result, ErrorResponse)
        assert result.error == "Error executing Neo4j query: Invalid input 'MATC'"
        assert result.code == "Neo.ClientError.Statement.SyntaxError"
        mock_session.close.assert_awaited_once()
        assert connected_manager.status().status == ConnectionState.CONNECTED

    @pytest.mark.asyncio
    async def test_failure_during_iteration_closes_session(self, connected_manager, mock_session, result_factory):
        result = result_factory()
        result.consume.side_effect = Exception("Transaction terminated")
        mock_session.run.return_value = result

        response = await connected_manager.execute_query({"query": "RETURN 1"})

        assert is_error_response(response)
        mock_session.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_session_open_failure_returns_error(self, connected_manager, mock_driver, mock_session):
        mock_driver.session.side_effect = Exception("Driver closed")

        result = await connected_manager.execute_query({"query": "RETURN 1"})

        assert isinstance(result, ErrorResponse)
        assert result.error == "Error executing Neo4j query: Driver closed"
        mock_session.close.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_stack_included_outside_production(self, connected_manager, mock_session, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "development")
        mock_session.run.side_effect = Exception("boom")

        result = await connected_manager.execute_query({"query": "RETURN 1"})

        assert result.stack is not None
        assert "boom" in result.stack

    @pytest.mark.asyncio
    async def test_stack_omitted_in_production(self, connected_manager, mock_session, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "production")
        mock_session.run.side_effect = Exception("boom")

        result = await connected_manager.execute_query({"query": "RETURN 1"})

        assert result.stack is None

    @pytest.mark.asyncio
    async def test_blank_query_invalid(self, connected_manager, mock_session):
        result = await connected_manager.execute_query({"query": "   "})

        assert result.code == "ValidationError"
        mock_session.run.assert_not_awaited()


class TestDatabaseInfo:
    """Test the administrative info queries."""

    @pytest.mark.asyncio
    async def test_database_info_before_connect(self, manager):
        result = await manager.get_database_info()

        assert result.code == "DriverNotInitialized"

    @pytest.mark.asyncio
    async def test_database_info_success(self, connected_manager, mock_session, result_factory):
        mock_session.run.side_effect = [
            result_factory(single={"version": "5.15.0", "edition": "enterprise"}),
            result_factory(single={"name": "movies"}),
            result_factory(single={"nodeCount": 171, "relationshipCount": 253}),
            result_factory(single={"labels": ["Movie", "Person"]}),
            result_factory(single={"relationshipTypes": ["ACTED_IN", "DIRECTED"]}),
        ]

        info = await connected_manager.get_database_info()

        assert isinstance(info, DatabaseInfo)
        assert info.version == "5.15.0"
        assert info.edition == "enterprise"
        assert info.database == "movies"
        assert info.node_count == 171
        assert info.relationship_count == 253
        assert info.labels == ["Movie", "Person"]
        assert info.relationship_types == ["ACTED_IN", "DIRECTED"]
        assert mock_session.run.await_count == 5
        mock_session.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_database_info_failure(self, connected_manager, mock_session):
        mock_session.run.side_effect = Exception("There is no procedure with the name `db.info`")

        result = await connected_manager.get_database_info()

        assert is_error_response(result)
        assert result.error.startswith("Error retrieving database info: ")
        mock_session.run.assert_awaited_once_with(COMPONENTS_QUERY)
        mock_session.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_database_info_session_open_failure(self, connected_manager, mock_driver):
        mock_driver.session.side_effect = Exception("Driver closed")

        result = await connected_manager.get_database_info()

        assert is_error_response(result)
        assert result.error == "Error retrieving database info: Driver closed"

    @pytest.mark.asyncio
    async def test_database_info_empty_result(self, connected_manager, mock_session, result_factory):
        mock_session.run.return_value = result_factory(single=None)

        result = await connected_manager.get_database_info()

        assert is_error_response(result)
        assert "No result returned" in result.error
        mock_session.close.assert_awaited_once()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
