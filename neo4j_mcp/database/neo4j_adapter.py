"""
Neo4j Connection Manager

This module owns the single Neo4j driver handle of the server together with
its configuration and connection status, and runs queries through it using
the official Neo4j Python driver with async support.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Union

from neo4j import AsyncDriver, AsyncGraphDatabase, AsyncSession
from pydantic import ValidationError as SchemaValidationError

from ..config import db_config
from ..models import (
    ConnectionConfig,
    ConnectionState,
    ConnectionStatus,
    DatabaseInfo,
    ErrorResponse,
    QueryRequest,
    QueryResponse,
    QuerySummary,
    create_error_response,
)
from .base import (
    ConnectionStateError,
    DatabaseConnectionError,
    NotConnectedError,
    NotInitializedError,
    QueryExecutionError,
    ValidationError,
)
from .normalizer import normalize_record

logger = logging.getLogger(__name__)


VERIFY_QUERY = "RETURN 1"

COMPONENTS_QUERY = """
CALL dbms.components() YIELD versions, edition
RETURN versions[0] AS version, edition
"""

DATABASE_NAME_QUERY = """
CALL db.info() YIELD name
RETURN name
"""

COUNTS_QUERY = """
CALL { MATCH (n) RETURN count(n) AS nodeCount }
CALL { MATCH ()-[r]->() RETURN count(r) AS relationshipCount }
RETURN nodeCount, relationshipCount
"""

LABELS_QUERY = """
CALL db.labels() YIELD label
RETURN collect(label) AS labels
"""

RELATIONSHIP_TYPES_QUERY = """
CALL db.relationshipTypes() YIELD relationshipType
RETURN collect(relationshipType) AS relationshipTypes
"""


class Neo4jConnectionManager:
    """
    Owner of the Neo4j driver handle and the connection state machine.

    States move from ``disconnected`` to ``connected`` on a verified
    handshake, or to ``error`` when the handshake fails. A new ``connect``
    is accepted in any state and always releases the previous handle first.

    Public operations return their result model or an ErrorResponse; they do
    not raise for expected failures.
    """

    def __init__(self, driver_options: Optional[Dict[str, Any]] = None):
        """
        Initialize the connection manager.

        Args:
            driver_options: Extra keyword arguments for the driver (pool size,
                acquisition timeout); defaults come from the environment
        """
        self.driver: Optional[AsyncDriver] = None
        self.config: Optional[ConnectionConfig] = None
        self.state = ConnectionState.DISCONNECTED
        self.connection_time: Optional[datetime] = None
        self.last_error: Optional[str] = None
        self._driver_options = driver_options
        self._lock = asyncio.Lock()

    @property
    def is_connected(self) -> bool:
        """Check if a verified connection is held."""
        return self.driver is not None and self.state == ConnectionState.CONNECTED

    # Connection Management

    def get_default_config(self) -> ConnectionConfig:
        """
        Get default configuration from environment variables.

        Returns:
            ConnectionConfig: NEO4J_URI, NEO4J_USERNAME, NEO4J_PASSWORD, NEO4J_DATABASE
        """
        return ConnectionConfig(**db_config.get_connection_settings())

    @staticmethod
    def _validate_config(config: ConnectionConfig) -> None:
        if not config.uri:
            raise ValidationError("Neo4j URI is required")
        if not config.username:
            raise ValidationError("Neo4j username is required")
        if not config.password:
            raise ValidationError("Neo4j password is required")

    async def connect(
        self,
        config: Optional[Union[ConnectionConfig, Mapping[str, Any]]] = None
    ) -> Union[ConnectionStatus, ErrorResponse]:
        """
        Connect to Neo4j and verify the connection.

        If no config is provided, environment defaults are used. Missing
        credentials are reported without any network call. When the
        verification query fails the driver handle is kept and the status
        becomes ``error``.

        Args:
            config: Connection settings, as a model or a plain mapping

        Returns:
            Union[ConnectionStatus, ErrorResponse]: New status or the failure
        """
        try:
            if config is None:
                config = self.get_default_config()
            elif not isinstance(config, ConnectionConfig):
                config = ConnectionConfig(**config)
            self._validate_config(config)
        except ValidationError as e:
            logger.warning(f"Rejected connection request: {e}")
            return create_error_response(str(e), code=e.code)
        except SchemaValidationError as e:
            logger.warning(f"Rejected connection request: {e}")
            return create_error_response(f"Invalid connection configuration: {e}", code="ValidationError")

        async with self._lock:
            await self._close_driver()

            self.config = config
            try:
                self.driver = AsyncGraphDatabase.driver(
                    config.uri,
                    auth=(config.username, config.password),
                    **self._get_driver_options()
                )
            except Exception as e:
                self.driver = None
                self._mark_error(e)
                logger.error(f"Failed to create Neo4j driver for {config.uri}: {e}")
                return ErrorResponse.from_exception(e, "Failed to connect to Neo4j")

            try:
                await self._verify_connectivity()
            except DatabaseConnectionError as e:
                # The handle is kept; a later connect() replaces it
                self._mark_error(e)
                logger.error(f"Failed to connect to Neo4j at {config.uri}: {e}")
                return ErrorResponse.from_exception(e, "Failed to connect to Neo4j")

            self.state = ConnectionState.CONNECTED
            self.connection_time = datetime.now(timezone.utc)
            self.last_error = None
            logger.info(
                f"Successfully connected to Neo4j database at {config.uri} "
                f"(database: {config.database or 'default'})"
            )
            return self.status()

    async def _verify_connectivity(self) -> None:
        session = None
        try:
            session = self._open_session()
            result = await session.run(VERIFY_QUERY)
            await result.consume()
        except Exception as e:
            raise DatabaseConnectionError(str(e), code=getattr(e, "code", None)) from e
        finally:
            if session is not None:
                await session.close()

    def _get_driver_options(self) -> Dict[str, Any]:
        if self._driver_options is None:
            return db_config.get_driver_options()
        return self._driver_options

    def _mark_error(self, error: Exception) -> None:
        self.state = ConnectionState.ERROR
        self.connection_time = None
        self.last_error = str(error) or error.__class__.__name__

    async def _close_driver(self) -> None:
        """Close the current handle, if any; a failed close is only logged."""
        if self.driver is None:
            return
        try:
            await self.driver.close()
        except Exception as e:
            logger.warning(f"Error while closing Neo4j driver: {e}")
        finally:
            self.driver = None

    async def disconnect(self) -> None:
        """
        Close the Neo4j connection and clear the stored configuration.

        Also clears an ``error`` state left by a connect that failed before
        a driver handle existed.
        """
        async with self._lock:
            if self.driver is None and self.config is None and self.state == ConnectionState.DISCONNECTED:
                return
            await self._close_driver()
            self.config = None
            self.state = ConnectionState.DISCONNECTED
            self.connection_time = None
            self.last_error = None
            logger.info("Disconnected from Neo4j database")

    def status(self) -> ConnectionStatus:
        """
        Report the current connection status.

        Returns:
            ConnectionStatus: State, masked configuration, connection time, last error
        """
        return ConnectionStatus(
            status=self.state,
            config=self.config.masked() if self.config else None,
            connection_time=self.connection_time,
            last_error=self.last_error
        )

    # Query Operations

    def _require_connection(self) -> None:
        if self.driver is None:
            raise NotInitializedError("Neo4j driver not initialized. Call connect() first.")
        if self.state != ConnectionState.CONNECTED:
            raise NotConnectedError(
                f"Not connected to Neo4j (status: {self.state.value}). Call connect() first."
            )

    def _open_session(self) -> AsyncSession:
        database = self.config.database if self.config else None
        return self.driver.session(database=database)

    async def execute_query(
        self,
        request: Union[QueryRequest, Mapping[str, Any]]
    ) -> Union[QueryResponse, ErrorResponse]:
        """
        Execute a Cypher query against the connected database.

        The session is closed on every exit path. A failing query does not
        change the connection status.

        Args:
            request: Query and optional parameters, as a model or a plain mapping

        Returns:
            Union[QueryResponse, ErrorResponse]: Normalized records and timings
        """
        try:
            self._require_connection()
            if not isinstance(request, QueryRequest):
                request = QueryRequest(**request)
        except ConnectionStateError as e:
            logger.warning(f"Query rejected: {e}")
            return create_error_response(str(e), code=e.code)
        except (SchemaValidationError, TypeError) as e:
            logger.warning(f"Invalid query request: {e}")
            return create_error_response(f"Invalid query request: {e}", code="ValidationError")

        session = None
        try:
            session = self._open_session()
            result = await session.run(request.query, request.params or {})
            records = [normalize_record(record) async for record in result]
            summary = await result.consume()
        except Exception as e:
            logger.error(f"Error executing Neo4j query: {e}")
            return ErrorResponse.from_exception(e, "Error executing Neo4j query")
        finally:
            if session is not None:
                await session.close()

        logger.debug(f"Query returned {len(records)} records")
        return QueryResponse(
            records=records,
            summary=QuerySummary(
                result_available_after=summary.result_available_after or 0,
                result_consumed_after=summary.result_consumed_after or 0
            )
        )

    async def get_database_info(self) -> Union[DatabaseInfo, ErrorResponse]:
        """
        Collect version, counts, labels and relationship types.

        All administrative queries share one session; the first failure
        aborts the whole call.

        Returns:
            Union[DatabaseInfo, ErrorResponse]: Consolidated database information
        """
        try:
            self._require_connection()
        except ConnectionStateError as e:
            logger.warning(f"Database info rejected: {e}")
            return create_error_response(str(e), code=e.code)

        session = None
        try:
            session = self._open_session()
            components = await self._fetch_single(session, COMPONENTS_QUERY)
            database = await self._fetch_single(session, DATABASE_NAME_QUERY)
            counts = await self._fetch_single(session, COUNTS_QUERY)
            labels = await self._fetch_single(session, LABELS_QUERY)
            relationship_types = await self._fetch_single(session, RELATIONSHIP_TYPES_QUERY)

            return DatabaseInfo(
                version=str(components["version"]),
                edition=str(components["edition"]),
                database=str(database["name"]),
                node_count=int(counts["nodeCount"]),
                relationship_count=int(counts["relationshipCount"]),
                labels=list(labels["labels"]),
                relationship_types=list(relationship_types["relationshipTypes"])
            )
        except Exception as e:
            logger.error(f"Error retrieving Neo4j database info: {e}")
            return ErrorResponse.from_exception(e, "Error retrieving database info")
        finally:
            if session is not None:
                await session.close()

    @staticmethod
    async def _fetch_single(session: AsyncSession, query: str):
        result = await session.run(query)
        record = await result.single()
        if record is None:
            raise QueryExecutionError(f"No result returned for: {query.strip()}")
        return record
