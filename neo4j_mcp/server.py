#!/usr/bin/env python3
"""
HTTP Command Server for the Neo4j MCP tools.

This FastAPI server exposes the Neo4j tools as JSON over HTTP: a generic
dispatcher (POST /tools/{name}) that runs any registered tool, plus direct
command endpoints returning the connection manager's models. CORS is
configured from the environment.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import Body, FastAPI, Path
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from pydantic import ValidationError as SchemaValidationError

from . import __version__
from .config import server_config, get_environment_info
from .database import get_connection_manager
from .models import ConnectionConfig, ErrorResponse, QueryRequest, is_error_response
from .tools import TOOL_REGISTRY

# Logging is configured by the config module
logger = logging.getLogger(__name__)

SERVICE_NAME = "Neo4j MCP Server"

# Error codes reported for operations attempted without a verified connection
STATE_ERROR_CODES = {"DriverNotInitialized", "NotConnected"}


# ================================
# Pydantic Models for API
# ================================

class APIResponse(BaseModel):
    """Standard API response format."""
    success: bool = Field(..., description="Whether the operation was successful")
    data: Optional[Any] = Field(None, description="Response data")
    message: Optional[str] = Field(None, description="Response message")
    error: Optional[str] = Field(None, description="Error message if operation failed")


# ================================
# FastAPI Application Setup
# ================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info(f"Starting {SERVICE_NAME} (HTTP)...")

    yield

    await get_connection_manager().disconnect()
    logger.info(f"Shutting down {SERVICE_NAME} (HTTP)...")


# Initialize FastAPI app
app = FastAPI(
    title=SERVICE_NAME,
    description="Neo4j connection, Cypher query and introspection tools over HTTP",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# Configure CORS from centralized configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=server_config.cors_origins,
    allow_credentials=server_config.cors_credentials,
    allow_methods=server_config.cors_methods,
    allow_headers=server_config.cors_headers,
)


# ================================
# Exception Handlers
# ================================

@app.exception_handler(SchemaValidationError)
async def validation_exception_handler(request, exc):
    """Handle invalid tool arguments."""
    logger.warning(f"Validation error: {exc}")
    return JSONResponse(
        status_code=400,
        content=APIResponse(
            success=False,
            error="Validation error",
            message=str(exc)
        ).model_dump()
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc):
    """Handle all other exceptions."""
    logger.error(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content=APIResponse(
            success=False,
            error="Internal server error",
            message="An unexpected error occurred"
        ).model_dump()
    )


def error_json(error: ErrorResponse) -> JSONResponse:
    """Render an ErrorResponse; state errors map to 503, others to 400."""
    status_code = 503 if error.code in STATE_ERROR_CODES else 400
    return JSONResponse(status_code=status_code, content=error.model_dump(exclude_none=True))


# ================================
# Health Check Endpoints
# ================================

@app.get("/", response_model=APIResponse, tags=["Health"])
async def root():
    """Root endpoint - service banner."""
    return APIResponse(
        success=True,
        data={"service": SERVICE_NAME, "version": __version__, "status": "running"},
        message="Service is healthy"
    )


@app.get("/health", response_model=APIResponse, tags=["Health"])
async def health_check():
    """Health check including the Neo4j connection status."""
    status = get_connection_manager().status()
    return APIResponse(
        success=True,
        data={
            "service": SERVICE_NAME,
            "connection": status.model_dump(mode="json", by_alias=True)
        },
        message="Health check completed"
    )


@app.get("/environment", response_model=APIResponse, tags=["Health"])
async def get_environment():
    """Get environment configuration and status information."""
    return APIResponse(
        success=True,
        data=get_environment_info(),
        message="Environment information retrieved successfully"
    )


# ================================
# Tool Dispatch Endpoints
# ================================

@app.get("/tools", response_model=APIResponse, tags=["Tools"])
async def list_tools():
    """List registered tools with their argument schemas."""
    tools = [tool.describe() for tool in TOOL_REGISTRY]
    return APIResponse(
        success=True,
        data={"tools": tools, "count": len(tools)},
        message=f"{len(tools)} tools available"
    )


@app.post("/tools/{tool_name}", response_model=APIResponse, tags=["Tools"])
async def invoke_tool(
    tool_name: str = Path(..., description="Registered tool name"),
    arguments: Optional[Dict[str, Any]] = Body(None)
):
    """Invoke a registered tool by name."""
    tool = TOOL_REGISTRY.get(tool_name)
    if tool is None:
        return JSONResponse(
            status_code=404,
            content=APIResponse(
                success=False,
                error=f"Unknown command: {tool_name}"
            ).model_dump()
        )

    response = await tool.invoke(arguments)

    return APIResponse(
        success=not response.is_error,
        data=response.model_dump(by_alias=True),
        message=f"Tool {tool_name} completed",
        error=response.texts[0] if response.is_error and response.texts else None
    )


# ================================
# Direct Command Endpoints
# ================================

@app.post("/connect", tags=["Commands"])
async def connect_endpoint(config: Optional[ConnectionConfig] = Body(None)):
    """Connect with the given credentials, or with environment defaults when no body is sent."""
    result = await get_connection_manager().connect(config)
    if is_error_response(result):
        return error_json(result)
    return result.model_dump(mode="json", by_alias=True)


@app.post("/query", tags=["Commands"])
async def query_endpoint(request: QueryRequest):
    """Execute a Cypher query and return normalized records."""
    result = await get_connection_manager().execute_query(request)
    if is_error_response(result):
        return error_json(result)
    return result.model_dump(mode="json", by_alias=True)


@app.get("/database-info", tags=["Commands"])
async def database_info_endpoint():
    """Retrieve version, counts, labels and relationship types."""
    result = await get_connection_manager().get_database_info()
    if is_error_response(result):
        return error_json(result)
    return result.model_dump(mode="json", by_alias=True)


@app.get("/status", tags=["Commands"])
async def status_endpoint():
    """Report the current connection status."""
    return get_connection_manager().status().model_dump(mode="json", by_alias=True)


@app.post("/disconnect", tags=["Commands"])
async def disconnect_endpoint():
    """Disconnect from the Neo4j database."""
    await get_connection_manager().disconnect()
    return {"success": True, "message": "Disconnected from Neo4j database"}


# ================================
# Development Server
# ================================

if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting server on {server_config.host}:{server_config.port} (debug={server_config.debug})")

    uvicorn.run(
        "neo4j_mcp.server:app",
        host=server_config.host,
        port=server_config.port,
        reload=server_config.debug,
        log_level="info" if not server_config.debug else "debug"
    )
