"""FastAPI application for the connector hub."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from connector_hub.api.routers import connections, health, languages, mcp, services, tokens
from connector_hub.infra.cache import TTLCache
from connector_hub.infra.config import config
from connector_hub.infra.errors import GatewayError
from connector_hub.infra.logging import app_logger
from connector_hub.infra.middleware import RequestIDMiddleware, RequestLoggingMiddleware, setup_cors
from connector_hub.infra.timeout import REQUEST_TIMEOUT, TimeoutMiddleware


def _validation_message(exc: RequestValidationError) -> str:
    details = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        details.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "Invalid request: " + "; ".join(details)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown."""
    app_logger.info("Application starting up")

    yield

    app_logger.info("Application shutting down")

    from connector_hub.infra.database import dispose_engine
    dispose_engine()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Connector Hub API",
        description="""
    Connector Hub proxies Model-Context-Protocol style calls to third-party service APIs
    (FreshService, Jira, Confluence, Gemini, OpenAI) using stored credentials.

    ## Features

    - **MCP Gateway**: `tools/list`, `tools/call`, `resources/list`, `resources/read`
    - **Tokens**: Manage user, team and account credentials
    - **MCP Services**: Configure services and their app-wide credentials (app admins)
    - **Connections**: Test connectivity of configured connections
    - **Languages**: Supported translation languages

    ## Authentication

    Gateway, token and service endpoints require `Authorization: Bearer <access token>`.
    """,
        version="1.0.0",
        lifespan=lifespan,
        tags_metadata=[
            {"name": "MCP", "description": "Proxy MCP calls to external service APIs"},
            {"name": "Tokens", "description": "Manage owner-scoped service credentials"},
            {"name": "MCP Services", "description": "Configure MCP services and app-wide credentials"},
            {"name": "Connections", "description": "Connection health checks"},
            {"name": "Languages", "description": "Supported translation languages"},
            {"name": "Health", "description": "Health check and monitoring endpoints"},
        ],
    )

    app.state.languages_cache = TTLCache(ttl_seconds=config.LANGUAGES_CACHE_TTL_SECONDS)

    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(TimeoutMiddleware, timeout=REQUEST_TIMEOUT)
    setup_cors(app)

    app.include_router(mcp.router)
    app.include_router(tokens.router)
    app.include_router(services.router)
    app.include_router(connections.router)
    app.include_router(languages.router)
    app.include_router(health.router)

    @app.exception_handler(GatewayError)
    async def gateway_exception_handler(request: Request, exc: GatewayError):
        """Render domain errors as {"error": message} with their status."""
        return JSONResponse(status_code=exc.http_status, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle request validation errors."""
        if request.url.path == "/mcp":
            # The gateway answers every failure other than TOKEN_REQUIRED with 500
            return JSONResponse(status_code=500, content={"error": _validation_message(exc)})
        return JSONResponse(
            status_code=422,
            content={"error": "Invalid request", "detail": exc.errors()},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle HTTP exceptions."""
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle all other exceptions."""
        request_id = getattr(request.state, "request_id", None)
        app_logger.error(f"Unhandled exception: {exc}", exc_info=True, extra={"request_id": request_id})
        return JSONResponse(status_code=500, content={"error": str(exc) or "Unknown error"})

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host="0.0.0.0",
        port=8000,
        timeout_keep_alive=30,
        timeout_graceful_shutdown=30,
    )
