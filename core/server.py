import asyncio
import json
import logging
from importlib import metadata
from typing import Callable, Dict, Any, Optional

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, Response
from starlette.routing import Route

from auth.credentials import build_google_clients
from auth.google_auth import OAuthExchangeError, exchange_code_for_tokens
from auth.oauth_config import OAuthConfig
from core.config import SERVER_NAME, SERVER_VERSION, ServerConfig
from core.dispatch import ClientFactory, dispatch_tool
from core.errors import ExternalServiceError, InvalidArgumentsError, PayloadTooLargeError, ToolError
from core.tool_registry import ToolRegistry

logger = logging.getLogger(__name__)

TokenExchanger = Callable[[OAuthConfig, str], Dict[str, Any]]


def get_server_version() -> str:
    try:
        return metadata.version(SERVER_NAME)
    except metadata.PackageNotFoundError:
        return SERVER_VERSION


def error_response(error: ToolError) -> JSONResponse:
    return JSONResponse(error.to_dict(), status_code=error.status_code)


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Refuses requests whose declared Content-Length exceeds the configured limit."""

    def __init__(self, app, max_body_bytes: int):
        super().__init__(app)
        self.max_body_bytes = max_body_bytes

    async def dispatch(self, request: Request, call_next) -> Response:
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > self.max_body_bytes:
            logger.warning(f"Rejected {request.method} {request.url.path}: body of {content_length} bytes")
            return error_response(PayloadTooLargeError("Request body too large"))
        return await call_next(request)


async def root(request: Request) -> PlainTextResponse:
    return PlainTextResponse("MCP OK")


async def health_check(request: Request) -> JSONResponse:
    return JSONResponse({
        "status": "healthy",
        "service": SERVER_NAME,
        "version": get_server_version(),
    })


async def oauth_configuration(request: Request) -> JSONResponse:
    logger.info(f"OAuth config requested via {request.url.path}")
    return JSONResponse(request.app.state.oauth_config.public_parameters())


async def oauth_callback(request: Request) -> JSONResponse:
    code = request.query_params.get("code")
    error = request.query_params.get("error")

    if error:
        logger.error(f"OAuth callback: Google returned an error: {error}")
        return JSONResponse({"error": f"Authorization failed: {error}"}, status_code=400)

    if not code:
        return JSONResponse({"error": "Authorization code not provided"}, status_code=400)

    state = request.app.state
    try:
        tokens = await asyncio.to_thread(state.token_exchanger, state.oauth_config, code)
    except OAuthExchangeError as e:
        logger.error(f"Error exchanging code for tokens: {e}")
        return JSONResponse({"error": "Failed to exchange authorization code"}, status_code=400)

    return JSONResponse(tokens)


async def manifest(request: Request) -> JSONResponse:
    state = request.app.state
    return JSONResponse({
        "name": SERVER_NAME,
        "version": get_server_version(),
        "oauth": state.oauth_config.public_parameters(),
        "tools": state.tool_registry.manifest_tools(),
    })


async def call_tool(request: Request) -> JSONResponse:
    state = request.app.state

    body = await request.body()
    if len(body) > state.server_config.max_request_body_bytes:
        return error_response(PayloadTooLargeError("Request body too large"))

    try:
        payload = json.loads(body) if body else {}
    except json.JSONDecodeError as e:
        return error_response(InvalidArgumentsError(f"Request body is not valid JSON: {e.msg}"))
    if not isinstance(payload, dict):
        return error_response(InvalidArgumentsError("Request body must be a JSON object"))

    name = payload.get("name")
    try:
        result = await dispatch_tool(
            state.tool_registry,
            name,
            payload.get("args"),
            request.headers.get("authorization"),
            client_factory=state.client_factory,
        )
    except ToolError as e:
        logger.warning(f"[{name}] {e.kind}: {e.message}")
        return error_response(e)
    except Exception as e:
        logger.error(f"[{name}] Unexpected error: {e}", exc_info=True)
        return error_response(ExternalServiceError(str(e) or "Unknown error"))

    return JSONResponse(result)


def create_app(
    oauth_config: OAuthConfig,
    server_config: Optional[ServerConfig] = None,
    tool_registry: Optional[ToolRegistry] = None,
    client_factory: ClientFactory = build_google_clients,
    token_exchanger: TokenExchanger = exchange_code_for_tokens,
) -> Starlette:
    """
    Build the HTTP application.

    Args:
        oauth_config: OAuth client settings published in the manifest and used for code exchange.
        server_config: HTTP settings; defaults to ServerConfig().
        tool_registry: Registry to serve; defaults to the global registry with all tool modules loaded.
        client_factory: Builds Google clients from a bearer token.
        token_exchanger: Exchanges an authorization code for tokens.
    """
    server_config = server_config or ServerConfig()
    if tool_registry is None:
        import gdrive.drive_tools  # noqa: F401
        import gsheets.sheets_tools  # noqa: F401
        from core.tool_registry import registry as tool_registry

    routes = [
        Route("/", root, methods=["GET"]),
        Route("/health", health_check, methods=["GET"]),
        Route("/oauth/config", oauth_configuration, methods=["GET"]),
        Route("/.well-known/oauth-configuration", oauth_configuration, methods=["GET"]),
        Route("/oauth/callback", oauth_callback, methods=["GET"]),
        Route("/mcp/manifest", manifest, methods=["GET"]),
        Route("/mcp/tool", call_tool, methods=["POST"]),
    ]

    # First listed = outermost layer
    middleware = [
        Middleware(
            CORSMiddleware,
            allow_origins=list(server_config.allowed_origins),
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["Authorization", "Content-Type", "Accept"],
        ),
        Middleware(RequestSizeLimitMiddleware, max_body_bytes=server_config.max_request_body_bytes),
    ]

    app = Starlette(routes=routes, middleware=middleware)
    app.state.oauth_config = oauth_config
    app.state.server_config = server_config
    app.state.tool_registry = tool_registry
    app.state.client_factory = client_factory
    app.state.token_exchanger = token_exchanger

    logger.info(f"HTTP app ready with {len(tool_registry.names())} tools")
    return app
