"""
Tool dispatch: name -> handler, executed with the caller's credentials.
"""

import logging
from typing import Any, Callable, Dict, Optional

from auth.credentials import GoogleClients, build_google_clients, get_bearer_token
from core.errors import InvalidArgumentsError, MissingToolNameError
from core.tool_registry import ToolRegistry

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str], GoogleClients]


async def dispatch_tool(
    registry: ToolRegistry,
    name: Optional[str],
    args: Optional[Dict[str, Any]],
    authorization_header: Optional[str],
    client_factory: ClientFactory = build_google_clients,
) -> Any:
    """
    Look up a tool, validate its arguments into its model and run it for one request.

    The lookup and argument checks happen before the Authorization header is
    read, so an unknown tool or bad arguments never touch Google.

    Args:
        registry: Registry to resolve the tool name against.
        name: Tool name from the request body.
        args: Tool arguments object; None is treated as {}.
        authorization_header: Raw Authorization header value.
        client_factory: Builds the GoogleClients bundle from an access token.

    Returns:
        The handler's result, unchanged.

    Raises:
        ToolError: Any error kind from core.errors.
    """
    if not name or not isinstance(name, str):
        raise MissingToolNameError("Missing tool name")

    spec = registry.get(name)

    if args is None:
        args = {}
    if not isinstance(args, dict):
        raise InvalidArgumentsError(f"Arguments for tool {name} must be an object")
    arguments = spec.parse_arguments(args)

    token = get_bearer_token(authorization_header)
    clients = client_factory(token)

    logger.info(f"[dispatch] Invoking {name}")
    result = await spec.handler(clients, arguments)
    logger.info(f"[dispatch] {name} completed")
    return result
