import argparse
import logging
import os
import sys
from importlib import import_module

import uvicorn
from dotenv import load_dotenv

from auth.oauth_config import OAuthConfig
from auth.scopes import get_scopes_for_tools
from core.config import SERVER_NAME, ServerConfig
from core.log_formatter import configure_file_logging, setup_enhanced_logging
from core.server import create_app, get_server_version
from core.tool_registry import registry

dotenv_path = os.path.join(os.path.dirname(os.path.abspath(__file__)), '.env')
load_dotenv(dotenv_path=dotenv_path)

# Suppress googleapiclient discovery cache warning
logging.getLogger('googleapiclient.discovery_cache').setLevel(logging.ERROR)

logger = logging.getLogger(__name__)

# Import tool modules to register them with the tool registry
TOOL_IMPORTS = {
    'sheets': lambda: import_module('gsheets.sheets_tools'),
    'drive': lambda: import_module('gdrive.drive_tools'),
}


def safe_print(text):
    # Keep stderr clean when not attached to a terminal (e.g. under a process manager)
    if not sys.stderr.isatty():
        logger.debug(f"[startup] {text}")
        return

    try:
        print(text, file=sys.stderr)
    except UnicodeEncodeError:
        print(text.encode('ascii', errors='replace').decode(), file=sys.stderr)


def main():
    """
    Main entry point for the Google Sheets/Drive tool server.
    """
    try:
        server_config = ServerConfig.from_env()
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    parser = argparse.ArgumentParser(description='Google Sheets and Drive tool server')
    parser.add_argument('--tools', nargs='*', choices=list(TOOL_IMPORTS),
                        help='Specify which services to serve. If not provided, all tools are served.')
    parser.add_argument('--host', default=server_config.host, help='Interface to bind')
    parser.add_argument('--port', type=int, default=server_config.port, help='Port to listen on')
    parser.add_argument('--log-level', default=server_config.log_level,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'], help='Console log level')
    args = parser.parse_args()

    setup_enhanced_logging(getattr(logging, args.log_level))
    configure_file_logging()

    tools_to_import = args.tools if args.tools else list(TOOL_IMPORTS)
    for tool in tools_to_import:
        TOOL_IMPORTS[tool]()
    registry.set_enabled_services(set(tools_to_import))

    oauth_config = OAuthConfig.from_env().with_scopes(get_scopes_for_tools(tools_to_import))

    safe_print(f"{SERVER_NAME} {get_server_version()}")
    safe_print("=" * 35)
    safe_print(f"   Services: {', '.join(tools_to_import)} ({len(registry.names())} tools)")
    safe_print(f"   URL: http://{args.host}:{args.port}")
    safe_print(f"   OAuth Callback: {oauth_config.redirect_uri}")
    for key, value in oauth_config.get_environment_summary().items():
        safe_print(f"   - {key}: {value}")
    safe_print("")

    if not oauth_config.is_configured():
        logger.warning("GOOGLE_OAUTH_CLIENT_ID / GOOGLE_OAUTH_CLIENT_SECRET not set; publishing placeholders")

    app = create_app(oauth_config, server_config, tool_registry=registry)

    try:
        uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level.lower())
    except KeyboardInterrupt:
        safe_print("\nServer shutdown requested")
        sys.exit(0)
    except Exception as e:
        safe_print(f"\nServer error: {e}")
        logger.error(f"Unexpected error running server: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
