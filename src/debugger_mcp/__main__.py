"""Entry point for the IDE debugger MCP server."""

import argparse
import logging
import os
import sys

import uvicorn

from .config import ServerSettings, load_backend
from .server import MCP_ENDPOINT_PATH, SERVER_NAME, DebuggerMcpServer
from .transport import create_app


def configure_logging() -> None:
    """Configure logging based on environment."""
    level = os.environ.get("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="IDE Debugger MCP Server - drive an IDE debugger via MCP"
    )
    parser.add_argument(
        "--backend",
        type=str,
        default=None,
        help="IDE integration as module:attribute, resolving to IdeServices "
        "or a factory returning it. Defaults to $DEBUGGER_MCP_BACKEND.",
    )
    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Interface to bind. Defaults to $DEBUGGER_MCP_HOST or 127.0.0.1.",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to listen on. Defaults to $DEBUGGER_MCP_PORT or 63343.",
    )
    parser.add_argument(
        "--name",
        type=str,
        default=SERVER_NAME,
        help="Server name reported to clients.",
    )
    parser.add_argument(
        "--path",
        type=str,
        default=MCP_ENDPOINT_PATH,
        help="Endpoint path; the event stream is served at <path>/sse.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    configure_logging()
    logger = logging.getLogger(__name__)

    args = parse_args(argv)
    try:
        settings = ServerSettings.from_args(args)
        ide = load_backend(settings.backend)
    except (ValueError, TypeError, ImportError) as e:
        logger.error(str(e))
        sys.exit(1)

    server = DebuggerMcpServer(ide, name=settings.name)
    app = create_app(server, settings.path)
    logger.info(
        f"Starting {settings.name} on http://{settings.host}:{settings.port}{settings.path}"
    )
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        pass
