"""Server settings from command line arguments and environment."""

from __future__ import annotations

import argparse
import importlib
import os
from dataclasses import dataclass

from .ide import IdeServices
from .server import MCP_ENDPOINT_PATH, SERVER_NAME

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 63343


@dataclass
class ServerSettings:
    """Where to listen and which IDE backend to drive."""
    backend: str
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    name: str = SERVER_NAME
    path: str = MCP_ENDPOINT_PATH

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> ServerSettings:
        backend = args.backend or os.environ.get("DEBUGGER_MCP_BACKEND")
        if not backend:
            raise ValueError(
                "No IDE backend configured. Pass --backend module:factory "
                "or set DEBUGGER_MCP_BACKEND."
            )
        port = args.port if args.port is not None else os.environ.get("DEBUGGER_MCP_PORT", DEFAULT_PORT)
        try:
            port = int(port)
        except ValueError:
            raise ValueError(f"Invalid port: {port}") from None
        return cls(
            backend=backend,
            host=args.host or os.environ.get("DEBUGGER_MCP_HOST", DEFAULT_HOST),
            port=port,
            name=args.name,
            path=args.path,
        )


def load_backend(backend: str) -> IdeServices:
    """Import ``module:attribute`` and return the IdeServices it provides.

    The attribute may be an IdeServices instance or a callable returning one.
    """
    module_name, sep, attribute = backend.partition(":")
    if not sep or not module_name or not attribute:
        raise ValueError(f"Backend must look like 'module:attribute', got {backend!r}")

    module = importlib.import_module(module_name)
    try:
        target = getattr(module, attribute)
    except AttributeError:
        raise ValueError(f"Module {module_name!r} has no attribute {attribute!r}") from None

    services = target() if callable(target) and not isinstance(target, IdeServices) else target
    if not isinstance(services, IdeServices):
        raise TypeError(f"Backend {backend!r} did not provide IdeServices, got {type(services).__name__}")
    return services
