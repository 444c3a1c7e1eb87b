"""IPC server for host-process communication.

This module implements a JSON-RPC-like protocol over stdin/stdout through
which a host application drives the capture engine.

Protocol:
- Each message is a single line of JSON terminated by newline
- Request format: {"id": "...", "method": "...", "params": {...}}
- Response format: {"id": "...", "success": true/false, "result": ..., "error": ..., "error_kind": ...}

The ScreenCapture handle is created once by the caller and handed to every
handler through the ServerContext.
"""

import json
import logging
import sys
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TextIO

from pydantic import ValidationError

from screendiff import __version__
from screendiff.capture.errors import CaptureError
from screendiff.capture.screen import ScreenCapture
from screendiff.ipc.models import BackendStatus, CaptureConfigModel, IPCRequest, IPCResponse

logger = logging.getLogger(__name__)


@dataclass
class ServerContext:
    """State shared by the server loop and its handlers."""

    screen_capture: ScreenCapture
    start_time: float = field(default_factory=time.time)
    running: bool = True


HandlerFunc = Callable[[ServerContext, dict[str, Any]], Any]

# Handler registry
_handlers: dict[str, HandlerFunc] = {}


def handler(method: str) -> Callable[[HandlerFunc], HandlerFunc]:
    """Decorator to register an IPC method handler."""

    def decorator(func: HandlerFunc) -> HandlerFunc:
        _handlers[method] = func
        return func

    return decorator


def _register_handlers() -> None:
    """Register all IPC handlers from handler modules."""
    # Import handler modules to trigger @handler decorator registration
    from screendiff.ipc import capture_handlers  # noqa: F401


@handler("ping")
def handle_ping(ctx: ServerContext, params: dict[str, Any]) -> str:
    """Simple ping handler for connection testing."""
    return "pong"


@handler("get_status")
def handle_get_status(ctx: ServerContext, params: dict[str, Any]) -> dict[str, Any]:
    """Return backend status information."""
    status = BackendStatus(
        version=__version__,
        running=ctx.running,
        uptime_seconds=time.time() - ctx.start_time,
        python_version=f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
        capture_config=CaptureConfigModel.from_config(ctx.screen_capture.config).model_dump(),
        has_baseline=ctx.screen_capture.last_image is not None,
    )
    return status.model_dump()


@handler("shutdown")
def handle_shutdown(ctx: ServerContext, params: dict[str, Any]) -> str:
    """Signal the server to shut down gracefully."""
    ctx.running = False
    return "shutting_down"


def process_request(request_data: dict[str, Any], ctx: ServerContext) -> IPCResponse:
    """Process a single IPC request and return a response."""
    try:
        request = IPCRequest.model_validate(request_data)
    except ValidationError as e:
        return IPCResponse(
            id=str(request_data.get("id", "unknown")),
            success=False,
            error=f"Invalid request format: {e}",
            error_kind="invalid_request",
        )

    handler_func = _handlers.get(request.method)
    if handler_func is None:
        return IPCResponse(
            id=request.id,
            success=False,
            error=f"Unknown method: {request.method}",
            error_kind="unknown_method",
        )

    try:
        result = handler_func(ctx, request.params)
        return IPCResponse(id=request.id, success=True, result=result)
    except CaptureError as e:
        logger.error(f"[{request.method}] {e}")
        return IPCResponse(id=request.id, success=False, error=str(e), error_kind=e.kind.value)
    except ValidationError as e:
        return IPCResponse(
            id=request.id,
            success=False,
            error=f"Invalid params: {e}",
            error_kind="invalid_params",
        )
    except Exception as e:
        logger.exception(f"Error handling {request.method}")
        return IPCResponse(id=request.id, success=False, error=str(e), error_kind="internal")


def send_response(response: IPCResponse, stream: TextIO | None = None) -> None:
    """Write a response line."""
    stream = stream or sys.stdout
    stream.write(response.model_dump_json() + "\n")
    stream.flush()


def run_server(
    screen_capture: ScreenCapture,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
) -> None:
    """Run the IPC server, reading requests from stdin and writing responses to stdout.

    The server runs until it receives a shutdown request or stdin is closed.
    Logging must already be configured to go to stderr.
    """
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout

    ctx = ServerContext(screen_capture=screen_capture)
    _register_handlers()

    logger.info("IPC server starting")

    # Signal readiness to parent process
    stdout.write(json.dumps({"type": "ready", "version": __version__}) + "\n")
    stdout.flush()

    try:
        while ctx.running:
            line = stdin.readline()
            if not line:
                # EOF - parent process closed stdin
                logger.info("stdin closed, shutting down")
                break

            line = line.strip()
            if not line:
                continue

            try:
                request_data = json.loads(line)
            except json.JSONDecodeError as e:
                send_response(
                    IPCResponse(
                        id="unknown",
                        success=False,
                        error=f"Invalid JSON: {e}",
                        error_kind="invalid_request",
                    ),
                    stdout,
                )
                continue

            if not isinstance(request_data, dict):
                send_response(
                    IPCResponse(
                        id="unknown",
                        success=False,
                        error="Request must be a JSON object",
                        error_kind="invalid_request",
                    ),
                    stdout,
                )
                continue

            send_response(process_request(request_data, ctx), stdout)

    except KeyboardInterrupt:
        logger.info("Keyboard interrupt, shutting down")

    finally:
        logger.info("IPC server stopped")
