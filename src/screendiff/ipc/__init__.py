"""IPC module for host-process communication."""

# Import handlers to register them
import screendiff.ipc.capture_handlers  # noqa: F401
from screendiff.ipc.models import (
    BackendStatus,
    CaptureConfigModel,
    IPCMethod,
    IPCRequest,
    IPCResponse,
)
from screendiff.ipc.server import ServerContext, handler, process_request, run_server

__all__ = [
    "BackendStatus",
    "CaptureConfigModel",
    "IPCMethod",
    "IPCRequest",
    "IPCResponse",
    "ServerContext",
    "handler",
    "process_request",
    "run_server",
]
