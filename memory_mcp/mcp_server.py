"""
MCP server for memory-mcp.
Exposes the memory log as tools for Claude Code and other MCP clients.

Speaks newline-delimited JSON-RPC 2.0 on stdin/stdout. stdout carries
protocol messages only; logging goes to stderr.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Any, Optional, TextIO

from . import __version__
from .config import Config, get_config
from .memory import MemoryStore, StoreError

logger = logging.getLogger(__name__)

JSONRPC_VERSION = "2.0"
SERVER_NAME = "memory-mcp"
SERVER_VERSION = __version__
PROTOCOL_VERSION = "2025-06-18"
SUPPORTED_PROTOCOL_VERSIONS = ("2025-06-18", "2025-03-26", "2024-11-05")

# JSON-RPC error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

SAVED_MESSAGE = "Memory saved successfully."

# Methods the peer may send without an id
NOTIFICATION_METHODS = ("notifications/initialized", "notifications/cancelled")


class ToolError(Exception):
    """A tool call that could not be completed, reported to the peer."""

    kind = "ToolError"
    code = INTERNAL_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def data(self) -> dict:
        return {"kind": self.kind}

    def to_error(self) -> dict:
        return {"code": self.code, "message": self.message, "data": self.data()}


class UnknownTool(ToolError):
    """The requested tool is not in the catalog."""

    kind = "UnknownTool"
    code = METHOD_NOT_FOUND

    def __init__(self, name: Any):
        super().__init__(f"Unknown tool: {name}")
        self.name = name

    def data(self) -> dict:
        return {"kind": self.kind, "tool": self.name}


class InvalidArguments(ToolError):
    """Arguments missing or of the wrong shape."""

    kind = "InvalidArguments"
    code = INVALID_PARAMS


class InternalFailure(ToolError):
    """The memory store could not complete the requested I/O."""

    kind = "InternalFailure"
    code = INTERNAL_ERROR


TOOLS = [
    {
        "name": "add_memory",
        "description": "Add a new memory about the user. Call this whenever the user shares preferences, facts about themselves, or explicitly asks you to remember something.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "content": {
                    "type": "string",
                    "description": "The content to store in memory"
                }
            },
            "required": ["content"]
        }
    },
    {
        "name": "get_memories",
        "description": "Retrieve all stored memories about the user.",
        "inputSchema": {
            "type": "object",
            "properties": {}
        }
    },
]

TOOL_NAMES = tuple(tool["name"] for tool in TOOLS)


def make_response(id: Any, result: Any = None, error: Any = None) -> dict:
    """Build a JSON-RPC response."""
    response = {"jsonrpc": JSONRPC_VERSION, "id": id}
    if error:
        response["error"] = error
    else:
        response["result"] = result
    return response


def send_response(response: dict, stream: Optional[TextIO] = None):
    """Write a JSON-RPC message as a single line."""
    stream = stream or sys.stdout
    stream.write(json.dumps(response) + "\n")
    stream.flush()


def text_result(text: str) -> dict:
    """Wrap text as a successful tools/call result."""
    return {
        "content": [{"type": "text", "text": text}],
        "isError": False,
    }


def configure_logging(level: str = "WARNING"):
    """Send log records to stderr so stdout stays protocol-only."""
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.WARNING),
        stream=sys.stderr,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )


class Dispatcher:
    """Maps protocol requests onto the memory store."""

    def __init__(self, store: MemoryStore):
        self.store = store
        self.initialized = False
        self.client_info: Optional[dict] = None

    def handshake(self, peer_info: Optional[dict] = None) -> dict:
        """Handle initialize. Never fails; repeated calls are accepted."""
        peer_info = peer_info or {}
        requested = peer_info.get("protocolVersion")
        if requested in SUPPORTED_PROTOCOL_VERSIONS:
            protocol_version = requested
        else:
            protocol_version = PROTOCOL_VERSION

        self.client_info = peer_info.get("clientInfo")
        self.initialized = True
        logger.info("Initialized for client %s (protocol %s)", self.client_info, protocol_version)

        return {
            "protocolVersion": protocol_version,
            "capabilities": {
                "tools": {}
            },
            "serverInfo": {
                "name": SERVER_NAME,
                "version": SERVER_VERSION
            }
        }

    def list_tools(self) -> list[dict]:
        return TOOLS

    def call_tool(self, name: Any, arguments: Any = None) -> dict:
        """Run a tool and return its result, raising ToolError on failure."""
        if name not in TOOL_NAMES:
            raise UnknownTool(name)

        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            raise InvalidArguments(
                f"Invalid parameters: arguments must be an object, got {type(arguments).__name__}"
            )

        if name == "add_memory":
            if "content" not in arguments:
                raise InvalidArguments("Invalid parameters: missing field `content`")
            content = arguments["content"]
            if not isinstance(content, str):
                raise InvalidArguments(
                    f"Invalid parameters: `content` must be a string, got {type(content).__name__}"
                )
            try:
                content.encode("utf-8")
            except UnicodeEncodeError as e:
                raise InvalidArguments(f"Invalid parameters: `content` is not valid UTF-8 text ({e.reason})") from e
            try:
                self.store.append(content)
            except StoreError as e:
                raise InternalFailure(f"Failed to save memory: {e}") from e
            return text_result(SAVED_MESSAGE)

        elif name == "get_memories":
            try:
                memories = self.store.read_all()
            except StoreError as e:
                raise InternalFailure(f"Failed to retrieve memories: {e}") from e
            return text_result(memories)

        # Listed in TOOLS but not routed above
        raise UnknownTool(name)

    def handle_message(self, request: Any) -> Optional[dict]:
        """Handle one decoded JSON-RPC message; None means no reply is due."""
        if not isinstance(request, dict):
            return make_response(None, error={"code": INVALID_REQUEST, "message": "Invalid Request"})

        method = request.get("method")
        params = request.get("params") or {}

        # Notifications carry no id and never get a reply
        if "id" not in request:
            if method in NOTIFICATION_METHODS:
                logger.debug("Notification %s", method)
            else:
                logger.warning("Ignoring %s sent without an id", method)
            return None

        id = request["id"]
        logger.debug("Request %s id=%s", method, id)

        try:
            if method == "initialize":
                return make_response(id, self.handshake(params if isinstance(params, dict) else {}))
            elif method == "ping":
                return make_response(id, {})
            elif method == "tools/list":
                return make_response(id, {"tools": self.list_tools()})
            elif method == "tools/call":
                if not isinstance(params, dict) or not isinstance(params.get("name"), str):
                    raise InvalidArguments("Invalid parameters: tool name is required")
                return make_response(id, self.call_tool(params["name"], params.get("arguments")))
            else:
                return make_response(id, error={"code": METHOD_NOT_FOUND, "message": f"Unknown method: {method}"})

        except ToolError as e:
            logger.warning("%s: %s", e.kind, e.message)
            return make_response(id, error=e.to_error())
        except Exception as e:
            logger.exception("Unhandled error in %s", method)
            return make_response(id, error={"code": INTERNAL_ERROR, "message": str(e)})


def run_server(
    store: Optional[MemoryStore] = None,
    config: Optional[Config] = None,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
):
    """Run the MCP server until stdin is closed."""
    config = config or get_config()
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout

    store = store or MemoryStore.from_config(config)
    dispatcher = Dispatcher(store)
    logger.info("%s %s serving %s", SERVER_NAME, SERVER_VERSION, store.path)

    # Use readline() instead of for-in iteration to avoid buffered read-ahead issues
    while True:
        line = stdin.readline()
        if not line:
            break
        line = line.strip()
        if not line:
            continue

        try:
            request = json.loads(line)
        except json.JSONDecodeError as e:
            send_response(make_response(None, error={"code": PARSE_ERROR, "message": f"Parse error: {e}"}), stdout)
            continue

        response = dispatcher.handle_message(request)
        if response is not None:
            send_response(response, stdout)

    logger.info("stdin closed, shutting down")


def main():
    config = get_config()
    configure_logging(config.log_level)
    run_server(config=config)


if __name__ == "__main__":
    main()
