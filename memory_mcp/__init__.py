"""
memory-mcp: Persistent markdown memory for AI assistants.

Stores notes about the user in an append-only memories.md file and
exposes them to MCP clients over stdio as two tools:
- add_memory: append a timestamped note
- get_memories: return the whole log
"""

__version__ = "0.1.0"

from .config import (
    Config,
    ConfigError,
    get_config,
    reload_config,
    set_config,
)
from .timefmt import format_timestamp, is_leap_year, days_to_civil
from .memory import (
    Memory,
    MemoryStore,
    StoreError,
    NO_MEMORIES,
    get_store,
    add_memory,
    get_memories,
)
from .mcp_server import (
    TOOLS,
    Dispatcher,
    ToolError,
    UnknownTool,
    InvalidArguments,
    InternalFailure,
    run_server,
)

__all__ = [
    # Config
    "Config",
    "ConfigError",
    "get_config",
    "reload_config",
    "set_config",
    # Timestamps
    "format_timestamp",
    "is_leap_year",
    "days_to_civil",
    # Memory
    "Memory",
    "MemoryStore",
    "StoreError",
    "NO_MEMORIES",
    "get_store",
    "add_memory",
    "get_memories",
    # Server
    "TOOLS",
    "Dispatcher",
    "ToolError",
    "UnknownTool",
    "InvalidArguments",
    "InternalFailure",
    "run_server",
]
