"""
Core memory operations for memory-mcp.

Memories live in a single append-only markdown file. Each entry is a
level-2 heading holding the write time, the raw text, and a blank line:

    ## 2025-01-31 14:05 UTC
    User likes coffee

The file is only ever opened in append mode, never rewritten.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .config import Config, get_config
from .timefmt import now_timestamp

NO_MEMORIES = "No memories found yet."
HEADER_PREFIX = "## "


class StoreError(Exception):
    """The memory file could not be opened, written or read."""

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path


@dataclass(frozen=True)
class Memory:
    """A memory entry as parsed back from the log."""
    timestamp: str
    content: str

    def to_dict(self) -> dict:
        return {
            'timestamp': self.timestamp,
            'content': self.content,
        }


def render_entry(content: str, timestamp: str) -> str:
    """Render one log record: header line, text, blank separator."""
    return f"{HEADER_PREFIX}{timestamp}\n{content}\n\n"


class MemoryStore:
    """Append-only memory log backed by a single text file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    @classmethod
    def from_config(cls, config: Optional[Config] = None) -> "MemoryStore":
        config = config or get_config()
        return cls(config.memory_path)

    def exists(self) -> bool:
        return self.path.exists()

    def append(self, content: str, now: Optional[float] = None) -> None:
        """Append a memory to the log.

        Empty and whitespace-only content is stored as given. The record is
        written with a single call so a failed write leaves no header behind.
        """
        record = render_entry(content, now_timestamp(now))
        try:
            record.encode("utf-8")
        except UnicodeEncodeError as e:
            raise StoreError(f"{self.path}: content is not valid UTF-8 ({e.reason})", self.path) from e

        # newline="" keeps \r and \r\n in stored text untranslated
        try:
            with open(self.path, "a", encoding="utf-8", newline="") as f:
                f.write(record)
                f.flush()
        except OSError as e:
            raise StoreError(f"{self.path}: {e.strerror or e}", self.path) from e

    def read_all(self) -> str:
        """Return the whole log verbatim, or NO_MEMORIES if there is nothing."""
        if not self.path.exists():
            return NO_MEMORIES

        try:
            with open(self.path, encoding="utf-8", newline="") as f:
                content = f.read()
        except OSError as e:
            raise StoreError(f"{self.path}: {e.strerror or e}", self.path) from e
        except UnicodeDecodeError as e:
            raise StoreError(f"{self.path}: not valid UTF-8 ({e.reason})", self.path) from e

        if not content.strip():
            return NO_MEMORIES
        return content

    def entries(self) -> list[Memory]:
        """Parse the log back into entries, oldest first.

        Lines of stored text that themselves start with "## " are read as
        new headers; read_all() stays the authoritative view.
        """
        text = self.read_all()
        if text == NO_MEMORIES:
            return []

        memories = []
        timestamp = None
        lines: list[str] = []

        def flush():
            if timestamp is None:
                return
            # Drop the trailing blank separator written after each entry
            body = "\n".join(lines)
            if body.endswith("\n"):
                body = body[:-1]
            memories.append(Memory(timestamp=timestamp, content=body))

        if text.endswith("\n"):
            text = text[:-1]

        for line in text.split("\n"):
            if line.startswith(HEADER_PREFIX):
                flush()
                timestamp = line[len(HEADER_PREFIX):].strip()
                lines = []
            elif timestamp is not None:
                lines.append(line)
        flush()

        return memories


# Global store instance (keyed by path so config changes are picked up)
_store: Optional[MemoryStore] = None


def get_store(config: Optional[Config] = None) -> MemoryStore:
    """Get the memory store for the given (or global) config."""
    global _store
    config = config or get_config()
    if _store is None or _store.path != config.memory_path:
        _store = MemoryStore.from_config(config)
    return _store


def add_memory(content: str, **kwargs) -> None:
    """Convenience: append a memory to the default store."""
    get_store().append(content, **kwargs)


def get_memories() -> str:
    """Convenience: read the default store."""
    return get_store().read_all()
