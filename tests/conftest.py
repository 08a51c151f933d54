import pytest

from memory_mcp.config import Config, set_config
from memory_mcp.memory import MemoryStore
from memory_mcp.mcp_server import Dispatcher


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep tests away from the user's config and working directory."""
    monkeypatch.chdir(tmp_path)
    config = Config(storage_root=tmp_path)
    set_config(config)
    yield config
    set_config(None)


@pytest.fixture
def memory_path(tmp_path):
    return tmp_path / "memories.md"


@pytest.fixture
def store(memory_path):
    return MemoryStore(memory_path)


@pytest.fixture
def dispatcher(store):
    return Dispatcher(store)
