from pathlib import Path

import pytest
import yaml

from memory_mcp.config import (
    DEFAULT_MEMORY_FILE,
    Config,
    ConfigError,
    get_config,
    reload_config,
    set_config,
)


def test_defaults_point_at_cwd_memories_file():
    config = Config()
    assert config.memory_file == DEFAULT_MEMORY_FILE == "memories.md"
    assert config.memory_path == Path(".") / "memories.md"
    assert config.validate() == []


def test_absolute_memory_file_wins(tmp_path):
    target = tmp_path / "elsewhere.md"
    config = Config(memory_file=str(target), storage_root=Path("/ignored"))
    assert config.memory_path == target


def test_round_trip_through_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    Config(memory_file="notes.md", storage_root=tmp_path, log_level="debug").save(path)

    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    assert data == {"memory_file": "notes.md", "storage_root": str(tmp_path), "log_level": "DEBUG"}

    loaded = Config.load(path)
    assert loaded.memory_path == tmp_path / "notes.md"
    assert loaded.log_level == "DEBUG"


def test_from_dict_ignores_unknown_keys():
    config = Config.from_dict({"memory_file": "x.md", "embedding_model": "nope"})
    assert config.memory_file == "x.md"


def test_load_missing_file_returns_defaults(tmp_path):
    assert Config.load(tmp_path / "absent.yaml") == Config()


def test_load_missing_file_strict_raises(tmp_path):
    with pytest.raises(ConfigError):
        Config.load(tmp_path / "absent.yaml", strict=True)


def test_load_malformed_yaml_warns_and_uses_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("memory_file: [unclosed\n", encoding="utf-8")
    with pytest.warns(UserWarning):
        config = Config.load(path)
    assert config == Config()


def test_load_non_mapping_strict_raises(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        Config.load(path, strict=True)


def test_validate_reports_problems():
    errors = Config(memory_file=" ", log_level="loud").validate()
    assert len(errors) == 2


def test_global_config_helpers(tmp_path):
    custom = Config(storage_root=tmp_path)
    set_config(custom)
    assert get_config() is custom

    path = tmp_path / "config.yaml"
    Config(memory_file="reloaded.md").save(path)
    assert reload_config(path).memory_file == "reloaded.md"
    assert get_config().memory_file == "reloaded.md"
