import io
import json

import yaml

from memory_mcp import __version__
from memory_mcp.cli import main
from memory_mcp.memory import NO_MEMORIES


def test_add_then_show(tmp_path, capsys):
    assert main(["add", "User likes coffee"]) == 0
    assert "User likes coffee" in (tmp_path / "memories.md").read_text(encoding="utf-8")
    capsys.readouterr()

    assert main(["show"]) == 0
    assert "User likes coffee" in capsys.readouterr().out


def test_add_reads_stdin(tmp_path, monkeypatch):
    monkeypatch.setattr("sys.stdin", io.StringIO("from stdin"))
    assert main(["add"]) == 0
    assert "from stdin" in (tmp_path / "memories.md").read_text(encoding="utf-8")


def test_show_empty(capsys):
    assert main(["show"]) == 0
    assert capsys.readouterr().out.strip() == NO_MEMORIES


def test_show_json(capsys):
    main(["add", "one"])
    main(["add", "two"])
    capsys.readouterr()

    assert main(["show", "--format", "json"]) == 0
    entries = json.loads(capsys.readouterr().out)
    assert [e["content"] for e in entries] == ["one", "two"]
    assert all(e["timestamp"].endswith(" UTC") for e in entries)


def test_file_option_overrides_location(tmp_path, capsys):
    target = tmp_path / "other.md"
    assert main(["--file", str(target), "add", "elsewhere"]) == 0
    assert "elsewhere" in target.read_text(encoding="utf-8")
    assert not (tmp_path / "memories.md").exists()
    capsys.readouterr()

    assert main(["--file", str(target), "path"]) == 0
    assert capsys.readouterr().out.strip() == str(target)


def test_add_failure_returns_error(tmp_path, capsys):
    assert main(["--file", str(tmp_path / "missing" / "m.md"), "add", "x"]) == 1
    assert "Failed to save memory" in capsys.readouterr().err


def test_missing_explicit_config_fails(tmp_path, capsys):
    assert main(["--config", str(tmp_path / "absent.yaml"), "path"]) == 1
    assert "not found" in capsys.readouterr().err


def test_config_show_and_save(tmp_path, capsys):
    assert main(["--log-level", "info", "config"]) == 0
    shown = yaml.safe_load(capsys.readouterr().out)
    assert shown["memory_file"] == "memories.md"
    assert shown["log_level"] == "INFO"

    target = tmp_path / "saved.yaml"
    target.write_text("memory_file: saved.md\n", encoding="utf-8")
    assert main(["--config", str(target), "config", "--save"]) == 0
    assert yaml.safe_load(target.read_text(encoding="utf-8"))["memory_file"] == "saved.md"


def test_version(capsys):
    assert main(["version"]) == 0
    assert __version__ in capsys.readouterr().out


def test_serve_is_default(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO('{"jsonrpc": "2.0", "id": 1, "method": "ping"}\n'))
    assert main([]) == 0
    assert json.loads(capsys.readouterr().out) == {"jsonrpc": "2.0", "id": 1, "result": {}}
