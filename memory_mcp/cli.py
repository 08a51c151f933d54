"""
Command-line interface for memory-mcp.
"""

import argparse
import dataclasses
import json
import sys
from pathlib import Path

import yaml

from .config import get_config, set_config, Config, ConfigError, CONFIG_FILE
from .memory import MemoryStore, StoreError


def load_config(args) -> Config:
    """Resolve the effective config from --config/--file/--log-level."""
    if args.config:
        config = Config.load(Path(args.config), strict=True)
    else:
        config = get_config()

    if args.file:
        config = dataclasses.replace(config, memory_file=args.file, storage_root=Path("."))
    if args.log_level:
        config = dataclasses.replace(config, log_level=args.log_level)

    set_config(config)
    return config


def cmd_serve(args, config):
    """Run MCP server."""
    from .mcp_server import configure_logging, run_server
    configure_logging(config.log_level)
    try:
        run_server(config=config)
    except KeyboardInterrupt:
        pass
    return 0


def cmd_add(args, config):
    """Append a memory."""
    store = MemoryStore.from_config(config)
    content = args.content if args.content is not None else sys.stdin.read()

    try:
        store.append(content)
    except StoreError as e:
        print(f"Failed to save memory: {e}", file=sys.stderr)
        return 1

    print(f"Memory saved to {store.path}")
    return 0


def cmd_show(args, config):
    """Print all memories."""
    store = MemoryStore.from_config(config)

    try:
        if args.format == "json":
            print(json.dumps([m.to_dict() for m in store.entries()], indent=2))
        else:
            print(store.read_all())
    except StoreError as e:
        print(f"Failed to retrieve memories: {e}", file=sys.stderr)
        return 1
    return 0


def cmd_path(args, config):
    """Show the memory file path."""
    print(config.memory_path)
    return 0


def cmd_config(args, config):
    """Show or save configuration."""
    if args.save:
        target = Path(args.config) if args.config else CONFIG_FILE
        config.save(target)
        print(f"Configuration saved to {target}")
        return 0

    print(yaml.dump(config.to_dict(), default_flow_style=False, sort_keys=False), end="")
    errors = config.validate()
    if errors:
        print("Issues:", file=sys.stderr)
        for error in errors:
            print(f"  - {error}", file=sys.stderr)
        return 1
    return 0


def cmd_version(args, config):
    """Show version information."""
    from . import __version__
    from .mcp_server import PROTOCOL_VERSION
    print(f"memory-mcp {__version__}")
    print(f"MCP protocol: {PROTOCOL_VERSION}")
    print(f"Memory file: {config.memory_path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Persistent markdown memory for AI assistants",
        prog="memory-mcp"
    )
    parser.add_argument("--config", "-c", help=f"Config file (default: {CONFIG_FILE})")
    parser.add_argument("--file", "-f", help="Memory file (default: ./memories.md)")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        type=str.upper, help="Log level for stderr output")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # serve
    p_serve = subparsers.add_parser("serve", help="Run MCP server on stdio (default)")
    p_serve.set_defaults(func=cmd_serve)

    # add
    p_add = subparsers.add_parser("add", help="Add a memory")
    p_add.add_argument("content", nargs="?", help="Memory content (or stdin if not provided)")
    p_add.set_defaults(func=cmd_add)

    # show
    p_show = subparsers.add_parser("show", help="Show all memories")
    p_show.add_argument("--format", choices=["text", "json"], default="text")
    p_show.set_defaults(func=cmd_show)

    # path
    p_path = subparsers.add_parser("path", help="Show memory file path")
    p_path.set_defaults(func=cmd_path)

    # config
    p_config = subparsers.add_parser("config", help="Show configuration")
    p_config.add_argument("--save", action="store_true", help="Write the effective config to the config file")
    p_config.set_defaults(func=cmd_config)

    # version
    p_version = subparsers.add_parser("version", help="Show version")
    p_version.set_defaults(func=cmd_version)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args)
    except ConfigError as e:
        print(str(e), file=sys.stderr)
        return 1

    func = getattr(args, "func", cmd_serve)
    return func(args, config)


if __name__ == "__main__":
    sys.exit(main())
