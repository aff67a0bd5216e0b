# ─────────────────────────────────────────────────────────────────────
# QuickDefine — Command Line Interface
# (C) 1998-2026 Miroslav Sotek. All rights reserved.
# License: GNU AGPL v3 | Commercial licensing available
# ─────────────────────────────────────────────────────────────────────
"""
CLI entry point for QuickDefine.

Usage::

    quickdefine version
    quickdefine lookup                 # define the primary selection
    quickdefine lookup serendipity
    quickdefine daemon --no-offline
    quickdefine full                   # reopen the last full definition
    quickdefine config --profile offline
    quickdefine stats
    quickdefine stats --metrics        # last daemon metrics snapshot
    quickdefine reset
"""

from __future__ import annotations

import json
import sys
from collections import Counter

_GLOBAL_FLAGS = {
    "--debug": "debug",
    "--no-offline": "no_offline",
    "--no-online": "no_online",
    "--force-online": "force_online",
}


def main(argv: list[str] | None = None) -> None:
    """CLI entry point — dispatches to subcommands."""
    args = argv if argv is not None else sys.argv[1:]

    if not args or args[0] in ("-h", "--help", "help"):
        _print_help()
        return

    cmd = args[0]
    rest = args[1:]

    commands = {
        "version": _cmd_version,
        "lookup": _cmd_lookup,
        "daemon": _cmd_daemon,
        "full": _cmd_full,
        "config": _cmd_config,
        "stats": _cmd_stats,
        "reset": _cmd_reset,
    }

    if cmd not in commands:
        print(f"Unknown command: {cmd}")
        _print_help()
        sys.exit(1)

    commands[cmd](rest)


def _print_help() -> None:
    print(
        "QuickDefine CLI\n"
        "\n"
        "Usage: quickdefine <command> [options]\n"
        "\n"
        "Commands:\n"
        "  version               Show version info\n"
        "  lookup [word]         Define a word (default: primary selection)\n"
        "  daemon                Run the background lookup daemon\n"
        "  full                  Show the last full definition\n"
        "  config [--profile X]  Show configuration\n"
        "  stats [--json]        Summarize the persisted cache\n"
        "  stats --metrics       Print the daemon's last metrics snapshot\n"
        "  reset                 Empty the persisted cache\n"
        "\n"
        "Options:\n"
        "  --profile NAME        default, offline, online or fresh\n"
        "  --debug               Verbose logging\n"
        "  --no-offline          Skip the local dictd provider\n"
        "  --no-online           Skip the remote dictionary services\n"
        "  --force-online        Ignore cached entries\n"
    )


def _load_config(args: list[str]):
    """Build config from profile/env, then apply flags. Returns (config, positionals)."""
    from quickdefine.core.config import DefineConfig

    profile = "default"
    overrides: dict[str, bool] = {}
    positionals: list[str] = []

    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--profile" and i + 1 < len(args):
            profile = args[i + 1]
            i += 2
            continue
        if arg in _GLOBAL_FLAGS:
            overrides[_GLOBAL_FLAGS[arg]] = True
        elif not arg.startswith("--"):
            positionals.append(arg)
        i += 1

    try:
        if profile != "default":
            cfg = DefineConfig.from_profile(profile)
        else:
            cfg = DefineConfig.from_env()
        for name, value in overrides.items():
            setattr(cfg, name, value)
        cfg.__post_init__()
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)
    return cfg, positionals


def _cmd_version(args: list[str]) -> None:
    import quickdefine

    print(f"quickdefine {quickdefine.__version__}")


def _cmd_lookup(args: list[str]) -> None:
    from quickdefine.core.words import is_valid_word, pick_word
    from quickdefine.daemon import lookup_local, send_word
    from quickdefine.notify import default_notifier
    from quickdefine.selection import ensure_common_path, read_selection

    cfg, words = _load_config(args)
    cfg.configure_logging()
    ensure_common_path()

    text = " ".join(words) if words else read_selection()
    word = pick_word(text)
    if not is_valid_word(word):
        return

    if send_word(
        word, cfg.resolved_socket_path, timeout=cfg.client_connect_timeout_seconds
    ):
        return
    lookup_local(word, cfg, default_notifier())


def _cmd_daemon(args: list[str]) -> None:
    from quickdefine.core.exceptions import ServerBindError
    from quickdefine.daemon import DefineDaemon
    from quickdefine.selection import ensure_common_path

    cfg, _ = _load_config(args)
    cfg.configure_logging()
    ensure_common_path()

    daemon = DefineDaemon(cfg)
    try:
        daemon.bind()
    except ServerBindError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    daemon.run()


def _cmd_full(args: list[str]) -> None:
    from quickdefine.notify import open_last
    from quickdefine.selection import ensure_common_path

    cfg, _ = _load_config(args)
    ensure_common_path()
    if not open_last(cfg.last_file):
        print("No definition looked up yet.")
        sys.exit(1)


def _cmd_config(args: list[str]) -> None:
    cfg, _ = _load_config(args)

    for key, value in cfg.to_dict().items():
        print(f"  {key}: {value}")
    print(f"  socket: {cfg.resolved_socket_path}")
    print(f"  cache_file: {cfg.cache_file}")


def _cmd_stats(args: list[str]) -> None:
    from quickdefine.core.store import PersistentStore

    cfg, _ = _load_config(args)
    if "--metrics" in args:
        _print_metrics(cfg.metrics_file)
        return
    store = PersistentStore(cfg.cache_file)
    entries = store.entries()
    by_source = Counter(e.source.value for e in entries)
    size = cfg.cache_file.stat().st_size if cfg.cache_file.exists() else 0

    if "--json" in args:
        print(
            json.dumps(
                {"entries": len(entries), "by_source": dict(by_source), "bytes": size}
            )
        )
        return
    print(f"Cache file: {cfg.cache_file}")
    print(f"Entries:    {len(entries)}")
    for source, count in sorted(by_source.items()):
        print(f"  {source}: {count}")
    print(f"Size:       {size / 1024:.1f} KiB")


def _print_metrics(path) -> None:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        print(f"No metrics snapshot at {path} (written when the daemon stops).")
        sys.exit(1)
    print(text, end="")


def _cmd_reset(args: list[str]) -> None:
    from quickdefine.core.exceptions import PersistenceError
    from quickdefine.core.store import PersistentStore

    cfg, _ = _load_config(args)
    store = PersistentStore(cfg.cache_file)
    count = len(store)
    store.clear()
    try:
        store.flush(raise_errors=True)
    except PersistenceError as e:
        print(f"Error: {e}")
        sys.exit(1)
    print(f"Removed {count} cached definitions.")


if __name__ == "__main__":
    main()
