"""CLI entry point for the channel sync engine.

Usage:
    python -m channel_sync --store-path PATH stats [--json]
    python -m channel_sync --store-path PATH show CHANNEL [--json]
    python -m channel_sync --store-path PATH resume-state [CHANNEL ...]
    python -m channel_sync --store-path PATH clear [--channel CHANNEL]

Commands:
    stats         Show per-channel delivery statistics
    show          Show the sync record of one channel
    resume-state  Print resume cursors for a subscription request
    clear         Forget one channel or all persisted state
"""

import argparse
import json
import logging
import sys

from channel_sync import __version__, SyncStore, SyncStoreConfig, BackendKind
from channel_sync.utils.logging import configure_root_logger


def setup_logging(verbose: bool = False, json_output: bool = False) -> None:
    """Configure logging for CLI output."""
    level = logging.DEBUG if verbose else logging.WARNING
    configure_root_logger(level=level, json_output=json_output)


def open_store(args: argparse.Namespace) -> SyncStore:
    """Open the file-backed store named on the command line."""
    config = SyncStoreConfig(
        backend=BackendKind.FILE,
        store_path=args.store_path,
        state_key=args.state_key,
    )
    return SyncStore(config)


def cmd_stats(args: argparse.Namespace) -> int:
    """Handle the 'stats' command - show delivery statistics.

    Args:
        args: Parsed CLI arguments

    Returns:
        Exit code (0 for success)
    """
    store = open_store(args)
    stats = store.stats()

    if args.json:
        print(json.dumps(stats, indent=2))
        return 0

    print(f"Channels: {stats['channel_count']}")
    print(f"Total events: {stats['total_events']:,}")
    print()

    if not stats["channels"]:
        print("  No channels recorded.")
        return 0

    for channel in stats["channels"]:
        print(f"  [{channel['channel']}]")
        print(f"    Last event: {channel['last_event_id'] or '-'}")
        print(f"    Last seq: {channel['last_seq']}")
        print(f"    Highest seq: {channel['highest_seq']}")
        print(f"    Received: {channel['total_received']:,}")
        print()
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    """Handle the 'show' command - print one channel's record.

    Returns:
        Exit code (0 for success, 1 if the channel is unknown)
    """
    store = open_store(args)
    record = store.get_record(args.channel)

    if record is None:
        print(f"Error: No sync state for channel '{args.channel}'", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(record.to_dict(), indent=2))
    else:
        for key, value in record.to_dict().items():
            print(f"{key}: {value}")
    return 0


def cmd_resume_state(args: argparse.Namespace) -> int:
    """Handle the 'resume-state' command - print subscription cursors.

    With no channels given, cursors for every recorded channel are printed.
    """
    store = open_store(args)
    channels = args.channels or sorted(store.get_all_records())
    print(json.dumps(store.resume_state(channels), indent=2))
    return 0


def cmd_clear(args: argparse.Namespace) -> int:
    """Handle the 'clear' command - drop persisted state.

    Returns:
        Exit code (0 for success, 1 if the write failed)
    """
    store = open_store(args)

    if args.channel:
        if store.get_record(args.channel) is None:
            print(f"Channel '{args.channel}' has no sync state.")
            store.close()
            return 0
        store.clear_channel(args.channel)
        result = store.close()
        if not result.success:
            print(f"Error: {result.error}", file=sys.stderr)
            return 1
        print(f"Cleared sync state for '{args.channel}'.")
        return 0

    store.clear_all()
    store.close()
    print("Cleared all sync state.")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="channel_sync",
        description="Channel Sync - inspect and reset persisted event sync state",
    )
    parser.add_argument(
        "--version", action="version",
        version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable verbose output"
    )
    parser.add_argument(
        "--log-json", action="store_true",
        help="Emit logs as JSON lines"
    )
    parser.add_argument(
        "--store-path",
        help="Directory holding the persisted sync state"
    )
    parser.add_argument(
        "--state-key", default="channel_sync_states",
        help="Key of the persisted blob (default: channel_sync_states)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    stats_parser = subparsers.add_parser("stats", help="Show delivery statistics")
    stats_parser.add_argument("--json", action="store_true", help="Output as JSON")

    show_parser = subparsers.add_parser("show", help="Show one channel's sync record")
    show_parser.add_argument("channel", help="Channel id (area_eventType)")
    show_parser.add_argument("--json", action="store_true", help="Output as JSON")

    resume_parser = subparsers.add_parser(
        "resume-state", help="Print resume cursors for a subscription request"
    )
    resume_parser.add_argument(
        "channels", nargs="*",
        help="Channels to include (default: every recorded channel)"
    )

    clear_parser = subparsers.add_parser("clear", help="Forget persisted sync state")
    clear_parser.add_argument("--channel", help="Only clear this channel")

    return parser


def main(argv=None) -> int:
    """Main entry point for the CLI.

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    if not args.store_path:
        print("Error: --store-path is required", file=sys.stderr)
        return 1

    setup_logging(verbose=args.verbose, json_output=args.log_json)

    commands = {
        "stats": cmd_stats,
        "show": cmd_show,
        "resume-state": cmd_resume_state,
        "clear": cmd_clear,
    }

    handler = commands.get(args.command)
    if handler:
        return handler(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
