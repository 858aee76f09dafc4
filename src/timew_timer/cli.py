#!/usr/bin/env python3
"""
Command-line interface for timew-timer with subcommand structure.

Provides subcommands to inspect and drive the TimeWarrior timer: status,
start, stop, tag, watch, check-tags, history and validate.
"""

import argparse
import json
import logging
import os
import sys
import threading
from pathlib import Path

from .errors import BinaryUnavailableError, GatewayError, OperationError
from .events import ReconcileFailed, SnapshotChanged, TagsUpdated, TagUpdateFailed, TimerEvent
from .history import TagHistory
from .output import setup_logging, user_output
from .service import TimerService
from .state import TimerSnapshot
from .tag_validator import validate_tags
from .utils import format_elapsed, ts2strtime

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_UNAVAILABLE = 2


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog='timew-timer',
        description='Drive a TimeWarrior timer and keep its state in sync',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Subcommands:
  status      Show the running timer (default)
  start       Start a timer with tags
  stop        Stop the running timer
  tag         Replace the tags of the running timer
  watch       Follow the timer until interrupted
  check-tags  Validate tag text without touching the tracker
  history     Show recently used tags
  validate    Validate configuration file

Examples:
  %(prog)s start work project
  %(prog)s start "work, project; urgent"
  %(prog)s tag work project urgent
  %(prog)s status --json
  %(prog)s --dry-run start work
        """
    )

    # Global options (available for all subcommands)
    parser.add_argument(
        '--config',
        metavar='FILE',
        type=Path,
        help='Path to configuration file (default: uses standard config locations)'
    )
    parser.add_argument(
        '--log-level',
        choices=['NONE', 'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        default='INFO',
        help='Set file logging level (default: INFO)'
    )
    parser.add_argument(
        '--console-log-level',
        choices=['NONE', 'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        default='ERROR',
        help='Set console logging level (default: ERROR)'
    )
    parser.add_argument(
        '--log-file',
        metavar='FILE',
        type=Path,
        help='Log file path (default: ~/.local/share/timew-timer/timew-timer.json.log)'
    )
    parser.add_argument(
        '--no-log-json',
        action='store_true',
        help='Do not output logs in JSON format'
    )
    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Use an in-memory tracker instead of running timew'
    )
    parser.add_argument(
        '--binary',
        metavar='PATH',
        help='TimeWarrior executable (overrides tracker.binary)'
    )

    subparsers = parser.add_subparsers(dest='subcommand', help='Subcommand to run')

    status_parser = subparsers.add_parser('status', help='Show the running timer (default)')
    status_parser.add_argument(
        '--json',
        action='store_true',
        help='Print the timer snapshot as JSON'
    )

    start_parser = subparsers.add_parser(
        'start',
        help='Start a timer with tags',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Tags may be separated by spaces, commas or semicolons:
  %(prog)s work project
  %(prog)s "work, project"
        """
    )
    start_parser.add_argument('tags', nargs='+', metavar='TAG', help='Tags for the new interval')

    subparsers.add_parser('stop', help='Stop the running timer')

    tag_parser = subparsers.add_parser(
        'tag',
        help='Replace the tags of the running timer without restarting it'
    )
    tag_parser.add_argument('tags', nargs='+', metavar='TAG', help='New tags for the running interval')

    watch_parser = subparsers.add_parser('watch', help='Follow the timer until interrupted')
    watch_parser.add_argument(
        '--interval',
        type=float,
        default=None,
        metavar='SECONDS',
        help='Seconds between status lines (default: reconciler.poll_interval)'
    )
    watch_parser.add_argument(
        '--count',
        type=int,
        default=None,
        metavar='N',
        help='Exit after N status lines'
    )

    check_parser = subparsers.add_parser('check-tags', help='Validate tag text without touching the tracker')
    check_parser.add_argument('text', nargs='*', help='Tag text to check')

    history_parser = subparsers.add_parser('history', help='Show recently used tags')
    history_parser.add_argument(
        '--clear',
        action='store_true',
        help='Forget all saved tags'
    )

    subparsers.add_parser(
        'validate',
        help='Validate configuration file',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Validate default config
  %(prog)s

  # Validate custom config
  %(prog)s --config my_config.toml
        """
    )

    return parser


def get_data_dir() -> Path:
    """
    Get the timew-timer data directory, creating it if needed.

    Returns:
        Path in the user's data directory ($XDG_DATA_HOME or ~/.local/share)
    """
    data_home = os.environ.get('XDG_DATA_HOME')
    if data_home:
        data_dir = Path(data_home)
    else:
        data_dir = Path.home() / '.local' / 'share'

    app_dir = data_dir / 'timew-timer'
    app_dir.mkdir(parents=True, exist_ok=True)
    return app_dir


def get_default_log_file(json: bool) -> Path:
    """Get the default log file path."""
    json_postfix = '.json' if json else ''
    return get_data_dir() / f'timew-timer{json_postfix}.log'


def configure_logging(args: argparse.Namespace, subcommand: str) -> None:
    """
    Configure logging based on command-line arguments.

    Args:
        args: Parsed command-line arguments
        subcommand: The subcommand being executed
    """
    log_level = getattr(logging, args.log_level, 0)
    console_log_level = getattr(logging, args.console_log_level, 0)

    log_file = None
    if args.log_file and log_level > 0:
        log_file = args.log_file
    elif log_level > 0:
        log_file = get_default_log_file(not args.no_log_json)

    run_mode = {
        'subcommand': subcommand,
        'dry_run': args.dry_run,
    }

    setup_logging(
        json_format=not args.no_log_json,
        log_level=log_level,
        console_log_level=console_log_level,
        log_file=log_file,
        run_mode=run_mode
    )


# ===== Tag history persistence =====

def get_history_file(cfg: dict) -> Path:
    history_cfg = cfg.get('history', {}) if cfg else {}
    if history_cfg.get('file'):
        return Path(history_cfg['file']).expanduser()
    return get_data_dir() / 'history.json'


def history_enabled(cfg: dict) -> bool:
    return bool((cfg or {}).get('history', {}).get('persist', True))


def load_history(history: TagHistory, path: Path) -> None:
    """Seed the tag history from a JSON file written by save_history()."""
    if not path.exists():
        return
    try:
        tags = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Ignoring unreadable tag history {path}: {e}")
        return
    if not isinstance(tags, list):
        logger.warning(f"Ignoring tag history {path}: expected a list")
        return
    history.load(tag for tag in tags if isinstance(tag, str))


def save_history(history: TagHistory, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(history.snapshot(), indent=2))


# ===== Presentation =====

def describe_snapshot(snapshot: TimerSnapshot) -> str:
    if not snapshot.active:
        return 'No timer running'
    return (
        f"Tracking {' '.join(snapshot.tags) or '(no tags)'}  "
        f"{format_elapsed(snapshot.elapsed_seconds)}  "
        f"(@{snapshot.id}, since {ts2strtime(snapshot.started_at)})"
    )


def print_event(event: TimerEvent) -> None:
    if isinstance(event, SnapshotChanged):
        user_output(describe_snapshot(event.new), color='green' if event.new.active else None)
    elif isinstance(event, TagsUpdated):
        user_output(f"Tags: {' '.join(event.old_tags)} -> {' '.join(event.new_tags)}")
    elif isinstance(event, TagUpdateFailed):
        user_output(f"Tag update failed: {event.reason}", color='red')
    elif isinstance(event, ReconcileFailed):
        user_output(f"Tracker error: {event.error}", color='red', attrs=['bold'])


# ===== Subcommands =====

def run_status(args: argparse.Namespace, service: TimerService) -> int:
    """Execute the status subcommand."""
    snapshot = service.reconciler.refresh()
    if args.json:
        data = snapshot.to_dict()
        data['binary_available'] = service.binary_available
        data['last_error'] = str(service.last_error) if service.last_error else None
        print(json.dumps(data, indent=2))
    elif service.last_error is not None:
        user_output(f"Tracker error: {service.last_error}", color='red')
    else:
        user_output(describe_snapshot(snapshot))
    return EXIT_OK if service.last_error is None else EXIT_ERROR


def run_start(args: argparse.Namespace, service: TimerService) -> int:
    """Execute the start subcommand."""
    service.coordinator.start(' '.join(args.tags))
    user_output(describe_snapshot(service.snapshot), color='green')
    return EXIT_OK


def run_stop(args: argparse.Namespace, service: TimerService) -> int:
    """Execute the stop subcommand."""
    tags = service.snapshot.tags
    service.coordinator.stop()
    user_output(f"Stopped {' '.join(tags)}")
    return EXIT_OK


def run_tag(args: argparse.Namespace, service: TimerService) -> int:
    """Execute the tag subcommand."""
    service.coordinator.update_tags(' '.join(args.tags))
    user_output(describe_snapshot(service.snapshot), color='green')
    return EXIT_OK


def run_watch(args: argparse.Namespace, service: TimerService) -> int:
    """Execute the watch subcommand."""
    interval = args.interval or service.reconciler.poll_interval
    service.events.subscribe(print_event)
    service.run_in_background()

    stop = threading.Event()
    lines = 0
    user_output(describe_snapshot(service.snapshot))
    while not stop.wait(interval):
        if service.snapshot.active:
            user_output(describe_snapshot(service.snapshot))
        lines += 1
        if args.count is not None and lines >= args.count:
            break
    return EXIT_OK


def run_check_tags(args: argparse.Namespace) -> int:
    """Execute the check-tags subcommand."""
    result = validate_tags(' '.join(args.text))
    if result:
        user_output(' '.join(result.tags))
        return EXIT_OK
    for error in result.errors:
        user_output(error, color='red')
    return EXIT_ERROR


def run_history(args: argparse.Namespace, service: TimerService) -> int:
    """Execute the history subcommand."""
    if args.clear:
        service.history.clear()
        user_output('Tag history cleared')
        return EXIT_OK
    for tag in reversed(service.history.snapshot()):
        print(tag)
    return EXIT_OK


def run_validate(args: argparse.Namespace, cfg: dict) -> int:
    """Execute the validate subcommand."""
    from .config_validation import validate_config

    errors, warnings = validate_config(cfg)
    for warning in warnings:
        user_output(f"Warning: {warning}", color='yellow')
    if errors:
        print("Configuration errors found:")
        for error in errors:
            print(f"  - {error}")
        return EXIT_ERROR
    print("Configuration is valid")
    return EXIT_OK


SERVICE_COMMANDS = {
    'status': run_status,
    'start': run_start,
    'stop': run_stop,
    'tag': run_tag,
    'watch': run_watch,
    'history': run_history,
}

# Subcommands that change the tracker and need it to be present
TRACKER_COMMANDS = {'status', 'start', 'stop', 'tag', 'watch'}


def run_service_command(args: argparse.Namespace, cfg: dict) -> int:
    service = TimerService.from_config(cfg, dry_run=args.dry_run, binary=args.binary)
    persist = history_enabled(cfg)
    history_file = get_history_file(cfg) if persist else None
    if history_file is not None:
        load_history(service.history, history_file)

    with service:
        if args.subcommand in TRACKER_COMMANDS and not service.open():
            print("Error: TimeWarrior (timew) is not installed or not in PATH", file=sys.stderr)
            return EXIT_UNAVAILABLE
        exit_code = SERVICE_COMMANDS[args.subcommand](args, service)

    if history_file is not None:
        save_history(service.history, history_file)
    return exit_code


def main(argv=None) -> int:
    """
    Main CLI entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv)

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.subcommand:
        args = parser.parse_args(list(argv if argv is not None else sys.argv[1:]) + ['status'])
    subcommand = args.subcommand

    if args.config and not args.config.exists():
        print(f"Error: Config file not found: {args.config}", file=sys.stderr)
        return EXIT_ERROR

    configure_logging(args, subcommand)

    from . import config as config_module
    cfg = config_module.load_custom_config(args.config) if args.config else config_module.config

    try:
        if subcommand == 'validate':
            return run_validate(args, cfg)
        if subcommand == 'check-tags':
            return run_check_tags(args)
        if subcommand in SERVICE_COMMANDS:
            return run_service_command(args, cfg)

        print(f"Error: Unknown subcommand: {subcommand}", file=sys.stderr)
        return EXIT_ERROR

    except KeyboardInterrupt:
        print("\nExiting...")
        return EXIT_OK
    except OperationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR
    except BinaryUnavailableError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_UNAVAILABLE
    except GatewayError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == '__main__':
    sys.exit(main())
