"""
Cronlog CLI - Thin entrypoint for the capture and serve commands.

    backup.sh 2>&1 | cronlog capture --app backup --code $?
    cronlog serve --port 9000 --db /var/lib/cronlog/store.db

Design Principles:
==================
- CLI is a dispatcher only
- Surface errors verbatim from the store
- Exit non-zero on failure
- No interactive prompts

Exit Codes:
===========
- 0: Success (including empty captured output)
- 1: Validation error (missing application name)
- 2: Storage error
- 4: System error (input not a pipe, unreadable or invalid config)
"""

import argparse
import logging
import sys
from typing import List, NoReturn, Optional

from . import __version__
from .capture import capture_result, read_pipe
from .config import Settings, load_app_config, load_settings
from .errors import CaptureError, ConfigError, InvalidArgumentError, StorageError
from .storage import ResultStore

EXIT_OK = 0
EXIT_VALIDATION = 1
EXIT_STORAGE = 2
EXIT_SYSTEM = 4

# capture is quiet unless --loglevel or CRONLOG_LOGLEVEL asks otherwise
CAPTURE_LOG_LEVEL = "WARN"

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(level: str) -> None:
    """Configure the root logger once; unknown level names mean INFO."""
    logging.basicConfig(
        level=LOG_LEVELS.get(level.upper(), logging.INFO),
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


def cmd_capture(args: argparse.Namespace) -> NoReturn:
    """
    Store piped job output.

    Exit codes:
        0: Stored, or nothing to store
        1: No application name supplied
        2: Store could not be opened or written
        4: Settings are invalid, or stdin is not a pipe or could not be read
    """
    if not args.app:
        print("No application-name supplied, exiting!", file=sys.stderr)
        sys.exit(EXIT_VALIDATION)

    try:
        settings = load_settings(
            base=Settings(log_level=CAPTURE_LOG_LEVEL),
            db_path=args.db,
            log_level=args.loglevel,
        )
    except ConfigError as e:
        print(f"ERROR: {e}, exiting!", file=sys.stderr)
        sys.exit(EXIT_SYSTEM)
    setup_logging(settings.log_level)

    try:
        payload = read_pipe()
    except CaptureError as e:
        print(f"Could not read from stdin: {e}, exiting!", file=sys.stderr)
        sys.exit(EXIT_SYSTEM)

    if not payload:
        sys.exit(EXIT_OK)

    try:
        with ResultStore.from_settings(settings) as store:
            capture_result(store, args.app, args.code, payload)
    except InvalidArgumentError as e:
        print(f"ERROR: {e}, exiting!", file=sys.stderr)
        sys.exit(EXIT_VALIDATION)
    except StorageError as e:
        print(f"Could not save item to store: {e}, exiting!", file=sys.stderr)
        sys.exit(EXIT_STORAGE)

    sys.exit(EXIT_OK)


def cmd_serve(args: argparse.Namespace) -> NoReturn:
    """
    Run the read-only HTTP API.

    Exit codes:
        0: Server stopped cleanly
        2: Store could not be opened
        4: Configuration could not be read or is invalid
    """
    from .monitoring import run_server

    try:
        app_config = load_app_config(args.config)
        settings = load_settings(
            db_path=args.db,
            host=args.host,
            port=args.port,
            log_level=args.loglevel,
            app_config=app_config,
        )
    except ConfigError as e:
        print(f"ERROR: {e}, exiting!", file=sys.stderr)
        sys.exit(EXIT_SYSTEM)

    setup_logging(settings.log_level)

    try:
        store = ResultStore.from_settings(settings)
    except StorageError as e:
        print(f"ERROR: {e}, exiting!", file=sys.stderr)
        sys.exit(EXIT_STORAGE)

    run_server(settings, store)
    sys.exit(EXIT_OK)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='cronlog',
        description='Cronlog - record and browse the results of scheduled commands',
    )
    parser.add_argument(
        '--version',
        action='version',
        version=f'cronlog {__version__}'
    )

    subparsers = parser.add_subparsers(dest='command', help='Command to execute')

    # Capture command
    parser_capture = subparsers.add_parser(
        'capture',
        help='Store output piped from a finished command'
    )
    parser_capture.add_argument(
        '--app',
        default='',
        help='The name of the application'
    )
    parser_capture.add_argument(
        '--code',
        type=int,
        default=-1,
        help='The exit-code of the command (typically $?)'
    )
    parser_capture.add_argument(
        '--db',
        default=None,
        help='The path to the db file'
    )
    parser_capture.add_argument(
        '--loglevel',
        default=None,
        help='The loglevel to use (DEBUG|INFO|WARN|ERROR; default: WARN)'
    )
    parser_capture.set_defaults(func=cmd_capture)

    # Serve command
    parser_serve = subparsers.add_parser(
        'serve',
        help='Serve the read-only HTTP API'
    )
    parser_serve.add_argument(
        '--host',
        default=None,
        help='The hostname of the server (default: localhost)'
    )
    parser_serve.add_argument(
        '--port',
        type=int,
        default=None,
        help='The port of the server (default: 9000)'
    )
    parser_serve.add_argument(
        '--db',
        default=None,
        help='The path to the db file (default: ./cronlog-store.db)'
    )
    parser_serve.add_argument(
        '--loglevel',
        default=None,
        help='The loglevel to use (DEBUG|INFO|WARN|ERROR)'
    )
    parser_serve.add_argument(
        '--config',
        default=None,
        help='The path to application.json or its directory'
    )
    parser_serve.set_defaults(func=cmd_serve)

    return parser


def main(argv: Optional[List[str]] = None) -> NoReturn:
    """
    Main CLI entrypoint.

    Parses arguments and dispatches to subcommands.
    Without a command, prints usage and exits successfully.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(EXIT_OK)

    args.func(args)


if __name__ == '__main__':
    main()
