from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: initialization of diagnostics, construction
of the service on the selected storage root, dispatch of the requested
command, and rendering of its result.
"""

import argparse
import sys
from typing import Callable, Dict, List, Optional

from devicelogger.domain.models import CrashRecord
from devicelogger.infra.fs import is_valid_file_name
from devicelogger.infra.logging import (
    LoggingConfig,
    configure_logging,
    get_default_diagnostics_path,
    get_logger,
)
from devicelogger.interface.cli import args as cli_args
from devicelogger.mail import create_mail_message
from devicelogger.service import DeviceLogger

logger = get_logger(__name__)

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the CLI workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code (0 for success, 1 for failure).
    """
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    log_level = "DEBUG" if args.verbose else "WARNING"
    log_file = None
    if args.diagnostics_file is not None:
        log_file = args.diagnostics_file or get_default_diagnostics_path()
    configure_logging(LoggingConfig(level=log_level, console=True, log_file=log_file))
    logger.debug(f"CLI command '{args.command}' on root {args.root_dir or '<user data dir>'}")

    try:
        with DeviceLogger(root_dir=args.root_dir) as device_logger:
            return _COMMANDS[args.command](device_logger, args)
    except OSError as e:
        logger.error(f"CLI command '{args.command}' failed: {e}", exc_info=True)
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

# -----------------------------------------------------------------------------
# COMMANDS
# -----------------------------------------------------------------------------

def _cmd_show(device_logger: DeviceLogger, args: argparse.Namespace) -> int:
    if args.tail is not None:
        content = device_logger.get_recent_lines(args.tail)
    else:
        content = device_logger.get_log_content()

    if content is None:
        print("ERROR: Log file not found.", file=sys.stderr)
        return 1

    sys.stdout.write(content)
    return 0


def _cmd_clear(device_logger: DeviceLogger, args: argparse.Namespace) -> int:
    device_logger.clear_logs()
    print(f"Cleared {device_logger.log_file_path}")
    return 0


def _cmd_size(device_logger: DeviceLogger, args: argparse.Namespace) -> int:
    print(
        f"{device_logger.current_file_size_bytes} bytes "
        f"({device_logger.current_file_size} MB, maximum {device_logger.maximum_file_size_mb} MB)"
    )
    return 0


def _cmd_name(device_logger: DeviceLogger, args: argparse.Namespace) -> int:
    if args.new_name is not None:
        if not is_valid_file_name(args.new_name):
            print(f"ERROR: Invalid log file name: {args.new_name!r}", file=sys.stderr)
            return 1
        device_logger.file_name = args.new_name
    print(device_logger.file_name)
    return 0


def _cmd_crash(device_logger: DeviceLogger, args: argparse.Namespace) -> int:
    store = device_logger.crash_store
    record = store.consume() if args.consume else store.peek()
    if record is None:
        print("No pending crash record.")
        return 0

    _print_crash(record)
    return 0


def _cmd_mail(device_logger: DeviceLogger, args: argparse.Namespace) -> int:
    msg = create_mail_message(
        device_logger,
        recipients=args.recipients,
        sender=args.sender,
        subject=args.subject,
    )
    if msg is None:
        print("ERROR: Log file not found.", file=sys.stderr)
        return 1

    with open(args.output, "wb") as f:
        f.write(msg.as_bytes())
    print(f"Wrote {args.output}")
    return 0


_COMMANDS: Dict[str, Callable[[DeviceLogger, argparse.Namespace], int]] = {
    "show": _cmd_show,
    "clear": _cmd_clear,
    "size": _cmd_size,
    "name": _cmd_name,
    "crash": _cmd_crash,
    "mail": _cmd_mail,
}

# -----------------------------------------------------------------------------
# VIEW RENDERING (HUMAN READABLE)
# -----------------------------------------------------------------------------

def _print_crash(record: CrashRecord) -> None:
    """
    Print a crash record to standard output.

    Args:
        record: The record to render.
    """
    print(f"Name:   {record.name}")
    print(f"Reason: {record.reason}")
    if record.call_stack:
        print("Stack:")
        for entry in record.call_stack:
            print(f"  {entry}")
