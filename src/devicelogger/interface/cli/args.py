from __future__ import annotations

"""
CLI Argument Definition.

Defines the command-line interface schema: global options selecting the
storage root and diagnostics verbosity, and one sub-command per public
operation of the service.
"""

import argparse

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the devicelogger CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="devicelogger",
        description="Inspect and manage the device log file and pending crash records.",
    )

    # --- Global Options ---
    p.add_argument(
        "--root",
        dest="root_dir",
        default=None,
        help="Storage root holding the log file (default: user data directory).",
    )
    p.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Print diagnostics of the logger itself to stderr.",
    )
    p.add_argument(
        "--diagnostics-file",
        nargs="?",
        const="",
        default=None,
        metavar="PATH",
        help="Also keep diagnostics in a rotating file (default location when PATH is omitted).",
    )

    sub = p.add_subparsers(dest="command", metavar="COMMAND")
    sub.required = True

    # --- Log File Inspection ---
    show = sub.add_parser("show", help="Print the log file content.")
    show.add_argument(
        "--tail",
        type=int,
        default=None,
        metavar="N",
        help="Print only the last N lines.",
    )

    sub.add_parser("clear", help="Truncate the log file to empty.")
    sub.add_parser("size", help="Print the log file size.")

    name = sub.add_parser("name", help="Print or change the active log file name.")
    name.add_argument(
        "new_name",
        nargs="?",
        default=None,
        help="New file name without extension; the current file is deleted.",
    )

    # --- Crash Records ---
    crash = sub.add_parser("crash", help="Print the pending crash record.")
    crash.add_argument(
        "--consume",
        action="store_true",
        help="Delete the record after printing it.",
    )

    # --- Mail Artifact ---
    mail = sub.add_parser("mail", help="Write an .eml message with the log file attached.")
    mail.add_argument("--to", dest="recipients", action="append", default=[], help="Recipient address (repeatable).")
    mail.add_argument("--from", dest="sender", default=None, help="Sender address.")
    mail.add_argument("--subject", default="Device logs", help="Subject line.")
    mail.add_argument("--out", dest="output", required=True, help="Destination .eml file.")

    return p
