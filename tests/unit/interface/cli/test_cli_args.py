from __future__ import annotations

"""
Unit tests for CLI Argument Parsing.

Verifies:
1. Global options shared by every command.
2. Per-command arguments and defaults.
3. Rejection of incomplete invocations.
"""

import pytest

from devicelogger.interface.cli.args import build_parser


def parse_args(arg_list):
    """Helper to simulate CLI argument parsing."""
    parser = build_parser()
    return parser.parse_args(arg_list)


def test_global_options():
    """Verify the storage root and verbosity flags."""
    args = parse_args(["--root", "/tmp/logs", "-v", "size"])

    assert args.root_dir == "/tmp/logs"
    assert args.verbose is True
    assert args.command == "size"


def test_global_defaults():
    """Verify defaults when no global option is given."""
    args = parse_args(["clear"])

    assert args.root_dir is None
    assert args.verbose is False


def test_show_tail():
    """Verify the optional tail length is parsed as an integer."""
    assert parse_args(["show"]).tail is None
    assert parse_args(["show", "--tail", "25"]).tail == 25


def test_name_optional_positional():
    """Verify 'name' works both as a query and as a rename."""
    assert parse_args(["name"]).new_name is None
    assert parse_args(["name", "Session"]).new_name == "Session"


def test_crash_consume_flag():
    """Verify the consume flag defaults to a non-destructive read."""
    assert parse_args(["crash"]).consume is False
    assert parse_args(["crash", "--consume"]).consume is True


def test_mail_options():
    """Verify repeatable recipients and the required output path."""
    args = parse_args([
        "mail",
        "--to", "a@example.com",
        "--to", "b@example.com",
        "--from", "device@example.com",
        "--out", "logs.eml",
    ])

    assert args.recipients == ["a@example.com", "b@example.com"]
    assert args.sender == "device@example.com"
    assert args.subject == "Device logs"
    assert args.output == "logs.eml"


@pytest.mark.parametrize("argv", [[], ["mail"], ["show", "--tail", "many"]])
def test_incomplete_invocations_exit(argv):
    """Verify argparse rejects missing commands and bad values."""
    with pytest.raises(SystemExit):
        parse_args(argv)


def test_diagnostics_file_option():
    """Verify the optional diagnostics file path and its bare form."""
    assert parse_args(["size"]).diagnostics_file is None
    assert parse_args(["--diagnostics-file", "diag.log", "size"]).diagnostics_file == "diag.log"
    assert parse_args(["--diagnostics-file", "-v", "size"]).diagnostics_file == ""
