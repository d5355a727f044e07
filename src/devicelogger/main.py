from __future__ import annotations

"""
Main Entry Point and Global Supervisor.

Routes execution to the CLI controller and traps anything the controller
did not handle, so a failure of the tool prints a readable report instead of
a bare traceback.
"""

import logging
import sys
import traceback
from typing import Any, List, Optional

# -----------------------------------------------------------------------------
# GLOBAL SUPERVISOR (EXCEPTION HANDLING)
# -----------------------------------------------------------------------------

def report_fatal_exception(exctype: type[BaseException], value: BaseException, tb: Any) -> None:
    """
    Persist and print an unhandled exception of the CLI process.

    Args:
        exctype: Exception class.
        value: Exception instance.
        tb: Traceback object.
    """
    stack_trace = "".join(traceback.format_exception(exctype, value, tb))

    logger = logging.getLogger("devicelogger.supervisor")
    logger.critical(f"FATAL EXCEPTION DETECTED: {value}\n{stack_trace}")

    print("\n" + "=" * 80, file=sys.stderr)
    print("CRITICAL ERROR (DEVICELOGGER CLI)", file=sys.stderr)
    print("=" * 80, file=sys.stderr)
    print(stack_trace, file=sys.stderr)


# -----------------------------------------------------------------------------
# EXECUTION ROUTING
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the CLI and convert unexpected failures into exit code 1.

    Returns:
        int: Standard process exit code (0: Success, 1: Error).
    """
    try:
        from devicelogger.interface.cli.app import main as cli_main
        return cli_main(argv)
    except Exception as e:
        report_fatal_exception(type(e), e, e.__traceback__)
        return 1


if __name__ == "__main__":
    sys.exit(main())
