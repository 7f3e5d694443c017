"""Convert expected stack failures into user-facing errors and exit codes."""

import logging
from collections.abc import Callable
from functools import wraps
from typing import Any

from gitstack.cli.json_output import emit_json_error
from gitstack.cli.output import emit_warnings, user_output
from gitstack.core.errors import StackError, SyncFailedError, UserCancelled

logger = logging.getLogger(__name__)

CANCELLED_EXIT_CODE = 130


def stack_error_boundary(func: Callable) -> Callable:
    """Decorator that renders StackError and UserCancelled for the CLI.

    Inspects the command's 'format' keyword. In JSON mode the error is
    emitted as an ErrorResponse document on stdout; otherwise it is printed
    as "Error: <message>" on stderr. StackError exits with 1, UserCancelled
    with 130. Any other exception propagates unchanged.

    Example:
        @click.command()
        @format_option
        @stack_error_boundary
        @click.pass_obj
        def my_command(ctx: StackContext, format: str) -> None:
            ...
    """

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        json_mode = kwargs.get("format", "text") == "json"
        try:
            return func(*args, **kwargs)
        except UserCancelled as e:
            if json_mode:
                emit_json_error(str(e), type(e).__name__, exit_code=CANCELLED_EXIT_CODE)
            user_output(str(e))
            raise SystemExit(CANCELLED_EXIT_CODE) from None
        except StackError as e:
            logger.debug("Exception details:", exc_info=True)
            warnings = e.warnings if isinstance(e, SyncFailedError) else []
            if json_mode:
                emit_json_error(str(e), type(e).__name__, exit_code=1, warnings=warnings)
            emit_warnings(warnings)
            user_output(f"Error: {e}")
            raise SystemExit(1) from None

    return wrapper
