"""Error taxonomy for stack operations.

Every failure raised by core code derives from StackError so the CLI boundary
can render it without a stack trace. UserCancelled is deliberately separate:
an operator abort is an early exit, not a failure.
"""


class StackError(Exception):
    """Base class for all expected stack failures."""


class ConflictError(StackError):
    """Operation conflicts with existing state (duplicate name, parent conflict)."""


class NotFoundError(StackError):
    """Referenced branch, parent or metadata does not exist."""


class InvalidOperationError(StackError):
    """Operation is not allowed in the current state."""


class CycleError(ConflictError, InvalidOperationError):
    """Parent change would make a branch its own ancestor."""

    def __init__(self, child: str, parent: str | None = None) -> None:
        self.child = child
        self.parent = parent
        if parent is None:
            super().__init__(f"link for '{child}' would create a cycle")
        else:
            super().__init__(f"linking '{child}' under '{parent}' would create a cycle")


class StorageError(StackError):
    """Persistent store failed; the enclosing transaction was rolled back."""


class ConfigError(StackError):
    """Repository configuration could not be read."""


class ProviderError(StackError):
    """Pull-request provider lookup failed."""


class ExternalToolError(StackError):
    """A version-control subprocess failed."""


class SyncFailedError(ExternalToolError):
    """A sync run aborted; the run record was finalized as failed."""

    def __init__(self, run_id: int, message: str, warnings: list[str]) -> None:
        self.run_id = run_id
        self.warnings = warnings
        super().__init__(f"sync failed: {message}")


class UserCancelled(Exception):
    """Operator aborted an interactive prompt."""

    def __init__(self) -> None:
        super().__init__("cancelled by user")
