from typing import Any


class StackpruneError(Exception):
    """Exceptions raised in this package."""


class ParsingFailure(StackpruneError):
    """A capture could not be interpreted as a sequence of frames."""


class WriteFailure(StackpruneError):
    """The output sink rejected a write while rendering frames."""


class StackpruneCommandError(StackpruneError):
    """Exceptions raised from this package's CLI commands."""

    def __init__(self, *args: Any, exit_code: int) -> None:
        super().__init__(*args)
        self.exit_code = exit_code
