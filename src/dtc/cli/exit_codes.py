"""Exit codes used by the CLI layer.

Centralised here so that every exit path uses a well-known, tested
value rather than magic integers scattered across the codebase.  The
numeric values are part of the command-line contract and must not
change.
"""

from __future__ import annotations

from enum import IntEnum


class ExitOutcome(IntEnum):
    """Terminal state of every run; the value is the process exit status."""

    SUCCESS = 0
    """Clean exit — the run completed without error."""

    CHECKING_ERROR = 42
    """The input failed to check, or blocking warnings were not suppressed."""

    OPTION_ERROR = 71
    """Bad or missing configuration; the user was pointed at ``--help``."""

    INTERNAL_INVARIANT_VIOLATION = 154
    """A defect in dtc itself; the user was asked to report it."""


KEYBOARD_INTERRUPT: int = 130
"""User pressed Ctrl+C.  Follows POSIX convention (128 + SIGINT=2)."""
