"""Custom exception hierarchy for dtc.

All exceptions that cross layer boundaries must inherit from
:class:`DtcError`.  The top-level error boundary in
:mod:`dtc.cli.app` maps each branch of this hierarchy to exactly one
exit outcome.

Hierarchy
---------
DtcError
├── OptionError
│   ├── EngineNotFoundError
│   └── EnvironmentError
├── CheckingError
│   └── BackendError
├── GenerationError
└── InternalInvariantViolation
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, NoReturn

if TYPE_CHECKING:
    from dtc.core.models import Diagnostic

HELP_HINT_TEMPLATE = "Run '{prog} --help' for help on command line options."


class DtcError(Exception):
    """Base exception for all dtc errors.

    Every user-visible error condition must map to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Configuration -----------------------------------------------------------

class OptionError(DtcError):
    """Raised for bad or missing configuration.

    Detected before or during initialization.  Always reported with a
    hint pointing at ``--help`` unless a more specific hint is given.
    """

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        prog: str = "dtc",
    ) -> None:
        super().__init__(
            message,
            hint=hint if hint is not None else HELP_HINT_TEMPLATE.format(prog=prog),
        )


class EngineNotFoundError(OptionError):
    """Raised when no checking engine is installed or the requested one is missing."""


class EnvironmentError(OptionError):
    """Raised when a required runtime dependency is not available."""


# --- Checking ----------------------------------------------------------------

class CheckingError(DtcError):
    """Raised when the input fails to scope-check or type-check.

    Parameters
    ----------
    message:
        Human-readable summary of the failure.
    diagnostics:
        The error-worthy diagnostics that caused the failure.
    warnings:
        Warnings attached to this particular failure; rendered before
        the failure itself by the error boundary.
    """

    def __init__(
        self,
        message: str,
        *,
        diagnostics: Iterable[Diagnostic] = (),
        warnings: Iterable[Diagnostic] = (),
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.diagnostics: tuple[Diagnostic, ...] = tuple(diagnostics)
        self.warnings: tuple[Diagnostic, ...] = tuple(warnings)


class BackendError(CheckingError):
    """Raised when an enabled backend fails to drive its input."""


# --- Artifacts ---------------------------------------------------------------

class GenerationError(DtcError):
    """Raised by an artifact generator (HTML, LaTeX, dependency graph).

    Generation is best-effort: the Session Pipeline reports these and
    never lets them change the checking outcome.
    """


# --- Defects -----------------------------------------------------------------

class InternalInvariantViolation(DtcError):
    """A code path this design declares unreachable was reached.

    Signals a defect in dtc itself, never a problem with the user's
    input or options.
    """

    def __init__(self, reason: str, **context: object) -> None:
        super().__init__(reason)
        self.reason: str = reason
        self.context: dict[str, object] = dict(context)

    def __str__(self) -> str:
        if not self.context:
            return self.reason
        details = ", ".join(f"{key}={value!r}" for key, value in sorted(self.context.items()))
        return f"{self.reason} ({details})"


def impossible(reason: str, **context: object) -> NoReturn:
    """Mark a code path as unreachable.

    Raises :class:`InternalInvariantViolation` carrying *reason* and the
    keyword *context* so the error boundary can render the defect.
    """
    raise InternalInvariantViolation(reason, **context)
