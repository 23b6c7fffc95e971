"""Warning suppression and promotion rules built from ``-W`` flags.

Every function in this module is a **pure** transformation — no I/O,
no side effects, fully deterministic.

Flags are processed in command-line order:

* ``NAME``    — enable the warning ``NAME``.
* ``noNAME``  — suppress the warning ``NAME``.
* ``error``   — treat plain warnings as error-worthy.
* ``noerror`` — undo ``error``.
* ``ignore``  — suppress every warning.
* ``all``     — re-enable every warning.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from dtc.core.models import Diagnostic, DiagnosticSet, Severity
from dtc.exceptions import OptionError


@dataclass(frozen=True, slots=True)
class WarningPolicy:
    """The suppression rules in force for a run."""

    suppressed: frozenset[str] = frozenset()
    suppress_all: bool = False
    warnings_are_errors: bool = False

    def is_suppressed(self, diagnostic: Diagnostic) -> bool:
        """Whether *diagnostic* is filtered out by the configured rules."""
        return self.suppress_all or diagnostic.name in self.suppressed

    def is_error_worthy(self, diagnostic: Diagnostic) -> bool:
        """Whether *diagnostic* blocks the checked-module artifact."""
        if diagnostic.severity is Severity.ERROR:
            return True
        return self.warnings_are_errors and diagnostic.severity is Severity.WARNING


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

def build_policy(
    flags: Iterable[str],
    known_warnings: Mapping[str, str],
) -> WarningPolicy:
    """Fold *flags* into a :class:`WarningPolicy`.

    Raises
    ------
    OptionError
        If a flag names a warning the engine does not know.
    """
    suppressed: set[str] = set()
    suppress_all = False
    as_errors = False

    for raw in flags:
        flag = raw.strip()
        if flag == "error":
            as_errors = True
        elif flag == "noerror":
            as_errors = False
        elif flag == "ignore":
            suppress_all = True
            suppressed.clear()
        elif flag == "all":
            suppress_all = False
            suppressed.clear()
        elif flag.startswith("no") and flag[2:] in known_warnings:
            suppressed.add(flag[2:])
        elif flag in known_warnings:
            suppressed.discard(flag)
        else:
            raise OptionError(
                f"Unknown warning flag: {flag}",
                hint="Run 'dtc --help=warning' for the list of warning names.",
            )

    return WarningPolicy(
        suppressed=frozenset(suppressed),
        suppress_all=suppress_all,
        warnings_are_errors=as_errors,
    )


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

def error_worthy(diagnostics: DiagnosticSet, policy: WarningPolicy) -> list[Diagnostic]:
    """Return the entries of *diagnostics* that block the artifact."""
    return [d for d in diagnostics if policy.is_error_worthy(d)]


def apply_policy(
    diagnostics: Iterable[Diagnostic],
    policy: WarningPolicy,
) -> list[Diagnostic]:
    """Drop suppressed entries, preserving order."""
    return [d for d in diagnostics if not policy.is_suppressed(d)]
