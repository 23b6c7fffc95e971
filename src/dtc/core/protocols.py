"""Protocols (interfaces) consumed by the core layer.

These define the contracts that checking engines, backends, artifact
generators, reporters and interactors must satisfy.  Core code depends
ONLY on these protocols — never on concrete implementations.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Protocol

from dtc.core.models import (
    BackendFlag,
    CheckedModule,
    CheckMode,
    CheckResult,
    Configuration,
    DiagnosticSet,
)

SetupAction = Callable[[], None]
"""Validates and commits the configuration.  Must run before any check."""

CheckAction = Callable[[Path], "CheckedModule | None"]
"""Checks one absolute input path; returns the artifact or ``None``."""


class CheckingEngine(Protocol):
    """Contract for the scope-checking / type-checking engine.

    Any object that implements these methods with the correct signatures
    satisfies this protocol structurally (no explicit inheritance
    required).
    """

    def known_warnings(self) -> Mapping[str, str]:
        """Return warning names mapped to one-line descriptions."""
        ...  # pragma: no cover

    def configure(self, config: Configuration) -> None:
        """Commit *config* before any checking happens.

        Raises
        ------
        OptionError
            When the configuration is unusable (bad library path, ...).
        """
        ...  # pragma: no cover

    def check(self, path: Path, mode: CheckMode) -> CheckResult:
        """Check the file at *path* in *mode*.

        Raises
        ------
        CheckingError
            When the file fails to scope-check or type-check.
        """
        ...  # pragma: no cover

    def accumulated_warnings(self) -> DiagnosticSet:
        """Return every warning collected so far in this run."""
        ...  # pragma: no cover


class ArtifactGenerator(Protocol):
    """Contract for HTML, LaTeX and dependency-graph generators."""

    def generate(self, module: CheckedModule, config: Configuration) -> None:
        """Write the artifact for *module*.

        Raises
        ------
        GenerationError
            When the artifact cannot be produced.
        """
        ...  # pragma: no cover


class Backend(Protocol):
    """Contract for pluggable compilation backends."""

    name: str
    version: str | None
    flags: tuple[BackendFlag, ...]

    def enabled(self, config: Configuration) -> bool:
        """Whether *config* asks for this backend."""
        ...  # pragma: no cover

    def drive(self, config: Configuration, path: Path, check: CheckAction) -> object:
        """Compile the input at *path* under *config*.

        *check* is the session's checking action; backends call it to
        obtain the checked module through the regular pipeline.

        Raises
        ------
        BackendError
            When compilation fails.
        """
        ...  # pragma: no cover


class Reporter(Protocol):
    """Where the pipeline and the interaction loops send user-facing text."""

    def warnings(self, banner: str, diagnostics: DiagnosticSet) -> None:
        """Show *diagnostics* under *banner*."""
        ...  # pragma: no cover

    def error(self, exc: BaseException) -> None:
        """Show a failure that does not end the run."""
        ...  # pragma: no cover

    def info(self, message: str) -> None:
        """Show a status message."""
        ...  # pragma: no cover


class Interactor(Protocol):
    """Uniform two-phase execution contract, one per interaction mode.

    ``setup`` always runs before the first ``check`` call.
    """

    reporter: Reporter

    def run(self, setup: SetupAction, check: CheckAction) -> None:
        """Run initialization, then drive *check* per the protocol."""
        ...  # pragma: no cover
