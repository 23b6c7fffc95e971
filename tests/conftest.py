"""Shared pytest fixtures and fake collaborators for the dtc test suite.

Guidelines
----------
* No test touches the network or a real checking engine.
* Collaborators (engine, backend, generator, reporter) are faked here.
* Core tests must be pure — no side effects outside ``tmp_path``.
* Tests must not depend on OS state.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import pytest

from dtc.core.models import (
    BackendFlag,
    CheckedModule,
    CheckMode,
    CheckResult,
    Configuration,
    Diagnostic,
    DiagnosticSet,
)
from dtc.core.protocols import CheckAction

KNOWN_WARNINGS: dict[str, str] = {
    "UnsolvedMetaVariables": "unsolved meta variables",
    "UnsolvedConstraints": "unsolved constraints",
    "ShadowingInTelescope": "a telescope binds the same name twice",
}


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------

class FakeEngine:
    """Checking engine returning canned results and recording every call.

    Parameters
    ----------
    diagnostics:
        Diagnostics attached to every check result.
    accumulated:
        Run-wide warnings returned by :meth:`accumulated_warnings`.
    check_error, configure_error:
        Raised from :meth:`check` / :meth:`configure` when set.
    """

    def __init__(
        self,
        *,
        diagnostics: Iterable[Diagnostic] = (),
        accumulated: Iterable[Diagnostic] = (),
        imports: tuple[str, ...] = (),
        statistics: Mapping[str, int] | None = None,
        check_error: BaseException | None = None,
        configure_error: BaseException | None = None,
        known: Mapping[str, str] | None = None,
    ) -> None:
        self._diagnostics = tuple(diagnostics)
        self._accumulated = tuple(accumulated)
        self._imports = imports
        self._statistics = dict(statistics or {})
        self._check_error = check_error
        self._configure_error = configure_error
        self._known = dict(KNOWN_WARNINGS if known is None else known)
        self.calls: list[tuple[Any, ...]] = []

    def known_warnings(self) -> Mapping[str, str]:
        return dict(self._known)

    def configure(self, config: Configuration) -> None:
        self.calls.append(("configure", config))
        if self._configure_error is not None:
            raise self._configure_error

    def check(self, path: Path, mode: CheckMode) -> CheckResult:
        self.calls.append(("check", path, mode))
        if self._check_error is not None:
            raise self._check_error
        module = CheckedModule(name=path.stem, source=path, imports=self._imports)
        return CheckResult(
            module=module,
            diagnostics=DiagnosticSet(self._diagnostics),
            statistics=self._statistics,
        )

    def accumulated_warnings(self) -> DiagnosticSet:
        return DiagnosticSet(self._accumulated)

    @property
    def call_names(self) -> list[str]:
        return [call[0] for call in self.calls]


class FakeBackend:
    """Backend switched on by ``--<name>``; calls the checking action once."""

    def __init__(
        self,
        name: str = "fake",
        *,
        version: str | None = "1.0",
        error: BaseException | None = None,
    ) -> None:
        self.name = name
        self.version = version
        self.flags = (BackendFlag(option=f"--{name}", dest=name, help=f"run {name}"),)
        self._error = error
        self.driven: list[tuple[Configuration, Path]] = []

    def enabled(self, config: Configuration) -> bool:
        return bool(config.backend_flags.get(self.name))

    def drive(self, config: Configuration, path: Path, check: CheckAction) -> object:
        self.driven.append((config, path))
        if self._error is not None:
            raise self._error
        return check(path)


class FakeGenerator:
    """Artifact generator recording the modules it was given."""

    def __init__(self, error: BaseException | None = None) -> None:
        self._error = error
        self.generated: list[CheckedModule] = []

    def generate(self, module: CheckedModule, config: Configuration) -> None:
        if self._error is not None:
            raise self._error
        self.generated.append(module)


class RecordingReporter:
    """Reporter keeping everything it is asked to show."""

    def __init__(self) -> None:
        self.banners: list[tuple[str, DiagnosticSet]] = []
        self.errors: list[BaseException] = []
        self.messages: list[str] = []

    def warnings(self, banner: str, diagnostics: DiagnosticSet) -> None:
        self.banners.append((banner, diagnostics))

    def error(self, exc: BaseException) -> None:
        self.errors.append(exc)

    def info(self, message: str) -> None:
        self.messages.append(message)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture()
def reporter() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture()
def source_file(tmp_path: Path) -> Path:
    """An existing input file with an absolute path."""
    path = (tmp_path / "Example.dt").resolve()
    path.write_text("module Example where\n", encoding="utf-8")
    return path
