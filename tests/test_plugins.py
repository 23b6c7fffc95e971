"""Tests for plugin discovery (infra/plugins.py).

``importlib.metadata.entry_points`` is **mocked** — no installed plugin
is ever loaded.
"""

from __future__ import annotations

from collections.abc import Callable
from types import SimpleNamespace
from typing import Any

import pytest

from conftest import FakeBackend, FakeEngine, FakeGenerator
from dtc.core.models import ArtifactKind
from dtc.exceptions import EngineNotFoundError, EnvironmentError
from dtc.infra import plugins
from dtc.infra.dot_generator import DotGenerator
from dtc.infra.summary_backend import SummaryBackend


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _entry_point(name: str, factory: Callable[[], Any]) -> SimpleNamespace:
    return SimpleNamespace(name=name, value=f"fake_plugins:{name}", load=lambda: factory)


def _broken_entry_point(name: str) -> SimpleNamespace:
    def load() -> Any:
        raise ImportError("No module named 'fake_plugins'")

    return SimpleNamespace(name=name, value=f"fake_plugins:{name}", load=load)


def _install(
    monkeypatch: pytest.MonkeyPatch,
    **groups: list[SimpleNamespace],
) -> None:
    """Replace entry point discovery; keyword names use ``_`` for ``.``."""
    installed = {group.replace("_", "."): eps for group, eps in groups.items()}
    monkeypatch.setattr(
        plugins, "entry_points", lambda *, group: list(installed.get(group, []))
    )


@pytest.fixture(autouse=True)
def _no_engine_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(plugins.ENV_ENGINE, raising=False)


# ---------------------------------------------------------------------------
# Engines
# ---------------------------------------------------------------------------

class TestLoadEngine:
    def test_none_installed(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _install(monkeypatch)
        with pytest.raises(EngineNotFoundError) as exc_info:
            plugins.load_engine()
        assert "dtc.engines" in (exc_info.value.hint or "")

    def test_first_by_name_wins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        first, second = FakeEngine(), FakeEngine()
        _install(
            monkeypatch,
            dtc_engines=[_entry_point("zeta", lambda: second), _entry_point("alpha", lambda: first)],
        )
        assert plugins.load_engine() is first

    def test_explicit_name(self, monkeypatch: pytest.MonkeyPatch) -> None:
        wanted = FakeEngine()
        _install(
            monkeypatch,
            dtc_engines=[_entry_point("alpha", FakeEngine), _entry_point("zeta", lambda: wanted)],
        )
        assert plugins.load_engine("zeta") is wanted

    def test_environment_selects(self, monkeypatch: pytest.MonkeyPatch) -> None:
        wanted = FakeEngine()
        _install(
            monkeypatch,
            dtc_engines=[_entry_point("alpha", FakeEngine), _entry_point("zeta", lambda: wanted)],
        )
        monkeypatch.setenv(plugins.ENV_ENGINE, "zeta")
        assert plugins.load_engine() is wanted

    def test_requested_engine_missing(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _install(monkeypatch, dtc_engines=[_entry_point("alpha", FakeEngine)])
        with pytest.raises(EngineNotFoundError, match="'zeta' is not installed") as exc_info:
            plugins.load_engine("zeta")
        assert exc_info.value.hint == "Installed engines: alpha."

    def test_load_failure(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _install(monkeypatch, dtc_engines=[_broken_entry_point("alpha")])
        with pytest.raises(EnvironmentError, match="Failed to load plugin 'alpha'"):
            plugins.load_engine()


# ---------------------------------------------------------------------------
# Backends
# ---------------------------------------------------------------------------

class TestBackends:
    def test_builtin_summary_backend(self) -> None:
        backends = plugins.builtin_backends()
        assert [type(b) for b in backends] == [SummaryBackend]

    def test_installed_backends_sorted(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _install(
            monkeypatch,
            dtc_backends=[
                _entry_point("js", lambda: FakeBackend("js")),
                _entry_point("ghc", lambda: FakeBackend("ghc")),
            ],
        )
        assert [b.name for b in plugins.load_backends()] == ["ghc", "js"]

    def test_factory_error_is_environment_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def explode() -> FakeBackend:
            raise RuntimeError("missing toolchain")

        _install(monkeypatch, dtc_backends=[_entry_point("js", explode)])
        with pytest.raises(EnvironmentError, match="missing toolchain"):
            plugins.load_backends()


# ---------------------------------------------------------------------------
# Generators
# ---------------------------------------------------------------------------

class TestGenerators:
    def test_dot_generator_is_builtin(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _install(monkeypatch)
        generators = plugins.load_generators()
        assert set(generators) == {ArtifactKind.DEPENDENCY_GRAPH}
        assert isinstance(generators[ArtifactKind.DEPENDENCY_GRAPH], DotGenerator)

    def test_plugins_overlay_builtins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        html, graph = FakeGenerator(), FakeGenerator()
        _install(
            monkeypatch,
            dtc_generators=[
                _entry_point("html", lambda: html),
                _entry_point("dependency-graph", lambda: graph),
            ],
        )
        generators = plugins.load_generators()
        assert generators[ArtifactKind.HTML] is html
        assert generators[ArtifactKind.DEPENDENCY_GRAPH] is graph

    def test_unknown_kind_is_skipped(
        self, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
    ) -> None:
        _install(monkeypatch, dtc_generators=[_entry_point("pdf", FakeGenerator)])
        generators = plugins.load_generators()
        assert set(generators) == {ArtifactKind.DEPENDENCY_GRAPH}
        assert "unknown kind: pdf" in caplog.text
