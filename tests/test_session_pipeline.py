"""Tests for SessionPipeline (core/session_pipeline.py).

The checking engine, generators and reporter are **faked** — no real
checker, no files besides ``tmp_path``.  These tests verify:

* Initialization ordering and warning-flag validation
* Outcome decision for clean, blocking and suppressed diagnostics
* Scope-only mode never retains a module nor generates artifacts
* Artifact generation is best effort
* Run-wide warnings are reported under the fixed banner
* Unexpected engine errors are wrapped as ``CheckingError``
"""

from __future__ import annotations

from pathlib import Path

import pytest

from conftest import FakeEngine, FakeGenerator, RecordingReporter
from dtc.core.benchmark import Benchmark, Statistics
from dtc.core.models import (
    ArtifactKind,
    CheckedModule,
    CheckMode,
    Configuration,
    Diagnostic,
    Severity,
)
from dtc.core.protocols import ArtifactGenerator
from dtc.core.session_pipeline import ALL_DONE_BANNER, SessionPipeline
from dtc.exceptions import (
    CheckingError,
    GenerationError,
    InternalInvariantViolation,
    OptionError,
)

_BLOCKING = Diagnostic(
    name="UnsolvedMetaVariables", message="unsolved meta ?0", severity=Severity.ERROR
)
_PLAIN = Diagnostic(name="ShadowingInTelescope", message="x is bound twice")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _make_pipeline(
    engine: FakeEngine,
    *,
    reporter: RecordingReporter | None = None,
    generators: dict[ArtifactKind, ArtifactGenerator] | None = None,
    statistics: Statistics | None = None,
    benchmark: Benchmark | None = None,
    **config: object,
) -> SessionPipeline:
    return SessionPipeline(
        Configuration(**config),  # type: ignore[arg-type]
        engine,
        generators=generators or {},
        reporter=reporter if reporter is not None else RecordingReporter(),
        benchmark=benchmark if benchmark is not None else Benchmark(),
        statistics=statistics if statistics is not None else Statistics(),
    )


def _ready(pipeline: SessionPipeline) -> SessionPipeline:
    pipeline.setup()
    return pipeline


# ---------------------------------------------------------------------------
# Initialization
# ---------------------------------------------------------------------------

class TestSetup:
    def test_setup_configures_engine(self, engine: FakeEngine) -> None:
        pipeline = _make_pipeline(engine)
        assert not pipeline.configured
        pipeline.setup()
        assert pipeline.configured
        assert engine.call_names == ["configure"]

    def test_unknown_warning_flag_fails_before_configure(self, engine: FakeEngine) -> None:
        pipeline = _make_pipeline(engine, warning_flags=("noSuchWarning",))
        with pytest.raises(OptionError):
            pipeline.setup()
        assert engine.calls == []
        assert not pipeline.configured

    def test_engine_rejection_propagates(self) -> None:
        engine = FakeEngine(configure_error=OptionError("bad include path"))
        pipeline = _make_pipeline(engine)
        with pytest.raises(OptionError, match="bad include path"):
            pipeline.setup()
        assert not pipeline.configured

    def test_check_before_setup_is_a_defect(self, engine: FakeEngine, source_file: Path) -> None:
        pipeline = _make_pipeline(engine)
        with pytest.raises(InternalInvariantViolation):
            pipeline.check(source_file)
        assert engine.calls == []


# ---------------------------------------------------------------------------
# Outcome decision
# ---------------------------------------------------------------------------

class TestOutcome:
    def test_clean_file_returns_module(self, engine: FakeEngine, source_file: Path) -> None:
        module = _ready(_make_pipeline(engine)).check(source_file)
        assert isinstance(module, CheckedModule)
        assert module.source == source_file
        assert engine.calls[-1] == ("check", source_file, CheckMode.TYPE_CHECK)

    def test_plain_warnings_do_not_block(self, source_file: Path) -> None:
        engine = FakeEngine(diagnostics=[_PLAIN])
        assert _ready(_make_pipeline(engine)).check(source_file) is not None

    def test_unsuppressed_blocking_diagnostic_fails(self, source_file: Path) -> None:
        engine = FakeEngine(diagnostics=[_PLAIN, _BLOCKING])
        with pytest.raises(CheckingError) as exc_info:
            _ready(_make_pipeline(engine)).check(source_file)
        assert exc_info.value.diagnostics == (_BLOCKING,)
        assert exc_info.value.warnings == (_PLAIN,)

    def test_attached_warnings_respect_suppression(self, source_file: Path) -> None:
        engine = FakeEngine(diagnostics=[_PLAIN, _BLOCKING])
        pipeline = _ready(_make_pipeline(engine, warning_flags=("noShadowingInTelescope",)))
        with pytest.raises(CheckingError) as exc_info:
            pipeline.check(source_file)
        assert exc_info.value.warnings == ()

    def test_fully_suppressed_blocking_diagnostic_is_not_a_failure(
        self, source_file: Path
    ) -> None:
        stats = Statistics()
        engine = FakeEngine(diagnostics=[_BLOCKING])
        pipeline = _ready(
            _make_pipeline(engine, statistics=stats, warning_flags=("noUnsolvedMetaVariables",))
        )
        assert pipeline.check(source_file) is None
        assert stats.get("diagnostics suppressed") == 1

    def test_warnings_as_errors(self, source_file: Path) -> None:
        engine = FakeEngine(diagnostics=[_PLAIN])
        pipeline = _ready(_make_pipeline(engine, warning_flags=("error",)))
        with pytest.raises(CheckingError) as exc_info:
            pipeline.check(source_file)
        assert exc_info.value.diagnostics == (_PLAIN,)

    @pytest.mark.parametrize("diagnostics", [(), (_PLAIN,), (_BLOCKING,)])
    def test_scope_only_never_retains_module(
        self, diagnostics: tuple[Diagnostic, ...], source_file: Path
    ) -> None:
        engine = FakeEngine(diagnostics=diagnostics)
        pipeline = _ready(_make_pipeline(engine, only_scope_checking=True))
        assert pipeline.check(source_file) is None
        assert engine.calls[-1][2] is CheckMode.SCOPE_CHECK


# ---------------------------------------------------------------------------
# Engine failures
# ---------------------------------------------------------------------------

class TestEngineFailures:
    def test_checking_error_propagates_unchanged(self, source_file: Path) -> None:
        original = CheckingError("parse error")
        pipeline = _ready(_make_pipeline(FakeEngine(check_error=original)))
        with pytest.raises(CheckingError) as exc_info:
            pipeline.check(source_file)
        assert exc_info.value is original

    def test_unexpected_error_is_wrapped(self, source_file: Path) -> None:
        pipeline = _ready(_make_pipeline(FakeEngine(check_error=RuntimeError("segfault"))))
        with pytest.raises(CheckingError, match="Unexpected checking engine error") as exc_info:
            pipeline.check(source_file)
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_engine_failure_skips_generators(self, source_file: Path) -> None:
        generator = FakeGenerator()
        pipeline = _ready(
            _make_pipeline(
                FakeEngine(check_error=CheckingError("parse error")),
                generators={ArtifactKind.HTML: generator},
                generate_html=True,
            )
        )
        with pytest.raises(CheckingError):
            pipeline.check(source_file)
        assert generator.generated == []


# ---------------------------------------------------------------------------
# Artifacts
# ---------------------------------------------------------------------------

class TestArtifacts:
    def test_requested_generators_run(self, engine: FakeEngine, source_file: Path) -> None:
        html, latex = FakeGenerator(), FakeGenerator()
        stats = Statistics()
        pipeline = _ready(
            _make_pipeline(
                engine,
                generators={ArtifactKind.HTML: html, ArtifactKind.LATEX: latex},
                statistics=stats,
                generate_html=True,
            )
        )
        module = pipeline.check(source_file)
        assert html.generated == [module]
        assert latex.generated == []
        assert stats.get("artifacts generated") == 1

    def test_scope_only_runs_no_generator(self, engine: FakeEngine, source_file: Path) -> None:
        generators = {kind: FakeGenerator() for kind in ArtifactKind}
        pipeline = _ready(
            _make_pipeline(
                engine,
                generators=generators,  # type: ignore[arg-type]
                only_scope_checking=True,
                generate_html=True,
                generate_latex=True,
                dependency_graph=Path("deps.dot"),
            )
        )
        pipeline.check(source_file)
        assert all(g.generated == [] for g in generators.values())

    def test_generator_failure_is_reported_not_raised(
        self, engine: FakeEngine, source_file: Path
    ) -> None:
        reporter = RecordingReporter()
        stats = Statistics()
        latex = FakeGenerator()
        pipeline = _ready(
            _make_pipeline(
                engine,
                reporter=reporter,
                statistics=stats,
                generators={
                    ArtifactKind.HTML: FakeGenerator(error=OSError("disk full")),
                    ArtifactKind.LATEX: latex,
                },
                generate_html=True,
                generate_latex=True,
            )
        )
        module = pipeline.check(source_file)
        assert module is not None
        assert len(latex.generated) == 1
        assert len(reporter.errors) == 1
        assert isinstance(reporter.errors[0], GenerationError)
        assert "disk full" in str(reporter.errors[0])
        assert stats.get("artifacts failed") == 1

    def test_missing_generator_is_reported(
        self, engine: FakeEngine, reporter: RecordingReporter, source_file: Path
    ) -> None:
        pipeline = _ready(_make_pipeline(engine, reporter=reporter, generate_latex=True))
        assert pipeline.check(source_file) is not None
        assert "No latex generator" in str(reporter.errors[0])

    def test_generator_defect_propagates(self, engine: FakeEngine, source_file: Path) -> None:
        pipeline = _ready(
            _make_pipeline(
                engine,
                generators={ArtifactKind.HTML: FakeGenerator(error=InternalInvariantViolation("x"))},
                generate_html=True,
            )
        )
        with pytest.raises(InternalInvariantViolation):
            pipeline.check(source_file)

    def test_generation_is_billed_per_kind(self, engine: FakeEngine, source_file: Path) -> None:
        bench = Benchmark()
        pipeline = _ready(
            _make_pipeline(
                engine,
                benchmark=bench,
                generators={ArtifactKind.HTML: FakeGenerator()},
                generate_html=True,
            )
        )
        pipeline.check(source_file)
        assert {("checking",), ("generate",), ("generate", "html")} <= set(bench.totals())


# ---------------------------------------------------------------------------
# Run-wide warnings and statistics
# ---------------------------------------------------------------------------

class TestAccumulatedWarnings:
    def test_reported_under_banner(self, reporter: RecordingReporter, source_file: Path) -> None:
        engine = FakeEngine(accumulated=[_PLAIN])
        _ready(_make_pipeline(engine, reporter=reporter)).check(source_file)
        assert len(reporter.banners) == 1
        banner, diagnostics = reporter.banners[0]
        assert banner == ALL_DONE_BANNER
        assert list(diagnostics) == [_PLAIN]

    def test_suppressed_and_errors_are_omitted(
        self, reporter: RecordingReporter, source_file: Path
    ) -> None:
        engine = FakeEngine(accumulated=[_PLAIN, _BLOCKING])
        pipeline = _make_pipeline(
            engine, reporter=reporter, warning_flags=("noShadowingInTelescope",)
        )
        _ready(pipeline).check(source_file)
        assert reporter.banners == []

    def test_engine_statistics_are_merged(self, source_file: Path) -> None:
        stats = Statistics()
        engine = FakeEngine(statistics={"metas solved": 3})
        pipeline = _ready(_make_pipeline(engine, statistics=stats))
        pipeline.check(source_file)
        pipeline.check(source_file)
        assert stats.get("files checked") == 2
        assert stats.get("metas solved") == 6
