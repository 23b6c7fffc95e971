"""Core session pipeline — checks one file end to end.

This service delegates the actual checking to a
:class:`~dtc.core.protocols.CheckingEngine` injected at construction
time.  For each file it:

1. runs the engine in scope-check or type-check mode,
2. decides the session outcome from the returned diagnostics,
3. runs the requested artifact generators (best effort),
4. reports the run-wide accumulated warnings under a banner,
5. returns the outcome to the active interactor.

Guarantees
----------
* Pure orchestration — no ``print()``; user-facing text goes through the
  injected :class:`~dtc.core.protocols.Reporter`.
* Only :class:`~dtc.exceptions.DtcError` subclasses escape.
* :meth:`SessionPipeline.check` refuses to run before
  :meth:`SessionPipeline.setup`.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

from dtc.core.benchmark import Benchmark, Statistics
from dtc.core.models import (
    ArtifactKind,
    CheckedModule,
    CheckMode,
    CheckResult,
    Configuration,
    DiagnosticSet,
    Severity,
)
from dtc.core.protocols import ArtifactGenerator, CheckingEngine, Reporter
from dtc.core.warning_policy import WarningPolicy, apply_policy, build_policy, error_worthy
from dtc.exceptions import (
    CheckingError,
    DtcError,
    GenerationError,
    InternalInvariantViolation,
    impossible,
)
from dtc.utils.logging import get_logger

logger = get_logger(__name__)

ALL_DONE_BANNER = "All done; warnings encountered"


class SessionPipeline:
    """Stateful per-run service that checks files for the active interactor.

    Parameters
    ----------
    config:
        The immutable run configuration.
    engine:
        Any object satisfying the :class:`CheckingEngine` protocol.
    generators:
        Installed artifact generators keyed by kind.
    reporter:
        Destination for warnings and best-effort failures.
    benchmark, statistics:
        Run-wide accumulators read by the finalizer.
    """

    def __init__(
        self,
        config: Configuration,
        engine: CheckingEngine,
        *,
        generators: Mapping[ArtifactKind, ArtifactGenerator],
        reporter: Reporter,
        benchmark: Benchmark,
        statistics: Statistics,
    ) -> None:
        self._config = config
        self._engine = engine
        self._generators = dict(generators)
        self._reporter = reporter
        self._benchmark = benchmark
        self._statistics = statistics
        self._policy: WarningPolicy | None = None

    @property
    def configured(self) -> bool:
        """Whether :meth:`setup` has completed."""
        return self._policy is not None

    # ------------------------------------------------------------------
    # Initialization phase
    # ------------------------------------------------------------------

    def setup(self) -> None:
        """Validate the warning flags and commit the configuration.

        Raises
        ------
        OptionError
            For unknown warning names or a configuration the engine
            rejects.
        """
        policy = build_policy(self._config.warning_flags, self._engine.known_warnings())
        self._engine.configure(self._config)
        self._policy = policy
        logger.debug("Configuration committed: %s", self._config)

    # ------------------------------------------------------------------
    # Checking phase
    # ------------------------------------------------------------------

    def check(self, path: Path) -> CheckedModule | None:
        """Check *path* and return the checked module, or ``None``.

        ``None`` means scope-check mode, or error-worthy diagnostics that
        the warning policy filtered away entirely.

        Raises
        ------
        CheckingError
            When the engine fails or error-worthy diagnostics survive
            the warning policy.
        """
        policy = self._policy
        if policy is None:
            impossible("checking requested before initialization", path=str(path))

        mode = self._config.check_mode
        with self._benchmark.billed("checking"):
            result = self._run_engine(path, mode)
        self._statistics.tick("files checked")
        self._statistics.merge(result.statistics)

        outcome = self._decide_outcome(path, mode, result, policy)
        logger.debug("Checked module %s (%s)", result.module.name, mode.value)

        if mode is CheckMode.TYPE_CHECK:
            self._generate_artifacts(result.module)

        self._report_accumulated_warnings(policy)
        return outcome

    def _run_engine(self, path: Path, mode: CheckMode) -> CheckResult:
        """Call the engine and ensure only our exceptions escape."""
        try:
            return self._engine.check(path, mode)
        except DtcError:
            # Already one of ours — propagate unchanged.
            raise
        except Exception as exc:
            raise CheckingError(f"Unexpected checking engine error: {exc}") from exc

    def _decide_outcome(
        self,
        path: Path,
        mode: CheckMode,
        result: CheckResult,
        policy: WarningPolicy,
    ) -> CheckedModule | None:
        if mode is CheckMode.SCOPE_CHECK:
            return None

        blocking = error_worthy(result.diagnostics, policy)
        if not blocking:
            return result.module

        remaining = apply_policy(blocking, policy)
        suppressed = len(blocking) - len(remaining)
        if suppressed:
            self._statistics.tick("diagnostics suppressed", suppressed)
        if remaining:
            others = [d for d in result.diagnostics if d not in remaining]
            raise CheckingError(
                f"{path}: {len(remaining)} unresolved warning(s) prevent the module "
                "from being checked",
                diagnostics=remaining,
                warnings=apply_policy(others, policy),
            )
        logger.info("All blocking diagnostics in %s are suppressed", path)
        return None

    # ------------------------------------------------------------------
    # Artifacts (best effort)
    # ------------------------------------------------------------------

    def _generate_artifacts(self, module: CheckedModule) -> None:
        for kind in ArtifactKind:
            if not self._config.artifact_requested(kind):
                continue
            with self._benchmark.billed("generate", kind.value):
                self._generate_one(kind, module)

    def _generate_one(self, kind: ArtifactKind, module: CheckedModule) -> None:
        generator = self._generators.get(kind)
        try:
            if generator is None:
                raise GenerationError(
                    f"No {kind.value} generator is installed.",
                    hint=f"Install a plugin providing the '{kind.value}' generator.",
                )
            generator.generate(module, self._config)
        except InternalInvariantViolation:
            raise
        except GenerationError as exc:
            self._generation_failed(kind, exc)
        except Exception as exc:
            self._generation_failed(
                kind,
                GenerationError(f"Failed to generate {kind.value} output: {exc}"),
            )
        else:
            self._statistics.tick("artifacts generated")
            logger.info("Generated %s output for %s", kind.value, module.name)

    def _generation_failed(self, kind: ArtifactKind, exc: GenerationError) -> None:
        self._statistics.tick("artifacts failed")
        logger.warning("%s generation failed: %s", kind.value, exc)
        self._reporter.error(exc)

    # ------------------------------------------------------------------
    # Residual warnings
    # ------------------------------------------------------------------

    def _report_accumulated_warnings(self, policy: WarningPolicy) -> None:
        visible = [
            d
            for d in apply_policy(self._engine.accumulated_warnings(), policy)
            if d.severity is not Severity.ERROR
        ]
        if visible:
            self._reporter.warnings(ALL_DONE_BANNER, DiagnosticSet(tuple(visible)))
