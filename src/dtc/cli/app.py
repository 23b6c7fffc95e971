"""CLI application entry point and top-level error translator for dtc.

This module is the **sole error boundary** for the entire application.
It resolves the interaction mode, runs the matching interactor inside
the finalizer, and maps every failure to exactly one
:class:`~dtc.cli.exit_codes.ExitOutcome`.

Architecture notes
------------------
* No checking logic lives here — all work is delegated to the core
  session pipeline and the collaborators it is given.
* Failures are rendered through the active interactor's reporter, so
  protocol clients see them in their own format.  Defects always go
  to stderr.
* This module is the only place that translates between the domain
  world and the OS process exit code.
"""

from __future__ import annotations

import sys
from collections.abc import Callable, Mapping, Sequence
from functools import partial
from typing import TextIO

from dtc.cli import exit_codes
from dtc.cli.console import console, err_console, escape
from dtc.cli.exit_codes import ExitOutcome
from dtc.cli.interactive import InteractiveLoop
from dtc.cli.options import PROG, build_parser, parse_configuration
from dtc.cli.repl import legacy_repl, structured_repl
from dtc.cli.reporting import ConsoleReporter, print_benchmark, print_statistics
from dtc.cli.usage import print_usage, print_version
from dtc.core.benchmark import Benchmark, Statistics
from dtc.core.finalizer import finalized
from dtc.core.interactors import BackendInteractor, BatchInteractor
from dtc.core.mode_resolver import ignored_protocol_flags, resolve_mode
from dtc.core.models import (
    ArtifactKind,
    Configuration,
    HelpTopic,
    InteractionMode,
    ShortCircuit,
)
from dtc.core.protocols import ArtifactGenerator, Backend, CheckingEngine, Interactor, Reporter
from dtc.core.registry import BackendRegistry
from dtc.core.session_pipeline import SessionPipeline
from dtc.exceptions import DtcError, InternalInvariantViolation, OptionError
from dtc.infra.plugins import builtin_backends, load_backends, load_engine, load_generators
from dtc.utils.logging import get_logger, level_for_verbosity, setup_logging

logger = get_logger(__name__)


class Driver:
    """One run of dtc, from argument list to exit outcome.

    Parameters
    ----------
    engine:
        Checking engine to use; discovered from installed plugins when
        ``None``.
    backends:
        Extra backends registered after the built-in and plugin ones.
    generators:
        Artifact generators; discovered from installed plugins when
        ``None``.
    stdin, stdout:
        Streams for the interactive and protocol loops.  Default to the
        process streams.
    """

    def __init__(
        self,
        *,
        engine: CheckingEngine | None = None,
        backends: Sequence[Backend] = (),
        generators: Mapping[ArtifactKind, ArtifactGenerator] | None = None,
        stdin: TextIO | None = None,
        stdout: TextIO | None = None,
        prog: str = PROG,
    ) -> None:
        self._engine = engine
        self._extra_backends = tuple(backends)
        self._generators = generators
        self._stdin = stdin
        self._stdout = stdout
        self._prog = prog
        self.reporter: Reporter = ConsoleReporter()
        self.run_warnings: list[str] = []
        self.benchmark = Benchmark()
        self.statistics = Statistics()

    # ------------------------------------------------------------------
    # Error translation
    # ------------------------------------------------------------------

    def run(self, argv: Sequence[str]) -> ExitOutcome:
        """Execute the run and translate its result into an exit outcome."""
        try:
            outcome = self._execute(argv)
        except OptionError as exc:
            self.reporter.error(exc)
            return ExitOutcome.OPTION_ERROR
        except InternalInvariantViolation as exc:
            _render_defect(exc)
            return ExitOutcome.INTERNAL_INVARIANT_VIOLATION
        except DtcError as exc:
            self.reporter.error(exc)
            return ExitOutcome.CHECKING_ERROR
        except Exception as exc:  # noqa: BLE001
            _render_defect(exc)
            return ExitOutcome.INTERNAL_INVARIANT_VIOLATION

        if outcome is ExitOutcome.SUCCESS:
            for warning in self.run_warnings:
                err_console.print(f"[yellow]Warning:[/yellow] {escape(warning)}")
        return outcome

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _execute(self, argv: Sequence[str]) -> ExitOutcome:
        registry = BackendRegistry(
            [*builtin_backends(), *load_backends(), *self._extra_backends]
        )
        config = parse_configuration(argv, registry.backends, prog=self._prog)
        setup_logging(level_for_verbosity(config.verbosity))

        enabled = registry.enabled(config)
        resolution = resolve_mode(config, enabled)
        logger.debug("Resolved %s", resolution)
        if isinstance(resolution, ShortCircuit):
            return self._short_circuit(resolution, config, registry)

        ignored = ignored_protocol_flags(config, enabled)
        if ignored:
            self.run_warnings.append(
                f"Ignoring {', '.join(ignored)}: only one interaction mode can be active "
                f"({resolution.value} was selected)."
            )

        interactor = self._build_interactor(resolution, config, enabled)
        self.reporter = interactor.reporter
        engine = self._engine if self._engine is not None else load_engine()
        pipeline = SessionPipeline(
            config,
            engine,
            generators=self._generators if self._generators is not None else load_generators(),
            reporter=interactor.reporter,
            benchmark=self.benchmark,
            statistics=self.statistics,
        )

        with finalized(
            self.benchmark,
            self.statistics,
            report_benchmark=partial(print_benchmark, enabled=config.profile),
            report_statistics=partial(print_statistics, enabled=config.profile),
        ):
            interactor.run(pipeline.setup, pipeline.check)
        return ExitOutcome.SUCCESS

    def _short_circuit(
        self,
        action: ShortCircuit,
        config: Configuration,
        registry: BackendRegistry,
    ) -> ExitOutcome:
        if action is ShortCircuit.SHOW_VERSION:
            print_version(registry.backends)
            return ExitOutcome.SUCCESS

        parser = build_parser(registry.backends, prog=self._prog)
        if action is ShortCircuit.SHOW_HELP:
            topic = config.help_topic or HelpTopic.GENERAL
            known = None
            if topic is HelpTopic.WARNING:
                engine = self._engine if self._engine is not None else load_engine()
                known = engine.known_warnings()
            print_usage(parser, topic, known)
            return ExitOutcome.SUCCESS

        # No input file and no interaction mode.
        print_usage(parser)
        return ExitOutcome.OPTION_ERROR

    def _build_interactor(
        self,
        mode: InteractionMode,
        config: Configuration,
        enabled: Sequence[Backend],
    ) -> Interactor:
        streams = {
            name: stream
            for name, stream in (("stdin", self._stdin), ("stdout", self._stdout))
            if stream is not None
        }
        factories: dict[InteractionMode, Callable[[], Interactor]] = {
            InteractionMode.BATCH: lambda: BatchInteractor(config, ConsoleReporter()),
            InteractionMode.INTERACTIVE_LINE: lambda: InteractiveLoop(
                config, ConsoleReporter(), stdin=self._stdin
            ),
            InteractionMode.LEGACY_REPL_EMULATION: lambda: legacy_repl(**streams),
            InteractionMode.STRUCTURED_REPL: lambda: structured_repl(**streams),
            InteractionMode.BACKEND_DRIVEN: lambda: BackendInteractor(
                config, enabled, ConsoleReporter(), self.benchmark
            ),
        }
        return factories[mode]()


def _render_defect(exc: BaseException) -> None:
    """Show a defect in dtc itself, distinct from ordinary failures."""
    err_console.print(
        "[bold red]Unexpected internal error.[/bold red] "
        "Please report this issue.\n"
        f"  {type(exc).__name__}: {escape(str(exc))}"
    )


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(
    argv: Sequence[str] | None = None,
    *,
    engine: CheckingEngine | None = None,
    backends: Sequence[Backend] = (),
    generators: Mapping[ArtifactKind, ArtifactGenerator] | None = None,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
) -> int:
    """Run dtc and return the OS process exit code.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.  Accepting *argv* and the collaborators enables
        deterministic testing without monkeypatching.
    """
    args = sys.argv[1:] if argv is None else list(argv)
    driver = Driver(
        engine=engine,
        backends=backends,
        generators=generators,
        stdin=stdin,
        stdout=stdout,
    )
    return int(driver.run(args))


# ---------------------------------------------------------------------------
# Script-level entry point
# ---------------------------------------------------------------------------

def cli() -> None:
    """Console-script entry point.

    Wraps :func:`main`; only Ctrl+C is handled here since every other
    failure has already been translated into an exit code.
    """
    try:
        code = main()
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    sys.exit(code)
