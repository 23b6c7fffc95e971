"""Interactors that need no terminal or protocol stream.

* :class:`BatchInteractor` — check the single configured file once.
* :class:`BackendInteractor` — hand the configured file to every
  enabled backend.

Both rely on the mode resolver having already rejected runs without an
input file; reaching them without one is a defect, not a user error.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from dtc.core.benchmark import Benchmark
from dtc.core.models import Configuration
from dtc.core.protocols import Backend, CheckAction, Reporter, SetupAction
from dtc.exceptions import BackendError, DtcError, impossible
from dtc.utils.logging import get_logger

logger = get_logger(__name__)


def require_input_file(config: Configuration) -> Path:
    """Return the absolute input path the resolver guaranteed to exist."""
    if config.input_file is None:
        impossible("input file missing after mode resolution")
    return config.input_file.resolve()


class BatchInteractor:
    """Initialize once, then check the configured file once."""

    def __init__(self, config: Configuration, reporter: Reporter) -> None:
        self._config = config
        self.reporter: Reporter = reporter

    def run(self, setup: SetupAction, check: CheckAction) -> None:
        path = require_input_file(self._config)
        setup()
        # Only success or failure matters here; the artifact is dropped.
        check(path)


class BackendInteractor:
    """Initialize once, then let each enabled backend drive the file."""

    def __init__(
        self,
        config: Configuration,
        backends: Sequence[Backend],
        reporter: Reporter,
        benchmark: Benchmark,
    ) -> None:
        self._config = config
        self._backends = tuple(backends)
        self.reporter: Reporter = reporter
        self._benchmark = benchmark

    def run(self, setup: SetupAction, check: CheckAction) -> None:
        path = require_input_file(self._config)
        setup()
        for backend in self._backends:
            logger.info("Running backend %s on %s", backend.name, path)
            with self._benchmark.billed("backend", backend.name):
                self._drive(backend, self._config, path, check)

    @staticmethod
    def _drive(
        backend: Backend,
        config: Configuration,
        path: Path,
        check: CheckAction,
    ) -> None:
        try:
            backend.drive(config, path, check)
        except DtcError:
            raise
        except Exception as exc:
            raise BackendError(f"Backend '{backend.name}' failed: {exc}") from exc
