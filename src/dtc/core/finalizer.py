"""Guaranteed end-of-run reporting.

:func:`finalized` wraps the whole interaction.  However the block exits
(normal return, :class:`~dtc.exceptions.CheckingError`,
:class:`~dtc.exceptions.InternalInvariantViolation`, anything else) the
benchmark report runs once, then the statistics report runs once.  A
failure inside either report is logged and dropped so that the
original outcome keeps propagating.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager

from dtc.core.benchmark import Benchmark, Statistics
from dtc.utils.logging import get_logger

logger = get_logger(__name__)

BenchmarkReport = Callable[[Benchmark], None]
StatisticsReport = Callable[[Statistics], None]


def _run_report(label: str, action: Callable[[], None]) -> None:
    try:
        action()
    except Exception:  # noqa: BLE001
        logger.exception("Failed to print %s", label)


@contextmanager
def finalized(
    benchmark: Benchmark,
    statistics: Statistics,
    *,
    report_benchmark: BenchmarkReport,
    report_statistics: StatisticsReport,
) -> Iterator[None]:
    """Run the enclosed block, then both reports on every exit path."""
    try:
        yield
    finally:
        _run_report("benchmark", lambda: report_benchmark(benchmark))
        _run_report("statistics", lambda: report_statistics(statistics))
