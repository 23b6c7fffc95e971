"""Console rendering for diagnostics and the end-of-run reports.

* :class:`ConsoleReporter` — the :class:`~dtc.core.protocols.Reporter`
  used by the batch, interactive and backend modes.
* :func:`print_benchmark` / :func:`print_statistics` — finalizer report
  actions; Rich tables when available, plain text otherwise.
* :func:`render_failure` — how the error boundary shows a failure.

This module lives in the CLI layer; it purely formats and displays
data produced by the core.
"""

from __future__ import annotations

import sys
from collections.abc import Iterable, Sequence

from dtc.cli.console import console, escape
from dtc.core.benchmark import Benchmark, Statistics
from dtc.core.models import Diagnostic, DiagnosticSet, Severity
from dtc.exceptions import CheckingError, DtcError

_DELIMITER_WIDTH = 54


def delimiter(title: str) -> str:
    """Return a horizontal rule with *title* embedded near the left edge."""
    return f"──── {title} " + "─" * max(_DELIMITER_WIDTH - len(title), 4)


def _severity_style(severity: Severity) -> str:
    if severity is Severity.ERROR:
        return "red"
    if severity is Severity.WARNING:
        return "yellow"
    return "cyan"


def format_diagnostic(diagnostic: Diagnostic) -> str:
    """Render one diagnostic with Rich markup."""
    style = _severity_style(diagnostic.severity)
    return f"[{style}]{escape(str(diagnostic))}[/{style}]"


def print_diagnostics(diagnostics: Iterable[Diagnostic]) -> None:
    for diagnostic in diagnostics:
        console.print(format_diagnostic(diagnostic))


class ConsoleReporter:
    """:class:`~dtc.core.protocols.Reporter` printing to the stdout console."""

    def warnings(self, banner: str, diagnostics: DiagnosticSet) -> None:
        console.print()
        console.print(f"[bold]{escape(delimiter(banner))}[/bold]")
        print_diagnostics(diagnostics)

    def error(self, exc: BaseException) -> None:
        render_failure(exc)

    def info(self, message: str) -> None:
        console.print(escape(message))


def render_failure(exc: BaseException) -> None:
    """Print *exc*, its attached warnings and its diagnostics."""
    if isinstance(exc, CheckingError):
        print_diagnostics(exc.warnings)
    console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
    if isinstance(exc, CheckingError):
        print_diagnostics(exc.diagnostics)
    if isinstance(exc, DtcError) and exc.hint:
        console.print(f"[yellow]Hint:[/yellow] {escape(exc.hint)}")


# ---------------------------------------------------------------------------
# End-of-run tables
# ---------------------------------------------------------------------------

def _print_table(title: str, headers: Sequence[str], rows: Sequence[Sequence[str]]) -> None:
    """Render *rows* as a Rich table, or as aligned plain text without Rich."""
    try:
        from rich.table import Table
    except ModuleNotFoundError:
        _print_plain_table(title, headers, rows)
        return

    table = Table(title=title, show_header=True, header_style="bold cyan", border_style="dim")
    table.add_column(headers[0], style="bold", min_width=20)
    for header in headers[1:]:
        table.add_column(header, justify="right", min_width=8)
    for row in rows:
        table.add_row(*(escape(cell) for cell in row))
    console.print()
    console.print(table)


def _print_plain_table(title: str, headers: Sequence[str], rows: Sequence[Sequence[str]]) -> None:
    first = max([len(headers[0]), *(len(row[0]) for row in rows)])
    print(f"\n{title}", file=sys.stdout)
    print("=" * (first + 12 * (len(headers) - 1)), file=sys.stdout)
    print(
        f"{headers[0]:<{first}}" + "".join(f"{h:>12}" for h in headers[1:]),
        file=sys.stdout,
    )
    for row in rows:
        print(f"{row[0]:<{first}}" + "".join(f"{c:>12}" for c in row[1:]), file=sys.stdout)


def benchmark_rows(benchmark: Benchmark) -> list[tuple[str, str, str]]:
    """One row per phase: indented name, cumulative ms, share of the total."""
    totals = benchmark.totals()
    grand = sum(seconds for phase, seconds in totals.items() if len(phase) == 1)
    rows: list[tuple[str, str, str]] = []
    for phase, seconds in totals.items():
        name = "  " * (len(phase) - 1) + phase[-1]
        share = f"{100 * seconds / grand:.0f}%" if grand > 0 else "-"
        rows.append((name, f"{seconds * 1000:.0f}ms", share))
    return rows


def print_benchmark(benchmark: Benchmark, *, enabled: bool) -> None:
    """Finalizer action: print the phase timings when profiling is on."""
    if not enabled or not benchmark:
        return
    _print_table("Total time", ("Phase", "Time", "Share"), benchmark_rows(benchmark))


def print_statistics(statistics: Statistics, *, enabled: bool) -> None:
    """Finalizer action: print the accumulated counters when profiling is on."""
    if not enabled or not statistics:
        return
    rows = [(name, str(value)) for name, value in statistics.items()]
    _print_table("Accumulated statistics", ("Statistic", "Count"), rows)
