"""Run-wide performance accounting and numeric statistics.

Both accumulators are process-wide for a run and only ever touched from
the single control thread, so they carry no locking.

Benchmark
---------
Time is billed to hierarchical phases.  Entering a nested phase pauses
the enclosing one, so each phase's *own* time excludes its children;
:meth:`Benchmark.totals` adds children back in for reporting.
"""

from __future__ import annotations

import time
from collections import Counter
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager

Phase = tuple[str, ...]


class Benchmark:
    """Hierarchical phase timer.

    Usage::

        bench = Benchmark()
        with bench.billed("checking"):
            ...
            with bench.billed("serialise"):   # billed to checking/serialise
                ...
    """

    def __init__(self, clock: Callable[[], float] = time.perf_counter) -> None:
        self._clock = clock
        self._own: dict[Phase, float] = {}
        self._stack: list[tuple[Phase, float]] = []

    @property
    def current(self) -> Phase:
        """The phase currently being billed (``()`` when idle)."""
        return self._stack[-1][0] if self._stack else ()

    @contextmanager
    def billed(self, *phase: str) -> Iterator[None]:
        """Bill the enclosed block to *phase*, nested under the current one."""
        account = self.current + phase
        now = self._clock()
        if self._stack:
            parent, started = self._stack[-1]
            self._charge(parent, now - started)
        self._stack.append((account, now))
        try:
            yield
        finally:
            now = self._clock()
            _, started = self._stack.pop()
            self._charge(account, now - started)
            if self._stack:
                parent, _ = self._stack[-1]
                self._stack[-1] = (parent, now)

    def _charge(self, account: Phase, seconds: float) -> None:
        self._own[account] = self._own.get(account, 0.0) + seconds

    def own_time(self, *phase: str) -> float:
        """Seconds billed directly to *phase*, children excluded."""
        return self._own.get(phase, 0.0)

    def totals(self) -> dict[Phase, float]:
        """Cumulative seconds per phase, each including its descendants."""
        totals: dict[Phase, float] = {}
        for account, seconds in self._own.items():
            for depth in range(1, len(account) + 1):
                prefix = account[:depth]
                totals[prefix] = totals.get(prefix, 0.0) + seconds
        return dict(sorted(totals.items()))

    def __bool__(self) -> bool:
        return bool(self._own)


class Statistics:
    """Named integer counters accumulated over a run."""

    def __init__(self) -> None:
        self._counters: Counter[str] = Counter()

    def tick(self, name: str, amount: int = 1) -> None:
        """Add *amount* to the counter *name*."""
        self._counters[name] += amount

    def merge(self, counters: Mapping[str, int]) -> None:
        """Add every counter in *counters*."""
        for name, amount in counters.items():
            self.tick(name, amount)

    def get(self, name: str) -> int:
        return self._counters.get(name, 0)

    def items(self) -> list[tuple[str, int]]:
        """Counters sorted by name."""
        return sorted(self._counters.items())

    def __bool__(self) -> bool:
        return bool(self._counters)
