"""Infrastructure layer — plugin discovery and built-in extensions.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
* Raw third-party and OS exceptions are re-raised as
  :class:`~dtc.exceptions.DtcError` subclasses.
"""

from dtc.infra.dot_generator import DotGenerator, render_dot
from dtc.infra.plugins import builtin_backends, load_backends, load_engine, load_generators
from dtc.infra.summary_backend import SummaryBackend

__all__: list[str] = [
    "DotGenerator",
    "SummaryBackend",
    "builtin_backends",
    "load_backends",
    "load_engine",
    "load_generators",
    "render_dot",
]
