"""Core / service layer — pure orchestration of a checking session.

Rules
-----
* No ``print()`` calls; user-facing text goes through a ``Reporter``.
* No imports from ``cli`` or ``infra``.
* Collaborators (engine, backends, generators) are reached only through
  the protocols in :mod:`dtc.core.protocols`.
"""

from dtc.core.benchmark import Benchmark, Statistics
from dtc.core.finalizer import finalized
from dtc.core.interactors import BackendInteractor, BatchInteractor
from dtc.core.mode_resolver import resolve_mode
from dtc.core.models import (
    ArtifactKind,
    CheckedModule,
    CheckMode,
    CheckResult,
    Configuration,
    Diagnostic,
    DiagnosticSet,
    InteractionMode,
    Severity,
    ShortCircuit,
)
from dtc.core.protocols import ArtifactGenerator, Backend, CheckingEngine, Interactor, Reporter
from dtc.core.registry import BackendRegistry
from dtc.core.session_pipeline import SessionPipeline

__all__: list[str] = [
    "ArtifactGenerator",
    "ArtifactKind",
    "Backend",
    "BackendInteractor",
    "BackendRegistry",
    "BatchInteractor",
    "Benchmark",
    "CheckMode",
    "CheckResult",
    "CheckedModule",
    "CheckingEngine",
    "Configuration",
    "Diagnostic",
    "DiagnosticSet",
    "InteractionMode",
    "Interactor",
    "Reporter",
    "SessionPipeline",
    "Severity",
    "ShortCircuit",
    "Statistics",
    "finalized",
    "resolve_mode",
]
