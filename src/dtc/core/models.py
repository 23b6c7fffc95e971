"""Domain models for dtc.

All models are **frozen** dataclasses or closed enumerations — immutable
value objects with no behaviour beyond data access and simple queries.
They carry zero I/O and no dependencies on external packages.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType


# ---------------------------------------------------------------------------
# Closed variants
# ---------------------------------------------------------------------------

class InteractionMode(Enum):
    """The interaction protocol governing a run.  Exactly one is active."""

    BATCH = "batch"
    INTERACTIVE_LINE = "interactive"
    LEGACY_REPL_EMULATION = "legacy-repl"
    STRUCTURED_REPL = "structured-repl"
    BACKEND_DRIVEN = "backend"


class ShortCircuit(Enum):
    """Resolver results that end the run before any interaction starts."""

    SHOW_HELP = "help"
    SHOW_VERSION = "version"
    SHOW_USAGE = "usage"


class HelpTopic(Enum):
    """Topics accepted by ``--help[=TOPIC]``."""

    GENERAL = "general"
    WARNING = "warning"


class CheckMode(Enum):
    """How far the checking engine takes an input file."""

    SCOPE_CHECK = "scope-check"
    TYPE_CHECK = "type-check"


class Severity(Enum):
    """Severity of a single diagnostic.

    ``ERROR`` marks entries that block the checked-module artifact
    (unsolved constraints, unfinished definitions and the like).
    """

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class ArtifactKind(Enum):
    """Artifacts a successful type-check may produce, in generation order."""

    HTML = "html"
    DEPENDENCY_GRAPH = "dependency-graph"
    LATEX = "latex"


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Configuration:
    """Resolved settings for one run.  Immutable once parsed."""

    input_file: Path | None = None
    """Path of the file to check, as given on the command line."""

    interactive: bool = False
    """Line-oriented interactive mode (``-I``)."""

    legacy_repl: bool = False
    """Legacy REPL emulation for editor integration (``--interaction``)."""

    structured_repl: bool = False
    """JSON request/response REPL (``--interaction-json``)."""

    only_scope_checking: bool = False
    """Stop after scope checking; never retain a checked module."""

    generate_html: bool = False
    html_dir: Path = Path("html")

    dependency_graph: Path | None = None
    """Output path for the dependency graph; ``None`` disables it."""

    generate_latex: bool = False
    latex_dir: Path = Path("latex")

    warning_flags: tuple[str, ...] = ()
    """``-W`` flags in command-line order."""

    profile: bool = False
    """Print timing and statistics tables when the run ends."""

    verbosity: int = 0

    help_topic: HelpTopic | None = None
    show_version: bool = False

    backend_flags: Mapping[str, object] = field(
        default_factory=lambda: MappingProxyType({}), hash=False
    )
    """Values of options contributed by backends, keyed by destination."""

    def __post_init__(self) -> None:
        # Backend enablement is fixed once parsed
        object.__setattr__(self, "backend_flags", MappingProxyType(dict(self.backend_flags)))

    @property
    def check_mode(self) -> CheckMode:
        """The mode handed to the checking engine."""
        if self.only_scope_checking:
            return CheckMode.SCOPE_CHECK
        return CheckMode.TYPE_CHECK

    def artifact_requested(self, kind: ArtifactKind) -> bool:
        """Whether the flag gating *kind* is set."""
        if kind is ArtifactKind.HTML:
            return self.generate_html
        if kind is ArtifactKind.DEPENDENCY_GRAPH:
            return self.dependency_graph is not None
        return self.generate_latex


# ---------------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class SourceLocation:
    """A position inside a source file."""

    path: Path
    line: int
    column: int = 1

    def __str__(self) -> str:
        return f"{self.path}:{self.line}.{self.column}"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A single warning or error reported by the checking engine."""

    name: str
    """Stable warning name, used by ``-W`` flags (e.g. ``UnsolvedMetaVariables``)."""

    message: str
    severity: Severity = Severity.WARNING
    location: SourceLocation | None = None

    def __str__(self) -> str:
        prefix = f"{self.location}: " if self.location is not None else ""
        return f"{prefix}{self.severity.value}: [{self.name}] {self.message}"


@dataclass(frozen=True, slots=True)
class DiagnosticSet:
    """Immutable, ordered collection of :class:`Diagnostic` entries."""

    diagnostics: tuple[Diagnostic, ...] = ()

    def __len__(self) -> int:
        return len(self.diagnostics)

    def __bool__(self) -> bool:
        return len(self.diagnostics) > 0

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.diagnostics)


# ---------------------------------------------------------------------------
# Checking results
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class CheckedModule:
    """The artifact produced by checking one input file."""

    name: str
    """Fully qualified module name (e.g. ``Data.Nat.Base``)."""

    source: Path
    imports: tuple[str, ...] = ()
    """Names of modules imported by this one, in source order."""


@dataclass(frozen=True, slots=True)
class CheckResult:
    """What the checking engine hands back for one file."""

    module: CheckedModule
    diagnostics: DiagnosticSet = DiagnosticSet()
    statistics: Mapping[str, int] = field(default_factory=dict)
    """Engine-reported counters merged into the run statistics."""


@dataclass(frozen=True, slots=True)
class BackendFlag:
    """A command-line option contributed by a backend."""

    option: str
    """Option string, e.g. ``--summary``."""

    dest: str
    """Key under which the parsed value lands in ``Configuration.backend_flags``."""

    help: str
    takes_value: bool = False
    """``False`` for on/off switches, ``True`` for options with an argument."""

    metavar: str | None = None
