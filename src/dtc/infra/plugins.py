"""Plugin discovery through package entry points.

This module is the **only** place in the codebase that reads installed
distribution metadata.  Every entry point must reference a zero-argument
callable (usually a class) that returns the collaborator.

Groups
------
* ``dtc.engines``    — checking engines; ``DTC_ENGINE`` picks one by name.
* ``dtc.backends``   — compilation backends, appended after built-ins.
* ``dtc.generators`` — artifact generators, keyed by entry point name
  (``html``, ``latex``, ``dependency-graph``).

Load failures are re-raised as :class:`~dtc.exceptions.EnvironmentError`;
nothing raw escapes this boundary.
"""

from __future__ import annotations

import os
from importlib.metadata import EntryPoint, entry_points

from dtc.core.models import ArtifactKind
from dtc.core.protocols import ArtifactGenerator, Backend, CheckingEngine
from dtc.exceptions import EngineNotFoundError, EnvironmentError
from dtc.infra.dot_generator import DotGenerator
from dtc.infra.summary_backend import SummaryBackend
from dtc.utils.logging import get_logger

logger = get_logger(__name__)

ENGINE_GROUP = "dtc.engines"
BACKEND_GROUP = "dtc.backends"
GENERATOR_GROUP = "dtc.generators"
ENV_ENGINE = "DTC_ENGINE"


def _discover(group: str) -> list[EntryPoint]:
    """Return entry points of *group* sorted by name for stable ordering."""
    return sorted(entry_points(group=group), key=lambda ep: ep.name)


def _instantiate(ep: EntryPoint) -> object:
    try:
        factory = ep.load()
        return factory()
    except Exception as exc:
        raise EnvironmentError(
            f"Failed to load plugin '{ep.name}' ({ep.value}): {exc}",
            hint="Reinstall the plugin or remove it from the environment.",
        ) from exc


# ---------------------------------------------------------------------------
# Checking engine
# ---------------------------------------------------------------------------

def load_engine(name: str | None = None) -> CheckingEngine:
    """Instantiate the checking engine named *name* (or ``$DTC_ENGINE``).

    Without a name the first installed engine wins.

    Raises
    ------
    EngineNotFoundError
        When no engine (or not the requested one) is installed.
    """
    wanted = name or os.environ.get(ENV_ENGINE) or None
    available = _discover(ENGINE_GROUP)

    if wanted is not None:
        matches = [ep for ep in available if ep.name == wanted]
        if not matches:
            installed = ", ".join(ep.name for ep in available) or "none"
            raise EngineNotFoundError(
                f"Checking engine '{wanted}' is not installed.",
                hint=f"Installed engines: {installed}.",
            )
        chosen = matches[0]
    elif available:
        chosen = available[0]
    else:
        raise EngineNotFoundError(
            "No checking engine is installed.",
            hint=f"Install a package that registers a '{ENGINE_GROUP}' entry point.",
        )

    logger.debug("Loading checking engine %s from %s", chosen.name, chosen.value)
    return _instantiate(chosen)  # type: ignore[return-value]


# ---------------------------------------------------------------------------
# Backends
# ---------------------------------------------------------------------------

def builtin_backends() -> list[Backend]:
    """Backends shipped with dtc itself."""
    return [SummaryBackend()]


def load_backends() -> list[Backend]:
    """Instantiate every installed backend plugin."""
    return [_instantiate(ep) for ep in _discover(BACKEND_GROUP)]  # type: ignore[misc]


# ---------------------------------------------------------------------------
# Artifact generators
# ---------------------------------------------------------------------------

def load_generators() -> dict[ArtifactKind, ArtifactGenerator]:
    """Built-in generators overlaid with installed generator plugins."""
    generators: dict[ArtifactKind, ArtifactGenerator] = {
        ArtifactKind.DEPENDENCY_GRAPH: DotGenerator(),
    }
    for ep in _discover(GENERATOR_GROUP):
        try:
            kind = ArtifactKind(ep.name)
        except ValueError:
            logger.warning("Ignoring generator plugin with unknown kind: %s", ep.name)
            continue
        generators[kind] = _instantiate(ep)  # type: ignore[assignment]
    return generators
