"""Process-wide registry of compilation backends.

Assembled once at startup from the built-in backends, installed plugins
and caller-supplied extensions; read-only afterwards.
"""

from __future__ import annotations

from collections.abc import Iterable

from dtc.core.models import Configuration
from dtc.core.protocols import Backend
from dtc.exceptions import OptionError


class BackendRegistry:
    """Immutable, ordered set of registered backends.

    Parameters
    ----------
    backends:
        Backends in registration order.  Names must be unique.
    """

    def __init__(self, backends: Iterable[Backend] = ()) -> None:
        registered: list[Backend] = []
        seen: set[str] = set()
        for backend in backends:
            if backend.name in seen:
                raise OptionError(
                    f"Backend registered twice: {backend.name}",
                    hint="Uninstall one of the conflicting backend plugins.",
                )
            seen.add(backend.name)
            registered.append(backend)
        self._backends: tuple[Backend, ...] = tuple(registered)

    @property
    def backends(self) -> tuple[Backend, ...]:
        return self._backends

    def enabled(self, config: Configuration) -> tuple[Backend, ...]:
        """Backends that *config* switches on, in registration order."""
        return tuple(b for b in self._backends if b.enabled(config))

    def __len__(self) -> int:
        return len(self._backends)

    def __iter__(self):
        return iter(self._backends)
