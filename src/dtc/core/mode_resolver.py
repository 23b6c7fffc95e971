"""Decide which interaction protocol governs a run.

:func:`resolve_mode` is a pure function of the configuration and the
enabled backends.  Priority order, first match wins:

1. help requested                 → :attr:`ShortCircuit.SHOW_HELP`
2. version requested              → :attr:`ShortCircuit.SHOW_VERSION`
3. any backend enabled            → :attr:`InteractionMode.BACKEND_DRIVEN`
   (requires an input file; otherwise :class:`OptionError`)
4. interactive flag               → :attr:`InteractionMode.INTERACTIVE_LINE`
5. legacy REPL flag               → :attr:`InteractionMode.LEGACY_REPL_EMULATION`
6. structured REPL flag           → :attr:`InteractionMode.STRUCTURED_REPL`
7. input file present             → :attr:`InteractionMode.BATCH`
8. otherwise                      → :attr:`ShortCircuit.SHOW_USAGE`
"""

from __future__ import annotations

from collections.abc import Sequence

from dtc.core.models import Configuration, InteractionMode, ShortCircuit
from dtc.core.protocols import Backend
from dtc.exceptions import OptionError

# Protocol flags in precedence order, with the option that sets each.
_PROTOCOL_FLAGS: tuple[tuple[str, str, InteractionMode], ...] = (
    ("interactive", "--interactive", InteractionMode.INTERACTIVE_LINE),
    ("legacy_repl", "--interaction", InteractionMode.LEGACY_REPL_EMULATION),
    ("structured_repl", "--interaction-json", InteractionMode.STRUCTURED_REPL),
)


def resolve_mode(
    config: Configuration,
    enabled_backends: Sequence[Backend],
) -> InteractionMode | ShortCircuit:
    """Return the single mode (or short-circuit) for *config*.

    Raises
    ------
    OptionError
        If a backend is enabled but no input file was given.
    """
    if config.help_topic is not None:
        return ShortCircuit.SHOW_HELP
    if config.show_version:
        return ShortCircuit.SHOW_VERSION
    if enabled_backends:
        if config.input_file is None:
            names = ", ".join(b.name for b in enabled_backends)
            raise OptionError(f"No input file given for backend(s): {names}")
        return InteractionMode.BACKEND_DRIVEN
    for attr, _option, mode in _PROTOCOL_FLAGS:
        if getattr(config, attr):
            return mode
    if config.input_file is not None:
        return InteractionMode.BATCH
    return ShortCircuit.SHOW_USAGE


def ignored_protocol_flags(
    config: Configuration,
    enabled_backends: Sequence[Backend],
) -> list[str]:
    """Return the protocol options that lost the precedence tie-break.

    Used to warn the user; never changes the resolved mode.
    """
    set_options = [option for attr, option, _mode in _PROTOCOL_FLAGS if getattr(config, attr)]
    if enabled_backends:
        return set_options
    return set_options[1:]
