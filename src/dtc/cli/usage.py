"""Usage and version text.

Printed through the stdout console; neither needs a checking engine
except the ``warning`` help topic, which lists the engine's warning
names.
"""

from __future__ import annotations

import argparse
from collections.abc import Mapping, Sequence

from dtc.cli.console import console, escape
from dtc.core.models import HelpTopic
from dtc.core.protocols import Backend
from dtc.version import __version__


def print_usage(
    parser: argparse.ArgumentParser,
    topic: HelpTopic = HelpTopic.GENERAL,
    known_warnings: Mapping[str, str] | None = None,
) -> None:
    """Print help for *topic*.

    The general help already contains one option group per registered
    backend, since backends contribute their flags to *parser*.
    """
    if topic is HelpTopic.WARNING:
        _print_warning_help(known_warnings or {})
        return
    console.print(escape(parser.format_help().rstrip("\n")))


def _print_warning_help(known_warnings: Mapping[str, str]) -> None:
    console.print("Warning flags (-W FLAG):")
    console.print("  error       treat warnings as errors")
    console.print("  noerror     do not treat warnings as errors")
    console.print("  ignore      suppress all warnings")
    console.print("  all         enable all warnings")
    console.print("  NAME        enable the warning NAME")
    console.print("  noNAME      suppress the warning NAME")
    if not known_warnings:
        return
    console.print()
    console.print("Warning names:")
    width = max(len(name) for name in known_warnings)
    for name in sorted(known_warnings):
        console.print(escape(f"  {name:<{width}}  {known_warnings[name]}"))


def print_version(backends: Sequence[Backend]) -> None:
    """Print the dtc version followed by each versioned backend."""
    console.print(f"dtc version {__version__}")
    for backend in backends:
        if backend.version:
            console.print(escape(f"  - {backend.name} backend version {backend.version}"))
