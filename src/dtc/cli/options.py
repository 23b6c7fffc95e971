"""Command-line options → immutable :class:`~dtc.core.models.Configuration`.

The parser never exits the process: argparse errors are raised as
:class:`~dtc.exceptions.OptionError` so the top-level error boundary can
report them with the usual help hint.  ``--help`` and ``--version`` are
ordinary options here; acting on them is the mode resolver's job.
"""

from __future__ import annotations

import argparse
from collections.abc import Sequence
from pathlib import Path
from typing import NoReturn

from dtc.core.models import BackendFlag, Configuration, HelpTopic
from dtc.core.protocols import Backend
from dtc.exceptions import OptionError

PROG = "dtc"

_BACKEND_DEST_PREFIX = "backend__"


class _OptionParser(argparse.ArgumentParser):
    """ArgumentParser that raises :class:`OptionError` instead of exiting."""

    def error(self, message: str) -> NoReturn:
        raise OptionError(message, prog=self.prog)


def _backend_dest(flag: BackendFlag) -> str:
    return f"{_BACKEND_DEST_PREFIX}{flag.dest}"


def build_parser(
    backends: Sequence[Backend] = (),
    *,
    prog: str = PROG,
) -> argparse.ArgumentParser:
    """Construct the top-level argument parser, including backend groups."""
    parser = _OptionParser(
        prog=prog,
        description="Check dependently typed modules.",
        add_help=False,
    )
    parser.add_argument(
        "input_file",
        nargs="?",
        default=None,
        type=Path,
        metavar="FILE",
        help="file to check",
    )

    general = parser.add_argument_group("general options")
    general.add_argument(
        "-h",
        "--help",
        nargs="?",
        const=HelpTopic.GENERAL.value,
        default=None,
        metavar="TOPIC",
        help="show help and exit; TOPIC is 'general' (default) or 'warning'",
    )
    general.add_argument(
        "-V", "--version", action="store_true", help="show version number and exit"
    )
    general.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="log progress to stderr (repeat for debug output)",
    )
    general.add_argument(
        "--profile",
        action="store_true",
        help="print timing and statistics tables when the run ends",
    )

    interaction = parser.add_argument_group("interaction")
    interaction.add_argument(
        "-I", "--interactive", action="store_true", help="start the interactive line-mode loop"
    )
    interaction.add_argument(
        "--interaction",
        dest="legacy_repl",
        action="store_true",
        help="editor REPL emulation with s-expression responses",
    )
    interaction.add_argument(
        "--interaction-json",
        dest="structured_repl",
        action="store_true",
        help="REPL with one JSON request/response per line",
    )

    checking = parser.add_argument_group("checking")
    checking.add_argument(
        "--only-scope-checking",
        action="store_true",
        help="only scope-check the input; no checked module is kept",
    )
    checking.add_argument(
        "-W",
        "--warning",
        dest="warning_flags",
        action="append",
        default=[],
        metavar="FLAG",
        help="set warning flag: NAME, noNAME, error, noerror, ignore, all",
    )

    output = parser.add_argument_group("artifacts")
    output.add_argument("--html", action="store_true", help="generate HTML files")
    output.add_argument(
        "--html-dir", type=Path, default=Path("html"), metavar="DIR",
        help="directory for HTML files (default: html)",
    )
    output.add_argument(
        "--dependency-graph", type=Path, default=None, metavar="FILE",
        help="write the module dependency graph in DOT format to FILE",
    )
    output.add_argument("--latex", action="store_true", help="generate LaTeX files")
    output.add_argument(
        "--latex-dir", type=Path, default=Path("latex"), metavar="DIR",
        help="directory for LaTeX files (default: latex)",
    )

    for backend in backends:
        _add_backend_group(parser, backend)

    return parser


def _add_backend_group(parser: argparse.ArgumentParser, backend: Backend) -> None:
    group = parser.add_argument_group(f"{backend.name} backend options")
    for flag in backend.flags:
        try:
            if flag.takes_value:
                group.add_argument(
                    flag.option,
                    dest=_backend_dest(flag),
                    default=None,
                    metavar=flag.metavar or "VALUE",
                    help=flag.help,
                )
            else:
                group.add_argument(
                    flag.option,
                    dest=_backend_dest(flag),
                    action="store_true",
                    help=flag.help,
                )
        except argparse.ArgumentError as exc:
            raise OptionError(
                f"Backend '{backend.name}' declares a conflicting option {flag.option}: {exc}",
                hint="Uninstall one of the conflicting backend plugins.",
            ) from exc


def _topic_is_attached(argv: Sequence[str]) -> bool:
    """Whether the topic was written as ``--help=TOPIC`` or ``-hTOPIC``."""
    for arg in argv:
        if arg == "--":
            break
        if arg.startswith("--help=") or (arg.startswith("-h") and len(arg) > 2):
            return True
    return False


def parse_configuration(
    argv: Sequence[str],
    backends: Sequence[Backend] = (),
    *,
    prog: str = PROG,
) -> Configuration:
    """Parse *argv* into a :class:`Configuration`.

    Raises
    ------
    OptionError
        For unknown options, missing option arguments or an unknown
        help topic.
    """
    parser = build_parser(backends, prog=prog)
    ns = parser.parse_args(list(argv))

    input_file = ns.input_file
    help_topic: HelpTopic | None = None
    if ns.help is not None:
        try:
            help_topic = HelpTopic(ns.help)
        except ValueError:
            # ``--help FILE``: argparse hands the positional to --help
            if input_file is None and not _topic_is_attached(argv):
                input_file = Path(ns.help)
                help_topic = HelpTopic.GENERAL
            else:
                raise OptionError(
                    f"Unknown help topic: {ns.help}",
                    hint="Known topics: " + ", ".join(t.value for t in HelpTopic) + ".",
                ) from None

    backend_flags = {
        flag.dest: getattr(ns, _backend_dest(flag))
        for backend in backends
        for flag in backend.flags
    }

    return Configuration(
        input_file=input_file,
        interactive=ns.interactive,
        legacy_repl=ns.legacy_repl,
        structured_repl=ns.structured_repl,
        only_scope_checking=ns.only_scope_checking,
        generate_html=ns.html,
        html_dir=ns.html_dir,
        dependency_graph=ns.dependency_graph,
        generate_latex=ns.latex,
        latex_dir=ns.latex_dir,
        warning_flags=tuple(ns.warning_flags),
        profile=ns.profile,
        verbosity=ns.verbose,
        help_topic=help_topic,
        show_version=ns.version,
        backend_flags=backend_flags,
    )
