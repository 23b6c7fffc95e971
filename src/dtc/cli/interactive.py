"""Interactive line-mode loop (``--interactive``).

Reads one command per line until ``:quit`` or end of input.  Each
iteration blocks on input, then runs synchronously; there is never more
than one command in flight.

Input comes from questionary when stdin is a terminal and questionary is
installed; otherwise lines are read from the given stream so the loop
can be scripted and tested.
"""

from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any, TextIO

from dtc.cli.console import console
from dtc.core.models import CheckedModule, Configuration
from dtc.core.protocols import CheckAction, Reporter, SetupAction
from dtc.exceptions import CheckingError, EnvironmentError

PROMPT = "dtc> "

HELP_TEXT = """\
Commands:
  :load FILE    check FILE and make it the current file
  :reload       check the current file again
  :status       show the current file
  :help         show this text
  :quit         leave the loop"""


def _import_questionary() -> Any:
    """Import questionary lazily for the interactive prompt."""
    try:
        import questionary
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "questionary is not installed. Install with: pip install questionary",
        ) from exc
    return questionary


class InteractiveLoop:
    """Read-evaluate-print loop over a (possibly changing) current file.

    Parameters
    ----------
    config:
        Run configuration; its input file, if any, is loaded first.
    reporter:
        Destination for results and non-fatal failures.
    stdin:
        Line source used when questionary is not in play.
    """

    def __init__(
        self,
        config: Configuration,
        reporter: Reporter,
        *,
        stdin: TextIO | None = None,
    ) -> None:
        self.reporter: Reporter = reporter
        self._stdin = stdin
        self._current: Path | None = (
            config.input_file.resolve() if config.input_file is not None else None
        )
        self._commands: dict[str, Callable[[str, CheckAction], bool]] = {
            ":load": self._cmd_load,
            ":reload": self._cmd_reload,
            ":status": self._cmd_status,
            ":help": self._cmd_help,
            ":quit": self._cmd_quit,
        }

    @property
    def current_file(self) -> Path | None:
        return self._current

    # ------------------------------------------------------------------
    # Interactor contract
    # ------------------------------------------------------------------

    def run(self, setup: SetupAction, check: CheckAction) -> None:
        setup()
        if self._current is not None:
            self._load(self._current, check)
        while True:
            line = self._read_line()
            if line is None:
                break
            line = line.strip()
            if not line:
                continue
            if not self._dispatch(line, check):
                break

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def _read_line(self) -> str | None:
        """Return the next line, or ``None`` at end of input."""
        stream = self._stdin if self._stdin is not None else sys.stdin
        if stream is sys.stdin and stream.isatty():
            try:
                questionary = _import_questionary()
            except EnvironmentError:
                pass
            else:
                # Returns None on Ctrl+C / Esc
                return questionary.text(PROMPT.rstrip()).ask()
        console.print(PROMPT, end="")
        line = stream.readline()
        return line if line else None

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def _dispatch(self, line: str, check: CheckAction) -> bool:
        """Run one command; ``False`` ends the loop."""
        name, _, argument = line.partition(" ")
        command = self._commands.get(name)
        if command is None:
            self.reporter.info(f"Unknown command '{name}'. Type :help for a list of commands.")
            return True
        return command(argument.strip(), check)

    def _load(self, path: Path, check: CheckAction) -> None:
        try:
            module = check(path)
        except CheckingError as exc:
            self.reporter.error(exc)
            return
        self._report_loaded(path, module)

    def _report_loaded(self, path: Path, module: CheckedModule | None) -> None:
        if module is None:
            self.reporter.info(f"Checked {path}; no module retained.")
        else:
            self.reporter.info(f"Loaded {module.name}.")

    def _cmd_load(self, argument: str, check: CheckAction) -> bool:
        if not argument:
            self.reporter.info("Usage: :load FILE")
            return True
        self._current = Path(argument).expanduser().resolve()
        self._load(self._current, check)
        return True

    def _cmd_reload(self, _argument: str, check: CheckAction) -> bool:
        if self._current is None:
            self.reporter.info("No file loaded. Use :load FILE first.")
            return True
        self._load(self._current, check)
        return True

    def _cmd_status(self, _argument: str, _check: CheckAction) -> bool:
        if self._current is None:
            self.reporter.info("No file loaded.")
        else:
            self.reporter.info(f"Current file: {self._current}")
        return True

    def _cmd_help(self, _argument: str, _check: CheckAction) -> bool:
        self.reporter.info(HELP_TEXT)
        return True

    def _cmd_quit(self, _argument: str, _check: CheckAction) -> bool:
        return False
