"""Request/response loops for editor integration.

Two protocols share one loop and differ only in their codec:

* :class:`LegacyCodec` (``--interaction``) — emulates the classic
  editor REPL: ``IOTCM "FILE" ... (Cmd_load "FILE" [])`` requests and
  s-expression responses.
* :class:`JsonCodec` (``--interaction-json``) — one JSON object per
  line in both directions.

The loop only calls the checking action when a load request arrives.
Everything it writes goes to the protocol stream, never to the Rich
console, so clients can parse stdout.
"""

from __future__ import annotations

import json
import re
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Protocol, TextIO

from dtc.core.models import CheckedModule, DiagnosticSet
from dtc.core.protocols import CheckAction, SetupAction
from dtc.exceptions import CheckingError, DtcError


class RequestDecodeError(ValueError):
    """A request line the codec cannot understand."""


class RequestKind(Enum):
    LOAD = "load"
    EXIT = "exit"


class ResponseKind(Enum):
    STATUS = "status"
    INFO = "info"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class Request:
    kind: RequestKind
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class Response:
    kind: ResponseKind
    text: str
    title: str = ""


class ReplCodec(Protocol):
    """Wire format of one protocol."""

    prompt: str

    def decode(self, line: str) -> Request:
        """Parse one request line.

        Raises
        ------
        RequestDecodeError
            When *line* is not a request this codec understands.
        """
        ...  # pragma: no cover

    def encode(self, response: Response) -> str:
        """Serialise *response* as a single line."""
        ...  # pragma: no cover


# ---------------------------------------------------------------------------
# Codecs
# ---------------------------------------------------------------------------

def _lisp_string(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return f'"{escaped}"'


class LegacyCodec:
    """s-expression codec for the emulated editor REPL."""

    prompt = "Dtc2> "

    _LOAD = re.compile(r'\(Cmd_load\s+"((?:[^"\\]|\\.)*)"')
    _EXIT = re.compile(r"\(Cmd_exit\b")
    _UNESCAPE = re.compile(r"\\(.)")

    def decode(self, line: str) -> Request:
        if self._EXIT.search(line):
            return Request(RequestKind.EXIT)
        match = self._LOAD.search(line)
        if match is None:
            raise RequestDecodeError(f"cannot read: {line}")
        return Request(RequestKind.LOAD, Path(self._UNESCAPE.sub(r"\1", match.group(1))))

    def encode(self, response: Response) -> str:
        if response.kind is ResponseKind.STATUS:
            return f"(dtc2-status-action {_lisp_string(response.text)})"
        title = "Error" if response.kind is ResponseKind.ERROR else response.title
        return (
            f"(dtc2-info-action {_lisp_string(f'*{title}*')} "
            f"{_lisp_string(response.text)} nil)"
        )


class JsonCodec:
    """JSON-lines codec for the structured REPL."""

    prompt = "JSON> "

    def decode(self, line: str) -> Request:
        try:
            payload = json.loads(line)
        except json.JSONDecodeError as exc:
            raise RequestDecodeError(f"invalid JSON: {exc.msg}") from exc
        if not isinstance(payload, dict):
            raise RequestDecodeError("request must be a JSON object")

        kind = payload.get("kind")
        if kind == RequestKind.EXIT.value:
            return Request(RequestKind.EXIT)
        if kind == RequestKind.LOAD.value:
            path = payload.get("path")
            if not isinstance(path, str) or not path:
                raise RequestDecodeError("load request needs a non-empty 'path'")
            return Request(RequestKind.LOAD, Path(path))
        raise RequestDecodeError(f"unknown request kind: {kind!r}")

    def encode(self, response: Response) -> str:
        if response.kind is ResponseKind.STATUS:
            payload: dict[str, object] = {"kind": "Status", "status": response.text}
        else:
            info_kind = "Error" if response.kind is ResponseKind.ERROR else response.title
            payload = {"kind": "DisplayInfo", "info": {"kind": info_kind, "message": response.text}}
        return json.dumps(payload)


# ---------------------------------------------------------------------------
# Reporter writing protocol responses
# ---------------------------------------------------------------------------

def _error_text(exc: BaseException) -> str:
    lines: list[str] = []
    if isinstance(exc, CheckingError):
        lines.extend(str(d) for d in exc.warnings)
    lines.append(str(exc))
    if isinstance(exc, CheckingError):
        lines.extend(str(d) for d in exc.diagnostics)
    if isinstance(exc, DtcError) and exc.hint:
        lines.append(exc.hint)
    return "\n".join(lines)


class ProtocolReporter:
    """:class:`~dtc.core.protocols.Reporter` that emits encoded responses."""

    def __init__(self, codec: ReplCodec, out: TextIO) -> None:
        self._codec = codec
        self._out = out

    def send(self, response: Response) -> None:
        self._out.write(self._codec.encode(response) + "\n")
        self._out.flush()

    def warnings(self, banner: str, diagnostics: DiagnosticSet) -> None:
        text = "\n".join(str(d) for d in diagnostics)
        self.send(Response(ResponseKind.INFO, text, title=banner))

    def error(self, exc: BaseException) -> None:
        self.send(Response(ResponseKind.ERROR, _error_text(exc)))

    def info(self, message: str) -> None:
        self.send(Response(ResponseKind.STATUS, message))


# ---------------------------------------------------------------------------
# Loop
# ---------------------------------------------------------------------------

class ProtocolLoop:
    """Serve requests from *stdin* until an exit request or end of input.

    Initialization failures propagate; the error boundary reports them
    through :attr:`reporter`, i.e. in this protocol's format.
    """

    def __init__(
        self,
        codec: ReplCodec,
        *,
        stdin: TextIO | None = None,
        stdout: TextIO | None = None,
    ) -> None:
        self._codec = codec
        self._stdin = stdin if stdin is not None else sys.stdin
        self._stdout = stdout if stdout is not None else sys.stdout
        self.reporter: ProtocolReporter = ProtocolReporter(codec, self._stdout)

    def run(self, setup: SetupAction, check: CheckAction) -> None:
        setup()
        while True:
            self._stdout.write(self._codec.prompt)
            self._stdout.flush()
            line = self._stdin.readline()
            if not line:
                break
            line = line.strip()
            if not line:
                continue
            try:
                request = self._codec.decode(line)
            except RequestDecodeError as exc:
                self.reporter.error(exc)
                continue
            if request.kind is RequestKind.EXIT:
                break
            if request.path is not None:
                self._load(request.path, check)

    def _load(self, path: Path, check: CheckAction) -> None:
        try:
            module = check(path.expanduser().resolve())
        except CheckingError as exc:
            self.reporter.error(exc)
            return
        self._report_loaded(module)

    def _report_loaded(self, module: CheckedModule | None) -> None:
        self.reporter.info("Checked" if module is not None else "Checked; no module retained")
        self.reporter.send(Response(ResponseKind.INFO, "", title="All Done"))


def legacy_repl(**streams: TextIO) -> ProtocolLoop:
    """Interactor for :attr:`~dtc.core.models.InteractionMode.LEGACY_REPL_EMULATION`."""
    return ProtocolLoop(LegacyCodec(), **streams)


def structured_repl(**streams: TextIO) -> ProtocolLoop:
    """Interactor for :attr:`~dtc.core.models.InteractionMode.STRUCTURED_REPL`."""
    return ProtocolLoop(JsonCodec(), **streams)
