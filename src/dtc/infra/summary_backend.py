"""Built-in ``summary`` backend.

Checks the input through the session pipeline and writes
``<module>.summary.json`` describing the checked module.  Enabled with
``--summary``; ``--summary-dir`` picks the output directory.
"""

from __future__ import annotations

import json
from pathlib import Path

from dtc.core.models import BackendFlag, Configuration
from dtc.core.protocols import CheckAction
from dtc.exceptions import BackendError
from dtc.version import __version__


class SummaryBackend:
    """Concrete :class:`~dtc.core.protocols.Backend` writing JSON summaries."""

    name: str = "summary"
    version: str | None = __version__
    flags: tuple[BackendFlag, ...] = (
        BackendFlag(
            option="--summary",
            dest="summary",
            help="write a JSON summary of the checked module",
        ),
        BackendFlag(
            option="--summary-dir",
            dest="summary_dir",
            help="directory for summary files (default: current directory)",
            takes_value=True,
            metavar="DIR",
        ),
    )

    def enabled(self, config: Configuration) -> bool:
        return bool(config.backend_flags.get("summary"))

    def drive(self, config: Configuration, path: Path, check: CheckAction) -> Path:
        """Write the summary for *path* and return the file written."""
        module = check(path)
        if module is None:
            raise BackendError(
                f"No checked module for {path}; summary not written.",
                hint="Drop --only-scope-checking and resolve blocking warnings.",
            )

        out_dir = Path(str(config.backend_flags.get("summary_dir") or "."))
        target = out_dir / f"{module.name}.summary.json"
        payload = {
            "module": module.name,
            "source": str(module.source),
            "imports": list(module.imports),
        }
        try:
            out_dir.mkdir(parents=True, exist_ok=True)
            target.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
        except OSError as exc:
            raise BackendError(f"Could not write summary to {target}: {exc}") from exc
        return target
