"""Allow ``python -m dtc`` invocation.

This module simply delegates to the CLI error-boundary entry point so
that ``python -m dtc`` behaves identically to the ``dtc`` console
script.
"""

from __future__ import annotations

from dtc.cli.app import cli

if __name__ == "__main__":
    cli()
