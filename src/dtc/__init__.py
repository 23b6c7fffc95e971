"""dtc — session driver for a dependently typed language checker.

Selects the interaction protocol for a run, drives the checking engine
through a uniform contract, and maps every outcome to an exit code.
"""

from dtc.version import __version__

__all__: list[str] = ["__version__"]
