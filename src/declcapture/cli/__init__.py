"""Command line interface for declcapture.

The ``declcapture`` console script dispatches to the commands in
``declcapture.cli.commands``.
"""

from .main import main, run

__all__ = ["main", "run"]
