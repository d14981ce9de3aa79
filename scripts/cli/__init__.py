"""
Field operations ledger CLI.

Entry point: ``python -m scripts.cli`` or the ``fieldops`` console script.
"""

from scripts.cli.main import main

__all__ = ["main"]
