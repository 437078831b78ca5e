"""
CLI module for block document conversion.

Provides command-line tools for importing, exporting and checking round trips.
"""

from blockdoc.cli.convert import main as convert_main

__all__ = ["convert_main"]
