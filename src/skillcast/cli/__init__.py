"""
CLI module for skillcast.

Provides the command-line interface using Click.
"""

from skillcast.cli.main import cli, main

__all__ = ["main", "cli"]
