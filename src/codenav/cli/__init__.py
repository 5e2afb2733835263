"""CLI module."""

from codenav.cli.main import cli

__all__ = ["cli"]
