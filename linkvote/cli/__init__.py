"""Command line interface."""

from linkvote.cli.main import cli


__all__ = ["cli"]
