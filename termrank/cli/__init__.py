"""Command line interface for term ranking."""

from termrank.cli.recommend import cli


__all__ = ["cli"]
