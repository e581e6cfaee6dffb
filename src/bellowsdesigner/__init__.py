"""Command line front end for the bellows pattern generators."""

from __future__ import annotations

__all__ = ["build_cli", "setup_logging"]


def __getattr__(name: str):
    if name == "build_cli":
        from .app import build_cli

        return build_cli
    if name == "setup_logging":
        from .logging_config import setup_logging

        return setup_logging
    raise AttributeError(f"module 'bellowsdesigner' has no attribute {name!r}")
