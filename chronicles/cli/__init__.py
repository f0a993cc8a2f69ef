"""Command-line interface for epic-chronicles."""

from __future__ import annotations

from chronicles.cli.main import app, main

__all__ = ['app', 'main']
