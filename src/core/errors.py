# src/core/errors.py — v1
"""Base exception for binboh.

Component-specific errors live next to the code that raises them and
derive from BinbohError, so the CLI can tell a configuration or cache
failure apart from a failing wrapped command.
"""

from __future__ import annotations


class BinbohError(Exception):
    """Base class for errors raised by binboh itself."""
