# src/version.py — v1
"""Package version."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("binboh")
except PackageNotFoundError:
    __version__ = "dev"
