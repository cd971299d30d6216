"""Reconcile ledger and database views of courses, modules, commitments and project tasks."""

from __future__ import annotations

from importlib import metadata

try:
    __version__ = metadata.version("credsync")
except metadata.PackageNotFoundError:
    __version__ = "0.0.0+local"
