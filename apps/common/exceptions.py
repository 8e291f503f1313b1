"""Shared exceptions for the persistence layer."""
from __future__ import annotations


class BackendError(Exception):
    """Raised by a store when the underlying database call fails."""
