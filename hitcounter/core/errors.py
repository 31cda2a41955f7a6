"""Errors raised by counter stores.

The store never retries and never swallows a failure: every backend error is
re-raised as one of these, chained to the original driver exception.
"""

from __future__ import annotations


class StoreError(Exception):
    """Base class for counter store failures."""

    kind = "store_error"

    def __init__(self, message: str, *, target: str | None = None) -> None:
        super().__init__(message)
        self.target = target


class ConnectionUnavailable(StoreError):
    """No pooled connection could be acquired (exhausted or unreachable)."""

    kind = "connection_unavailable"


class QueryFailed(StoreError):
    """A statement was rejected by the backend, timed out, or found no row.

    If raised after the upsert committed, the increment still stands.
    """

    kind = "query_failed"
