from __future__ import annotations


class StoreUnavailable(Exception):
    """The record store could not complete a query. Surfaced to clients as a 500."""
