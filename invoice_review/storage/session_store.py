# invoice_review/storage/session_store.py
"""
Process-local holder for the single active review session.

There is no persistence: a restart (or reset_session) starts from an empty
session. Nothing is shared across processes.
"""
from typing import Optional

from invoice_review.utils.state import ReviewSession

_session: Optional[ReviewSession] = None


def get_session() -> ReviewSession:
    global _session
    if _session is None:
        _session = ReviewSession()
    return _session


def reset_session() -> ReviewSession:
    """Replace the active session with a fresh one (used by tests and on startup)."""
    global _session
    _session = ReviewSession()
    return _session
