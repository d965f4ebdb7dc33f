"""Deterministic write-conflict policy.

This module intentionally contains *no* persistence code; each store
applies it inside its own atomic section.
"""

from __future__ import annotations

from datetime import datetime


def should_replace(*, stored_at: datetime | None, incoming_at: datetime | None) -> bool:
    """Decide whether an incoming record replaces the stored one.

    Policy (last-write-wins on the update timestamp):
    - nothing stored, or either side undated: replace;
    - otherwise replace when the incoming record is not older.

    Ties replace, so re-applying an identical record is a no-op in effect.
    """
    if stored_at is None or incoming_at is None:
        return True
    return incoming_at >= stored_at
