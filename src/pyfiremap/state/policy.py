"""Apply policy for store mutations.

Requests are numbered when issued. A full replace carries the number of
the fetch that produced it; the store remembers the highest number it has
applied.
"""

from __future__ import annotations


def should_apply_replace(
    *,
    last_applied_sequence: int | None,
    incoming_sequence: int,
    discard_stale: bool,
) -> bool:
    """Decide whether a fetched list may replace the store contents.

    Policy:
    - With ``discard_stale`` off every result applies (last write wins).
    - Otherwise a result whose request was issued before the last applied
      mutation is dropped.
    """
    if not discard_stale or last_applied_sequence is None:
        return True
    return incoming_sequence > last_applied_sequence
