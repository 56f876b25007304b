"""Known call dispositions.

Adding a disposition only requires editing ``DISPOSITIONS``.
"""
from __future__ import annotations

DISPOSITIONS: tuple[str, ...] = (
    "invalid_number",
    "no_answer",
    "owner_not_present",
    "not_interested",
    "possibly_interested",
    "ai_detected",
)

SUCCESSFUL = "successful"
POSSIBLY_INTERESTED = "possibly_interested"
CALLBACK_COMPLETED = "Completed"


def resolve_disposition(*candidates: str | None) -> str | None:
    """Return the first non-empty disposition, in precedence order."""

    for candidate in candidates:
        if candidate:
            return candidate
    return None
