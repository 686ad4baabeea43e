from __future__ import annotations

from yard_core.errors import BlockedByOccupantsAbove, YardError
from yard_core.snapshot import YardSnapshot


def describe_error(error: BaseException) -> str:
    """Status-line text for a refused request."""
    if isinstance(error, BlockedByOccupantsAbove):
        names = ", ".join(sorted(error.blockers))
        verb = "it sits" if len(error.blockers) == 1 else "they sit"
        return f"Remove {names} first: {verb} on {error.container_id}"
    if isinstance(error, YardError):
        return str(error)
    return f"Unexpected error: {error}"


def staged_summary(snapshot: YardSnapshot) -> str:
    if not snapshot.staged:
        return "Gate: empty"
    return "Gate: " + ", ".join(snapshot.staged)
