from __future__ import annotations

import re

from .errors import InvalidSlotFormat
from .models import BAY_LETTERS, Slot

_SLOT_RE = re.compile(r"^([A-Ca-c])([1-3])$")


def parse_slot(text: str | None) -> Slot | None:
    """Parse ``"A1"``..``"C3"`` (case-insensitive) into a :class:`Slot`.

    Returns ``None`` for anything else, including ``"A01"``, ``"D1"`` or
    ``"A4"``.
    """

    if not text:
        return None
    match = _SLOT_RE.match(text.strip())
    if match is None:
        return None
    letter, digit = match.groups()
    return Slot(BAY_LETTERS.index(letter.upper()) + 1, int(digit))


def require_slot(text: str | None) -> Slot:
    slot = parse_slot(text)
    if slot is None:
        raise InvalidSlotFormat(text or "")
    return slot


def format_slot(slot: Slot) -> str:
    return f"{BAY_LETTERS[slot.bay - 1]}{slot.row}"
