"""
Surname extraction from attorney / party name lists.

Lists come in forms such as:
    "Ola Hansen - Kari Berg"
    "Hansen, Ola - Berg, Kari"
    "Ola Hansen; Kari Berg; Per Dahl"
"""

import re
from typing import Optional

from config.settings import settings
from matching.normalization import normalize

# Separators between people
_PERSON_SEPARATORS = re.compile(r"\s+-\s+|[;\n]+")
_PERSON_SEPARATORS_WITH_COMMA = re.compile(r"\s+-\s+|[,;\n]+")


def extract_surnames(s: str, last_first: Optional[bool] = None) -> set[str]:
    """
    Parse a multi-person name list into a set of normalized surnames.

    With `last_first` enabled (the default, see SURNAME_LAST_FIRST), commas
    are handled inside each person segment: "Hansen, Ola" yields "hansen",
    while "Ola Hansen, Kari Berg" is read as a list. With it disabled,
    commas are plain separators and every piece contributes its final word.
    """
    if last_first is None:
        last_first = settings.SURNAME_LAST_FIRST
    if not s or not s.strip():
        return set()

    separators = _PERSON_SEPARATORS if last_first else _PERSON_SEPARATORS_WITH_COMMA
    surnames = set()
    for segment in separators.split(s):
        segment = segment.strip()
        if not segment:
            continue
        for raw in _surnames_in_segment(segment):
            surname = normalize(raw)
            if surname:
                surnames.add(surname)
    return surnames


def _surnames_in_segment(segment: str) -> list[str]:
    if "," not in segment:
        return _last_words([segment])

    pieces = [p.strip() for p in segment.split(",") if p.strip()]
    if not pieces:
        return []
    # "Last, First"
    if segment.count(",") == 1 and len(pieces[0].split()) == 1:
        return [pieces[0]]
    return _last_words(pieces)


def _last_words(pieces: list[str]) -> list[str]:
    out = []
    for piece in pieces:
        words = piece.split()
        if words:
            out.append(words[-1])
    return out
