"""
Highlight helpers for hosts that display match results.

The engine only reports which tokens matched; these helpers turn a token
list into (segment, matched) pairs that a host can render however it likes.
"""

import re
from typing import Iterable

from matching.normalization import tokenize

MIN_FIRM_TOKEN_LENGTH = 3
MIN_KEYWORD_LENGTH = 2


def highlight_tokens(firm: str) -> list[str]:
    """Firm tokens worth highlighting (3+ characters), first occurrence order."""
    tokens = []
    for token in tokenize(firm):
        if len(token) >= MIN_FIRM_TOKEN_LENGTH and token not in tokens:
            tokens.append(token)
    return tokens


def keyword_tokens(raw_keywords: Iterable[str]) -> list[str]:
    """Raw keyword strings worth highlighting (2+ characters)."""
    return [k for k in raw_keywords if len(k) >= MIN_KEYWORD_LENGTH]


def split_highlight(text: str, tokens: Iterable[str]) -> list[tuple[str, bool]]:
    """
    Split `text` around case-insensitive occurrences of any token.

    Returns (segment, matched) pairs whose segments concatenate back to
    `text`.
    """
    tokens = [t for t in tokens if t]
    if not text:
        return []
    if not tokens:
        return [(text, False)]

    # Longest first so overlapping tokens prefer the fuller match
    alternation = "|".join(re.escape(t) for t in sorted(tokens, key=len, reverse=True))
    pattern = re.compile(f"({alternation})", re.IGNORECASE)

    segments = []
    for i, part in enumerate(pattern.split(text)):
        if part:
            segments.append((part, i % 2 == 1))
    return segments


def render_marked(text: str, tokens: Iterable[str], start: str = "[", end: str = "]") -> str:
    """Wrap highlighted segments in `start`/`end` markers for plain-text output."""
    return "".join(
        f"{start}{segment}{end}" if matched else segment
        for segment, matched in split_highlight(text, tokens)
    )
