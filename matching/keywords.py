"""
Free-text keyword filter over case records.
"""

import re
from typing import Optional, Sequence

from config.logging import logger
from matching.models import CaseRecord, Keyword
from matching.normalization import normalize

_KEYWORD_SEPARATORS = re.compile(r"[\n,]+")
MIN_KEYWORD_LENGTH = 2


def parse_keywords(raw: Optional[str]) -> list[Keyword]:
    """
    Parse comma/newline separated keywords.

    Keywords whose normalized form is shorter than two characters are dropped.
    """
    if not raw:
        return []

    keywords = []
    for part in _KEYWORD_SEPARATORS.split(raw):
        part = part.strip()
        if not part:
            continue
        normalized = normalize(part)
        if len(normalized) >= MIN_KEYWORD_LENGTH:
            keywords.append(Keyword(raw=part, normalized=normalized))
    return keywords


def filter_cases(
    records: Sequence[CaseRecord],
    keywords: Sequence[Keyword],
) -> list[CaseRecord]:
    """
    Cases whose normalized text contains any keyword, in original order.

    The full filtered list is returned; display truncation is up to the host.
    """
    if not keywords or not records:
        return []

    matched = []
    for record in records:
        text = normalize(record.text)
        if any(k.normalized in text for k in keywords):
            matched.append(record)

    logger.debug(f"{len(matched)} of {len(records)} cases match {len(keywords)} keywords")
    return matched
