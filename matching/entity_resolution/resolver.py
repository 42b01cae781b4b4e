"""
Firm/Case Resolver

Pairs each firm with its best case matches under strict surname or fuzzy
similarity mode, with a fixed ranking and truncation policy.
"""

import math
import re
from dataclasses import dataclass, field
from typing import Optional, Sequence

from config.logging import logger
from config.settings import settings
from matching.entity_resolution.matchers import (
    ApproximateIndex,
    FuzzyNameMatcher,
    StrictSurnameMatcher,
)
from matching.highlight import highlight_tokens
from matching.models import CaseRecord, MatchResult, ScorerBackend

# Threshold bounds accepted from the host
THRESHOLD_MIN = 0.5
THRESHOLD_MAX = 0.99


def clamp_threshold(value) -> float:
    """Clamp a threshold into [0.5, 0.99]; unusable input gets the configured default."""
    try:
        threshold = float(value)
    except (TypeError, ValueError):
        threshold = settings.MATCH_THRESHOLD
    if math.isnan(threshold):
        threshold = settings.MATCH_THRESHOLD
    return min(THRESHOLD_MAX, max(THRESHOLD_MIN, threshold))


def filter_by_court(
    records: Sequence[CaseRecord],
    pattern: Optional[str] = None,
) -> list[CaseRecord]:
    """
    Keep cases whose court (or, without one, whole text) matches `pattern`.
    """
    regex = re.compile(pattern or settings.COURT_PATTERN, re.IGNORECASE)
    kept = [r for r in records if regex.search(r.court or r.text)]
    logger.debug(f"Court filter kept {len(kept)} of {len(records)} cases")
    return kept


@dataclass
class ResolverConfig:
    """Configuration for firm/case resolution."""
    # Minimum similarity for a fuzzy hit (ignored in strict mode)
    threshold: float = field(default_factory=lambda: settings.MATCH_THRESHOLD)

    # Match on shared surnames instead of text similarity
    strict_last_name: bool = field(default_factory=lambda: settings.STRICT_LAST_NAME)

    # Keep only cases from the configured court
    only_court_filter: bool = field(default_factory=lambda: settings.ONLY_COURT_FILTER)
    court_pattern: str = field(default_factory=lambda: settings.COURT_PATTERN)

    # Hits kept per firm
    max_hits: int = field(default_factory=lambda: settings.MAX_HITS_PER_FIRM)

    def __post_init__(self):
        self.threshold = clamp_threshold(self.threshold)


class FirmCaseResolver:
    """
    Resolves firms against an already court-filtered case list.

    Resolution strategy:
    1. Strict mode: a case matches when one of its surnames is a token of
       the firm name; score is always 1.0
    2. Fuzzy mode: approximate index first, brute-force `similarity` when
       the index is missing, fails, or finds nothing
    3. Hits ranked by score (ties in case order) and capped
    4. Firms without hits are dropped

    Usage:
        resolver = FirmCaseResolver(ResolverConfig(strict_last_name=False))
        matches = resolver.resolve_all(firms, records)
    """

    def __init__(
        self,
        config: Optional[ResolverConfig] = None,
        index: Optional[ApproximateIndex] = None,
    ):
        self.config = config or ResolverConfig()
        self.index = index

    @property
    def backend(self) -> ScorerBackend:
        return self.index.backend if self.index is not None else ScorerBackend.BASIC

    def resolve(
        self,
        firm: str,
        records: Sequence[CaseRecord],
        fuzzy_matcher: Optional[FuzzyNameMatcher] = None,
    ) -> MatchResult:
        """
        Match one firm against the case list.

        Args:
            firm: Firm name
            records: Court-filtered case records
            fuzzy_matcher: Matcher reused across firms of one pass

        Returns:
            MatchResult, possibly without hits
        """
        if self.config.strict_last_name:
            hits = StrictSurnameMatcher(self.config.max_hits).match(firm, records)
        else:
            matcher = fuzzy_matcher or self._fuzzy_matcher(records)
            hits = matcher.match(firm)

        return MatchResult(
            firm=firm,
            hits=hits,
            highlight_tokens=highlight_tokens(firm),
        )

    def resolve_all(
        self,
        firms: Sequence[str],
        records: Sequence[CaseRecord],
    ) -> list[MatchResult]:
        """Match every firm; firms without hits are left out."""
        if not firms or not records:
            return []

        fuzzy_matcher = None
        if not self.config.strict_last_name:
            fuzzy_matcher = self._fuzzy_matcher(records)

        matches = []
        for firm in firms:
            result = self.resolve(firm, records, fuzzy_matcher)
            if result.is_match:
                logger.debug(f"Matched: {result}")
                matches.append(result)

        mode = "strict" if self.config.strict_last_name else self.backend.value
        logger.debug(
            f"Resolved {len(matches)} of {len(firms)} firms against "
            f"{len(records)} cases ({mode})"
        )
        return matches

    def _fuzzy_matcher(self, records: Sequence[CaseRecord]) -> FuzzyNameMatcher:
        return FuzzyNameMatcher(
            case_texts=[r.text for r in records],
            threshold=self.config.threshold,
            index=self.index,
            max_hits=self.config.max_hits,
        )
