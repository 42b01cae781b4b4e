"""
Firm-to-case matching strategies.
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Union

from rapidfuzz import fuzz, process

from config.logging import logger
from matching.models import CaseRecord, Hit, ScorerBackend
from matching.normalization import normalize, strip_legal_suffix, tokenize

# Containment shortcut applies only when the contained name is at least this long
MIN_CONTAINMENT_LENGTH = 5
CONTAINMENT_SCORE = 0.98
COVERAGE_WEIGHT = 0.85


def similarity(a: str, b: str) -> float:
    """
    Similarity score in [0, 1] between a firm name and a case text.

    1. Identical after normalization -> 1.0
    2. One contains the other, contained part 5+ chars -> 0.98
    3. Otherwise max(jaccard, 0.85 * coverage) over token sets, where
       coverage is the overlap divided by the smaller token set
    """
    ac = normalize(strip_legal_suffix(a))
    bc = normalize(strip_legal_suffix(b))
    if not ac or not bc:
        return 0.0
    if ac == bc:
        return 1.0
    # Minimum length applies to the contained side so the score is symmetric
    shorter, longer = sorted((ac, bc), key=len)
    if len(shorter) >= MIN_CONTAINMENT_LENGTH and shorter in longer:
        return CONTAINMENT_SCORE

    at = set(tokenize(a))
    bt = set(tokenize(b))
    if not at or not bt:
        return 0.0

    inter = len(at & bt)
    union = len(at) + len(bt) - inter
    jaccard = inter / union if union else 0.0
    coverage = inter / min(len(at), len(bt))
    return max(jaccard, COVERAGE_WEIGHT * coverage)


def _index_processor(s: str) -> str:
    return normalize(strip_legal_suffix(s))


def combined_scorer(s1: str, s2: str, **kwargs) -> float:
    """
    Combined scoring using multiple fuzzy algorithms (0-100).

    Weights:
    - Token sort ratio: 40% (handles word reordering)
    - Token set ratio: 40% (handles partial matches)
    - Ratio: 20% (standard similarity)

    Note: **kwargs accepts score_cutoff and other params from rapidfuzz.
    """
    token_sort = fuzz.token_sort_ratio(s1, s2)
    token_set = fuzz.token_set_ratio(s1, s2)
    ratio = fuzz.ratio(s1, s2)

    return (token_sort * 0.4) + (token_set * 0.4) + (ratio * 0.2)


def containment_scorer(s1: str, s2: str, **kwargs) -> float:
    """
    Index scorer (0-100): `combined_scorer`, raised to the containment score
    when the shorter string (5+ chars) sits inside the longer one.

    `fuzz.partial_ratio` finds the best-aligned window, so a short firm name
    inside a long case text is not penalized for the surrounding words.
    """
    combined = combined_scorer(s1, s2)
    if min(len(s1), len(s2)) < MIN_CONTAINMENT_LENGTH:
        return combined
    partial = fuzz.partial_ratio(s1, s2) * CONTAINMENT_SCORE
    return max(combined, partial)


# A query result is either a scored (text, score, index) triple or a bare text
QueryResult = Union[tuple, str]


class ApproximateIndex:
    """
    Approximate-string index over one case-text list.

    Build once per case list; the built index is read-only.
    """

    backend: ScorerBackend = ScorerBackend.BASIC

    def build(self, texts: Sequence[str]) -> None:
        raise NotImplementedError

    def query(self, name: str, threshold: float) -> list[QueryResult]:
        raise NotImplementedError


class BruteForceIndex(ApproximateIndex):
    """Null-object index: scores every text with `similarity`."""

    backend = ScorerBackend.BASIC

    def __init__(self):
        self._texts: list[str] = []

    def build(self, texts: Sequence[str]) -> None:
        self._texts = list(texts)

    def query(self, name: str, threshold: float) -> list[QueryResult]:
        results = []
        for i, text in enumerate(self._texts):
            score = similarity(name, text)
            if score >= threshold:
                results.append((text, score, i))
        return results


class RapidfuzzIndex(ApproximateIndex):
    """
    Index backed by rapidfuzz's `process.extract`.

    Case texts are preprocessed once at build time; scores are reported on
    a 0-1 scale.
    """

    backend = ScorerBackend.RAPIDFUZZ

    def __init__(self, scorer=containment_scorer):
        self.scorer = scorer
        self._texts: list[str] = []
        self._processed: list[str] = []

    def build(self, texts: Sequence[str]) -> None:
        self._texts = list(texts)
        self._processed = [_index_processor(t) for t in self._texts]

    def query(self, name: str, threshold: float) -> list[QueryResult]:
        query = _index_processor(name)
        if not query:
            return []
        matches = process.extract(
            query,
            self._processed,
            scorer=self.scorer,
            limit=None,
            score_cutoff=threshold * 100,
        )
        return [(self._texts[i], score / 100.0, i) for _, score, i in matches]


def build_index(
    texts: Sequence[str],
    index: Optional[ApproximateIndex] = None,
) -> Optional[ApproximateIndex]:
    """
    Build `index` over `texts`.

    Returns None if there is nothing to index or the build fails, so the
    caller uses brute force.
    """
    if index is None or not texts:
        return None
    try:
        index.build(texts)
    except Exception as e:
        logger.warning(f"Approximate index build failed, using basic scorer: {e}")
        return None
    logger.debug(f"Built {index.backend.value} index over {len(texts)} case texts")
    return index


def rank_hits(hits: list[Hit], limit: int) -> list[Hit]:
    """Sort by score descending, ties in original case order, then cap."""
    return sorted(hits, key=lambda h: (-h.score, h.case_index))[:limit]


class StrictSurnameMatcher:
    """
    Matches a firm to cases sharing a normalized surname with the firm name.

    Every matching case scores 1.0 and keeps its original order.
    """

    def __init__(self, max_hits: int = 10):
        self.max_hits = max_hits

    def match(self, firm: str, records: Sequence[CaseRecord]) -> list[Hit]:
        firm_tokens = set(tokenize(firm))
        if not firm_tokens:
            return []

        hits = [
            Hit(text=record.text, score=1.0, case_index=i)
            for i, record in enumerate(records)
            if firm_tokens & record.surnames
        ]
        return hits[: self.max_hits]


@dataclass
class FuzzyNameMatcher:
    """
    Matches a firm to case texts by similarity score.

    Uses the approximate index first when one is available, and falls back
    to scoring every text with `similarity` when the index is missing,
    raises, or returns nothing above the threshold.
    """

    case_texts: Sequence[str]
    threshold: float
    index: Optional[ApproximateIndex] = None
    max_hits: int = 10

    def __post_init__(self):
        self._fallback = BruteForceIndex()
        self._fallback.build(self.case_texts)

    def match(self, firm: str) -> list[Hit]:
        hits = []
        if self.index is not None:
            hits = self._query(self.index, firm)

        if not hits:
            hits = self._query(self._fallback, firm)

        return rank_hits(hits, self.max_hits)

    def _query(self, index: ApproximateIndex, firm: str) -> list[Hit]:
        try:
            results = index.query(firm, self.threshold)
        except Exception as e:
            logger.warning(f"Index query failed for '{firm}', using basic scorer: {e}")
            return []

        hits = []
        for result in results:
            hit = self._to_hit(firm, result)
            if hit is not None and hit.score >= self.threshold:
                hits.append(hit)
        return hits

    def _to_hit(self, firm: str, result: QueryResult) -> Optional[Hit]:
        if isinstance(result, str):
            return Hit(
                text=result,
                score=similarity(firm, result),
                case_index=self._position(result),
            )
        if isinstance(result, tuple) and len(result) >= 2:
            text, score = str(result[0]), result[1]
            if not isinstance(score, (int, float)):
                score = 0.0
            index = result[2] if len(result) >= 3 else self._position(text)
            return Hit(text=text, score=float(score), case_index=index)
        return None

    def _position(self, text: str) -> int:
        try:
            return list(self.case_texts).index(text)
        except ValueError:
            return len(self.case_texts)

