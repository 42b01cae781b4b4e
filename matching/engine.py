"""
Matching engine facade.

Takes the two raw JSON payloads (firms, cases) plus host controls and
returns everything a host needs to display one matching pass. Every call
recomputes from its inputs; the only thing reused between calls is the
approximate index, and only for an identical case-text list.
"""

from typing import Any, Callable, Optional

from config.logging import logger
from config.settings import settings
from matching.entity_resolution.matchers import (
    ApproximateIndex,
    RapidfuzzIndex,
    build_index,
)
from matching.entity_resolution.resolver import (
    FirmCaseResolver,
    ResolverConfig,
    filter_by_court,
)
from matching.extraction import extract_case_records, extract_firms, parse_json
from matching.highlight import keyword_tokens
from matching.keywords import filter_cases, parse_keywords
from matching.models import MatchOutput

IndexFactory = Callable[[], Optional[ApproximateIndex]]


def default_index_factory() -> Optional[ApproximateIndex]:
    """A fresh rapidfuzz index, or None when the index is switched off."""
    if not settings.USE_APPROXIMATE_INDEX:
        return None
    return RapidfuzzIndex()


class MatchingEngine:
    """
    Firms-vs-cases matcher with keyword filtering.

    Usage:
        engine = MatchingEngine()
        output = engine.run(firms_text, cases_text, strict_last_name=False)
        for match in output.matches:
            print(match.firm, [h.score for h in match.hits])
    """

    def __init__(self, index_factory: Optional[IndexFactory] = default_index_factory):
        self.index_factory = index_factory
        self._index_key: Optional[tuple] = None
        self._index: Optional[ApproximateIndex] = None

    def run(
        self,
        firms_text: Optional[str],
        cases_text: Optional[str],
        threshold: Optional[float] = None,
        only_court_filter: Optional[bool] = None,
        strict_last_name: Optional[bool] = None,
        keywords_raw: str = "",
    ) -> MatchOutput:
        """Parse both JSON texts (malformed text counts as absent) and match."""
        return self.match(
            parse_json(firms_text),
            parse_json(cases_text),
            threshold=threshold,
            only_court_filter=only_court_filter,
            strict_last_name=strict_last_name,
            keywords_raw=keywords_raw,
        )

    def match(
        self,
        firms_data: Any,
        cases_data: Any,
        threshold: Optional[float] = None,
        only_court_filter: Optional[bool] = None,
        strict_last_name: Optional[bool] = None,
        keywords_raw: str = "",
    ) -> MatchOutput:
        """
        Match already-parsed payloads.

        Args:
            firms_data: Parsed firms JSON (any shape)
            cases_data: Parsed cases JSON (any shape)
            threshold: Fuzzy threshold, clamped to [0.5, 0.99]
            only_court_filter: Keep only cases from the configured court
            strict_last_name: Surname matching instead of similarity
            keywords_raw: Comma/newline separated keywords

        Returns:
            MatchOutput for this pass
        """
        config = self._config(threshold, only_court_filter, strict_last_name)

        firms = extract_firms(firms_data)
        records = extract_case_records(cases_data)
        if config.only_court_filter:
            records = filter_by_court(records, config.court_pattern)
        case_texts = [r.text for r in records]

        resolver = FirmCaseResolver(config, self._index_for(case_texts))
        matches = resolver.resolve_all(firms, records)

        keywords = parse_keywords(keywords_raw)
        keyword_matches = filter_cases(records, keywords)

        logger.debug(
            f"{len(firms)} firms, {len(case_texts)} cases -> {len(matches)} matches, "
            f"{len(keyword_matches)} keyword matches (scorer: {resolver.backend.value})"
        )

        return MatchOutput(
            firms=firms,
            case_texts=case_texts,
            matches=matches,
            keywords=keywords,
            keyword_matches=keyword_matches,
            keyword_highlight_tokens=keyword_tokens(k.raw for k in keywords),
            backend=resolver.backend,
            strict_last_name=config.strict_last_name,
            keyword_display_limit=settings.KEYWORD_DISPLAY_LIMIT,
        )

    def _config(
        self,
        threshold: Optional[float],
        only_court_filter: Optional[bool],
        strict_last_name: Optional[bool],
    ) -> ResolverConfig:
        config = ResolverConfig()
        if threshold is not None:
            config = ResolverConfig(threshold=threshold)
        if only_court_filter is not None:
            config.only_court_filter = only_court_filter
        if strict_last_name is not None:
            config.strict_last_name = strict_last_name
        return config

    def _index_for(self, case_texts: list[str]) -> Optional[ApproximateIndex]:
        """Index over `case_texts`, rebuilt only when the list changes."""
        key = tuple(case_texts)
        if key == self._index_key:
            return self._index

        index = None
        if self.index_factory is not None and case_texts:
            try:
                index = build_index(case_texts, self.index_factory())
            except Exception as e:
                logger.warning(f"Approximate index unavailable, using basic scorer: {e}")
                index = None

        self._index_key = key
        self._index = index
        return index
