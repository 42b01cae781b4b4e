#!/usr/bin/env python3
"""
Tests for the firm/case resolver and court filter.
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from config.settings import settings
from matching.entity_resolution import (
    FirmCaseResolver,
    RapidfuzzIndex,
    ResolverConfig,
    clamp_threshold,
    filter_by_court,
)
from matching.entity_resolution.matchers import build_index
from matching.extraction import extract_case_records
from matching.models import CaseRecord, ScorerBackend


CASES = [
    {"domstol": "Oslo tingrett", "AdvokaterLang": "Hansen, Per", "saksnummer": "23-1TVI-TOSL/01"},
    {"domstol": "Oslo tingrett", "AdvokaterLang": "Berg, Kari"},
    {"domstol": "Bergen tingrett", "AdvokaterLang": "Hansen, Ola"},
    "Fritekst: Oslo tingrett, Dahl mot Lie",
]


def test_clamp_threshold():
    assert clamp_threshold(0.7) == 0.7
    assert clamp_threshold(0.1) == 0.5
    assert clamp_threshold(1.5) == 0.99
    assert clamp_threshold("0.9") == 0.9
    assert clamp_threshold("abc") == clamp_threshold(settings.MATCH_THRESHOLD)
    assert clamp_threshold(float("nan")) == clamp_threshold(settings.MATCH_THRESHOLD)


def test_resolver_config_clamps_threshold():
    assert ResolverConfig(threshold=2).threshold == 0.99
    assert ResolverConfig(threshold=0).threshold == 0.5


def test_court_filter_prefers_court_field():
    records = [
        CaseRecord("Bergen tingrett Hansen", "Bergen tingrett"),
        CaseRecord("Bergen tingrett, overført fra Oslo tingrett", "Bergen tingrett"),
        CaseRecord("Sak i OSLO  Tingrett", None),
        CaseRecord("Oslo tingrett Berg", "Oslo tingrett"),
    ]
    kept = filter_by_court(records, r"oslo\s+tingrett")
    assert [r.text for r in kept] == ["Sak i OSLO  Tingrett", "Oslo tingrett Berg"]


def test_court_filter_uses_configured_pattern_by_default():
    records = [CaseRecord("x", "Oslo tingrett"), CaseRecord("y", "Borgarting lagmannsrett")]
    assert len(filter_by_court(records)) == 1


def test_strict_end_to_end():
    records = extract_case_records([{"domstol": "Oslo tingrett", "AdvokaterLang": "Hansen, Per"}])
    resolver = FirmCaseResolver(ResolverConfig(strict_last_name=True))
    matches = resolver.resolve_all(["Hansen Advokatfirma AS"], records)
    assert len(matches) == 1
    assert matches[0].firm == "Hansen Advokatfirma AS"
    assert len(matches[0].hits) == 1
    assert matches[0].hits[0].score == 1
    assert matches[0].highlight_tokens == ["hansen"]


def test_firms_without_hits_are_dropped():
    records = extract_case_records(CASES)
    resolver = FirmCaseResolver(ResolverConfig(strict_last_name=True))
    matches = resolver.resolve_all(["Hansen AS", "Nobody DA", "Berg ANS"], records)
    assert [m.firm for m in matches] == ["Hansen AS", "Berg ANS"]
    assert len(matches[0].hits) == 2


def test_strict_mode_ignores_threshold():
    records = extract_case_records(CASES)
    resolver = FirmCaseResolver(ResolverConfig(strict_last_name=True, threshold=0.99))
    matches = resolver.resolve_all(["Kari Berg"], records)
    assert [h.score for h in matches[0].hits] == [1.0]


def test_fuzzy_hits_respect_threshold():
    records = extract_case_records(CASES)
    config = ResolverConfig(strict_last_name=False, threshold=0.8)
    resolver = FirmCaseResolver(config)
    matches = resolver.resolve_all(["Advokatfirmaet Hansen AS", "Lie"], records)

    assert [m.firm for m in matches] == ["Advokatfirmaet Hansen AS", "Lie"]
    for match in matches:
        assert 0 < len(match.hits) <= 10
        assert all(h.score >= 0.8 for h in match.hits)
        scores = [h.score for h in match.hits]
        assert scores == sorted(scores, reverse=True)
    assert [h.case_index for h in matches[0].hits] == [0, 2]


def test_resolver_backend():
    records = extract_case_records(CASES)
    assert FirmCaseResolver().backend == ScorerBackend.BASIC

    index = build_index([r.text for r in records], RapidfuzzIndex())
    resolver = FirmCaseResolver(ResolverConfig(strict_last_name=False), index)
    assert resolver.backend == ScorerBackend.RAPIDFUZZ
    matches = resolver.resolve_all(["Hansen"], records)
    assert [h.case_index for h in matches[0].hits] == [0, 2]


def test_empty_inputs():
    resolver = FirmCaseResolver()
    assert resolver.resolve_all([], extract_case_records(CASES)) == []
    assert resolver.resolve_all(["Hansen"], []) == []
