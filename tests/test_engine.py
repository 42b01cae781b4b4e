#!/usr/bin/env python3
"""
Tests for the matching engine facade.
"""

import json
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from matching.engine import MatchingEngine, default_index_factory
from matching.entity_resolution.matchers import ApproximateIndex, RapidfuzzIndex
from matching.models import MatchOutput, ScorerBackend


FIRMS = json.dumps(["Hansen Advokatfirma AS", "Advokatfirmaet Berg DA", "Ukjent ANS"])
CASES = json.dumps({
    "hits": [
        {"domstol": "Oslo tingrett", "AdvokaterLang": "Hansen, Per", "sakenGjelder": "Heleri"},
        {"domstol": "Oslo tingrett", "AdvokaterLang": "Berg, Kari", "sakenGjelder": "Erstatning"},
        {"domstol": "Bergen tingrett", "AdvokaterLang": "Hansen, Ola", "sakenGjelder": "Heleri"},
    ]
})


class CountingFactory:
    def __init__(self):
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return RapidfuzzIndex()


class BrokenIndex(ApproximateIndex):
    backend = ScorerBackend.RAPIDFUZZ

    def build(self, texts):
        raise RuntimeError("cannot build")


def test_end_to_end_strict():
    engine = MatchingEngine(index_factory=None)
    output = engine.run(
        json.dumps(["Hansen Advokatfirma AS"]),
        json.dumps([{"domstol": "Oslo tingrett", "AdvokaterLang": "Hansen, Per"}]),
        strict_last_name=True,
        only_court_filter=True,
    )
    assert len(output.matches) == 1
    match = output.matches[0]
    assert match.firm == "Hansen Advokatfirma AS"
    assert [h.score for h in match.hits] == [1]


def test_court_filter_applies_to_matches_and_keywords():
    engine = MatchingEngine(index_factory=None)
    output = engine.run(
        FIRMS, CASES,
        strict_last_name=True,
        only_court_filter=True,
        keywords_raw="heleri",
    )
    assert output.firms == ["Hansen Advokatfirma AS", "Advokatfirmaet Berg DA", "Ukjent ANS"]
    assert len(output.case_texts) == 2
    assert [m.firm for m in output.matches] == ["Hansen Advokatfirma AS", "Advokatfirmaet Berg DA"]
    assert [len(m.hits) for m in output.matches] == [1, 1]
    assert [r.court for r in output.keyword_matches] == ["Oslo tingrett"]


def test_all_courts():
    engine = MatchingEngine(index_factory=None)
    output = engine.run(
        FIRMS, CASES,
        strict_last_name=True,
        only_court_filter=False,
        keywords_raw="heleri",
    )
    assert len(output.case_texts) == 3
    assert len(output.matches[0].hits) == 2
    assert len(output.keyword_matches) == 2
    assert output.keyword_highlight_tokens == ["heleri"]


def test_fuzzy_mode():
    engine = MatchingEngine()
    output = engine.run(
        FIRMS, CASES,
        threshold=0.8,
        strict_last_name=False,
        only_court_filter=True,
    )
    assert output.scorer == "rapidfuzz"
    assert [m.firm for m in output.matches] == ["Hansen Advokatfirma AS", "Advokatfirmaet Berg DA"]
    for match in output.matches:
        assert all(h.score >= 0.8 for h in match.hits)
    assert output.matches[0].hits[0].score == 0.98


def test_malformed_json_is_absent_input():
    engine = MatchingEngine()
    output = engine.run("{not json", "[1, 2", keywords_raw="heleri")
    assert output.firms == []
    assert output.case_texts == []
    assert output.matches == []
    assert output.keyword_matches == []
    assert output.waiting_for_input


def test_scorer_labels():
    assert MatchingEngine(index_factory=None).run(FIRMS, CASES, strict_last_name=False).scorer == "basic"
    assert MatchingEngine(index_factory=None).run(FIRMS, CASES, strict_last_name=True).scorer == "basic (overridden)"
    assert MatchingEngine().run(FIRMS, CASES, strict_last_name=True).scorer == "rapidfuzz (overridden)"
    assert MatchingEngine(index_factory=BrokenIndex).run(FIRMS, CASES, strict_last_name=False).scorer == "basic"


def test_index_failure_falls_back_to_same_results():
    basic = MatchingEngine(index_factory=None).run(FIRMS, CASES, threshold=0.8, strict_last_name=False)
    broken = MatchingEngine(index_factory=BrokenIndex).run(FIRMS, CASES, threshold=0.8, strict_last_name=False)
    assert [(m.firm, [(h.text, h.score) for h in m.hits]) for m in basic.matches] == \
        [(m.firm, [(h.text, h.score) for h in m.hits]) for m in broken.matches]


def test_index_is_reused_for_identical_case_list():
    factory = CountingFactory()
    engine = MatchingEngine(index_factory=factory)
    engine.run(FIRMS, CASES, strict_last_name=False, only_court_filter=True)
    engine.run(FIRMS, CASES, threshold=0.9, strict_last_name=False, only_court_filter=True)
    assert factory.calls == 1

    engine.run(FIRMS, CASES, strict_last_name=False, only_court_filter=False)
    assert factory.calls == 2


def test_recompute_is_idempotent():
    engine = MatchingEngine()
    first = engine.run(FIRMS, CASES, threshold=0.8, strict_last_name=False, keywords_raw="heleri")
    second = engine.run(FIRMS, CASES, threshold=0.8, strict_last_name=False, keywords_raw="heleri")
    assert first == second


def test_keyword_display_limit():
    cases = json.dumps([f"Heleri sak {i}" for i in range(120)])
    output = MatchingEngine(index_factory=None).run(
        None, cases, only_court_filter=False, keywords_raw="heleri"
    )
    shown, total = output.keyword_matches_for_display()
    assert total == 120
    assert len(shown) == output.keyword_display_limit == 100


def test_default_index_factory():
    assert isinstance(default_index_factory(), RapidfuzzIndex)


def test_match_output_defaults():
    output = MatchOutput()
    assert output.waiting_for_input
    assert output.scorer == "basic"
