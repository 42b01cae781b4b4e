#!/usr/bin/env python3
"""
Match law firms against court cases from two JSON files.

Usage:
    python scripts/run_matching.py --firms firms.json --cases cases.json
    python scripts/run_matching.py --firms firms.json --cases cases.json --fuzzy --threshold 0.9
    python scripts/run_matching.py --cases cases.json --keywords "heleri, underslag"
    python scripts/run_matching.py --firms firms.json --cases cases.json --all-courts --json
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Optional

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from config.settings import settings
from matching.engine import MatchingEngine
from matching.highlight import render_marked
from matching.models import MatchOutput


def read_payload(path: Optional[str]) -> Optional[str]:
    """Read a JSON file as text; None when no path was given."""
    if not path:
        return None
    return Path(path).read_text(encoding="utf-8")


def output_to_dict(output: MatchOutput) -> dict:
    """JSON-serializable view of a matching pass."""
    shown, total = output.keyword_matches_for_display()
    return {
        "scorer": output.scorer,
        "firms": len(output.firms),
        "cases": len(output.case_texts),
        "matches": [
            {
                "firm": m.firm,
                "tokens": m.highlight_tokens,
                "hits": [{"text": h.text, "score": round(h.score, 4)} for h in m.hits],
            }
            for m in output.matches
        ],
        "keywords": [k.raw for k in output.keywords],
        "keyword_matches_total": total,
        "keyword_matches": [{"text": r.text, "court": r.court} for r in shown],
    }


def print_report(output: MatchOutput) -> None:
    print("=" * 60)
    print("FIRM / CASE MATCHING")
    print("=" * 60)
    print(f"Firms: {len(output.firms)}")
    print(f"Cases: {len(output.case_texts)}")
    print(f"Scorer: {output.scorer}")
    print("=" * 60)

    if output.waiting_for_input:
        print("\nWaiting for files... Provide both firms and cases to see matches.")
    elif not output.matches:
        print("\nNo matches above threshold.")
    else:
        for match in output.matches:
            print(f"\n{match.firm}")
            for hit in match.hits:
                print(f"  [{hit.score:.2f}] {render_marked(hit.text, match.highlight_tokens)}")

    if output.keywords:
        shown, total = output.keyword_matches_for_display()
        print("\n" + "-" * 60)
        print(f"KEYWORD MATCHES ({len(output.keywords)} keywords, {total} cases)")
        print("-" * 60)
        if not total:
            print("No cases contain the given keywords.")
        for record in shown:
            print(f"  {render_marked(record.text, output.keyword_highlight_tokens)}")
            if record.court:
                print(f"    {record.court}")
        if total > len(shown):
            print(f"Showing first {len(shown)} of {total} matches...")


def main():
    parser = argparse.ArgumentParser(
        description="Match law firms against case records"
    )
    parser.add_argument("--firms", help="Path to firms JSON")
    parser.add_argument("--cases", help="Path to cases JSON")
    parser.add_argument(
        "--threshold",
        type=float,
        default=settings.MATCH_THRESHOLD,
        help="Fuzzy match threshold, clamped to 0.5-0.99 (default: %(default)s)",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--strict",
        dest="strict",
        action="store_true",
        default=settings.STRICT_LAST_NAME,
        help="Strict last-name matching",
    )
    mode.add_argument(
        "--fuzzy",
        dest="strict",
        action="store_false",
        help="Fuzzy similarity matching",
    )
    courts = parser.add_mutually_exclusive_group()
    courts.add_argument(
        "--court-only",
        dest="court_only",
        action="store_true",
        default=settings.ONLY_COURT_FILTER,
        help="Only cases from the configured court",
    )
    courts.add_argument(
        "--all-courts",
        dest="court_only",
        action="store_false",
        help="Cases from every court",
    )
    parser.add_argument(
        "--keywords",
        default="",
        help="Comma separated keywords to filter cases by",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print results as JSON",
    )

    args = parser.parse_args()

    try:
        firms_text = read_payload(args.firms)
        cases_text = read_payload(args.cases)
    except OSError as e:
        print(f"Error reading input: {e}", file=sys.stderr)
        sys.exit(1)

    engine = MatchingEngine()
    output = engine.run(
        firms_text,
        cases_text,
        threshold=args.threshold,
        only_court_filter=args.court_only,
        strict_last_name=args.strict,
        keywords_raw=args.keywords,
    )

    if args.json:
        print(json.dumps(output_to_dict(output), ensure_ascii=False, indent=2))
    else:
        print_report(output)


if __name__ == "__main__":
    main()
