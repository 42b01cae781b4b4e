"""
Data models for firm/case matching.

All records are plain dataclasses derived from the currently loaded JSON
payloads; nothing here is persisted.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union


# ---------------------------------------------------------------------------
# Parsed JSON items
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StringItem:
    """A bare string in the source payload."""
    value: str


@dataclass(frozen=True)
class ObjectRecord:
    """A JSON object in the source payload."""
    fields: dict

    def get_string(self, key: str) -> Optional[str]:
        value = self.fields.get(key)
        return value if isinstance(value, str) else None

    def get_strings(self, key: str) -> list[str]:
        """String elements of an array field (non-strings dropped)."""
        value = self.fields.get(key)
        if not isinstance(value, list):
            return []
        return [v for v in value if isinstance(v, str)]


@dataclass(frozen=True)
class Unrecognized:
    """Any other JSON value (number, bool, null, nested array)."""
    value: Any


ParsedItem = Union[StringItem, ObjectRecord, Unrecognized]


# ---------------------------------------------------------------------------
# Canonical records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CaseRecord:
    """One legal case, reduced to searchable text plus surname set."""
    text: str
    court: Optional[str] = None
    surnames: frozenset = field(default_factory=frozenset)

    def __repr__(self) -> str:
        preview = self.text if len(self.text) <= 40 else self.text[:37] + "..."
        return f"<CaseRecord({preview!r}, court={self.court!r})>"


@dataclass(frozen=True)
class Keyword:
    """A user keyword as typed and in normalized form."""
    raw: str
    normalized: str


class ScorerBackend(Enum):
    """Which scorer produced fuzzy-mode hits."""
    RAPIDFUZZ = "rapidfuzz"  # Approximate-string index
    BASIC = "basic"          # Built-in hybrid similarity


@dataclass
class Hit:
    """A case text matched to a firm."""
    text: str
    score: float
    case_index: int = -1


@dataclass
class MatchResult:
    """All hits for one firm, best first."""
    firm: str
    hits: list[Hit] = field(default_factory=list)
    highlight_tokens: list[str] = field(default_factory=list)

    @property
    def is_match(self) -> bool:
        return bool(self.hits)

    def __repr__(self) -> str:
        best = self.hits[0].score if self.hits else 0.0
        return f"<MatchResult({self.firm}, hits={len(self.hits)}, best={best:.2f})>"


@dataclass
class MatchOutput:
    """Everything the host needs to render one matching pass."""
    firms: list[str] = field(default_factory=list)
    case_texts: list[str] = field(default_factory=list)
    matches: list[MatchResult] = field(default_factory=list)
    keywords: list[Keyword] = field(default_factory=list)
    keyword_matches: list[CaseRecord] = field(default_factory=list)
    keyword_highlight_tokens: list[str] = field(default_factory=list)
    backend: ScorerBackend = ScorerBackend.BASIC
    strict_last_name: bool = False
    keyword_display_limit: int = 100

    @property
    def scorer(self) -> str:
        """Active scorer label as shown to the user."""
        label = self.backend.value
        if self.strict_last_name:
            label += " (overridden)"
        return label

    @property
    def waiting_for_input(self) -> bool:
        return not self.firms or not self.case_texts

    def keyword_matches_for_display(self) -> tuple[list[CaseRecord], int]:
        """First `keyword_display_limit` keyword matches and the full count."""
        return (
            self.keyword_matches[: self.keyword_display_limit],
            len(self.keyword_matches),
        )
