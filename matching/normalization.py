"""
Text normalization for firm and case comparison.

Names in the source data follow Norwegian conventions, so the letters
æ, ø and å are kept as base letters while every other accented letter is
folded to its unaccented base.
"""

import re
import unicodedata

# Letters kept intact by diacritic folding
NORWEGIAN_LETTERS = frozenset("æøåÆØÅ")

# Anything outside this set becomes a space after lowercasing
_DISALLOWED_CHARS = re.compile(r"[^a-z0-9åæø\s]")
_WHITESPACE = re.compile(r"\s+")

# Legal-entity words dropped from firm names before comparison
_FIRM_WORD = re.compile(r"\b(advokatfirma(et)?)\b", re.IGNORECASE)
_ORG_TYPE = re.compile(r"\b(as|asa|da|ans|ks|se)\b", re.IGNORECASE)


def fold_diacritics(s: str) -> str:
    """Strip combining marks from every letter except æ, ø and å."""
    out = []
    for ch in unicodedata.normalize("NFC", s):
        if ch in NORWEGIAN_LETTERS:
            out.append(ch)
            continue
        decomposed = unicodedata.normalize("NFKD", ch)
        out.append("".join(c for c in decomposed if not unicodedata.combining(c)))
    return "".join(out)


def normalize(s: str) -> str:
    """
    Canonicalize free text for comparison.

    - Fold diacritics (keeping æ, ø, å)
    - Lowercase
    - Replace characters outside [a-z0-9 åæø] with a space
    - Collapse whitespace and trim
    """
    if not s:
        return ""

    cleaned = _DISALLOWED_CHARS.sub(" ", fold_diacritics(s).lower())
    return _WHITESPACE.sub(" ", cleaned).strip()


def strip_legal_suffix(s: str) -> str:
    """Remove 'advokatfirma(et)' and organization-type abbreviations as whole words."""
    if not s:
        return ""
    stripped = _FIRM_WORD.sub(" ", s)
    stripped = _ORG_TYPE.sub(" ", stripped)
    return _WHITESPACE.sub(" ", stripped).strip()


def tokenize(s: str) -> list[str]:
    """
    Split a name into comparison tokens.

    Legal suffixes are stripped and the text normalized first. Order is not
    significant; callers that need a set should build one.
    """
    return [t for t in normalize(strip_legal_suffix(s)).split(" ") if t]
