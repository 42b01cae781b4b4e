"""
Record extraction from arbitrary JSON payloads.

Firms and cases arrive as whatever shape the exporting tool produced:
bare string arrays, arrays of objects with named fields, or wrapper objects
with a nested `hits` list. Everything is reduced to plain firm names and
CaseRecord objects here.
"""

import json
from typing import Any, Optional

from config.logging import logger
from matching.models import (
    CaseRecord,
    ObjectRecord,
    ParsedItem,
    StringItem,
    Unrecognized,
)
from matching.surnames import extract_surnames


# Field preference for the generic object-to-string rule
PREFERRED_FIELDS = [
    "navn",
    "name",
    "firma",
    "company",
    "title",
    "case",
    "party",
    "parties",
    "description",
    "court",
    "domstol",
    "sakenGjelder",
    "AdvokaterLang",
    "ParterLang",
    "saksnummer",
]

# Case text is assembled from these, in this order
CASE_TEXT_FIELDS = ["domstol", "sakenGjelder", "AdvokaterLang", "ParterLang", "parter"]
CASE_NUMBER_FIELD = "saksnummer"
ASSISTING_COUNSEL_FIELD = "bistandsadvokater"
COURT_FIELD = "domstol"
FIRM_NAME_FIELD = "navn"
HITS_FIELD = "hits"

# Name-list fields feeding the surname set
SURNAME_FIELDS = ["AdvokaterLang", "ParterLang", "parter", "RettensFormann"]


def parse_json(text: Optional[str]) -> Any:
    """
    Parse JSON text, returning None for absent or malformed input.
    """
    if text is None or not text.strip():
        return None
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError, ValueError) as e:
        logger.warning(f"Ignoring malformed JSON input: {e}")
        return None


def classify(value: Any) -> ParsedItem:
    """Tag a parsed JSON value as a string, an object, or anything else."""
    if isinstance(value, str):
        return StringItem(value)
    if isinstance(value, dict):
        return ObjectRecord(value)
    return Unrecognized(value)


def object_repr(record: ObjectRecord) -> str:
    """
    Non-empty textual surrogate for any object.

    1. First preferred field holding a non-empty string, or the joined
       elements of the first preferred field holding string elements
    2. All top-level string values joined with a space
    3. The object serialized as JSON
    """
    for key in PREFERRED_FIELDS:
        value = record.get_string(key)
        if value:
            return value
        values = record.get_strings(key)
        if values:
            return " ".join(values)

    strings = [v for v in record.fields.values() if isinstance(v, str) and v.strip()]
    if strings:
        return " ".join(strings)

    return json.dumps(record.fields, ensure_ascii=False, separators=(",", ":"))


def _unrecognized_repr(item: Unrecognized) -> Optional[str]:
    """Surrogate for nested arrays and scalars; None when there is nothing to show."""
    value = item.value
    if value is None:
        return None
    if isinstance(value, list):
        if not value:
            return None
        strings = [v for v in value if isinstance(v, str) and v.strip()]
        if strings:
            return " ".join(strings)
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def case_text(record: ObjectRecord) -> Optional[str]:
    """Case text assembled from the known case fields, or None if none are filled."""
    parts = []
    for key in CASE_TEXT_FIELDS:
        value = record.get_string(key)
        if value and value.strip():
            parts.append(value)

    counsel = record.get_strings(ASSISTING_COUNSEL_FIELD)
    if counsel:
        parts.append(" - ".join(counsel))

    number = record.get_string(CASE_NUMBER_FIELD)
    if number and number.strip():
        parts.append(number)

    return " ".join(parts) if parts else None


def case_surnames(record: ObjectRecord) -> frozenset:
    """Union of surnames across every name-list field of a case."""
    surnames = set()
    for key in SURNAME_FIELDS:
        value = record.get_string(key)
        if value:
            surnames |= extract_surnames(value)
    for counsel in record.get_strings(ASSISTING_COUNSEL_FIELD):
        surnames |= extract_surnames(counsel)
    return frozenset(surnames)


def extract_firms(data: Any) -> list[str]:
    """
    Extract firm names from a parsed firms payload.

    - A string root is the sole firm
    - Array elements: strings verbatim, objects by `navn` or the generic rule
    - An object root goes through the same object rule
    """
    if not data:
        return []

    item = classify(data)
    if isinstance(item, StringItem):
        return [item.value]
    if isinstance(item, ObjectRecord):
        return [_firm_name(item)]
    if not isinstance(data, list):
        return []

    firms = []
    for element in data:
        element_item = classify(element)
        if isinstance(element_item, StringItem):
            firms.append(element_item.value)
        elif isinstance(element_item, ObjectRecord):
            firms.append(_firm_name(element_item))
        elif isinstance(element, list):
            # Nested arrays still get a surrogate; bare scalars are not names
            text = _unrecognized_repr(element_item)
            if text:
                firms.append(text)

    logger.debug(f"Extracted {len(firms)} firms")
    return firms


def _firm_name(record: ObjectRecord) -> str:
    name = record.get_string(FIRM_NAME_FIELD)
    if name is not None:
        return name
    return object_repr(record)


def case_record(item: ParsedItem) -> Optional[CaseRecord]:
    """Build a CaseRecord from one parsed item; None for empty items."""
    if isinstance(item, StringItem):
        if not item.value:
            return None
        return CaseRecord(text=item.value)

    if isinstance(item, ObjectRecord):
        text = case_text(item) or object_repr(item)
        return CaseRecord(
            text=text,
            court=item.get_string(COURT_FIELD),
            surnames=case_surnames(item),
        )

    text = _unrecognized_repr(item)
    return CaseRecord(text=text) if text else None


def extract_case_records(data: Any) -> list[CaseRecord]:
    """
    Extract case records from a parsed cases payload.

    The item list is the root array, or the `hits` array of a wrapper
    object. Any other payload is read as a single blob of text with no
    court and no surnames.
    """
    if not data:
        return []

    items = _case_items(data)
    if items is None:
        return [CaseRecord(text=text) for text in _blob_texts(data)]

    records = []
    for element in items:
        record = case_record(classify(element))
        if record is not None:
            records.append(record)

    logger.debug(f"Extracted {len(records)} case records from {len(items)} items")
    return records


def _case_items(data: Any) -> Optional[list]:
    if isinstance(data, list):
        return data
    if isinstance(data, dict) and isinstance(data.get(HITS_FIELD), list):
        return data[HITS_FIELD]
    return None


def _blob_texts(data: Any) -> list[str]:
    item = classify(data)
    if isinstance(item, StringItem):
        return [item.value] if item.value else []
    if isinstance(item, ObjectRecord):
        return [case_text(item) or object_repr(item)]
    return []
