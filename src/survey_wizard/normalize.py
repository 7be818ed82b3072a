"""Answer normalization — pure functions from raw chat text to typed values.

Every normalizer first checks for a "no answer" sentinel (``skip``, ``none``,
``not sure`` or the empty string, case-insensitive) and returns ``None`` or an
empty list for it.  ``normalize_enum_multi`` is the one twist: "None" is a
real option there, so an explicit None selection is recognised before the
sentinel check.

Nothing in this module knows about the question catalog or the engine; the
engine picks the normalizer for each question and writes the result into the
document with :func:`set_path`.
"""

from __future__ import annotations

import math
import re
from typing import Any, Iterable

from survey_wizard.constants import (
    CAM_ALL_OPTION,
    CAM_FIELD_SYNONYMS,
    POUNDS_PER_KILOGRAM,
    SENTINEL_TOKENS,
    WEARABLES_NONE_OPTION,
)
from survey_wizard.models.answer import EnumSelection, HeightReading

_LIST_SPLIT_RE = re.compile(r"[,/\n]")
_FEET_INCHES_RE = re.compile(r"(\d+)\s*(?:ft|feet|')\s*(\d*)\s*(?:in|inch|\")?", re.IGNORECASE)
_CENTIMETRES_RE = re.compile(r"(\d+(?:\.\d+)?)\s*cm", re.IGNORECASE)
_KILOGRAMS_RE = re.compile(r"(\d+(?:\.\d+)?)\s*kg", re.IGNORECASE)
_POUNDS_RE = re.compile(r"(\d+(?:\.\d+)?)\s*(?:lb|lbs|pounds)?", re.IGNORECASE)
_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def is_sentinel(text: str, extra: Iterable[str] = ()) -> bool:
    """True if ``text`` is a "no answer" token.

    Args:
        text: raw answer text
        extra: additional lower-case tokens to treat as no answer
            (sub-questions also accept ``unknown``)
    """
    token = text.strip().lower()
    return token == "" or token in SENTINEL_TOKENS or token in extra


def split_tokens(text: str) -> list[str]:
    """Split on comma, slash or newline; trim, drop empties, de-duplicate.

    First-seen order is preserved.  No sentinel handling.
    """
    tokens: list[str] = []
    for part in _LIST_SPLIT_RE.split(text):
        part = part.strip()
        if part and part not in tokens:
            tokens.append(part)
    return tokens


def parse_leading_int(text: str) -> int | None:
    """Parse the integer at the start of ``text`` ("2010", " 42 years").

    Returns None when the text does not start with a number.
    """
    match = _LEADING_INT_RE.match(text)
    if match is None:
        return None
    return int(match.group(1))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _format_number(value: float) -> str:
    # 175.0 -> "175", 175.5 -> "175.5"
    return str(int(value)) if value.is_integer() else str(value)


# ---------------------------------------------------------------------------
# Scalar normalizers
# ---------------------------------------------------------------------------

def normalize_height(text: str) -> HeightReading:
    """Normalize a height answer.

    - ``5ft 10in``, ``5'10"``, ``5 feet`` → ``5'10"`` / ``5'0"`` plus total inches
    - ``175cm`` → ``175 cm`` (no inch conversion)
    - anything else → trimmed text, ``inches_total`` None
    """
    if is_sentinel(text):
        return HeightReading()

    raw = text.strip()

    match = _FEET_INCHES_RE.search(raw)
    if match:
        feet = int(match.group(1))
        inches = int(match.group(2)) if match.group(2) else 0
        return HeightReading(height=f"{feet}'{inches}\"", inches_total=feet * 12 + inches)

    match = _CENTIMETRES_RE.search(raw)
    if match:
        return HeightReading(height=f"{_format_number(float(match.group(1)))} cm")

    return HeightReading(height=raw)


def normalize_weight(text: str) -> int | None:
    """Normalize a weight answer to whole pounds.

    A ``kg`` suffix is converted (x 2.20462); otherwise the first number is
    taken as pounds.  Both are rounded half-up.  No number → None.
    """
    if is_sentinel(text):
        return None

    match = _KILOGRAMS_RE.search(text)
    if match:
        return _round_half_up(float(match.group(1)) * POUNDS_PER_KILOGRAM)

    match = _POUNDS_RE.search(text)
    if match:
        return _round_half_up(float(match.group(1)))
    return None


# ---------------------------------------------------------------------------
# List normalizers
# ---------------------------------------------------------------------------

def normalize_list(text: str) -> list[str]:
    """Normalize a free-text list answer ("appendectomy (2015), knee / hip")."""
    if is_sentinel(text):
        return []
    return split_tokens(text)


def normalize_enum_multi(
    text: str,
    options: Iterable[str],
    other_label: str = "Other",
    none_label: str = "None",
) -> list[EnumSelection]:
    """Normalize a multi-select answer against a fixed option list.

    Rules, in order:
      1. any token equal to ``none_label`` → ``[none_label]`` only
      2. sentinel answer → ``[]``
      3. tokens matching an option (case-insensitive) → that option
      4. a token equal to ``other_label`` → the Other entry (once)
      5. every other token → appended to the Other entry's ``other_note``,
         comma-joined; the Other entry is created if missing

    Labels in the result are unique; notes of duplicate labels are merged.
    """
    tokens = split_tokens(text)
    if any(token.lower() == none_label.lower() for token in tokens):
        return [EnumSelection(label=none_label)]
    if is_sentinel(text):
        return []

    by_lower = {option.lower(): option for option in options}
    result: list[EnumSelection] = []
    notes: list[str] = []

    for token in tokens:
        key = token.lower()
        option = by_lower.get(key)
        if option is not None:
            result.append(EnumSelection(label=option))
        elif key == other_label.lower():
            if not any(item.label == other_label for item in result):
                result.append(EnumSelection(label=other_label))
        else:
            notes.append(token)

    if notes:
        other = next((item for item in result if item.label == other_label), None)
        if other is None:
            other = EnumSelection(label=other_label)
            result.append(other)
        other.other_note = _join_notes(other.other_note, ", ".join(notes))

    return _dedupe_selections(result)


def _join_notes(existing: str | None, extra: str | None) -> str | None:
    if not extra:
        return existing
    return f"{existing}, {extra}" if existing else extra


def _dedupe_selections(items: list[EnumSelection]) -> list[EnumSelection]:
    """Keep the first entry per label, merging the notes of later duplicates."""
    unique: dict[str, EnumSelection] = {}
    for item in items:
        seen = unique.get(item.label)
        if seen is None:
            unique[item.label] = item
        else:
            seen.other_note = _join_notes(seen.other_note, item.other_note)
    return list(unique.values())


def normalize_cam_fields(text: str, options: Iterable[str]) -> list[str]:
    """Normalize the complementary & alternative medicine answer.

    ``tcm`` and ``hanbang``/``korean medicine`` are accepted as synonyms;
    ``all`` expands to every option except the ``All`` meta-option.  Tokens
    that match no option are dropped.
    """
    if is_sentinel(text):
        return []

    tokens = split_tokens(text)
    choices = [option for option in options if option != CAM_ALL_OPTION]
    if any(token.lower() == CAM_ALL_OPTION.lower() for token in tokens):
        return choices

    by_lower = {choice.lower(): choice for choice in choices}
    result: list[str] = []
    for token in tokens:
        canonical = CAM_FIELD_SYNONYMS.get(token.lower(), token)
        match = by_lower.get(canonical.lower())
        if match is not None and match not in result:
            result.append(match)
    return result


def normalize_wearables(text: str, options: Iterable[str]) -> list[str]:
    """Normalize the wearable-devices answer.

    A bare sentinel (including ``none`` on its own) yields ``[]``.  Otherwise
    a ``none`` token wins over everything else and yields ``["None"]``.
    Unknown devices are dropped.
    """
    if is_sentinel(text):
        return []

    tokens = split_tokens(text)
    if any(token.lower() == WEARABLES_NONE_OPTION.lower() for token in tokens):
        return [WEARABLES_NONE_OPTION]

    by_lower = {
        option.lower(): option for option in options if option != WEARABLES_NONE_OPTION
    }
    result: list[str] = []
    for token in tokens:
        match = by_lower.get(token.lower())
        if match is not None and match not in result:
            result.append(match)
    return result


# ---------------------------------------------------------------------------
# Document paths
# ---------------------------------------------------------------------------

def _path_parts(path: Any) -> list[str]:
    # Accepts DocumentField / ItemField members as well as plain strings
    value = getattr(path, "value", path)
    if not isinstance(value, str) or not value:
        raise ValueError(f"Invalid document path: {path!r}")
    return value.split(".")


def get_path(document: dict, path: Any, default: Any = None) -> Any:
    """Read the value at a dot-delimited path, or ``default`` if absent."""
    node: Any = document
    for key in _path_parts(path):
        if not isinstance(node, dict) or key not in node:
            return default
        node = node[key]
    return node


def set_path(document: dict, path: Any, value: Any) -> dict:
    """Write ``value`` at a dot-delimited path, creating intermediate dicts.

    Returns ``document`` for chaining.

    Raises:
        TypeError: if an intermediate key holds a non-dict value.
    """
    *parents, leaf = _path_parts(path)
    node = document
    for key in parents:
        child = node.setdefault(key, {})
        if not isinstance(child, dict):
            raise TypeError(
                f"Cannot write '{getattr(path, 'value', path)}': "
                f"'{key}' holds {type(child).__name__}, not a dict"
            )
        node = child
    node[leaf] = value
    return document
