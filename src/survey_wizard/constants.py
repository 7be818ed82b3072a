"""Survey constants shared across the SDK.

These values are referenced by the normalizers, the engine, and the catalog
store.  They mirror conventions encoded in the YAML catalog under ``v1/``.

The assistant version stamped into every result document can be overridden
via the ``SURVEY_ASSISTANT_VERSION`` environment variable.
"""

import os

# Tokens (compared case-insensitively after trimming) that mean "no answer".
# The empty string is always a sentinel as well.
SENTINEL_TOKENS: frozenset[str] = frozenset({"skip", "none", "not sure"})

# Follow-up questions additionally accept "unknown" as no answer
# (e.g. "What is the start year for Cancer? If unknown, say 'unknown'.").
SUB_QUESTION_SENTINEL_TOKENS: frozenset[str] = frozenset({"unknown"})

# Any of these, at any point in the conversation, finishes the survey.
TERMINATION_TOKENS: frozenset[str] = frozenset({"done", "finish", "stop"})

# Answer to "Any more items?" that opens another structured-list item.
AFFIRMATIVE_TOKEN = "yes"

# kg -> lb conversion factor used by normalize_weight.
POUNDS_PER_KILOGRAM = 2.20462

# Placeholders in sub-question text replaced with the item's label.
LABEL_PLACEHOLDERS: tuple[str, ...] = ("{condition}", "{allergen}")

# Synonyms accepted by the CAM-fields normalizer, keyed by lower-case token.
CAM_FIELD_SYNONYMS: dict[str, str] = {
    "tcm": "Traditional Chinese Medicine",
    "hanbang": "Hanyak",
    "korean medicine": "Hanyak",
}

# Meta-option in the CAM list that expands to every other option.
CAM_ALL_OPTION = "All"

# Exclusive option in the wearables list.
WEARABLES_NONE_OPTION = "None"

# Schema version written to meta.assistant_version.
DEFAULT_ASSISTANT_VERSION = os.getenv("SURVEY_ASSISTANT_VERSION", "v1")

# Step tag of the introductory catalog entry; it writes no data and is not
# counted in progress.
INTRO_STEP = "intro"
