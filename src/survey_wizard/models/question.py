"""Question type models for the survey catalog.

Each question type maps to a specific answer-handling path in the engine:

    - text: free text; optional ``weight`` / ``height`` normalizer
    - number: leading integer
    - enum-single: free text answer to a single-choice prompt
    - enum-multi: labels from a fixed option list with Other/None handling,
      optionally followed by per-item sub-questions
    - list-free-text: comma/slash/newline separated list of strings
    - list-structured: repeatable records collected field by field

The catalog entry with ``step: intro`` is a ``text`` question that writes no
data.

The discriminated ``Question`` union uses ``question_type`` as its
discriminator.  The ``question_mapper`` dict maps type strings to their
Pydantic classes.  All models are frozen: the catalog is immutable at runtime.
"""

from __future__ import annotations

from typing import Annotated, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from survey_wizard.constants import INTRO_STEP
from survey_wizard.models.document import DocumentField, ItemField

Step = Literal[
    "intro",
    "basic_profile",
    "medical_history",
    "medications_and_supplements",
    "miscellaneous",
]


# --- Sub-questions ---

class SubQuestion(BaseModel):
    """A follow-up prompt whose answer is written onto one list item.

    For enum-multi questions ``applies_to`` selects the items it is asked for:

      - ``selected``: every selected item except Other and None
      - ``other``: only the Other item, and only when it has no note yet

    Structured-list fields leave ``applies_to`` unset.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str
    text: str
    answer_type: Literal["text", "number"] = "text"
    field: ItemField
    applies_to: Optional[Literal["selected", "other"]] = None


# --- Base question type ---

class BaseQuestion(BaseModel):
    """Fields shared by all question types."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    qid: str
    # Jinja2 template; may reference ``options``
    text: str
    step: Step
    field: Optional[DocumentField] = None

    @property
    def is_intro(self) -> bool:
        """True for the introductory entry, which writes no data."""
        return self.step == INTRO_STEP

    @model_validator(mode="after")
    def _chk_field(self):
        if self.is_intro and self.field is not None:
            raise ValueError(f"{self.qid}: the intro question must not declare a field")
        if not self.is_intro and self.field is None:
            raise ValueError(f"{self.qid}: field is required")
        return self


# --- Scalar question types ---

class TextQuestion(BaseQuestion):
    """Free-text answer; ``weight`` and ``height`` pick a normalizer."""

    question_type: Literal["text"] = "text"
    normalizer: Optional[Literal["weight", "height"]] = None
    # Height answers also write the total inches here
    inches_field: Optional[DocumentField] = None

    @model_validator(mode="after")
    def _chk_height(self):
        if self.normalizer == "height" and self.inches_field is None:
            raise ValueError(f"{self.qid}: height questions need inches_field")
        if self.normalizer != "height" and self.inches_field is not None:
            raise ValueError(f"{self.qid}: inches_field is only valid for height questions")
        return self


class NumberQuestion(BaseQuestion):
    """Integer answer ("42", "42 years")."""

    question_type: Literal["number"] = "number"


class EnumSingleQuestion(BaseQuestion):
    """Single choice; the trimmed answer text is stored as given."""

    question_type: Literal["enum-single"] = "enum-single"
    options: Tuple[str, ...] = ()


# --- List question types ---

class EnumMultiQuestion(BaseQuestion):
    """Pick any number of options.

    ``normalizer`` chooses how the answer is parsed:

      - ``enum_multi``: list of ``{label, other_note}`` items, with
        ``other_label`` / ``none_label`` semantics and optional sub-questions
      - ``cam_fields``: plain string list with synonyms and ``All`` expansion
      - ``wearables``: plain string list with exclusive ``None``
    """

    question_type: Literal["enum-multi"] = "enum-multi"
    options: Tuple[str, ...]
    normalizer: Literal["enum_multi", "cam_fields", "wearables"] = "enum_multi"
    other_label: str = "Other"
    none_label: str = "None"
    sub_questions: Tuple[SubQuestion, ...] = ()

    @model_validator(mode="after")
    def _chk(self):
        if not self.options:
            raise ValueError(f"{self.qid}: enum-multi questions need options")
        if self.sub_questions and self.normalizer != "enum_multi":
            raise ValueError(
                f"{self.qid}: sub_questions require the enum_multi normalizer"
            )
        for sub in self.sub_questions:
            if sub.applies_to is None:
                raise ValueError(f"{self.qid}.{sub.id}: applies_to is required")
        return self

    def sub_questions_for(self, applies_to: str) -> list[SubQuestion]:
        """Sub-questions asked for a ``selected`` or ``other`` item, in order."""
        return [sub for sub in self.sub_questions if sub.applies_to == applies_to]


class FreeTextListQuestion(BaseQuestion):
    """Free-text list ("procedure (year), procedure (year)")."""

    question_type: Literal["list-free-text"] = "list-free-text"


class StructuredListQuestion(BaseQuestion):
    """Repeatable records; each sub-question is one field of a record."""

    question_type: Literal["list-structured"] = "list-structured"
    sub_questions: Tuple[SubQuestion, ...]

    @model_validator(mode="after")
    def _chk(self):
        if not self.sub_questions:
            raise ValueError(f"{self.qid}: list-structured questions need sub_questions")
        return self


# --- Discriminated union of all question types ---

Question = Annotated[
    Union[
        TextQuestion,
        NumberQuestion,
        EnumSingleQuestion,
        EnumMultiQuestion,
        FreeTextListQuestion,
        StructuredListQuestion,
    ],
    Field(discriminator="question_type"),
]

# Maps question_type string → Pydantic class for deserialization from YAML.
question_mapper = {
    "text": TextQuestion,
    "number": NumberQuestion,
    "enum-single": EnumSingleQuestion,
    "enum-multi": EnumMultiQuestion,
    "list-free-text": FreeTextListQuestion,
    "list-structured": StructuredListQuestion,
}
