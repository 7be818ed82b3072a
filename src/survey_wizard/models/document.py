"""Result document models — the JSON the survey produces.

The document mirrors the catalog: every question writes to exactly one
``DocumentField`` (height also writes ``height_inches_total``).  Unanswered
fields stay at ``None`` / ``[]`` so the shape never depends on how far the
user got.

``DocumentField`` and ``ItemField`` are the typed field accessors used by the
catalog: a misspelled field in ``questions.yaml`` fails when the catalog is
loaded, not when the question is answered.
"""

from __future__ import annotations

import enum
import json
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from survey_wizard.constants import DEFAULT_ASSISTANT_VERSION
from survey_wizard.models.answer import EnumSelection


class DocumentField(str, enum.Enum):
    """Dot-paths of every answer field in the result document."""

    AGE = "basic_profile.age"
    WEIGHT_POUNDS = "basic_profile.weight_pounds"
    HEIGHT = "basic_profile.height"
    HEIGHT_INCHES_TOTAL = "basic_profile.height_inches_total"
    SEX_ASSIGNED_AT_BIRTH = "basic_profile.sex_assigned_at_birth"
    ANCESTRIES = "basic_profile.ancestries"
    CONDITIONS = "medical_history.conditions"
    SURGERIES_OR_HOSPITAL_STAYS = "medical_history.surgeries_or_hospital_stays"
    ALLERGIES = "medical_history.allergies"
    MEDICATIONS = "medications_and_supplements.medications"
    SUPPLEMENTS = "medications_and_supplements.supplements"
    CAM_FIELDS = "miscellaneous.cam_fields"
    WEARABLE_DEVICES = "miscellaneous.wearable_devices"


class ItemField(str, enum.Enum):
    """Fields of a list item, written by sub-questions."""

    START_YEAR = "start_year"
    OTHER_NOTE = "other_note"
    REACTION = "reaction"
    NAME = "name"
    DOSE_STRENGTH = "dose_strength"
    FREQUENCY = "frequency"
    PURPOSE = "purpose"


# --- Meta ---

class Progress(BaseModel):
    """Question counters; the intro is not counted."""

    total_questions: int = 0
    answered: int = 0


class Meta(BaseModel):
    assistant_version: str = DEFAULT_ASSISTANT_VERSION
    completed_at: Optional[datetime] = None
    progress: Progress = Field(default_factory=Progress)


# --- List items ---

class ConditionItem(EnumSelection):
    """A selected medical condition with its follow-up answer."""

    start_year: Optional[int] = None


class AllergyItem(EnumSelection):
    """A selected allergen with its follow-up answer."""

    reaction: Optional[str] = None


class RegimenEntry(BaseModel):
    """One medication or supplement, collected field by field as typed."""

    name: str
    dose_strength: str
    frequency: str
    purpose: str


# --- Sections ---

class BasicProfile(BaseModel):
    age: Optional[int] = None
    weight_pounds: Optional[int] = None
    height: Optional[str] = None
    height_inches_total: Optional[int] = None
    sex_assigned_at_birth: Optional[str] = None
    ancestries: List[EnumSelection] = Field(default_factory=list)


class MedicalHistory(BaseModel):
    conditions: List[ConditionItem] = Field(default_factory=list)
    surgeries_or_hospital_stays: List[str] = Field(default_factory=list)
    allergies: List[AllergyItem] = Field(default_factory=list)


class MedicationsAndSupplements(BaseModel):
    medications: List[RegimenEntry] = Field(default_factory=list)
    supplements: List[RegimenEntry] = Field(default_factory=list)


class Miscellaneous(BaseModel):
    cam_fields: List[str] = Field(default_factory=list)
    wearable_devices: List[str] = Field(default_factory=list)


class ResultDocument(BaseModel):
    """The completed survey.

    The engine mutates a plain-dict dump of this model while the survey runs
    and validates it back into the model once, when the survey finishes.
    """

    meta: Meta = Field(default_factory=Meta)
    basic_profile: BasicProfile = Field(default_factory=BasicProfile)
    medical_history: MedicalHistory = Field(default_factory=MedicalHistory)
    medications_and_supplements: MedicationsAndSupplements = Field(
        default_factory=MedicationsAndSupplements
    )
    miscellaneous: Miscellaneous = Field(default_factory=Miscellaneous)

    def to_json(self) -> str:
        """Pretty-printed JSON (2-space indent) of the whole document."""
        return json.dumps(self.model_dump(mode="json"), indent=2, ensure_ascii=False)
