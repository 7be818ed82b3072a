"""Public model re-exports for survey_wizard.

Consumers should import from ``survey_wizard.models`` rather than reaching
into sub-modules directly.
"""

# --- Normalized answers ---
from survey_wizard.models.answer import EnumSelection, HeightReading

# --- Result document ---
from survey_wizard.models.document import (
    AllergyItem,
    BasicProfile,
    ConditionItem,
    DocumentField,
    ItemField,
    MedicalHistory,
    MedicationsAndSupplements,
    Meta,
    Miscellaneous,
    Progress,
    RegimenEntry,
    ResultDocument,
)

# --- Questions ---
from survey_wizard.models.question import (
    BaseQuestion,
    EnumMultiQuestion,
    EnumSingleQuestion,
    FreeTextListQuestion,
    NumberQuestion,
    Question,
    StructuredListQuestion,
    SubQuestion,
    TextQuestion,
    question_mapper,
)

# --- Engine steps / state ---
from survey_wizard.models.session import (
    CompletionStep,
    EngineMode,
    EngineResponse,
    PendingSubQuestion,
    PromptStep,
    StructuredListSession,
)

__all__ = [
    # Answers
    "EnumSelection",
    "HeightReading",
    # Document
    "AllergyItem",
    "BasicProfile",
    "ConditionItem",
    "DocumentField",
    "ItemField",
    "MedicalHistory",
    "MedicationsAndSupplements",
    "Meta",
    "Miscellaneous",
    "Progress",
    "RegimenEntry",
    "ResultDocument",
    # Questions
    "BaseQuestion",
    "EnumMultiQuestion",
    "EnumSingleQuestion",
    "FreeTextListQuestion",
    "NumberQuestion",
    "Question",
    "StructuredListQuestion",
    "SubQuestion",
    "TextQuestion",
    "question_mapper",
    # Session
    "CompletionStep",
    "EngineMode",
    "EngineResponse",
    "PendingSubQuestion",
    "PromptStep",
    "StructuredListSession",
]
