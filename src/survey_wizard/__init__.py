"""survey_wizard — Conversational survey SDK.

Public API:
    SurveyEngine    — question-flow state machine; one instance per survey
    CatalogStore    — loads the YAML question catalog into typed models
    PromptManager   — renders catalog questions and engine messages
    SurveySettings  — engine configuration (see ``load_settings``)
    PromptStep      — step: show a prompt and wait for the answer
    CompletionStep  — step: survey finished, carries the final document
    EngineResponse  — union of the two step types
    EngineMode      — the engine's mutually exclusive modes

Normalization helpers live in ``survey_wizard.normalize``.
"""

from survey_wizard.catalog import CatalogStore
from survey_wizard.config import SurveySettings, load_settings
from survey_wizard.engine import SurveyEngine
from survey_wizard.models.document import ResultDocument
from survey_wizard.models.session import (
    CompletionStep,
    EngineMode,
    EngineResponse,
    PromptStep,
)
from survey_wizard.prompt import PromptManager

__all__ = [
    # Engine & store
    "SurveyEngine",
    "CatalogStore",
    "PromptManager",
    # Config
    "SurveySettings",
    "load_settings",
    # Steps
    "CompletionStep",
    "EngineMode",
    "EngineResponse",
    "PromptStep",
    "ResultDocument",
]
