"""Engine state and step models — the contract between the engine and the UI.

Step types:
  - PromptStep: show one prompt and wait for the user's reply
  - CompletionStep: the survey is finished; carries the final document

The ``EngineResponse`` union covers both cases so callers can dispatch on
``type``.

Engine-internal state (``PendingSubQuestion``, ``StructuredListSession``) lives
here too so that tests and tooling can inspect it without reaching into the
engine's private attributes.
"""

import enum
from typing import Literal, Optional

from pydantic import BaseModel, Field

from survey_wizard.models.document import Progress


class EngineMode(str, enum.Enum):
    """Mutually exclusive engine modes.

    Transitions:
        main_catalog -> sub_question_drain       (multi-select item needs follow-up)
        main_catalog -> structured_list_collect  (records to collect)
        sub_question_drain -> main_catalog       (queue drained)
        structured_list_collect -> main_catalog  (no more items)
        any -> finished                          (catalog exhausted / done|finish|stop)
    """

    MAIN_CATALOG = "main_catalog"
    SUB_QUESTION_DRAIN = "sub_question_drain"
    STRUCTURED_LIST_COLLECT = "structured_list_collect"
    FINISHED = "finished"


# --- Steps returned to the UI ---

class PromptStep(BaseModel):
    """Engine step: show ``prompt`` and wait for an answer.

    ``notice`` is an optional message to show before the prompt
    (e.g. "Okay, let's add another item.").
    """

    type: Literal["prompt"] = "prompt"
    mode: EngineMode
    qid: str
    step: str
    prompt: str
    notice: Optional[str] = None
    # Set while asking a sub-question or a structured-list field
    sub_question_id: Optional[str] = None
    progress: Progress


class CompletionStep(BaseModel):
    """Engine step: the survey is finished.

    ``terminated_early`` is True when the user ended the survey with a
    termination token before the catalog was exhausted.
    """

    type: Literal["completed"] = "completed"
    document: dict
    document_json: str
    message: str
    terminated_early: bool = False


# Callers can match on step.type to dispatch rendering logic.
EngineResponse = PromptStep | CompletionStep


# --- Engine-internal state ---

class PendingSubQuestion(BaseModel):
    """Follow-up work for one multi-select item.

    ``sub_question_ids`` lists the sub-questions still to ask for the item,
    head first.  The item is located by ``item_id``, never by label.
    """

    qid: str
    item_id: str
    label: str
    sub_question_ids: list[str]


class StructuredListSession(BaseModel):
    """Records being collected for a list-structured question.

    While ``awaiting_more`` is False the next answer fills field number
    ``field_index`` of ``current_item``; once every field is filled the item
    moves to ``collected`` and the engine asks whether there are more.
    """

    qid: str
    current_item: dict[str, str] = Field(default_factory=dict)
    field_index: int = 0
    collected: list[dict[str, str]] = Field(default_factory=list)
    awaiting_more: bool = False
