"""SurveyEngine — the question-flow state machine.

One engine instance runs one survey.  Every user message goes through
:meth:`SurveyEngine.submit_answer`, which performs a single synchronous
transition and returns what to show next: a :class:`PromptStep` or, once the
survey is over, a :class:`CompletionStep` carrying the final document.

Mode overview:
    main_catalog             walk the catalog, one question per answer
    sub_question_drain       per-item follow-ups queued by a multi-select
                             answer, FIFO, one sub-question per answer
    structured_list_collect  medications / supplements, field by field,
                             then "Any more items?"
    finished                 terminal; the document is frozen

``done``, ``finish`` or ``stop`` ends the survey from any mode.
"""

from __future__ import annotations

import copy
import logging
from collections import deque
from datetime import datetime, timezone
from typing import Callable

from survey_wizard.catalog import CatalogStore
from survey_wizard.config import SurveySettings
from survey_wizard.constants import (
    AFFIRMATIVE_TOKEN,
    SUB_QUESTION_SENTINEL_TOKENS,
    TERMINATION_TOKENS,
)
from survey_wizard.models.document import DocumentField, Meta, Progress, ResultDocument
from survey_wizard.models.question import (
    EnumMultiQuestion,
    EnumSingleQuestion,
    FreeTextListQuestion,
    NumberQuestion,
    Question,
    StructuredListQuestion,
    SubQuestion,
    TextQuestion,
)
from survey_wizard.models.session import (
    CompletionStep,
    EngineMode,
    EngineResponse,
    PendingSubQuestion,
    PromptStep,
    StructuredListSession,
)
from survey_wizard.normalize import (
    get_path,
    is_sentinel,
    normalize_cam_fields,
    normalize_enum_multi,
    normalize_height,
    normalize_list,
    normalize_wearables,
    normalize_weight,
    parse_leading_int,
    set_path,
)
from survey_wizard.prompt import PromptManager

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SurveyEngine:
    """Runs one survey over a loaded catalog.

    Args:
        store: a loaded :class:`CatalogStore` instance (shared, read-only)
        settings: survey settings; defaults to ``SurveySettings()``
        prompts: prompt renderer; defaults to a fresh :class:`PromptManager`
        clock: returns the completion timestamp (timezone-aware)
    """

    def __init__(
        self,
        store: CatalogStore,
        *,
        settings: SurveySettings | None = None,
        prompts: PromptManager | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if not store.questions:
            raise ValueError("CatalogStore is empty; call store.load() first")
        self._store = store
        self._settings = settings or SurveySettings()
        self._prompts = prompts or PromptManager()
        self._clock = clock or _utcnow

        self._mode = EngineMode.MAIN_CATALOG
        self._index = 0
        self._pending: deque[PendingSubQuestion] = deque()
        self._list_session: StructuredListSession | None = None
        # item_id -> (owning list field, position in that list)
        self._item_slots: dict[str, tuple[DocumentField, int]] = {}
        self._completion: CompletionStep | None = None

        meta = Meta(
            assistant_version=self._settings.assistant_version,
            progress=Progress(total_questions=store.total_questions),
        )
        self._document: dict = ResultDocument(meta=meta).model_dump(mode="json")

    # ==================================================================
    # Read-only views
    # ==================================================================

    @property
    def mode(self) -> EngineMode:
        return self._mode

    @property
    def document(self) -> dict:
        """Deep copy of the result document as it stands."""
        return copy.deepcopy(self._document)

    @property
    def progress(self) -> Progress:
        return Progress(**self._document["meta"]["progress"])

    @property
    def pending(self) -> list[PendingSubQuestion]:
        """Copy of the follow-up queue, head first."""
        return [p.model_copy(deep=True) for p in self._pending]

    @property
    def list_session(self) -> StructuredListSession | None:
        """Copy of the active structured-list session, if any."""
        if self._list_session is None:
            return None
        return self._list_session.model_copy(deep=True)

    def current_step(self) -> EngineResponse:
        """Return what the UI should show now.

        Before the first answer this is the introduction prompt.  Calling it
        repeatedly returns equal steps.  The one state change it can make is
        in drain mode: follow-up entries that no longer resolve to a
        sub-question or item are dropped (logged at ERROR) before the prompt
        is built, exactly as :meth:`submit_answer` would drop them.  If that
        empties the queue the catalog resumes at the next question.
        """
        if self._completion is not None:
            return self._completion
        return self._build_prompt()

    # ==================================================================
    # Step API
    # ==================================================================

    def submit_answer(self, raw_text: str) -> EngineResponse:
        """Process one user message and return the next step.

        Malformed answers never raise; they are stored as ``None`` / ``[]``.
        After the survey has finished, every call returns the same
        :class:`CompletionStep` and changes nothing.

        Raises:
            TypeError: if ``raw_text`` is not a string.
        """
        if not isinstance(raw_text, str):
            raise TypeError(f"raw_text must be str, got {type(raw_text).__name__}")

        if self._completion is not None:
            return self._completion

        value = raw_text.strip()
        if value.lower() in TERMINATION_TOKENS:
            logger.info("Termination token '%s' received in mode %s", value, self._mode.value)
            return self._finish(terminated_early=True)

        notice: str | None = None
        if self._mode is EngineMode.SUB_QUESTION_DRAIN:
            self._submit_sub_question(value)
        elif self._mode is EngineMode.STRUCTURED_LIST_COLLECT:
            notice = self._submit_list_item(value)
        else:
            self._submit_main(value)

        return self._next_step(notice)

    def _next_step(self, notice: str | None = None) -> EngineResponse:
        if self._completion is not None:
            return self._completion
        return self._build_prompt(notice)

    # ==================================================================
    # Internal: main catalog
    # ==================================================================

    def _current_question(self) -> Question:
        return self._store.questions[self._index]

    def _submit_main(self, value: str) -> None:
        """Write the answer to the current catalog question, then advance.

        Multi-select answers that need follow-ups and opened structured lists
        switch mode instead of advancing.
        """
        question = self._current_question()
        if question.is_intro:
            self._advance()
            return

        self._mark_answered()

        if isinstance(question, TextQuestion):
            self._write_text(question, value)
        elif isinstance(question, NumberQuestion):
            number = None if is_sentinel(value) else parse_leading_int(value)
            self._write(question.field, number)
        elif isinstance(question, EnumSingleQuestion):
            self._write(question.field, None if is_sentinel(value) else value)
        elif isinstance(question, EnumMultiQuestion):
            if self._write_enum_multi(question, value):
                return
        elif isinstance(question, FreeTextListQuestion):
            self._write(question.field, normalize_list(value))
        elif isinstance(question, StructuredListQuestion):
            if not is_sentinel(value):
                self._list_session = StructuredListSession(qid=question.qid)
                self._set_mode(EngineMode.STRUCTURED_LIST_COLLECT)
                return
            self._write(question.field, [])
        else:
            raise ValueError(f"Unsupported question type: {question.question_type}")

        self._advance()

    def _write_text(self, question: TextQuestion, value: str) -> None:
        if question.normalizer == "weight":
            self._write(question.field, normalize_weight(value))
        elif question.normalizer == "height":
            reading = normalize_height(value)
            self._write(question.field, reading.height)
            self._write(question.inches_field, reading.inches_total)
        else:
            self._write(question.field, None if is_sentinel(value) else value)

    def _write_enum_multi(self, question: EnumMultiQuestion, value: str) -> bool:
        """Write a multi-select answer and queue its follow-ups.

        Returns True if follow-ups were queued (mode switched to drain).
        """
        if question.normalizer == "cam_fields":
            self._write(question.field, normalize_cam_fields(value, question.options))
            return False
        if question.normalizer == "wearables":
            self._write(question.field, normalize_wearables(value, question.options))
            return False

        selections = normalize_enum_multi(
            value, question.options, question.other_label, question.none_label,
        )
        items: list[dict] = []
        for position, selection in enumerate(selections):
            item = selection.model_dump()
            # Follow-up fields start empty so the item shape is stable
            for sub in question.sub_questions:
                item.setdefault(sub.field.value, None)
            items.append(item)

            item_id = f"{question.qid}[{position}]"
            self._item_slots[item_id] = (question.field, position)

            if selection.label == question.other_label:
                subs = [] if selection.other_note else question.sub_questions_for("other")
            elif selection.label == question.none_label:
                subs = []
            else:
                subs = question.sub_questions_for("selected")

            if subs:
                self._pending.append(PendingSubQuestion(
                    qid=question.qid,
                    item_id=item_id,
                    label=selection.label,
                    sub_question_ids=[sub.id for sub in subs],
                ))

        self._write(question.field, items)

        if not self._pending:
            return False
        logger.debug("Queued %d follow-up item(s) for %s", len(self._pending), question.qid)
        self._set_mode(EngineMode.SUB_QUESTION_DRAIN)
        self._settle_drain()
        return True

    def _advance(self) -> None:
        """Move to the next catalog entry; past the last one the survey finishes."""
        self._index += 1
        if self._index >= len(self._store.questions):
            self._finish(terminated_early=False)

    def _mark_answered(self) -> None:
        progress = self._document["meta"]["progress"]
        progress["answered"] += 1

    # ==================================================================
    # Internal: sub-question drain
    # ==================================================================

    def _head_pending(self) -> tuple[PendingSubQuestion, SubQuestion] | None:
        """Resolve the head of the follow-up queue.

        Entries that reference a missing sub-question or item are an internal
        inconsistency: they are logged and dropped, and the next entry is
        tried.
        """
        while self._pending:
            pending = self._pending[0]
            try:
                sub = self._store.get_sub_question(pending.qid, pending.sub_question_ids[0])
                if pending.item_id not in self._item_slots:
                    raise KeyError(pending.item_id)
            except (KeyError, IndexError) as exc:
                logger.error(
                    "Invariant violation: follow-up for %s item '%s' references "
                    "missing %s; dropping item",
                    pending.qid, pending.label, exc,
                )
                self._pending.popleft()
                continue
            return pending, sub
        return None

    def _settle_drain(self) -> None:
        """Leave drain mode once the queue has nothing left to ask."""
        if self._mode is not EngineMode.SUB_QUESTION_DRAIN:
            return
        if self._head_pending() is None:
            self._set_mode(EngineMode.MAIN_CATALOG)
            self._advance()

    def _submit_sub_question(self, value: str) -> None:
        head = self._head_pending()
        if head is None:
            self._settle_drain()
            return
        pending, sub = head

        if is_sentinel(value, SUB_QUESTION_SENTINEL_TOKENS):
            answer = None
        elif sub.answer_type == "number":
            answer = parse_leading_int(value)
        else:
            answer = value

        # Locate the item by its id, never by label
        list_field, position = self._item_slots[pending.item_id]
        items = list(get_path(self._document, list_field, []))
        item = dict(items[position])
        item[sub.field.value] = answer
        items[position] = item
        self._write(list_field, items)

        pending.sub_question_ids.pop(0)
        if not pending.sub_question_ids:
            self._pending.popleft()
        self._settle_drain()

    # ==================================================================
    # Internal: structured list collection
    # ==================================================================

    def _submit_list_item(self, value: str) -> str | None:
        """Fill the next record field, or answer "Any more items?".

        Field values are stored as typed; no sentinel filtering.  Returns a
        notice to show above the next prompt, if any.
        """
        session = self._list_session
        question = self._store.get_question(session.qid)

        if session.awaiting_more:
            if value.lower() == AFFIRMATIVE_TOKEN:
                session.awaiting_more = False
                return self._prompts.render_another_item()
            self._write(question.field, list(session.collected))
            logger.debug("Collected %d item(s) for %s", len(session.collected), session.qid)
            self._list_session = None
            self._set_mode(EngineMode.MAIN_CATALOG)
            self._advance()
            return None

        field = question.sub_questions[session.field_index]
        session.current_item[field.field.value] = value
        session.field_index += 1
        if session.field_index == len(question.sub_questions):
            session.collected.append(dict(session.current_item))
            session.current_item = {}
            session.field_index = 0
            session.awaiting_more = True
        return None

    # ==================================================================
    # Internal: completion
    # ==================================================================

    def _finish(self, *, terminated_early: bool) -> CompletionStep:
        """Stamp, validate and serialize the document.  Runs exactly once."""
        if self._completion is not None:
            return self._completion

        if self._list_session is not None:
            session = self._list_session
            question = self._store.get_question(session.qid)
            if session.collected:
                self._write(question.field, list(session.collected))
            if session.current_item:
                logger.warning("Discarding incomplete %s item: %s", session.qid, session.current_item)
            self._list_session = None
        if self._pending:
            logger.warning("Survey finished with %d unanswered follow-up item(s)", len(self._pending))
            self._pending.clear()

        set_path(self._document, "meta.completed_at", self._clock().isoformat())
        document = ResultDocument.model_validate(self._document)
        self._document = document.model_dump(mode="json")
        self._set_mode(EngineMode.FINISHED)

        progress = document.meta.progress
        self._completion = CompletionStep(
            document=copy.deepcopy(self._document),
            document_json=document.to_json(),
            message=self._prompts.render_completion(progress, terminated_early=terminated_early),
            terminated_early=terminated_early,
        )
        logger.info(
            "Survey finished: %d/%d questions answered%s",
            progress.answered,
            progress.total_questions,
            " (terminated early)" if terminated_early else "",
        )
        return self._completion

    # ==================================================================
    # Internal: helpers
    # ==================================================================

    def _write(self, field: DocumentField, value) -> None:
        set_path(self._document, field, value)
        logger.debug("Wrote %s = %r", field.value, value)

    def _set_mode(self, mode: EngineMode) -> None:
        if mode is not self._mode:
            logger.debug("Mode %s -> %s", self._mode.value, mode.value)
        self._mode = mode

    def _build_prompt(self, notice: str | None = None) -> EngineResponse:
        """Build the prompt for the current mode and position."""
        sub_question_id = None

        if self._mode is EngineMode.SUB_QUESTION_DRAIN:
            head = self._head_pending()
            if head is None:
                self._settle_drain()
                return self._next_step(notice)
            pending, sub = head
            question = self._store.get_question(pending.qid)
            prompt = self._prompts.render_sub_question(sub, pending.label)
            sub_question_id = sub.id

        elif self._mode is EngineMode.STRUCTURED_LIST_COLLECT:
            session = self._list_session
            question = self._store.get_question(session.qid)
            if session.awaiting_more:
                prompt = self._prompts.render_more_items()
            else:
                field = question.sub_questions[session.field_index]
                prompt = self._prompts.render_list_field(
                    field, item_number=len(session.collected) + 1,
                )
                sub_question_id = field.id

        else:
            question = self._current_question()
            prompt = self._prompts.render_question(question)

        return PromptStep(
            mode=self._mode,
            qid=question.qid,
            step=question.step,
            prompt=prompt,
            notice=notice,
            sub_question_id=sub_question_id,
            progress=self.progress,
        )
