"""CatalogStore — loads the survey catalog from ``v1/`` into typed models.

This is the single source of truth for question data at runtime.  The store
is loaded once at startup and is read-only afterwards, so one store can back
any number of engines.

Usage::

    store = CatalogStore()          # defaults to the packaged v1/ directory
    store.load()                    # parse all YAML files

    q = store.get_question("conditions")
    sub = store.get_sub_question("conditions", "start_year")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from survey_wizard.models.question import Question, SubQuestion, question_mapper

logger = logging.getLogger(__name__)

# Packaged catalog, next to this module
DEFAULT_CATALOG_DIR = Path(__file__).resolve().parent / "v1"


def load_yaml(path: Path | str) -> Any:
    """Load a single YAML file and return the parsed contents."""
    if isinstance(path, str):
        path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Missing YAML file: {path}")
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


class CatalogStore:
    """Loads all YAML from ``v1/`` and provides typed lookup.

    Attributes populated after :meth:`load`:

        enums      — dict[list_name, tuple[str, ...]] from const/*.yaml
        questions  — list[Question] in catalog order
    """

    def __init__(self, catalog_dir: str | Path | None = None) -> None:
        if catalog_dir is None:
            catalog_dir = DEFAULT_CATALOG_DIR
        self._base = Path(catalog_dir)

        # Populated by load()
        self.enums: dict[str, tuple[str, ...]] = {}
        self.questions: list[Question] = []
        self._by_qid: dict[str, Question] = {}
        self._positions: dict[str, int] = {}

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self) -> None:
        """Parse all YAML files under the catalog directory into typed models.

        Call this once at startup.  Raises ``FileNotFoundError`` if expected
        YAML files are missing and ``ValueError`` for inconsistent entries.
        """
        self._load_enums()
        self._load_questions()
        logger.info(
            "CatalogStore loaded: %d option lists, %d questions (%d counted)",
            len(self.enums),
            len(self.questions),
            self.total_questions,
        )

    def _load_enums(self) -> None:
        """Load v1/const/*.yaml; each file is one option list named by its stem."""
        const_dir = self._base / "const"
        if not const_dir.is_dir():
            raise FileNotFoundError(f"Missing option list directory: {const_dir}")

        for path in sorted(const_dir.glob("*.yaml")):
            raw = load_yaml(path)
            if not isinstance(raw, list) or not all(isinstance(v, str) for v in raw):
                raise ValueError(f"Option list {path.name} must be a list of strings")
            self.enums[path.stem] = tuple(raw)

    def _load_questions(self) -> None:
        """Load v1/rules/questions.yaml into the ordered question list.

        Each entry is parsed through ``question_mapper`` to get the right
        Pydantic type based on ``question_type``; ``options_from`` is replaced
        by the referenced option list.
        """
        raw_list = load_yaml(self._base / "rules" / "questions.yaml")
        if not isinstance(raw_list, list) or not raw_list:
            raise ValueError("questions.yaml must be a non-empty list")

        for q_dict in raw_list:
            q_dict = dict(q_dict)
            qtype = q_dict.get("question_type")
            cls = question_mapper.get(qtype)
            if cls is None:
                raise ValueError(
                    f"Unknown question_type '{qtype}' for question '{q_dict.get('qid')}'"
                )

            list_name = q_dict.pop("options_from", None)
            if list_name is not None:
                if list_name not in self.enums:
                    raise ValueError(
                        f"Question '{q_dict.get('qid')}' references unknown "
                        f"option list '{list_name}'"
                    )
                q_dict["options"] = self.enums[list_name]

            q = cls(**q_dict)
            if q.qid in self._by_qid:
                raise ValueError(f"Duplicate qid '{q.qid}' in questions.yaml")
            self._by_qid[q.qid] = q
            self._positions[q.qid] = len(self.questions)
            self.questions.append(q)

        if not self.questions[0].is_intro:
            logger.warning("Catalog does not start with an intro entry: %s", self.questions[0].qid)

    # ------------------------------------------------------------------
    # Lookup helpers
    # ------------------------------------------------------------------

    @property
    def total_questions(self) -> int:
        """Number of questions counted in progress (everything but the intro)."""
        return sum(1 for q in self.questions if not q.is_intro)

    def get_question(self, qid: str) -> Question:
        """Look up a question by qid.

        Raises:
            KeyError: if the qid is not in the catalog.
        """
        return self._by_qid[qid]

    def index_of(self, qid: str) -> int:
        """Catalog position of a question.

        Raises:
            KeyError: if the qid is not in the catalog.
        """
        return self._positions[qid]

    def get_sub_question(self, qid: str, sub_id: str) -> SubQuestion:
        """Look up a sub-question of a question.

        Raises:
            KeyError: if the question has no such sub-question.
        """
        question = self._by_qid[qid]
        for sub in getattr(question, "sub_questions", ()):
            if sub.id == sub_id:
                return sub
        raise KeyError(f"{qid}.{sub_id}")
