"""CatalogStore loading and lookup tests.

Validates that the packaged v1/ catalog loads into typed question models and
that broken catalogs are rejected at load time.

Expected shape (from v1/const/ and v1/rules/):
    5 option lists, 13 catalog entries (intro + 12 counted questions)
"""

import textwrap

import pytest
from pydantic import ValidationError

from survey_wizard.catalog import CatalogStore
from survey_wizard.models.document import DocumentField, ItemField
from survey_wizard.models.question import (
    EnumMultiQuestion,
    FreeTextListQuestion,
    NumberQuestion,
    StructuredListQuestion,
    TextQuestion,
)

EXPECTED_ORDER = [
    "intro",
    "age",
    "weight",
    "height",
    "sex_assigned_at_birth",
    "ancestries",
    "conditions",
    "surgeries_or_hospital_stays",
    "allergies",
    "medications",
    "supplements",
    "cam_fields",
    "wearable_devices",
]


def write_catalog(base, questions_yaml, enums=None):
    """Write a minimal catalog directory under ``base`` and return it."""
    if enums is None:
        enums = {"colors": ["Red", "Blue", "Other", "None"]}
    (base / "const").mkdir(parents=True)
    (base / "rules").mkdir(parents=True)
    for name, values in enums.items():
        lines = "\n".join(f"- {v}" for v in values)
        (base / "const" / f"{name}.yaml").write_text(lines + "\n", encoding="utf-8")
    (base / "rules" / "questions.yaml").write_text(
        textwrap.dedent(questions_yaml), encoding="utf-8",
    )
    return base


# =====================================================================
# Packaged catalog
# =====================================================================


class TestPackagedCatalog:
    """The packaged v1/ catalog."""

    def test_question_order(self, store):
        qids = [q.qid for q in store.questions]
        assert qids == EXPECTED_ORDER, f"Catalog order changed: {qids}"

    def test_total_questions_excludes_intro(self, store):
        assert store.total_questions == 12, (
            f"Expected 12 counted questions, got {store.total_questions}"
        )
        assert store.questions[0].is_intro
        assert store.questions[0].field is None

    def test_option_lists(self, store):
        assert set(store.enums) == {
            "allergens", "ancestries", "cam_fields", "medical_conditions", "wearables",
        }
        conditions = store.enums["medical_conditions"]
        assert conditions[-2:] == ("Other", "None"), "Other/None should close the list"
        assert "Cancer" in conditions
        assert store.enums["allergens"][-1] == "Other Allergens"

    def test_options_containing_separators(self, store):
        """Options the answer splitter breaks apart; they are only reachable via Other."""
        split = {
            name: [o for o in values if "," in o or "/" in o]
            for name, values in store.enums.items()
        }
        assert split == {
            "allergens": ["Fish (e.g., Salmon, Tuna)", "Shellfish (e.g., Shrimp, Crab, Lobster)"],
            "ancestries": ["Northern European/Caucasian", "Hispanic/Latino"],
            "cam_fields": [],
            "medical_conditions": [
                "Blood clots/DVT",
                "Hiatal hernia/reflux disease",
                "HIV/AIDS",
                "Leg/foot ulcers",
                "Reflux/ulcers",
            ],
            "wearables": [],
        }, f"Options with separators changed: {split}"

    def test_options_resolved_from_lists(self, store):
        conditions = store.get_question("conditions")
        assert isinstance(conditions, EnumMultiQuestion)
        assert conditions.options == store.enums["medical_conditions"]

    def test_question_types(self, store):
        assert isinstance(store.get_question("age"), NumberQuestion)
        assert isinstance(store.get_question("weight"), TextQuestion)
        assert store.get_question("weight").normalizer == "weight"
        height = store.get_question("height")
        assert height.normalizer == "height"
        assert height.inches_field is DocumentField.HEIGHT_INCHES_TOTAL
        assert isinstance(store.get_question("surgeries_or_hospital_stays"), FreeTextListQuestion)
        assert isinstance(store.get_question("medications"), StructuredListQuestion)
        assert store.get_question("cam_fields").normalizer == "cam_fields"
        assert store.get_question("wearable_devices").normalizer == "wearables"

    def test_every_question_writes_a_typed_field(self, store):
        for q in store.questions[1:]:
            assert isinstance(q.field, DocumentField), f"{q.qid} has untyped field {q.field!r}"

    def test_allergies_use_custom_other_label(self, store):
        assert store.get_question("allergies").other_label == "Other Allergens"

    def test_sub_questions(self, store):
        start_year = store.get_sub_question("conditions", "start_year")
        assert start_year.answer_type == "number"
        assert start_year.field is ItemField.START_YEAR
        assert start_year.applies_to == "selected"
        assert "{condition}" in start_year.text

        reaction = store.get_sub_question("allergies", "reaction")
        assert "{allergen}" in reaction.text

        conditions = store.get_question("conditions")
        assert [s.id for s in conditions.sub_questions_for("other")] == ["other_note"]

    def test_structured_list_fields(self, store):
        fields = [s.id for s in store.get_question("supplements").sub_questions]
        assert fields == ["name", "dose_strength", "frequency", "purpose"]

    def test_lookup_errors(self, store):
        with pytest.raises(KeyError):
            store.get_question("nope")
        with pytest.raises(KeyError):
            store.get_sub_question("conditions", "nope")
        with pytest.raises(KeyError):
            store.get_sub_question("age", "start_year")

    def test_index_of(self, store):
        assert store.index_of("intro") == 0
        assert store.index_of("wearable_devices") == len(store.questions) - 1


# =====================================================================
# Custom and broken catalogs
# =====================================================================


class TestCatalogValidation:
    """Broken catalogs fail at load time."""

    def test_minimal_catalog_loads(self, tmp_path):
        base = write_catalog(tmp_path, """
            - qid: intro
              text: Hello
              step: intro
              question_type: text
            - qid: age
              text: Age?
              step: basic_profile
              question_type: number
              field: basic_profile.age
        """)
        s = CatalogStore(catalog_dir=base)
        s.load()
        assert [q.qid for q in s.questions] == ["intro", "age"]
        assert s.total_questions == 1

    def test_unknown_question_type(self, tmp_path):
        base = write_catalog(tmp_path, """
            - qid: age
              text: Age?
              step: basic_profile
              question_type: slider
              field: basic_profile.age
        """)
        with pytest.raises(ValueError, match="Unknown question_type"):
            CatalogStore(catalog_dir=base).load()

    def test_unknown_option_list(self, tmp_path):
        base = write_catalog(tmp_path, """
            - qid: ancestries
              text: Pick
              step: basic_profile
              question_type: enum-multi
              options_from: flavours
              field: basic_profile.ancestries
        """)
        with pytest.raises(ValueError, match="unknown option list"):
            CatalogStore(catalog_dir=base).load()

    def test_duplicate_qid(self, tmp_path):
        base = write_catalog(tmp_path, """
            - qid: age
              text: Age?
              step: basic_profile
              question_type: number
              field: basic_profile.age
            - qid: age
              text: Age again?
              step: basic_profile
              question_type: number
              field: basic_profile.age
        """)
        with pytest.raises(ValueError, match="Duplicate qid"):
            CatalogStore(catalog_dir=base).load()

    def test_misspelled_field(self, tmp_path):
        base = write_catalog(tmp_path, """
            - qid: age
              text: Age?
              step: basic_profile
              question_type: number
              field: basic_profile.agee
        """)
        with pytest.raises(ValidationError):
            CatalogStore(catalog_dir=base).load()

    def test_missing_field(self, tmp_path):
        base = write_catalog(tmp_path, """
            - qid: age
              text: Age?
              step: basic_profile
              question_type: number
        """)
        with pytest.raises(ValidationError, match="field is required"):
            CatalogStore(catalog_dir=base).load()

    def test_follow_up_without_applies_to(self, tmp_path):
        base = write_catalog(tmp_path, """
            - qid: conditions
              text: Pick
              step: medical_history
              question_type: enum-multi
              options_from: colors
              field: medical_history.conditions
              sub_questions:
                - id: start_year
                  text: Year?
                  answer_type: number
                  field: start_year
        """)
        with pytest.raises(ValidationError, match="applies_to is required"):
            CatalogStore(catalog_dir=base).load()

    def test_option_list_must_be_strings(self, tmp_path):
        base = write_catalog(tmp_path, """
            - qid: intro
              text: Hello
              step: intro
              question_type: text
        """, enums={"numbers": [1, 2, 3]})
        with pytest.raises(ValueError, match="list of strings"):
            CatalogStore(catalog_dir=base).load()

    def test_missing_questions_file(self, tmp_path):
        (tmp_path / "const").mkdir()
        with pytest.raises(FileNotFoundError):
            CatalogStore(catalog_dir=tmp_path).load()

    def test_missing_const_dir(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            CatalogStore(catalog_dir=tmp_path).load()
