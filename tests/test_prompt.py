"""PromptManager rendering tests."""

import pytest

from survey_wizard.models.document import Progress
from survey_wizard.prompt import PromptManager


@pytest.fixture(scope="module")
def prompts():
    return PromptManager()


class TestQuestionPrompts:
    def test_options_are_listed(self, prompts, store):
        text = prompts.render_question(store.get_question("wearable_devices"))
        assert text == (
            "Do you use any of these wearable devices? "
            "(OURA Ring, Apple Watch, Google Pixel Watch, Fitbit, None.)"
        )

    def test_every_catalog_question_renders(self, prompts, store):
        for q in store.questions:
            text = prompts.render_question(q)
            assert text, f"{q.qid} rendered empty"
            assert "{{" not in text, f"{q.qid} left template markup: {text}"

    def test_conditions_list_all_options(self, prompts, store):
        question = store.get_question("conditions")
        text = prompts.render_question(question)
        for option in question.options:
            assert option in text, f"Option '{option}' missing from prompt"


class TestSubQuestionPrompts:
    def test_label_placeholders(self, prompts, store):
        start_year = store.get_sub_question("conditions", "start_year")
        assert prompts.render_sub_question(start_year, "Gout").startswith(
            "What is the start year (YYYY) for Gout?"
        )
        reaction = store.get_sub_question("allergies", "reaction")
        assert prompts.render_sub_question(reaction, "Egg") == "What reaction do you have to Egg?"

    def test_list_field_numbering(self, prompts, store):
        name = store.get_sub_question("medications", "name")
        assert prompts.render_list_field(name) == "Name:"
        assert prompts.render_list_field(name, item_number=3) == "Item 3. Name:"


class TestMessages:
    def test_list_messages(self, prompts):
        assert prompts.render_more_items() == "Any more items? (yes/no)"
        assert prompts.render_another_item() == "Okay, let's add another item."

    def test_completion(self, prompts):
        progress = Progress(total_questions=12, answered=7)
        assert prompts.render_completion(progress) == (
            "Thank you! The survey is complete (7 of 12 questions answered). "
            "Here is your summary:"
        )
        assert prompts.render_completion(progress, terminated_early=True) == (
            "Survey ended early. 7 of 12 questions answered. Here is what we have so far:"
        )

    def test_template_override(self, tmp_path):
        (tmp_path / "more_items.jinja2").write_text("More? [y/n]\n", encoding="utf-8")
        assert PromptManager(template_dir=tmp_path).render_more_items() == "More? [y/n]"
