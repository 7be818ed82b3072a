"""PromptManager — Jinja2-based renderer for the text shown to the user.

Question texts in the catalog are templates themselves (rendered with the
question's ``options``); the engine's own fixed messages live in the
``template/`` directory next to this module.
"""

from __future__ import annotations

from pathlib import Path

import jinja2

from survey_wizard.constants import LABEL_PLACEHOLDERS
from survey_wizard.models.document import Progress
from survey_wizard.models.question import BaseQuestion, SubQuestion


class PromptManager:
    """Renders catalog questions and engine messages into prompt strings.

    Args:
        template_dir: optional override for the template directory.
            Defaults to ``template/`` sibling of this module.
    """

    def __init__(self, template_dir: Path | None = None) -> None:
        if template_dir is None:
            template_dir = Path(__file__).parent / "template"
        self._env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        # Compiled catalog texts, keyed by source text
        self._compiled: dict[str, jinja2.Template] = {}

    def render_question(self, question: BaseQuestion) -> str:
        """Render a main catalog question, expanding ``{{ options }}``."""
        template = self._compiled.get(question.text)
        if template is None:
            template = self._env.from_string(question.text)
            self._compiled[question.text] = template
        options = list(getattr(question, "options", ()))
        return template.render(options=options, question=question).strip()

    def render_sub_question(self, sub_question: SubQuestion, label: str) -> str:
        """Render a follow-up prompt, replacing ``{condition}``/``{allergen}``."""
        text = sub_question.text
        for placeholder in LABEL_PLACEHOLDERS:
            text = text.replace(placeholder, label)
        return text

    def render_list_field(self, sub_question: SubQuestion, item_number: int = 1) -> str:
        """Render the prompt for one field of a structured-list record."""
        return self.render("list_field.jinja2", field=sub_question, item_number=item_number)

    def render_more_items(self) -> str:
        return self.render("more_items.jinja2")

    def render_another_item(self) -> str:
        return self.render("another_item.jinja2")

    def render_completion(self, progress: Progress, *, terminated_early: bool = False) -> str:
        """Closing message shown above the final document."""
        return self.render(
            "completion.jinja2", progress=progress, terminated_early=terminated_early,
        )

    def render(self, template_name: str, **context) -> str:
        """Render a named template with arbitrary context."""
        template = self._env.get_template(template_name)
        return template.render(**context).strip()
