"""Prompt rendering for the chat UI.

Provides ``PromptManager``, a Jinja2-based renderer that turns catalog
questions and engine messages into the prompt strings shown to the user.
"""

from survey_wizard.prompt.manager import PromptManager

__all__ = ["PromptManager"]
