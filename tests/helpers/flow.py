"""Helpers for walking a SurveyEngine to a given point in the catalog."""

from survey_wizard.models.session import CompletionStep, EngineMode, PromptStep

# Main-question answers that never open follow-ups or structured lists.
QUIET_ANSWERS = {
    "intro": "Ready",
    "age": "42",
    "weight": "180 lbs",
    "height": "5'10\"",
    "sex_assigned_at_birth": "Male",
    "ancestries": "East Asian",
    "conditions": "None",
    "surgeries_or_hospital_stays": "none",
    "allergies": "None",
    "medications": "none",
    "supplements": "none",
    "cam_fields": "all",
    "wearable_devices": "Fitbit",
}


def advance_to(engine, qid: str) -> PromptStep:
    """Answer main questions with QUIET_ANSWERS until ``qid`` is being asked.

    Returns the prompt step for ``qid``.
    """
    step = engine.current_step()
    while True:
        if isinstance(step, CompletionStep):
            raise AssertionError(f"Survey finished before reaching '{qid}'")
        if step.qid == qid and step.mode is EngineMode.MAIN_CATALOG:
            return step
        step = engine.submit_answer(QUIET_ANSWERS[step.qid])


def run_to_completion(engine) -> CompletionStep:
    """Answer every remaining main question with QUIET_ANSWERS."""
    step = engine.current_step()
    while isinstance(step, PromptStep):
        step = engine.submit_answer(QUIET_ANSWERS[step.qid])
    return step
