#!/usr/bin/env python3
"""Simulate a full survey conversation against SurveyEngine.

Drives the engine from the introduction to the final document, printing
every prompt and the mock answer chosen for it.

By default answers are **deterministic** (a fixed patient).  Use ``--random``
to pick random options and free-text values so each run walks a different
path through follow-ups and structured lists.

Usage::

    # Default run (fixed answers)
    python scripts/simulate_survey.py

    # Random answers, reproducible with a seed
    python scripts/simulate_survey.py --random --seed 7

    # End the survey early after N answers
    python scripts/simulate_survey.py --stop-after 5

    # Only print the final JSON document
    python scripts/simulate_survey.py -q
"""

from __future__ import annotations

import argparse
import logging
import random
import sys
from pathlib import Path

# ---------------------------------------------------------------------------
# Ensure the src/ tree is importable when running from a checkout.
# ---------------------------------------------------------------------------
_SCRIPT_DIR = Path(__file__).resolve().parent
_REPO_ROOT = _SCRIPT_DIR.parent
sys.path.insert(0, str(_REPO_ROOT / "src"))

from survey_wizard import (  # noqa: E402
    CatalogStore,
    CompletionStep,
    EngineMode,
    PromptStep,
    SurveyEngine,
    load_settings,
)

logger = logging.getLogger("simulate_survey")

# Fixed answers keyed by qid (main questions) or "qid.sub_id" (follow-ups).
_FIXED_ANSWERS: dict[str, str] = {
    "intro": "Ready",
    "age": "42",
    "weight": "80kg",
    "height": "5 ft 10 in",
    "sex_assigned_at_birth": "Female",
    "ancestries": "East Asian, Other",
    "ancestries.other_note": "Polynesian",
    "conditions": "Asthma, High blood pressure",
    "conditions.start_year": "2010",
    "conditions.other_note": "Migraine",
    "surgeries_or_hospital_stays": "Appendectomy (2015), Knee arthroscopy (2019)",
    "allergies": "Nuts, Other Allergens",
    "allergies.reaction": "Hives",
    "allergies.other_note": "Latex",
    "medications": "yes",
    "medications.name": "Lisinopril",
    "medications.dose_strength": "10 mg",
    "medications.frequency": "Once daily",
    "medications.purpose": "Blood pressure",
    "supplements": "none",
    "supplements.name": "Vitamin D",
    "supplements.dose_strength": "1000 IU",
    "supplements.frequency": "Daily",
    "supplements.purpose": "Bone health",
    "cam_fields": "tcm, Ayurveda",
    "wearable_devices": "Apple Watch",
}

_RANDOM_TEXT = ["skip", "not sure", "unknown", "Seasonal", "Mild", "Twice a week"]


def _answer_fixed(step: PromptStep) -> str:
    if step.mode is EngineMode.STRUCTURED_LIST_COLLECT and step.sub_question_id is None:
        return "no"
    key = f"{step.qid}.{step.sub_question_id}" if step.sub_question_id else step.qid
    return _FIXED_ANSWERS.get(key, "skip")


def _answer_random(store: CatalogStore, step: PromptStep, rng: random.Random) -> str:
    if step.mode is EngineMode.STRUCTURED_LIST_COLLECT:
        if step.sub_question_id is None:
            return rng.choice(["yes", "no", "no"])
        return rng.choice(_RANDOM_TEXT[3:])
    if step.mode is EngineMode.SUB_QUESTION_DRAIN:
        if step.sub_question_id == "start_year":
            return rng.choice([str(rng.randint(1980, 2024)), "unknown"])
        return rng.choice(_RANDOM_TEXT)

    question = store.get_question(step.qid)
    options = list(getattr(question, "options", ()))
    if options:
        picks = rng.sample(options, k=min(len(options), rng.randint(1, 3)))
        if rng.random() < 0.2:
            picks.append("Something else")
        return ", ".join(picks)
    if question.question_type == "list-structured":
        return rng.choice(["yes", "none"])
    return _FIXED_ANSWERS.get(step.qid, rng.choice(_RANDOM_TEXT))


def run_simulation(randomise: bool, seed: int | None, stop_after: int | None, quiet: bool) -> int:
    settings = load_settings()
    store = CatalogStore(catalog_dir=settings.catalog_dir)
    store.load()
    engine = SurveyEngine(store, settings=settings)
    rng = random.Random(seed)

    def emit(text: str) -> None:
        if not quiet:
            print(text)

    step = engine.current_step()
    turns = 0
    while isinstance(step, PromptStep):
        if step.notice:
            emit(f"assistant: {step.notice}")
        emit(f"assistant [{step.mode.value}/{step.qid}]: {step.prompt}")

        if stop_after is not None and turns >= stop_after:
            answer = "done"
        elif randomise:
            answer = _answer_random(store, step, rng)
        else:
            answer = _answer_fixed(step)
        emit(f"user: {answer}")

        step = engine.submit_answer(answer)
        turns += 1

    assert isinstance(step, CompletionStep)
    emit(f"assistant: {step.message}")
    print(step.document_json)
    logger.info("Simulation finished after %d turns", turns)
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Simulate a survey conversation against SurveyEngine.",
    )
    parser.add_argument(
        "--random",
        action=argparse.BooleanOptionalAction,
        default=False,
        help="Randomise mock answers (default: off).",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for --random mode.",
    )
    parser.add_argument(
        "--stop-after",
        type=int,
        default=None,
        help="Send 'done' after this many answers.",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Only print the final JSON document.",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=load_settings().log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    sys.exit(run_simulation(args.random, args.seed, args.stop_after, args.quiet))


if __name__ == "__main__":
    main()
