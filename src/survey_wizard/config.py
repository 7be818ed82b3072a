"""Survey configuration — reads settings from environment variables.

All settings have sensible defaults for local development.  The engine never
reads the environment itself; callers build a :class:`SurveySettings` (usually
via :func:`load_settings`) and pass it in.
"""

import os
from dataclasses import dataclass

from survey_wizard.constants import DEFAULT_ASSISTANT_VERSION


@dataclass(frozen=True)
class SurveySettings:
    """Immutable survey configuration read from environment at startup."""

    # Catalog directory (None → CatalogStore default, the packaged v1/)
    catalog_dir: str | None = None

    # Written to meta.assistant_version of every result document
    assistant_version: str = DEFAULT_ASSISTANT_VERSION

    # Logging
    log_level: str = "INFO"


def load_settings() -> SurveySettings:
    """Build settings from ``SURVEY_*`` environment variables."""
    return SurveySettings(
        catalog_dir=os.getenv("SURVEY_CATALOG_DIR") or None,
        assistant_version=os.getenv("SURVEY_ASSISTANT_VERSION", DEFAULT_ASSISTANT_VERSION),
        log_level=os.getenv("SURVEY_LOG_LEVEL", "INFO").upper(),
    )
