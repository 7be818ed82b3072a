from datetime import datetime, timezone

import pytest

from survey_wizard.catalog import CatalogStore
from survey_wizard.config import SurveySettings
from survey_wizard.engine import SurveyEngine

# Completion timestamp used by every engine built from the ``engine`` fixture.
FIXED_NOW = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


@pytest.fixture(scope="session")
def store():
    """Load the packaged catalog once for the entire test session."""
    s = CatalogStore()
    s.load()
    return s


@pytest.fixture
def engine(store):
    """Fresh SurveyEngine with a fixed clock for each test."""
    return SurveyEngine(store, settings=SurveySettings(), clock=lambda: FIXED_NOW)
