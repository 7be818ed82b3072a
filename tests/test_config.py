"""Settings loaded from SURVEY_* environment variables."""

from survey_wizard.config import SurveySettings, load_settings
from survey_wizard.constants import DEFAULT_ASSISTANT_VERSION


def test_defaults(monkeypatch):
    for name in ("SURVEY_CATALOG_DIR", "SURVEY_ASSISTANT_VERSION", "SURVEY_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    settings = load_settings()
    assert settings == SurveySettings()
    assert settings.catalog_dir is None
    assert settings.assistant_version == DEFAULT_ASSISTANT_VERSION
    assert settings.log_level == "INFO"


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("SURVEY_CATALOG_DIR", str(tmp_path))
    monkeypatch.setenv("SURVEY_ASSISTANT_VERSION", "v2")
    monkeypatch.setenv("SURVEY_LOG_LEVEL", "debug")
    settings = load_settings()
    assert settings.catalog_dir == str(tmp_path)
    assert settings.assistant_version == "v2"
    assert settings.log_level == "DEBUG"


def test_empty_catalog_dir_means_default(monkeypatch):
    monkeypatch.setenv("SURVEY_CATALOG_DIR", "")
    assert load_settings().catalog_dir is None
