import pytest

from bite_intake.agents.intake.extraction import RuleBasedExtractor
from bite_intake.config import IntakeSettings, load_settings
from bite_intake.config.settings import _build_extractor

_ENV_NAMES = (
    "INTAKE_DEFAULT_PROVINCE",
    "INTAKE_EXTRACTION_BACKEND",
    "INTAKE_BATCH_TIMEOUT_S",
    "INTAKE_EXTRACTION_MAX_NEW_TOKENS",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


def test_load_settings_defaults():
    settings = load_settings()

    assert settings == IntakeSettings()
    assert settings.default_province == "Metro Manila"
    assert settings.extraction_backend == "rules"
    assert settings.batch_timeout_s is None


def test_load_settings_reads_environment(monkeypatch):
    monkeypatch.setenv("INTAKE_DEFAULT_PROVINCE", " Cebu ")
    monkeypatch.setenv("INTAKE_EXTRACTION_BACKEND", "LlamaCpp")
    monkeypatch.setenv("INTAKE_BATCH_TIMEOUT_S", "2.5")
    monkeypatch.setenv("INTAKE_EXTRACTION_MAX_NEW_TOKENS", "256")

    settings = load_settings()

    assert settings.default_province == "Cebu"
    assert settings.extraction_backend == "llamacpp"
    assert settings.batch_timeout_s == 2.5
    assert settings.extraction_max_new_tokens == 256


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("INTAKE_EXTRACTION_BACKEND", "openai"),
        ("INTAKE_BATCH_TIMEOUT_S", "soon"),
        ("INTAKE_BATCH_TIMEOUT_S", "-1"),
        ("INTAKE_EXTRACTION_MAX_NEW_TOKENS", "many"),
    ],
)
def test_load_settings_rejects_invalid_values(monkeypatch, name: str, value: str):
    monkeypatch.setenv(name, value)

    with pytest.raises(ValueError):
        load_settings()


def test_rules_backend_builds_rule_based_extractor():
    assert isinstance(_build_extractor(IntakeSettings()), RuleBasedExtractor)
