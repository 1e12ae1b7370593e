import pytest
from pydantic import ValidationError

from newsdesk.config import (
    AirtableConfig,
    BatchConfig,
    LLMConfig,
    LLMProvider,
    RetryPolicy,
    SectionConfig,
    Settings,
    SupabaseConfig,
)


def test_default_settings():
    settings = Settings(_env_file=None)

    assert [section.id for section in settings.sections][:3] == ["primera-plana", "instituciones", "agro"]
    assert [config.provider for config in settings.llm_providers] == [LLMProvider.GEMINI, LLMProvider.GROQ]
    assert settings.airtable.batch_size == 10
    assert settings.extraction.min_text_length == 50
    assert settings.extraction.min_paragraph_length == 20
    assert settings.supabase.enabled is False


def test_get_section(settings):
    assert settings.get_section("agro").table_name == "Agro"
    assert settings.get_section("no-existe") is None
    assert settings.section_name("economia") == "Economía"
    assert settings.section_name("no-existe") == "no-existe"


def test_section_ids_must_be_unique():
    section = SectionConfig(id="agro", name="Agro", table_name="Agro")

    with pytest.raises(ValidationError):
        Settings(_env_file=None, sections=[section, section])


@pytest.mark.parametrize("batch_size", [0, 11])
def test_airtable_batch_size_limit(batch_size):
    with pytest.raises(ValidationError):
        AirtableConfig(batch_size=batch_size)


def test_sink_configuration_flags():
    assert not AirtableConfig().is_configured
    assert AirtableConfig(base_id="app", token="pat").is_configured
    assert not AirtableConfig(enabled=False, base_id="app", token="pat").is_configured
    assert not SupabaseConfig(url="https://x.supabase.co", service_key="k").is_configured
    assert SupabaseConfig(enabled=True, url="https://x.supabase.co", service_key="k").is_configured


def test_retry_policy_validation():
    with pytest.raises(ValidationError):
        RetryPolicy(max_attempts=0)
    with pytest.raises(ValidationError):
        RetryPolicy(call_delay_seconds=-1)


def test_batch_config_validation():
    with pytest.raises(ValidationError):
        BatchConfig(max_concurrent_articles=0)


def test_llm_credentials():
    assert not LLMConfig().has_credentials
    assert LLMConfig(api_key="key").has_credentials


def test_nested_environment_variables(monkeypatch):
    monkeypatch.setenv("AIRTABLE__BASE_ID", "appENV")
    monkeypatch.setenv("AIRTABLE__TOKEN", "pat-env")
    monkeypatch.setenv("BATCH__MAX_CONCURRENT_ARTICLES", "2")

    settings = Settings(_env_file=None)

    assert settings.airtable.base_id == "appENV"
    assert settings.airtable.token.get_secret_value() == "pat-env"
    assert settings.batch.max_concurrent_articles == 2
