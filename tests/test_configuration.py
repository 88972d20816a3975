from pathlib import Path
from types import SimpleNamespace

import pytest
from localeflow import configuration
from localeflow.errors import TranslationProviderConfigurationError
from prepper import IoError
from prepper.provenance import ProvenanceRecorder


def make_settings(**overrides):
    values = {
        "LOCALEFLOW_BASE_LOCALE": "en",
        "LOCALEFLOW_LOCALES": "fr, de, en, pt-BR",
        "TRANSLATION_PROVIDER": "bedrock",
        "TRANSLATION_BATCH_SIZE": 50,
        "TRANSLATION_MODEL": None,
        "TRANSLATION_SYSTEM_PROMPT": None,
        "TRANSLATION_MAX_TOKENS": 1024,
        "TRANSLATION_TIMEOUT": None,
        "AWS_REGION": None,
        "AWS_PROFILE": None,
        "OPENAI_API_KEY": None,
        "LOCALEFLOW_PROVIDER_DEBUG": False,
    }
    values.update(overrides)
    return SimpleNamespace(**values)


def test_configured_locales_puts_base_first_without_duplicates():
    assert configuration.configured_locales(make_settings()) == ["en", "fr", "de", "pt-BR"]


def test_configured_locales_with_no_list_is_base_only():
    settings = make_settings(LOCALEFLOW_LOCALES=None)
    assert configuration.configured_locales(settings) == ["en"]


def test_provider_options_for_bedrock():
    settings = make_settings(
        AWS_REGION="us-east-1",
        AWS_PROFILE="translate",
        TRANSLATION_MODEL="anthropic.claude-v2",
        TRANSLATION_SYSTEM_PROMPT="From %{from} to %{to}",
        TRANSLATION_MAX_TOKENS=4096,
        TRANSLATION_TIMEOUT=30.0,
    )

    options = configuration.provider_options(settings)

    assert options.client_options == {"region_name": "us-east-1", "profile_name": "translate"}
    assert options.model_id == "anthropic.claude-v2"
    assert options.system_prompt == "From %{from} to %{to}"
    assert options.max_tokens == 4096
    assert options.timeout == 30.0


def test_provider_options_for_openai_override():
    settings = make_settings(OPENAI_API_KEY="sk-test", AWS_REGION="us-east-1")

    options = configuration.provider_options(settings, "OpenAI")

    assert options.client_options == {"api_key": "sk-test"}


def test_provider_options_for_synonym():
    settings = make_settings(AWS_REGION="eu-west-1")
    options = configuration.provider_options(settings, "aws")
    assert options.client_options == {"region_name": "eu-west-1"}


def test_provider_options_blank_overrides_become_none():
    options = configuration.provider_options(
        make_settings(TRANSLATION_MODEL="", TRANSLATION_SYSTEM_PROMPT="")
    )
    assert options.model_id is None
    assert options.system_prompt is None


def test_validate_settings_accepts_defaults():
    configuration._validate_settings(make_settings())


def test_validate_settings_collects_all_problems():
    settings = make_settings(
        LOCALEFLOW_BASE_LOCALE="e n",
        LOCALEFLOW_LOCALES="fr,xx!",
        TRANSLATION_BATCH_SIZE=0,
        TRANSLATION_PROVIDER="openai",
    )

    with pytest.raises(TranslationProviderConfigurationError) as excinfo:
        configuration._validate_settings(settings)

    message = str(excinfo.value)
    assert "LOCALEFLOW_BASE_LOCALE: Invalid locale: e n" in message
    assert "LOCALEFLOW_LOCALES: Invalid locale: xx!" in message
    assert "TRANSLATION_BATCH_SIZE" in message
    assert "OPENAI_API_KEY is required" in message


def test_validation_issue_is_listed_under_header():
    issue = configuration._describe_issue(
        {"path": ["TRANSLATION_BATCH_SIZE"], "message": "not an int", "source": "env"}
    )
    error = configuration._config_error([issue])

    assert str(error).splitlines() == [
        configuration.CONFIG_ERROR_HEADER,
        "- TRANSLATION_BATCH_SIZE: not an int (source: env)",
    ]


def test_describe_issue_without_path_or_message():
    assert configuration._describe_issue({}) == "Invalid value"


def test_file_layer_joins_locale_list():
    layer = configuration._file_layer(
        Path("localeflow.yaml"),
        {"LOCALEFLOW_LOCALES": ["fr", "pt-BR"], "TRANSLATION_PROVIDER": "echo"},
    )
    assert layer == {"LOCALEFLOW_LOCALES": "fr,pt-BR", "TRANSLATION_PROVIDER": "echo"}


def test_file_layer_rejects_non_mapping_root():
    with pytest.raises(IoError, match="expected a mapping"):
        configuration._file_layer(Path("localeflow.yaml"), ["fr"])


def test_merge_environment_prefers_process_over_dotenv(tmp_path, monkeypatch):
    (tmp_path / ".env").write_text(
        "LOCALEFLOW_LOCALES=fr,de\nTRANSLATION_PROVIDER=echo\nUNRELATED=1\n",
        encoding="utf-8",
    )
    monkeypatch.delenv("LOCALEFLOW_LOCALES", raising=False)
    monkeypatch.delenv("TRANSLATION_BATCH_SIZE", raising=False)
    monkeypatch.setenv("TRANSLATION_PROVIDER", "openai")
    target = {"TRANSLATION_BATCH_SIZE": 10}

    configuration._merge_environment(
        target, provenance=ProvenanceRecorder(), app_dir=tmp_path
    )

    assert target["LOCALEFLOW_LOCALES"] == "fr,de"
    assert target["TRANSLATION_PROVIDER"] == "openai"
    assert target["TRANSLATION_BATCH_SIZE"] == 10
    assert "UNRELATED" not in target
