import json

import pytest

from rehearse.config import (
    DEFAULT_PERSONAS, Config, FollowUpConfig, build_interview_config, get_config, load_personas,
)
from rehearse.interview import ConfigurationError, InterviewMode, QuestioningStyle

ENV_VARS = (
    "GOOGLE_CLOUD_PROJECT", "REHEARSE_DURATION_MINUTES", "REHEARSE_MODE", "REHEARSE_TTS_PROVIDER",
    "REHEARSE_PERSONAS_FILE", "REHEARSE_FOLLOW_UP_PRESET", "REHEARSE_MODEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults_without_environment():
    config = get_config()
    assert config.google_cloud_project is None
    assert config.duration_minutes == 15
    assert config.mode == "practice"
    assert config.tts_provider == "none"
    assert config.follow_up == FollowUpConfig()


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("GOOGLE_CLOUD_PROJECT", "my-project")
    monkeypatch.setenv("REHEARSE_DURATION_MINUTES", "30")
    monkeypatch.setenv("REHEARSE_MODE", "graded")
    monkeypatch.setenv("REHEARSE_TTS_PROVIDER", "ElevenLabs")
    monkeypatch.setenv("REHEARSE_FOLLOW_UP_PRESET", "probing")
    monkeypatch.setenv("REHEARSE_MODEL", "gemini-test")

    config = get_config()
    assert config.google_cloud_project == "my-project"
    assert config.duration_minutes == 30
    assert config.get_mode() == InterviewMode.GRADED
    assert config.tts_provider == "elevenlabs"
    assert config.follow_up.tough_probability == 0.7
    assert config.model_name == "gemini-test"


def test_bad_duration_in_environment(monkeypatch):
    monkeypatch.setenv("REHEARSE_DURATION_MINUTES", "half an hour")
    with pytest.raises(ConfigurationError):
        get_config()


def test_unknown_mode():
    with pytest.raises(ConfigurationError):
        Config(mode="exam").get_mode()


def test_unknown_preset_is_default():
    assert FollowUpConfig.from_preset("nope") == FollowUpConfig()


def test_build_interview_config_uses_default_panel():
    interview = build_interview_config(Config(duration_minutes=20), scenario_description="Data Engineer")
    assert interview.personas == DEFAULT_PERSONAS
    assert interview.position == "Data Engineer"
    assert interview.mode == InterviewMode.PRACTICE


def test_build_interview_config_rejects_zero_minutes():
    with pytest.raises(ConfigurationError):
        build_interview_config(Config(duration_minutes=0))


def test_load_personas(tmp_path):
    path = tmp_path / "panel.json"
    path.write_text(json.dumps([
        {"id": 1, "name": "Ana", "role": "CTO", "questioning_style": "tough", "focus_areas": ["scale"]},
        {"id": 2, "name": "Ben", "role": "Designer"},
    ]))
    personas = load_personas(str(path))

    assert [p.name for p in personas] == ["Ana", "Ben"]
    assert personas[0].questioning_style == QuestioningStyle.TOUGH
    assert personas[1].questioning_style == QuestioningStyle.NEUTRAL
    assert personas[1].voice_id is None


@pytest.mark.parametrize("content", [
    "[]",
    "{}",
    "not json",
    json.dumps([{"id": 1, "name": "Ana"}]),
    json.dumps([{"id": 1, "name": "Ana", "role": "CTO", "questioning_style": "rude"}]),
])
def test_invalid_persona_files(tmp_path, content):
    path = tmp_path / "panel.json"
    path.write_text(content)
    with pytest.raises(ConfigurationError):
        load_personas(str(path))


def test_missing_persona_file(tmp_path):
    with pytest.raises(ConfigurationError):
        load_personas(str(tmp_path / "missing.json"))
