import json

import pytest

from config import AppConfig, load_config, resolve_registry, resolve_route
from config.settings import Settings
from interview_flow.agents import AGENT_SCHEMAS, QUESTION_AGENT_KEY, QuestionPlan


def _config(registry=None) -> AppConfig:
    return AppConfig.model_validate(
        {
            "llm_routes": {
                "local": {
                    "name": "local",
                    "base_url": "http://localhost:1234",
                    "endpoint": "/v1/chat/completions",
                    "model": "qwen",
                    "timeout_s": 30,
                }
            },
            "registry": registry if registry is not None else {key: "local" for key in AGENT_SCHEMAS},
        }
    )


def test_settings_defaults():
    settings = Settings(_env_file=None)
    assert settings.DB_PATH.endswith(".db")
    assert settings.MIN_ANSWER_TOKENS == 5
    assert settings.MAX_AUDIO_BYTES == 15 * 1024 * 1024


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("MIN_ANSWER_TOKENS", "3")
    assert Settings(_env_file=None).MIN_ANSWER_TOKENS == 3


def test_interview_defaults_apply():
    cfg = _config()
    assert cfg.interview.default_category == "technical"
    assert cfg.interview.default_total_questions == 10


def test_registry_resolves_every_agent():
    resolved = resolve_registry(_config(), AGENT_SCHEMAS)
    route, schema = resolved[QUESTION_AGENT_KEY]
    assert route.model == "qwen"
    assert schema is QuestionPlan
    assert set(resolved) == set(AGENT_SCHEMAS)


def test_missing_registry_entry_raises():
    with pytest.raises(KeyError):
        resolve_route(_config(registry={}), QUESTION_AGENT_KEY)
    with pytest.raises(KeyError):
        resolve_route(_config(registry={QUESTION_AGENT_KEY: "missing"}), QUESTION_AGENT_KEY)


def test_load_config_from_disk(tmp_path):
    path = tmp_path / "app_config.json"
    path.write_text(json.dumps(_config().model_dump()), encoding="utf-8")
    assert load_config(path).llm_routes["local"].timeout_s == 30
