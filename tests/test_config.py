"""Tests for config/config_loader.py."""

from pathlib import Path

import pytest
import yaml

from config.config_loader import (
    AppConfig,
    ConfigError,
    DuelogicConfig,
    FrameworkInfo,
    ModelConfig,
    load_config,
    validate_duelogic_config,
)
from duelogic.models import FRAMEWORKS, Chair


def _settings(**duelogic_overrides) -> dict:
    duelogic = {
        "topic": "Is it wrong to eat meat?",
        "chairs": [
            {"position": "chair_1", "framework": "utilitarian", "model_id": "anthropic/claude-3-haiku"},
            {"position": "chair_2", "framework": "care_ethics", "model_id": "openai/gpt-4o-mini"},
        ],
        "arbiter": {"judge": "claude", "accountability_level": "strict"},
        "interruptions": {"aggressiveness": 4, "cooldown_seconds": 30},
    }
    duelogic.update(duelogic_overrides)
    return {
        "defaults": {"judge": "claude", "batch_concurrency": 2},
        "models": {
            "claude": {
                "sdk": "anthropic",
                "model": "claude-3-5-haiku-latest",
                "api_key_env": "TEST_CLAUDE_KEY",
                "timeout_sec": 60,
                "max_tokens": 600,
            },
            "openrouter": {
                "sdk": "openrouter",
                "model": "anthropic/claude-3-haiku",
                "api_key_env": "TEST_OPENROUTER_KEY",
                "timeout_sec": 60,
                "max_tokens": 600,
                "base_url": "https://openrouter.ai/api/v1",
            },
        },
        "duelogic": duelogic,
        "frameworks": {
            "utilitarian": {
                "name": "Utilitarian Chair",
                "description": "Consequences.",
                "core_question": "What produces the greatest good?",
                "blind_spots": ["Minorities"],
            }
        },
    }


def _write(tmp_path: Path, settings: dict) -> Path:
    path = tmp_path / "settings.yaml"
    path.write_text(yaml.dump(settings), encoding="utf-8")
    return path


@pytest.fixture
def minimal_settings(tmp_path: Path) -> Path:
    """Write a minimal valid settings.yaml to a temp path."""
    return _write(tmp_path, _settings())


def test_load_config_returns_app_config(minimal_settings):
    config = load_config(minimal_settings)
    assert isinstance(config, AppConfig)
    assert config.defaults.batch_concurrency == 2


def test_load_config_duelogic_section(minimal_settings):
    config = load_config(minimal_settings)
    assert isinstance(config.duelogic, DuelogicConfig)
    assert [c.position for c in config.duelogic.chairs] == ["chair_1", "chair_2"]
    assert config.duelogic.chairs[1].framework == "care_ethics"
    assert config.duelogic.arbiter.accountability_level == "strict"
    assert config.duelogic.interruptions.aggressiveness == 4
    assert config.duelogic.interruptions.cooldown_seconds == 30
    assert config.duelogic.interruptions.allow_chair_interruptions is True
    assert config.duelogic.mandates.require_steel_manning is True
    assert config.duelogic.topic == "Is it wrong to eat meat?"


def test_load_config_frameworks(minimal_settings):
    config = load_config(minimal_settings)
    info = config.frameworks["utilitarian"]
    assert isinstance(info, FrameworkInfo)
    assert info.blind_spots == ["Minorities"]


def test_load_config_models(minimal_settings):
    config = load_config(minimal_settings)
    assert isinstance(config.models["claude"], ModelConfig)
    assert config.models["claude"].base_url is None
    assert config.models["openrouter"].base_url == "https://openrouter.ai/api/v1"


def test_load_config_available_providers_with_key(minimal_settings, monkeypatch):
    monkeypatch.setenv("TEST_CLAUDE_KEY", "sk-test-key")
    monkeypatch.delenv("TEST_OPENROUTER_KEY", raising=False)
    config = load_config(minimal_settings)
    assert config.available_providers == {"claude"}


def test_load_config_no_available_providers_without_key(minimal_settings, monkeypatch):
    monkeypatch.delenv("TEST_CLAUDE_KEY", raising=False)
    monkeypatch.delenv("TEST_OPENROUTER_KEY", raising=False)
    config = load_config(minimal_settings)
    assert config.available_providers == set()


def test_load_config_missing_file():
    with pytest.raises(FileNotFoundError):
        load_config(Path("/nonexistent/settings.yaml"))


def test_arbiter_judge_defaults_to_default_judge(tmp_path):
    path = _write(tmp_path, _settings(arbiter={"accountability_level": "moderate"}))
    config = load_config(path)
    assert config.duelogic.arbiter.judge == "claude"


def test_chair_position_defaults_to_index(tmp_path):
    chairs = [
        {"framework": "utilitarian", "model_id": "a"},
        {"framework": "deontological", "model_id": "b"},
    ]
    config = load_config(_write(tmp_path, _settings(chairs=chairs)))
    assert [c.position for c in config.duelogic.chairs] == ["chair_1", "chair_2"]


def test_invalid_debate_raises_config_error(tmp_path):
    chairs = [{"position": "chair_1", "framework": "nihilism", "model_id": "a"}]
    path = _write(tmp_path, _settings(chairs=chairs))

    with pytest.raises(ConfigError) as exc_info:
        load_config(path)

    message = str(exc_info.value)
    assert "Minimum 2 chairs" in message
    assert "Invalid framework: nihilism" in message


def test_config_error_is_value_error():
    assert issubclass(ConfigError, ValueError)


def test_bundled_settings_load():
    """The shipped settings.yaml is valid and covers every framework."""
    config = load_config()
    assert set(config.frameworks) == set(FRAMEWORKS)
    assert all(info.blind_spots for info in config.frameworks.values())


# --- validate_duelogic_config() ---

def _config(chairs: list[Chair], **interruptions) -> DuelogicConfig:
    config = load_config().duelogic
    config.chairs = chairs
    for key, value in interruptions.items():
        setattr(config.interruptions, key, value)
    return config


def _chairs(count: int) -> list[Chair]:
    return [Chair(position=f"chair_{i}", framework=FRAMEWORKS[i - 1], model_id="m") for i in range(1, count + 1)]


def test_validate_accepts_valid_config():
    assert validate_duelogic_config(_config(_chairs(3))) == []


def test_validate_chair_count_bounds():
    assert "Maximum 6 chairs allowed" in validate_duelogic_config(_config(_chairs(7)))
    assert "Minimum 2 chairs required" in validate_duelogic_config(_config(_chairs(1)))


def test_validate_missing_model_and_duplicate_position():
    chairs = [
        Chair(position="chair_1", framework="utilitarian", model_id=""),
        Chair(position="chair_1", framework="pragmatic", model_id="m"),
    ]
    errors = validate_duelogic_config(_config(chairs))
    assert "Chair chair_1 missing model_id" in errors
    assert "Duplicate chair position: chair_1" in errors


def test_validate_interruption_settings():
    errors = validate_duelogic_config(_config(_chairs(2), aggressiveness=0, cooldown_seconds=-5))
    assert "Aggressiveness must be 1-5" in errors
    assert "cooldown_seconds must not be negative" in errors


def test_validate_accountability_level():
    config = _config(_chairs(2))
    config.arbiter.accountability_level = "lenient"
    assert "Invalid accountability level: lenient" in validate_duelogic_config(config)
