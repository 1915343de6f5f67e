"""Load settings.yaml into typed dataclasses. Validates the debate section at startup."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from duelogic.models import ACCOUNTABILITY_LEVELS, FRAMEWORKS, Chair

logger = logging.getLogger(__name__)

_SETTINGS_PATH = Path(__file__).parent / "settings.yaml"

MIN_CHAIRS = 2
MAX_CHAIRS = 6


class ConfigError(ValueError):
    """Raised when settings.yaml is present but describes an invalid debate."""


@dataclass
class ModelConfig:
    name: str
    sdk: str
    model: str
    api_key_env: str
    timeout_sec: int
    max_tokens: int
    base_url: str | None = None


@dataclass
class FrameworkInfo:
    name: str
    description: str
    core_question: str
    blind_spots: list[str] = field(default_factory=list)


@dataclass
class ArbiterConfig:
    judge: str
    accountability_level: str = "moderate"


@dataclass
class InterruptionConfig:
    enabled: bool = True
    allow_chair_interruptions: bool = True
    allow_arbiter_interruptions: bool = True
    aggressiveness: int = 3              # 1=polite, 5=aggressive
    cooldown_seconds: float = 60


@dataclass
class MandatesConfig:
    require_steel_manning: bool = True
    require_self_critique: bool = True
    arbiter_can_interject: bool = True


@dataclass
class DuelogicConfig:
    chairs: list[Chair]
    arbiter: ArbiterConfig
    interruptions: InterruptionConfig = field(default_factory=InterruptionConfig)
    mandates: MandatesConfig = field(default_factory=MandatesConfig)
    topic: str = ""


@dataclass
class DefaultsConfig:
    judge: str
    batch_concurrency: int = 3


@dataclass
class AppConfig:
    defaults: DefaultsConfig
    models: dict[str, ModelConfig]
    duelogic: DuelogicConfig
    frameworks: dict[str, FrameworkInfo] = field(default_factory=dict)
    available_providers: set[str] = field(default_factory=set)


def validate_duelogic_config(config: DuelogicConfig) -> list[str]:
    """Return a list of human-readable problems. Empty list means valid."""
    errors: list[str] = []

    if len(config.chairs) < MIN_CHAIRS:
        errors.append(f"Minimum {MIN_CHAIRS} chairs required")
    if len(config.chairs) > MAX_CHAIRS:
        errors.append(f"Maximum {MAX_CHAIRS} chairs allowed")

    seen: set[str] = set()
    for chair in config.chairs:
        if chair.framework not in FRAMEWORKS:
            errors.append(f"Invalid framework: {chair.framework}")
        if not chair.model_id:
            errors.append(f"Chair {chair.position} missing model_id")
        if chair.position in seen:
            errors.append(f"Duplicate chair position: {chair.position}")
        seen.add(chair.position)

    if config.arbiter.accountability_level not in ACCOUNTABILITY_LEVELS:
        errors.append(f"Invalid accountability level: {config.arbiter.accountability_level}")

    if config.interruptions.aggressiveness not in (1, 2, 3, 4, 5):
        errors.append("Aggressiveness must be 1-5")
    if config.interruptions.cooldown_seconds < 0:
        errors.append("cooldown_seconds must not be negative")

    return errors


def _load_chairs(raw: list[dict]) -> list[Chair]:
    chairs: list[Chair] = []
    for index, chair_raw in enumerate(raw, start=1):
        chairs.append(
            Chair(
                position=str(chair_raw.get("position", f"chair_{index}")),
                framework=str(chair_raw["framework"]),
                model_id=str(chair_raw.get("model_id", "")),
                model_display_name=chair_raw.get("display_name"),
            )
        )
    return chairs


def load_duelogic_config(raw: dict) -> DuelogicConfig:
    """Build a DuelogicConfig from the ``duelogic`` section of settings.yaml."""
    arbiter_raw = raw.get("arbiter", {})
    interruptions_raw = raw.get("interruptions", {})
    mandates_raw = raw.get("mandates", {})

    return DuelogicConfig(
        chairs=_load_chairs(raw.get("chairs", [])),
        arbiter=ArbiterConfig(
            judge=str(arbiter_raw.get("judge", "")),
            accountability_level=str(arbiter_raw.get("accountability_level", "moderate")),
        ),
        interruptions=InterruptionConfig(
            enabled=bool(interruptions_raw.get("enabled", True)),
            allow_chair_interruptions=bool(interruptions_raw.get("allow_chair_interruptions", True)),
            allow_arbiter_interruptions=bool(interruptions_raw.get("allow_arbiter_interruptions", True)),
            aggressiveness=int(interruptions_raw.get("aggressiveness", 3)),
            cooldown_seconds=float(interruptions_raw.get("cooldown_seconds", 60)),
        ),
        mandates=MandatesConfig(
            require_steel_manning=bool(mandates_raw.get("require_steel_manning", True)),
            require_self_critique=bool(mandates_raw.get("require_self_critique", True)),
            arbiter_can_interject=bool(mandates_raw.get("arbiter_can_interject", True)),
        ),
        topic=str(raw.get("topic", "")),
    )


def load_config(settings_path: Path = _SETTINGS_PATH) -> AppConfig:
    """Load and validate configuration from settings.yaml.

    Raises FileNotFoundError if settings file missing, ConfigError if the
    duelogic section is invalid. Logs missing API keys but does not raise;
    callers check available_providers.
    """
    if not settings_path.exists():
        raise FileNotFoundError(f"Settings file not found: {settings_path}")

    with settings_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    defaults_raw = raw["defaults"]
    defaults = DefaultsConfig(
        judge=str(defaults_raw["judge"]),
        batch_concurrency=int(defaults_raw.get("batch_concurrency", 3)),
    )

    frameworks = {
        key: FrameworkInfo(
            name=str(info["name"]),
            description=str(info.get("description", "")),
            core_question=str(info.get("core_question", "")),
            blind_spots=[str(b) for b in info.get("blind_spots", [])],
        )
        for key, info in raw.get("frameworks", {}).items()
    }

    duelogic = load_duelogic_config(raw["duelogic"])
    if not duelogic.arbiter.judge:
        duelogic.arbiter.judge = defaults.judge
    errors = validate_duelogic_config(duelogic)
    if errors:
        raise ConfigError("; ".join(errors))

    models: dict[str, ModelConfig] = {}
    available_providers: set[str] = set()

    for provider_name, model_raw in raw["models"].items():
        model_cfg = ModelConfig(
            name=provider_name,
            sdk=model_raw["sdk"],
            model=model_raw["model"],
            api_key_env=model_raw["api_key_env"],
            timeout_sec=int(model_raw["timeout_sec"]),
            max_tokens=int(model_raw["max_tokens"]),
            base_url=model_raw.get("base_url"),
        )
        models[provider_name] = model_cfg

        api_key = os.environ.get(model_raw["api_key_env"], "").strip()
        if api_key:
            available_providers.add(provider_name)
            logger.info("Judge available: %s", provider_name)
        else:
            logger.info(
                "Judge skipped (no API key): %s, set %s in .env",
                provider_name,
                model_raw["api_key_env"],
            )

    return AppConfig(
        defaults=defaults,
        models=models,
        duelogic=duelogic,
        frameworks=frameworks,
        available_providers=available_providers,
    )
