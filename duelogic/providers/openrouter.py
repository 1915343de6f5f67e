"""OpenRouter judge: any routed model through the OpenAI-compatible API."""

from config.config_loader import ModelConfig
from duelogic.providers.base import JudgeError
from duelogic.providers.openai_provider import OpenAIJudge


class OpenRouterJudge(OpenAIJudge):
    """OpenRouter judge via OpenAI-compatible API. Requires base_url."""

    _label = "OpenRouter"

    def __init__(self, config: ModelConfig) -> None:
        if not config.base_url:
            raise JudgeError(config.name, "base_url is required for OpenRouter judge")
        super().__init__(config)
