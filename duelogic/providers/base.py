"""Abstract base for the judge models both adjudicators consult."""

from abc import ABC, abstractmethod

ChatMessage = dict[str, str]  # {"role": "system" | "user", "content": ...}


class JudgeError(Exception):
    """Raised when a judge call fails (network, API, timeout, empty reply)."""

    def __init__(self, provider_name: str, message: str) -> None:
        self.provider_name = provider_name
        super().__init__(f"[{provider_name}] {message}")


class JudgeClient(ABC):
    """A chat-completion model that returns raw text.

    The client knows nothing about evaluation or interrupt shapes; callers
    embed their JSON expectations in the prompt and parse the reply.
    """

    @abstractmethod
    def name(self) -> str:
        """Return the short judge name (e.g. 'claude', 'openrouter')."""
        ...

    @abstractmethod
    def model_string(self) -> str:
        """Return the actual model identifier string."""
        ...

    @abstractmethod
    async def chat(
        self,
        messages: list[ChatMessage],
        *,
        temperature: float = 0.3,
        max_tokens: int | None = None,
    ) -> str:
        """Send role-tagged messages and return the completion text.

        Args:
            messages: Ordered system/user messages.
            temperature: Sampling temperature.
            max_tokens: Completion cap; None uses the configured default.

        Returns:
            The model's raw text completion.

        Raises:
            JudgeError: On API failure, timeout, or empty response.
        """
        ...


def split_system(messages: list[ChatMessage]) -> tuple[str, list[ChatMessage]]:
    """Separate system messages from the conversation, for SDKs that take them apart."""
    system = "\n\n".join(m["content"] for m in messages if m["role"] == "system")
    rest = [m for m in messages if m["role"] != "system"]
    return system, rest
