"""Base types and protocols for LLM providers."""

from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Protocol


@dataclass
class UsageStats:
    """Token usage reported by a provider for one exchange."""

    prompt_token_count: int = 0
    candidates_token_count: int = 0
    total_token_count: int = 0


@dataclass
class StreamChunk:
    """One item of a streamed response.

    Attributes:
        text: Incremental text fragment, None if this chunk carries no text
        usage: Usage report; providers typically send it on the last chunk only
    """

    text: str | None = None
    usage: UsageStats | None = None


class ChatSessionHandle(Protocol):
    """A provider-side conversational session bound to one system instruction."""

    def send_stream(self, text: str) -> AsyncIterator[StreamChunk]:
        """Send a user message and stream the response.

        Args:
            text: The user message

        Returns:
            Async iterator of StreamChunk in delivery order

        Raises:
            StreamError: If sending or streaming fails
        """
        ...


class LLMProvider(Protocol):
    """Protocol defining the capabilities needed from an LLM provider.

    This protocol allows multiple provider implementations while keeping
    session management independent of any one vendor SDK.
    """

    model: str

    async def count_tokens(self, text: str) -> int:
        """Count the tokens the provider would bill for text.

        Args:
            text: Text to count

        Returns:
            int: Token count
        """
        ...

    async def create_session(
        self, system_instruction: str, temperature: float
    ) -> ChatSessionHandle:
        """Open a conversational session scoped to a system instruction.

        Args:
            system_instruction: Complete instruction configuring the model
            temperature: Sampling temperature

        Returns:
            ChatSessionHandle: The new session

        Raises:
            SessionInitError: If the session cannot be created
        """
        ...
