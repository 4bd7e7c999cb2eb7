"""Ollama provider implementation."""

import logging
from collections.abc import AsyncIterator
from typing import Any

import httpx
import ollama

from supportdesk.errors import CONNECTION_FAILED_STATUS, SessionInitError, StreamError
from supportdesk.llm.base import StreamChunk, UsageStats

logger = logging.getLogger(__name__)


class OllamaChatSession:
    """Conversation against a local Ollama model.

    Ollama's chat endpoint is stateless, so the session keeps the message
    history (starting with the system instruction) and resends it each turn.
    """

    def __init__(
        self, client: ollama.Client, model: str, system_instruction: str, temperature: float
    ) -> None:
        self.client = client
        self.model = model
        self.temperature = temperature
        self.messages: list[dict[str, Any]] = [
            {"role": "system", "content": system_instruction}
        ]

    async def send_stream(self, text: str) -> AsyncIterator[StreamChunk]:
        """Send a message and yield text fragments followed by usage.

        Args:
            text: The user message

        Yields:
            StreamChunk: Fragments in delivery order; usage on the final chunk

        Raises:
            StreamError: If the request or the stream fails
        """
        self.messages.append({"role": "user", "content": text})
        reply: list[str] = []

        try:
            stream = self.client.chat(
                model=self.model,
                messages=self.messages,
                stream=True,
                options={"temperature": self.temperature},
            )
            for chunk in stream:
                content = chunk.message.content if chunk.message else ""
                usage = None
                if chunk.done:
                    prompt_tokens = chunk.prompt_eval_count or 0
                    output_tokens = chunk.eval_count or 0
                    usage = UsageStats(
                        prompt_token_count=prompt_tokens,
                        candidates_token_count=output_tokens,
                        total_token_count=prompt_tokens + output_tokens,
                    )
                if content:
                    reply.append(content)
                yield StreamChunk(text=content or None, usage=usage)
        except ollama.ResponseError as e:
            self.messages.pop()
            logger.error(f"❌ Ollama API error: {e}", exc_info=True)
            raise StreamError(e.error, status=str(e.status_code)) from e
        except (httpx.TransportError, ConnectionError) as e:
            self.messages.pop()
            logger.error(f"❌ Could not reach Ollama: {e}", exc_info=True)
            raise StreamError(str(e), status=CONNECTION_FAILED_STATUS) from e
        except Exception as e:
            self.messages.pop()
            logger.error(f"❌ Error streaming from Ollama: {e}", exc_info=True)
            raise StreamError(str(e)) from e

        self.messages.append({"role": "assistant", "content": "".join(reply)})


class OllamaProvider:
    """Ollama provider for local models."""

    def __init__(self, host: str, model: str) -> None:
        """Initialize the Ollama provider.

        Args:
            host: The Ollama server host URL (e.g., "http://localhost:11434")
            model: The model name to use (e.g., "llama3")
        """
        self.host = host
        self.model = model
        logger.info(f"🤖 Initializing OllamaProvider: host={host}, model={model}")
        self.client = ollama.Client(host=host)

    async def count_tokens(self, text: str) -> int:
        # Ollama has no counting endpoint; evaluate the prompt without generating
        response = self.client.generate(model=self.model, prompt=text, options={"num_predict": 0})
        return response.prompt_eval_count or 0

    async def create_session(
        self, system_instruction: str, temperature: float
    ) -> OllamaChatSession:
        """Check the model is available and open a session.

        Raises:
            SessionInitError: If the server is unreachable or the model is missing
        """
        try:
            self.client.show(self.model)
        except Exception as e:
            logger.error(f"❌ Ollama model {self.model} unavailable: {e}", exc_info=True)
            raise SessionInitError(f"Failed to initialize the AI session: {e}") from e

        return OllamaChatSession(self.client, self.model, system_instruction, temperature)
