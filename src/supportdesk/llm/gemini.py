"""Google Gemini provider implementation."""

import logging
import os
from collections.abc import AsyncIterator
from typing import Any

import httpx
from google import genai
from google.genai import errors as genai_errors

from supportdesk.errors import CONNECTION_FAILED_STATUS, SessionInitError, StreamError
from supportdesk.llm.base import StreamChunk, UsageStats

logger = logging.getLogger(__name__)


def _usage_from_metadata(metadata: Any) -> UsageStats | None:
    if not metadata:
        return None
    return UsageStats(
        prompt_token_count=metadata.prompt_token_count or 0,
        candidates_token_count=metadata.candidates_token_count or 0,
        total_token_count=metadata.total_token_count or 0,
    )


class GeminiChatSession:
    """Wraps a google-genai Chat, which keeps the conversation history."""

    def __init__(self, chat: Any) -> None:
        self.chat = chat

    async def send_stream(self, text: str) -> AsyncIterator[StreamChunk]:
        """Send a message and yield text fragments followed by usage.

        Args:
            text: The user message

        Yields:
            StreamChunk: Fragments in delivery order

        Raises:
            StreamError: If the request or the stream fails
        """
        try:
            for response in self.chat.send_message_stream(text):
                yield StreamChunk(
                    text=response.text or None,
                    usage=_usage_from_metadata(response.usage_metadata),
                )
        except genai_errors.APIError as e:
            logger.error(f"❌ Gemini API error: {e}", exc_info=True)
            raise StreamError(e.message or str(e), status=e.status) from e
        except (httpx.TransportError, ConnectionError) as e:
            logger.error(f"❌ Could not reach Gemini: {e}", exc_info=True)
            raise StreamError(str(e), status=CONNECTION_FAILED_STATUS) from e
        except Exception as e:
            logger.error(f"❌ Error streaming from Gemini: {e}", exc_info=True)
            raise StreamError(str(e)) from e


class GeminiProvider:
    """Google Gemini provider.

    The API key is taken from the constructor, then the GEMINI_API_KEY or
    API_KEY environment variables. The client is created on first use so the
    application can start without credentials.
    """

    def __init__(self, model: str, api_key: str | None = None) -> None:
        """Initialize the Gemini provider.

        Args:
            model: The model name to use (e.g., "gemini-3-flash-preview")
            api_key: Optional explicit API key
        """
        self.model = model
        self.api_key = api_key or os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY")
        self._client: genai.Client | None = None
        logger.info(f"🤖 Initializing GeminiProvider: model={model}")

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            if not self.api_key:
                raise SessionInitError(
                    "API_KEY is missing. Please set GEMINI_API_KEY or API_KEY in your .env file."
                )
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def count_tokens(self, text: str) -> int:
        response = self.client.models.count_tokens(model=self.model, contents=text)
        return response.total_tokens or 0

    async def create_session(
        self, system_instruction: str, temperature: float
    ) -> GeminiChatSession:
        """Create a Gemini chat bound to the system instruction.

        Args:
            system_instruction: Complete instruction configuring the model
            temperature: Sampling temperature

        Returns:
            GeminiChatSession: The new session

        Raises:
            SessionInitError: If the API key is missing or the chat cannot be created
        """
        logger.info(f"🗣️  Creating chat session with {self.model}")
        try:
            chat = self.client.chats.create(
                model=self.model,
                config=genai.types.GenerateContentConfig(
                    system_instruction=system_instruction,
                    temperature=temperature,
                ),
            )
        except SessionInitError:
            raise
        except Exception as e:
            logger.error(f"❌ Failed to create Gemini chat: {e}", exc_info=True)
            raise SessionInitError(f"Failed to initialize the AI session: {e}") from e

        return GeminiChatSession(chat)
