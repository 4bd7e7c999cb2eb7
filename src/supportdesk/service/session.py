"""Session lifecycle: start, reset and token accounting for one conversation."""

import logging
from dataclasses import dataclass, field
from typing import Any

from supportdesk.constants import DEFAULT_TEMPERATURE
from supportdesk.errors import SessionInitError
from supportdesk.knowledge.assembler import assemble
from supportdesk.knowledge.models import ChatMessage, Document, Role
from supportdesk.llm.base import ChatSessionHandle, LLMProvider

logger = logging.getLogger(__name__)

GREETING_TEMPLATE = (
    "Hello! I've analyzed your {count} document(s). I'm ready to answer questions "
    "specifically about this knowledge base. How can I help you?"
)


@dataclass
class SessionState:
    """Observable state of the current conversation.

    Attributes:
        active: Whether a session is open
        system_instruction: Instruction the session was created with
        total_input_tokens: Cumulative prompt tokens, seeded with the instruction estimate
        total_output_tokens: Cumulative completion tokens
        messages: Finalized chat messages, append-only
        streaming_text: In-progress model text for the current turn
        is_loading: Busy flag; set while a start or a turn is outstanding
    """

    active: bool = False
    system_instruction: str = ""
    total_input_tokens: int = 0
    total_output_tokens: int = 0
    messages: list[ChatMessage] = field(default_factory=list)
    streaming_text: str = ""
    is_loading: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "active": self.active,
            "is_loading": self.is_loading,
            "streaming_text": self.streaming_text,
            "total_input_tokens": self.total_input_tokens,
            "total_output_tokens": self.total_output_tokens,
            "messages": [msg.to_dict() for msg in self.messages],
        }


class SessionManager:
    """Owns the single active session and its token counters."""

    def __init__(
        self,
        provider: LLMProvider,
        temperature: float = DEFAULT_TEMPERATURE,
        support_contact: str | None = None,
    ) -> None:
        """Initialize the manager.

        Args:
            provider: LLM provider used to count tokens and open sessions
            temperature: Sampling temperature for new sessions
            support_contact: Contact quoted in the fallback reply
        """
        self.provider = provider
        self.temperature = temperature
        self.support_contact = support_contact
        self.handle: ChatSessionHandle | None = None
        self.state = SessionState()

    @property
    def active(self) -> bool:
        return self.state.active and self.handle is not None

    async def _estimate_tokens(self, text: str) -> int:
        try:
            return await self.provider.count_tokens(text)
        except Exception as e:
            logger.warning(f"⚠️ Failed to count tokens, assuming 0: {e}")
            return 0

    async def start(self, documents: list[Document]) -> bool:
        """Open a new session grounded in the given documents.

        Does nothing when documents is empty or a session is already active
        or starting.

        Args:
            documents: Knowledge-base documents in assembly order

        Returns:
            True if a session was started, False if the call was ignored

        Raises:
            SessionInitError: If the provider could not open the session;
                no session is left active
        """
        if not documents:
            logger.warning("⚠️ Cannot start a session without documents")
            return False
        if self.state.active or self.state.is_loading:
            logger.warning("⚠️ Session already active, ignoring start")
            return False

        logger.info(f"🚀 Starting session with {len(documents)} document(s)")
        self.state.is_loading = True
        try:
            instruction = assemble(documents, self.support_contact)
            initial_tokens = await self._estimate_tokens(instruction)
            handle = await self.provider.create_session(instruction, self.temperature)
        except SessionInitError:
            self.state.is_loading = False
            raise
        except Exception as e:
            self.state.is_loading = False
            logger.error(f"❌ Failed to start session: {e}", exc_info=True)
            raise SessionInitError(str(e) or "Failed to initialize the AI session.") from e

        self.handle = handle
        self.state = SessionState(
            active=True,
            system_instruction=instruction,
            total_input_tokens=initial_tokens,
            total_output_tokens=0,
            messages=[
                ChatMessage(
                    id="init",
                    role=Role.MODEL,
                    text=GREETING_TEMPLATE.format(count=len(documents)),
                )
            ],
        )
        logger.info(f"✅ Session started (initial context: {initial_tokens} tokens)")
        return True

    def reset(self) -> None:
        """Close the session and clear messages and counters.

        Documents held by the caller are not touched.
        """
        self.handle = None
        self.state = SessionState()
        logger.info("🔄 Session reset")
