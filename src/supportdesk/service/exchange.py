"""Streaming exchange: one user message and the model's streamed reply.

A turn appends the user message, accumulates streamed fragments into the
session's streaming buffer, then appends the finalized model message and adds
the reported usage to the session counters. Failures never propagate: they
become an error-flagged model message and leave the counters unchanged.
"""

import logging
from collections.abc import AsyncIterator, Callable

from supportdesk.errors import CONNECTION_FAILED_STATUS
from supportdesk.knowledge.models import ChatMessage, Role
from supportdesk.llm.base import UsageStats
from supportdesk.service.session import SessionManager, SessionState

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "An error occurred while communicating with the AI."
CONNECTION_FAILED_MESSAGE = (
    "Connection failed. This could be due to a network issue, an invalid API Key, "
    "or a browser extension blocking the request."
)


def describe_stream_error(error: BaseException) -> str:
    """Translate a streaming failure into a user-facing message.

    Args:
        error: The exception raised while sending or streaming

    Returns:
        Diagnostic text for the chat
    """
    message = str(error)
    status = getattr(error, "status", None)
    if "http status code: 0" in message or status == CONNECTION_FAILED_STATUS:
        return CONNECTION_FAILED_MESSAGE
    if message:
        return f"Error: {message}"
    return GENERIC_ERROR_MESSAGE


def check_turn(manager: SessionManager, user_text: str) -> str | None:
    """Return why a turn would be rejected, or None if it may proceed."""
    if not manager.active:
        return "No active session"
    if not user_text or not user_text.strip():
        return "Message is empty"
    if manager.state.is_loading:
        return "A response is already in progress"
    return None


def _apply_usage(state: SessionState, usage: UsageStats | None) -> None:
    if usage is None:
        return
    state.total_input_tokens += max(usage.prompt_token_count or 0, 0)
    state.total_output_tokens += max(usage.candidates_token_count or 0, 0)


async def stream_turn(manager: SessionManager, user_text: str) -> AsyncIterator[str]:
    """Run one turn, yielding text fragments as they arrive.

    Rejected turns (no session, blank text, or a turn already in flight)
    yield nothing and change nothing.

    Args:
        manager: Session manager holding the active session
        user_text: The user's message

    Yields:
        str: Text fragments in delivery order
    """
    reason = check_turn(manager, user_text)
    if reason is not None:
        logger.warning(f"⚠️ Turn rejected: {reason}")
        return

    text = user_text.strip()
    state = manager.state
    handle = manager.handle

    state.messages.append(ChatMessage(role=Role.USER, text=text))
    state.is_loading = True
    state.streaming_text = ""
    logger.info(f"📨 Sending message: '{text[:100]}'")

    pieces: list[str] = []
    usage: UsageStats | None = None
    try:
        async for chunk in handle.send_stream(text):
            if chunk.text:
                pieces.append(chunk.text)
                state.streaming_text += chunk.text
                yield chunk.text
            if chunk.usage is not None:
                usage = chunk.usage
    except Exception as e:
        logger.error(f"❌ Error sending message: {e}", exc_info=True)
        state.messages.append(
            ChatMessage(role=Role.MODEL, text=describe_stream_error(e), is_error=True)
        )
        return
    finally:
        state.streaming_text = ""
        state.is_loading = False

    state.messages.append(ChatMessage(role=Role.MODEL, text="".join(pieces)))
    _apply_usage(state, usage)
    logger.info(
        f"✅ Response complete: {sum(len(p) for p in pieces)} characters, "
        f"tokens in/out {state.total_input_tokens}/{state.total_output_tokens}"
    )


async def send_turn(
    manager: SessionManager,
    user_text: str,
    on_fragment: Callable[[str], None] | None = None,
) -> ChatMessage | None:
    """Run one turn to completion.

    Args:
        manager: Session manager holding the active session
        user_text: The user's message
        on_fragment: Optional callback invoked with each text fragment

    Returns:
        The final model message (error-flagged on failure), or None if the
        turn was rejected
    """
    if check_turn(manager, user_text) is not None:
        return None

    state = manager.state
    async for fragment in stream_turn(manager, user_text):
        if on_fragment is not None:
            on_fragment(fragment)
    return state.messages[-1]
