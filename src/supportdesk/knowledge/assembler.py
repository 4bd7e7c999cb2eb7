"""Knowledge-base context assembly and system instruction template."""

from supportdesk.constants import get_support_contact
from supportdesk.knowledge.models import Document

SYSTEM_INSTRUCTION_TEMPLATE = """
You are an expert technical support agent for a specific SDK/Product.
You have been provided with the following "Knowledge Base" consisting of documentation and historical Q&A.

--- START KNOWLEDGE BASE ---
{context}
--- END KNOWLEDGE BASE ---

INSTRUCTIONS:
1. Your primary goal is to answer user questions accurately based ONLY on the provided Knowledge Base.
2. If the user's question can be answered by the Knowledge Base, provide a clear, technical, and helpful response. Use code snippets if relevant.
3. If the user's question is NOT found in the Knowledge Base and is not a general greeting (like "hi", "hello"), you MUST strictly reply with a variation of: "{fallback}"
4. Do not hallucinate features or APIs that are not in the provided text.
5. Maintain a professional, empathetic, and polite tone.
"""


def fallback_reply(contact: str) -> str:
    """The apology returned for questions outside the knowledge base."""
    return (
        "I'm sorry, but this specific issue isn't covered in my current documentation. "
        f"Please contact our support team at {contact} for further assistance."
    )


def format_document(document: Document) -> str:
    """Format one document as a delimited context block."""
    return f"--- Document: {document.name} ---\n{document.content}\n"


def build_context(documents: list[Document]) -> str:
    """Concatenate documents, in order, into a single context string.

    Args:
        documents: Ordered knowledge-base documents

    Returns:
        Delimited context with a blank line between documents
    """
    return "\n".join(format_document(doc) for doc in documents)


def build_system_instruction(context: str, support_contact: str | None = None) -> str:
    """Wrap a context string in the support-agent instruction template.

    Args:
        context: Assembled knowledge-base context, embedded verbatim
        support_contact: Contact quoted in the fallback reply
            (defaults to SUPPORT_CONTACT env or support@example.com)

    Returns:
        The complete system instruction
    """
    contact = support_contact or get_support_contact()
    return SYSTEM_INSTRUCTION_TEMPLATE.format(
        context=context, fallback=fallback_reply(contact)
    ).strip()


def assemble(documents: list[Document], support_contact: str | None = None) -> str:
    """Build the system instruction for a document list."""
    return build_system_instruction(build_context(documents), support_contact)
