"""
Prompt assembly for grounded answers.

Dependencies: backend.models.query
System role: Message layout sent to the generation model
"""

from backend.models.query import ChatMessage

DEFAULT_QUESTION = "What is the square root of 9?"

SYSTEM_INSTRUCTION = (
    "When answering the question or responding, use the context provided, "
    "if it is provided and relevant."
)


def format_context(notes: list[str]) -> str:
    """Render note texts as a bulleted context block."""
    return "Context:\n" + "\n".join(f"- {note}" for note in notes)


def build_messages(question: str, notes: list[str]) -> list[ChatMessage]:
    """
    Assemble the generation request.

    The context message is present only when at least one note was retrieved.

    Args:
        question: User question
        notes: Retrieved note texts, most relevant first

    Returns:
        [context system message?] + instruction system message + user question
    """
    messages: list[ChatMessage] = []
    if notes:
        messages.append(ChatMessage(role="system", content=format_context(notes)))
    messages.append(ChatMessage(role="system", content=SYSTEM_INSTRUCTION))
    messages.append(ChatMessage(role="user", content=question))
    return messages
