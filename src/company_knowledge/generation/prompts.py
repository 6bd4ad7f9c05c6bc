"""Prompt templates for grounded answering.

The grounding rule lives in both the system and the user message so that
no request can reach the model without it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from langchain_core.messages import HumanMessage, SystemMessage

if TYPE_CHECKING:
    from langchain_core.messages import BaseMessage

INSUFFICIENT_CONTEXT_REPLY = "Not enough data."

GROUNDED_SYSTEM = (
    "You are a helpful assistant that answers using only the provided CONTEXT. "
    "If the answer is not in the context, say you don't have enough data."
)

GROUNDED_USER_TEMPLATE = """\
CONTEXT:
{context}

QUESTION: {question}

INSTRUCTIONS: Answer using only the CONTEXT above. If context is insufficient, say '{fallback}'"""


def build_grounded_prompt(context: str, question: str) -> list[BaseMessage]:
    """Build the chat messages for a grounded answer over *context*."""
    return [
        SystemMessage(content=GROUNDED_SYSTEM),
        HumanMessage(
            content=GROUNDED_USER_TEMPLATE.format(
                context=context,
                question=question,
                fallback=INSUFFICIENT_CONTEXT_REPLY,
            )
        ),
    ]
