"""
Generation — grounded answers from retrieved context.

Public API
----------
- :class:`GeneratorBase` — provider-agnostic interface.
- :class:`ChatModelGenerator` — adapter over a LangChain chat model.
- :func:`get_generator` — build the configured adapter.
"""

from company_knowledge.generation.llm import ChatModelGenerator, GeneratorBase, get_generator, get_llm

__all__ = [
    "ChatModelGenerator",
    "GeneratorBase",
    "get_generator",
    "get_llm",
]
