"""
Answering — prompt composition, answer generation, and the query pipeline.

Public API
----------
- :class:`QueryPipeline` — question in, grounded :class:`Answer` out.
- :func:`compose` — fill the fixed prompt template.
- :class:`AnswerGenerator` — one call to the completion model.
"""

from firesafety_rag.answering.generator import AnswerGenerator
from firesafety_rag.answering.pipeline import QueryPipeline
from firesafety_rag.answering.prompts import compose

__all__ = [
    "AnswerGenerator",
    "QueryPipeline",
    "compose",
]
