"""Prompt template for grounded answers.

The template is a static asset: the asker is a fire safety engineer, the
retrieved context is authoritative, and the model must not invent an
answer that the context does not support.
"""

from __future__ import annotations

from langchain_core.prompts import PromptTemplate

ANSWER_TEMPLATE = """\
The person asking the question is a Fire Safety Engineer. Collect the info needed from the Engineer to answer the following question:
Context: {context}
Question: {question}
If the answer is not in the context, DO NOT MAKE UP AN ANSWER.
However, in this case, if there are any relevant answers you can find, please state these.
You can ask the Engineer for more information and point them in the right direction of particular calculations and the information missing for you to perform them.
"""

ANSWER_PROMPT = PromptTemplate(
    input_variables=["context", "question"],
    template=ANSWER_TEMPLATE,
)


def compose(context: str, question: str) -> str:
    """Fill :data:`ANSWER_PROMPT` with *context* and *question*."""
    return ANSWER_PROMPT.format(context=context, question=question)
