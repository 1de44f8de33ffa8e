"""Prompt templates for routing and grounded answer generation."""

from __future__ import annotations

from langchain_core.prompts import PromptTemplate

ROUTER_SYSTEM_PROMPT = """You are a routing assistant for a document question-answering system.

Decide whether the user's query needs documents from the knowledge base or can be
answered directly from general knowledge.

- Choose "retrieve" when the query refers to specific documents, reports, sections,
  figures, or facts that would only be found in the indexed material.
- Choose "direct" for greetings, general knowledge, or questions that do not depend
  on the indexed material. You may include a short direct answer.

Query: {query}"""

RESPONSE_SYSTEM_PROMPT = """You are an assistant for question-answering tasks.
Use the following pieces of retrieved context to answer the question.
If you don't know the answer, say that you don't know.
Mention the source of each fact you use.
Use three sentences maximum and keep the answer concise.

Question: {question}

Context:
{context}

Answer:"""

ROUTER_PROMPT = PromptTemplate.from_template(ROUTER_SYSTEM_PROMPT)
RESPONSE_PROMPT = PromptTemplate.from_template(RESPONSE_SYSTEM_PROMPT)


__all__ = [
    "RESPONSE_PROMPT",
    "RESPONSE_SYSTEM_PROMPT",
    "ROUTER_PROMPT",
    "ROUTER_SYSTEM_PROMPT",
]
