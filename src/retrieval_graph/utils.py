"""Helpers shared by the retrieval graph nodes."""

from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

from langchain_core.documents import Document
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage

UNKNOWN_SOURCE = "unknown-source"
UNKNOWN_PAGE = "unknown-page"
NO_CONTEXT_PLACEHOLDER = "(No supporting context provided.)"


def normalize_messages(messages: Iterable[BaseMessage]) -> List[BaseMessage]:
    """
    Rebuild each turn as a plain human or AI message.

    The ``name`` entry is dropped from ``additional_kwargs``; any turn that is
    not an AI turn becomes a human turn.
    """

    normalized: List[BaseMessage] = []
    for message in messages:
        additional_kwargs = dict(message.additional_kwargs or {})
        additional_kwargs.pop("name", None)

        if isinstance(message, AIMessage):
            normalized.append(
                AIMessage(content=message.content, additional_kwargs=additional_kwargs)
            )
        else:
            normalized.append(
                HumanMessage(content=message.content, additional_kwargs=additional_kwargs)
            )

    return normalized


def document_identity(doc: Document) -> Tuple[str, str]:
    """Return the ``(source, page)`` pair used to detect duplicate passages."""

    metadata = doc.metadata or {}
    source = metadata.get("source") or metadata.get("filename") or UNKNOWN_SOURCE

    page = None
    loc = metadata.get("loc")
    if isinstance(loc, dict):
        page = loc.get("pageNumber")
    if page is None:
        page = metadata.get("page")
    if page is None:
        page = UNKNOWN_PAGE

    return str(source), str(page)


def deduplicate_documents(documents: Iterable[Document]) -> List[Document]:
    """Keep the first document per identity, preserving retriever order."""

    seen: set[Tuple[str, str]] = set()
    unique: List[Document] = []
    for doc in documents:
        key = document_identity(doc)
        if key in seen:
            continue
        seen.add(key)
        unique.append(doc)
    return unique


def format_doc(doc: Document) -> str:
    source, page = document_identity(doc)
    return f"{doc.page_content.strip()}\n[SOURCE: {source}, page {page}]"


def format_docs(documents: Sequence[Document], separator: str = "\n\n") -> str:
    """Render documents into the context block inserted into the response prompt."""

    if not documents:
        return NO_CONTEXT_PLACEHOLDER
    return separator.join(format_doc(doc) for doc in documents)


__all__ = [
    "NO_CONTEXT_PLACEHOLDER",
    "UNKNOWN_PAGE",
    "UNKNOWN_SOURCE",
    "deduplicate_documents",
    "document_identity",
    "format_doc",
    "format_docs",
    "normalize_messages",
]
