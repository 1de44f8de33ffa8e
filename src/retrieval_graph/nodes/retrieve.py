"""Retrieve node for the retrieval LangGraph workflow."""

from __future__ import annotations

import logging
from typing import Any, Optional

from langchain_core.embeddings import Embeddings
from langchain_core.runnables import RunnableConfig

from ..retrievers import make_retriever
from ..utils import deduplicate_documents, document_identity
from .base import BaseNode
from .state import GraphState

logger = logging.getLogger(__name__)


class RetrieveNode(BaseNode):
    """Fetches documents for the query and drops duplicate (source, page) passages."""

    name = "retrieve_documents"

    def __init__(
        self,
        retriever: Optional[Any] = None,
        *,
        embedding: Optional[Embeddings] = None,
        config: Optional[dict] = None,
    ) -> None:
        super().__init__(config=config)
        self.retriever = retriever
        self.embedding = embedding

    def run(self, state: GraphState, config: Optional[RunnableConfig] = None) -> GraphState:  # type: ignore[override]
        query = self.require_query(state)
        retriever = self.retriever or make_retriever(
            self.configuration(config), embedding=self.embedding
        )

        raw_documents = list(retriever.invoke(query))

        state.documents = deduplicate_documents(raw_documents)
        state.record(
            "retrieval",
            {
                "query": query,
                "retrieved": len(raw_documents),
                "retrieved_sources": [document_identity(doc) for doc in raw_documents],
                "kept_documents": len(state.documents),
                "dropped_duplicates": len(raw_documents) - len(state.documents),
            },
        )

        logger.info(
            "Retrieved %d documents (%d after deduplication)",
            len(raw_documents),
            len(state.documents),
        )
        return state


__all__ = ["RetrieveNode"]
