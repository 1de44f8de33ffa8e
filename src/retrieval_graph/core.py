"""Library entry point for running the retrieval graph."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

from dotenv import load_dotenv
from langchain_core.embeddings import Embeddings
from langchain_core.messages import BaseMessage
from langchain_core.runnables import RunnableConfig

from .configuration import AgentConfiguration, ensure_agent_configuration
from .graph import build_retrieval_graph
from .ingestion import IngestionPipeline, IngestionResult
from .nodes import GraphState

# Load environment variables
load_dotenv()


logger = logging.getLogger(__name__)


class RetrievalAgent:
    """
    Answers queries either directly or from retrieved documents.

    The graph is compiled once per agent and holds no per-query state, so a
    single agent may serve many independent invocations. Each call to
    ``query`` starts from a fresh ``GraphState``.
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        *,
        llm: Optional[Any] = None,
        retriever: Optional[Any] = None,
        embedding: Optional[Embeddings] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize the agent.

        Args:
            config: Optional configuration dictionary. ``configurable`` holds
                default ``AgentConfiguration`` values, ``graph`` holds per-node
                settings, ``ingestion`` holds ingestion settings.
            llm: Chat model shared by every node instead of loading one per run.
            retriever: Retriever used instead of the configured vector store.
            embedding: Embeddings used by ingestion and the default retriever.
            overrides: Node replacements keyed by graph node name.
        """
        self.config = config or {}
        self.embedding = embedding
        self._last_state: Optional[GraphState] = None

        self.configurable: Dict[str, Any] = dict(self.config.get("configurable") or {})
        # Raises ValueError on invalid values.
        ensure_agent_configuration({"configurable": self.configurable})

        graph = build_retrieval_graph(
            retriever=retriever,
            llm=llm,
            embedding=embedding,
            config=self.config.get("graph"),
            overrides=overrides,
        )
        self._graph_app = graph.compile()

    def _run_config(self, configurable: Optional[Dict[str, Any]]) -> RunnableConfig:
        return {
            "configurable": {**self.configurable, **(configurable or {})},
            "run_name": "RetrievalGraph",
        }

    @staticmethod
    def _initial_state(query: str, messages: Optional[Sequence[BaseMessage]]) -> GraphState:
        if not query or not query.strip():
            raise ValueError("query must be a non-empty string.")
        return GraphState(query=query, messages=list(messages or []))

    def _finish(self, result: Any) -> List[BaseMessage]:
        final_state = result if isinstance(result, GraphState) else GraphState(**result)
        self._last_state = final_state
        logger.info(
            "Retrieval graph completed via %s route with %d documents",
            final_state.route,
            len(final_state.documents),
        )
        return final_state.messages

    def query(
        self,
        query: str,
        messages: Optional[Sequence[BaseMessage]] = None,
        configurable: Optional[Dict[str, Any]] = None,
    ) -> List[BaseMessage]:
        """
        Run one query through the graph.

        Args:
            query: The user's question.
            messages: Prior conversation turns to continue from.
            configurable: Per-call overrides of ``AgentConfiguration`` fields.

        Returns:
            The updated message history; the last entry is the model's answer.
        """
        state = self._initial_state(query, messages)
        result = self._graph_app.invoke(state, config=self._run_config(configurable))
        return self._finish(result)

    async def aquery(
        self,
        query: str,
        messages: Optional[Sequence[BaseMessage]] = None,
        configurable: Optional[Dict[str, Any]] = None,
    ) -> List[BaseMessage]:
        """Async counterpart of ``query``."""
        state = self._initial_state(query, messages)
        result = await self._graph_app.ainvoke(state, config=self._run_config(configurable))
        return self._finish(result)

    @property
    def last_state(self) -> Optional[GraphState]:
        """Return the most recent graph state produced by ``query``."""

        return self._last_state

    def _ingestion_pipeline(self) -> IngestionPipeline:
        ingestion_cfg = self.config.get("ingestion", {})
        return IngestionPipeline(
            AgentConfiguration.from_runnable_config({"configurable": self.configurable}),
            knowledge_base_dir=Path(ingestion_cfg.get("knowledge_base_dir", "knowledge_base")),
            chunk_size=int(ingestion_cfg.get("chunk_size", 1000)),
            chunk_overlap=int(ingestion_cfg.get("chunk_overlap", 150)),
            embedding=self.embedding,
        )

    def add_documents(self, documents: Iterable[str]) -> IngestionResult:
        """
        Add documents to the knowledge base.

        Args:
            documents: List of document texts to add
        """
        return self._ingestion_pipeline().ingest_documents(documents)

    def ingest_knowledge_base(self) -> IngestionResult:
        """Ingest all PDFs from the configured knowledge base directory."""

        return self._ingestion_pipeline().ingest_knowledge_base()
