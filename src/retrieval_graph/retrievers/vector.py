"""Vector-store backed retrievers."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from langchain_chroma import Chroma
from langchain_community.vectorstores import FAISS
from langchain_core.embeddings import Embeddings
from langchain_core.vectorstores import VectorStore, VectorStoreRetriever

from ..configuration import AgentConfiguration
from ..models import load_embeddings

logger = logging.getLogger(__name__)


def load_vectorstore(
    configuration: AgentConfiguration,
    embedding: Optional[Embeddings] = None,
) -> VectorStore:
    """Open the persisted store named by ``configuration.retriever_provider``."""

    embedding = embedding or load_embeddings(configuration.embedding_model)

    if configuration.retriever_provider == "chroma":
        chroma_dir = Path(configuration.chroma_dir)
        if not chroma_dir.exists():
            raise FileNotFoundError(
                f"Chroma store not found at {chroma_dir}. Ensure ingestion has been run."
            )
        return Chroma(
            persist_directory=str(chroma_dir),
            embedding_function=embedding,
        )

    faiss_dir = Path(configuration.faiss_dir)
    if not faiss_dir.exists():
        raise FileNotFoundError(
            f"FAISS store not found at {faiss_dir}. Ensure ingestion has been run."
        )
    return FAISS.load_local(
        str(faiss_dir),
        embeddings=embedding,
        allow_dangerous_deserialization=True,
    )


def make_retriever(
    configuration: AgentConfiguration,
    embedding: Optional[Embeddings] = None,
) -> VectorStoreRetriever:
    """Build a retriever returning the top ``k`` documents in relevance order."""

    store = load_vectorstore(configuration, embedding=embedding)

    search_kwargs: dict = {"k": configuration.k}
    if configuration.filter_kwargs:
        search_kwargs["filter"] = dict(configuration.filter_kwargs)

    logger.debug(
        "Using %s retriever with search kwargs %s",
        configuration.retriever_provider,
        search_kwargs,
    )
    return store.as_retriever(search_kwargs=search_kwargs)


__all__ = ["load_vectorstore", "make_retriever"]
