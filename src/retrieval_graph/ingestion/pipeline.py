"""Document ingestion pipeline feeding the retrieval graph's vector store."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from langchain_chroma import Chroma
from langchain_community.document_loaders import PyPDFLoader
from langchain_community.vectorstores import FAISS
from langchain_core.documents import Document
from langchain_core.embeddings import Embeddings
from langchain_text_splitters import RecursiveCharacterTextSplitter

from ..configuration import AgentConfiguration
from ..models import load_embeddings

logger = logging.getLogger(__name__)


@dataclass
class IngestionResult:
    """Represents the outcome of an ingestion operation."""

    processed: int
    failed: int = 0
    details: List[str] = field(default_factory=list)
    vectorstore: Optional[str] = None


class IngestionPipeline:
    """Splits documents and writes them into the configured vector store."""

    def __init__(
        self,
        configuration: Optional[AgentConfiguration] = None,
        *,
        knowledge_base_dir: Optional[Path] = None,
        chunk_size: int = 1000,
        chunk_overlap: int = 150,
        embedding: Optional[Embeddings] = None,
    ) -> None:
        self.configuration = configuration or AgentConfiguration()
        self.knowledge_base_dir = Path(knowledge_base_dir or "knowledge_base")
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.embedding = embedding

    def ingest_documents(self, documents: Iterable[str]) -> IngestionResult:
        """Ingest raw text snippets."""

        docs = [
            Document(
                page_content=text,
                metadata={"source": f"inline::{idx}"},
            )
            for idx, text in enumerate(documents)
            if text.strip()
        ]

        if not docs:
            return IngestionResult(processed=0, details=["No documents provided."])

        return self._upsert_documents(docs)

    def ingest_knowledge_base(self) -> IngestionResult:
        """Load every PDF in the knowledge base directory and ingest it page by page."""

        documents: List[Document] = []
        failures: List[str] = []

        if not self.knowledge_base_dir.exists():
            failures.append(f"Knowledge base directory not found: {self.knowledge_base_dir}")

        for pdf_path in sorted(self.knowledge_base_dir.glob("*.pdf")):
            try:
                pdf_docs = PyPDFLoader(str(pdf_path)).load()
            except Exception as exc:  # pragma: no cover - PDF parsing failure
                logger.warning("Failed to parse %s: %s", pdf_path.name, exc)
                failures.append(f"Failed to parse {pdf_path.name}: {exc}")
                continue

            for doc in pdf_docs:
                doc.metadata.setdefault("source", str(pdf_path))
                doc.metadata.setdefault("filename", pdf_path.name)
            documents.extend(pdf_docs)

        if not documents:
            return IngestionResult(processed=0, failed=len(failures), details=failures)

        result = self._upsert_documents(documents)
        result.failed += len(failures)
        result.details.extend(failures)
        return result

    def _upsert_documents(self, documents: Sequence[Document]) -> IngestionResult:
        """Split, embed, and store the supplied documents."""

        text_splitter = RecursiveCharacterTextSplitter(
            chunk_size=self.chunk_size,
            chunk_overlap=self.chunk_overlap,
        )
        split_docs = text_splitter.split_documents(list(documents))

        if not split_docs:
            return IngestionResult(processed=0, details=["No content after splitting."])

        embeddings = self.embedding or load_embeddings(self.configuration.embedding_model)
        provider = self.configuration.retriever_provider

        if provider == "chroma":
            chroma_dir = Path(self.configuration.chroma_dir)
            chroma_dir.mkdir(parents=True, exist_ok=True)
            Chroma.from_documents(
                split_docs,
                embeddings,
                persist_directory=str(chroma_dir),
            )
        else:
            faiss_dir = Path(self.configuration.faiss_dir)
            faiss_dir.mkdir(parents=True, exist_ok=True)
            if (faiss_dir / "index.faiss").exists():
                store = FAISS.load_local(
                    str(faiss_dir),
                    embeddings=embeddings,
                    allow_dangerous_deserialization=True,
                )
                store.add_documents(split_docs)
            else:
                store = FAISS.from_documents(split_docs, embeddings)
            store.save_local(str(faiss_dir))

        logger.info("Ingested %d chunks into %s", len(split_docs), provider)

        sources = sorted({str(doc.metadata.get("source", "unknown")) for doc in documents})
        return IngestionResult(
            processed=len(split_docs),
            details=sources,
            vectorstore=provider,
        )


__all__ = ["IngestionPipeline", "IngestionResult"]
