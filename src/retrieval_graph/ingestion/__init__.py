"""Ingestion utilities for loading documents into the vector store."""

from .pipeline import IngestionPipeline, IngestionResult

__all__ = ["IngestionPipeline", "IngestionResult"]
