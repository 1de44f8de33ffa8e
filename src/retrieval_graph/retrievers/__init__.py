"""Retrieval components for the retrieval graph."""

from .vector import load_vectorstore, make_retriever

__all__ = ["load_vectorstore", "make_retriever"]
