"""Chat model and embedding factories."""

from __future__ import annotations

import os
from typing import Any, Optional, Tuple

from langchain_core.embeddings import Embeddings
from langchain_core.language_models import BaseChatModel
from langchain_openai import ChatOpenAI, OpenAIEmbeddings

DEFAULT_PROVIDER = "openai"


def split_model_name(fully_specified_name: str) -> Tuple[str, str]:
    """Split ``provider/model`` into its parts; a bare model name means OpenAI."""

    name = (fully_specified_name or "").strip()
    if not name:
        raise ValueError("Model name must be a non-empty string.")

    if "/" in name:
        provider, model = name.split("/", 1)
    else:
        provider, model = DEFAULT_PROVIDER, name

    if not provider or not model:
        raise ValueError(f"Malformed model name: {fully_specified_name!r}")
    return provider.lower(), model


def _require_openai_key() -> None:
    if not os.getenv("OPENAI_API_KEY"):
        raise EnvironmentError(
            "OPENAI_API_KEY is required for OpenAI models. Set it in the environment or .env file."
        )


def load_chat_model(fully_specified_name: str, **kwargs: Any) -> BaseChatModel:
    """Instantiate the chat model named by ``provider/model``."""

    provider, model = split_model_name(fully_specified_name)
    if provider != "openai":
        raise ValueError(f"Unsupported chat model provider: {provider!r}")

    _require_openai_key()
    return ChatOpenAI(model=model, temperature=float(kwargs.pop("temperature", 0)), **kwargs)


def load_embeddings(model: Optional[str] = None) -> Embeddings:
    """Return OpenAI embeddings for ingestion and retrieval."""

    _require_openai_key()
    return OpenAIEmbeddings(model=model or "text-embedding-3-small")


__all__ = ["load_chat_model", "load_embeddings", "split_model_name"]
