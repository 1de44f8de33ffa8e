"""Per-invocation agent configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Mapping, Optional

from langchain_core.runnables import RunnableConfig

DEFAULT_QUERY_MODEL = "openai/gpt-4o-mini"
DEFAULT_EMBEDDING_MODEL = "text-embedding-3-small"
SUPPORTED_RETRIEVER_PROVIDERS = ("chroma", "faiss")


@dataclass(frozen=True)
class AgentConfiguration:
    """
    Read-only settings resolved once per graph invocation.

    Values come from ``config["configurable"]`` when present, otherwise from
    environment variables, otherwise from the defaults below.
    """

    query_model: str = DEFAULT_QUERY_MODEL
    response_model: Optional[str] = None
    retriever_provider: str = "chroma"
    k: int = 5
    filter_kwargs: Dict[str, Any] = field(default_factory=dict)
    chroma_dir: str = "vectorstores/chroma"
    faiss_dir: str = "vectorstores/faiss"
    embedding_model: str = DEFAULT_EMBEDDING_MODEL

    def __post_init__(self) -> None:
        if self.retriever_provider not in SUPPORTED_RETRIEVER_PROVIDERS:
            supported = ", ".join(SUPPORTED_RETRIEVER_PROVIDERS)
            raise ValueError(
                f"Unsupported retriever provider {self.retriever_provider!r}. "
                f"Expected one of: {supported}."
            )
        object.__setattr__(self, "k", _as_positive_int(self.k))
        if not self.query_model or not self.query_model.strip():
            raise ValueError("query_model must be a non-empty model identifier.")

    @property
    def answer_model(self) -> str:
        """Model used for direct answers and grounded generation."""

        return self.response_model or self.query_model

    @classmethod
    def from_runnable_config(
        cls, config: Optional[RunnableConfig] = None
    ) -> "AgentConfiguration":
        configurable: Mapping[str, Any] = (config or {}).get("configurable") or {}
        values = {**_env_defaults(), **configurable}
        known = {f.name for f in fields(cls)}
        kwargs = {key: value for key, value in values.items() if key in known and value is not None}
        if "filter_kwargs" in kwargs:
            kwargs["filter_kwargs"] = dict(kwargs["filter_kwargs"])
        return cls(**kwargs)


def _as_positive_int(value: Any) -> int:
    """Accept ints and integral strings such as ``"3"``; reject everything else."""

    if isinstance(value, bool):
        raise ValueError("k must be a positive integer.")
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            raise ValueError(f"k must be a positive integer, got {value!r}.") from None
    if not isinstance(value, int) or value <= 0:
        raise ValueError(f"k must be a positive integer, got {value!r}.")
    return value


def _env_defaults() -> Dict[str, Any]:
    env_map = {
        "query_model": "RETRIEVAL_QUERY_MODEL",
        "response_model": "RETRIEVAL_RESPONSE_MODEL",
        "retriever_provider": "RETRIEVER_PROVIDER",
        "k": "RETRIEVAL_K",
        "chroma_dir": "CHROMA_DIR",
        "faiss_dir": "FAISS_DIR",
        "embedding_model": "EMBEDDING_MODEL",
    }
    return {key: os.getenv(var) for key, var in env_map.items() if os.getenv(var)}


def ensure_agent_configuration(config: Optional[RunnableConfig] = None) -> AgentConfiguration:
    """Resolve the agent configuration for the current invocation."""

    return AgentConfiguration.from_runnable_config(config)


__all__ = ["AgentConfiguration", "ensure_agent_configuration"]
