"""
Base definitions for LangGraph nodes used in the retrieval workflow.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from langchain_core.language_models import BaseChatModel
from langchain_core.runnables import RunnableConfig

from ..configuration import AgentConfiguration, ensure_agent_configuration
from ..models import load_chat_model
from .state import GraphState


class BaseNode:
    """
    Base class for LangGraph nodes.

    Concrete nodes implement ``run``. LangGraph passes the invocation's
    ``RunnableConfig`` as ``config``, from which the agent configuration is
    resolved.
    """

    name: str = "base"

    def __init__(self, config: Optional[Dict[str, Any]] = None) -> None:
        self.config = config or {}

    def run(self, state: GraphState, config: Optional[RunnableConfig] = None) -> GraphState:
        """Execute the node logic and return the updated state."""
        raise NotImplementedError("BaseNode subclasses must implement run().")

    @staticmethod
    def configuration(config: Optional[RunnableConfig]) -> AgentConfiguration:
        return ensure_agent_configuration(config)

    @staticmethod
    def require_query(state: GraphState) -> str:
        if not state.query or not state.query.strip():
            raise ValueError("GraphState.query must be a non-empty string.")
        return state.query


class ChatModelNode(BaseNode):
    """Node backed by a chat model, either injected or loaded per invocation."""

    def __init__(
        self,
        *,
        llm: Optional[Any] = None,
        config: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(config=config)
        self._llm = llm

    def resolve_llm(self, model_name: str) -> BaseChatModel:
        if self._llm is not None:
            return self._llm
        return load_chat_model(model_name, temperature=self.config.get("temperature", 0))


__all__ = ["BaseNode", "ChatModelNode"]
