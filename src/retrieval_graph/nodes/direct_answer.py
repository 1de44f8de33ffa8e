"""Direct-answer node: query the model without retrieval."""

from __future__ import annotations

import logging
from typing import Optional

from langchain_core.messages import HumanMessage
from langchain_core.runnables import RunnableConfig

from ..utils import normalize_messages
from .base import ChatModelNode
from .state import GraphState

logger = logging.getLogger(__name__)


class DirectAnswerNode(ChatModelNode):
    """Answers the raw query with a single model call."""

    name = "direct_answer"

    def run(self, state: GraphState, config: Optional[RunnableConfig] = None) -> GraphState:  # type: ignore[override]
        query = self.require_query(state)
        configuration = self.configuration(config)
        llm = self.resolve_llm(configuration.answer_model)

        user_message = HumanMessage(content=query)
        response = llm.invoke(normalize_messages([user_message]))

        state.add_messages(user_message, response)
        logger.info("Answered query directly with %s", configuration.answer_model)
        return state


__all__ = ["DirectAnswerNode"]
