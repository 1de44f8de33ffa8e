"""Generation node responsible for synthesising the grounded answer."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from langchain_core.messages import HumanMessage
from langchain_core.runnables import RunnableConfig

from ..prompts import RESPONSE_PROMPT
from ..utils import format_docs, normalize_messages
from .base import ChatModelNode
from .state import GraphState

logger = logging.getLogger(__name__)


class GenerationNode(ChatModelNode):
    """Produces the final answer by prompting the model with retrieved evidence."""

    name = "generate_response"

    def __init__(
        self,
        *,
        llm: Optional[Any] = None,
        config: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(llm=llm, config=config)
        self.context_separator = self.config.get("context_separator", "\n\n")

    def run(self, state: GraphState, config: Optional[RunnableConfig] = None) -> GraphState:  # type: ignore[override]
        query = self.require_query(state)
        configuration = self.configuration(config)

        context = format_docs(state.documents, separator=self.context_separator)
        prompt_text = RESPONSE_PROMPT.format(question=query, context=context)

        # The model sees the rendered prompt; the history keeps the plain query.
        history = normalize_messages([*state.messages, HumanMessage(content=prompt_text)])
        llm = self.resolve_llm(configuration.answer_model)
        response = llm.invoke(history)

        state.add_messages(HumanMessage(content=query), response)
        state.record(
            "generation",
            {
                "used_documents": len(state.documents),
                "context_chars": len(context),
                "model": configuration.answer_model,
                "prompt": prompt_text,
            },
        )

        logger.debug("Generation prompt is %d characters", len(prompt_text))
        logger.info("Generated response from %d documents", len(state.documents))
        return state


__all__ = ["GenerationNode"]
