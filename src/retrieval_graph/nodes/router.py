"""Router node deciding between direct answers and retrieval."""

from __future__ import annotations

import logging
from typing import Any, Dict, Literal, Mapping, Optional

from langchain_core.exceptions import OutputParserException
from langchain_core.runnables import Runnable, RunnableConfig
from pydantic import BaseModel, Field, ValidationError

from ..exceptions import RoutingSchemaError
from ..prompts import ROUTER_PROMPT
from .base import ChatModelNode
from .state import GraphState

logger = logging.getLogger(__name__)


class RouteDecision(BaseModel):
    """Structured routing decision returned by the query classifier."""

    route: Literal["retrieve", "direct"] = Field(
        description="'retrieve' if the query needs documents from the knowledge base, otherwise 'direct'."
    )
    direct_answer: Optional[str] = Field(
        default=None,
        description="Optional short answer when the query can be answered directly.",
    )


class RouterNode(ChatModelNode):
    """Classifies the query with a structured call to the routing model."""

    name = "check_query_type"

    def __init__(
        self,
        *,
        chain: Optional[Runnable] = None,
        llm: Optional[Any] = None,
        config: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(llm=llm, config=config)
        self._chain = chain

    def _build_chain(self, model_name: str) -> Runnable:
        llm_instance = self.resolve_llm(model_name)
        return ROUTER_PROMPT | llm_instance.with_structured_output(RouteDecision)

    def run(self, state: GraphState, config: Optional[RunnableConfig] = None) -> GraphState:  # type: ignore[override]
        query = self.require_query(state)
        configuration = self.configuration(config)
        chain = self._chain or self._build_chain(configuration.query_model)

        try:
            raw = chain.invoke({"query": query})
            decision = self._coerce(raw)
        except (ValidationError, OutputParserException) as exc:
            raise RoutingSchemaError(f"Routing model output could not be parsed: {exc}") from exc

        state.set_route(decision.route)
        state.record(
            "routing",
            {
                "route": decision.route,
                "model": configuration.query_model,
                "direct_answer_proposed": bool(decision.direct_answer),
            },
        )

        logger.info("Routed query to %s", decision.route)
        return state

    @staticmethod
    def _coerce(raw: Any) -> RouteDecision:
        if isinstance(raw, RouteDecision):
            return raw
        if isinstance(raw, Mapping):
            return RouteDecision.model_validate(dict(raw))
        raise RoutingSchemaError(
            f"Routing model returned {type(raw).__name__}, expected a route decision.",
            raw_output=raw,
        )


__all__ = ["RouteDecision", "RouterNode"]
