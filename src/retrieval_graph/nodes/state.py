"""Graph state definitions for the retrieval LangGraph workflow."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional

from langchain_core.documents import Document
from langchain_core.messages import BaseMessage

from ..exceptions import GraphConfigurationError

Route = Literal["retrieve", "direct"]


@dataclass
class GraphState:
    """Captures the evolving state of a single query as it moves through the graph."""

    query: str
    route: Optional[Route] = None
    documents: List[Document] = field(default_factory=list)
    messages: List[BaseMessage] = field(default_factory=list)
    metadata: dict = field(default_factory=dict)

    def set_route(self, route: Route) -> None:
        if self.route is not None:
            raise GraphConfigurationError(
                f"Route already set to {self.route!r}; the router must run once per query."
            )
        self.route = route

    def add_messages(self, *messages: BaseMessage) -> None:
        self.messages = [*self.messages, *messages]

    def record(self, key: str, values: Dict[str, Any]) -> None:
        """Store node metadata under ``key`` in a new dict; the previous one is left untouched."""

        self.metadata = {**self.metadata, key: values}


__all__ = ["GraphState", "Route"]
