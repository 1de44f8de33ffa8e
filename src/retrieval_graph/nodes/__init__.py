"""LangGraph components for the retrieval workflow."""

from .base import BaseNode, ChatModelNode
from .direct_answer import DirectAnswerNode
from .generation import GenerationNode
from .retrieve import RetrieveNode
from .router import RouteDecision, RouterNode
from .state import GraphState, Route

__all__ = [
	"BaseNode",
	"ChatModelNode",
	"DirectAnswerNode",
	"GenerationNode",
	"GraphState",
	"RetrieveNode",
	"Route",
	"RouteDecision",
	"RouterNode",
]
