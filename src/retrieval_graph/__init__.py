"""Query routing and retrieval-augmented answering with LangGraph."""

__version__ = "0.1.0"

from .configuration import AgentConfiguration, ensure_agent_configuration
from .core import RetrievalAgent
from .exceptions import (
	GraphConfigurationError,
	InvalidRouteError,
	RetrievalGraphError,
	RouteNotSetError,
	RoutingSchemaError,
)
from .graph import build_retrieval_graph, route_query
from .ingestion import IngestionPipeline, IngestionResult
from .nodes import (
	DirectAnswerNode,
	GenerationNode,
	GraphState,
	RetrieveNode,
	RouteDecision,
	RouterNode,
)
from .retrievers import make_retriever
from .utils import deduplicate_documents, document_identity, format_docs, normalize_messages

__all__ = [
	"AgentConfiguration",
	"DirectAnswerNode",
	"GenerationNode",
	"GraphConfigurationError",
	"GraphState",
	"IngestionPipeline",
	"IngestionResult",
	"InvalidRouteError",
	"RetrievalAgent",
	"RetrievalGraphError",
	"RetrieveNode",
	"RouteDecision",
	"RouteNotSetError",
	"RouterNode",
	"RoutingSchemaError",
	"build_retrieval_graph",
	"deduplicate_documents",
	"document_identity",
	"ensure_agent_configuration",
	"format_docs",
	"make_retriever",
	"normalize_messages",
	"route_query",
]
