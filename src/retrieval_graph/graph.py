"""LangGraph assembly for the retrieval workflow."""

from __future__ import annotations

from typing import Any, Dict, Optional

from langchain_core.embeddings import Embeddings
from langgraph.graph import END, START, StateGraph

from .exceptions import InvalidRouteError, RouteNotSetError
from .nodes import DirectAnswerNode, GenerationNode, GraphState, RetrieveNode, RouterNode

CHECK_QUERY_TYPE = "check_query_type"
RETRIEVE_DOCUMENTS = "retrieve_documents"
GENERATE_RESPONSE = "generate_response"
DIRECT_ANSWER = "direct_answer"

ROUTE_TARGETS = {
    "retrieve": RETRIEVE_DOCUMENTS,
    "direct": DIRECT_ANSWER,
}


def route_query(state: GraphState | Dict[str, Any]) -> str:
    """Pick the node that follows routing from the route stored on the state."""

    if isinstance(state, dict):
        route = state.get("route")
    else:
        route = getattr(state, "route", None)

    if not route:
        raise RouteNotSetError()

    try:
        return ROUTE_TARGETS[route]
    except (KeyError, TypeError):
        raise InvalidRouteError(route) from None


def build_retrieval_graph(
    *,
    retriever: Optional[Any] = None,
    llm: Optional[Any] = None,
    embedding: Optional[Embeddings] = None,
    config: Optional[Dict[str, Any]] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> StateGraph:
    """
    Construct the LangGraph state machine for the retrieval workflow.

    ``retriever`` and ``llm`` are shared by the default nodes; when omitted the
    nodes build them per invocation from the run's configuration, using
    ``embedding`` for the vector store if given. ``overrides`` replaces nodes
    by name.
    """

    config = config or {}
    overrides = overrides or {}

    def _resolve_node(name: str, default_factory):
        node = overrides.get(name)
        if node is None:
            node = default_factory()
        return node

    router_node = _resolve_node(
        CHECK_QUERY_TYPE,
        lambda: RouterNode(llm=llm, config=config.get(CHECK_QUERY_TYPE)),
    )
    retrieve_node = _resolve_node(
        RETRIEVE_DOCUMENTS,
        lambda: RetrieveNode(
            retriever=retriever,
            embedding=embedding,
            config=config.get(RETRIEVE_DOCUMENTS),
        ),
    )
    generation_node = _resolve_node(
        GENERATE_RESPONSE,
        lambda: GenerationNode(llm=llm, config=config.get(GENERATE_RESPONSE)),
    )
    direct_node = _resolve_node(
        DIRECT_ANSWER,
        lambda: DirectAnswerNode(llm=llm, config=config.get(DIRECT_ANSWER)),
    )

    def _node_runner(node):
        if hasattr(node, "run"):
            return node.run
        if callable(node):
            return node
        raise TypeError(f"Node override for {node} must define a 'run' method or be callable.")

    graph = StateGraph(GraphState)

    graph.add_node(CHECK_QUERY_TYPE, _node_runner(router_node))
    graph.add_node(RETRIEVE_DOCUMENTS, _node_runner(retrieve_node))
    graph.add_node(GENERATE_RESPONSE, _node_runner(generation_node))
    graph.add_node(DIRECT_ANSWER, _node_runner(direct_node))

    graph.add_edge(START, CHECK_QUERY_TYPE)
    graph.add_conditional_edges(
        CHECK_QUERY_TYPE,
        route_query,
        {
            RETRIEVE_DOCUMENTS: RETRIEVE_DOCUMENTS,
            DIRECT_ANSWER: DIRECT_ANSWER,
        },
    )
    graph.add_edge(RETRIEVE_DOCUMENTS, GENERATE_RESPONSE)
    graph.add_edge(GENERATE_RESPONSE, END)
    graph.add_edge(DIRECT_ANSWER, END)

    return graph


graph = build_retrieval_graph().compile().with_config({"run_name": "RetrievalGraph"})


__all__ = ["build_retrieval_graph", "graph", "route_query"]
