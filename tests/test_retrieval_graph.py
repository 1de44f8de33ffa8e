"""Tests for the retrieval graph nodes, routing, and agent."""

import asyncio

import pytest

from langchain_core.documents import Document
from langchain_core.exceptions import OutputParserException
from langchain_core.messages import AIMessage, HumanMessage

from retrieval_graph import RetrievalAgent, build_retrieval_graph, route_query
from retrieval_graph.exceptions import (
    GraphConfigurationError,
    InvalidRouteError,
    RouteNotSetError,
    RoutingSchemaError,
)
from retrieval_graph.nodes import (
    DirectAnswerNode,
    GenerationNode,
    GraphState,
    RetrieveNode,
    RouteDecision,
    RouterNode,
)


@pytest.fixture(autouse=True)
def clear_llm_env(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("RETRIEVAL_QUERY_MODEL", raising=False)
    monkeypatch.delenv("RETRIEVAL_RESPONSE_MODEL", raising=False)


class RecordingChatModel:
    """Chat model stand-in that records every message list it receives."""

    def __init__(self, reply: str = "fake answer") -> None:
        self.reply = reply
        self.calls = []

    def invoke(self, messages):
        self.calls.append(list(messages))
        return AIMessage(content=self.reply)


class FixedRouteChain:
    def __init__(self, result):
        self.result = result
        self.calls = []

    def invoke(self, inputs):
        self.calls.append(inputs)
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


class StructuredOutputModel:
    """Exposes ``with_structured_output`` the way chat models do."""

    def __init__(self, route: str) -> None:
        self.route = route
        self.prompts = []

    def with_structured_output(self, schema):
        def _classify(prompt_value):
            self.prompts.append(prompt_value.to_string())
            return schema(route=self.route, direct_answer="Paris")

        return _classify


class ListRetriever:
    def __init__(self, documents):
        self.documents = documents
        self.queries = []

    def invoke(self, query):
        self.queries.append(query)
        return list(self.documents)


class FailingRetriever:
    def invoke(self, query):
        raise ConnectionError("vector store unreachable")


REPORT_DOCUMENTS = [
    Document(page_content="Section 3 covers revenue.", metadata={"source": "reportA.pdf", "page": 3}),
    Document(page_content="Section 3 covers revenue (chunk 2).", metadata={"source": "reportA.pdf", "page": 3}),
    Document(page_content="Appendix tables.", metadata={"source": "reportA.pdf", "page": 9}),
]


def _as_state(raw_state) -> GraphState:
    if isinstance(raw_state, GraphState):
        return raw_state
    return GraphState(**raw_state)


# Router node


def test_router_sets_route_from_structured_output():
    chain = FixedRouteChain(RouteDecision(route="retrieve"))
    node = RouterNode(chain=chain)

    state = node.run(GraphState(query="Summarize section 3 of the report"))

    assert state.route == "retrieve"
    assert chain.calls == [{"query": "Summarize section 3 of the report"}]
    assert state.metadata["routing"]["route"] == "retrieve"


def test_router_accepts_mapping_output():
    node = RouterNode(chain=FixedRouteChain({"route": "direct", "direct_answer": "Paris"}))

    state = node.run(GraphState(query="What is the capital of France?"))

    assert state.route == "direct"
    assert state.metadata["routing"]["direct_answer_proposed"] is True


def test_router_renders_prompt_and_requests_structured_output():
    model = StructuredOutputModel("direct")
    node = RouterNode(llm=model)

    state = node.run(GraphState(query="What is the capital of France?"))

    assert state.route == "direct"
    assert len(model.prompts) == 1
    assert "Query: What is the capital of France?" in model.prompts[0]


@pytest.mark.parametrize(
    "result",
    [
        {"route": "maybe"},
        {"direct_answer": "no route"},
        "retrieve",
        None,
        OutputParserException("not json"),
    ],
)
def test_router_raises_schema_error_for_uncoercible_output(result):
    node = RouterNode(chain=FixedRouteChain(result))

    with pytest.raises(RoutingSchemaError):
        node.run(GraphState(query="Anything"))


def test_router_propagates_model_failures_unchanged():
    node = RouterNode(chain=FixedRouteChain(TimeoutError("model timed out")))

    with pytest.raises(TimeoutError):
        node.run(GraphState(query="Anything"))


def test_router_refuses_to_overwrite_route():
    node = RouterNode(chain=FixedRouteChain(RouteDecision(route="direct")))

    with pytest.raises(GraphConfigurationError):
        node.run(GraphState(query="Anything", route="retrieve"))


def test_router_requires_query():
    node = RouterNode(chain=FixedRouteChain(RouteDecision(route="direct")))

    with pytest.raises(ValueError):
        node.run(GraphState(query="   "))


# Routing dispatch


def test_route_query_dispatch():
    assert route_query(GraphState(query="q", route="retrieve")) == "retrieve_documents"
    assert route_query(GraphState(query="q", route="direct")) == "direct_answer"
    assert route_query({"query": "q", "route": "direct"}) == "direct_answer"


def test_route_query_without_route_is_a_wiring_error():
    with pytest.raises(RouteNotSetError, match="Route is not set"):
        route_query(GraphState(query="q"))


@pytest.mark.parametrize("route", ["search", "RETRIEVE", ["retrieve"]])
def test_route_query_rejects_unknown_routes(route):
    with pytest.raises(InvalidRouteError):
        route_query(GraphState(query="q", route=route))


# Direct answer node


def test_direct_answer_appends_query_and_response():
    llm = RecordingChatModel("Paris.")
    node = DirectAnswerNode(llm=llm)

    state = node.run(GraphState(query="What is the capital of France?"))

    assert [type(m) for m in state.messages] == [HumanMessage, AIMessage]
    assert state.messages[0].content == "What is the capital of France?"
    assert state.messages[1].content == "Paris."
    assert len(llm.calls) == 1
    assert [m.content for m in llm.calls[0]] == ["What is the capital of France?"]
    assert state.documents == []


# Retrieve node


def test_retrieve_node_deduplicates_in_rank_order():
    retriever = ListRetriever(REPORT_DOCUMENTS)
    node = RetrieveNode(retriever=retriever)

    state = node.run(GraphState(query="Summarize section 3 of the report", route="retrieve"))

    assert retriever.queries == ["Summarize section 3 of the report"]
    assert [d.page_content for d in state.documents] == [
        "Section 3 covers revenue.",
        "Appendix tables.",
    ]
    assert state.messages == []
    assert state.metadata["retrieval"]["dropped_duplicates"] == 1
    assert state.metadata["retrieval"]["retrieved"] == 3
    assert state.metadata["retrieval"]["retrieved_sources"] == [
        ("reportA.pdf", "3"),
        ("reportA.pdf", "3"),
        ("reportA.pdf", "9"),
    ]


def test_retrieve_node_propagates_retriever_errors():
    node = RetrieveNode(retriever=FailingRetriever())

    with pytest.raises(ConnectionError):
        node.run(GraphState(query="Summarize section 3 of the report"))


# Generation node


def test_generation_sends_rendered_prompt_but_records_plain_query():
    llm = RecordingChatModel("Revenue grew.")
    node = GenerationNode(llm=llm)
    prior = [HumanMessage(content="Hi", additional_kwargs={"name": "alice"}), AIMessage(content="Hello!")]
    state = GraphState(
        query="Summarize section 3 of the report",
        documents=REPORT_DOCUMENTS[::2],
        messages=list(prior),
    )

    updated = node.run(state)

    sent = llm.calls[0]
    assert [type(m) for m in sent] == [HumanMessage, AIMessage, HumanMessage]
    assert "name" not in sent[0].additional_kwargs
    assert sent[-1].content == updated.metadata["generation"]["prompt"]
    assert "Question: Summarize section 3 of the report" in sent[-1].content
    assert sent[-1].content.count("[SOURCE:") == 2
    assert "[SOURCE: reportA.pdf, page 3]" in sent[-1].content

    assert updated.messages[:2] == prior
    assert updated.messages[2] == HumanMessage(content="Summarize section 3 of the report")
    assert updated.messages[3].content == "Revenue grew."
    assert updated.metadata["generation"]["used_documents"] == 2


def test_generation_without_documents_uses_placeholder():
    llm = RecordingChatModel()
    node = GenerationNode(llm=llm)

    state = node.run(GraphState(query="Explain?"))

    assert "No supporting context provided." in state.metadata["generation"]["prompt"]


# Graph execution


def test_graph_direct_route_end_to_end():
    llm = RecordingChatModel("Paris is the capital of France.")
    retriever = ListRetriever(REPORT_DOCUMENTS)
    graph = build_retrieval_graph(
        retriever=retriever,
        llm=llm,
        overrides={"check_query_type": RouterNode(chain=FixedRouteChain(RouteDecision(route="direct")))},
    )
    app = graph.compile()

    final_state = _as_state(app.invoke(GraphState(query="What is the capital of France?")))

    assert final_state.route == "direct"
    assert final_state.documents == []
    assert len(final_state.messages) == 2
    assert isinstance(final_state.messages[0], HumanMessage)
    assert final_state.messages[0].content == "What is the capital of France?"
    assert isinstance(final_state.messages[1], AIMessage)
    assert retriever.queries == []


def test_graph_retrieve_route_end_to_end():
    llm = RecordingChatModel("Section 3 reports revenue.")
    retriever = ListRetriever(REPORT_DOCUMENTS)
    graph = build_retrieval_graph(
        retriever=retriever,
        llm=llm,
        overrides={"check_query_type": RouterNode(chain=FixedRouteChain(RouteDecision(route="retrieve")))},
    )
    app = graph.compile()

    final_state = _as_state(app.invoke(GraphState(query="Summarize section 3 of the report")))

    assert final_state.route == "retrieve"
    assert len(final_state.documents) == 2
    assert [m.content for m in final_state.messages] == [
        "Summarize section 3 of the report",
        "Section 3 reports revenue.",
    ]
    assert final_state.metadata["generation"]["prompt"].count("[SOURCE:") == 2
    assert len(llm.calls) == 1


def test_graph_runs_nodes_in_branch_order(monkeypatch):
    call_order = []

    def fake_router_run(self, state, config=None):
        call_order.append("check_query_type")
        state.set_route("retrieve")
        return state

    def fake_retrieve_run(self, state, config=None):
        call_order.append("retrieve_documents")
        return state

    def fake_generation_run(self, state, config=None):
        call_order.append("generate_response")
        return state

    def fake_direct_run(self, state, config=None):
        raise AssertionError("Direct answer should not run on the retrieve route")

    monkeypatch.setattr(RouterNode, "run", fake_router_run)
    monkeypatch.setattr(RetrieveNode, "run", fake_retrieve_run)
    monkeypatch.setattr(GenerationNode, "run", fake_generation_run)
    monkeypatch.setattr(DirectAnswerNode, "run", fake_direct_run)

    app = build_retrieval_graph().compile()
    app.invoke(GraphState(query="Need documents"))

    assert call_order == ["check_query_type", "retrieve_documents", "generate_response"]


def test_graph_raises_when_router_leaves_route_unset():
    def silent_router(state):
        return state

    llm = RecordingChatModel()
    app = build_retrieval_graph(
        retriever=ListRetriever(REPORT_DOCUMENTS),
        llm=llm,
        overrides={"check_query_type": silent_router},
    ).compile()

    with pytest.raises(RouteNotSetError):
        app.invoke(GraphState(query="Anything"))

    assert llm.calls == []


def test_graph_surfaces_schema_errors():
    app = build_retrieval_graph(
        retriever=ListRetriever([]),
        llm=RecordingChatModel(),
        overrides={"check_query_type": RouterNode(chain=FixedRouteChain({"route": "sideways"}))},
    ).compile()

    with pytest.raises(RoutingSchemaError):
        app.invoke(GraphState(query="Anything"))


def test_graph_passes_configuration_to_nodes():
    router = RouterNode(chain=FixedRouteChain(RouteDecision(route="direct")))
    app = build_retrieval_graph(
        llm=RecordingChatModel(),
        overrides={"check_query_type": router},
    ).compile()

    raw = app.invoke(
        GraphState(query="Hi there"),
        config={"configurable": {"query_model": "openai/gpt-4o"}},
    )

    assert _as_state(raw).metadata["routing"]["model"] == "openai/gpt-4o"


@pytest.mark.parametrize("route", ["direct", "retrieve"])
def test_graph_leaves_input_state_untouched(route):
    prior = [HumanMessage(content="Hi"), AIMessage(content="Hello!")]
    initial = GraphState(query="Summarize section 3 of the report", messages=list(prior))
    app = build_retrieval_graph(
        retriever=ListRetriever(REPORT_DOCUMENTS),
        llm=RecordingChatModel(),
        overrides={"check_query_type": RouterNode(chain=FixedRouteChain(RouteDecision(route=route)))},
    ).compile()

    final_state = _as_state(app.invoke(initial))

    assert final_state.metadata["routing"]["route"] == route
    assert initial.metadata == {}
    assert initial.messages == prior
    assert initial.documents == []
    assert initial.route is None


def test_concurrent_runs_keep_their_own_metadata():
    app = build_retrieval_graph(
        retriever=ListRetriever(REPORT_DOCUMENTS),
        llm=RecordingChatModel(),
        overrides={"check_query_type": RouterNode(chain=FixedRouteChain(RouteDecision(route="retrieve")))},
    ).compile()
    questions = ["Summarize section 3 of the report", "List the appendix tables"]

    async def run_all():
        return await asyncio.gather(*(app.ainvoke(GraphState(query=q)) for q in questions))

    results = [_as_state(raw) for raw in asyncio.run(run_all())]

    for question, state in zip(questions, results):
        assert state.metadata["retrieval"]["query"] == question
        assert f"Question: {question}" in state.metadata["generation"]["prompt"]
        assert state.messages[0].content == question


# Agent


def _direct_agent(route: str, llm=None, retriever=None) -> RetrievalAgent:
    return RetrievalAgent(
        llm=llm or RecordingChatModel(),
        retriever=retriever or ListRetriever(REPORT_DOCUMENTS),
        overrides={"check_query_type": RouterNode(chain=FixedRouteChain(RouteDecision(route=route)))},
    )


def test_agent_query_returns_updated_history():
    agent = _direct_agent("direct", llm=RecordingChatModel("Paris."))

    messages = agent.query("What is the capital of France?")

    assert [m.content for m in messages] == ["What is the capital of France?", "Paris."]
    assert agent.last_state is not None
    assert agent.last_state.route == "direct"


def test_agent_continues_from_prior_messages():
    llm = RecordingChatModel("Revenue grew.")
    agent = _direct_agent("retrieve", llm=llm)
    prior = [HumanMessage(content="Hi"), AIMessage(content="Hello!")]

    messages = agent.query("Summarize section 3 of the report", messages=prior)

    assert len(messages) == 4
    assert [m.content for m in messages[:2]] == ["Hi", "Hello!"]
    assert len(llm.calls[0]) == 3
    assert len(agent.last_state.documents) == 2


def test_agent_invocations_do_not_share_state():
    agent = _direct_agent("direct")

    first = agent.query("First question")
    second = agent.query("Second question")

    assert len(first) == 2
    assert len(second) == 2
    assert second[0].content == "Second question"


def test_agent_async_query():
    agent = _direct_agent("direct", llm=RecordingChatModel("async answer"))

    messages = asyncio.run(agent.aquery("What is the capital of France?"))

    assert messages[-1].content == "async answer"


def test_agent_rejects_empty_query():
    agent = _direct_agent("direct")

    with pytest.raises(ValueError):
        agent.query("  ")


def test_agent_validates_configuration_on_construction():
    with pytest.raises(ValueError):
        RetrievalAgent(config={"configurable": {"retriever_provider": "pinecone"}})


def test_agent_without_credentials_fails_on_first_model_call():
    agent = RetrievalAgent(retriever=ListRetriever([]))

    with pytest.raises(EnvironmentError):
        agent.query("What is the capital of France?")
