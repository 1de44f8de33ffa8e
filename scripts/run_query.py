"""Convenience CLI for querying the retrieval graph and inspecting its state."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Dict

from retrieval_graph import RetrievalAgent
from retrieval_graph.utils import document_identity


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("question", help="Question to ask the retrieval graph")
    parser.add_argument(
        "--provider",
        choices=["chroma", "faiss"],
        default="chroma",
        help="Vector store to retrieve from.",
    )
    parser.add_argument(
        "--chroma-dir",
        default="vectorstores/chroma",
        type=Path,
        help="Directory containing the persisted Chroma index.",
    )
    parser.add_argument(
        "--faiss-dir",
        default="vectorstores/faiss",
        type=Path,
        help="Directory containing the persisted FAISS index.",
    )
    parser.add_argument(
        "--k",
        type=int,
        default=4,
        help="Number of documents to retrieve for each query.",
    )
    parser.add_argument(
        "--query-model",
        default="openai/gpt-4o-mini",
        help="Model used to route the query.",
    )
    parser.add_argument(
        "--response-model",
        default=None,
        help="Model used to answer; defaults to the query model.",
    )
    return parser.parse_args()


def build_config(args: argparse.Namespace) -> Dict:
    configurable: Dict = {
        "retriever_provider": args.provider,
        "chroma_dir": str(args.chroma_dir),
        "faiss_dir": str(args.faiss_dir),
        "k": args.k,
        "query_model": args.query_model,
    }
    if args.response_model:
        configurable["response_model"] = args.response_model

    return {"configurable": configurable}


def main() -> None:
    args = parse_args()
    agent = RetrievalAgent(config=build_config(args))

    messages = agent.query(args.question)

    print("Question:", args.question)
    print("\nAnswer:\n" + str(messages[-1].content))

    state = agent.last_state
    if state is None:
        print("\n(No graph state captured.)")
        return

    print(f"\nRoute: {state.route}")
    print("\nMetadata:")
    for key, value in state.metadata.items():
        shown = {name: item for name, item in value.items() if name != "prompt"}
        print(f"- {key}: {shown}")

    if state.documents:
        print("\nRetrieved documents:")
        for idx, doc in enumerate(state.documents, start=1):
            source, page = document_identity(doc)
            preview = doc.page_content.strip().replace("\n", " ")[:160]
            print(f"  {idx}. {source} (page {page}) :: {preview}")
    else:
        print("\n(No documents retrieved.)")


if __name__ == "__main__":
    main()
