"""Command-line entry point for the retrieval graph project."""

from __future__ import annotations

import argparse
import logging
import sys

from retrieval_graph import RetrievalAgent


def build_parser() -> argparse.ArgumentParser:
    """Construct the argument parser for the CLI."""

    parser = argparse.ArgumentParser(
        description="Ask a question; the graph answers directly or from retrieved documents."
    )
    parser.add_argument(
        "question",
        nargs="?",
        help="Question to route through the retrieval workflow.",
    )
    parser.add_argument(
        "--document",
        dest="documents",
        action="append",
        help="Document text to ingest before answering the question. Can be repeated.",
    )
    parser.add_argument(
        "--ingest-knowledge-base",
        action="store_true",
        help="Ingest all PDFs found in the knowledge base directory before answering.",
    )
    parser.add_argument(
        "--model",
        dest="query_model",
        help="Model used for routing and answering, as provider/model (e.g. openai/gpt-4o-mini).",
    )
    parser.add_argument(
        "--retriever-provider",
        choices=["chroma", "faiss"],
        help="Vector store to retrieve from.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log node progress to stderr.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the CLI entry point."""

    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    configurable = {
        key: value
        for key, value in {
            "query_model": args.query_model,
            "retriever_provider": args.retriever_provider,
        }.items()
        if value
    }
    agent = RetrievalAgent(config={"configurable": configurable})

    if args.ingest_knowledge_base:
        result = agent.ingest_knowledge_base()
        print(
            f"Knowledge base ingestion complete. Processed {result.processed} chunks "
            f"into {result.vectorstore or 'no'} store."
        )

    if args.documents:
        result = agent.add_documents(args.documents)
        print(f"Ingested {result.processed} inline chunks into {result.vectorstore or 'no'} store.")

    if args.question:
        messages = agent.query(args.question)
        print(messages[-1].content)
    else:
        parser.print_help()

    return 0


if __name__ == "__main__":
    sys.exit(main())
