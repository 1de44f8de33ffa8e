"""Command line ingestion of PDFs and inline text into the configured vector store."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from retrieval_graph.configuration import AgentConfiguration
from retrieval_graph.ingestion import IngestionPipeline, IngestionResult

logger = logging.getLogger(__name__)

SETTING_FLAGS = ("knowledge_base_dir", "chunk_size", "chunk_overlap")
CONFIGURABLE_FLAGS = ("retriever_provider", "chroma_dir", "faiss_dir", "embedding_model")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Split, embed and persist documents for the retrieval graph.",
    )
    parser.add_argument(
        "--settings",
        type=Path,
        help="JSON file with ingestion settings and a 'configurable' section; flags win over it.",
    )
    parser.add_argument("--knowledge-base-dir", dest="knowledge_base_dir", type=Path)
    parser.add_argument("--chunk-size", dest="chunk_size", type=int)
    parser.add_argument("--chunk-overlap", dest="chunk_overlap", type=int)
    parser.add_argument(
        "--provider",
        dest="retriever_provider",
        choices=["chroma", "faiss"],
        help="Vector store to write to.",
    )
    parser.add_argument("--chroma-dir", dest="chroma_dir")
    parser.add_argument("--faiss-dir", dest="faiss_dir")
    parser.add_argument("--embedding-model", dest="embedding_model")
    parser.add_argument(
        "--text",
        action="append",
        default=[],
        help="Inline document text to ingest instead of the PDF directory. Repeatable.",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    return parser.parse_args(argv)


def merge_settings(args: argparse.Namespace) -> Dict[str, Any]:
    """Overlay command line flags on the optional settings file."""

    settings: Dict[str, Any] = {}
    if args.settings is not None:
        settings = json.loads(args.settings.read_text(encoding="utf-8"))

    configurable = dict(settings.get("configurable") or {})
    configurable.update(
        {name: getattr(args, name) for name in CONFIGURABLE_FLAGS if getattr(args, name) is not None}
    )
    settings.update(
        {name: getattr(args, name) for name in SETTING_FLAGS if getattr(args, name) is not None}
    )
    settings["configurable"] = configurable
    return settings


def build_pipeline(settings: Dict[str, Any]) -> IngestionPipeline:
    configuration = AgentConfiguration.from_runnable_config(
        {"configurable": settings.get("configurable", {})}
    )
    return IngestionPipeline(
        configuration,
        knowledge_base_dir=Path(settings.get("knowledge_base_dir", "knowledge_base")),
        chunk_size=int(settings.get("chunk_size", 1000)),
        chunk_overlap=int(settings.get("chunk_overlap", 150)),
    )


def report(result: IngestionResult) -> str:
    lines = [
        f"Vector store: {result.vectorstore or 'none'}",
        f"Chunks written: {result.processed}",
        f"Failures: {result.failed}",
    ]
    lines.extend(f"  - {detail}" for detail in result.details)
    return "\n".join(lines)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    pipeline = build_pipeline(merge_settings(args))
    if args.text:
        result = pipeline.ingest_documents(args.text)
    else:
        logger.info("Ingesting PDFs from %s", pipeline.knowledge_base_dir)
        result = pipeline.ingest_knowledge_base()

    print(report(result))
    return 1 if result.failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
