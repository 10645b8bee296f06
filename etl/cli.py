"""Ingestion commands.

Usage::

    python -m etl.cli upload-pdfs [--csv PATH] [--limit N]
    python -m etl.cli load-web [--csv PATH] [--limit N]
"""
from __future__ import annotations

import argparse
import asyncio
import sys
from typing import List, Optional

import structlog
from core.logger import configure_logging
from core.settings import SETTINGS
from etl.load_web import WebLoader
from etl.records import read_records
from etl.report import IngestionReport
from etl.upload_assistant import AssistantUploader
from infra.resources import PineconeResource

logger = structlog.get_logger("etl.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="etl.cli", description="Ingest the article list into Pinecone"
    )
    sub = parser.add_subparsers(dest="command", required=True)
    for name, help_text in (
        ("upload-pdfs", "Download article PDFs and upload them to the Pinecone Assistant"),
        ("load-web", "Load article pages into the Pinecone vector index"),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("--csv", default=SETTINGS.INGESTION.CSV_PATH, help="Publications CSV")
        cmd.add_argument("--limit", type=int, default=None, help="Only the first N records")
    return parser


def missing_keys(command: str) -> List[str]:
    missing = []
    if not SETTINGS.PINECONE.PINECONE_API_KEY.get_secret_value():
        missing.append("PINECONE_API_KEY")
    if command == "load-web" and not SETTINGS.OPENAI.OPENAI_API_KEY.get_secret_value():
        missing.append("OPENAI_API_KEY")
    return missing


def pinecone_resource() -> PineconeResource:
    resource = PineconeResource(
        api_key=SETTINGS.PINECONE.PINECONE_API_KEY.get_secret_value(),
        index_name=SETTINGS.PINECONE.PINECONE_INDEX,
        assistant_name=SETTINGS.PINECONE.ASSISTANT_NAME,
        openai_api_key=SETTINGS.OPENAI.OPENAI_API_KEY.get_secret_value(),
        embedding_model=SETTINGS.OPENAI.EMBEDDING_MODEL,
        embedding_dimensions=SETTINGS.OPENAI.EMBEDDING_DIMENSIONS,
    )
    return asyncio.run(resource.init())


def upload_pdfs(csv_path: str, limit: Optional[int]) -> IngestionReport:
    cfg = SETTINGS.INGESTION
    uploader = AssistantUploader(
        assistant=pinecone_resource().assistant(),
        temp_dir=cfg.TEMP_DIR,
        max_file_bytes=cfg.MAX_FILE_BYTES,
        oversized_log_path=cfg.OVERSIZED_LOG_PATH,
        delay_seconds=cfg.DELAY_SECONDS,
        rate_limit_wait_seconds=cfg.RATE_LIMIT_WAIT_SECONDS,
        request_timeout=cfg.REQUEST_TIMEOUT,
        user_agent=cfg.USER_AGENT,
    )
    return uploader.run(read_records(csv_path, limit=limit))


def load_web(csv_path: str, limit: Optional[int]) -> IngestionReport:
    cfg = SETTINGS.INGESTION
    loader = WebLoader(
        vector_store=pinecone_resource().vector_store(),
        chunk_size=cfg.CHUNK_SIZE,
        chunk_overlap=cfg.CHUNK_OVERLAP,
        delay_seconds=cfg.WEB_DELAY_SECONDS,
        user_agent=cfg.USER_AGENT,
    )
    return loader.run(read_records(csv_path, limit=limit))


COMMANDS = {
    "upload-pdfs": (upload_pdfs, "Upload Summary"),
    "load-web": (load_web, "Web Load Summary"),
}


def main(argv: Optional[List[str]] = None) -> int:
    configure_logging()
    args = build_parser().parse_args(argv)

    missing = missing_keys(args.command)
    if missing:
        logger.error("Missing required configuration", keys=missing)
        print(f"Missing environment variables: {', '.join(missing)}", file=sys.stderr)
        return 1

    run, heading = COMMANDS[args.command]
    try:
        report = run(args.csv, args.limit)
    except FileNotFoundError as e:
        logger.error("CSV not found", csv_path=args.csv, error=str(e))
        print(f"CSV not found: {args.csv}", file=sys.stderr)
        return 1

    print("\n".join(report.summary_lines(heading)))
    return 0


if __name__ == "__main__":
    sys.exit(main())
