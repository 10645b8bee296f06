"""Load article web pages into the Pinecone vector index.

Pages are fetched with LangChain's ``WebBaseLoader``, split into overlapping
chunks and embedded through the vector store (OpenAI, 512 dims).
"""
from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Callable, Iterable, List

import structlog
from langchain_community.document_loaders import WebBaseLoader
from langchain_core.documents import Document
from langchain_core.vectorstores import VectorStore
from langchain_text_splitters import RecursiveCharacterTextSplitter

from etl.records import ArticleRecord
from etl.report import IngestionReport

logger = structlog.get_logger("etl.load_web")


def load_page(link: str, user_agent: str) -> List[Document]:
    loader = WebBaseLoader(web_path=link, header_template={"User-Agent": user_agent})
    return loader.load()


class WebLoader:
    def __init__(
        self,
        *,
        vector_store: VectorStore,
        chunk_size: int = 1000,
        chunk_overlap: int = 200,
        delay_seconds: float = 1.0,
        user_agent: str = "Mozilla/5.0",
        page_loader: Callable[[str, str], List[Document]] = load_page,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.vector_store = vector_store
        self.splitter = RecursiveCharacterTextSplitter(
            chunk_size=chunk_size, chunk_overlap=chunk_overlap
        )
        self.delay_seconds = delay_seconds
        self.user_agent = user_agent
        self.page_loader = page_loader
        self.sleep = sleep

    def chunks_for(self, record: ArticleRecord, docs: Iterable[Document]) -> List[Document]:
        docs = list(docs)
        loaded_at = datetime.now(timezone.utc).isoformat()
        for doc in docs:
            doc.metadata = {
                **(doc.metadata or {}),
                "title": record.title,
                "source": record.link,
                "link": record.link,
                "loaded_at": loaded_at,
            }
        return self.splitter.split_documents(docs)

    def process(self, position: int, record: ArticleRecord, report: IngestionReport) -> None:
        log = logger.bind(position=position, title=record.title, link=record.link)
        try:
            docs = [d for d in self.page_loader(record.link, self.user_agent) if d.page_content.strip()]
            if not docs:
                report.skipped += 1
                log.warning("No content loaded")
                return
            chunks = self.chunks_for(record, docs)
            self.vector_store.add_documents(chunks)
            report.succeeded += 1
            log.info("Page indexed", chunks=len(chunks))
        except Exception as e:
            report.failed += 1
            log.error("Failed to index page", error=str(e))
        finally:
            self.sleep(self.delay_seconds)

    def run(self, records: Iterable[ArticleRecord]) -> IngestionReport:
        items = list(records)
        report = IngestionReport(total=len(items))
        for position, record in enumerate(items, start=1):
            self.process(position, record, report)
        logger.info("Web load finished", **report.model_dump())
        return report

