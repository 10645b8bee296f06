"""Upload article PDFs to the hosted Pinecone Assistant.

Each record is downloaded to a temp dir, size-checked, uploaded with its
``{title, link}`` metadata and removed again. Failures never stop the run:
they are counted and the next record is processed.
"""
from __future__ import annotations

import time
from pathlib import Path
from typing import Any, Callable, Iterable, List, Optional

import structlog

from etl.download import download_pdf
from etl.exceptions import is_rate_limited
from etl.records import ArticleRecord
from etl.report import IngestionReport

logger = structlog.get_logger("etl.upload_assistant")


class AssistantUploader:
    def __init__(
        self,
        *,
        assistant: Any,
        temp_dir: str | Path,
        max_file_bytes: int,
        oversized_log_path: str | Path,
        delay_seconds: float = 3.0,
        rate_limit_wait_seconds: float = 30.0,
        request_timeout: float = 60.0,
        user_agent: str = "Mozilla/5.0",
        downloader: Callable[..., Path] = download_pdf,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.assistant = assistant
        self.temp_dir = Path(temp_dir)
        self.max_file_bytes = max_file_bytes
        self.oversized_log_path = Path(oversized_log_path)
        self.delay_seconds = delay_seconds
        self.rate_limit_wait_seconds = rate_limit_wait_seconds
        self.request_timeout = request_timeout
        self.user_agent = user_agent
        self.downloader = downloader
        self.sleep = sleep

    def _log_oversized(self, record: ArticleRecord, size: int) -> None:
        with self.oversized_log_path.open("a", encoding="utf-8") as f:
            f.write(f"{record.title}\t{record.link}\t{size}\n")

    def _upload(self, path: Path, record: ArticleRecord) -> None:
        self.assistant.upload_file(
            file_path=str(path),
            metadata={"title": record.title, "link": record.link},
        )

    def process(self, position: int, record: ArticleRecord, report: IngestionReport) -> None:
        """Handle one record and update ``report`` with its outcome."""
        log = logger.bind(position=position, title=record.title, link=record.link)
        path: Optional[Path] = None
        try:
            path = self.downloader(
                record.link,
                self.temp_dir / f"{position}.pdf",
                timeout=self.request_timeout,
                user_agent=self.user_agent,
            )
            size = path.stat().st_size
            if size > self.max_file_bytes:
                self._log_oversized(record, size)
                report.skipped += 1
                log.warning("Skipping oversized file", size_bytes=size)
                return
            self._upload(path, record)
            report.succeeded += 1
            log.info("Uploaded to assistant", size_bytes=size)
        except Exception as e:
            report.failed += 1
            log.error("Skipping record", error=str(e))
            if is_rate_limited(e):
                log.warning("Rate limited, waiting", seconds=self.rate_limit_wait_seconds)
                self.sleep(self.rate_limit_wait_seconds)
        finally:
            if path is not None and path.exists():
                path.unlink()
            self.sleep(self.delay_seconds)

    def run(self, records: Iterable[ArticleRecord]) -> IngestionReport:
        items: List[ArticleRecord] = list(records)
        report = IngestionReport(total=len(items))
        self.temp_dir.mkdir(parents=True, exist_ok=True)
        for position, record in enumerate(items, start=1):
            logger.info("Processing record", position=position, total=report.total)
            self.process(position, record, report)

        if self.temp_dir.exists() and not any(self.temp_dir.iterdir()):
            self.temp_dir.rmdir()
        logger.info("Assistant upload finished", **report.model_dump())
        return report
