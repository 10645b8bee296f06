"""Article list reader for the ingestion commands."""
from __future__ import annotations

import csv
from pathlib import Path
from typing import List, Optional

import structlog
from pydantic import BaseModel

logger = structlog.get_logger("etl.records")


class ArticleRecord(BaseModel):
    title: str
    link: str


def read_records(csv_path: str | Path, limit: Optional[int] = None) -> List[ArticleRecord]:
    """Read ``Title``/``Link`` rows from the publications CSV.

    A UTF-8 BOM is tolerated and rows without a link are skipped.
    """
    path = Path(csv_path)
    records: List[ArticleRecord] = []
    with path.open("r", encoding="utf-8-sig", newline="") as f:
        for row in csv.DictReader(f):
            title = (row.get("Title") or "").strip()
            link = (row.get("Link") or "").strip()
            if not link:
                continue
            records.append(ArticleRecord(title=title or link, link=link))
            if limit is not None and len(records) >= limit:
                break
    logger.info("Records loaded", csv_path=str(path), count=len(records))
    return records
