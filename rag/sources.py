"""Article citations attached to assistant answers.

A source is a (title, link) pair. Lists of sources are always deduplicated by
link, keeping the first occurrence so retrieval rank order survives.
"""
from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional

from langchain_core.documents import Document
from pydantic import BaseModel, ConfigDict


class Source(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    link: str


def _link_of(metadata: Mapping[str, Any]) -> Optional[str]:
    link = metadata.get("link") or metadata.get("source") or metadata.get("url")
    return str(link).strip() if link else None


def source_from_metadata(metadata: Mapping[str, Any]) -> Optional[Source]:
    link = _link_of(metadata)
    if not link:
        return None
    title = str(metadata.get("title") or metadata.get("document_name") or link).strip()
    return Source(title=title, link=link)


def dedupe_sources(items: Iterable[Source | Mapping[str, Any]]) -> List[Source]:
    """Collapse sources sharing a link; entries without a link are dropped."""
    seen: set[str] = set()
    unique: List[Source] = []
    for item in items:
        source = item if isinstance(item, Source) else source_from_metadata(item)
        if source is None or source.link in seen:
            continue
        seen.add(source.link)
        unique.append(source)
    return unique


def extract_sources(documents: Iterable[Document]) -> List[Source]:
    """Sources cited by retrieved chunks, in retrieval order."""
    return dedupe_sources(doc.metadata or {} for doc in documents)
