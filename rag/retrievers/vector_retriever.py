"""Vector retriever backed by the Pinecone article index and OpenAI embeddings.

Single source of truth for vector search used by the pipelines.
"""
from __future__ import annotations

from typing import List, Tuple

import structlog
from langchain_core.documents import Document
from langchain_core.vectorstores import VectorStore

from rag.exceptions import RetrievalError

logger = structlog.get_logger("rag.retrievers.vector")


async def vector_search(
    store: VectorStore, query: str, top_k: int = 5
) -> List[Tuple[Document, float]]:
    """Nearest-neighbour chunks for ``query`` with their similarity scores.

    Pinecone returns a similarity (higher is better) for cosine indexes. Each
    document's metadata is enriched with a human-readable ``document_name``
    taken from the article title stored at ingestion time.
    """
    try:
        raw_results = await store.asimilarity_search_with_score(query, k=top_k)
    except Exception as e:
        logger.error("Vector search failed", query=query, error=str(e))
        raise RetrievalError(str(e), {"query": query}) from e

    processed: List[Tuple[Document, float]] = []
    for doc, score in raw_results:
        meta = dict(doc.metadata or {})
        if "document_name" not in meta:
            meta["document_name"] = meta.get("title") or meta.get("source", "")
        doc.metadata = meta
        processed.append((doc, float(score) if score is not None else 0.0))
    logger.info("Vector search completed", query=query, results=len(processed))
    return processed
