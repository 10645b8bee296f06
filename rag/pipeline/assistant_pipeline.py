"""Assistant Pipeline: delegate answering to the hosted Pinecone Assistant.

The assistant owns retrieval over the uploaded article PDFs; we only send the
conversation and collect the citations it returns.
"""
from __future__ import annotations

import asyncio
import time
from typing import Any, Dict, Iterable, List, Mapping, Optional

import structlog

from core.settings import SETTINGS
from infra.resources import PineconeResource
from rag.exceptions import AssistantError
from rag.history import normalize_history
from rag.pipeline.base import ChatAnswer, ChatPipeline
from rag.sources import Source, dedupe_sources

logger = structlog.get_logger("rag.pipeline.assistant")

NO_RESPONSE = "No response from assistant"


def _get(obj: Any, name: str) -> Any:
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


def citation_sources(response: Any) -> List[Source]:
    """Sources named by the file metadata of every citation reference."""
    metadata: List[Mapping[str, Any]] = []
    for citation in _get(response, "citations") or []:
        for reference in _get(citation, "references") or []:
            md = _get(_get(reference, "file"), "metadata")
            if md:
                metadata.append(md)
    return dedupe_sources(metadata)


class AssistantPipeline(ChatPipeline):
    mode = "assistant"

    def __init__(
        self,
        *,
        pinecone: PineconeResource,
        model: Optional[str] = None,
        history_turns: int = 10,
    ):
        self.pinecone = pinecone
        self.model = model or SETTINGS.PINECONE.ASSISTANT_MODEL
        self.history_turns = history_turns

    def _messages(self, question: str, history: Optional[Iterable[Any]]) -> List[Dict[str, str]]:
        turns = normalize_history(history, self.history_turns)
        messages = [{"role": t.role, "content": t.content} for t in turns]
        messages.append({"role": "user", "content": question})
        return messages

    async def answer(
        self, *, question: str, history: Optional[Iterable[Any]] = None
    ) -> ChatAnswer:
        messages = self._messages(question, history)
        start = time.time()
        try:
            assistant = self.pinecone.assistant()
            loop = asyncio.get_running_loop()
            response = await loop.run_in_executor(
                None, lambda: assistant.chat(messages=messages, model=self.model)
            )
        except Exception as e:
            logger.error("Assistant chat failed", error=str(e))
            raise AssistantError("pinecone-assistant", str(e)) from e
        latency_ms = int((time.time() - start) * 1000)

        content = _get(_get(response, "message"), "content")
        sources = citation_sources(response)
        logger.info(
            "Assistant answer received",
            sources=len(sources),
            latency_ms=latency_ms,
        )
        return ChatAnswer(
            answer=str(content) if content else NO_RESPONSE,
            sources=sources,
            processing_info={
                "mode": self.mode,
                "history_turns": len(messages) - 1,
                "latency_ms": latency_ms,
            },
            model_used=self.model,
        )
