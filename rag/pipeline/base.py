"""Common contract of the chat answering pipelines."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, Field

from rag.sources import Source


class ChatAnswer(BaseModel):
    answer: str
    sources: List[Source] = Field(default_factory=list)
    processing_info: Dict[str, Any] = Field(default_factory=dict)
    model_used: Optional[str] = None


class ChatPipeline(ABC):
    """Answers a question given the recent conversation history."""

    mode: str

    @abstractmethod
    async def answer(
        self, *, question: str, history: Optional[Iterable[Any]] = None
    ) -> ChatAnswer:
        ...
