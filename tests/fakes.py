"""Fakes for the chat model, the Pinecone resource and the answering pipeline."""
from types import SimpleNamespace
from typing import List, Optional, Tuple
from unittest.mock import AsyncMock, Mock

from langchain_core.documents import Document
from langchain_core.messages import AIMessage

from rag.pipeline.base import ChatAnswer, ChatPipeline
from rag.sources import Source


def make_llm(*replies: str) -> Mock:
    """Chat model fake whose ``ainvoke`` returns the given replies in order."""
    llm = Mock()
    llm.ainvoke = AsyncMock(side_effect=[AIMessage(content=r) for r in replies])
    return llm


def make_docs(*items: Tuple[str, str, str]) -> List[Tuple[Document, float]]:
    """(title, link, content) triples as vector search results."""
    return [
        (Document(page_content=content, metadata={"title": title, "link": link}), 0.9 - i * 0.1)
        for i, (title, link, content) in enumerate(items)
    ]


def make_pinecone(results=None, assistant=None) -> Mock:
    """PineconeResource fake with a vector store and an assistant handle."""
    store = Mock()
    store.asimilarity_search_with_score = AsyncMock(return_value=results or [])
    pinecone = Mock()
    pinecone.vector_store.return_value = store
    pinecone.assistant.return_value = assistant or Mock()
    return pinecone


def assistant_response(content: Optional[str], *metadata: dict) -> SimpleNamespace:
    """Pinecone Assistant chat response with one citation per metadata dict."""
    citations = [
        SimpleNamespace(references=[SimpleNamespace(file=SimpleNamespace(metadata=md))])
        for md in metadata
    ]
    return SimpleNamespace(message=SimpleNamespace(content=content), citations=citations)


class StubPipeline(ChatPipeline):
    """Pipeline returning a fixed answer and recording its calls."""

    mode = "stub"

    def __init__(self, answer: str = "Stub answer", sources: Optional[List[Source]] = None):
        self._answer = answer
        self._sources = sources or []
        self.calls: List[dict] = []
        self.error: Optional[Exception] = None

    async def answer(self, *, question, history=None) -> ChatAnswer:
        self.calls.append({"question": question, "history": list(history or [])})
        if self.error is not None:
            raise self.error
        return ChatAnswer(answer=self._answer, sources=self._sources)
