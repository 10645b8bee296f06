"""Query Pipeline: vector retrieval → grounded answer with article sources.

- Embeds the question and fetches the nearest article chunks from Pinecone
- Uses OpenAI via LangChain (ChatOpenAI) for answering
- Sources are the retrieved chunks' articles, deduplicated by link
"""
from __future__ import annotations

import time
from typing import Any, Iterable, List, Optional

import structlog
from langchain_core.documents import Document
from langchain_core.language_models import BaseChatModel

from core.settings import SETTINGS
from infra.resources import PineconeResource
from rag.exceptions import AssistantError
from rag.history import history_to_text, normalize_history
from rag.llm import build_chat_model
from rag.pipeline.base import ChatAnswer, ChatPipeline
from rag.prompts.answer.final_answer import build_answer_prompt, format_evidence_lines
from rag.retrievers.vector_retriever import vector_search
from rag.sources import extract_sources

logger = structlog.get_logger("rag.pipeline.query")


class QueryPipeline(ChatPipeline):
    mode = "rag"

    def __init__(
        self,
        *,
        pinecone: PineconeResource,
        llm: Optional[BaseChatModel] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        top_k: int = 5,
        history_turns: int = 10,
    ):
        self.pinecone = pinecone
        self.llm = llm or build_chat_model(model=model, temperature=temperature)
        self.model = model or SETTINGS.OPENAI.CHAT_MODEL
        self.top_k = top_k
        self.history_turns = history_turns

    async def retrieve(self, *, question: str, k: Optional[int] = None) -> List[Document]:
        results = await vector_search(
            self.pinecone.vector_store(), question, top_k=k or self.top_k
        )
        return [doc for doc, _score in results]

    async def answer(
        self, *, question: str, history: Optional[Iterable[Any]] = None
    ) -> ChatAnswer:
        turns = normalize_history(history, self.history_turns)
        docs = await self.retrieve(question=question)

        prompt = build_answer_prompt(
            evidence_lines=format_evidence_lines(docs),
            question=question,
            history_text=history_to_text(turns) or None,
        )

        start = time.time()
        try:
            out = await self.llm.ainvoke(prompt)
        except Exception as e:
            logger.error("Answer generation failed", error=str(e))
            raise AssistantError("openai", str(e)) from e
        latency_ms = int((time.time() - start) * 1000)

        sources = extract_sources(docs)
        logger.info(
            "Answer generated",
            chunks=len(docs),
            sources=len(sources),
            latency_ms=latency_ms,
        )
        return ChatAnswer(
            answer=str(out.content),
            sources=sources,
            processing_info={
                "mode": self.mode,
                "retrieved_chunks": len(docs),
                "history_turns": len(turns),
                "latency_ms": latency_ms,
            },
            model_used=self.model,
        )
