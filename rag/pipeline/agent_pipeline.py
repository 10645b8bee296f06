"""Agent Pipeline: the chat model decides whether to search the article index.

The model is bound to a single ``SearchArticles`` tool. Each round executes the
tool calls it emits against the vector index and feeds the excerpts back as
tool messages; once the model answers without calling a tool (or the round
budget is spent) its reply becomes the answer. Sources are every article the
tool returned, deduplicated by link.
"""
from __future__ import annotations

import time
from typing import Any, Dict, Iterable, List, Optional

import structlog
from langchain_core.documents import Document
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import (
    BaseMessage,
    HumanMessage,
    SystemMessage,
    ToolMessage,
)
from pydantic import BaseModel, Field

from core.settings import SETTINGS
from infra.resources import PineconeResource
from rag.exceptions import AssistantError, RetrievalError
from rag.history import history_to_messages, normalize_history
from rag.llm import build_chat_model
from rag.pipeline.base import ChatAnswer, ChatPipeline
from rag.prompts.agent.system_prompt import AGENT_SYSTEM_PROMPT
from rag.prompts.answer.final_answer import format_evidence_lines
from rag.retrievers.vector_retriever import vector_search
from rag.sources import extract_sources

logger = structlog.get_logger("rag.pipeline.agent")


class SearchArticles(BaseModel):
    """Search the scientific article corpus for passages relevant to a query."""

    query: str = Field(description="Focused search query in English")


class AgentPipeline(ChatPipeline):
    mode = "agent"

    def __init__(
        self,
        *,
        pinecone: PineconeResource,
        llm: Optional[BaseChatModel] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        top_k: int = 5,
        history_turns: int = 10,
        max_tool_rounds: int = 2,
    ):
        self.pinecone = pinecone
        self.llm = llm or build_chat_model(model=model, temperature=temperature)
        self.model = model or SETTINGS.OPENAI.CHAT_MODEL
        self.top_k = top_k
        self.history_turns = history_turns
        self.max_tool_rounds = max_tool_rounds

    async def search(self, query: str) -> List[Document]:
        results = await vector_search(self.pinecone.vector_store(), query, top_k=self.top_k)
        return [doc for doc, _score in results]

    async def _run_tool_call(
        self, call: Dict[str, Any], question: str, collected: List[Document]
    ) -> ToolMessage:
        if call.get("name") != SearchArticles.__name__:
            return ToolMessage(content="Tool not found", tool_call_id=call["id"])
        query = str((call.get("args") or {}).get("query") or question)
        docs = await self.search(query)
        collected.extend(docs)
        content = "\n\n".join(format_evidence_lines(docs)) or "No matching articles found."
        return ToolMessage(content=content, tool_call_id=call["id"])

    async def answer(
        self, *, question: str, history: Optional[Iterable[Any]] = None
    ) -> ChatAnswer:
        turns = normalize_history(history, self.history_turns)
        messages: List[BaseMessage] = [
            SystemMessage(content=AGENT_SYSTEM_PROMPT),
            *history_to_messages(turns),
            HumanMessage(content=question),
        ]
        llm_with_tools = self.llm.bind_tools([SearchArticles])
        collected: List[Document] = []
        searches = 0
        start = time.time()

        try:
            reply = None
            for _round in range(self.max_tool_rounds):
                reply = await llm_with_tools.ainvoke(messages)
                tool_calls = getattr(reply, "tool_calls", None) or []
                if not tool_calls:
                    break
                messages.append(reply)
                for call in tool_calls:
                    messages.append(await self._run_tool_call(call, question, collected))
                    searches += 1
                reply = None
            if reply is None:
                # Round budget spent on searches: answer from what was found
                reply = await self.llm.ainvoke(messages)
        except (AssistantError, RetrievalError):
            raise
        except Exception as e:
            logger.error("Agent run failed", error=str(e))
            raise AssistantError("openai", str(e)) from e

        sources = extract_sources(collected)
        latency_ms = int((time.time() - start) * 1000)
        logger.info(
            "Agent answer generated",
            searches=searches,
            sources=len(sources),
            latency_ms=latency_ms,
        )
        return ChatAnswer(
            answer=str(reply.content),
            sources=sources,
            processing_info={
                "mode": self.mode,
                "searches": searches,
                "retrieved_chunks": len(collected),
                "history_turns": len(turns),
                "latency_ms": latency_ms,
            },
            model_used=self.model,
        )
