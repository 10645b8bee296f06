"""Conversation history shaping for prompts and chat-model calls."""
from __future__ import annotations

from typing import Any, Iterable, List, Literal, Mapping

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage
from pydantic import BaseModel

_ROLES = ("user", "assistant")


class ChatTurn(BaseModel):
    role: Literal["user", "assistant"]
    content: str


def _field(item: Any, name: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def normalize_history(history: Iterable[Any] | None, max_turns: int) -> List[ChatTurn]:
    """Keep the last ``max_turns`` well-formed turns.

    Accepts dicts, DTOs or ORM messages; entries with an unknown role or blank
    content are dropped.
    """
    turns: List[ChatTurn] = []
    for item in history or []:
        role = str(_field(item, "role") or "").strip().lower()
        content = str(_field(item, "content") or "").strip()
        if role not in _ROLES or not content:
            continue
        turns.append(ChatTurn(role=role, content=content))
    if max_turns <= 0:
        return []
    return turns[-max_turns:]


def history_to_text(turns: Iterable[ChatTurn]) -> str:
    labels = {"user": "User", "assistant": "Assistant"}
    return "\n".join(f"{labels[t.role]}: {t.content}" for t in turns)


def history_to_messages(turns: Iterable[ChatTurn]) -> List[BaseMessage]:
    return [
        HumanMessage(content=t.content) if t.role == "user" else AIMessage(content=t.content)
        for t in turns
    ]
