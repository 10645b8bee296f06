"""Chat model factory shared by the pipelines and the report generator."""
from __future__ import annotations

from typing import Optional

from langchain_openai import ChatOpenAI

from core.settings import SETTINGS


def build_chat_model(
    *, model: Optional[str] = None, temperature: Optional[float] = None
) -> ChatOpenAI:
    api_key = SETTINGS.OPENAI.OPENAI_API_KEY.get_secret_value() or None
    return ChatOpenAI(
        model=model or SETTINGS.OPENAI.CHAT_MODEL,
        temperature=SETTINGS.OPENAI.TEMPERATURE if temperature is None else temperature,
        api_key=api_key,
    )
