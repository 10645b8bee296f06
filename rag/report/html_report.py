"""HTML report of a conversation: model-written summary plus the full exchange."""
from __future__ import annotations

import html
from datetime import datetime, timezone
from typing import Any, Iterable, List, Mapping, Optional

import structlog
from langchain_core.language_models import BaseChatModel

from rag.exceptions import AssistantError
from rag.history import ChatTurn, history_to_text, normalize_history
from rag.llm import build_chat_model
from rag.prompts.report.summary import build_summary_prompt
from rag.sources import Source, dedupe_sources

logger = structlog.get_logger("rag.report")

_STYLE = """
body { font-family: -apple-system, "Segoe UI", Roboto, sans-serif; max-width: 860px;
       margin: 2rem auto; padding: 0 1rem; color: #1f2933; line-height: 1.55; }
h1 { font-size: 1.6rem; margin-bottom: .25rem; }
.meta { color: #616e7c; font-size: .85rem; }
.summary { background: #f5f7fa; border-left: 4px solid #3e4c59; padding: .75rem 1rem; }
.msg { margin: 1rem 0; padding: .75rem 1rem; border-radius: 6px; }
.msg.user { background: #e3f8ff; }
.msg.assistant { background: #f0f4f8; }
.role { font-weight: 600; font-size: .8rem; text-transform: uppercase; color: #52606d; }
.sources { font-size: .85rem; margin: .5rem 0 0; padding-left: 1.2rem; }
"""


def _field(item: Any, name: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def _text_block(text: str) -> str:
    return "<br>".join(html.escape(line) for line in text.splitlines())


def _render_sources(sources: List[Source]) -> str:
    if not sources:
        return ""
    items = "".join(
        f'<li><a href="{html.escape(s.link, quote=True)}" target="_blank" '
        f'rel="noopener">{html.escape(s.title)}</a></li>'
        for s in sources
    )
    return f'<ul class="sources">{items}</ul>'


class ReportGenerator:
    """Builds the self-contained HTML report stored on a conversation."""

    def __init__(
        self,
        *,
        llm: Optional[BaseChatModel] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
    ):
        self.llm = llm or build_chat_model(model=model, temperature=temperature)

    async def summarize(self, turns: List[ChatTurn]) -> str:
        if not turns:
            return ""
        prompt = build_summary_prompt(transcript=history_to_text(turns))
        try:
            out = await self.llm.ainvoke(prompt)
        except Exception as e:
            logger.error("Report summary failed", error=str(e))
            raise AssistantError("openai", str(e)) from e
        return str(out.content).strip()

    @staticmethod
    def render(
        *,
        title: str,
        summary: str,
        messages: Iterable[Any],
        generated_at: Optional[datetime] = None,
    ) -> str:
        """Render the report document; every piece of user text is escaped."""
        generated_at = generated_at or datetime.now(timezone.utc)
        blocks: List[str] = []
        for message in messages:
            role = str(_field(message, "role") or "")
            content = str(_field(message, "content") or "")
            if role not in ("user", "assistant") or not content.strip():
                continue
            label = "You" if role == "user" else "Assistant"
            sources = dedupe_sources(_field(message, "sources") or [])
            blocks.append(
                f'<div class="msg {role}"><div class="role">{label}</div>'
                f"<div>{_text_block(content)}</div>{_render_sources(sources)}</div>"
            )

        safe_title = html.escape(title)
        summary_html = (
            f'<h2>Summary</h2><div class="summary">{_text_block(summary)}</div>'
            if summary
            else ""
        )
        return (
            "<!DOCTYPE html>\n"
            '<html lang="en"><head><meta charset="utf-8">'
            f"<title>{safe_title}</title><style>{_STYLE}</style></head><body>"
            f"<h1>{safe_title}</h1>"
            f'<p class="meta">Generated {generated_at.strftime("%Y-%m-%d %H:%M UTC")}</p>'
            f"{summary_html}"
            f"<h2>Conversation</h2>{''.join(blocks)}"
            "</body></html>"
        )

    async def generate(self, *, title: str, messages: Iterable[Any]) -> str:
        messages = list(messages)
        # Summary covers the whole conversation, not just the recent window
        turns = normalize_history(messages, max_turns=len(messages))
        summary = await self.summarize(turns)
        report = self.render(title=title, summary=summary, messages=messages)
        logger.info("Report generated", messages=len(messages), size=len(report))
        return report
