"""Final answer prompt builder.

Constructs an instruction to answer strictly from retrieved article excerpts,
citing the article titles they came from.
"""
from __future__ import annotations

from typing import Iterable, List, Optional

from langchain_core.documents import Document


def format_evidence_lines(docs: Iterable[Document]) -> List[str]:
    lines: List[str] = []
    for d in docs:
        md = d.metadata or {}
        title = md.get("title") or md.get("document_name") or "Untitled article"
        lines.append(f"[{title}] {d.page_content}")
    return lines


def build_answer_prompt(
    *, evidence_lines: List[str], question: str, history_text: Optional[str] = None
) -> str:
    evidence_block = "\n".join(evidence_lines or []) or "(no excerpts found)"
    prompt = (
        "You answer questions about scientific articles. "
        "Use ONLY the evidence to answer the question. "
        "Mention the article title in brackets, like [Article title], when you use it. "
        "If the evidence does not contain the answer, say so plainly.\n\n"
        f"Evidence:\n{evidence_block}\n\n"
        f"Question: {question}\n\n"
        "Answer:"
    )
    if history_text:
        prompt = (
            f"Conversation history (for context only, do NOT cite):\n{history_text}\n\n"
            + prompt
        )
    return prompt
