"""Conversation summary prompt used by the HTML report."""
from __future__ import annotations


def build_summary_prompt(*, transcript: str) -> str:
    return (
        "Summarize the following research conversation for a report. "
        "Write one short paragraph with the questions asked and the key findings "
        "from the answers, followed by at most five bullet points with takeaways. "
        "Do not invent facts that are not in the conversation.\n\n"
        f"Conversation:\n{transcript}\n\n"
        "Summary:"
    )
