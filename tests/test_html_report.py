"""
Tests for the conversation HTML report
"""
from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from rag.exceptions import AssistantError
from rag.report.html_report import ReportGenerator
from tests.fakes import make_llm


MESSAGES = [
    {"role": "user", "content": "Does <b>radiation</b> harm mice?"},
    {
        "role": "assistant",
        "content": "Yes, it damages DNA.",
        "sources": [
            {"title": "Radiation & DNA", "link": "https://x/PMC3/?a=1&b=2"},
            {"title": "Radiation & DNA", "link": "https://x/PMC3/?a=1&b=2"},
        ],
    },
]


class TestReportGenerator:
    """Test report summary and rendering"""

    def setup_method(self):
        self.llm = make_llm("Mice exposed to radiation show DNA damage.")
        self.generator = ReportGenerator(llm=self.llm)

    def test_render_escapes_user_text(self):
        html = ReportGenerator.render(
            title="<script>alert(1)</script>",
            summary="Short summary",
            messages=MESSAGES,
            generated_at=datetime(2025, 1, 2, 3, 4, tzinfo=timezone.utc),
        )
        assert "<script>alert(1)</script>" not in html
        assert "&lt;script&gt;" in html
        assert "&lt;b&gt;radiation&lt;/b&gt;" in html
        assert "Generated 2025-01-02 03:04 UTC" in html
        assert html.startswith("<!DOCTYPE html>")

    def test_render_lists_each_source_once(self):
        html = ReportGenerator.render(title="T", summary="", messages=MESSAGES)
        assert html.count('href="https://x/PMC3/?a=1&amp;b=2"') == 1
        assert "Radiation &amp; DNA" in html
        assert "<h2>Summary</h2>" not in html

    def test_render_skips_unknown_roles(self):
        html = ReportGenerator.render(
            title="T", summary="", messages=[{"role": "system", "content": "secret"}]
        )
        assert "secret" not in html

    @pytest.mark.asyncio
    async def test_generate_summarizes_whole_conversation(self):
        html = await self.generator.generate(title="Radiation", messages=MESSAGES)

        assert "Mice exposed to radiation show DNA damage." in html
        prompt = self.llm.ainvoke.await_args.args[0]
        assert "User: Does <b>radiation</b> harm mice?" in prompt
        assert "Assistant: Yes, it damages DNA." in prompt

    @pytest.mark.asyncio
    async def test_summary_failure_raises(self):
        self.llm.ainvoke = AsyncMock(side_effect=RuntimeError("down"))
        with pytest.raises(AssistantError):
            await self.generator.generate(title="T", messages=MESSAGES)

    @pytest.mark.asyncio
    async def test_empty_conversation_skips_model(self):
        html = await self.generator.generate(title="Empty", messages=[])
        self.llm.ainvoke.assert_not_awaited()
        assert "<h1>Empty</h1>" in html
