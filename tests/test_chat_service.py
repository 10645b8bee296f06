"""
Tests for the chat service persistence flow
"""
import uuid
from unittest.mock import AsyncMock, Mock

import pytest

from api.features.chat.service import ChatService, title_from_message
from api.features.conversation.exceptions import ConversationNotFoundError
from api.features.conversation.service import ConversationService


class TestTitleFromMessage:
    """Test conversation titles derived from the first message"""

    def test_short_message_is_kept(self):
        assert title_from_message("  How do  plants grow? ", 60) == "How do plants grow?"

    def test_long_message_is_trimmed(self):
        title = title_from_message("word " * 40, 60)
        assert len(title) <= 60
        assert title.endswith("...")


class TestChatService:
    """Test answering with and without a stored conversation"""

    def setup_method(self):
        self.conversations = ConversationService()
        self.report_generator = Mock()
        self.report_generator.generate = AsyncMock(return_value="<html>report</html>")

    def _service(self, pipeline, report_generator=None):
        return ChatService(
            pipeline=pipeline,
            conversation_service=self.conversations,
            report_generator=report_generator,
            history_turns=10,
            title_max_length=60,
        )

    @pytest.mark.asyncio
    async def test_anonymous_answer_is_not_stored(self, stub_pipeline):
        service = self._service(stub_pipeline)
        result = await service.answer(message="Bones?", history=[{"role": "user", "content": "Hi"}])
        assert result.answer == "Microgravity reduces bone density."
        assert [(t.role, t.content) for t in stub_pipeline.calls[0]["history"]] == [("user", "Hi")]

    @pytest.mark.asyncio
    async def test_new_conversation_stores_both_turns_and_report(self, db_session, stub_pipeline):
        service = self._service(stub_pipeline, self.report_generator)

        result, conversation_id = await service.chat(
            user_id="alice", message="What does microgravity do to bones?", db_session=db_session
        )

        conv = await self.conversations.get_conversation(
            conversation_id=conversation_id, user_id="alice", db_session=db_session
        )
        assert conv.title == "What does microgravity do to bones?"
        assert [(m.role, m.content) for m in conv.messages] == [
            ("user", "What does microgravity do to bones?"),
            ("assistant", "Microgravity reduces bone density."),
        ]
        assert conv.messages[0].sources is None
        assert conv.messages[1].sources == [
            {"title": "Bone loss in spaceflight", "link": "https://example.org/PMC1/"},
            {"title": "Mouse femur study", "link": "https://example.org/PMC2/"},
        ]
        assert conv.html_report == "<html>report</html>"
        assert len(result.sources) == 2

        kwargs = self.report_generator.generate.await_args.kwargs
        assert kwargs["title"] == conv.title
        assert len(kwargs["messages"]) == 2

    @pytest.mark.asyncio
    async def test_stored_history_is_used_when_none_sent(self, db_session, stub_pipeline):
        service = self._service(stub_pipeline)
        _, conversation_id = await service.chat(
            user_id="alice", message="First question", db_session=db_session
        )

        await service.chat(
            user_id="alice",
            message="Follow-up",
            conversation_id=conversation_id,
            db_session=db_session,
        )

        history = stub_pipeline.calls[1]["history"]
        assert [(m.role, m.content) for m in history] == [
            ("user", "First question"),
            ("assistant", "Microgravity reduces bone density."),
        ]

    @pytest.mark.asyncio
    async def test_sent_history_overrides_stored(self, db_session, stub_pipeline):
        service = self._service(stub_pipeline)
        sent = [{"role": "user", "content": "From the client"}]
        await service.chat(user_id="alice", message="Q", history=sent, db_session=db_session)
        assert [(t.role, t.content) for t in stub_pipeline.calls[0]["history"]] == [
            ("user", "From the client")
        ]

    @pytest.mark.asyncio
    async def test_unknown_conversation_raises(self, db_session, stub_pipeline):
        service = self._service(stub_pipeline)
        with pytest.raises(ConversationNotFoundError):
            await service.chat(
                user_id="alice",
                message="Q",
                conversation_id=uuid.uuid4(),
                db_session=db_session,
            )
        assert stub_pipeline.calls == []

    @pytest.mark.asyncio
    async def test_report_failure_does_not_fail_chat(self, db_session, stub_pipeline):
        self.report_generator.generate = AsyncMock(side_effect=RuntimeError("model down"))
        service = self._service(stub_pipeline, self.report_generator)

        result, conversation_id = await service.chat(
            user_id="alice", message="Q", db_session=db_session
        )

        assert result.answer == "Microgravity reduces bone density."
        conv = await self.conversations.get_conversation(
            conversation_id=conversation_id, user_id="alice", db_session=db_session
        )
        assert len(conv.messages) == 2
        assert conv.html_report is None

    @pytest.mark.asyncio
    async def test_pipeline_failure_propagates_without_storing_turns(self, db_session, stub_pipeline):
        stub_pipeline.error = RuntimeError("assistant down")
        service = self._service(stub_pipeline)
        with pytest.raises(RuntimeError):
            await service.chat(user_id="alice", message="Q", db_session=db_session)

        items = await self.conversations.list_conversations(
            user_id="alice", limit=10, db_session=db_session
        )
        assert all(last is None for _, last in items)
