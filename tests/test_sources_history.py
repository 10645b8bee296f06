"""
Tests for citation deduplication and history shaping
"""
from langchain_core.documents import Document
from langchain_core.messages import AIMessage, HumanMessage

from rag.history import history_to_messages, history_to_text, normalize_history
from rag.sources import Source, dedupe_sources, extract_sources, source_from_metadata


class TestSources:
    """Test Source extraction and dedupe"""

    def test_dedupe_keeps_first_occurrence_in_order(self):
        sources = dedupe_sources(
            [
                {"title": "B", "link": "https://x/b/"},
                {"title": "A", "link": "https://x/a/"},
                {"title": "B duplicate", "link": "https://x/b/"},
                Source(title="C", link="https://x/c/"),
            ]
        )
        assert [(s.title, s.link) for s in sources] == [
            ("B", "https://x/b/"),
            ("A", "https://x/a/"),
            ("C", "https://x/c/"),
        ]

    def test_entries_without_link_are_dropped(self):
        assert dedupe_sources([{"title": "Orphan"}, {"title": "Blank", "link": "  "}]) == []

    def test_source_link_falls_back_to_source_key(self):
        source = source_from_metadata({"title": "Page", "source": "https://x/page/"})
        assert source == Source(title="Page", link="https://x/page/")

    def test_title_defaults_to_link(self):
        source = source_from_metadata({"link": "https://x/untitled/"})
        assert source.title == "https://x/untitled/"

    def test_extract_sources_from_documents(self):
        docs = [
            Document(page_content="one", metadata={"title": "A", "link": "https://x/a/"}),
            Document(page_content="two", metadata={"title": "A", "link": "https://x/a/"}),
            Document(page_content="three", metadata={"document_name": "B", "source": "https://x/b/"}),
        ]
        assert extract_sources(docs) == [
            Source(title="A", link="https://x/a/"),
            Source(title="B", link="https://x/b/"),
        ]


class TestHistory:
    """Test history normalization and rendering"""

    def test_normalize_drops_bad_entries_and_keeps_last_turns(self):
        history = [
            {"role": "user", "content": "q1"},
            {"role": "assistant", "content": "a1"},
            {"role": "system", "content": "ignored"},
            {"role": "user", "content": "   "},
            {"role": "USER", "content": "q2"},
        ]
        turns = normalize_history(history, max_turns=2)
        assert [(t.role, t.content) for t in turns] == [("assistant", "a1"), ("user", "q2")]

    def test_normalize_accepts_objects(self):
        class Row:
            def __init__(self, role, content):
                self.role = role
                self.content = content

        turns = normalize_history([Row("user", "hello")], max_turns=10)
        assert turns[0].content == "hello"

    def test_zero_turns_means_no_history(self):
        assert normalize_history([{"role": "user", "content": "q"}], max_turns=0) == []

    def test_history_to_text(self):
        turns = normalize_history(
            [{"role": "user", "content": "Hi"}, {"role": "assistant", "content": "Hello"}], 10
        )
        assert history_to_text(turns) == "User: Hi\nAssistant: Hello"

    def test_history_to_messages(self):
        turns = normalize_history(
            [{"role": "user", "content": "Hi"}, {"role": "assistant", "content": "Hello"}], 10
        )
        messages = history_to_messages(turns)
        assert isinstance(messages[0], HumanMessage)
        assert isinstance(messages[1], AIMessage)
        assert messages[1].content == "Hello"
