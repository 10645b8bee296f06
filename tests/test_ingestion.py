"""
Tests for the ingestion records reader, PDF uploader and web loader
"""
from pathlib import Path
from unittest.mock import Mock, patch

import pytest
import requests
from langchain_core.documents import Document

from etl.download import download_pdf, pdf_url
from etl.exceptions import IngestionError, RateLimitedError, is_rate_limited
from etl.load_web import WebLoader
from etl.records import ArticleRecord, read_records
from etl.upload_assistant import AssistantUploader


def _records(n: int):
    return [ArticleRecord(title=f"Article {i}", link=f"https://x/PMC{i}/") for i in range(1, n + 1)]


class TestReadRecords:
    """Test CSV parsing"""

    def test_bom_and_blank_rows(self, tmp_path):
        csv_path = tmp_path / "articles.csv"
        csv_path.write_text(
            "\ufeffTitle,Link\n"
            "Bone loss,https://x/PMC1/\n"
            ",\n"
            "\"Plants, in space\",https://x/PMC2/\n",
            encoding="utf-8",
        )
        records = read_records(csv_path)
        assert records == [
            ArticleRecord(title="Bone loss", link="https://x/PMC1/"),
            ArticleRecord(title="Plants, in space", link="https://x/PMC2/"),
        ]

    def test_limit(self, tmp_path):
        csv_path = tmp_path / "articles.csv"
        csv_path.write_text("Title,Link\nA,https://x/a/\nB,https://x/b/\n", encoding="utf-8")
        assert len(read_records(csv_path, limit=1)) == 1


class TestDownload:
    """Test PDF download"""

    def test_pdf_url_appends_suffix(self):
        assert pdf_url("https://x/PMC1/") == "https://x/PMC1/pdf"

    @patch("etl.download.requests.get")
    def test_writes_file(self, mock_get, tmp_path):
        mock_get.return_value = Mock(status_code=200, content=b"%PDF-1.4", reason="OK")
        path = download_pdf("https://x/PMC1/", tmp_path / "1.pdf", timeout=5, user_agent="UA")
        assert path.read_bytes() == b"%PDF-1.4"
        args, kwargs = mock_get.call_args
        assert args[0] == "https://x/PMC1/pdf"
        assert kwargs["headers"] == {"User-Agent": "UA"}
        assert kwargs["timeout"] == 5

    @patch("etl.download.requests.get")
    def test_http_error_carries_status(self, mock_get, tmp_path):
        mock_get.return_value = Mock(status_code=403, content=b"", reason="Forbidden")
        with pytest.raises(IngestionError) as exc_info:
            download_pdf("https://x/PMC1/", tmp_path / "1.pdf")
        assert exc_info.value.status_code == 403

    @patch("etl.download.requests.get")
    def test_429_is_rate_limited(self, mock_get, tmp_path):
        mock_get.return_value = Mock(status_code=429, content=b"", reason="Too Many Requests")
        with pytest.raises(RateLimitedError):
            download_pdf("https://x/PMC1/", tmp_path / "1.pdf")

    def test_rate_limit_detection(self):
        assert is_rate_limited(RuntimeError("HTTP 429"))
        assert is_rate_limited(RuntimeError("Too many requests"))
        assert not is_rate_limited(RuntimeError("HTTP 500"))

    @patch("etl.download.requests.get")
    def test_link_digits_are_not_a_rate_limit(self, mock_get, tmp_path):
        mock_get.side_effect = requests.ConnectTimeout(
            "Max retries exceeded with url: /pmc/articles/PMC4291234/pdf"
        )
        with pytest.raises(IngestionError) as exc_info:
            download_pdf("https://x/PMC4291234/", tmp_path / "1.pdf")
        assert not is_rate_limited(exc_info.value)
        assert not is_rate_limited(RuntimeError("timeout for PMC4291234"))


class TestAssistantUploader:
    """Test per-record upload bookkeeping"""

    def setup_method(self):
        self.assistant = Mock()
        self.sleeps = []

    def _uploader(self, tmp_path, downloader, max_file_bytes=1024):
        return AssistantUploader(
            assistant=self.assistant,
            temp_dir=tmp_path / "temp_pdfs",
            max_file_bytes=max_file_bytes,
            oversized_log_path=tmp_path / "oversized.log",
            delay_seconds=3,
            rate_limit_wait_seconds=30,
            downloader=downloader,
            sleep=self.sleeps.append,
        )

    @staticmethod
    def _writer(sizes):
        def download(link, dest, **kwargs):
            dest = Path(dest)
            dest.write_bytes(b"x" * sizes[link])
            return dest
        return download

    def test_counts_always_sum_to_total(self, tmp_path):
        records = _records(3)
        sizes = {records[0].link: 10, records[1].link: 5000, records[2].link: 10}
        self.assistant.upload_file.side_effect = [None, RuntimeError("bad file")]

        report = self._uploader(tmp_path, self._writer(sizes)).run(records)

        assert (report.total, report.succeeded, report.failed, report.skipped) == (3, 1, 1, 1)
        assert report.processed == report.total

    def test_upload_sends_title_and_link_metadata(self, tmp_path):
        records = _records(1)
        self._uploader(tmp_path, self._writer({records[0].link: 10})).run(records)

        kwargs = self.assistant.upload_file.call_args.kwargs
        assert kwargs["metadata"] == {"title": "Article 1", "link": "https://x/PMC1/"}
        assert kwargs["file_path"].endswith("1.pdf")

    def test_oversized_file_is_logged_and_skipped(self, tmp_path):
        records = _records(1)
        report = self._uploader(
            tmp_path, self._writer({records[0].link: 2048}), max_file_bytes=1024
        ).run(records)

        assert report.skipped == 1
        self.assistant.upload_file.assert_not_called()
        log_line = (tmp_path / "oversized.log").read_text(encoding="utf-8").strip()
        assert log_line == "Article 1\thttps://x/PMC1/\t2048"

    def test_rate_limit_waits_once_then_continues(self, tmp_path):
        records = _records(2)
        sizes = {r.link: 10 for r in records}
        self.assistant.upload_file.side_effect = [RuntimeError("429 Too Many Requests"), None]

        report = self._uploader(tmp_path, self._writer(sizes)).run(records)

        assert (report.succeeded, report.failed) == (1, 1)
        assert self.sleeps == [30, 3, 3]

    def test_failure_on_link_with_429_digits_does_not_wait(self, tmp_path):
        records = [ArticleRecord(title="Article", link="https://x/PMC4291234/")]

        def timed_out(link, dest, **kwargs):
            raise IngestionError(f"Download failed: timeout for {link}pdf")

        report = self._uploader(tmp_path, timed_out).run(records)

        assert report.failed == 1
        assert self.sleeps == [3]

    def test_files_and_temp_dir_are_cleaned_up(self, tmp_path):
        records = _records(2)

        def failing_download(link, dest, **kwargs):
            raise IngestionError("HTTP 404", status_code=404)

        report = self._uploader(tmp_path, failing_download).run(records)

        assert report.failed == 2
        assert not (tmp_path / "temp_pdfs").exists()


class TestWebLoader:
    """Test web page indexing"""

    def setup_method(self):
        self.store = Mock()
        self.sleeps = []

    def _loader(self, pages):
        return WebLoader(
            vector_store=self.store,
            chunk_size=100,
            chunk_overlap=20,
            delay_seconds=1,
            page_loader=lambda link, user_agent: pages[link],
            sleep=self.sleeps.append,
        )

    def test_pages_are_split_and_tagged(self):
        records = _records(1)
        pages = {records[0].link: [Document(page_content="word " * 100, metadata={"source": "ignored"})]}

        report = self._loader(pages).run(records)

        assert report.succeeded == 1
        chunks = self.store.add_documents.call_args.args[0]
        assert len(chunks) > 1
        for chunk in chunks:
            assert chunk.metadata["title"] == "Article 1"
            assert chunk.metadata["source"] == "https://x/PMC1/"
            assert chunk.metadata["link"] == "https://x/PMC1/"
            assert "loaded_at" in chunk.metadata
        assert self.sleeps == [1]

    def test_empty_page_is_skipped_and_failures_counted(self):
        records = _records(2)
        pages = {records[0].link: [Document(page_content="   ")]}

        report = self._loader(pages).run(records)

        # Second link is missing from ``pages`` so the loader raises KeyError
        assert (report.total, report.succeeded, report.failed, report.skipped) == (2, 0, 1, 1)
        self.store.add_documents.assert_not_called()
