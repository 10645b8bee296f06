"""Outcome counters shared by the ingestion commands."""
from pydantic import BaseModel


class IngestionReport(BaseModel):
    total: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0

    @property
    def processed(self) -> int:
        return self.succeeded + self.failed + self.skipped

    def summary_lines(self, heading: str = "Upload Summary") -> list[str]:
        return [
            f"=== {heading} ===",
            f"Total: {self.total}",
            f"Success: {self.succeeded}",
            f"Failed: {self.failed}",
            f"Skipped: {self.skipped}",
        ]
