"""Service for recording players' reports about faulty questions."""

from __future__ import annotations

from datetime import datetime, timezone
import json
import logging
from pathlib import Path
from threading import Lock
from typing import Literal

from pydantic import BaseModel, Field, ValidationError

from trivia_night.core.errors import PersistenceError
from trivia_night.core.models import Category, Language, Question

logger = logging.getLogger(__name__)


class QuestionReport(BaseModel):
    question_id: str | int
    question: str
    category: Category
    language: Language
    description: str | None = None
    status: Literal["pending", "reviewed", "fixed", "rejected"] = "pending"
    reported_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def for_question(cls, question: Question, description: str | None = None) -> "QuestionReport":
        cleaned = description.strip() if description else None
        return cls(
            question_id=question.id,
            question=question.text,
            category=question.category,
            language=question.language,
            description=cleaned or None,
        )


class QuestionReportLog:
    """Appends reports to a JSON-lines file."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._lock = Lock()

    def record(self, report: QuestionReport) -> None:
        with self._lock:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with self.path.open("a", encoding="utf-8") as handle:
                    handle.write(report.model_dump_json() + "\n")
            except OSError as exc:
                raise PersistenceError(f"Could not record question report: {exc}") from exc
        logger.info("Recorded report for question %s (%s)", report.question_id, report.category.value)

    def list_reports(self) -> list[QuestionReport]:
        with self._lock:
            if not self.path.exists():
                return []
            lines = self.path.read_text(encoding="utf-8").splitlines()
        reports: list[QuestionReport] = []
        for line in lines:
            if not line.strip():
                continue
            try:
                reports.append(QuestionReport.model_validate(json.loads(line)))
            except (json.JSONDecodeError, ValidationError) as exc:
                logger.warning("Skipping unreadable question report: %s", exc)
        return reports
