"""Service for loading the question pool of a language and category.

Pool files live at ``<root>/<language>/<category>.json`` and hold a list of
records::

    [
      {"id": 1, "question": "Who painted the Mona Lisa?",
       "options": {"a": "Leonardo da Vinci", "b": "Michelangelo"},
       "answer": "a"},
      {"id": 2, "question": "Capital of Australia?", "answer": "Canberra"}
    ]

``options`` is optional; without it the question is answered aloud and
``answer`` holds the answer text. ``correctAnswerKey`` is accepted in place
of ``answer``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from threading import Lock
from typing import Any

from trivia_night.core.errors import PoolUnavailable
from trivia_night.core.models import Category, Language, Question

logger = logging.getLogger(__name__)


class QuestionPool:
    """Reads and caches question pools from a directory tree."""

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root)
        self._cache: dict[tuple[Language, Category], tuple[Question, ...]] = {}
        self._lock = Lock()

    @property
    def root(self) -> Path:
        return self._root

    def load_questions(self, language: Language, category: Category) -> tuple[Question, ...]:
        """Return every question for ``language`` and ``category``.

        Raises PoolUnavailable when the file is missing, unreadable or invalid.
        """
        key = (language, category)
        with self._lock:
            cached = self._cache.get(key)
            if cached is not None:
                return cached
            questions = self._read_pool(language, category)
            self._cache[key] = questions
            return questions

    def pool_path(self, language: Language, category: Category) -> Path:
        return self._root / language.value / f"{category.value}.json"

    def _read_pool(self, language: Language, category: Category) -> tuple[Question, ...]:
        path = self.pool_path(language, category)
        try:
            records = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise PoolUnavailable(f"No {language.value} questions for {category.value}.") from exc
        except (OSError, json.JSONDecodeError) as exc:
            raise PoolUnavailable(f"Could not read question pool {path}: {exc}") from exc

        if not isinstance(records, list):
            raise PoolUnavailable(f"Question pool {path} must contain a list of questions.")

        questions: list[Question] = []
        seen_ids: set[str | int] = set()
        for position, record in enumerate(records):
            try:
                question = self._prepare_question(record, language, category)
            except ValueError as exc:
                raise PoolUnavailable(f"Invalid question #{position + 1} in {path}: {exc}") from exc
            if question.id in seen_ids:
                raise PoolUnavailable(f"Duplicate question id {question.id!r} in {path}.")
            seen_ids.add(question.id)
            questions.append(question)

        logger.info("Loaded %d %s questions for %s", len(questions), language.value, category.value)
        return tuple(questions)

    def _prepare_question(self, record: Any, language: Language, category: Category) -> Question:
        """Validate and normalize one pool record."""
        if not isinstance(record, dict):
            raise ValueError("Question entries must be objects.")

        question_id = record.get("id")
        if isinstance(question_id, bool) or not isinstance(question_id, (str, int)):
            raise ValueError("Question id must be a string or an integer.")

        text = str(record.get("question") or record.get("text") or "").strip()
        if not text:
            raise ValueError("Question text must not be empty.")

        answer = str(record.get("correctAnswerKey") or record.get("answer") or "").strip()
        if not answer:
            raise ValueError("Question must define its answer.")

        options = self._validate_options(record.get("options"))
        if options is not None:
            answer = answer.lower()
            if answer not in options:
                raise ValueError(f"Answer key '{answer}' is not one of the options.")

        return Question(
            id=question_id,
            text=text,
            category=category,
            language=language,
            correct_answer_key=answer,
            options=options,
        )

    @staticmethod
    def _validate_options(options: Any) -> dict[str, str] | None:
        if not options:
            return None
        if not isinstance(options, dict):
            raise ValueError("Options must map choice keys to text.")
        cleaned = {str(key).strip().lower(): str(value).strip() for key, value in options.items()}
        if len(cleaned) < 2:
            raise ValueError("A multiple-choice question needs at least two options.")
        if any(not key or not value for key, value in cleaned.items()):
            raise ValueError("Option keys and text cannot be empty.")
        return cleaned
