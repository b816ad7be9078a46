"""Append-only storage for scored attempts."""

from __future__ import annotations

from quizdeck.core.models import Attempt


class AttemptRepository:
    """Stores attempts in submission order. Records are never modified once appended."""

    def __init__(self) -> None:
        self._attempts: list[Attempt] = []

    def append(self, attempt: Attempt) -> None:
        if any(existing.id == attempt.id for existing in self._attempts):
            raise ValueError(f"Attempt {attempt.id} already recorded.")
        self._attempts.append(attempt)

    def get_attempts(self, quiz_id: str | None = None, user_id: str | None = None) -> list[Attempt]:
        """Return a snapshot of matching attempts in submission order."""
        return [
            attempt
            for attempt in self._attempts
            if (quiz_id is None or attempt.quiz_id == quiz_id)
            and (user_id is None or attempt.user_id == user_id)
        ]

    def count_by_quiz(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for attempt in self._attempts:
            counts[attempt.quiz_id] = counts.get(attempt.quiz_id, 0) + 1
        return counts

    def delete_for_quiz(self, quiz_id: str) -> int:
        """Drop every attempt of a deleted quiz and return how many were removed."""
        remaining = [attempt for attempt in self._attempts if attempt.quiz_id != quiz_id]
        removed = len(self._attempts) - len(remaining)
        self._attempts = remaining
        return removed
