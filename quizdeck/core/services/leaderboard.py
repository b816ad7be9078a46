"""Service for ranking attempts on a leaderboard."""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable

from quizdeck.constants.quiz_constants import ANONYMOUS_USER_NAME, LEADERBOARD_LIMIT
from quizdeck.core.models import Attempt, LeaderboardEntry

NameResolver = Callable[[str], "str | None"]


def _ranking_key(attempt: Attempt) -> tuple[int, float]:
    time_taken = math.inf if attempt.time_taken is None else attempt.time_taken
    return (-attempt.score, time_taken)


class Leaderboard:
    """Ranks attempts by score (descending) and then by time taken (ascending)."""

    def __init__(
        self,
        resolve_name: NameResolver | None = None,
        resolve_quiz_title: NameResolver | None = None,
        resolve_avatar: NameResolver | None = None,
    ) -> None:
        self._resolve_name = resolve_name
        self._resolve_quiz_title = resolve_quiz_title
        self._resolve_avatar = resolve_avatar

    def rank(
        self,
        attempts: Iterable[Attempt],
        quiz_id: str | None = None,
        limit: int | None = LEADERBOARD_LIMIT,
    ) -> list[LeaderboardEntry]:
        """Return leaderboard rows; ``sorted`` is stable so ties keep submission order."""
        candidates = [a for a in attempts if quiz_id is None or a.quiz_id == quiz_id]
        ranked = sorted(candidates, key=_ranking_key)
        if limit is not None:
            ranked = ranked[:limit]
        return [self._to_entry(attempt) for attempt in ranked]

    def _to_entry(self, attempt: Attempt) -> LeaderboardEntry:
        return LeaderboardEntry(
            attempt_id=attempt.id,
            quiz_id=attempt.quiz_id,
            user_id=attempt.user_id,
            user_name=self._display_name(attempt.user_id),
            score=attempt.score,
            passed=attempt.passed,
            time_taken=attempt.time_taken,
            attempt_date=attempt.attempt_date,
            quiz_title=self._resolve_quiz_title(attempt.quiz_id) if self._resolve_quiz_title else None,
            user_avatar=self._avatar(attempt.user_id),
        )

    def _display_name(self, user_id: str | None) -> str:
        if user_id is None or self._resolve_name is None:
            return ANONYMOUS_USER_NAME
        return self._resolve_name(user_id) or ANONYMOUS_USER_NAME

    def _avatar(self, user_id: str | None) -> str | None:
        if user_id is None or self._resolve_avatar is None:
            return None
        return self._resolve_avatar(user_id)
