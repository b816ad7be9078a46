"""Service computing per-quiz analytics from attempt history."""

from __future__ import annotations

import calendar
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from quizdeck.constants.quiz_constants import (
    EASY_SUCCESS_RATE_THRESHOLD,
    MEDIUM_SUCCESS_RATE_THRESHOLD,
    QUESTION_TEXT_PREVIEW_LENGTH,
    SCORE_DISTRIBUTION_BUCKETS,
)
from quizdeck.core.exceptions import NoAttemptsInRange
from quizdeck.core.models import (
    AnalyticsSummary,
    Attempt,
    DateRange,
    Difficulty,
    QuestionPerformance,
    Quiz,
    ScoreBucket,
    TimeBucket,
)
from quizdeck.core.scoring import is_correct, percentage, round_half_up

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# date range -> (bucket count, bucket width in days, label format)
_SERIES_LAYOUT: dict[DateRange, tuple[int, int, str]] = {
    DateRange.WEEK: (7, 1, "%m/%d"),
    DateRange.MONTH: (30, 1, "%m/%d"),
    DateRange.YEAR: (12, 30, "%b"),
    DateRange.ALL: (12, 30, "%b %y"),
}


def subtract_months(moment: datetime, months: int) -> datetime:
    """Calendar month subtraction, clamping the day to the target month's length."""
    month_index = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def window_start(now: datetime, date_range: DateRange) -> datetime:
    if date_range is DateRange.WEEK:
        return now - timedelta(days=7)
    if date_range is DateRange.MONTH:
        return subtract_months(now, 1)
    if date_range is DateRange.YEAR:
        return subtract_months(now, 12)
    return EPOCH


def difficulty_for(success_rate: int) -> Difficulty:
    if success_rate > EASY_SUCCESS_RATE_THRESHOLD:
        return Difficulty.EASY
    if success_rate > MEDIUM_SUCCESS_RATE_THRESHOLD:
        return Difficulty.MEDIUM
    return Difficulty.HARD


@dataclass(slots=True)
class _PeriodTotals:
    attempts: int
    average_score: int
    pass_rate: int
    average_time: int


def _totals(attempts: list[Attempt]) -> _PeriodTotals:
    count = len(attempts)
    passed = sum(1 for attempt in attempts if attempt.passed)
    timed = [attempt.time_taken for attempt in attempts if attempt.time_taken is not None]
    average_time = round_half_up(sum(timed) / len(timed)) if timed else 0
    return _PeriodTotals(
        attempts=count,
        average_score=round_half_up(sum(a.score for a in attempts) / count) if count else 0,
        pass_rate=percentage(passed, count) if count else 0,
        average_time=average_time,
    )


def _change(current: int, previous: int) -> int | None:
    if previous == 0:
        return None
    return round_half_up((current - previous) * 100 / previous)


class AnalyticsAggregator:
    """Summarizes the attempts of a single quiz over a date-range window."""

    def aggregate(
        self,
        quiz: Quiz,
        attempts: Iterable[Attempt],
        now: datetime,
        date_range: DateRange = DateRange.MONTH,
    ) -> AnalyticsSummary:
        date_range = DateRange(date_range)
        quiz_attempts = [attempt for attempt in attempts if attempt.quiz_id == quiz.id]
        start = window_start(now, date_range)
        filtered = [a for a in quiz_attempts if start <= a.attempt_date <= now]
        if not filtered:
            raise NoAttemptsInRange(f"No attempts for quiz {quiz.id} in the last {date_range.value}.")

        current = _totals(filtered)
        pass_count = sum(1 for attempt in filtered if attempt.passed)
        changes = self._period_changes(quiz_attempts, current, start, date_range)

        return AnalyticsSummary(
            date_range=date_range,
            window_start=start,
            window_end=now,
            total_attempts=current.attempts,
            average_score=current.average_score,
            pass_rate=current.pass_rate,
            pass_count=pass_count,
            fail_count=current.attempts - pass_count,
            average_time=current.average_time,
            attempts_over_time=self.time_series(filtered, now, date_range),
            score_distribution=self.score_distribution(filtered),
            question_performance=self.question_performance(quiz, filtered),
            **changes,
        )

    @staticmethod
    def time_series(attempts: list[Attempt], now: datetime, date_range: DateRange) -> list[TimeBucket]:
        """Count attempts per bucket; attempts outside every bucket are dropped."""
        bucket_count, interval_days, label_format = _SERIES_LAYOUT[date_range]
        interval = timedelta(days=interval_days)
        starts = [now - (bucket_count - 1 - i) * interval for i in range(bucket_count)]
        counts = [0] * bucket_count
        for attempt in attempts:
            for index, bucket_start in enumerate(starts):
                if bucket_start <= attempt.attempt_date < bucket_start + interval:
                    counts[index] += 1
                    break
        return [
            TimeBucket(label=bucket_start.strftime(label_format), start=bucket_start, count=count)
            for bucket_start, count in zip(starts, counts)
        ]

    @staticmethod
    def score_distribution(attempts: list[Attempt]) -> list[ScoreBucket]:
        counts = [0] * len(SCORE_DISTRIBUTION_BUCKETS)
        for attempt in attempts:
            for index, (_, low, high) in enumerate(SCORE_DISTRIBUTION_BUCKETS):
                if low <= attempt.score <= high:
                    counts[index] += 1
                    break
        return [
            ScoreBucket(label=label, low=low, high=high, count=count)
            for (label, low, high), count in zip(SCORE_DISTRIBUTION_BUCKETS, counts)
        ]

    @staticmethod
    def question_performance(quiz: Quiz, attempts: list[Attempt]) -> list[QuestionPerformance]:
        """Success rate per question; unanswered questions are skipped but the denominator stays fixed."""
        total = len(attempts)
        rows: list[QuestionPerformance] = []
        for position, question in enumerate(quiz.questions, start=1):
            correct_count = 0
            for attempt in attempts:
                answer = attempt.answers.get(question.id)
                if answer is None or answer == "":
                    continue
                if is_correct(question, answer):
                    correct_count += 1
            success_rate = percentage(correct_count, total) if total else 0
            text = question.text
            if len(text) > QUESTION_TEXT_PREVIEW_LENGTH:
                text = text[:QUESTION_TEXT_PREVIEW_LENGTH] + "..."
            rows.append(
                QuestionPerformance(
                    question_id=question.id,
                    label=f"Q{position}",
                    text=text,
                    type=question.type,
                    attempts=total,
                    correct_count=correct_count,
                    success_rate=success_rate,
                    difficulty=difficulty_for(success_rate),
                )
            )
        return rows

    @staticmethod
    def _period_changes(
        quiz_attempts: list[Attempt],
        current: _PeriodTotals,
        start: datetime,
        date_range: DateRange,
    ) -> dict[str, int | None]:
        empty = {"attempts_change": None, "score_change": None, "pass_rate_change": None, "time_change": None}
        if date_range is DateRange.ALL:
            return empty
        previous_start = window_start(start, date_range)
        previous = [a for a in quiz_attempts if previous_start <= a.attempt_date < start]
        if not previous:
            return empty
        before = _totals(previous)
        return {
            "attempts_change": _change(current.attempts, before.attempts),
            "score_change": _change(current.average_score, before.average_score),
            "pass_rate_change": _change(current.pass_rate, before.pass_rate),
            "time_change": _change(current.average_time, before.average_time),
        }
