from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from app.core.constants import SessionStatusEnum
from app.services.analytics import (
    Attempt,
    average_score,
    median_score,
    pass_rate,
    performers,
    score_distribution,
    truncate_stem,
    weekly_trend,
)

NOW = datetime(2026, 10, 14, 12, 0, tzinfo=timezone.utc)  # a Wednesday
UTC = ZoneInfo("UTC")


def _attempt(session_id, score, passed=None, completed_at=NOW, status=SessionStatusEnum.COMPLETED):
    return Attempt(
        session_id=session_id,
        assessment_id=1,
        user_id=session_id,
        name=f"Candidate {session_id}",
        score=score,
        passed=score >= 70 if passed is None else passed,
        status=status,
        completed_at=completed_at,
    )


def test_average_and_median_of_empty_set_are_zero():
    assert average_score([]) == 0
    assert median_score([]) == 0


def test_median_odd_takes_middle_value():
    assert median_score([90, 10, 50]) == 50


def test_median_even_takes_mean_of_middle_pair():
    assert median_score([10, 40, 60, 100]) == 50
    assert median_score([70, 75]) == 73


def test_average_rounds():
    assert average_score([70, 75]) == 73
    assert average_score([100, 0, 0]) == 33


def test_pass_rate_counts_passed_attempts():
    attempts = [_attempt(1, 80), _attempt(2, 40), _attempt(3, 90), _attempt(4, 10)]
    assert pass_rate(attempts) == 50
    assert pass_rate([]) == 0


def test_raising_threshold_never_raises_pass_rate():
    scores = [0, 15, 40, 55, 70, 70, 85, 99, 100]
    previous = None
    for threshold in range(0, 101):
        attempts = [_attempt(i, s, passed=s >= threshold) for i, s in enumerate(scores)]
        rate = pass_rate(attempts)
        if previous is not None:
            assert rate <= previous
        previous = rate


def test_distribution_has_ten_buckets_and_puts_100_in_the_last():
    scores = [0, 9, 10, 55, 91, 99, 100, 100]
    buckets = score_distribution(scores)

    assert len(buckets) == 10
    assert sum(b.count for b in buckets) == len(scores)
    assert buckets[0].range == "0-10"
    assert buckets[1].range == "11-20"
    assert buckets[9].range == "91-100"
    assert buckets[0].count == 2
    assert buckets[1].count == 1
    assert buckets[5].count == 1
    assert buckets[9].count == 4


def test_distribution_of_no_scores_is_all_zero():
    buckets = score_distribution([])
    assert [b.count for b in buckets] == [0] * 10


def test_performers_take_first_five_and_keep_tie_order():
    attempts = [
        _attempt(1, 80), _attempt(2, 95), _attempt(3, 80), _attempt(4, 30),
        _attempt(5, 80), _attempt(6, 60), _attempt(7, 100),
    ]
    top = performers(attempts, descending=True)
    bottom = performers(attempts, descending=False)

    assert [p.session_id for p in top] == [7, 2, 1, 3, 5]
    assert [p.session_id for p in bottom] == [4, 6, 1, 3, 5]


def test_performers_respect_explicit_limit():
    attempts = [_attempt(i, i * 10) for i in range(1, 4)]
    assert [p.score for p in performers(attempts, descending=True, limit=2)] == [30, 20]


def test_weekly_trend_is_twelve_weeks_even_without_attempts():
    trend = weekly_trend([], NOW, tz=UTC)

    assert len(trend) == 12
    assert all(point.completions == 0 and point.avg_score == 0 for point in trend)
    assert trend[0].week_start == "2026-07-26"
    assert trend[0].week == "7/26"
    assert trend[-1].week_start == "2026-10-11"
    assert trend[-1].week == "10/11"


def test_weekly_trend_buckets_on_sunday_boundaries():
    attempts = [
        _attempt(1, 80, completed_at=datetime(2026, 10, 11, 0, 0, tzinfo=timezone.utc)),
        _attempt(2, 60, completed_at=datetime(2026, 10, 13, 9, 30, tzinfo=timezone.utc)),
        _attempt(3, 40, completed_at=datetime(2026, 10, 10, 23, 59, tzinfo=timezone.utc)),
        # Older than the window
        _attempt(4, 100, completed_at=datetime(2026, 7, 25, 12, 0, tzinfo=timezone.utc)),
    ]
    trend = weekly_trend(attempts, NOW, tz=UTC)

    assert len(trend) == 12
    assert trend[-1].completions == 2
    assert trend[-1].avg_score == 70
    assert trend[-2].week_start == "2026-10-04"
    assert trend[-2].completions == 1
    assert trend[-2].avg_score == 40
    assert sum(point.completions for point in trend) == 3


def test_weekly_trend_uses_local_week_boundaries():
    new_york = ZoneInfo("America/New_York")
    # Saturday evening in New York, already Sunday in UTC
    late_saturday = datetime(2026, 10, 11, 2, 0, tzinfo=timezone.utc)
    trend = weekly_trend([_attempt(1, 90, completed_at=late_saturday)], NOW, tz=new_york)

    assert trend[-1].completions == 0
    assert trend[-2].completions == 1


def test_truncate_stem():
    assert truncate_stem("Short stem?") == "Short stem?"
    long_stem = "x" * 120
    truncated = truncate_stem(long_stem)
    assert len(truncated) == 80
    assert truncated.endswith("...")
