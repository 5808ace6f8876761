"""
Classroom Stats Service - Aggregations over live scores and score history.

Provides the figures the class performance views consume:
1. Class mean of the live scores
2. Timeline: average archived score per archive date
3. Distribution of live scores in fixed-width bins
4. Leaderboard ranked by live score

All functions are pure: they take students (ORM objects or anything with
the same attributes) and return plain dicts/lists ready for JSON.
"""

from collections import OrderedDict

from classboard.logging_config import get_logger, log_with_context

logger = get_logger("stats")

DISTRIBUTION_BIN_WIDTH = 2
DISTRIBUTION_MIN_MAX_SCORE = 10   # Axis always covers at least 0-10
DISTRIBUTION_MAX_BINS = 50


def _average(total: int, count: int):
    # Beyond float range the floor of the exact mean is returned as an int
    try:
        return total / count
    except OverflowError:
        return total // count


def class_mean(students):
    """Mean live score, 0.0 for an empty class."""
    students = list(students)
    if not students:
        return 0.0
    return _average(sum(s.score for s in students), len(students))


def history_timeline(students) -> list:
    """
    Average archived score per archive date, oldest first.

    Every record counts once, so a date with two resets contributes both
    snapshots of each student to that date's average.
    """
    totals = {}
    for student in students:
        for record in student.score_history:
            total, count = totals.get(record.date, (0, 0))
            totals[record.date] = (total + record.score, count + 1)

    return [
        {"date": day.isoformat(), "average": _average(total, count), "records": count}
        for day, (total, count) in sorted(totals.items())
    ]


def score_distribution(scores, bin_width: int = DISTRIBUTION_BIN_WIDTH) -> list:
    """
    Count live scores per bin of `bin_width` points.

    Bins start at 0 and extend to the highest score (at least 10). When that
    would need more than DISTRIBUTION_MAX_BINS bins the width is widened.
    Negative scores fall outside every bin and are not counted.
    """
    scores = list(scores)
    max_score = max(scores + [DISTRIBUTION_MIN_MAX_SCORE])
    if max_score // bin_width + 1 > DISTRIBUTION_MAX_BINS:
        bin_width = -(-(max_score + 1) // DISTRIBUTION_MAX_BINS)
    # The bin holding max_score is always present
    bin_count = max_score // bin_width + 1

    bins = OrderedDict()
    for i in range(bin_count):
        bins[i] = {"label": "{}-{}".format(i * bin_width, i * bin_width + bin_width - 1), "count": 0}

    for score in scores:
        index = score // bin_width
        if index in bins:
            bins[index]["count"] += 1

    return list(bins.values())


def leaderboard(students) -> list:
    """
    Rank students by live score, highest first.

    Ties keep display order (sorted() is stable). Unnamed students are
    included with a null name.
    """
    ranked = sorted(students, key=lambda s: s.score, reverse=True)
    return [
        {
            "rank": rank,
            "is_top_3": rank <= 3,
            "student_id": s.id,
            "name": s.name,
            "score": s.score,
        }
        for rank, s in enumerate(ranked, 1)
    ]


def classroom_stats(classroom) -> dict:
    """All aggregations for one classroom."""
    students = list(classroom.students)
    stats = {
        "classroom_id": classroom.id,
        "student_count": len(students),
        "class_mean": class_mean(students),
        "timeline": history_timeline(students),
        "distribution": score_distribution([s.score for s in students]),
        "leaderboard": leaderboard(students),
    }
    log_with_context(logger, "DEBUG",
        "Stats computed for {} students".format(len(students)),
        context={"classroom_id": classroom.id},
        extra_data={"timeline_points": len(stats["timeline"])})
    return stats
