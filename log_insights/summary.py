"""Top-line metrics — merges already computed views into one AnalysisSummary."""

from typing import Sequence

from log_insights.models import AnalysisSummary, DailyTrend, NamedValue

NOT_AVAILABLE = "N/A"


def _first_max(items, key):
    """First item holding the maximum key, or None for an empty sequence."""
    best = None
    for item in items:
        if best is None or key(item) > key(best):
            best = item
    return best


def compose_summary(
    total_queries: int,
    unique_users: int,
    sources: Sequence[NamedValue],
    trend: Sequence[DailyTrend],
    retention_rate: float,
) -> AnalysisSummary:
    """Build the summary object.

    Ties for top source and busiest day go to the first one seen: source
    distribution order for sources, ascending date order for days.
    """
    top_source = _first_max(sources, key=lambda s: s.value)
    busiest = _first_max(trend, key=lambda d: d.queries)

    return AnalysisSummary(
        total_queries=total_queries,
        unique_users=unique_users,
        avg_queries_per_user=total_queries / unique_users if unique_users > 0 else 0,
        retention_rate=retention_rate,
        top_source=top_source.name if top_source else NOT_AVAILABLE,
        busiest_day=busiest.date if busiest else NOT_AVAILABLE,
    )
