"""Aggregation engine — pure functions from a record collection to derived views.

Every function takes the full normalized collection, builds its accumulators
locally and returns fresh value objects. None of them share state, so they
can be called repeatedly, in any order, or concurrently (see build_report).
"""

import logging
import re
from collections import Counter, defaultdict
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Sequence

from log_insights import rules
from log_insights.models import (
    AnalysisSummary,
    DailyTrend,
    HourlyStats,
    KeywordFrequency,
    LogRecord,
    NamedValue,
    to_dict,
)
from log_insights.summary import compose_summary

logger = logging.getLogger(__name__)

UNKNOWN_SOURCE = "Unknown"
DEFAULT_COMPANY_LIMIT = 10

_LEADING_INT = re.compile(r"\d+")


def _hour_of(timestamp: str) -> int | None:
    parts = timestamp.split(" ")
    if len(parts) < 2:
        return None
    match = _LEADING_INT.match(parts[1].split(":")[0])
    if not match:
        return None
    hour = int(match.group())
    return hour if 0 <= hour < 24 else None


# --- Time ---------------------------------------------------------------


def daily_trend(records: Sequence[LogRecord]) -> list[DailyTrend]:
    """Queries and distinct attributed users per calendar date, ascending."""
    queries = Counter()
    users = defaultdict(set)
    for record in records:
        date = record.date
        if not date:
            continue
        queries[date] += 1
        if record.user_id:
            users[date].add(record.user_id)

    return [
        DailyTrend(date=date, queries=queries[date], dau=len(users[date]))
        for date in sorted(queries)
    ]


def hourly_stats(records: Sequence[LogRecord]) -> list[HourlyStats]:
    """Query count for each hour of the day; always 24 slots."""
    counts = [0] * 24
    for record in records:
        hour = _hour_of(record.timestamp)
        if hour is not None:
            counts[hour] += 1
    return [HourlyStats(hour=f"{hour}:00", count=count) for hour, count in enumerate(counts)]


# --- Content ------------------------------------------------------------


def source_distribution(records: Sequence[LogRecord]) -> list[NamedValue]:
    """Queries per source channel, in first-seen order."""
    counts = Counter(record.source or UNKNOWN_SOURCE for record in records)
    return [NamedValue(name=name, value=value) for name, value in counts.items()]


def classify_intents(records: Sequence[LogRecord]) -> list[NamedValue]:
    """One intent bucket per record; every label is reported, zeros included."""
    counts = dict.fromkeys(rules.INTENT_LABELS, 0)
    for record in records:
        counts[rules.match_intent(record.content)] += 1
    return [NamedValue(name=name, value=value) for name, value in counts.items()]


def metal_distribution(records: Sequence[LogRecord]) -> list[NamedValue]:
    """Mentions per metal/commodity term, most mentioned first."""
    ranked = rules.count_terms((r.content for r in records), rules.METAL_TERMS)
    return [NamedValue(name=term, value=count) for term, count in ranked]


def top_keywords(records: Sequence[LogRecord]) -> list[KeywordFrequency]:
    """Mentions per business keyword, most mentioned first."""
    ranked = rules.count_terms((r.content for r in records), rules.KEYWORD_TERMS)
    return [KeywordFrequency(keyword=term, count=count) for term, count in ranked]


# --- Users --------------------------------------------------------------


def is_internal_user(record: LogRecord) -> bool:
    return rules.is_internal(record.company, record.user_name, record.nickname, record.email)


def top_companies(records: Sequence[LogRecord], limit: int = DEFAULT_COMPANY_LIMIT) -> list[NamedValue]:
    """Busiest companies; all internal traffic is folded into one label."""
    counts = Counter()
    for record in records:
        if is_internal_user(record):
            counts[rules.INTERNAL_LABEL] += 1
        elif record.company.strip():
            counts[record.company.strip()] += 1

    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [NamedValue(name=name, value=value) for name, value in ranked[:limit]]


def user_type_distribution(records: Sequence[LogRecord]) -> list[NamedValue]:
    """Internal / external / unknown split; empty segments are omitted."""
    counts = dict.fromkeys(rules.USER_TYPE_LABELS, 0)
    for record in records:
        if is_internal_user(record):
            counts[rules.USER_TYPE_INTERNAL] += 1
        elif record.company.strip():
            counts[rules.USER_TYPE_EXTERNAL] += 1
        else:
            counts[rules.USER_TYPE_UNKNOWN] += 1
    return [NamedValue(name=name, value=value) for name, value in counts.items() if value > 0]


# --- Summary ------------------------------------------------------------


def retention_rate(records: Sequence[LogRecord]) -> float:
    """Mean next-day retention over consecutive dates, as a percentage.

    Pairs dates that are adjacent in the data, not necessarily on the
    calendar, and averages the per-pair ratios. This is an estimate, not a
    cohort retention curve. Empty user ids are counted as one user here.
    """
    users_by_date = defaultdict(set)
    for record in records:
        if record.date:
            users_by_date[record.date].add(record.user_id)

    dates = sorted(users_by_date)
    if len(dates) < 2:
        return 0.0

    ratios = []
    for today, tomorrow in zip(dates, dates[1:]):
        today_users = users_by_date[today]
        if not today_users:
            continue
        retained = len(today_users & users_by_date[tomorrow])
        ratios.append(retained / len(today_users))

    if not ratios:
        return 0.0
    return sum(ratios) / len(ratios) * 100


def summary_stats(records: Sequence[LogRecord]) -> AnalysisSummary:
    """Top-line metrics for the collection.

    Unique users counts distinct user ids as-is, so every unattributed
    record collapses into a single "" user.
    """
    unique_users = len({record.user_id for record in records})
    return compose_summary(
        total_queries=len(records),
        unique_users=unique_users,
        sources=source_distribution(records),
        trend=daily_trend(records),
        retention_rate=retention_rate(records),
    )


# --- Fan-out ------------------------------------------------------------

VIEWS = {
    "summary": summary_stats,
    "daily_trend": daily_trend,
    "hourly_stats": hourly_stats,
    "source_distribution": source_distribution,
    "intents": classify_intents,
    "metals": metal_distribution,
    "companies": top_companies,
    "user_types": user_type_distribution,
    "keywords": top_keywords,
}


def build_report(
    records: Sequence[LogRecord],
    max_workers: int | None = None,
    company_limit: int = DEFAULT_COMPANY_LIMIT,
) -> dict[str, Any]:
    """Compute every view concurrently over the same immutable snapshot."""
    records = tuple(records)
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = {}
        for name, view in VIEWS.items():
            if view is top_companies:
                futures[name] = pool.submit(view, records, company_limit)
            else:
                futures[name] = pool.submit(view, records)
        report = {name: future.result() for name, future in futures.items()}

    logger.debug("Built report over %d records", len(records))
    return report


def view_to_json(value):
    """JSON-ready form of a single view result."""
    if isinstance(value, list):
        return [to_dict(item) for item in value]
    return to_dict(value)


def report_to_dict(report: dict[str, Any]) -> dict[str, Any]:
    """JSON-ready form of a full report."""
    return {name: view_to_json(value) for name, value in report.items()}
