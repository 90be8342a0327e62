"""Normalized interaction record and the derived view dataclasses."""

from dataclasses import dataclass, asdict
from typing import Any


@dataclass(frozen=True)
class LogRecord:
    question_id: str
    content: str
    timestamp: str  # "YYYY-MM-DD HH:MM:SS"
    source: str = ""
    user_id: str = ""
    company: str = ""
    user_name: str = ""
    nickname: str = ""
    email: str = ""
    feedback_status: str = ""
    feedback_content: str = ""

    @property
    def date(self) -> str:
        """Date portion of the timestamp (text before the first space)."""
        return self.timestamp.split(" ")[0]


@dataclass(frozen=True)
class NamedValue:
    name: str
    value: int


@dataclass(frozen=True)
class DailyTrend:
    date: str
    queries: int
    dau: int


@dataclass(frozen=True)
class HourlyStats:
    hour: str
    count: int


@dataclass(frozen=True)
class KeywordFrequency:
    keyword: str
    count: int


@dataclass(frozen=True)
class AnalysisSummary:
    total_queries: int
    unique_users: int
    avg_queries_per_user: float
    retention_rate: float
    top_source: str
    busiest_day: str


_CAMEL_KEYS = {
    "question_id": "questionId",
    "user_id": "userId",
    "user_name": "userName",
    "feedback_status": "feedbackStatus",
    "feedback_content": "feedbackContent",
    "total_queries": "totalQueries",
    "unique_users": "uniqueUsers",
    "avg_queries_per_user": "avgQueriesPerUser",
    "retention_rate": "retentionRate",
    "top_source": "topSource",
    "busiest_day": "busiestDay",
}


def to_dict(obj) -> dict[str, Any]:
    """Convert a record or view to a dict with the camelCase keys the dashboard expects."""
    return {_CAMEL_KEYS.get(k, k): v for k, v in asdict(obj).items()}
