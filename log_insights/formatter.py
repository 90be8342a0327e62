"""Report rendering for the CLI — plain text and JSON."""

import json
from typing import Any

from log_insights.analytics import report_to_dict


def _section(lines, title, rows):
    lines.append(f"{title}:")
    if not rows:
        lines.append("  (none)")
    for label, value in rows:
        lines.append(f"  {label}  {value}")
    lines.append("")


def format_report_text(report: dict[str, Any]) -> str:
    """Human-readable report."""
    summary = report["summary"]
    lines = []
    lines.append(f"Total queries:      {summary.total_queries}")
    lines.append(f"Unique users:       {summary.unique_users}")
    lines.append(f"Queries per user:   {summary.avg_queries_per_user:.1f}")
    lines.append(f"Next-day retention: {summary.retention_rate:.1f}%")
    lines.append(f"Top source:         {summary.top_source}")
    lines.append(f"Busiest day:        {summary.busiest_day}")
    lines.append("")

    _section(lines, "Daily trend (queries / DAU)",
             [(d.date, f"{d.queries} / {d.dau}") for d in report["daily_trend"]])
    _section(lines, "Queries per hour",
             [(f"{h.hour:>5s}", h.count) for h in report["hourly_stats"]])
    _section(lines, "Sources", [(s.name, s.value) for s in report["source_distribution"]])
    _section(lines, "Intents", [(i.name, i.value) for i in report["intents"]])
    _section(lines, "Metals", [(m.name, m.value) for m in report["metals"]])
    _section(lines, "Keywords", [(k.keyword, k.count) for k in report["keywords"]])
    _section(lines, "Top companies", [(c.name, c.value) for c in report["companies"]])
    _section(lines, "User types", [(u.name, u.value) for u in report["user_types"]])

    return "\n".join(lines).rstrip("\n")


def format_report_json(report: dict[str, Any]) -> str:
    """JSON report, camelCase keys, non-ASCII kept readable."""
    return json.dumps(report_to_dict(report), indent=2, ensure_ascii=False)


def get_formatter(output_format: str):
    """Return the report formatter for the given format string."""
    formatters = {
        "text": format_report_text,
        "json": format_report_json,
    }
    return formatters[output_format]
