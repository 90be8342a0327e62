"""Shared pytest fixtures for the log-insights test suite."""

import csv
import io

import pytest

from log_insights.config import Config
from log_insights.normalizer import HEADER_MAPPING

HEADERS = list(HEADER_MAPPING)


def build_csv(rows, headers=HEADERS, bom=True) -> bytes:
    """Render rows (dicts keyed by canonical field name) as a localized CSV export."""
    reverse = {name: header for header, name in HEADER_MAPPING.items()}
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow(headers)
    for row in rows:
        localized = {reverse[k]: v for k, v in row.items()}
        writer.writerow([localized.get(h, "") for h in headers])
    prefix = "\ufeff" if bom else ""
    return (prefix + buf.getvalue()).encode("utf-8")


@pytest.fixture
def csv_factory():
    return build_csv


@pytest.fixture
def sample_rows():
    return [
        {"question_id": "1", "content": "你好", "timestamp": "2024-01-01 09:15:00",
         "source": "web", "user_id": "u1", "company": "SMM"},
        {"question_id": "2", "content": "今天铜价格多少钱", "timestamp": "2024-01-01 10:00:00",
         "source": "web", "user_id": "u2", "company": "Acme Metals"},
        {"question_id": "3", "content": "铝后市走势怎么看", "timestamp": "2024-01-02 14:30:00",
         "source": "app", "user_id": "u2", "company": "Acme Metals"},
        {"question_id": "4", "content": "", "timestamp": "2024-01-02 15:00:00",
         "source": "app", "user_id": "u3"},
        {"question_id": "5", "content": "碳酸锂库存数据", "timestamp": "2024-01-02 23:59:59",
         "source": "", "user_id": "u3"},
    ]


@pytest.fixture
def sample_csv(sample_rows):
    return build_csv(sample_rows)


@pytest.fixture
def config():
    return Config()
