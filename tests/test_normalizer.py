"""Tests for log_insights/normalizer.py"""

import pytest

from log_insights.models import LogRecord
from log_insights.normalizer import HEADER_MAPPING, ParseError, ingest, normalize, normalize_row, read_file


def _row(**fields):
    """Raw row keyed by localized header."""
    reverse = {name: header for header, name in HEADER_MAPPING.items()}
    return {reverse[k]: v for k, v in fields.items()}


class TestNormalizeRow:
    def test_maps_localized_headers(self):
        record = normalize_row(_row(
            question_id="q1", content="铜价", timestamp="2024-01-01 09:00:00",
            source="web", user_id="u1", company="Acme", email="a@acme.com",
            feedback_status="点赞",
        ))
        assert record == LogRecord(
            question_id="q1", content="铜价", timestamp="2024-01-01 09:00:00",
            source="web", user_id="u1", company="Acme", email="a@acme.com",
            feedback_status="点赞",
        )

    def test_values_are_trimmed(self):
        record = normalize_row(_row(content="  铜价  ", timestamp=" 2024-01-01 09:00:00\t", company=" Acme "))
        assert record.content == "铜价"
        assert record.timestamp == "2024-01-01 09:00:00"
        assert record.company == "Acme"

    def test_missing_headers_default_to_empty(self):
        record = normalize_row(_row(content="铜价", timestamp="2024-01-01 09:00:00"))
        assert record.question_id == ""
        assert record.user_id == ""
        assert record.nickname == ""
        assert record.feedback_content == ""

    def test_none_value_treated_as_missing(self):
        row = _row(content="铜价", timestamp="2024-01-01 09:00:00")
        row["公司名"] = None
        assert normalize_row(row).company == ""

    @pytest.mark.parametrize("content,timestamp", [
        ("", "2024-01-01 09:00:00"),
        ("   ", "2024-01-01 09:00:00"),
        ("铜价", ""),
        ("铜价", "  "),
    ])
    def test_rejects_empty_required_fields(self, content, timestamp):
        assert normalize_row(_row(content=content, timestamp=timestamp)) is None

    def test_unknown_columns_ignored(self):
        row = _row(content="铜价", timestamp="2024-01-01 09:00:00")
        row["备注"] = "ignored"
        assert normalize_row(row) is not None


class TestNormalize:
    def test_filters_invalid_rows(self):
        rows = [
            _row(content="a", timestamp="2024-01-01 09:00:00"),
            _row(content="", timestamp="2024-01-01 09:00:00"),
            _row(content="b", timestamp=""),
            _row(content="c", timestamp="2024-01-02 09:00:00"),
        ]
        records = normalize(rows)
        assert [r.content for r in records] == ["a", "c"]

    def test_empty_input(self):
        assert normalize([]) == ()


class TestIngest:
    def test_parses_export(self, sample_csv):
        records = ingest(sample_csv)
        assert len(records) == 4
        assert records[0].content == "你好"
        assert records[0].company == "SMM"

    def test_empty_content_row_dropped(self, sample_csv):
        records = ingest(sample_csv)
        assert all(r.question_id != "4" for r in records)

    def test_without_bom(self, csv_factory, sample_rows):
        records = ingest(csv_factory(sample_rows, bom=False))
        assert len(records) == 4

    def test_empty_bytes(self):
        assert ingest(b"") == ()

    def test_header_only(self, csv_factory):
        assert ingest(csv_factory([])) == ()

    def test_blank_lines_skipped(self):
        data = "问题内容,提问时间\n\n铜价,2024-01-01 09:00:00\n\n".encode("utf-8")
        records = ingest(data)
        assert len(records) == 1

    def test_short_row_fills_missing(self):
        data = "问题ID,问题内容,提问时间,来源,用户ID\n3,铝价,2024-01-02 10:00:00\n".encode("utf-8")
        records = ingest(data)
        assert len(records) == 1
        assert records[0].source == ""
        assert records[0].user_id == ""

    def test_missing_required_column_yields_empty(self):
        data = "问题ID,来源\n1,web\n".encode("utf-8")
        assert ingest(data) == ()

    def test_quoted_fields(self):
        data = '问题内容,提问时间\n"铜价, 铝价",2024-01-01 09:00:00\n'.encode("utf-8")
        assert ingest(data)[0].content == "铜价, 铝价"

    def test_oversized_cell_is_kept(self, csv_factory):
        long_content = "铜" * 200_000
        records = ingest(csv_factory([
            {"content": long_content, "timestamp": "2024-01-01 09:00:00"},
            {"content": "铝价", "timestamp": "2024-01-01 10:00:00"},
        ]))
        assert len(records) == 2
        assert records[0].content == long_content
        assert records[1].content == "铝价"

    def test_invalid_encoding_raises(self):
        with pytest.raises(ParseError):
            ingest(b"\xff\xfe\x00\x00invalid")

    def test_unknown_encoding_raises(self):
        with pytest.raises(ParseError):
            ingest(b"a,b\n", encoding="no-such-codec")

    def test_nul_bytes_raise(self):
        with pytest.raises(ParseError):
            ingest("问题内容,提问时间\n铜\x00价,2024-01-01 09:00:00\n".encode("utf-8"))

    def test_alternate_encoding(self):
        data = "问题内容,提问时间\n铜价,2024-01-01 09:00:00\n".encode("gbk")
        records = ingest(data, encoding="gbk")
        assert records[0].content == "铜价"

    def test_parse_error_keeps_cause(self):
        with pytest.raises(ParseError) as excinfo:
            ingest(b"\xff\xff")
        assert isinstance(excinfo.value.__cause__, UnicodeDecodeError)


class TestReadFile:
    def test_reads_from_disk(self, tmp_path, sample_csv):
        path = tmp_path / "logs.csv"
        path.write_bytes(sample_csv)
        assert len(read_file(str(path))) == 4

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(ParseError):
            read_file(str(tmp_path / "missing.csv"))
