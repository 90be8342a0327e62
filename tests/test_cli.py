import json
from unittest.mock import patch

import pytest

from log_insights.cli import build_parser, main


@pytest.fixture
def csv_path(tmp_path, sample_csv):
    path = tmp_path / "logs.csv"
    path.write_bytes(sample_csv)
    return str(path)


class TestParser:
    def test_analyze_defaults(self):
        args = build_parser().parse_args(["analyze", "logs.csv"])
        assert args.command == "analyze"
        assert args.file == "logs.csv"
        assert args.output == "text"
        assert args.encoding is None

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestAnalyze:
    def test_text_output(self, csv_path, capsys):
        assert main(["--config", "/nonexistent.yaml", "analyze", csv_path]) == 0
        out = capsys.readouterr().out
        assert "Total queries:      4" in out

    def test_json_output(self, csv_path, capsys):
        assert main(["--config", "/nonexistent.yaml", "analyze", csv_path, "--output", "json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["summary"]["uniqueUsers"] == 3

    def test_unreadable_file(self, tmp_path, capsys):
        path = tmp_path / "bad.csv"
        path.write_bytes(b"\xff\xfe\xfa")
        assert main(["--config", "/nonexistent.yaml", "analyze", str(path)]) == 1
        assert "Error:" in capsys.readouterr().err

    def test_encoding_override(self, tmp_path, capsys):
        path = tmp_path / "gbk.csv"
        path.write_bytes("问题内容,提问时间\n铜价,2024-01-01 09:00:00\n".encode("gbk"))
        assert main(["--config", "/nonexistent.yaml", "analyze", str(path), "--encoding", "gbk"]) == 0
        assert "Total queries:      1" in capsys.readouterr().out


class TestServe:
    def test_serve_uses_config(self):
        with patch("flask.Flask.run") as run:
            assert main(["--config", "/nonexistent.yaml", "serve", "--port", "8123"]) == 0
        run.assert_called_once()
        assert run.call_args.kwargs["port"] == 8123
        assert run.call_args.kwargs["host"] == "0.0.0.0"
