"""log-insights — analytics over assistant interaction CSV exports."""

import logging
import os
import sys
from argparse import ArgumentParser

from log_insights.analytics import build_report
from log_insights.config import Config
from log_insights.formatter import get_formatter
from log_insights.normalizer import ParseError, read_file

logger = logging.getLogger(__name__)


def build_parser() -> ArgumentParser:
    """Build the CLI argument parser."""
    parser = ArgumentParser(
        prog="log-insights",
        description="Traffic, intent and user analytics for assistant interaction logs.",
    )
    parser.add_argument(
        "--config",
        default=os.environ.get("CONFIG_PATH", "config.yaml"),
        help="Path to YAML config (default: $CONFIG_PATH or config.yaml)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    analyze = sub.add_parser("analyze", help="Analyze a CSV export and print the report")
    analyze.add_argument("file", help="CSV export to analyze")
    analyze.add_argument(
        "--output",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )
    analyze.add_argument(
        "--encoding",
        help="Input encoding (default: from config)",
    )

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", help="Bind address (default: from config)")
    serve.add_argument("--port", type=int, help="Port (default: from config)")
    return parser


def run_analyze(args, config) -> int:
    encoding = args.encoding or config["ingestion"]["encoding"]
    try:
        records = read_file(args.file, encoding=encoding)
    except ParseError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    report = build_report(
        records,
        max_workers=config["analytics"]["max_workers"],
        company_limit=config["analytics"]["top_companies_limit"],
    )
    print(get_formatter(args.output)(report))
    return 0


def run_serve(args, config) -> int:
    from log_insights.app import create_app

    app = create_app(config)
    host = args.host or config["server"]["host"]
    port = args.port or config["server"]["port"]
    logger.info("Serving on %s:%d", host, port)
    app.run(host=host, port=port, debug=config["server"]["debug"], use_reloader=False)
    return 0


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    config = Config(args.config)

    logging.basicConfig(
        level=getattr(logging, str(config["logging"]["level"]).upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s — %(message)s",
        stream=sys.stderr,
    )

    if args.command == "analyze":
        return run_analyze(args, config)
    return run_serve(args, config)
