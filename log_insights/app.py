import atexit
import logging

from flask import Flask, request, jsonify

from log_insights.analytics import VIEWS, report_to_dict, view_to_json
from log_insights.config import Config
from log_insights.insights import InsightRunner
from log_insights.normalizer import ParseError
from log_insights.store import DatasetStore
from log_insights.summarizer import Summarizer

logger = logging.getLogger(__name__)


def create_app(config=None, summarizer=None):
    """Flask application factory."""
    app = Flask(__name__)

    if config is None:
        config = Config.from_env()

    store = DatasetStore(
        encoding=config["ingestion"]["encoding"],
        max_workers=config["analytics"]["max_workers"],
        company_limit=config["analytics"]["top_companies_limit"],
    )
    summarizer_enabled = config["summarizer"]["enabled"]
    runner = None
    if summarizer_enabled:
        runner = InsightRunner(summarizer or Summarizer.from_config(config))
        atexit.register(runner.shutdown)

    # Store components on app for access in tests
    app.config["components"] = {
        "config": config,
        "store": store,
        "insights": runner,
    }

    # --- Routes ---

    @app.route("/health")
    def health():
        return jsonify({
            "status": "healthy",
            "records": len(store.records),
            "version": store.version,
        })

    @app.route("/api/upload", methods=["POST"])
    def upload():
        upload_file = request.files.get("file")
        if upload_file is not None and upload_file.filename == "":
            return jsonify({"status": "invalid", "error": "No file selected"}), 400
        if upload_file is not None:
            data = upload_file.read()
            name = upload_file.filename
        else:
            data = request.get_data()
            name = request.args.get("name")

        # An empty file part is a valid, empty export; an empty body means no file.
        if upload_file is None and not data:
            return jsonify({"status": "invalid", "error": "No file provided"}), 400

        try:
            records, version = store.load(data, source_name=name)
        except ParseError as exc:
            logger.warning("Rejected upload %s: %s", name or "<body>", exc)
            return jsonify({"status": "invalid", "error": str(exc)}), 400

        if runner is not None:
            runner.submit(records, version)

        return jsonify({
            "status": "accepted",
            "records": len(records),
            "version": version,
        }), 201

    @app.route("/api/dashboard-data")
    def dashboard_data():
        report = store.report
        if report is None:
            return jsonify({"status": "empty", "error": "No dataset loaded"}), 404
        return jsonify({
            "version": store.version,
            "source": store.source_name,
            **report_to_dict(report),
        })

    @app.route("/api/views/<name>")
    def view(name):
        if name not in VIEWS:
            return jsonify({"error": f"Unknown view '{name}'"}), 404
        report = store.report
        if report is None:
            return jsonify({"status": "empty", "error": "No dataset loaded"}), 404
        return jsonify(view_to_json(report[name]))

    @app.route("/api/insight")
    def insight():
        if runner is None:
            return jsonify({"status": "disabled", "version": None, "markup": None})
        return jsonify(runner.status())

    @app.route("/api/insight/cancel", methods=["POST"])
    def cancel_insight():
        cancelled = runner.cancel() if runner is not None else False
        return jsonify({"cancelled": cancelled})

    return app
