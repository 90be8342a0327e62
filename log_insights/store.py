import logging
import threading
from datetime import datetime, timezone

from log_insights.analytics import DEFAULT_COMPANY_LIMIT, build_report
from log_insights.normalizer import ingest

logger = logging.getLogger(__name__)


class DatasetStore:
    """Holds the current record snapshot and its report.

    Each load replaces the snapshot wholesale. Loads are serialized; a load
    that fails to parse leaves the previous snapshot untouched.
    """

    def __init__(self, encoding="utf-8-sig", max_workers=None, company_limit=DEFAULT_COMPANY_LIMIT):
        self._encoding = encoding
        self._max_workers = max_workers
        self._company_limit = company_limit
        self._load_lock = threading.Lock()
        self._lock = threading.Lock()
        self._records = ()
        self._report = None
        self._version = 0
        self._loaded_at = None
        self._source_name = None

    def load(self, file_bytes, source_name=None):
        """Parse file_bytes and swap it in as the current dataset.

        Raises ParseError (from ingest) without touching the current state.
        Returns (records, version) for the dataset that was swapped in.
        """
        with self._load_lock:
            records = ingest(file_bytes, encoding=self._encoding)
            report = build_report(records, max_workers=self._max_workers, company_limit=self._company_limit)
            with self._lock:
                self._records = records
                self._report = report
                self._version += 1
                self._loaded_at = datetime.now(timezone.utc)
                self._source_name = source_name
                version = self._version
            logger.info("Loaded dataset v%d from %s: %d records", version, source_name or "<upload>", len(records))
            return records, version

    def snapshot(self):
        """Return (records, report, version) read under one lock."""
        with self._lock:
            return self._records, self._report, self._version

    @property
    def records(self):
        with self._lock:
            return self._records

    @property
    def report(self):
        """Report for the current snapshot, or None before the first load."""
        with self._lock:
            return self._report

    @property
    def version(self):
        """Number of successful loads so far."""
        with self._lock:
            return self._version

    @property
    def loaded_at(self):
        with self._lock:
            return self._loaded_at

    @property
    def source_name(self):
        with self._lock:
            return self._source_name

    @property
    def is_loaded(self):
        with self._lock:
            return self._report is not None
