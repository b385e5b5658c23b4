# arbmon/log_sink.py
"""
Append-only daily log file.

One line per record: "[2026-01-31T12:00:00.000Z] message", written to
arbitrage_log_<YYYY-MM-DD>.txt where the date is the UTC day of the record.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional


def iso_timestamp(when: datetime) -> str:
    return when.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class DailyFileSink(logging.Handler):
    def __init__(self, log_dir: Path, level=logging.NOTSET):
        super().__init__(level)
        self.log_dir = Path(log_dir)
        # the sink adds its own timestamp
        self.setFormatter(logging.Formatter("%(message)s"))

    def path_for(self, when: datetime) -> Path:
        day = when.astimezone(timezone.utc).strftime("%Y-%m-%d")
        return self.log_dir / f"arbitrage_log_{day}.txt"

    def append(self, message: str, when: Optional[datetime] = None) -> bool:
        """
        Append one line. A failed write is reported, never raised.
        """
        when = when or datetime.now(timezone.utc)
        try:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            with open(self.path_for(when), "a", encoding="utf-8") as f:
                f.write(f"[{iso_timestamp(when)}] {message}\n")
            return True
        except OSError:
            self.handleError(logging.makeLogRecord({"msg": message}))
            return False

    def emit(self, record: logging.LogRecord):
        try:
            message = self.format(record)
        except Exception:
            self.handleError(record)
            return
        self.append(message, datetime.fromtimestamp(record.created, timezone.utc))
