"""
Logging configuration
"""

import json
import logging
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Sequence, Union


def setup_logging(level: Union[int, str] = logging.INFO,
                  log_file: Optional[str] = None,
                  log_format: Optional[str] = None):
    """
    Setup logging configuration

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR) as int or name
        log_file: Optional path to log file
        log_format: Optional custom format string
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    if log_format is None:
        log_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

    # Create formatter
    formatter = logging.Formatter(log_format, datefmt="%Y-%m-%d %H:%M:%S")

    # Get root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Clear existing handlers
    root_logger.handlers.clear()

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # File handler (if specified)
    if log_file:
        # Create log directory if needed
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # Flask's request logger is noisy at telemetry rates
    logging.getLogger("werkzeug").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


class EventJournal:
    """
    Append-only journal of dispatched map events.

    Writes one JSON object per line:
        {"t": <seconds since start>, "call": "positionUpdate", "args": [...]}

    The file can be fed back through `gcs-map replay` to reproduce a session
    on a fresh map.
    """

    def __init__(self, log_dir: str = None):
        """
        Initialize event journal.

        Args:
            log_dir: Directory for journals (default: ~/.gcsmap/journal)
        """
        if log_dir is None:
            log_dir = Path.home() / ".gcsmap" / "journal"
        self.log_dir = Path(log_dir).expanduser()
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.log_file: Optional[Path] = None
        self._file = None
        self._start_time: float = 0.0
        self._count: int = 0

    @property
    def is_recording(self) -> bool:
        """Check if currently recording."""
        return self._file is not None

    @property
    def count(self) -> int:
        return self._count

    def start(self, session_name: str = None) -> Path:
        """
        Start a new journal file.

        Args:
            session_name: Optional name appended to the filename

        Returns:
            Path to the journal file
        """
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        if session_name:
            safe_name = "".join(c if c.isalnum() or c in "-_" else "_" for c in session_name)
            filename = f"events_{timestamp}_{safe_name}.jsonl"
        else:
            filename = f"events_{timestamp}.jsonl"

        self.log_file = self.log_dir / filename
        self._file = open(self.log_file, 'w', buffering=1)  # Line buffering
        self._start_time = time.time()
        self._count = 0

        logging.getLogger(__name__).info(f"Event journal started: {self.log_file}")
        return self.log_file

    def record(self, call: str, args: Sequence[Any]):
        """Append one event. Ignored when not recording."""
        if self._file is None:
            return

        entry = {
            "t": round(time.time() - self._start_time, 3),
            "call": call,
            "args": list(args),
        }
        self._file.write(json.dumps(entry) + "\n")
        self._count += 1

    def stop(self):
        """Stop recording and close file."""
        if self._file:
            self._file.close()
            self._file = None
            logging.getLogger(__name__).info(f"Event journal stopped: {self._count} events")
