"""
Logging utility that writes to both stdout and a file
"""
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from config import Config


class DualLogger:
    """Logger that writes to stdout and, when configured, to a file"""

    def __init__(self, log_file: Optional[Path] = None):
        self.log_file = log_file
        if self.log_file is not None:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)

    def log(self, message: str, level: Optional[str] = None):
        """Write a timestamped line; `level` adds a tag unless the message already has one"""
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        if level and not message.startswith('['):
            message = f"[{level.upper()}] {message}"
        line = f"[{timestamp}] {message}"

        print(line, flush=True)

        if self.log_file is None:
            return
        try:
            with open(self.log_file, 'a', encoding='utf-8') as f:
                f.write(line + '\n')
        except OSError as e:
            print(f"[ERROR] Failed to write to log file {self.log_file}: {e}", file=sys.stderr, flush=True)


_logger = DualLogger(Path(Config.LOG_FILE) if Config.LOG_FILE else None)


def log(message: str, level: Optional[str] = None):
    """Convenience function to log messages"""
    _logger.log(message, level)


def set_log_file(log_file: Optional[Path]):
    """Change the log file location; None logs to stdout only"""
    global _logger
    _logger = DualLogger(log_file)
