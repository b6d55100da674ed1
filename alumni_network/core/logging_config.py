"""
Logging configuration.

Console logging for the API process, with bearer tokens and private keys
masked before they reach any handler.
"""

import logging
import re
import sys


class SensitiveDataFilter(logging.Filter):
    """Masks secrets that end up inside log messages."""

    SENSITIVE_PATTERNS = [
        re.compile(r"(Bearer\s+)[A-Za-z0-9\-_.]+", re.IGNORECASE),
        re.compile(r"((?:password|token|private_key|secret)[=:]\s*)[^,\s}]+", re.IGNORECASE),
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = self._mask(record.msg)
        if isinstance(record.args, tuple):
            record.args = tuple(self._mask(a) if isinstance(a, str) else a for a in record.args)
        return True

    def _mask(self, value: str) -> str:
        for pattern in self.SENSITIVE_PATTERNS:
            value = pattern.sub(lambda m: m.group(1) + "***MASKED***", value)
        return value


def setup_logging(log_level: str = "INFO", app_name: str = "alumni_network") -> logging.Logger:
    """
    Configure the package logger.

    Safe to call more than once; existing handlers are replaced.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger(app_name)
    logger.setLevel(level)
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.addFilter(SensitiveDataFilter())
    handler.setFormatter(logging.Formatter(
        "%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    ))
    logger.addHandler(handler)

    return logger
