"""Logging filters that scrub sensitive content."""

from __future__ import annotations

import logging
import re

_SENSITIVE_PATTERN = re.compile(
    r"(Authorization: Bearer\s+[\w\.-]+"
    r"|Bearer\s+[\w-]+\.[\w-]+\.[\w-]+"
    r"|(?:qr_pass|access_token)\"?\s*[:=]\s*\"?[\w\.-]+\"?"
    r"|dni\"?\s*[:=]\s*\"?[\w-]+\"?)",
    re.IGNORECASE,
)


def redact(message: str) -> str:
    return _SENSITIVE_PATTERN.sub("**REDACTED**", message)


class SensitiveFilter(logging.Filter):
    """Replace tokens, access passes and identity numbers with a redaction marker."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = redact(record.msg)
        if record.args:
            if isinstance(record.args, dict):
                record.args = {
                    key: redact(value) if isinstance(value, str) else value
                    for key, value in record.args.items()
                }
            else:
                record.args = tuple(
                    redact(arg) if isinstance(arg, str) else arg for arg in record.args
                )
        return True


__all__ = ["SensitiveFilter", "redact"]
