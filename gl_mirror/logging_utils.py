"""Logging utilities for gl-mirror."""

from __future__ import annotations

import json
import logging
import sys

ICONS = {
    "cloned": "✓",
    "would_clone": "○",
    "error": "✗",
}


class StructuredFormatter(logging.Formatter):
    """Formatter that can emit JSON lines when configured."""

    def __init__(self, json_mode: bool = False):
        super().__init__()
        self.json_mode = json_mode

    def format(self, record: logging.LogRecord) -> str:
        result = getattr(record, "clone_result", None)
        if self.json_mode and result is not None:
            return json.dumps(result.to_dict())
        if self.json_mode:
            return json.dumps({"level": record.levelname, "message": record.getMessage()})
        if result is not None:
            prefix = "[DRY-RUN] " if result.dry_run else ""
            detail = f" ({result.detail})" if result.detail else ""
            message = f"{prefix}{ICONS.get(result.action, '?')} {result.path_with_namespace}: {result.action}{detail}"
        else:
            message = record.getMessage()
        if record.exc_info and not self.json_mode:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return f"[{record.levelname:<7}] {message}"


def setup_logging(json_mode: bool = False, verbose: bool = False) -> logging.Logger:
    logger = logging.getLogger("gl-mirror")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.handlers.clear()
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(StructuredFormatter(json_mode=json_mode))
    logger.addHandler(handler)
    return logger
