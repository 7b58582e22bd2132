"""Logging configuration shared by the stdio and HTTP transports."""

from __future__ import annotations

import json
import logging
import sys

from evm_mcp.config import EvmConfig, default_config

_EXTRA_KEYS = ("tool", "request_id", "error", "chain_id")


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "level": record.levelname,
            "message": record.getMessage(),
            "name": record.name,
        }
        for key in _EXTRA_KEYS:
            if hasattr(record, key):
                payload[key] = getattr(record, key)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(config: EvmConfig = default_config) -> None:
    """
    Install a single stderr handler on the root logger.

    stdout carries the stdio protocol stream, so log output must never go there.
    """
    level = getattr(logging, config.log_level.upper(), logging.INFO)
    handler = logging.StreamHandler(sys.stderr)
    if config.log_format.lower() == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    logging.basicConfig(level=level, handlers=[handler], force=True)
