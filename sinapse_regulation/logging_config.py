"""Structured JSON logging for Cloud Logging compatibility."""

from __future__ import annotations

import contextvars
import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager

from pythonjsonlogger import jsonlogger

_current_regulation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "current_regulation_id", default=None
)


@contextmanager
def regulation_log_context(regulation_id: str) -> Iterator[None]:
    """Tag every record emitted inside the block with ``regulation_id``.

    Tasks spawned inside the block copy the context, so fire-and-forget
    notification logs keep the tag as well.
    """
    token = _current_regulation_id.set(regulation_id)
    try:
        yield
    finally:
        _current_regulation_id.reset(token)


def configure_logging(service_name: str, env: str) -> None:
    """Route every log record through a single JSON handler on stdout.

    Each record carries ``service`` and ``environment``; records written while
    a regulation is being worked on also carry ``regulation_id`` so one
    transfer episode can be followed end to end in Cloud Logging.
    """
    handler = logging.StreamHandler(sys.stdout)
    formatter = jsonlogger.JsonFormatter(
        fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
        rename_fields={"asctime": "timestamp", "levelname": "severity"},
    )
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if env == "dev" else logging.INFO)

    old_factory = logging.getLogRecordFactory()

    def record_factory(*args, **kwargs):  # type: ignore[no-untyped-def]
        record = old_factory(*args, **kwargs)
        record.service = service_name  # type: ignore[attr-defined]
        record.environment = env  # type: ignore[attr-defined]
        regulation_id = _current_regulation_id.get()
        if regulation_id is not None:
            record.regulation_id = regulation_id  # type: ignore[attr-defined]
        return record

    logging.setLogRecordFactory(record_factory)
