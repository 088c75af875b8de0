"""structlog setup for fixtureid.

Every event emitted while a store is being published carries ``store_id``
(and ``batch_id`` inside a batch), bound through the context managers below.
Log records go to stderr so CLI tables on stdout stay clean.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any
from uuid import uuid4

import structlog


def _processors(json_logs: bool) -> list[Any]:
    shared: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if json_logs:
        return shared + [structlog.processors.JSONRenderer()]
    return shared + [structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())]


def configure_logging(
    level: str = "INFO",
    json_logs: bool = False,
    log_file: Path | None = None,
) -> None:
    """Route structlog through stdlib logging.

    Args:
        level: Root log level name
        json_logs: One JSON object per line instead of console output
        log_file: Also append records to this file
    """
    structlog.configure(
        processors=_processors(json_logs),
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(format="%(message)s", handlers=handlers, level=level.upper(), force=True)
    # SQL echo is controlled by DB_ECHO, not the app log level
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


@contextmanager
def store_context(store_id: str, **extra: Any) -> Iterator[None]:
    """Bind ``store_id`` (plus any extra keys) to every event in the block."""
    with structlog.contextvars.bound_contextvars(store_id=store_id, **extra):
        yield


@contextmanager
def batch_context(stores: int) -> Iterator[str]:
    """Bind a fresh ``batch_id`` for one batch run and yield it."""
    batch_id = uuid4().hex[:8]
    with structlog.contextvars.bound_contextvars(batch_id=batch_id, stores=stores):
        yield batch_id
