"""structlog configuration for the CLI and library.

Every output in ``LoggingConfig.outputs`` becomes one stdlib handler with its
own level and renderer (console or JSON). Events logged while a project is
being indexed or queried carry its ``project_id`` via ``project_context``.
Console handlers go quiet while a spinner owns the terminal.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from codenav.config.models import LoggingConfig, LogOutputConfig

# Libraries that log every statement or connection at INFO
_QUIET_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool")

_CONSOLE_DESTINATIONS = ("stderr", "stdout")


@contextmanager
def project_context(project_id: str) -> Iterator[None]:
    """Bind ``project_id`` to every event logged in this context."""
    with structlog.contextvars.bound_contextvars(project_id=project_id):
        yield


class ConsoleSuppressingFilter(logging.Filter):
    """Drops console records while a rich live display is active."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: ARG002
        from codenav.core.progress import is_console_suppressed

        return not is_console_suppressed()


def _level(name: str) -> int:
    return logging.getLevelNamesMapping().get(name.upper(), logging.INFO)


def _handler(destination: str) -> logging.Handler:
    if destination == "stderr":
        return logging.StreamHandler(sys.stderr)
    if destination == "stdout":
        return logging.StreamHandler(sys.stdout)
    path = Path(destination).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return logging.FileHandler(path, mode="a", encoding="utf-8")


def _formatter(
    output: LogOutputConfig, shared: list[structlog.types.Processor]
) -> logging.Formatter:
    renderer: structlog.types.Processor
    if output.format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        stream = sys.stdout if output.destination == "stdout" else sys.stderr
        renderer = structlog.dev.ConsoleRenderer(
            colors=output.destination in _CONSOLE_DESTINATIONS and stream.isatty(),
            pad_event_to=0,
            pad_level=False,
        )
    return structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=shared)


def configure_logging(config: LoggingConfig | None = None) -> None:
    """Route structlog through stdlib handlers, one per configured output."""
    from codenav.config.models import LoggingConfig

    config = config or LoggingConfig()
    root_level = _level(config.level)

    shared: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", key="timestamp"),
    ]
    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(root_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Reconfiguration (tests, -v) must take effect on existing loggers
        cache_logger_on_first_use=False,
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(root_level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    for output in config.outputs:
        handler = _handler(output.destination)
        if output.destination in _CONSOLE_DESTINATIONS:
            handler.addFilter(ConsoleSuppressingFilter())
        handler.setLevel(_level(output.level or config.level))
        handler.setFormatter(_formatter(output, shared))
        root.addHandler(handler)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    logger = structlog.get_logger()
    if name:
        logger = logger.bind(logger=name)
    return logger  # type: ignore[no-any-return]
