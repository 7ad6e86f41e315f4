"""Structured logging configuration with structlog.

Environment variables:
- LOG_FORMAT: "json" for log aggregation, "console" or unset for
  human-readable output.
- LOG_LEVEL: "DEBUG", "INFO" (default), "WARNING", "ERROR", or "CRITICAL".

Room operations bind room_id and participant_id into structlog contextvars
(see bound_room_context) so every line logged while handling one request
carries them.
"""

from __future__ import annotations

import contextlib
import logging
import os
import sys
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from collections.abc import Iterator, MutableMapping
    from typing import Any

_LOG_FORMATS = {"json", "console", ""}
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def serialize_enums(
    _logger: object,
    _method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Replace Enum values (top level and one dict deep) with their .value."""
    for key, value in event_dict.items():
        if isinstance(value, Enum):
            event_dict[key] = value.value
        elif isinstance(value, dict):
            event_dict[key] = {k: v.value if isinstance(v, Enum) else v for k, v in value.items()}
    return event_dict


def configure_structlog() -> None:
    """Route structlog through stdlib logging. Safe to call repeatedly."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            serialize_enums,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


@contextlib.contextmanager
def bound_room_context(room_id: str, participant_id: str | None = None) -> Iterator[None]:
    """Bind room_id (and participant_id when known) for the duration of the block."""
    context: dict[str, str] = {"room_id": room_id}
    if participant_id is not None:
        context["participant_id"] = participant_id
    with structlog.contextvars.bound_contextvars(**context):
        yield


def _is_test() -> bool:
    return "pytest" in sys.modules


def _env_choice(name: str, default: str, allowed: set[str]) -> str:
    value = os.environ.get(name, default).strip()
    if value.upper() not in allowed and value.lower() not in allowed:
        msg = f"Invalid {name}={value!r}. Must be one of {sorted(allowed)}."
        raise ValueError(msg)
    return value


def _handler(handler: logging.Handler, *, json_mode: bool, colors: bool) -> logging.Handler:
    renderer = structlog.processors.JSONRenderer() if json_mode else structlog.dev.ConsoleRenderer(colors=colors)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.format_exc_info,
                renderer,
            ],
        ),
    )
    return handler


def setup_logging(log_dir: Path | str | None = None, level: int | None = None) -> Path | None:
    """Configure structlog output to stdout, plus a timestamped file in log_dir.

    level overrides LOG_LEVEL. The file handler is skipped under pytest.
    Returns the log file path when one was created.
    """
    json_mode = _env_choice("LOG_FORMAT", "", _LOG_FORMATS).lower() == "json"
    if level is None:
        level = getattr(logging, _env_choice("LOG_LEVEL", "INFO", _LOG_LEVELS).upper())

    configure_structlog()
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    root_logger.addHandler(_handler(logging.StreamHandler(sys.stdout), json_mode=json_mode, colors=sys.stdout.isatty()))

    if log_dir is None or _is_test():
        return None

    dir_path = Path(log_dir)
    dir_path.mkdir(parents=True, exist_ok=True)
    file_path = dir_path / f"{datetime.now(tz=UTC):%Y-%m-%d_%H-%M-%S}.log"
    root_logger.addHandler(_handler(logging.FileHandler(file_path), json_mode=json_mode, colors=False))
    return file_path
