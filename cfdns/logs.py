import logging
from typing import Any, Literal, TypeGuard, overload

from pythonjsonlogger.json import JsonFormatter

LogFormat = Literal["json", "console"]

_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class PluginJsonFormatter(JsonFormatter):
    def __init__(self, version: str, *args, **kwargs):
        self.version: str = version
        super().__init__(*args, **kwargs)

    def add_fields(self, log_data: dict[str, Any], record: logging.LogRecord, message_dict: dict[str, Any]):
        super().add_fields(log_data, record, message_dict)

        log_data.pop("color_message", None)
        if not log_data.get("version"):
            log_data["version"] = self.version


@overload
def init_logging(
    logger: logging.Logger,
    log_format: Literal["json"],
    version: str,
    *,
    stream_handler: logging.StreamHandler | None = None,
) -> tuple[PluginJsonFormatter, logging.StreamHandler]: ...


@overload
def init_logging(
    logger: logging.Logger,
    log_format: Literal["console"],
    version: str,
    *,
    stream_handler: logging.StreamHandler | None = None,
) -> tuple[logging.Formatter, logging.StreamHandler]: ...


def init_logging(
    logger: logging.Logger, log_format: LogFormat, version: str, *, stream_handler: logging.StreamHandler | None = None
):
    """
    Attach a stream handler to `logger`. Logs go to stderr by default so that
    stdout stays free for operation results.
    """
    _stream_handler = stream_handler or logging.StreamHandler()
    match log_format:
        case "json":
            formatter = PluginJsonFormatter(version, _FORMAT, datefmt=_DATE_FORMAT)
        case "console":
            formatter = logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT)
        case _:
            raise NotImplementedError(f"Invalid log format {log_format!r}")

    _stream_handler.setFormatter(formatter)
    logger.addHandler(_stream_handler)

    return formatter, _stream_handler


def is_valid_log_format(log_format: str) -> TypeGuard[LogFormat]:
    return log_format in {"json", "console"}
