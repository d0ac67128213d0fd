import json
import logging
import time

from .config import Settings

# extras set by the worker pool and the job processor
EXTRA_FIELDS = ("worker", "url", "event")

TEXT_FORMAT = "%(asctime)s %(levelname)-7s [%(threadName)s] %(name)s: %(message)s"


class TextFormatter(logging.Formatter):
    """Plain lines for operators; the URL is appended when the message lacks it."""

    def __init__(self):
        super().__init__(TEXT_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        url = getattr(record, "url", None)
        if url and url not in record.getMessage():
            line += f" url={url}"
        return line


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        base = {
            "ts": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(record.created)),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "msg": record.getMessage(),
        }
        for k in EXTRA_FIELDS:
            if hasattr(record, k):
                base[k] = getattr(record, k)
        if record.exc_info:
            base["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(base, ensure_ascii=False)


FORMATTERS = {
    "text": TextFormatter,
    "json": JsonFormatter,
}


def setup_logging(settings: Settings) -> None:
    """Route every log record to stderr at the level and format `settings` ask for."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, settings.log_level, logging.INFO))

    handler = logging.StreamHandler()
    handler.setFormatter(FORMATTERS[settings.log_format]())

    root.handlers.clear()
    root.addHandler(handler)

    # connection-pool chatter only when debugging
    if settings.log_level != "DEBUG":
        logging.getLogger("urllib3").setLevel(logging.WARNING)
