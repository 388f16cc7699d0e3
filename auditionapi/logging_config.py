import json
import logging
import logging.config
import sys


class JsonFormatter(logging.Formatter):
    """One JSON object per line, for CloudWatch when running under Lambda"""

    def format(self, record: logging.LogRecord) -> str:
        log_record = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            log_record["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(log_record, ensure_ascii=False)


def _app_logger(handlers, level: str) -> dict:
    return {"handlers": handlers, "level": level, "propagate": False}


def setup_logging(log_level: str = "INFO", json_logs: bool = False):
    """Configure the root, uvicorn and auditionapi loggers.

    With ``json_logs`` every record goes to stdout as JSON; otherwise the
    readable console layout is used and warnings also go to stderr with
    the source location attached.
    """
    log_level = log_level.upper()
    rule = "-" * 72

    if json_logs:
        handlers = {
            "json": {
                "formatter": "json",
                "class": "logging.StreamHandler",
                "stream": sys.stdout,
            },
        }
        app_handlers = ["json"]
        access_handlers = ["json"]
    else:
        handlers = {
            "console": {
                "formatter": "simple",
                "class": "logging.StreamHandler",
                "stream": sys.stdout,
            },
            "error_console": {
                "formatter": "detailed",
                "class": "logging.StreamHandler",
                "stream": sys.stderr,
                "level": "WARNING",
            },
        }
        app_handlers = ["console", "error_console"]
        access_handlers = ["console"]

    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {"()": JsonFormatter},
            "detailed": {
                "format": f"{rule}\n%(asctime)s [%(levelname)s] %(name)s "
                "(%(pathname)s:%(lineno)d)\n%(message)s\n{rule}",
            },
            "simple": {
                "format": "%(asctime)s [%(levelname)-7s] %(name)s: %(message)s",
            },
        },
        "handlers": handlers,
        "loggers": {
            "": {"handlers": app_handlers, "level": log_level},
            "auditionapi": _app_logger(app_handlers, log_level),
            "uvicorn.error": _app_logger(app_handlers, log_level),
            "uvicorn.access": _app_logger(access_handlers, log_level),
            # SQL echo and AWS SDK chatter stay quiet unless something breaks
            "sqlalchemy.engine": _app_logger(app_handlers, "WARNING"),
            "botocore": _app_logger(app_handlers, "WARNING"),
            "httpx": _app_logger(app_handlers, "WARNING"),
        },
    }
    logging.config.dictConfig(config)
