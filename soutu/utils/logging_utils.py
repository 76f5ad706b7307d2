import copy
import logging
import re
from logging.config import dictConfig
from typing import Any, Dict

from uvicorn.config import LOGGING_CONFIG as UVICORN_LOGGING_CONFIG

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
ACCESS_LOG_FORMAT = '%(asctime)s | %(levelname)s | %(client_addr)s - "%(request_line)s" %(status_code)s'

_THIRD_PARTY_LEVELS = {
    "asyncio": logging.WARNING,
    "httpx": logging.INFO,
    "httpcore": logging.INFO,
    "telegram": logging.INFO,
    "telegram.ext": logging.INFO,
    "sqlalchemy.engine": logging.WARNING,
    "alembic": logging.INFO,
}

# Bot API URLs embed the token: /bot<id>:<secret>/ and /file/bot<id>:<secret>/
_BOT_TOKEN_RE = re.compile(r"(/bot)\d+:[A-Za-z0-9_-]+")


class RedactBotTokenFilter(logging.Filter):
    """Mask Telegram bot tokens in log records (httpx logs full request URLs)."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        if "/bot" not in message:
            return True
        redacted = _BOT_TOKEN_RE.sub(r"\1<redacted>", message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def _build_config(log_level: str) -> Dict[str, Any]:
    config: Dict[str, Any] = copy.deepcopy(UVICORN_LOGGING_CONFIG)

    formatters = config["formatters"]
    formatters["default"].update(fmt=LOG_FORMAT, use_colors=False)
    formatters["access"]["fmt"] = ACCESS_LOG_FORMAT

    config["filters"] = {"redact_bot_token": {"()": RedactBotTokenFilter}}
    handlers = config["handlers"]
    handlers["default"].update(stream="ext://sys.stdout", filters=["redact_bot_token"])
    handlers["access"]["stream"] = "ext://sys.stdout"

    loggers = config["loggers"]
    loggers["uvicorn"]["level"] = log_level
    loggers["uvicorn.error"]["level"] = log_level
    loggers["uvicorn.access"]["level"] = "INFO"
    # Same formatting when the API runs under gunicorn with uvicorn workers
    loggers["gunicorn.error"] = {"handlers": ["default"], "level": log_level, "propagate": False}
    loggers["gunicorn.access"] = {"handlers": ["access"], "level": "INFO", "propagate": False}

    config["root"] = {"handlers": ["default"], "level": log_level}
    return config


def configure_logging(debug: bool = False) -> None:
    """Configure stdout logging for the bot, the API and the tools."""
    dictConfig(_build_config("DEBUG" if debug else "INFO"))

    for logger_name, level in _THIRD_PARTY_LEVELS.items():
        logging.getLogger(logger_name).setLevel(level)
