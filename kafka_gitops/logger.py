import logging
import logging.config
from typing import Any, Dict

__all__ = ["get_logger", "set_level", "supress_timestamps"]

should_supress_timestamps: bool = False


def supress_timestamps(flag: bool = True) -> None:
    """Turn timestamps in log lines on or off.

    Args:
        flag: if True, log lines are emitted without timestamps
    """
    global should_supress_timestamps
    should_supress_timestamps = flag


def get_default_logger_configuration(level: int = logging.INFO) -> Dict[str, Any]:
    if should_supress_timestamps:
        log_format = "[%(levelname)s] %(name)s: %(message)s"
    else:
        log_format = "%(asctime)s.%(msecs)03d [%(levelname)s] %(name)s: %(message)s"

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {"format": log_format, "datefmt": "%y-%m-%d %H:%M:%S"},
        },
        "handlers": {
            "default": {
                "level": level,
                "formatter": "standard",
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stderr",
            },
        },
        "loggers": {
            "kafka_gitops": {"handlers": ["default"], "level": level},
        },
    }


def get_logger(name: str, *, level: int = logging.INFO) -> logging.Logger:
    """Return a logger configured with the package defaults.

    Args:
        name: name of the logger, usually `__name__`
        level: level of the package logger

    Returns:
        The logger
    """
    config = get_default_logger_configuration(level=level)
    logging.config.dictConfig(config)

    return logging.getLogger(name)


def set_level(level: int) -> None:
    logging.getLogger("kafka_gitops").setLevel(level)
