"""Logger module."""

import logging
import sys

import colorlog

loggers: dict[str, logging.Logger] = {}

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _resolve_level(log_level: str) -> int:
    if log_level not in LOG_LEVELS:
        err_msg = f"Invalid log level: {log_level}"
        raise ValueError(err_msg)
    return LOG_LEVELS[log_level]


def _make_formatter(*, log_color: bool) -> logging.Formatter:
    if not log_color:
        return logging.Formatter(LOG_FORMAT)
    return colorlog.ColoredFormatter(
        f"%(log_color)s {LOG_FORMAT}",
        log_colors={
            "DEBUG": "cyan",
            "INFO": "green",
            "WARNING": "yellow",
            "ERROR": "red",
            "CRITICAL": "red,bg_white",
        },
    )


def get_logger(
    name: str,
    log_handler: str = "stdout",
    log_level: str = "INFO",
    log_color: bool = False,
) -> logging.Logger:
    """Get logger.

    Args:
        name: The name of the logger.
        log_handler: The log handler type ('stdout').
        log_level: The logging level ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL').
        log_color: Whether to use colored output.

    Returns:
        logging.Logger: Configured logger instance.

    Raises:
        ValueError: If invalid handler or log level is provided.
    """
    if name in loggers:
        return loggers[name]

    logger = logging.getLogger(name) if not log_color else colorlog.getLogger(name)

    if log_handler == "stdout" and not log_color:
        handler = logging.StreamHandler(sys.stdout)
    elif log_handler == "stdout" and log_color:
        handler = colorlog.StreamHandler(sys.stdout)
    else:
        err_msg = f"Invalid handler: {log_handler}"
        raise ValueError(err_msg)

    level = _resolve_level(log_level)

    logger.setLevel(level)
    handler.setLevel(level)
    handler.setFormatter(_make_formatter(log_color=log_color))
    logger.addHandler(handler)

    loggers[name] = logger
    return logger


def configure_logging(log_level: str = "INFO", *, log_color: bool = False) -> None:
    """Apply a level and formatter to every logger created through get_logger.

    Module loggers are created at import time with the default level, so the
    service calls this once its settings are loaded.

    Args:
        log_level: The logging level ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL').
        log_color: Whether to use colored output.

    Raises:
        ValueError: If an invalid log level is provided.
    """
    level = _resolve_level(log_level)
    formatter = _make_formatter(log_color=log_color)

    for logger in loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)
            handler.setFormatter(formatter)


__all__ = [
    "LOG_LEVELS",
    "configure_logging",
    "get_logger",
]
