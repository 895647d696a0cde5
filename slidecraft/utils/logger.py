"""
Logging configuration for SlideCraft using Logfire.

Falls back to standard Python logging when Logfire has no token.
"""
import logging
import os
from typing import Optional

import logfire

from slidecraft.utils.logfire_config import is_configured


class LogfireLogger:
    """Wrapper to make Logfire work like standard Python logging."""

    def __init__(self, name: str):
        self.name = name

    def _format(self, message, args):
        if args:
            message = message % args
        return f"[{self.name}] {message}"

    def info(self, message, *args, **kwargs):
        logfire.info(self._format(message, args), **kwargs)

    def warn(self, message, *args, **kwargs):
        logfire.warn(self._format(message, args), **kwargs)

    def warning(self, message, *args, **kwargs):
        self.warn(message, *args, **kwargs)

    def error(self, message, *args, **kwargs):
        kwargs.pop('exc_info', None)
        logfire.error(self._format(message, args), **kwargs)

    def debug(self, message, *args, **kwargs):
        logfire.debug(self._format(message, args), **kwargs)

    def exception(self, message, *args, **kwargs):
        kwargs.pop('exc_info', None)
        logfire.exception(self._format(message, args), **kwargs)

    def setLevel(self, level):
        # No-op for compatibility
        pass


class StandardLogger:
    """Standard Python logger when Logfire is not configured."""

    def __init__(self, name: str, level: Optional[str] = None):
        self.logger = logging.getLogger(name)

        log_level_str = (level or os.getenv('LOG_LEVEL', 'INFO')).upper()
        log_level = getattr(logging, log_level_str, logging.INFO)
        self.logger.setLevel(log_level)

        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setLevel(log_level)
            formatter = logging.Formatter(
                '[%(levelname)s %(name)s] %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    @staticmethod
    def _strip(kwargs):
        # Logfire-style structured attributes are folded into `extra`
        extra = {k: v for k, v in kwargs.items() if k not in ('exc_info', 'extra')}
        passthrough = {}
        if extra or 'extra' in kwargs:
            passthrough['extra'] = {**kwargs.get('extra', {}), **extra}
        return passthrough

    def info(self, message, *args, **kwargs):
        self.logger.info(message, *args, **self._strip(kwargs))

    def warn(self, message, *args, **kwargs):
        self.logger.warning(message, *args, **self._strip(kwargs))

    def warning(self, message, *args, **kwargs):
        self.logger.warning(message, *args, **self._strip(kwargs))

    def error(self, message, *args, **kwargs):
        exc_info = kwargs.get('exc_info', False)
        self.logger.error(message, *args, exc_info=exc_info, **self._strip(kwargs))

    def debug(self, message, *args, **kwargs):
        self.logger.debug(message, *args, **self._strip(kwargs))

    def exception(self, message, *args, **kwargs):
        self.logger.exception(message, *args, **self._strip(kwargs))

    def setLevel(self, level):
        self.logger.setLevel(level)


def setup_logger(name: str, level: Optional[str] = None):
    """
    Set up a logger using Logfire or standard Python logging if not configured.

    Args:
        name: Logger name (usually __name__)
        level: Logging level (used for standard logger)

    Returns:
        LogfireLogger or StandardLogger instance
    """
    if is_configured():
        return LogfireLogger(name)
    return StandardLogger(name, level)
