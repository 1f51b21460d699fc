import logging
import sys

from .configurations import RotationSettings
from .exceptions import verify_type


__author__ = 'Aaron Hosford'
__all__ = [
    'DEFAULT_FORMAT',
    'LogFormat',
    'LogFileHandler',
    'LogStreamHandler',
    'configure_logging',
]


DEFAULT_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'


class LogFormat(logging.Formatter):

    def __init__(self, fmt=None, datefmt=None, style='%'):
        logging.Formatter.__init__(self, fmt or DEFAULT_FORMAT, datefmt, style)


class LogFileHandler(logging.FileHandler):

    def __init__(self, filename, mode='a', encoding='utf-8', delay=True, format=None, level=logging.NOTSET):
        logging.FileHandler.__init__(self, filename, mode, encoding, delay)
        self.setFormatter(format or LogFormat())
        self.setLevel(level)


class LogStreamHandler(logging.StreamHandler):

    def __init__(self, stream=None, format=None, level=logging.NOTSET):
        logging.StreamHandler.__init__(self, sys.stderr if stream is None else stream)
        self.setFormatter(format or LogFormat())
        self.setLevel(level)


def configure_logging(settings, stream=None, logger_name='svcrotate'):
    """
    Attach handlers to the package logger according to the settings. Any handlers previously
    attached by this function are removed first, so it is safe to call more than once.

    :param settings: A RotationSettings instance.
    :param stream: The stream for console logging. Defaults to sys.stderr.
    :param logger_name: The name of the logger to configure.
    :return: The configured logger.
    """
    verify_type(settings, RotationSettings)

    logger = logging.getLogger(logger_name)
    for handler in list(logger.handlers):
        if isinstance(handler, (LogFileHandler, LogStreamHandler)):
            logger.removeHandler(handler)
            handler.close()

    format = LogFormat(settings.log_format)

    logger.addHandler(LogStreamHandler(stream, format, settings.log_level))
    if settings.log_file:
        logger.addHandler(LogFileHandler(settings.log_file, format=format, level=settings.log_level))

    logger.setLevel(settings.log_level)
    logger.propagate = False

    return logger
