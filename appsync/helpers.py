"""
This is a helper file used by the note synchronisation service, the session manager and the front ends.
"""

from __future__ import annotations

import logging
import re
import sys
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

import markdown2

APP_NAME: str = "AppSync"
DATA_LOCATION: Path = Path.home() / ".config" / APP_NAME  #: Location where application data is stored.
LOG_LOCATION: Path = Path.home() / ".local" / "state" / APP_NAME / "logs"  #: Location where log files are written.
if sys.platform == 'darwin':
    DATA_LOCATION = Path.home() / "Library" / "Application Support" / APP_NAME
    LOG_LOCATION = Path.home() / "Library" / "Logs" / APP_NAME

LOG_FORMAT: str = '%(asctime)s %(levelname)s: %(message)s'
LOG_LEVELS: dict = {
    'debug': logging.DEBUG,
    'info': logging.INFO,
    'warning': logging.WARNING,
    'critical': logging.CRITICAL
}


def run_now(fn: Callable) -> None:
    """
    Default dispatcher for store and provider callbacks: runs them on whichever thread delivers them.
    """
    fn()


def get_uuid() -> str:
    """
    Generates a document id.

    :return: a 32 character hex string.
    """
    return uuid.uuid4().hex


def markdown_to_html(text: str) -> str:
    """
    Converts Markdown to HTML using the `markdown2 <https://pypi.org/project/markdown2/>`_ library. Used to preview
    the content of a note.

    :param text: the Markdown text to convert to HTMl.

    :return: the HTML version of the Markdown given.
    """
    html = markdown2.markdown(text, extras={
        'breaks': {'on_newline': True, 'on_backslash': True},
        'cuddled-lists': None
    })
    build = ''
    for line in html.split('\n'):
        build += '<br>' if re.match(r'^\s*$', line) else line
        build += '\n'
    return build


def settings_folder() -> Path:
    """
    Get the location of the Application Data folder for AppSync

    :return: path to the Application Data folder.
    """
    folder = DATA_LOCATION
    folder.mkdir(parents=True, exist_ok=True)
    return folder


def log_folder() -> Path:
    """
    Get the location of the folder log files are written to.

    :return: path to the log folder.
    """
    folder = LOG_LOCATION
    folder.mkdir(parents=True, exist_ok=True)
    return folder


def setup_logging(logging_level: str,
                  log_stdout: bool = False,
                  log_file: bool = True,
                  func: Callable | None = None) -> logging.Logger:
    """
    Sets up the root logger.

    :param logging_level: the logging level which can be `debug`, `info`, `warning` or `critical`.
    :param log_stdout: if True, logs are sent to standard out.
    :param log_file: if True, logs are sent to a timestamped file in :py:func:`log_folder`.
    :param func: if given, every formatted log message is passed to this function (used by the GUI log pane).

    :return: the root logger.
    """
    log_level = LOG_LEVELS.get(logging_level.lower(), logging.INFO)
    logger = logging.getLogger()
    logger.setLevel(log_level)
    formatter = logging.Formatter(LOG_FORMAT)

    if log_file:
        file_name = datetime.now().strftime(APP_NAME + "_%Y%m%d-%H%M%S") + '.log'
        file_handler = logging.FileHandler(log_folder() / file_name)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
    if log_stdout:
        stream_handler = logging.StreamHandler(sys.stdout)
        stream_handler.setFormatter(formatter)
        logger.addHandler(stream_handler)
    if func is not None:
        func_handler = FunctionHandler(func)
        func_handler.setFormatter(formatter)
        logger.addHandler(func_handler)
    return logger


class DateUtil:
    """
    Utility class for converting the backend's various representations of a point in time to a :py:class:`datetime`.
    """

    DISPLAY_DATETIME = "%d %b %Y %H:%M"

    @staticmethod
    def now() -> datetime:
        """
        The current time as a timezone-aware UTC datetime.
        """
        return datetime.now(timezone.utc)

    @staticmethod
    def to_utc(obj: datetime) -> datetime:
        """
        Normalises a datetime to UTC. Naive datetimes are assumed to already be in UTC.

        :param obj: the datetime to normalise.
        :return: a timezone-aware datetime.
        """
        if obj.tzinfo is None:
            return obj.replace(tzinfo=timezone.utc)
        return obj.astimezone(timezone.utc)

    @staticmethod
    def resolve(obj) -> datetime | None:
        """
        Resolve a field value to a point in time. Accepts :py:class:`datetime` objects (including the Firestore
        ``DatetimeWithNanoseconds`` subclass), protobuf ``Timestamp`` objects and ISO-8601 strings.

        :param obj: the value to resolve.
        :return: a timezone-aware datetime, or None if ``obj`` is not a point in time, or is one which can't be
            represented in UTC (e.g. ``0001-01-01T00:00:00+01:00``).
        """
        try:
            if isinstance(obj, datetime):
                return DateUtil.to_utc(obj)
            if hasattr(obj, 'ToDatetime'):
                return DateUtil.to_utc(obj.ToDatetime())
            if isinstance(obj, str):
                return DateUtil.to_utc(datetime.fromisoformat(obj.replace('Z', '+00:00')))
        except (TypeError, ValueError, OverflowError):
            return None
        return None

    @staticmethod
    def display(obj: datetime) -> str:
        """
        Format a timestamp for display in local time. Falls back to the stored time zone at the ends of the
        representable range.
        """
        try:
            return obj.astimezone().strftime(DateUtil.DISPLAY_DATETIME)
        except OverflowError:
            return obj.strftime(DateUtil.DISPLAY_DATETIME)


class FunctionHandler(logging.Handler):
    def __init__(self, func: Callable):
        logging.Handler.__init__(self)
        self.func = func

    def emit(self, record):
        msg = self.format(record)
        self.func(msg)
