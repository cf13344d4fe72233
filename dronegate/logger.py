"""Minimal console logger that tags each line with time, level and call site."""

import datetime
import enum
import os
import sys

_ROOT_MARKER = "/cloud"
_UNKNOWN = ("unknown", 0)


class LogLevel(enum.IntEnum):
    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3
    FATAL = 4


def caller_info(depth=1):
    """Return ``(path, line)`` of the frame ``depth`` levels above this call.

    A depth of 1 names the function that called ``caller_info``. The path is
    cut to start at the project root marker when the marker is present.
    """
    try:
        frame = sys._getframe(depth)
    except ValueError:
        return _UNKNOWN
    path = frame.f_code.co_filename.replace(os.sep, "/")
    start = path.find(_ROOT_MARKER)
    if start >= 0:
        path = path[start:]
    return path, frame.f_lineno


def _log(level, fmt, args):
    timestamp = datetime.datetime.now().strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
    # frames: 0 caller_info, 1 _log, 2 the public helper, 3 the user's code
    path, line = caller_info(3)
    text = fmt % args if args else fmt
    print(f"[{timestamp}]-[{level.name}]-[{path}:{line}]-> {text}", flush=True)
    if level is LogLevel.FATAL:
        raise SystemExit(1)


def debug(fmt, *args):
    _log(LogLevel.DEBUG, fmt, args)


def info(fmt, *args):
    _log(LogLevel.INFO, fmt, args)


def warning(fmt, *args):
    _log(LogLevel.WARNING, fmt, args)


def error(fmt, *args):
    _log(LogLevel.ERROR, fmt, args)


def fatal(fmt, *args):
    """Log the message and stop the program with exit status 1."""
    _log(LogLevel.FATAL, fmt, args)