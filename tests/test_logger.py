import inspect

import pytest

from dronegate import logger
from dronegate.logger import LogLevel, caller_info


def _current_line():
    return inspect.currentframe().f_back.f_lineno


def test_caller_info_names_this_file_and_line():
    expected = _current_line() + 1
    path, line = caller_info(1)
    assert path.endswith("tests/test_logger.py")
    assert line == expected


def test_caller_info_through_helper():
    def where():
        return caller_info(2)

    expected = _current_line() + 1
    path, line = where()
    assert path.endswith("tests/test_logger.py")
    assert line == expected


def test_caller_info_too_deep_is_unknown():
    assert caller_info(100000) == ("unknown", 0)


def test_error_line_format(capsys):
    expected = _current_line() + 1
    logger.error("request decode error: %s", "boom")
    out = capsys.readouterr().out
    assert "-[ERROR]-" in out
    assert f"test_logger.py:{expected}]->" in out
    assert out.rstrip().endswith("-> request decode error: boom")


@pytest.mark.parametrize(
    "func, name",
    [
        (logger.debug, "DEBUG"),
        (logger.info, "INFO"),
        (logger.warning, "WARNING"),
        (logger.error, "ERROR"),
    ],
)
def test_level_names(capsys, func, name):
    func("hello")
    out = capsys.readouterr().out
    assert f"-[{name}]-" in out
    assert out.endswith("-> hello\n")


def test_message_without_args_is_not_formatted(capsys):
    logger.info("100% done")
    assert capsys.readouterr().out.endswith("-> 100% done\n")


def test_fatal_exits_with_status_one(capsys):
    with pytest.raises(SystemExit) as excinfo:
        logger.fatal("listen failed: %s", "port busy")
    assert excinfo.value.code == 1
    assert "-[FATAL]-" in capsys.readouterr().out


def test_levels_from_values_are_ordered():
    levels = [LogLevel(value) for value in range(5)]
    assert levels == [
        LogLevel.DEBUG,
        LogLevel.INFO,
        LogLevel.WARNING,
        LogLevel.ERROR,
        LogLevel.FATAL,
    ]
    assert levels == sorted(levels)