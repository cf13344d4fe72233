"""Response codes shared by every endpoint, with their user-facing messages."""

import enum


class Code(enum.IntEnum):
    """Application status codes carried in the ``code`` field of a response."""

    SUCCESS = 200
    INVALID_PARAMS = 400
    SERVER_ERROR = 500

    ERROR_MAC_FORMAT = 603
    EXCEED_RATE_LIMIT = 604
    INVALID_DEVICE = 605


_MESSAGES = {
    Code.SUCCESS: "ok",
    Code.INVALID_PARAMS: "请求参数不正确",
    Code.SERVER_ERROR: "fail",
    Code.ERROR_MAC_FORMAT: "mac地址格式不正确",
    Code.EXCEED_RATE_LIMIT: "请求过于频繁，请稍后再试",
    Code.INVALID_DEVICE: "设备校验失败",
}


def message(code):
    """Return the message for ``code``, or an empty string for an unknown code."""
    return _MESSAGES.get(code, "")