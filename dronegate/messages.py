"""Message models exchanged with drones and the frontend, and JSON helpers."""

import enum
import json
import math
from dataclasses import dataclass, field, fields
from decimal import Decimal
from typing import Any, Optional, Tuple

from . import logger
from .response import Code, message


class MessageType(enum.IntEnum):
    DRONE_INFO = 0
    RUNNING_STATUS = 1


class DeliveryStatus(enum.IntEnum):
    PICKING = 0
    PICKED = 1
    DELIVERED = 2


class FlightMode(enum.IntEnum):
    STABILIZE = 0
    ACRO = 1
    ALT_HOLD = 2
    AUTO = 3
    GUIDED = 4
    LOITER = 5
    RTL = 6
    CIRCLE = 7
    POSITION = 8
    LAND = 9
    OF_LOITER = 10
    DRIFT = 11
    SPORT = 12
    FLIP = 13
    AUTOTUNE = 14
    POSHOLD = 15
    BRAKE = 16
    THROW = 17
    AVOID_ADSB = 18
    GUIDED_NOGPS = 19
    SMART_RTL = 20
    FLOWHOLD = 21
    FOLLOW = 22
    ZIGZAG = 23
    SYSTEMID = 24
    AUTOROTATE = 25
    AUTO_RTL = 26
    MANUAL = 27


class MavState(enum.IntEnum):
    UNINIT = 0
    BOOT = 1
    CALIBRATING = 2
    STANDBY = 3
    ACTIVE = 4
    CRITICAL = 5
    EMERGENCY = 6
    POWEROFF = 7
    FLIGHT_TERMINATION = 8


_CHANNELS = {
    MessageType.DRONE_INFO: "drone_info",
    MessageType.RUNNING_STATUS: "running_status",
}


class RequestError(Exception):
    """A request that cannot be served; ``code`` is the response code to report."""

    def __init__(self, code=Code.INVALID_PARAMS, detail=None):
        super().__init__(detail or message(code))
        self.code = Code(code)


@dataclass
class Result:
    """Standard response body."""

    code: int
    msg: str
    data: Any = None

    def to_json(self):
        body = {"code": int(self.code), "msg": self.msg}
        if self.data is not None:
            body["data"] = self.data
        return json.dumps(body, ensure_ascii=False)


# --- typed JSON field decoding -------------------------------------------------


def _int_check(bits, signed):
    low = -(1 << (bits - 1)) if signed else 0
    high = (1 << (bits - 1)) - 1 if signed else (1 << bits) - 1

    def check(value, name):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"{name}: expected an integer, got {value!r}")
        if not low <= value <= high:
            raise ValueError(f"{name}: {value} is out of range")
        return value

    return check


def _float_check(value, name):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{name}: expected a number, got {value!r}")
    return float(value)


def _bool_check(value, name):
    if not isinstance(value, bool):
        raise ValueError(f"{name}: expected a boolean, got {value!r}")
    return value


def _str_check(value, name):
    if not isinstance(value, str):
        raise ValueError(f"{name}: expected a string, got {value!r}")
    return value


def _nested_check(cls):
    def check(value, name):
        return _decode(cls, value)

    return check


def _json(name, check, default=0):
    return field(default=default, metadata={"json": name, "check": check})


def _decode(cls, data):
    if not isinstance(data, dict):
        raise ValueError(f"{cls.__name__}: expected a JSON object")
    values = {}
    for spec in fields(cls):
        name = spec.metadata["json"]
        raw = data.get(name)
        if raw is not None:
            values[spec.name] = spec.metadata["check"](raw, name)
    return cls(**values)


_U8 = _int_check(8, False)
_I8 = _int_check(8, True)
_U16 = _int_check(16, False)
_I16 = _int_check(16, True)
_U32 = _int_check(32, False)
_I32 = _int_check(32, True)


@dataclass(frozen=True)
class GlobalPosition:
    time_boot_ms: int = _json("time_boot_ms", _U32)
    lat: int = _json("lat", _I32)
    lon: int = _json("lon", _I32)
    alt: int = _json("alt", _I32)
    relative_alt: int = _json("relative_alt", _I32)
    vx: int = _json("vx", _I16)
    vy: int = _json("vy", _I16)
    vz: int = _json("vz", _I16)
    hdg: int = _json("hdg", _U16)


@dataclass(frozen=True)
class Attitude:
    roll: float = _json("roll", _float_check, 0.0)
    pitch: float = _json("pitch", _float_check, 0.0)
    yaw: float = _json("yaw", _float_check, 0.0)
    roll_speed: float = _json("rollspeed", _float_check, 0.0)
    pitch_speed: float = _json("pitchspeed", _float_check, 0.0)
    yaw_speed: float = _json("yawspeed", _float_check, 0.0)


@dataclass(frozen=True)
class SysStatus:
    onboard_control_sensors_present: int = _json("onboard_control_sensors_present", _U32)
    onboard_control_sensors_enabled: int = _json("onboard_control_sensors_enabled", _U32)
    onboard_control_sensors_health: int = _json("onboard_control_sensors_health", _U32)
    load: int = _json("load", _U16)
    voltage_battery: int = _json("voltage_battery", _U16)
    current_battery: int = _json("current_battery", _I16)
    battery_remaining: int = _json("battery_remaining", _I8)
    drop_rate_comm: int = _json("drop_rate_comm", _U16)
    errors_comm: int = _json("errors_comm", _U16)
    errors_count1: int = _json("errors_count1", _U16)
    errors_count2: int = _json("errors_count2", _U16)
    errors_count3: int = _json("errors_count3", _U16)
    errors_count4: int = _json("errors_count4", _U16)


@dataclass(frozen=True)
class Motor:
    current: int = _json("current", _U16)
    voltage: int = _json("voltage", _U16)
    speed: int = _json("speed", _U16)
    temperature: int = _json("temperature", _U16)


@dataclass(frozen=True)
class DroneData:
    """Telemetry frame sent by a drone; ``did`` is the drone's MAC address."""

    did: str = _json("did", _str_check, "")
    global_position: Optional[GlobalPosition] = _json(
        "GLOBAL_POSITION_INT", _nested_check(GlobalPosition), None
    )
    attitude: Optional[Attitude] = _json("ATTITUDE", _nested_check(Attitude), None)
    sys_status: Optional[SysStatus] = _json("SYS_STATUS", _nested_check(SysStatus), None)
    motor: Optional[Motor] = _json("MOTOR", _nested_check(Motor), None)
    mode: int = _json("MODE", _U8)
    status: int = _json("STATUS", _U8)
    type: int = _json("TYPE", _U8)
    gps_num: int = _json("GPS_NUM", _U8)
    remote_control_connection: bool = _json("REMOTE_CONTROL_CONNECTION", _bool_check, False)
    flight_controller_unlock: bool = _json("FLIGHT_CONTROLER_UNLOCK", _bool_check, False)

    @classmethod
    def from_dict(cls, data):
        return _decode(cls, data)


@dataclass(frozen=True)
class RunningStatus:
    type: int = _json("TYPE", _U8)
    running_status: int = _json("RUNNING_STATUS", _U8)


# --- coordinates ---------------------------------------------------------------

Coordinate = Tuple[float, float]

_EXPONENT_LIMIT = 6


def _format_float(value):
    """Format a float the way the wire format's plain ``%v`` rendering does."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value == 0:
        return "-0" if math.copysign(1.0, value) < 0 else "0"
    sign, digit_tuple, exponent = Decimal(repr(value)).normalize().as_tuple()
    digits = "".join(str(d) for d in digit_tuple)
    point = len(digits) + exponent
    prefix = "-" if sign else ""
    exp = point - 1
    if exp < -4 or exp >= _EXPONENT_LIMIT:
        mantissa = digits[0] + ("." + digits[1:] if len(digits) > 1 else "")
        return f"{prefix}{mantissa}e{'-' if exp < 0 else '+'}{abs(exp):02d}"
    if point <= 0:
        body = "0." + "0" * -point + digits
    elif point >= len(digits):
        body = digits + "0" * (point - len(digits))
    else:
        body = digits[:point] + "." + digits[point:]
    return prefix + body


def _coordinate(item):
    if item is None:
        return (0.0, 0.0)
    if not isinstance(item, list):
        raise ValueError(f"coords: expected a pair of numbers, got {item!r}")
    values = [_float_check(v, "coords") for v in item[:2]]
    values.extend([0.0] * (2 - len(values)))
    return (values[0], values[1])


@dataclass(frozen=True)
class Coordinates:
    """Waypoints: the first is the start point, the second the end point."""

    coords: Tuple[Coordinate, ...] = ()

    @classmethod
    def from_dict(cls, data):
        if not isinstance(data, dict):
            raise ValueError("Coordinates: expected a JSON object")
        raw = data.get("coords")
        if raw is None:
            return cls()
        if not isinstance(raw, list):
            raise ValueError("coords: expected a list")
        return cls(tuple(_coordinate(item) for item in raw))

    def __str__(self):
        pairs = (f"[{_format_float(a)} {_format_float(b)}]" for a, b in self.coords)
        return "[" + " ".join(pairs) + "]"


# --- request and response helpers ----------------------------------------------


def decode_request(body, model):
    """Parse a JSON request body into ``model``; raise RequestError when invalid."""
    try:
        data = json.loads(body)
        return model.from_dict(data)
    except (ValueError, TypeError) as exc:
        logger.error("request decode error: %s", exc)
        raise RequestError(Code.INVALID_PARAMS) from exc


def encode_result(result):
    """Serialise ``result`` as a JSON line, falling back to a server error."""
    try:
        return result.to_json() + "\n"
    except (TypeError, ValueError) as exc:
        logger.error("JSON encode error: %s", exc)
        failure = Result(Code.SERVER_ERROR, message(Code.SERVER_ERROR))
        return failure.to_json() + "\n"


def channel_for(message_type):
    """Return the pub/sub channel for a message ``TYPE`` value."""
    return _CHANNELS[MessageType(message_type)]


def validate_mac_format(mac):
    """Check for six hex pairs separated by ':' or '-'."""
    if len(mac) != 17:
        return False
    for position, char in enumerate(mac, start=1):
        if position % 3 == 0:
            if char not in ":-":
                return False
        elif char not in "0123456789abcdefABCDEF":
            return False
    return True