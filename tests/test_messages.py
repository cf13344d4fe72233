import json

import pytest

from dronegate.messages import (
    Attitude,
    Coordinates,
    DeliveryStatus,
    DroneData,
    FlightMode,
    GlobalPosition,
    MavState,
    MessageType,
    RequestError,
    Result,
    channel_for,
    decode_request,
    encode_result,
    validate_mac_format,
)
from dronegate.response import Code, message


@pytest.mark.parametrize(
    "mac, expected",
    [
        ("00:11:22:33:44:55", True),
        ("00-11-22-33-44-55", True),
        ("001122334455", False),
        ("00:11:22:33:44", False),
        ("00:11:22:33:44:55:66", False),
        ("00:11:22:33:44:G5", False),
        ("0A-0B-0C-0D-0E-0F", True),
    ],
)
def test_validate_mac_format(mac, expected):
    assert validate_mac_format(mac) is expected


def test_mac_separator_in_wrong_place():
    assert validate_mac_format("001:12:23:34:45:5") is False


def test_result_omits_missing_data():
    body = json.loads(Result(Code.SUCCESS, message(Code.SUCCESS)).to_json())
    assert body == {"code": 200, "msg": "ok"}


def test_result_includes_data():
    body = json.loads(Result(Code.SUCCESS, "ok", {"id": 3}).to_json())
    assert body["data"] == {"id": 3}


def test_encode_result_is_a_json_line():
    text = encode_result(Result(Code.INVALID_PARAMS, message(Code.INVALID_PARAMS)))
    assert text.endswith("\n")
    assert json.loads(text) == {"code": 400, "msg": "请求参数不正确"}


def test_encode_result_falls_back_to_server_error():
    text = encode_result(Result(Code.SUCCESS, "ok", object()))
    body = json.loads(text)
    assert body["code"] == Code.SERVER_ERROR
    assert body["msg"] == message(Code.SERVER_ERROR)
    assert "data" not in body


def test_decode_coordinates():
    coords = decode_request(b'{"coords": [[30.5, 120.25], [31, 121]]}', Coordinates)
    assert coords.coords == ((30.5, 120.25), (31.0, 121.0))


def test_coordinates_pad_and_truncate():
    coords = Coordinates.from_dict({"coords": [[1], [1, 2, 3], None]})
    assert coords.coords == ((1.0, 0.0), (1.0, 2.0), (0.0, 0.0))


def test_coordinates_missing_is_empty():
    assert Coordinates.from_dict({}).coords == ()
    assert str(Coordinates.from_dict({"coords": None})) == "[]"


def test_coordinates_string_form():
    coords = Coordinates.from_dict({"coords": [[30.5, 120.25], [31, 121]]})
    assert str(coords) == "[[30.5 120.25] [31 121]]"


def test_coordinates_string_uses_exponent_for_large_values():
    coords = Coordinates.from_dict({"coords": [[1000000, 0.00001]]})
    assert str(coords) == "[[1e+06 1e-05]]"


@pytest.mark.parametrize(
    "body",
    [b"not json", b"[1, 2]", b'{"coords": "x"}', b'{"coords": [["a", 1]]}'],
)
def test_decode_request_rejects_bad_bodies(body):
    with pytest.raises(RequestError) as excinfo:
        decode_request(body, Coordinates)
    assert excinfo.value.code is Code.INVALID_PARAMS


def test_drone_data_from_dict():
    data = DroneData.from_dict(
        {
            "did": "00:11:22:33:44:55",
            "GLOBAL_POSITION_INT": {"lat": 301234567, "lon": 1201234567, "hdg": 90},
            "ATTITUDE": {"roll": 0.5, "yawspeed": 1},
            "MODE": FlightMode.GUIDED,
            "STATUS": MavState.ACTIVE,
            "TYPE": MessageType.DRONE_INFO,
            "GPS_NUM": 12,
            "REMOTE_CONTROL_CONNECTION": True,
        }
    )
    assert data.did == "00:11:22:33:44:55"
    assert data.global_position == GlobalPosition(lat=301234567, lon=1201234567, hdg=90)
    assert data.attitude == Attitude(roll=0.5, yaw_speed=1.0)
    assert data.sys_status is None
    assert data.mode == FlightMode.GUIDED
    assert data.gps_num == 12
    assert data.remote_control_connection is True
    assert data.flight_controller_unlock is False


@pytest.mark.parametrize(
    "payload",
    [
        {"MODE": 256},
        {"MODE": -1},
        {"MODE": 1.5},
        {"GPS_NUM": True},
        {"did": 5},
        {"REMOTE_CONTROL_CONNECTION": 1},
        {"GLOBAL_POSITION_INT": [1, 2]},
    ],
)
def test_drone_data_rejects_bad_fields(payload):
    with pytest.raises(ValueError):
        DroneData.from_dict(payload)


def test_decode_request_drone_data():
    data = decode_request('{"did": "00-11-22-33-44-55", "TYPE": 1}', DroneData)
    assert data.type == MessageType.RUNNING_STATUS


def test_channel_for():
    assert channel_for(MessageType.DRONE_INFO) == "drone_info"
    assert channel_for(1) == "running_status"


def test_channel_for_unknown_type():
    with pytest.raises(ValueError):
        channel_for(7)


def test_enum_values():
    assert FlightMode(9) is FlightMode.LAND
    assert FlightMode(27) is FlightMode.MANUAL
    assert DeliveryStatus(2) is DeliveryStatus.DELIVERED
    assert MavState(8) is MavState.FLIGHT_TERMINATION