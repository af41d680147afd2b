import pytest

from strava_sdk.errors import StravaDecodeError
from strava_sdk.services.streams import (
    EFFORT_STREAM_TYPES,
    SEGMENT_STREAM_TYPES,
    StreamsService,
    decode_stream_set,
)

from conftest import FakeResp


def test_decode_list_payload_skips_unknown_and_malformed_items():
    payload = [
        {"type": "time", "data": [0, 1, 2], "series_type": "time", "original_size": 3},
        {"type": "latlng", "data": [[1.0, 2.0]], "resolution": "high"},
        {"type": "mystery", "data": [1]},
        "not-an-object",
        {"data": [5]},
    ]

    streams = decode_stream_set(payload)

    assert streams.present() == ["time", "latlng"]
    assert streams.time.data == [0, 1, 2]
    assert streams.time.original_size == 3
    assert streams.latlng.resolution == "high"


def test_decode_keyed_payload_fills_type_from_key():
    payload = {
        "distance": {"data": [0.0, 5.5], "series_type": "distance"},
        "heartrate": {"type": "heartrate", "data": [120, 121]},
    }

    streams = decode_stream_set(payload)

    assert streams.distance.type == "distance"
    assert streams.distance.data == [0.0, 5.5]
    assert streams.heartrate.data == [120, 121]


def test_decode_respects_allowed_types():
    payload = [{"type": "heartrate", "data": [1]}, {"type": "altitude", "data": [2]}]

    streams = decode_stream_set(payload, SEGMENT_STREAM_TYPES)

    assert streams.present() == ["altitude"]


def test_effort_streams_exclude_temperature():
    assert "temp" not in EFFORT_STREAM_TYPES
    assert "watts" in EFFORT_STREAM_TYPES


@pytest.mark.parametrize("payload", ["nope", 3, None])
def test_decode_rejects_wrong_top_level_shape(payload):
    with pytest.raises(StravaDecodeError):
        decode_stream_set(payload)


def test_activity_streams_request(make_dispatcher):
    dispatcher, session = make_dispatcher(
        FakeResp(200, {"time": {"data": [0, 1]}, "watts": {"data": [200, 210]}})
    )

    streams = StreamsService(dispatcher).get_activity_streams(
        7, ["time", "watts"], resolution="low"
    )

    assert streams.present() == ["time", "watts"]
    call = session.calls[0]
    assert call["url"] == "https://api.test/v3/activities/7/streams"
    assert call["params"] == {"key_by_type": "true", "keys": "time,watts", "resolution": "low"}


def test_segment_streams_drop_unsupported_types(make_dispatcher):
    dispatcher, session = make_dispatcher(
        FakeResp(200, [{"type": "latlng", "data": []}, {"type": "time", "data": [1]}])
    )

    streams = StreamsService(dispatcher).get_segment_streams(3, ["latlng", "time"])

    assert streams.present() == ["latlng"]
    assert session.calls[0]["url"].endswith("/segments/3/streams")


def test_stream_payload_of_wrong_shape_is_decode_error(make_dispatcher):
    dispatcher, _ = make_dispatcher(FakeResp(200, "just a string"))
    with pytest.raises(StravaDecodeError):
        StreamsService(dispatcher).get_route_streams(1)
