import json

import pytest

from inspector_relay.exceptions import MalformedEventError, RelayError
from inspector_relay.protocol import (
    InfoEvent,
    RawEvent,
    decode_event,
    encode_event,
    event_type_of,
    parse_frame,
    shutdown_event,
    welcome_event,
)


def test_parse_frame_keeps_original_text():
    text = '{ "type" : "fetch",\n  "payload": {"id": "r1"} }'
    event = parse_frame(text)

    assert isinstance(event, RawEvent)
    assert event.text == text
    assert event.type == "fetch"
    assert encode_event(event) == text


def test_parse_frame_decodes_binary():
    event = parse_frame(b'{"type":"fetch_error"}')
    assert event.text == '{"type":"fetch_error"}'
    assert event.type == "fetch_error"


def test_parse_frame_accepts_json_without_type():
    event = parse_frame("[1, 2, 3]")
    assert event.type is None
    assert event.text == "[1, 2, 3]"


@pytest.mark.parametrize(
    "data",
    ["not json", "{\"type\": \"fetch\"", "", "NaN", '{"value": Infinity}', b"\xff\xfe"],
)
def test_parse_frame_rejects_malformed(data):
    with pytest.raises(MalformedEventError) as exc_info:
        parse_frame(data)
    assert exc_info.value.error_code == "MSG001"


def test_parse_frame_rejects_excessive_nesting():
    with pytest.raises(MalformedEventError) as exc_info:
        parse_frame("[" * 50000 + "]" * 50000)
    assert exc_info.value.message.startswith("Invalid JSON")


def test_encode_mapping_is_compact():
    text = encode_event({"type": "fetch", "payload": {"id": "r2", "url": "/é"}})
    assert text == '{"type":"fetch","payload":{"id":"r2","url":"/é"}}'


def test_encode_unserializable_mapping():
    with pytest.raises(MalformedEventError):
        encode_event({"type": "fetch", "payload": object()})


def test_info_event_wire_form():
    assert json.loads(welcome_event("abc").to_json()) == {
        "type": "info",
        "message": "Connected",
        "clientId": "abc",
    }
    assert shutdown_event().to_dict() == {
        "type": "info",
        "message": "Server shutting down",
    }


def test_decode_event_tags_info_notices():
    event = decode_event('{"type":"info","message":"Connected","clientId":"42"}')
    assert event == InfoEvent(message="Connected", client_id="42")

    other = decode_event('{"type":"fetch"}')
    assert isinstance(other, RawEvent)


def test_info_event_from_dict_rejects_other_types():
    with pytest.raises(MalformedEventError):
        InfoEvent.from_dict({"type": "fetch", "message": "x"})


def test_event_type_of():
    assert event_type_of({"type": "fetch"}) == "fetch"
    assert event_type_of({"type": 3}) is None
    assert event_type_of(RawEvent("{}", "custom")) == "custom"
    assert event_type_of(InfoEvent("hi")) == "info"


def test_error_to_dict():
    error = MalformedEventError("Invalid JSON", raw="x" * 500)
    data = error.to_dict()

    assert isinstance(error, RelayError)
    assert data["error_type"] == "MalformedEventError"
    assert data["error_code"] == "MSG001"
    assert len(data["details"]["raw"]) == 200
