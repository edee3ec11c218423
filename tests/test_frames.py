"""Tests for controller frame parsing."""

import pytest

from atlas_command_client.frames import (
    ControllerFrame,
    FrameType,
    is_create_ack_frame,
    is_delete_ack_frame,
    is_error_frame,
    is_event_frame,
    is_handshake_ack_frame,
    is_heartbeat_ack_frame,
    is_sync_ack_frame,
    is_update_ack_frame,
)


class TestControllerFrame:
    def test_parses_known_type(self) -> None:
        frame = ControllerFrame.from_dict(
            {
                "type": "event",
                "meta": {"sequence": 4},
                "payload": {"table": "entities", "operation": "update", "id": "e1"},
            }
        )

        assert frame.type is FrameType.EVENT
        assert frame.meta == {"sequence": 4}
        assert frame.payload["operation"] == "update"

    def test_keeps_unknown_type_as_string(self) -> None:
        frame = ControllerFrame.from_dict({"type": "telemetry:burst"})

        assert frame.type == "telemetry:burst"
        assert frame.payload == {}

    def test_missing_type_rejected(self) -> None:
        with pytest.raises(ValueError):
            ControllerFrame.from_dict({"payload": {}})

    @pytest.mark.parametrize(
        "data",
        [
            {"type": "event", "payload": [1]},
            {"type": "event", "meta": "sequence"},
        ],
    )
    def test_non_object_sections_rejected(self, data) -> None:
        with pytest.raises(ValueError, match="must be an object"):
            ControllerFrame.from_dict(data)

    def test_null_sections_become_empty(self) -> None:
        frame = ControllerFrame.from_dict({"type": "event", "payload": None})

        assert frame.payload == {}
        assert frame.meta == {}

    def test_to_dict_omits_empty_sections(self) -> None:
        frame = ControllerFrame(type=FrameType.HEARTBEAT)

        assert frame.to_dict() == {"type": "heartbeat"}

    def test_to_dict_round_trips_error_frame(self) -> None:
        data = {"type": "error", "payload": {"code": "E1", "message": "boom"}}

        assert ControllerFrame.from_dict(data).to_dict() == data


@pytest.mark.parametrize(
    ("frame_type", "predicate"),
    [
        ("sync:ack", is_sync_ack_frame),
        ("event", is_event_frame),
        ("heartbeat:ack", is_heartbeat_ack_frame),
        ("create:ack", is_create_ack_frame),
        ("update:ack", is_update_ack_frame),
        ("delete:ack", is_delete_ack_frame),
        ("handshake:ack", is_handshake_ack_frame),
        ("error", is_error_frame),
    ],
)
def test_predicates_match_only_their_type(frame_type, predicate) -> None:
    assert predicate(ControllerFrame.from_dict({"type": frame_type}))
    assert not predicate(ControllerFrame.from_dict({"type": "handshake"}))
