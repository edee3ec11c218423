"""Controller frame envelope used on the Atlas Command websocket.

Only the envelope shape and type predicates live here; this package does not
open websocket connections.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Union


class FrameType(str, Enum):
    HANDSHAKE = "handshake"
    HANDSHAKE_ACK = "handshake:ack"
    HEARTBEAT = "heartbeat"
    HEARTBEAT_ACK = "heartbeat:ack"
    SYNC = "sync"
    SYNC_ACK = "sync:ack"
    SUBSCRIBE = "subscribe"
    SUBSCRIBE_ACK = "subscribe:ack"
    UNSUBSCRIBE = "unsubscribe"
    UNSUBSCRIBE_ACK = "unsubscribe:ack"
    EVENT = "event"
    CREATE = "create"
    CREATE_ACK = "create:ack"
    UPDATE = "update"
    UPDATE_ACK = "update:ack"
    DELETE = "delete"
    DELETE_ACK = "delete:ack"
    LIST = "list"
    LIST_ACK = "list:ack"
    GET = "get"
    GET_ACK = "get:ack"
    ERROR = "error"


@dataclass(slots=True)
class ControllerFrame:
    """A single websocket frame.

    ``type`` is a :class:`FrameType` for recognised frames and the raw string
    otherwise, so newer server frames still parse.
    """

    type: Union[FrameType, str]
    payload: Dict[str, Any] = field(default_factory=dict)
    meta: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ControllerFrame":
        raw_type = data.get("type")
        if not isinstance(raw_type, str) or not raw_type:
            raise ValueError("Frame is missing a 'type'")
        try:
            frame_type: Union[FrameType, str] = FrameType(raw_type)
        except ValueError:
            frame_type = raw_type
        return cls(
            type=frame_type,
            payload=_section(data, "payload"),
            meta=_section(data, "meta"),
        )

    def to_dict(self) -> Dict[str, Any]:
        frame_type = (
            self.type.value if isinstance(self.type, FrameType) else self.type
        )
        result: Dict[str, Any] = {"type": frame_type}
        if self.meta:
            result["meta"] = dict(self.meta)
        if self.payload:
            result["payload"] = dict(self.payload)
        return result


def _section(data: Mapping[str, Any], name: str) -> Dict[str, Any]:
    value = data.get(name)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(f"Frame '{name}' must be an object")
    return dict(value)


def _is(frame: ControllerFrame, frame_type: FrameType) -> bool:
    return frame.type == frame_type


def is_sync_ack_frame(frame: ControllerFrame) -> bool:
    return _is(frame, FrameType.SYNC_ACK)


def is_event_frame(frame: ControllerFrame) -> bool:
    return _is(frame, FrameType.EVENT)


def is_heartbeat_ack_frame(frame: ControllerFrame) -> bool:
    return _is(frame, FrameType.HEARTBEAT_ACK)


def is_create_ack_frame(frame: ControllerFrame) -> bool:
    return _is(frame, FrameType.CREATE_ACK)


def is_update_ack_frame(frame: ControllerFrame) -> bool:
    return _is(frame, FrameType.UPDATE_ACK)


def is_delete_ack_frame(frame: ControllerFrame) -> bool:
    return _is(frame, FrameType.DELETE_ACK)


def is_handshake_ack_frame(frame: ControllerFrame) -> bool:
    return _is(frame, FrameType.HANDSHAKE_ACK)


def is_error_frame(frame: ControllerFrame) -> bool:
    return _is(frame, FrameType.ERROR)
