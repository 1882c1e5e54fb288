"""Messages exchanged with clients: parsed requests and outgoing responses."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Iterable, Mapping, TypeVar, Union

from .game_object import Direction


class InfoType(IntEnum):
    GAME_OPERATION = 1
    ROOM_OPERATION = 2


class RoomOperationType(IntEnum):
    CREATE_PLAYER = 1
    REMOVE_PLAYER = 2
    CREATE_ROOM = 3
    JOIN_ROOM = 5
    LEAVE_ROOM = 6
    READY_ROOM = 7
    UNREADY_ROOM = 8
    START_GAME = 9
    ROOM_INFO = 10
    ROOM_KEEPER_INFO = 11
    PLAYER_INFO = 12


class GameOperationType(IntEnum):
    CHANGE_DIRECTION = 1
    BORN = 2
    GET_GAME_INFO = 3


class ResponseCode(IntEnum):
    SUCCESS = 1
    FAILED = -1
    UPDATE = 2
    GAME_OVER = 3


_E = TypeVar("_E", bound=IntEnum)
_MISSING = object()


def _mapping(value: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ValueError(f"{what} must be a JSON object")
    return value


def _int_field(data: Mapping[str, Any], key: str, default: Any = _MISSING) -> int:
    value = data.get(key, _MISSING)
    if value is _MISSING:
        if default is _MISSING:
            raise ValueError(f"missing field {key!r}")
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"field {key!r} must be a number")
    return int(value)


def _str_field(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key, _MISSING)
    if value is _MISSING:
        raise ValueError(f"missing field {key!r}")
    if not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a string")
    return value


def _enum_or_int(enum: type[_E], value: int) -> Union[_E, int]:
    """Known values become enum members; unknown ones stay plain ints."""
    try:
        return enum(value)
    except ValueError:
        return value


def _data_section(data: Mapping[str, Any]) -> Mapping[str, Any]:
    return _mapping(data.get("data"), "payload 'data'")


@dataclass
class RoomOperationPayload:
    type: Union[RoomOperationType, int]
    room_id: int = -1
    name: str = ""
    player_id: int = -1

    @classmethod
    def from_json(cls, data: Any) -> RoomOperationPayload:
        data = _mapping(data, "payload")
        payload = cls(_enum_or_int(RoomOperationType, _int_field(data, "type")))
        if payload.type in (RoomOperationType.JOIN_ROOM, RoomOperationType.ROOM_INFO):
            payload.room_id = _int_field(_data_section(data), "roomId")
        elif payload.type is RoomOperationType.CREATE_PLAYER:
            payload.name = _str_field(_data_section(data), "name")
        elif payload.type is RoomOperationType.PLAYER_INFO:
            payload.player_id = _int_field(_data_section(data), "playerId")
        return payload


@dataclass
class GameOperationPayload:
    type: Union[GameOperationType, int]
    new_direction: Direction | None = None

    @classmethod
    def from_json(cls, data: Any) -> GameOperationPayload:
        data = _mapping(data, "payload")
        payload = cls(_enum_or_int(GameOperationType, _int_field(data, "type")))
        if payload.type is GameOperationType.CHANGE_DIRECTION:
            raw = _int_field(_data_section(data), "newDirection")
            try:
                payload.new_direction = Direction(raw)
            except ValueError as exc:
                raise ValueError(f"unknown direction {raw}") from exc
        return payload


@dataclass
class ReceivedInfo:
    """A request from the client on connection ``ws_id``."""

    type: Union[InfoType, int]
    ws_id: int
    room_id: int = -1
    player_id: int = -1
    raw_payload: Any = None
    game_payload: GameOperationPayload | None = None
    room_payload: RoomOperationPayload | None = None

    @classmethod
    def from_json(cls, data: Any, ws_id: int) -> ReceivedInfo:
        data = _mapping(data, "message")
        info_type = _enum_or_int(InfoType, _int_field(data, "type"))
        if "payload" not in data:
            raise ValueError("missing field 'payload'")
        raw_payload = data["payload"]
        info = cls(
            type=info_type,
            ws_id=ws_id,
            room_id=_int_field(data, "roomId", -1),
            player_id=_int_field(data, "playerId", -1),
            raw_payload=raw_payload,
        )
        if info_type is InfoType.GAME_OPERATION:
            info.game_payload = GameOperationPayload.from_json(raw_payload)
        elif info_type is InfoType.ROOM_OPERATION:
            info.room_payload = RoomOperationPayload.from_json(raw_payload)
        return info


@dataclass
class SendInfo:
    """A response addressed to one or more connections."""

    targets: Union[int, Iterable[int]]
    code: ResponseCode = ResponseCode.SUCCESS
    msg: str = ""
    data: Any = None
    target_ids: tuple[int, ...] = field(init=False)

    def __post_init__(self) -> None:
        if isinstance(self.targets, int):
            self.target_ids = (self.targets,)
        else:
            self.target_ids = tuple(self.targets)
        self.targets = self.target_ids

    def to_json(self) -> dict[str, Any]:
        return {"code": int(self.code), "msg": self.msg, "data": self.data}