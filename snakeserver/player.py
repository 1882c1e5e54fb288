"""Players and their lifecycle between rooms and games."""

from __future__ import annotations

import itertools
from enum import IntEnum
from typing import Any


class PlayerState(IntEnum):
    PLAYING = 1
    READY = 2
    IN_ROOM = 3
    DISSOCIATED = 4


class Player:
    """A connected player; ``room`` is the room joined, if any."""

    _ids = itertools.count(0)

    def __init__(
        self,
        name: str,
        ws_id: int,
        state: PlayerState = PlayerState.DISSOCIATED,
    ) -> None:
        self.name = name
        self.ws_id = ws_id
        self.state = PlayerState(state)
        self.room: Any = None
        self.id: int = next(Player._ids)

    def join_room(self, room: Any) -> None:
        self.room = room
        self.state = PlayerState.IN_ROOM

    def leave_room(self) -> None:
        self.room = None
        self.state = PlayerState.DISSOCIATED

    def ready(self) -> bool:
        """Mark ready; only possible from inside a room."""
        if self.state is PlayerState.IN_ROOM:
            self.state = PlayerState.READY
            return True
        return False

    def unready(self) -> bool:
        """Withdraw readiness; only possible when ready."""
        if self.state is PlayerState.READY:
            self.state = PlayerState.IN_ROOM
            return True
        return False

    def join_game(self) -> None:
        if self.state is PlayerState.READY:
            self.state = PlayerState.PLAYING

    def over_game(self) -> None:
        if self.state is PlayerState.PLAYING:
            self.state = PlayerState.IN_ROOM

    def to_json(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "id": self.id, "state": int(self.state)}
        if self.state is PlayerState.IN_ROOM and self.room is not None:
            data["roomId"] = self.room.id
        return data

    def __repr__(self) -> str:
        return f"Player(id={self.id}, name={self.name!r}, state={self.state.name})"