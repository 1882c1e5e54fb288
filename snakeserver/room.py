"""A room: its players, its board and the state of its game."""

from __future__ import annotations

import itertools
from collections import deque
from enum import IntEnum
from typing import Any

from .board import Board
from .game_items import GameItems
from .player import Player, PlayerState

DEFAULT_WIDTH = 25
DEFAULT_HEIGHT = 25


class RoomState(IntEnum):
    READYING = 0
    INIT_GAMING = 1
    PLAYING = 2


class Room:
    """Players gather in a room; the first one may start and stop the game."""

    _ids = itertools.count(0)

    def __init__(self) -> None:
        self.id: int = next(Room._ids)
        self.state = RoomState.READYING
        self.players: list[Player] = []
        self.game_thread: Any = None
        self.frame = 0
        self.game_all_frames = 3000
        self.fresh_milliseconds = 100
        self.board = Board(DEFAULT_WIDTH, DEFAULT_HEIGHT)
        self.game_items = GameItems(self.board)
        self._operations: deque[Any] = deque()

    def player_by_id(self, player_id: int) -> Player | None:
        return next((p for p in self.players if p.id == player_id), None)

    def add_player(self, player: Player) -> None:
        self.players.append(player)

    def remove_player(self, player: Player) -> None:
        self.players[:] = [p for p in self.players if p is not player]

    def push_operation(self, info: Any) -> None:
        self._operations.append(info)

    def drain_operations(self) -> list[Any]:
        """Take every queued operation, oldest first."""
        drained = []
        while self._operations:
            drained.append(self._operations.popleft())
        return drained

    def init_map(self, width: int = DEFAULT_WIDTH, height: int = DEFAULT_HEIGHT) -> None:
        self.board = Board(width, height)
        self.game_items.board = self.board

    def init_game_items(self) -> None:
        self.game_items = GameItems(self.board)

    def init_wall(self) -> None:
        self.game_items.add_barrier(self.board.edges())
        self.game_items.update()

    def init_snakes(self) -> None:
        for player in self.players:
            self.game_items.add_snake(player)
        self.game_items.update()

    def _is_owner(self, player: Player | None) -> bool:
        return bool(self.players) and self.players[0] is player

    def start_game(self, player: Player | None) -> bool:
        """Start the game if ``player`` owns the room and everyone is ready."""
        if not self._is_owner(player) or self.game_thread is None:
            return False
        if any(p.state is not PlayerState.READY for p in self.players):
            return False
        self.state = RoomState.PLAYING
        self.game_thread.start()
        for p in self.players:
            p.join_game()
        return True

    def stop_game(self, player: Player | None) -> bool:
        if self._is_owner(player) and self.state is RoomState.PLAYING:
            self.over_game()
            return True
        return False

    def over_game(self) -> None:
        if self.state is RoomState.PLAYING:
            self.state = RoomState.READYING
            self.game_thread.join()
            for player in self.players:
                player.over_game()

    def players_json(self) -> list[dict[str, Any]]:
        return [player.to_json() for player in self.players]

    def game_json(self) -> dict[str, Any]:
        return {
            "frame": self.frame,
            "roomId": self.id,
            "state": int(self.state),
            "players": self.players_json(),
            "map": self.board.to_json(),
            "gameItems": self.game_items.to_json(),
        }

    def to_json(self) -> dict[str, Any]:
        return {"id": self.id, "state": int(self.state), "players": self.players_json()}

    def __repr__(self) -> str:
        return f"Room(id={self.id}, state={self.state.name}, players={len(self.players)})"