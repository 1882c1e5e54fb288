"""The per-room game loop: operations, movement, collisions and broadcasts."""

from __future__ import annotations

import logging
import threading
import time
from typing import Any

from .info import GameOperationType, ReceivedInfo, ResponseCode, SendInfo
from .room import Room, RoomState

log = logging.getLogger(__name__)

FOOD_INTERVAL_FRAMES = 500


class GameThread:
    """Runs the game of one room on a background thread."""

    def __init__(self, room: Room, send_queue: Any) -> None:
        self.room = room
        self.send_queue = send_queue
        self._thread: threading.Thread | None = None

    def _reply(
        self,
        targets: Any,
        code: ResponseCode = ResponseCode.SUCCESS,
        msg: str = "",
        data: Any = None,
    ) -> None:
        self.send_queue.put(SendInfo(targets, code, msg, data))

    def _player_ws_ids(self) -> list[int]:
        return [player.ws_id for player in self.room.players]

    def handle_operation(self, info: ReceivedInfo) -> None:
        """Apply one game operation from a player and answer its connection."""
        payload = info.game_payload
        ws = info.ws_id
        kind = payload.type if payload is not None else None
        items = self.room.game_items

        if kind is GameOperationType.BORN:
            player = self.room.player_by_id(info.player_id)
            if player is None:
                self._reply(ws, ResponseCode.FAILED, f"Cannot find player with id {info.player_id}")
                return
            try:
                items.add_snake(player)
            except LookupError:
                self._reply(ws, ResponseCode.FAILED, "No free space for a snake")
                return
            self._reply(ws)
        elif kind is GameOperationType.CHANGE_DIRECTION:
            snake = items.snake_by_player_id(info.player_id)
            if snake is None:
                self._reply(ws, ResponseCode.FAILED, f"No snake for player {info.player_id}")
                return
            snake.change_direction(payload.new_direction)
            self._reply(ws)
        elif kind is GameOperationType.GET_GAME_INFO:
            self._reply(ws, data=self.room.game_json())
        else:
            log.warning("unknown game operation type: %s", kind)
            self._reply(ws, ResponseCode.FAILED, "Unknown type")

    def init_game(self) -> None:
        """Set up a fresh board with walls around it and one snake per player."""
        self.room.init_map()
        self.room.init_wall()
        self.room.init_snakes()

    def _move_snakes(self) -> None:
        for snake in list(self.room.game_items.snakes):
            snake.move()

    def _handle_collisions(self) -> None:
        for snake in list(self.room.game_items.snakes):
            snake.judge()

    def _born_and_dead(self) -> None:
        items = self.room.game_items
        for snake in list(items.snakes):
            snake.react()
        if self.room.frame % FOOD_INTERVAL_FRAMES == 0:
            try:
                items.add_random_food()
            except LookupError:
                log.debug("no free cell for food in room %s", self.room.id)

    def _send_result(self) -> None:
        self._reply(self._player_ws_ids(), ResponseCode.UPDATE, data=self.room.game_json())

    def step(self) -> None:
        """Advance the game by one frame and broadcast the new state."""
        for operation in self.room.drain_operations():
            self.handle_operation(operation)
        self._move_snakes()
        self._handle_collisions()
        self._born_and_dead()
        self.room.game_items.update()
        self._send_result()
        self.room.frame += 1

    def run(self) -> None:
        """Play until the room leaves the playing state or the last frame is reached."""
        room = self.room
        room.state = RoomState.INIT_GAMING
        self.init_game()
        room.state = RoomState.PLAYING
        while room.state is RoomState.PLAYING:
            self.step()
            if room.frame == room.game_all_frames:
                room.state = RoomState.READYING
                self.game_end()
            time.sleep(room.fresh_milliseconds / 1000)

    def game_end(self) -> None:
        """Wait for the loop if called from elsewhere, then tell every player."""
        self.join()
        self._reply(self._player_ws_ids(), ResponseCode.GAME_OVER)

    def start(self) -> None:
        self._thread = threading.Thread(
            target=self.run, name=f"game-room-{self.room.id}", daemon=True
        )
        self._thread.start()

    def join(self) -> None:
        thread = self._thread
        if thread is not None and thread is not threading.current_thread() and thread.is_alive():
            thread.join()