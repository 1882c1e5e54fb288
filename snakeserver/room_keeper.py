"""The lobby: players, rooms and the dispatch of client requests."""

from __future__ import annotations

import logging
import queue
import threading
from typing import Any, Callable

from .game_thread import GameThread
from .info import InfoType, ReceivedInfo, ResponseCode, RoomOperationType, SendInfo
from .player import Player, PlayerState
from .room import Room

log = logging.getLogger(__name__)

_POLL_SECONDS = 0.05


class RoomKeeper:
    """Owns every player and room and answers requests from the received queue."""

    def __init__(self, received_queue: Any, send_queue: Any) -> None:
        self.received_queue = received_queue
        self.send_queue = send_queue
        self.rooms: list[Room] = []
        self.players: list[Player] = []
        self.threads: list[GameThread] = []
        self._running = threading.Event()
        self._thread: threading.Thread | None = None
        self._room_handlers: dict[RoomOperationType, Callable[[ReceivedInfo], None]] = {
            RoomOperationType.CREATE_PLAYER: self._on_create_player,
            RoomOperationType.REMOVE_PLAYER: self._on_remove_player,
            RoomOperationType.CREATE_ROOM: self._on_create_room,
            RoomOperationType.JOIN_ROOM: self._on_join_room,
            RoomOperationType.LEAVE_ROOM: self._on_leave_room,
            RoomOperationType.READY_ROOM: self._on_ready,
            RoomOperationType.UNREADY_ROOM: self._on_unready,
            RoomOperationType.START_GAME: self._on_start_game,
            RoomOperationType.ROOM_INFO: self._on_room_info,
            RoomOperationType.ROOM_KEEPER_INFO: self._on_keeper_info,
            RoomOperationType.PLAYER_INFO: self._on_player_info,
        }

    @property
    def is_running(self) -> bool:
        return self._running.is_set()

    def start(self) -> None:
        if self.is_running:
            return
        self._running.set()
        self._thread = threading.Thread(target=self._loop, name="room-keeper", daemon=True)
        self._thread.start()
        log.info("room keeper started")

    def stop(self) -> None:
        if not self.is_running:
            return
        self._running.clear()
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        log.info("room keeper stopped")

    def _loop(self) -> None:
        while self._running.is_set():
            try:
                info = self.received_queue.get(timeout=_POLL_SECONDS)
            except queue.Empty:
                pass
            else:
                self._safe_handle(info)
            self._remove_empty_rooms()

    def _safe_handle(self, info: ReceivedInfo) -> None:
        try:
            self.handle(info)
        except Exception:
            log.exception("failed to handle request from connection %s", info.ws_id)

    def process_pending(self) -> None:
        """Handle every request waiting in the queue, then drop empty rooms."""
        while True:
            try:
                info = self.received_queue.get_nowait()
            except queue.Empty:
                break
            self._safe_handle(info)
        self._remove_empty_rooms()

    def _remove_empty_rooms(self) -> None:
        for room in [r for r in self.rooms if not r.players]:
            self.remove_room(room.id)

    # --- replies -------------------------------------------------------------

    def _reply(
        self,
        ws: int,
        code: ResponseCode = ResponseCode.SUCCESS,
        msg: str = "",
        data: Any = None,
    ) -> None:
        self.send_queue.put(SendInfo(ws, code, msg, data))

    def _outcome(self, ws: int, ok: bool, data: Any = None) -> None:
        if ok:
            self._reply(ws, data=data)
        else:
            self._reply(ws, ResponseCode.FAILED)

    # --- dispatch ------------------------------------------------------------

    def handle(self, info: ReceivedInfo) -> None:
        """Route one request: game operations to their room, room operations here."""
        log.debug("room keeper received: %s", info.raw_payload)
        if info.type is InfoType.GAME_OPERATION:
            room = self.room_by_id(info.room_id)
            if room is None:
                self._reply(
                    info.ws_id, ResponseCode.FAILED, f"Cannot find room with id {info.room_id}"
                )
            else:
                room.push_operation(info)
        elif info.type is InfoType.ROOM_OPERATION:
            handler = self._room_handlers.get(info.room_payload.type)
            if handler is None:
                log.warning("unknown room operation type: %s", info.room_payload.type)
                self._reply(info.ws_id, ResponseCode.FAILED, "Unknown type")
            else:
                handler(info)
        else:
            log.warning("unknown request type: %s", info.type)

    def _on_create_player(self, info: ReceivedInfo) -> None:
        player_id = self.create_player(info.room_payload.name, info.ws_id)
        # The key is spelt as existing clients expect it.
        self._reply(info.ws_id, data={"plyerId": player_id})

    def _on_remove_player(self, info: ReceivedInfo) -> None:
        self._outcome(info.ws_id, self.remove_player(info.player_id))

    def _on_create_room(self, info: ReceivedInfo) -> None:
        room_id = self.create_room()
        ok = self.bind(self.player_by_id(info.player_id), self.room_by_id(room_id))
        self._outcome(info.ws_id, ok, {"id": room_id})

    def _on_join_room(self, info: ReceivedInfo) -> None:
        ok = self.bind(self.player_by_id(info.player_id), self.room_by_id(info.room_id))
        self._outcome(info.ws_id, ok)

    def _on_leave_room(self, info: ReceivedInfo) -> None:
        ok = self.unbind(self.player_by_id(info.player_id), self.room_by_id(info.room_id))
        self._outcome(info.ws_id, ok)

    def _on_ready(self, info: ReceivedInfo) -> None:
        self._outcome(info.ws_id, self.ready_for_game(self.player_by_id(info.player_id)))

    def _on_unready(self, info: ReceivedInfo) -> None:
        self._outcome(info.ws_id, self.unready_for_game(self.player_by_id(info.player_id)))

    def _on_start_game(self, info: ReceivedInfo) -> None:
        room = self.room_by_id(info.room_id)
        if room is None:
            self._reply(info.ws_id, ResponseCode.FAILED)
            return
        self._outcome(info.ws_id, self.start_game(room, self.player_by_id(info.player_id)))

    def _on_room_info(self, info: ReceivedInfo) -> None:
        room = self.room_by_id(info.room_payload.room_id)
        self._outcome(info.ws_id, room is not None, room.to_json() if room else None)

    def _on_keeper_info(self, info: ReceivedInfo) -> None:
        self._reply(info.ws_id, data=self.to_json())

    def _on_player_info(self, info: ReceivedInfo) -> None:
        player = self.player_by_id(info.room_payload.player_id)
        self._outcome(info.ws_id, player is not None, player.to_json() if player else None)

    # --- bookkeeping ---------------------------------------------------------

    def create_room(self) -> int:
        room = Room()
        self.rooms.append(room)
        return room.id

    def remove_room(self, room_id: int) -> bool:
        """Remove an empty room and its game thread."""
        room = self.room_by_id(room_id)
        if room is None or room.players:
            return False
        self.remove_game_thread(room)
        self.rooms.remove(room)
        return True

    def create_player(self, name: str, ws_id: int) -> int:
        player = Player(name, ws_id)
        self.players.append(player)
        return player.id

    def remove_player(self, player_id: int) -> bool:
        """Remove a player that is not in any room."""
        player = self.player_by_id(player_id)
        if player is None or player.state is not PlayerState.DISSOCIATED:
            return False
        self.players.remove(player)
        return True

    def create_game_thread(self, room: Room) -> GameThread:
        game_thread = GameThread(room, self.send_queue)
        self.threads.append(game_thread)
        room.game_thread = game_thread
        return game_thread

    def remove_game_thread(self, room: Room) -> bool:
        for game_thread in self.threads:
            if game_thread.room is room:
                room.game_thread = None
                self.threads.remove(game_thread)
                return True
        return False

    def bind(self, player: Player | None, room: Room | None) -> bool:
        """Put a free player into a room."""
        if room is None or player is None or player.state is not PlayerState.DISSOCIATED:
            return False
        player.join_room(room)
        room.add_player(player)
        return True

    def unbind(self, player: Player | None, room: Room | None) -> bool:
        """Take a player out of a room it is in, unless it is playing."""
        if room is None or player is None or player not in room.players:
            return False
        if player.state is PlayerState.PLAYING:
            return False
        player.leave_room()
        room.remove_player(player)
        return True

    def start_game(self, room: Room, player: Player | None) -> bool:
        if room.game_thread is None:
            self.create_game_thread(room)
        return room.start_game(player)

    def stop_game(self, room: Room, player: Player | None) -> bool:
        return room.stop_game(player)

    def ready_for_game(self, player: Player | None) -> bool:
        return player is not None and player.ready()

    def unready_for_game(self, player: Player | None) -> bool:
        return player is not None and player.unready()

    def player_by_id(self, player_id: int) -> Player | None:
        return next((p for p in self.players if p.id == player_id), None)

    def room_by_id(self, room_id: int) -> Room | None:
        return next((r for r in self.rooms if r.id == room_id), None)

    def players_json(self) -> list[dict[str, Any]]:
        return [player.to_json() for player in self.players]

    def rooms_json(self) -> list[dict[str, Any]]:
        return [room.to_json() for room in self.rooms]

    def to_json(self) -> dict[str, Any]:
        return {
            "isRunning": self.is_running,
            "players": self.players_json(),
            "rooms": self.rooms_json(),
        }