"""WebSocket front end: turns client messages into requests and delivers responses."""

from __future__ import annotations

import asyncio
import concurrent.futures
import itertools
import json
import logging
import queue
import threading
from typing import Any

import websockets
from websockets.exceptions import ConnectionClosed

from .info import ReceivedInfo, ResponseCode, SendInfo

log = logging.getLogger(__name__)

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 1145
UNSTRINGIFIED_OBJECT = "[object Object]"

_POLL_SECONDS = 0.05
_SEND_TIMEOUT = 5.0
_STARTUP_TIMEOUT = 10.0


class Proxy:
    """Accepts WebSocket clients, queues their requests and sends queued responses."""

    _connection_ids = itertools.count(1)

    def __init__(
        self,
        received_queue: Any,
        send_queue: Any,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
    ) -> None:
        self.received_queue = received_queue
        self.send_queue = send_queue
        self.host = host
        self.port = port
        self._connections: dict[int, Any] = {}
        self._lock = threading.Lock()
        self._running = threading.Event()
        self._ready = threading.Event()
        self._startup_error: BaseException | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._server: Any = None
        self._server_thread: threading.Thread | None = None
        self._send_thread: threading.Thread | None = None

    @property
    def is_running(self) -> bool:
        return self._running.is_set()

    @property
    def connection_ids(self) -> list[int]:
        with self._lock:
            return sorted(self._connections)

    # --- lifecycle -----------------------------------------------------------

    def start(self) -> None:
        """Bind the listening socket and start the accept and send threads."""
        if self.is_running:
            return
        self._ready.clear()
        self._startup_error = None
        self._server_thread = threading.Thread(
            target=self._serve, name="proxy-server", daemon=True
        )
        self._server_thread.start()
        if not self._ready.wait(_STARTUP_TIMEOUT):
            raise RuntimeError("proxy did not start in time")
        if self._startup_error is not None:
            self._server_thread.join()
            self._server_thread = None
            raise self._startup_error
        self._running.set()
        self._send_thread = threading.Thread(
            target=self._send_loop, name="proxy-send", daemon=True
        )
        self._send_thread.start()
        log.info("proxy started at port %s", self.port)

    def stop(self) -> None:
        """Close every connection and stop both threads."""
        if not self.is_running:
            return
        self._running.clear()
        if self._send_thread is not None:
            self._send_thread.join()
            self._send_thread = None
        loop = self._loop
        if loop is not None:
            loop.call_soon_threadsafe(loop.stop)
        if self._server_thread is not None:
            self._server_thread.join()
            self._server_thread = None
        with self._lock:
            self._connections.clear()
        log.info("proxy stopped")

    def _serve(self) -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        self._loop = loop

        async def open_server() -> Any:
            return await websockets.serve(self._session, self.host, self.port)

        try:
            self._server = loop.run_until_complete(open_server())
        except BaseException as exc:  # reported to the thread calling start()
            self._startup_error = exc
            self._loop = None
            loop.close()
            self._ready.set()
            return
        self.port = self._server.sockets[0].getsockname()[1]
        self._ready.set()
        try:
            loop.run_forever()
        finally:
            self._server.close()
            loop.run_until_complete(self._server.wait_closed())
            self._server = None
            self._loop = None
            loop.close()

    # --- receiving -----------------------------------------------------------

    def _register(self, websocket: Any) -> int:
        connection_id = next(Proxy._connection_ids)
        with self._lock:
            self._connections[connection_id] = websocket
        return connection_id

    def _remove_connection(self, connection_id: int) -> None:
        with self._lock:
            websocket = self._connections.pop(connection_id, None)
        loop = self._loop
        if websocket is not None and loop is not None and loop.is_running():
            asyncio.run_coroutine_threadsafe(websocket.close(), loop)

    async def _session(self, websocket: Any, *_: Any) -> None:
        connection_id = self._register(websocket)
        log.info("client %s connected", connection_id)
        try:
            async for message in websocket:
                if isinstance(message, bytes):
                    message = message.decode("utf-8", errors="replace")
                self.handle_message(message, connection_id)
        except ConnectionClosed:
            pass
        finally:
            with self._lock:
                self._connections.pop(connection_id, None)
            log.info("client %s disconnected", connection_id)

    def handle_message(self, text: str, connection_id: int) -> ReceivedInfo | None:
        """Parse one client message and queue it as a request.

        Returns the queued request, or None when the message was rejected.
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            log.warning("invalid JSON from connection %s: %s (%r)", connection_id, exc, text)
            if text == UNSTRINGIFIED_OBJECT:
                self.send_queue.put(
                    SendInfo(
                        connection_id,
                        ResponseCode.FAILED,
                        "Client sent unstringified object",
                    )
                )
            return None
        try:
            info = ReceivedInfo.from_json(data, connection_id)
        except ValueError as exc:
            log.warning("malformed request from connection %s: %s", connection_id, exc)
            return None
        log.debug("received from connection %s: %s", connection_id, data)
        self.received_queue.put(info)
        return info

    # --- sending -------------------------------------------------------------

    def _send_loop(self) -> None:
        while self._running.is_set():
            try:
                info = self.send_queue.get(timeout=_POLL_SECONDS)
            except queue.Empty:
                continue
            try:
                self.send(info)
            except Exception:
                log.exception("failed to send a response")

    def send(self, info: SendInfo) -> None:
        """Write ``info`` to each of its connections that is still open."""
        loop = self._loop
        if loop is not None and threading.current_thread() is self._server_thread:
            raise RuntimeError("send() must not be called from the server thread")
        text = json.dumps(info.to_json())
        for target in info.target_ids:
            with self._lock:
                websocket = self._connections.get(target)
            if websocket is None or loop is None:
                continue
            future = asyncio.run_coroutine_threadsafe(websocket.send(text), loop)
            try:
                future.result(_SEND_TIMEOUT)
            except ConnectionClosed:
                log.info("client %s disconnected", target)
                self._remove_connection(target)
            except (OSError, concurrent.futures.TimeoutError) as exc:
                log.error("websocket error on connection %s: %s", target, exc)
                break