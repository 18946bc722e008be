"""Multi-client, line-oriented TCP listener used by the emulator."""

from __future__ import annotations

import socket
import threading
from typing import Callable

from loguru import logger

from gocator.util.defaults import TERMINATOR

ENCODING = "ascii"
ACCEPT_POLL = 0.2  # seconds, how often blocked accept/recv calls check for stop
MAX_LINE_BYTES = 1_000_000


class LineServer:
    """Serve one TCP port, answering each received line with `handler(line)`.

    `handler` returns the reply (without terminator) or None for no reply.
    Each client gets its own thread. Port 0 binds an ephemeral port, readable
    from `port` once started.
    """

    def __init__(
        self,
        name: str,
        host: str,
        port: int,
        handler: Callable[[str], str | None],
    ):
        self.name = name
        self.host = host
        self.port = port
        self.handler = handler
        self._server_sock: socket.socket | None = None
        self._accept_thread: threading.Thread | None = None
        self._running = threading.Event()
        self._client_socks: set[socket.socket] = set()
        self._state_lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._running.is_set()

    @property
    def client_count(self) -> int:
        with self._state_lock:
            return len(self._client_socks)

    def start(self):
        if self.is_running:
            return
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((self.host, self.port))
        except OSError:
            sock.close()
            raise
        sock.listen(4)
        sock.settimeout(ACCEPT_POLL)
        self.port = sock.getsockname()[1]
        self._server_sock = sock
        self._running.set()
        self._accept_thread = threading.Thread(
            target=self._accept_loop, name=f"{self.name}-accept", daemon=True
        )
        self._accept_thread.start()
        logger.debug("{} listening on {}:{}", self.name, self.host, self.port)

    def stop(self):
        if not self.is_running:
            return
        self._running.clear()
        if self._server_sock is not None:
            self._server_sock.close()
            self._server_sock = None

        with self._state_lock:
            socks = list(self._client_socks)
            self._client_socks.clear()
        for conn in socks:
            try:
                conn.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
            conn.close()

        if self._accept_thread is not None and self._accept_thread.is_alive():
            self._accept_thread.join(timeout=2 * ACCEPT_POLL + 1)
        self._accept_thread = None
        logger.debug("{} stopped", self.name)

    def _accept_loop(self):
        while self.is_running:
            try:
                conn, addr = self._server_sock.accept()
            except socket.timeout:
                continue
            except OSError:
                break
            with self._state_lock:
                self._client_socks.add(conn)
            logger.debug("{}: client connected from {}", self.name, addr)
            threading.Thread(
                target=self._client_handler,
                args=(conn, addr),
                name=f"{self.name}-client",
                daemon=True,
            ).start()

    def _client_handler(self, conn: socket.socket, addr):
        buf = bytearray()
        try:
            conn.settimeout(ACCEPT_POLL)
            while self.is_running:
                try:
                    data = conn.recv(1024)
                except socket.timeout:
                    continue
                except OSError:
                    break
                if not data:
                    break
                buf.extend(data)
                if len(buf) > MAX_LINE_BYTES and b"\n" not in buf:
                    logger.warning("{}: dropped oversized unterminated input", self.name)
                    buf.clear()
                    continue

                while True:
                    nl = buf.find(b"\n")
                    if nl < 0:
                        break
                    line = bytes(buf[:nl]).decode(ENCODING, errors="replace").strip()
                    del buf[: nl + 1]
                    if not line:
                        continue
                    reply = self.handler(line)
                    logger.trace("{}: {!r} -> {!r}", self.name, line, reply)
                    if reply is not None:
                        conn.sendall((reply + TERMINATOR).encode(ENCODING))
        except OSError as e:
            logger.debug("{}: client {} dropped: {}", self.name, addr, e)
        finally:
            with self._state_lock:
                self._client_socks.discard(conn)
            conn.close()
            logger.debug("{}: client disconnected: {}", self.name, addr)
