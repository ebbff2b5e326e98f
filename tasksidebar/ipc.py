"""Fire-and-forget update channel over a Unix domain socket.

Each message is one line of JSON ``{"type": ..., "data": ...}``. The server
side is non-blocking and is polled from the sidebar's ``select`` loop.
"""

from __future__ import annotations

import json
import socket
from pathlib import Path

from loguru import logger

from .errors import IPCError

MAX_CLIENT_BUFFER = 64 * 1024
RECV_SIZE = 4096


def encode_message(message_type: str, data: object = None) -> bytes:
    return (json.dumps({"type": message_type, "data": data}) + "\n").encode("utf-8")


def send_message(socket_path: Path, message_type: str, data: object = None, timeout_seconds: float = 1.0) -> None:
    """Deliver one message to the running sidebar or raise ``IPCError``."""
    if not socket_path.exists():
        raise IPCError(f"socket not found: {socket_path}")
    try:
        with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as client:
            client.settimeout(timeout_seconds)
            client.connect(str(socket_path))
            client.sendall(encode_message(message_type, data))
    except OSError as exc:
        raise IPCError(f"cannot reach sidebar at {socket_path}: {exc}") from exc


class IPCServer:
    def __init__(self, socket_path: Path) -> None:
        self.socket_path = socket_path
        self._server: socket.socket | None = None
        self._clients: dict[int, tuple[socket.socket, bytearray]] = {}

    def start(self) -> None:
        self._unlink()
        self.socket_path.parent.mkdir(parents=True, exist_ok=True)
        server = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        try:
            server.bind(str(self.socket_path))
            server.listen(8)
        except OSError as exc:
            server.close()
            raise IPCError(f"cannot listen on {self.socket_path}: {exc}") from exc
        server.setblocking(False)
        self._server = server
        logger.info("ipc listening on {}", self.socket_path)

    def fds(self) -> list[int]:
        if self._server is None:
            return []
        return [self._server.fileno(), *self._clients]

    def handle_ready(self, ready: list[int]) -> list[dict[str, object]]:
        """Accept and read whatever is ready; return the complete messages received."""
        messages: list[dict[str, object]] = []
        if self._server is None:
            return messages
        if self._server.fileno() in ready:
            self._accept()
        for fd in [fd for fd in ready if fd in self._clients]:
            messages.extend(self._read_client(fd))
        return messages

    def _accept(self) -> None:
        if self._server is None:
            return
        while True:
            try:
                client, _ = self._server.accept()
            except BlockingIOError:
                return
            except OSError as exc:
                logger.warning("ipc accept failed: {}", exc)
                return
            client.setblocking(False)
            self._clients[client.fileno()] = (client, bytearray())

    def _read_client(self, fd: int) -> list[dict[str, object]]:
        client, buffer = self._clients[fd]
        closed = False
        try:
            chunk = client.recv(RECV_SIZE)
        except BlockingIOError:
            return []
        except OSError as exc:
            logger.warning("ipc read failed: {}", exc)
            chunk = b""
        if not chunk:
            closed = True
        buffer.extend(chunk)
        messages: list[dict[str, object]] = []
        while b"\n" in buffer:
            line, _, rest = bytes(buffer).partition(b"\n")
            buffer[:] = rest
            parsed = self._parse_line(line)
            if parsed is not None:
                messages.append(parsed)
        if closed or len(buffer) > MAX_CLIENT_BUFFER:
            if closed and buffer.strip():
                parsed = self._parse_line(bytes(buffer))
                if parsed is not None:
                    messages.append(parsed)
            self._drop_client(fd)
        return messages

    @staticmethod
    def _parse_line(line: bytes) -> dict[str, object] | None:
        if not line.strip():
            return None
        try:
            message = json.loads(line.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as exc:
            logger.warning("ignoring malformed ipc message: {}", exc)
            return None
        if not isinstance(message, dict) or not isinstance(message.get("type"), str):
            logger.warning("ignoring ipc message without a type")
            return None
        return message

    def _drop_client(self, fd: int) -> None:
        client, _ = self._clients.pop(fd)
        client.close()

    def _unlink(self) -> None:
        try:
            self.socket_path.unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning("cannot remove stale socket {}: {}", self.socket_path, exc)

    def close(self) -> None:
        for fd in list(self._clients):
            self._drop_client(fd)
        if self._server is not None:
            self._server.close()
            self._server = None
            self._unlink()
