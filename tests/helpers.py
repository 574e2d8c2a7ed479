import os
import sys
import socket
import struct
import threading
from typing import Callable, List, Optional, Sequence, Tuple

# Add parent directory to path to allow importing modules
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from server import Endpoint

PREFIX = b"\xFF\xFF\xFF\xFF"
NO_CHALLENGE = b"\xFF\xFF\xFF\xFF"


def info_reply(name: str, map_name: str, players: int, max_players: int,
               folder: str = "svencoop", game: str = "Sven Co-op",
               header: bytes = b"I", trailing: bytes = b"\x00dl\x00\x01") -> bytes:
    return (
        PREFIX + header
        + name.encode("latin-1") + b"\x00"
        + map_name.encode("latin-1") + b"\x00"
        + folder.encode("latin-1") + b"\x00"
        + game.encode("latin-1") + b"\x00"
        + struct.pack("<H", 225)
        + bytes([players, max_players])
        + trailing
    )


def players_reply(players: Sequence[Tuple[str, int, float]], header: bytes = b"D") -> bytes:
    body = bytes([len(players)])
    for i, (name, score, duration) in enumerate(players):
        body += bytes([i]) + name.encode("latin-1") + b"\x00"
        body += struct.pack("<i", score) + struct.pack("<f", duration)
    return PREFIX + header + body


def challenge_reply(token: bytes) -> bytes:
    return PREFIX + b"A" + token


class SyntheticServer:
    """UDP server on 127.0.0.1 answering each datagram through ``handler``.

    ``handler(data)`` returns the reply bytes, or None to stay silent.
    """

    def __init__(self, handler: Callable[[bytes], Optional[bytes]]):
        self.handler = handler
        self.received: List[bytes] = []
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self.sock.bind(("127.0.0.1", 0))
        self._port = self.sock.getsockname()[1]
        self.sock.settimeout(0.05)
        self.thread = threading.Thread(target=self._loop, daemon=True)

    @property
    def endpoint(self) -> Endpoint:
        return Endpoint("127.0.0.1", self._port)

    def requests(self) -> List[bytes]:
        with self._lock:
            return list(self.received)

    def __enter__(self) -> "SyntheticServer":
        self.thread.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self._stop.set()
        self.thread.join(timeout=2)
        self.sock.close()
        return False

    def _loop(self):
        while not self._stop.is_set():
            try:
                data, addr = self.sock.recvfrom(2048)
            except socket.timeout:
                continue
            except OSError:
                break
            with self._lock:
                self.received.append(data)
            reply = self.handler(data)
            if reply is not None:
                self.sock.sendto(reply, addr)


def source_server(info: bytes, players: bytes, token: Optional[bytes] = b"\x01\x02\x03\x04"):
    """Handler for a well behaved server; ``token=None`` skips the challenge round."""

    def handler(data: bytes) -> Optional[bytes]:
        if data[4] == 0x54:
            return info
        if data[4] == 0x55:
            if token is not None and data[5:9] != token:
                return challenge_reply(token)
            return players
        return None

    return handler


def silent(data: bytes) -> Optional[bytes]:
    return None


def unused_port() -> int:
    s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    s.bind(("127.0.0.1", 0))
    port = s.getsockname()[1]
    s.close()
    return port
