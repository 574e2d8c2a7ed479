import socket
import time
import logging
import binascii
from typing import Optional

from constants import PACKET_SIZE
from polls import ErrorKind, QueryError
from server import Endpoint

log = logging.getLogger(__name__)


class UdpExchange:
    """One UDP socket bound to one query.

    The socket is connected to the endpoint so datagrams from any other
    peer are dropped by the kernel. The deadline starts with the first
    send and covers every receive after it. Use as a context manager; the
    socket is closed on every exit path.
    """

    def __init__(self, endpoint: Endpoint, timeout: float):
        self.endpoint = endpoint
        self.timeout = float(timeout)
        self.sock: Optional[socket.socket] = None
        self._deadline: Optional[float] = None

    def __enter__(self) -> "UdpExchange":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def open(self) -> None:
        host, port = self.endpoint.address
        try:
            family, socktype, proto, _, sockaddr = socket.getaddrinfo(
                host, port, type=socket.SOCK_DGRAM)[0]
            self.sock = socket.socket(family, socktype, proto)
            self.sock.connect(sockaddr)
        except (OSError, UnicodeError, ValueError) as e:
            # idna rejects malformed names with UnicodeError
            self.close()
            raise QueryError(ErrorKind.NETWORK_ERROR, f"{self.endpoint.label}: {e}")

    def close(self) -> None:
        if self.sock is not None:
            self.sock.close()
            self.sock = None

    def remaining(self) -> float:
        if self._deadline is None:
            return self.timeout
        return self._deadline - time.monotonic()

    def send(self, data: bytes) -> None:
        if self.sock is None:
            raise QueryError(ErrorKind.NETWORK_ERROR, "socket is closed")
        if self._deadline is None:
            self._deadline = time.monotonic() + self.timeout
        log.debug("-> %s %s", self.endpoint.label, binascii.hexlify(data).decode())
        try:
            self.sock.send(data)
        except OSError as e:
            raise QueryError(ErrorKind.NETWORK_ERROR, f"send failed: {e}")

    def receive(self) -> bytes:
        if self.sock is None:
            raise QueryError(ErrorKind.NETWORK_ERROR, "socket is closed")
        left = self.remaining()
        if left <= 0:
            raise QueryError(ErrorKind.TIMEOUT, f"no reply within {self.timeout:g}s")
        try:
            self.sock.settimeout(left)
            data = self.sock.recv(PACKET_SIZE)
        except socket.timeout:
            raise QueryError(ErrorKind.TIMEOUT, f"no reply within {self.timeout:g}s")
        except OSError as e:
            raise QueryError(ErrorKind.NETWORK_ERROR, f"receive failed: {e}")
        log.debug("<- %s %s", self.endpoint.label, binascii.hexlify(data).decode())
        return data
