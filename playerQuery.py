import math
import logging
from enum import Enum
from typing import List, Optional

from constants import (
    PACKET_PREFIX, A2S_PLAYER, A2S_PLAYER_RESPONSE, S2C_CHALLENGE,
    NO_CHALLENGE, CHALLENGE_SIZE, HEADER_OFFSET, PAYLOAD_OFFSET, TIMEOUT,
)
from fieldDecoder import read_bytes, read_cstring, read_float32_le, read_uint8, skip
from polls import ErrorKind, Player, QueryError
from server import Endpoint
from udpExchange import UdpExchange

log = logging.getLogger(__name__)


class PlayerQueryState(Enum):
    IDLE = "idle"
    AWAITING_CHALLENGE = "awaiting_challenge"
    AWAITING_PLAYERS = "awaiting_players"
    DONE = "done"
    FAILED = "failed"


def build_player_request(challenge: bytes = NO_CHALLENGE) -> bytes:
    if len(challenge) != CHALLENGE_SIZE:
        raise ValueError("challenge must be 4 bytes")
    return PACKET_PREFIX + bytes([A2S_PLAYER]) + bytes(challenge)


def parse_players(data: bytes) -> List[Player]:
    count, pos = read_uint8(data, PAYLOAD_OFFSET)
    players: List[Player] = []
    for _ in range(count):
        pos = skip(data, pos, 1)  # index
        name, pos = read_cstring(data, pos)
        pos = skip(data, pos, 4)  # score
        duration, pos = read_float32_le(data, pos)
        if not math.isfinite(duration) or duration < 0:
            duration = 0.0
        players.append(Player(name=name, duration=duration))
    return players


class PlayerQuery:
    """Challenge/response exchange for the player list.

    Pure state machine, no I/O: ``start()`` gives the first datagram,
    ``feed(reply)`` gives the next one to send or ``None`` once the list is
    parsed into ``players``. At most one challenge round is accepted.
    Any ``QueryError`` leaves the machine in ``FAILED``.
    """

    def __init__(self):
        self.state = PlayerQueryState.IDLE
        self.challenge: Optional[bytes] = None
        self.players: List[Player] = []

    def start(self) -> bytes:
        if self.state is not PlayerQueryState.IDLE:
            raise QueryError(ErrorKind.PROTOCOL_VIOLATION, f"already started ({self.state.value})")
        self._enter(PlayerQueryState.AWAITING_CHALLENGE)
        return build_player_request()

    def feed(self, data: bytes) -> Optional[bytes]:
        try:
            return self._feed(data)
        except QueryError:
            self.fail()
            raise

    def _feed(self, data: bytes) -> Optional[bytes]:
        if self.state not in (PlayerQueryState.AWAITING_CHALLENGE, PlayerQueryState.AWAITING_PLAYERS):
            raise QueryError(ErrorKind.PROTOCOL_VIOLATION, f"reply received while {self.state.value}")

        header, pos = read_uint8(data, HEADER_OFFSET)

        if header == S2C_CHALLENGE:
            if self.state is PlayerQueryState.AWAITING_PLAYERS:
                raise QueryError(ErrorKind.PROTOCOL_VIOLATION, "second challenge instead of player list")
            challenge, _ = read_bytes(data, pos, CHALLENGE_SIZE)
            self.challenge = challenge
            self._enter(PlayerQueryState.AWAITING_PLAYERS)
            return build_player_request(challenge)

        if header != A2S_PLAYER_RESPONSE:
            raise QueryError(ErrorKind.UNEXPECTED_REPLY, f"player reply type 0x{header:02X}")

        self.players = parse_players(data)
        self._enter(PlayerQueryState.DONE)
        return None

    def fail(self) -> None:
        if self.state not in (PlayerQueryState.DONE, PlayerQueryState.FAILED):
            self._enter(PlayerQueryState.FAILED)

    def _enter(self, state: PlayerQueryState) -> None:
        log.debug("player query %s -> %s", self.state.value, state.value)
        self.state = state


def query_players(endpoint: Endpoint, timeout: float = TIMEOUT) -> List[Player]:
    machine = PlayerQuery()
    with UdpExchange(endpoint, timeout) as ex:
        request = machine.start()
        try:
            while request is not None:
                ex.send(request)
                request = machine.feed(ex.receive())
        except QueryError:
            machine.fail()
            raise
    log.debug("%s players: %d", endpoint.label, len(machine.players))
    return machine.players
