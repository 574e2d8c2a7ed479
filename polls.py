from dataclasses import dataclass, field
from enum import Enum
from typing import List, Union


class ErrorKind(Enum):
    TIMEOUT = "timeout"
    NETWORK_ERROR = "network_error"
    MALFORMED_RESPONSE = "malformed_response"
    UNEXPECTED_REPLY = "unexpected_reply"
    PROTOCOL_VIOLATION = "protocol_violation"


class QueryError(Exception):
    """Failure of a single query against one endpoint."""

    def __init__(self, kind: ErrorKind, detail: str = ""):
        super().__init__(f"{kind.value}: {detail}" if detail else kind.value)
        self.kind = kind
        self.detail = detail


@dataclass(frozen=True)
class ServerInfo:
    server_name: str
    map_name: str
    players: int
    max_players: int


@dataclass(frozen=True)
class Player:
    name: str
    duration: float  # seconds connected


@dataclass(frozen=True)
class Success:
    info: ServerInfo
    players: List[Player] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    kind: ErrorKind
    detail: str = ""

    @property
    def ok(self) -> bool:
        return False

    @staticmethod
    def from_error(err: QueryError) -> "Failure":
        return Failure(err.kind, err.detail)


QueryOutcome = Union[Success, Failure]
