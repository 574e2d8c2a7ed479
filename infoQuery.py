import logging

from constants import (
    PACKET_PREFIX, A2S_INFO, A2S_INFO_PAYLOAD, A2S_INFO_RESPONSE,
    HEADER_OFFSET, PAYLOAD_OFFSET, TIMEOUT,
)
from fieldDecoder import read_cstring, read_uint8, skip
from polls import ErrorKind, QueryError, ServerInfo
from server import Endpoint
from udpExchange import UdpExchange

log = logging.getLogger(__name__)


def build_info_request() -> bytes:
    return PACKET_PREFIX + bytes([A2S_INFO]) + A2S_INFO_PAYLOAD


def parse_info(data: bytes) -> ServerInfo:
    header, pos = read_uint8(data, HEADER_OFFSET)
    if header != A2S_INFO_RESPONSE:
        raise QueryError(ErrorKind.UNEXPECTED_REPLY, f"info reply type 0x{header:02X}")

    pos = PAYLOAD_OFFSET
    server_name, pos = read_cstring(data, pos)
    map_name, pos = read_cstring(data, pos)
    _folder, pos = read_cstring(data, pos)
    _game, pos = read_cstring(data, pos)
    pos = skip(data, pos, 2)  # app id
    players, pos = read_uint8(data, pos)
    max_players, pos = read_uint8(data, pos)

    return ServerInfo(
        server_name=server_name,
        map_name=map_name,
        players=players,
        max_players=max_players,
    )


def query_info(endpoint: Endpoint, timeout: float = TIMEOUT) -> ServerInfo:
    with UdpExchange(endpoint, timeout) as ex:
        ex.send(build_info_request())
        info = parse_info(ex.receive())
    log.debug("%s info: %s on %s (%d/%d)", endpoint.label, info.server_name,
              info.map_name, info.players, info.max_players)
    return info
