import struct
from typing import Tuple

from constants import STRING_ENCODING
from polls import ErrorKind, QueryError

# cursor based reads, every function returns (value, new_pos)


def _need(buf: bytes, pos: int, size: int, what: str) -> None:
    if pos < 0 or pos + size > len(buf):
        raise QueryError(
            ErrorKind.MALFORMED_RESPONSE,
            f"{what} at offset {pos} runs past end of {len(buf)} byte reply",
        )


def read_cstring(buf: bytes, pos: int) -> Tuple[str, int]:
    """Read a null terminated string.

    A string that runs to the end of the buffer without a terminator is
    returned as-is with the cursor left at ``len(buf)``.
    """
    _need(buf, pos, 1, "string")
    end = buf.find(b"\x00", pos)
    if end == -1:
        return buf[pos:].decode(STRING_ENCODING), len(buf)
    return buf[pos:end].decode(STRING_ENCODING), end + 1


def read_uint8(buf: bytes, pos: int) -> Tuple[int, int]:
    _need(buf, pos, 1, "uint8")
    return buf[pos], pos + 1


def read_int32_le(buf: bytes, pos: int) -> Tuple[int, int]:
    _need(buf, pos, 4, "int32")
    return struct.unpack_from("<i", buf, pos)[0], pos + 4


def read_float32_le(buf: bytes, pos: int) -> Tuple[float, int]:
    _need(buf, pos, 4, "float32")
    return struct.unpack_from("<f", buf, pos)[0], pos + 4


def read_bytes(buf: bytes, pos: int, size: int) -> Tuple[bytes, int]:
    _need(buf, pos, size, f"{size} byte field")
    return bytes(buf[pos:pos + size]), pos + size


def skip(buf: bytes, pos: int, size: int) -> int:
    _need(buf, pos, size, f"{size} byte field")
    return pos + size
