import struct
from typing import Tuple, Union

BufferLike = Union[bytes, bytearray, memoryview]
Value = Union[str, bytes, bool, int, float]

_INT_BYTES = 8
_FLOAT_FORMAT = ">d"


class ParseError(Exception):
    pass


class Packet:
    """Ordered container of values serialized for transmission.

    Values are appended with `append` and extracted in the same order with
    the typed `read_*` methods. The read position is independent of the
    write position, so a packet filled on one side can be parsed on the
    other after a round trip through `to_bytes` and `from_bytes`.

    Encodings (all integers big-endian):

    - `str`: 4-byte length, then UTF-8 bytes
    - `bytes`: 4-byte length, then raw bytes
    - `bool`: 1 byte
    - `int`: 8-byte signed integer
    - `float`: IEEE 754 double
    """

    def __init__(self, data: BufferLike = b""):
        self._data = bytearray(data)
        self._read_pos = 0

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"Packet(size={len(self._data)}, read_pos={self._read_pos})"

    def append(self, value: Value) -> "Packet":
        # NOTE bool must be tested before int since it is a subclass of int
        if isinstance(value, bool):
            self._data += _bool_to_bytes(value)
        elif isinstance(value, int):
            self._data += _int_to_bytes(value)
        elif isinstance(value, float):
            self._data += struct.pack(_FLOAT_FORMAT, value)
        elif isinstance(value, str):
            self._data += _sized_to_bytes(value.encode())
        elif isinstance(value, (bytes, bytearray, memoryview)):
            self._data += _sized_to_bytes(bytes(value))
        else:
            raise ValueError(f"Unsupported packet value type {type(value)}.")
        return self

    def read_str(self) -> str:
        return self.read_bytes().decode()

    def read_bytes(self) -> bytes:
        n, data = _sized_from_bytes(self._unread())
        self._read_pos += n
        return data

    def read_bool(self) -> bool:
        return self._take(1) != b"\x00"

    def read_int(self) -> int:
        return int.from_bytes(self._take(_INT_BYTES), "big", signed=True)

    def read_float(self) -> float:
        (value,) = struct.unpack(_FLOAT_FORMAT, self._take(8))
        return value

    def clear(self):
        self._data = bytearray()
        self._read_pos = 0

    @property
    def end_of_packet(self) -> bool:
        return self._read_pos >= len(self._data)

    def to_bytes(self) -> bytes:
        return bytes(self._data)

    @staticmethod
    def from_bytes(buf: BufferLike) -> "Packet":
        return Packet(buf)

    def load(self, buf: BufferLike):
        """Replaces the contents with buf and rewinds the read position."""
        self._data = bytearray(buf)
        self._read_pos = 0

    def _unread(self) -> memoryview:
        return memoryview(self._data)[self._read_pos :]

    def _take(self, num_bytes: int) -> bytes:
        view = self._unread()
        if len(view) < num_bytes:
            raise ParseError
        self._read_pos += num_bytes
        return bytes(view[:num_bytes])


def _bool_to_bytes(value: bool) -> bytes:
    return b"\x01" if value else b"\x00"


def _int_to_bytes(value: int) -> bytes:
    try:
        return value.to_bytes(_INT_BYTES, byteorder="big", signed=True)
    except OverflowError as e:
        raise ValueError(f"Integer {value} does not fit in 64 bits.") from e


def _sized_to_bytes(data: bytes) -> bytes:
    b_len = len(data).to_bytes(4, byteorder="big")
    return b"".join([b_len, data])


def _sized_from_bytes(buf: BufferLike) -> Tuple[int, bytes]:
    if len(buf) < 4:
        raise ParseError
    data_len = int.from_bytes(buf[:4], byteorder="big")
    if len(buf) < 4 + data_len:
        raise ParseError
    data = bytes(buf[4 : 4 + data_len])
    bytes_read = 4 + data_len
    return bytes_read, data


__all__ = [
    "Packet",
    "ParseError",
]
