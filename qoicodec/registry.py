"""
Magic-byte format dispatch.

A FormatRegistry is an ordinary object: build one at program start (usually
with default_registry()) and pass it to whatever needs to open images of
unknown type. Nothing registers itself on import.
"""

from typing import Callable, NamedTuple

from .decoder import QOIDecoder
from .errors import UnknownFormatError
from .header import as_stream, read_exact
from .qoi import QOI


class Format(NamedTuple):
    name: str
    magic: bytes
    decode: Callable
    decode_config: Callable

    def matches(self, prefix: bytes) -> bool:
        return prefix[: len(self.magic)] == self.magic


class _Prefixed:
    """Replays bytes already taken from a stream before reading the rest of it."""

    def __init__(self, prefix: bytes, stream):
        self.prefix = prefix
        self.stream = stream

    def read(self, size: int = -1) -> bytes:
        if size is None or size < 0:
            data, self.prefix = self.prefix, b""
            return data + self.stream.read()

        data, self.prefix = self.prefix[:size], self.prefix[size:]
        if len(data) < size:
            data += self.stream.read(size - len(data))
        return data


class FormatRegistry:
    def __init__(self):
        self._formats = []

    def register(self, name: str, magic: bytes, decode: Callable, decode_config: Callable) -> Format:
        if not magic:
            raise ValueError("FormatRegistry: magic must not be empty")
        if name in self.names():
            raise ValueError(f"FormatRegistry: format {name!r} is already registered")

        fmt = Format(name, bytes(magic), decode, decode_config)
        self._formats.append(fmt)
        return fmt

    def names(self) -> list:
        return [fmt.name for fmt in self._formats]

    def __contains__(self, name):
        return name in self.names()

    def sniff(self, prefix: bytes):
        """Return the first Format whose magic starts prefix, or None."""
        for fmt in self._formats:
            if fmt.matches(prefix):
                return fmt
        return None

    def _open(self, stream):
        stream = as_stream(stream)
        longest = max((len(fmt.magic) for fmt in self._formats), default=0)

        # The magic must stay in the stream for the format's own decoder
        if hasattr(stream, "peek"):
            prefix = stream.peek(longest)[:longest]
        elif getattr(stream, "seekable", None) and stream.seekable():
            position = stream.tell()
            prefix = read_exact(stream, longest)
            stream.seek(position)
        else:
            prefix = read_exact(stream, longest)
            stream = _Prefixed(prefix, stream)

        fmt = self.sniff(prefix)
        if fmt is None:
            raise UnknownFormatError("FormatRegistry: Unrecognised image format")
        return fmt, stream

    def decode(self, stream):
        """
        Detect the format from the leading bytes and decode with it.

        :return: (format name, decoded image)
        """
        fmt, stream = self._open(stream)
        return fmt.name, fmt.decode(stream)

    def decode_config(self, stream):
        fmt, stream = self._open(stream)
        return fmt.name, fmt.decode_config(stream)


def default_registry() -> FormatRegistry:
    """A new registry knowing the QOI format."""
    registry = FormatRegistry()
    registry.register("qoi", QOI.QOI_MAGIC, QOIDecoder.decode, QOIDecoder.decode_config)
    return registry
