import io
import logging
import struct
from typing import NamedTuple

from .errors import MalformedHeaderError, SizeError, TruncatedStreamError
from .qoi import QOI

logger = logging.getLogger(__name__)

# QOI Header is 14 bytes:
# magic(4), width(4), height(4), channels(1), colorspace(1)
# > : Big Endian, I : unsigned int (4 bytes), B : unsigned char (1 byte)
_FIELDS = (
    ("magic", 4, None),
    ("width", 4, struct.Struct(">I")),
    ("height", 4, struct.Struct(">I")),
    ("channels", 1, struct.Struct(">B")),
    ("colorspace", 1, struct.Struct(">B")),
)


class Header(NamedTuple):
    width: int
    height: int
    channels: int
    colorspace: int = QOI.QOI_SRGB

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    @property
    def data_length(self) -> int:
        """Bytes needed to hold the decoded pixels."""
        return self.width * self.height * self.channels

    @property
    def has_alpha(self) -> bool:
        return self.channels == 4

    @property
    def description(self) -> dict:
        return {
            "width": self.width,
            "height": self.height,
            "channels": self.channels,
            "colorspace": self.colorspace,
        }


def as_stream(source):
    """Wrap bytes-like input in a BytesIO, pass file-like objects through."""
    if hasattr(source, "read"):
        return source
    return io.BytesIO(source)


def read_exact(stream, size: int) -> bytes:
    """
    Read size bytes, retrying short reads.

    Returns fewer than size bytes only when the stream hits end of file.
    """
    data = stream.read(size)
    while len(data) < size:
        chunk = stream.read(size - len(data))
        if not chunk:
            break
        data += chunk
    return data


def validate(width, height, channels, colorspace, operation="QOI.encode"):
    """Raise the matching QOIError if the description cannot be stored."""
    if channels not in (3, 4):
        raise MalformedHeaderError(
            f"{operation}: Invalid channels {channels!r}, must be 3 or 4"
        )

    if colorspace not in (QOI.QOI_SRGB, QOI.QOI_LINEAR):
        raise MalformedHeaderError(
            f"{operation}: Invalid colorspace {colorspace!r}, must be 0 or 1"
        )

    if not (0 <= width < 4294967296) or not (0 <= height < 4294967296):
        raise SizeError(f"{operation}: Invalid dimensions {width}x{height}")

    total_pixels = width * height
    if total_pixels == 0:
        raise SizeError(f"{operation}: Image {width}x{height} has no pixels")

    if total_pixels >= QOI.QOI_PIXELS_MAX:
        raise SizeError(
            f"{operation}: Image {width}x{height} exceeds {QOI.QOI_PIXELS_MAX} pixels"
        )


def pack_header(width, height, channels, colorspace=QOI.QOI_SRGB) -> bytes:
    validate(width, height, channels, colorspace)
    return QOI.QOI_MAGIC + struct.pack(">IIBB", width, height, channels, colorspace)


def encode_header(sink, width, height, channels, colorspace=QOI.QOI_SRGB) -> int:
    """
    Write the 14 byte header to sink.

    :return: number of bytes written
    """
    header = pack_header(width, height, channels, colorspace)
    sink.write(header)
    return len(header)


def decode_header(stream) -> Header:
    """
    Read and validate the 14 byte header, consuming nothing past it.

    :param stream: binary file-like object or bytes-like object
    :return: Header
    """
    stream = as_stream(stream)

    values = {}
    bytes_read = 0
    for field, size, layout in _FIELDS:
        raw = read_exact(stream, size)
        bytes_read += len(raw)
        if len(raw) < size:
            raise TruncatedStreamError(
                f"QOI.decode: Stream ended while reading header field '{field}'",
                bytes_read=bytes_read,
                field=field,
            )
        values[field] = raw if layout is None else layout.unpack(raw)[0]

    if values["magic"] != QOI.QOI_MAGIC:
        raise MalformedHeaderError(
            "QOI.decode: The signature of the QOI file is invalid"
        )

    header = Header(
        values["width"], values["height"], values["channels"], values["colorspace"]
    )
    validate(*header, operation="QOI.decode")

    logger.debug("read header %dx%d channels=%d colorspace=%d", *header)
    return header
