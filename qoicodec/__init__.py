from .decoder import QOIDecoder
from .encoder import QOIEncoder
from .errors import (
    CapacityError,
    MalformedHeaderError,
    QOIError,
    SizeError,
    TruncatedStreamError,
    UnknownFormatError,
)
from .header import Header, decode_header, encode_header
from .image import ImageSource, QOIImage, select_channels
from .qoi import QOI, ColorIndex, qoi_hash
from .registry import FormatRegistry, default_registry
from .utils import load_image
from .converter import png_to_qoi, qoi_to_png

decode = QOIDecoder.decode
decode_into = QOIDecoder.decode_into
decode_config = QOIDecoder.decode_config
encode = QOIEncoder.encode
encode_bytes = QOIEncoder.encode_bytes
encode_image = QOIEncoder.encode_image

__all__ = [
    "QOI",
    "QOIDecoder",
    "QOIEncoder",
    "QOIImage",
    "ImageSource",
    "Header",
    "ColorIndex",
    "FormatRegistry",
    "QOIError",
    "MalformedHeaderError",
    "TruncatedStreamError",
    "CapacityError",
    "SizeError",
    "UnknownFormatError",
    "decode",
    "decode_into",
    "decode_config",
    "decode_header",
    "encode",
    "encode_bytes",
    "encode_header",
    "encode_image",
    "select_channels",
    "qoi_hash",
    "default_registry",
    "load_image",
    "png_to_qoi",
    "qoi_to_png",
]
