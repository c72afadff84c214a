import logging

from .encoder import QOIEncoder
from .errors import UnknownFormatError
from .image import QOIImage
from .registry import default_registry
from .utils import load_image

logger = logging.getLogger(__name__)


def png_to_qoi(png_path, qoi_path) -> int:
    """
    Convert any Pillow-readable image (or camera RAW) to QOI.

    Alpha is dropped when every pixel is opaque.

    :return: size of the written QOI file in bytes
    """
    image = load_image(png_path)

    with open(qoi_path, "wb") as f:
        written = QOIEncoder.encode_image(f, image)

    logger.info("converted %s to %s (%d bytes)", png_path, qoi_path, written)
    return written


def qoi_to_png(qoi_path, png_path, registry=None) -> QOIImage:
    """Decode a QOI file and save it with Pillow (format from png_path's extension)."""
    if registry is None:
        registry = default_registry()

    with open(qoi_path, "rb") as f:
        name, decoded = registry.decode(f)

    if name != "qoi":
        raise UnknownFormatError(f"{qoi_path} is a {name} file, not qoi")

    decoded.to_pil().save(png_path)
    logger.info("converted %s to %s", qoi_path, png_path)
    return decoded
