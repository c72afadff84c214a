import numpy as np
from PIL import Image

from .errors import CapacityError
from .qoi import QOI


class ImageSource:
    """
    Minimal image interface the encoder needs.

    Subclasses provide width, height, rgba_at() and pixel_data(). They may
    answer is_known_opaque() when they know without looking at the pixels;
    otherwise is_opaque() falls back to scanning every pixel.
    """

    width = 0
    height = 0

    def rgba_at(self, x: int, y: int) -> tuple:
        raise NotImplementedError

    def pixel_data(self, channels: int) -> bytes:
        """Raster-order samples with exactly `channels` bytes per pixel."""
        raise NotImplementedError

    def is_known_opaque(self):
        """True/False when opacity is known up front, None to request a scan."""
        return None

    def is_opaque(self) -> bool:
        known = self.is_known_opaque()
        if known is not None:
            return known
        return self._scan_opaque()

    def _scan_opaque(self) -> bool:
        for y in range(self.height):
            for x in range(self.width):
                if self.rgba_at(x, y)[3] != 255:
                    return False
        return True


def select_channels(image: ImageSource) -> int:
    """3 when alpha can be dropped without loss, 4 otherwise."""
    return 3 if image.is_opaque() else 4


class QOIImage(ImageSource):
    """
    Pixels in raster order plus the header fields that describe them.

    pix may be a bytearray, bytes or a memoryview into a larger buffer; only
    the first width * height * channels bytes belong to the image.
    """

    def __init__(
        self,
        pix,
        width: int,
        height: int,
        channels: int = 4,
        colorspace: int = QOI.QOI_SRGB,
    ):
        if channels not in (3, 4):
            raise ValueError(f"QOIImage: Invalid channels {channels!r}, must be 3 or 4")

        required = width * height * channels
        if len(pix) < required:
            raise CapacityError(
                f"QOIImage: {len(pix)} bytes cannot hold {width}x{height}x{channels}",
                required=required,
                available=len(pix),
            )

        self.pix = pix
        self.width = width
        self.height = height
        self.channels = channels
        self.colorspace = colorspace

    def __repr__(self):
        return (
            f"QOIImage(width={self.width}, height={self.height}, "
            f"channels={self.channels}, colorspace={self.colorspace})"
        )

    @property
    def description(self) -> dict:
        return {
            "width": self.width,
            "height": self.height,
            "channels": self.channels,
            "colorspace": self.colorspace,
        }

    def rgba_at(self, x: int, y: int) -> tuple:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"QOIImage: ({x}, {y}) is outside {self.width}x{self.height}")

        offset = (y * self.width + x) * self.channels
        r, g, b = self.pix[offset], self.pix[offset + 1], self.pix[offset + 2]
        a = self.pix[offset + 3] if self.channels == 4 else 255
        return (r, g, b, a)

    at = rgba_at

    def is_known_opaque(self):
        # Three channel images cannot carry transparency
        if self.channels == 3:
            return True
        return None

    def _scan_opaque(self) -> bool:
        return bool(np.all(self.to_array()[..., 3] == 255))

    def to_array(self) -> np.ndarray:
        """(height, width, channels) uint8 view of the pixels."""
        count = self.width * self.height * self.channels
        return np.frombuffer(self.pix, dtype=np.uint8, count=count).reshape(
            self.height, self.width, self.channels
        )

    def pixel_data(self, channels: int) -> bytes:
        array = self.to_array()
        if channels == self.channels:
            return array.tobytes()
        if channels == 3:
            return np.ascontiguousarray(array[..., :3]).tobytes()

        alpha = np.full(array.shape[:2] + (1,), 255, dtype=np.uint8)
        return np.concatenate((array, alpha), axis=2).tobytes()

    @classmethod
    def from_array(cls, array: np.ndarray, colorspace: int = QOI.QOI_SRGB) -> "QOIImage":
        """Wrap a (height, width, 3|4) uint8 array."""
        array = np.asarray(array)
        if array.ndim != 3 or array.shape[2] not in (3, 4):
            raise ValueError(
                f"QOIImage: Expected a (height, width, 3|4) array, got shape {array.shape}"
            )

        height, width, channels = array.shape
        pix = bytearray(np.ascontiguousarray(array, dtype=np.uint8).tobytes())
        return cls(pix, width, height, channels, colorspace)

    def to_pil(self) -> Image.Image:
        mode = "RGBA" if self.channels == 4 else "RGB"
        return Image.frombytes(mode, (self.width, self.height), self.pixel_data(self.channels))

    @classmethod
    def from_pil(cls, img: Image.Image, colorspace: int = QOI.QOI_SRGB) -> "QOIImage":
        """Convert a Pillow image to RGB or RGBA depending on whether it has alpha."""
        if img.mode != "RGBA":
            if "A" in img.getbands() or "transparency" in img.info:
                img = img.convert("RGBA")
            else:
                img = img.convert("RGB")

        channels = len(img.getbands())
        return cls(bytearray(img.tobytes()), img.size[0], img.size[1], channels, colorspace)
