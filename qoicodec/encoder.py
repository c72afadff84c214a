import logging

import numpy as np

from .errors import CapacityError
from .header import pack_header, validate
from .image import select_channels
from .qoi import QOI, ColorIndex

logger = logging.getLogger(__name__)


def _as_bytes(color_data) -> bytes:
    # Accepts bytes, bytearray, memoryview, lists of ints and numpy arrays
    if isinstance(color_data, np.ndarray):
        return np.ascontiguousarray(color_data, dtype=np.uint8).tobytes()
    return bytes(color_data)


class QOIEncoder:
    @staticmethod
    def encode_bytes(color_data, width: int, height: int, channels: int) -> bytes:
        """
        Encode raw pixels into a complete QOI file.

        :param color_data: Bytes-like object (bytes, bytearray, list of ints, numpy array)
                           holding width * height * channels samples in raster order.
        :param width: image width
        :param height: image height
        :param channels: 3 (RGB) or 4 (RGBA)
        :return: bytes object containing the QOI file content.
        """
        # --- Validation ---
        validate(width, height, channels, QOI.QOI_SRGB)

        color_data = _as_bytes(color_data)
        pixel_length = width * height * channels
        if len(color_data) != pixel_length:
            raise CapacityError(
                f"QOI.encode: The length of colorData is incorrect "
                f"({len(color_data)} bytes for {width}x{height}x{channels})",
                required=pixel_length,
                available=len(color_data),
            )

        # --- Initialization ---
        result = bytearray(pack_header(width, height, channels, QOI.QOI_SRGB))

        # Encoding State
        prev_r, prev_g, prev_b, prev_a = QOI.QOI_START_PIXEL
        run = 0
        index = ColorIndex()
        last_offset = pixel_length - channels

        # --- Pixel Loop ---
        for i in range(0, pixel_length, channels):
            r = color_data[i]
            g = color_data[i + 1]
            b = color_data[i + 2]
            a = color_data[i + 3] if channels == 4 else 255

            # Check for run
            if r == prev_r and g == prev_g and b == prev_b and a == prev_a:
                run += 1
                if run == QOI.QOI_RUN_MAX or i == last_offset:
                    result.append(QOI.QOI_OP_RUN | (run - 1))
                    run = 0
                continue

            # A run that just ended is written before the new pixel
            if run > 0:
                result.append(QOI.QOI_OP_RUN | (run - 1))
                run = 0

            pixel = (r, g, b, a)
            index_pos, hit = index.lookup(pixel)

            if hit:
                result.append(QOI.QOI_OP_INDEX | index_pos)
            else:
                index.store(pixel, index_pos)

                if a == prev_a:
                    # Byte-wrapped difference shifted to -128..127
                    vr = (r - prev_r + 256) % 256
                    if vr > 127:
                        vr -= 256

                    vg = (g - prev_g + 256) % 256
                    if vg > 127:
                        vg -= 256

                    vb = (b - prev_b + 256) % 256
                    if vb > 127:
                        vb -= 256

                    vg_r = vr - vg
                    vg_b = vb - vg

                    if -2 <= vr <= 1 and -2 <= vg <= 1 and -2 <= vb <= 1:
                        result.append(
                            QOI.QOI_OP_DIFF
                            | ((vr + 2) << 4)
                            | ((vg + 2) << 2)
                            | (vb + 2)
                        )
                    elif -32 <= vg <= 31 and -8 <= vg_r <= 7 and -8 <= vg_b <= 7:
                        result.append(QOI.QOI_OP_LUMA | (vg + 32))
                        result.append(((vg_r + 8) << 4) | (vg_b + 8))
                    else:
                        result.append(QOI.QOI_OP_RGB)
                        result.extend((r, g, b))
                else:
                    result.append(QOI.QOI_OP_RGBA)
                    result.extend((r, g, b, a))

            prev_r, prev_g, prev_b, prev_a = r, g, b, a

        # --- End Marker ---
        result.extend(QOI.QOI_END_MARKER)

        logger.debug(
            "encoded %dx%d channels=%d: %d -> %d bytes",
            width,
            height,
            channels,
            pixel_length,
            len(result),
        )
        return bytes(result)

    @staticmethod
    def encode(sink, color_data, width: int, height: int, channels: int) -> int:
        """
        Encode raw pixels and write the QOI stream to sink.

        The stream is assembled in memory first, so nothing is written when
        validation fails.

        :return: number of bytes written
        """
        encoded = QOIEncoder.encode_bytes(color_data, width, height, channels)
        sink.write(encoded)
        return len(encoded)

    @staticmethod
    def encode_image(sink, image) -> int:
        """
        Encode an ImageSource, dropping alpha when every pixel is opaque.

        :return: number of bytes written
        """
        channels = select_channels(image)
        return QOIEncoder.encode(
            sink, image.pixel_data(channels), image.width, image.height, channels
        )
