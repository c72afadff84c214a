import logging

from .errors import CapacityError, TruncatedStreamError
from .header import Header, as_stream, decode_header, read_exact
from .image import QOIImage
from .qoi import QOI, ColorIndex

logger = logging.getLogger(__name__)


class _ByteReader:
    """Counts consumed bytes and turns end of file into EOFError."""

    def __init__(self, stream, position: int = 0):
        self.stream = stream
        self.position = position

    def read(self, number_of_bytes: int) -> bytes:
        data = read_exact(self.stream, number_of_bytes)
        self.position += len(data)
        if len(data) < number_of_bytes:
            raise EOFError
        return data


def _writable_view(dest):
    view = memoryview(dest)
    if view.readonly:
        raise TypeError("QOI.decode: The destination buffer is read-only")
    if view.format != "B" or view.ndim != 1:
        view = view.cast("B")
    return view


class QOIDecoder:
    """
    A class to decode QOI (Quite OK Image) streams into raw pixel data.
    """

    @staticmethod
    def decode_config(stream) -> Header:
        """Read only the header: dimensions, channels and colorspace."""
        return decode_header(stream)

    @staticmethod
    def decode(stream, dest=None, channels: int = None) -> QOIImage:
        """
        Decode a QOI stream.

        :param stream: Binary file-like object, or bytes containing the QOI file.
        :param dest: Optional writable buffer to decode into. Only its first
                     width * height * channels bytes are written.
        :param channels: Number of channels in the decoded data (3 or 4).
                         If None, uses the channels defined in the file header.
        :return: QOIImage whose pix is the freshly allocated bytearray, or the
                 prefix view of dest.
        """
        stream = as_stream(stream)
        header = decode_header(stream)

        if channels is None:
            channels = header.channels

        if channels not in (3, 4):
            raise ValueError(
                "QOI.decode: The number of channels for the output is invalid"
            )

        # --- Initialization ---
        pixel_length = header.pixel_count * channels
        if dest is None:
            result = bytearray(pixel_length)
            out = result
        else:
            view = _writable_view(dest)
            if len(view) < pixel_length:
                raise CapacityError(
                    f"QOI.decode: Destination holds {len(view)} bytes, "
                    f"{pixel_length} needed",
                    required=pixel_length,
                    available=len(view),
                )
            result = view[:pixel_length]
            out = result

        QOIDecoder._decode_chunks(stream, header, out, channels)

        return QOIImage(
            result, header.width, header.height, channels, header.colorspace
        )

    @staticmethod
    def decode_into(stream, dest) -> tuple:
        """
        Decode into a caller-owned buffer, leaving bytes past the image untouched.

        :return: (bytes_written, width, height, has_alpha)
        """
        image = QOIDecoder.decode(stream, dest)
        return len(image.pix), image.width, image.height, image.channels == 4

    @staticmethod
    def _decode_chunks(stream, header: Header, out, channels: int) -> None:
        reader = _ByteReader(stream, QOI.QOI_HEADER_SIZE)
        read = reader.read

        # Index array: 64 pixels, initialized to (0, 0, 0, 0)
        index = ColorIndex()

        # Initial pixel state (R, G, B, A)
        r, g, b, a = QOI.QOI_START_PIXEL

        run = 0
        write_pos = 0
        total_pixels = header.pixel_count
        pixels_processed = 0

        # --- Decoding Loop ---
        try:
            while pixels_processed < total_pixels:
                if run > 0:
                    # Skip reading and output the current pixel again
                    run -= 1
                else:
                    b1 = read(1)[0]

                    if b1 == QOI.QOI_OP_RGB:
                        r, g, b = read(3)

                    elif b1 == QOI.QOI_OP_RGBA:
                        r, g, b, a = read(4)

                    elif (b1 & QOI.QOI_MASK_2) == QOI.QOI_OP_INDEX:
                        r, g, b, a = index[b1]

                    elif (b1 & QOI.QOI_MASK_2) == QOI.QOI_OP_DIFF:
                        # 2-bit differences with a bias of 2, wrapped to 8 bits
                        r = (r + ((b1 >> 4) & 0x03) - 2) % 256
                        g = (g + ((b1 >> 2) & 0x03) - 2) % 256
                        b = (b + (b1 & 0x03) - 2) % 256

                    elif (b1 & QOI.QOI_MASK_2) == QOI.QOI_OP_LUMA:
                        b2 = read(1)[0]

                        dg = (b1 & 0x3F) - 32
                        dr_dg = ((b2 >> 4) & 0x0F) - 8
                        db_dg = (b2 & 0x0F) - 8

                        r = (r + dg + dr_dg) % 256
                        g = (g + dg) % 256
                        b = (b + dg + db_dg) % 256

                    else:
                        # QOI_OP_RUN, the only tag left in the byte space
                        run = b1 & 0x3F

                # Run iterations rewrite the slot too, same value as before
                index.store((r, g, b, a))

                out[write_pos] = r
                out[write_pos + 1] = g
                out[write_pos + 2] = b
                if channels == 4:
                    out[write_pos + 3] = a
                write_pos += channels

                pixels_processed += 1
        except EOFError:
            raise TruncatedStreamError(
                f"QOI.decode: Incomplete image, stream ended after "
                f"{pixels_processed} of {total_pixels} pixels",
                pixels_decoded=pixels_processed,
                bytes_read=reader.position,
                partial=out,
            ) from None

        logger.debug(
            "decoded %dx%d from %d bytes",
            header.width,
            header.height,
            reader.position,
        )
