class QOIError(ValueError):
    """Base class for everything the codec raises about bad input."""


class MalformedHeaderError(QOIError):
    """Bad magic, channel count or colorspace."""


class SizeError(QOIError):
    """Zero pixels, or at least QOI.QOI_PIXELS_MAX of them."""


class CapacityError(QOIError):
    """A pixel buffer does not have the size the image needs."""

    def __init__(self, message: str, required: int = None, available: int = None):
        super().__init__(message)
        self.required = required
        self.available = available


class TruncatedStreamError(QOIError):
    """
    The byte source ran dry before the image was complete.

    pixels_decoded tells how many pixels were written to the output before
    the failure, bytes_read how many bytes were consumed from the source.
    field names the header field being read when the header itself is short.
    partial is the output buffer holding the pixels decoded so far, if any.
    """

    def __init__(
        self,
        message: str,
        pixels_decoded: int = 0,
        bytes_read: int = 0,
        field: str = None,
        partial=None,
    ):
        super().__init__(message)
        self.pixels_decoded = pixels_decoded
        self.bytes_read = bytes_read
        self.field = field
        self.partial = partial


class UnknownFormatError(QOIError):
    """No registered format matches the leading bytes of a stream."""
