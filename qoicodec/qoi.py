class QOI:
    # QOI Constants
    QOI_OP_INDEX = 0x00
    QOI_OP_DIFF = 0x40
    QOI_OP_LUMA = 0x80
    QOI_OP_RUN = 0xC0
    QOI_OP_RGB = 0xFE
    QOI_OP_RGBA = 0xFF

    QOI_MASK_2 = 0xC0
    QOI_HEADER_SIZE = 14
    QOI_MAGIC = b"qoif"
    QOI_PIXELS_MAX = 400000000  # Safety limit (400MP)
    QOI_RUN_MAX = 62
    QOI_INDEX_SIZE = 64
    QOI_END_MARKER = b"\x00\x00\x00\x00\x00\x00\x00\x01"

    # Colorspace tags, carried in the header but never interpreted
    QOI_SRGB = 0
    QOI_LINEAR = 1

    # Previous pixel assumed before the first one
    QOI_START_PIXEL = (0, 0, 0, 255)


def qoi_hash(r: int, g: int, b: int, a: int) -> int:
    """Calculates the index position for the color array."""
    return (r * 3 + g * 5 + b * 7 + a * 11) % 64


class ColorIndex:
    """
    The 64 slot running array of previously seen pixels.

    Encoder and decoder each own one per call and must update it in the same
    places, otherwise QOI_OP_INDEX chunks resolve to the wrong color.
    """

    __slots__ = ("slots",)

    def __init__(self):
        # Stored as tuples (r, g, b, a) for cheap comparison
        self.slots = [(0, 0, 0, 0)] * QOI.QOI_INDEX_SIZE

    def __getitem__(self, position: int) -> tuple:
        return self.slots[position]

    def __len__(self):
        return len(self.slots)

    def lookup(self, pixel: tuple) -> tuple:
        """
        Return (position, hit) for a pixel.

        hit is True when the slot already holds exactly this pixel.
        """
        position = qoi_hash(*pixel)
        return position, self.slots[position] == pixel

    def store(self, pixel: tuple, position: int = None) -> int:
        """Write pixel into its slot (last write wins) and return the slot."""
        if position is None:
            position = qoi_hash(*pixel)
        self.slots[position] = pixel
        return position
