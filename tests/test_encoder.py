import io

import numpy as np
import pytest

from qoicodec import (
    QOI,
    CapacityError,
    MalformedHeaderError,
    QOIEncoder,
    SizeError,
    encode,
    encode_bytes,
)

END = QOI.QOI_END_MARKER


def chunks(encoded):
    """Strip the header and end marker."""
    assert encoded[:4] == QOI.QOI_MAGIC
    assert encoded.endswith(END)
    return encoded[QOI.QOI_HEADER_SIZE : -len(END)]


def test_single_black_pixel():
    encoded = encode_bytes(bytes([0, 0, 0]), 1, 1, 3)
    assert encoded == bytes.fromhex(
        "716f6966 00000001 00000001 03 00 c0 0000000000000001"
    )
    assert len(encoded) == 23


def test_encode_writes_to_sink():
    sink = io.BytesIO()
    written = encode(sink, [0, 0, 0], 1, 1, 3)
    assert written == 23
    assert sink.getvalue() == encode_bytes(b"\x00\x00\x00", 1, 1, 3)


def test_run_of_62_then_new_pixel():
    pixels = bytes(3 * 62) + bytes([10, 0, 0])
    assert chunks(encode_bytes(pixels, 63, 1, 3)) == bytes.fromhex("fd fe 0a 00 00")


def test_run_of_63_splits_at_62():
    assert chunks(encode_bytes(bytes(3 * 63), 63, 1, 3)) == bytes.fromhex("fd c0")


def test_long_run_never_exceeds_max():
    encoded = chunks(encode_bytes(bytes(3 * 200), 200, 1, 3))
    # 62 + 62 + 62 + 14
    assert encoded == bytes.fromhex("fd fd fd cd")


def test_run_flushed_before_different_pixel():
    pixels = bytes([5, 5, 5]) * 3 + bytes([9, 9, 9])
    encoded = chunks(encode_bytes(pixels, 4, 1, 3))
    # LUMA, run of 2, LUMA
    assert encoded == bytes.fromhex("a5 88 c1 a4 88")


def test_diff():
    assert chunks(encode_bytes(bytes([1, 0, 0]), 1, 1, 3)) == b"\x7a"


def test_diff_wraps():
    # (255, 1, 0) is (-1, +1, 0) from opaque black
    assert chunks(encode_bytes(bytes([255, 1, 0]), 1, 1, 3)) == b"\x5e"


def test_luma():
    assert chunks(encode_bytes(bytes([10, 12, 14]), 1, 1, 3)) == b"\xac\x6a"


def test_luma_limits():
    # vg = -32, vr - vg = -8, vb - vg = 7
    pixel = bytes([(-40) % 256, (-32) % 256, (-25) % 256])
    assert chunks(encode_bytes(pixel, 1, 1, 3)) == b"\x80\x0f"


def test_rgb_when_outside_luma():
    assert chunks(encode_bytes(bytes([0, 40, 0]), 1, 1, 3)) == b"\xfe\x00\x28\x00"


def test_rgba_when_alpha_changes():
    # Even a pixel one step away from the previous one needs RGBA
    assert chunks(encode_bytes(bytes([0, 0, 0, 128]), 1, 1, 4)) == b"\xff\x00\x00\x00\x80"
    assert chunks(encode_bytes(bytes([1, 0, 0, 254]), 1, 1, 4)) == b"\xff\x01\x00\x00\xfe"


def test_index_hit():
    a = (10, 200, 10)
    b = (10, 10, 200)
    pixels = bytes(a + b + a)
    encoded = chunks(encode_bytes(pixels, 3, 1, 3))
    # a lives at position 1
    assert encoded[-1:] == b"\x01"


def test_index_slot_overwritten():
    # (1, 0, 0) and (0, 39, 0) both hash to position 56
    pixels = bytes((1, 0, 0, 0, 39, 0, 0, 0, 0, 0, 39, 0))
    encoded = chunks(encode_bytes(pixels, 4, 1, 3))
    assert encoded == bytes.fromhex("7a fe 00 27 00 fe 00 00 00 38")


def test_accepts_numpy_array():
    array = np.zeros((2, 2, 3), dtype=np.uint8)
    assert encode_bytes(array, 2, 2, 3) == encode_bytes(bytes(12), 2, 2, 3)


def test_wrong_length():
    with pytest.raises(CapacityError) as excinfo:
        encode_bytes(bytes(11), 2, 2, 3)
    assert excinfo.value.required == 12
    assert excinfo.value.available == 11


def test_rgba_length_must_match():
    with pytest.raises(CapacityError):
        encode_bytes(bytes(12), 2, 2, 4)


@pytest.mark.parametrize("width,height", [(0, 5), (5, 0), (20000, 20000)])
def test_bad_size(width, height):
    with pytest.raises(SizeError):
        encode_bytes(b"", width, height, 3)


def test_bad_channels():
    with pytest.raises(MalformedHeaderError):
        encode_bytes(bytes(2), 1, 1, 2)


def test_nothing_written_on_error():
    sink = io.BytesIO()
    with pytest.raises(CapacityError):
        QOIEncoder.encode(sink, bytes(5), 1, 1, 3)
    assert sink.getvalue() == b""


def test_colorspace_is_srgb():
    encoded = encode_bytes(bytes(4), 1, 1, 4)
    assert encoded[13] == QOI.QOI_SRGB
