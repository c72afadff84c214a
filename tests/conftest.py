import numpy as np
import pytest

# Colors with distinct index positions (5, 1 and 61), so repeats hit QOI_OP_INDEX
PALETTE = np.array([(200, 10, 10), (10, 200, 10), (10, 10, 200)], dtype=np.uint8)


def synthetic_pixels(height, width, channels, seed=0):
    """
    A (height, width, channels) uint8 image mixing smooth gradients, flat
    runs, a repeating palette, noise and (for RGBA) varying alpha.
    """
    rng = np.random.default_rng(seed)
    y, x = np.mgrid[0:height, 0:width]

    img = np.zeros((height, width, channels), dtype=np.uint8)
    img[..., 0] = (x * 3) % 256
    img[..., 1] = (y * 5 + x) % 256
    img[..., 2] = (x * y) % 256
    if channels == 4:
        img[..., 3] = 255

    quarter = max(1, min(height, width) // 4)

    # flat band for runs
    img[height // 3 : height // 3 + quarter, :] = img[0, 0]

    # repeating palette
    palette = img[:quarter, -quarter:]
    palette[..., :3] = PALETTE[(x[:quarter, -quarter:] % 3)]

    # noise
    noise = img[-quarter:, -quarter:]
    noise[...] = rng.integers(0, 256, size=noise.shape, dtype=np.uint8)

    if channels == 4:
        img[-quarter:, :quarter, 3] = ((x + y)[-quarter:, :quarter] * 7) % 256

    return img


@pytest.fixture
def make_pixels():
    return synthetic_pixels
