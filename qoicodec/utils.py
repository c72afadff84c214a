from PIL import Image

from .image import QOIImage

RAW_EXTENSIONS = ("dng", "cr2", "nef", "arw", "raw")


def load_image(filepath: str) -> QOIImage:
    """Load an image file as RGB or RGBA pixels."""

    ext = str(filepath).lower().split(".")[-1]

    if ext in RAW_EXTENSIONS:
        # RAW formats - requires rawpy (pip install qoicodec[raw])
        import rawpy

        with rawpy.imread(str(filepath)) as raw:
            rgb = raw.postprocess()
        return QOIImage.from_array(rgb)

    # Standard formats (PNG, JPEG, etc.)
    with Image.open(filepath) as img:
        return QOIImage.from_pil(img)
