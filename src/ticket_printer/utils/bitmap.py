"""
Bitmap processing utilities for the thermal ticket printer client.
Handles monochrome thresholding and PIL image conversion for raster printing.
"""

from typing import List, Tuple, Union
from PIL import Image

INK_THRESHOLD = 128

Pixel = Union[int, Tuple[int, int, int]]


def luminance(pixel: Pixel) -> int:
    """
    Perceptual luminance of a pixel.

    Args:
        pixel: 0xRRGGBB integer (alpha bits ignored) or (r, g, b) tuple

    Returns:
        Luminance in 0-255
    """
    if isinstance(pixel, int):
        red = (pixel >> 16) & 0xFF
        green = (pixel >> 8) & 0xFF
        blue = pixel & 0xFF
    else:
        red, green, blue = pixel[0], pixel[1], pixel[2]
    return int(0.299 * red + 0.587 * green + 0.114 * blue)


def pixel_is_ink(pixel: Pixel) -> bool:
    """Pixels darker than the channel midpoint print as ink."""
    return luminance(pixel) < INK_THRESHOLD


def image_to_pixels(img: Image.Image) -> Tuple[List[Tuple[int, int, int]], int, int]:
    """
    Flatten a PIL image into row-major RGB tuples.

    Transparent areas are composited onto white first so they stay blank.

    Returns:
        Tuple of (pixels, width, height)
    """
    if img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info):
        rgba = img.convert("RGBA")
        background = Image.new("RGBA", rgba.size, (255, 255, 255, 255))
        img = Image.alpha_composite(background, rgba)
    rgb = img.convert("RGB")
    width, height = rgb.size
    return list(rgb.getdata()), width, height


def fit_to_width(img: Image.Image, max_dots: int) -> Image.Image:
    """
    Scale an image down so it fits the printable dot width.

    Images already narrow enough are returned unchanged.
    """
    width, height = img.size
    if width <= max_dots:
        return img
    new_height = max(1, round(height * max_dots / width))
    return img.resize((max_dots, new_height), Image.NEAREST)
