"""
TIFF writer for color images picked up from the camera.
"""

import logging
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image

from ..hardware import VvdImage
from ..errors import OutputOpenError, UnsupportedFormat
from ..config import BYTES_PER_PIXEL, SUPPORTED_IMAGE_FORMATS

logger = logging.getLogger(__name__)

# TIFF tag numbers
TAG_ORIENTATION = 274
ORIENTATION_TOPLEFT = 1


def permute_channels(buffer) -> bytearray:
    """
    Reorder every 4-byte pixel from (A, B, C, D) to (D, C, B, A).

    Turns the SDK's pixel order into RGB followed by the extra channel.
    The input is not modified.

    Args:
        buffer: Pixel bytes, length a multiple of 4

    Returns:
        New buffer of the same length
    """
    raw = np.frombuffer(bytes(buffer), dtype=np.uint8)
    if raw.size % BYTES_PER_PIXEL:
        raise ValueError(f"Buffer length {raw.size} is not a multiple of {BYTES_PER_PIXEL}")
    return bytearray(raw.reshape(-1, BYTES_PER_PIXEL)[:, ::-1].tobytes())


class TIFFWriter:
    """
    Writes a VvdImage as an LZW-compressed RGB TIFF with 4 samples per pixel.

    Tags: width, height, 4 x 8 bit samples, top-left orientation,
    contiguous planar configuration, RGB photometric, LZW. The whole pixel
    buffer goes into a single strip.
    """

    formats = SUPPORTED_IMAGE_FORMATS

    def check_format(self, format_name: str):
        """Raise UnsupportedFormat unless the format can be written."""
        if format_name not in self.formats:
            raise UnsupportedFormat(format_name, self.formats)

    def write(self, path: Union[str, Path], image: VvdImage, format_name: str = 'TIFF') -> str:
        """
        Write one image file.

        Args:
            path: Output file path
            image: Picked-up image in SDK channel order
            format_name: Requested encoding

        Returns:
            The path written

        Raises:
            UnsupportedFormat: If format_name is not TIFF (nothing is written)
            OutputOpenError: If the file cannot be opened for writing
        """
        self.check_format(format_name)

        if len(image.pixels) != image.buffer_length:
            raise ValueError(
                f"Image buffer has {len(image.pixels)} bytes, expected {image.buffer_length}"
            )

        pixels = permute_channels(image.pixels)
        raster = Image.frombytes('RGBA', (image.width, image.height), bytes(pixels))

        path = str(path)
        logger.debug(f"Open {path} for writing (format {format_name})...")
        try:
            out = open(path, 'wb')
        except OSError as e:
            raise OutputOpenError(path) from e

        with out:
            logger.debug(f"Writing strip ({len(pixels)} bytes)...")
            raster.save(
                out,
                format='TIFF',
                compression='tiff_lzw',
                tiffinfo={TAG_ORIENTATION: ORIENTATION_TOPLEFT},
                strip_size=len(pixels)
            )

        logger.info(f"Wrote {path}")
        return path
