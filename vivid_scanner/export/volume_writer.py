"""
Plain-text volumetric buffer writer (IBRraw.xdr header + one sample per line).
"""

import logging
from pathlib import Path
from typing import Union

import numpy as np

from ..errors import OutputOpenError
from ..config import RASTER_WIDTH, RASTER_HEIGHT, VOLUME_HEADER

logger = logging.getLogger(__name__)


class VolumeWriter:
    """
    Writes the 640 x 480 range buffer of one shot as text.

    File layout:
        7 header lines ending with '---end-of-header---', then every sample
        as a decimal integer on its own line, rows top to bottom.
    """

    def __init__(self, width: int = RASTER_WIDTH, height: int = RASTER_HEIGHT):
        self.width = width
        self.height = height

    def samples(self, data3d) -> np.ndarray:
        """Flatten the buffer to row-major order, checking its size."""
        flat = np.asarray(data3d).reshape(-1)
        expected = self.width * self.height
        if flat.size != expected:
            raise ValueError(f"Range buffer has {flat.size} samples, expected {expected}")
        return flat.astype(np.int64)

    def write(self, path: Union[str, Path], data3d) -> str:
        """
        Write one volumetric file.

        Args:
            path: Output file path
            data3d: Range samples, (height, width) or flat

        Returns:
            The path written

        Raises:
            OutputOpenError: If the file cannot be opened for writing
            ValueError: If the buffer is missing or has the wrong size
        """
        if data3d is None:
            raise ValueError("Capture record holds no range data")
        samples = self.samples(data3d)

        path = str(path)
        logger.debug(f"Open {path} for writing...")
        try:
            out = open(path, 'w', encoding='ascii', newline='\n')
        except OSError as e:
            raise OutputOpenError(path) from e

        with out:
            logger.debug("Writing header...")
            out.write('\n'.join(VOLUME_HEADER))
            out.write('\n')

            logger.debug("Writing data...")
            for row in samples.reshape(self.height, self.width):
                out.write('\n'.join(map(str, row.tolist())))
                out.write('\n')

        logger.info(f"Wrote {path} ({samples.size} samples)")
        return path
