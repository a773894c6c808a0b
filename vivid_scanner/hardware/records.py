"""
Data records exchanged with the VIVID SDK.
"""

from dataclasses import dataclass, field, asdict
from typing import Any, Optional

import numpy as np

from ..config import RASTER_WIDTH, RASTER_HEIGHT, BYTES_PER_PIXEL


@dataclass
class CameraMode:
    """Device configuration as read from (and written to) the camera."""
    distance: int = 0      # mm
    laser_power: int = 0
    gain: int = 0
    r_mode: int = 0        # Release mode
    threshold: int = 0
    auto_read: int = 0
    color: int = 0         # Color correction index

    def copy(self) -> 'CameraMode':
        return CameraMode(**asdict(self))

    def to_dict(self) -> dict:
        """Convert to dictionary for logging."""
        return asdict(self)


@dataclass
class ImportPara:
    """
    Post-capture filter parameters used when picking up images.

    These never round-trip to the device.
    """
    fill_hole: int = 0
    dark: int = 0
    reduce: int = 0   # Subsampling rate, 0 = disabled
    filter: int = 0   # Noise filter quality

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class CameraData:
    """
    Raw readout for one exposure cycle.

    data3d holds the volumetric samples in row-major order (480 x 640).
    handle is the SDK-owned pointer when a real binding is in use.
    """
    data3d: Optional[np.ndarray] = None
    color: Optional[bytes] = None
    color_mode: Optional[int] = None
    handle: Any = None

    @property
    def has_range(self) -> bool:
        return self.data3d is not None

    def clear(self):
        """Drop buffers so the record can be reused for the next shot."""
        self.data3d = None
        self.color = None
        self.color_mode = None


@dataclass
class VvdImage:
    """Decoded raster, 4 bytes per pixel in SDK channel order."""
    width: int = 0
    height: int = 0
    attribute: int = 0  # Pixel format tag
    pixels: bytearray = field(default_factory=bytearray)

    @property
    def buffer_length(self) -> int:
        return self.width * self.height * BYTES_PER_PIXEL

    @classmethod
    def blank(cls, width: int = RASTER_WIDTH, height: int = RASTER_HEIGHT) -> 'VvdImage':
        return cls(width=width, height=height,
                   pixels=bytearray(width * height * BYTES_PER_PIXEL))
