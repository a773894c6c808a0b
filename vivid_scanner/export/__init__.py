"""
Export modules for saving scan data to volumetric text and TIFF files.
"""

from .volume_writer import VolumeWriter
from .tiff_writer import TIFFWriter, permute_channels

__all__ = ['VolumeWriter', 'TIFFWriter', 'permute_channels']
