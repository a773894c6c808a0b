"""
Scanner modules for negotiating parameters, capturing and coordinating runs.
"""

from .parameters import ParameterNegotiator, apply_overrides, apply_filter_flags, format_status
from .capture import CaptureTrigger, ImageExtractor
from .coordinator import ScanCoordinator, ScanState, ScanResult, rotation_angles, output_filenames

__all__ = [
    'ParameterNegotiator', 'apply_overrides', 'apply_filter_flags', 'format_status',
    'CaptureTrigger', 'ImageExtractor',
    'ScanCoordinator', 'ScanState', 'ScanResult', 'rotation_angles', 'output_filenames'
]
