"""
Hardware interface modules for the VIVID camera SDK and the turntable.
"""

from .records import CameraMode, ImportPara, CameraData, VvdImage
from .sdk import VividSDK, SimulatedVividSDK
from .session import DeviceSession
from .turntable import Turntable

__all__ = [
    'CameraMode', 'ImportPara', 'CameraData', 'VvdImage',
    'VividSDK', 'SimulatedVividSDK', 'DeviceSession', 'Turntable'
]
