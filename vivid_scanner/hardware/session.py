"""
SCSI session with the VIVID camera.
"""

import logging
from typing import Optional

from .records import CameraData
from .sdk import VividSDK, SimulatedVividSDK
from ..errors import DeviceUnavailable, DeviceProtocolError, UnsupportedDevice
from ..config import VVD_TRUE, VVD_ILLEGAL

logger = logging.getLogger(__name__)


class DeviceSession:
    """
    Owns the lifetime of the link to the camera.

    The session also holds the single CameraData record used by every shot,
    so closing it releases the capture buffers as well. A session is opened
    at most once.
    """

    def __init__(self, sdk=None, simulate: bool = False):
        """
        Initialize the session.

        Args:
            sdk: SDK object to drive (default: vendor binding, or the
                 simulator when simulate is True)
            simulate: If True, run against the simulated camera
        """
        if sdk is None:
            sdk = SimulatedVividSDK() if simulate else VividSDK()
        self.sdk = sdk
        self.camera_data = CameraData()
        self._opened = False
        self._used = False

    def open(self):
        """
        Establish the SCSI link.

        Raises:
            DeviceUnavailable: If the SDK cannot initialize the device
        """
        if self._used:
            raise RuntimeError("Device session cannot be reopened")
        self._used = True

        logger.debug("Initializing SCSI device...")
        if self.sdk.initialize() != VVD_TRUE:
            raise DeviceUnavailable(self.sdk.get_error_status())

        self._opened = True
        logger.info("SCSI device initialized")

    def call(self, stage: str, func, *args) -> int:
        """
        Invoke one SDK device function and check its status.

        Args:
            stage: Operation name used in diagnostics (e.g. "Release")
            func: Bound SDK method
            *args: Arguments for the SDK method

        Returns:
            The SDK status (always VVD_TRUE when this returns)

        Raises:
            UnsupportedDevice: If the SDK reports the function as illegal
                               for the connected model
            DeviceProtocolError: On any other failure, with the fault code
                                 read right after the failing call
        """
        if not self._opened:
            raise RuntimeError(f"{stage}: device session is not open")

        status = func(*args)
        if status == VVD_ILLEGAL:
            raise UnsupportedDevice(stage)
        if status != VVD_TRUE:
            raise DeviceProtocolError(stage, self.sdk.get_error_status())
        return status

    def close(self):
        """Finish the SCSI link and free the capture record. Safe to call twice."""
        if not self._opened:
            return
        self._opened = False

        logger.debug("Closing SCSI device...")
        try:
            self.sdk.finish()
        finally:
            self.sdk.free_camera_data(self.camera_data)
        logger.info("SCSI device closed")

    @property
    def is_open(self) -> bool:
        """Check if the session is open."""
        return self._opened

    def __enter__(self):
        """Context manager entry."""
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
        return False
