"""
Release triggering and color image pickup.
"""

import logging
from typing import Optional

from ..hardware import CameraData, CameraMode, ImportPara, VvdImage, DeviceSession

logger = logging.getLogger(__name__)


class CaptureTrigger:
    """
    Fires one exposure cycle and reads the buffers back.

    The release variant is fixed at construction: standard release
    (release, read pitch, read color) or dynamic range expansion
    (dual-exposure scan-read, VIVID 910 only).
    """

    def __init__(self, session: DeviceSession, mode: CameraMode, dynamic_range: bool = False):
        """
        Args:
            session: Open device session; its CameraData record is reused
            mode: Committed camera mode
            dynamic_range: If True, use dynamic range expansion
        """
        self.session = session
        self.mode = mode
        self.dynamic_range = dynamic_range

    @property
    def record(self) -> CameraData:
        return self.session.camera_data

    def standard_release(self) -> CameraData:
        """
        Release, then read the pitch and color buffers.

        Raises:
            DeviceProtocolError: Naming the failing stage
        """
        sdk = self.session.sdk
        record = self.record
        record.clear()

        self.session.call("Release", sdk.release)
        self.session.call("Read Pitch", sdk.read_pitch, record)
        self.session.call("Read Color", sdk.read_color, record, self.mode.r_mode)
        return record

    def hdr_release(self, mode: Optional[CameraMode] = None) -> CameraData:
        """
        Dual-exposure scan-read using distance, laser power and gain from mode.

        Raises:
            UnsupportedDevice: If the camera is not a VIVID 910
            DeviceProtocolError: On any other failure
        """
        mode = mode or self.mode
        record = self.record
        record.clear()

        logger.debug("Using dynamic range expansion...")
        self.session.call(
            "Release", self.session.sdk.scan_read_910, record,
            mode.distance, mode.laser_power, mode.gain
        )
        return record

    def release(self) -> CameraData:
        """Run the configured release variant."""
        if self.dynamic_range:
            return self.hdr_release()
        return self.standard_release()


class ImageExtractor:
    """Turns a capture record into a color image through the SDK pickup."""

    def __init__(self, session: DeviceSession, import_para: Optional[ImportPara] = None):
        self.session = session
        self.import_para = import_para or ImportPara()

    def extract(self, record: CameraData) -> VvdImage:
        """
        Pick up the color image from the record.

        The pixel bytes are left in SDK channel order.

        Raises:
            DeviceProtocolError: If the pickup fails
        """
        image = VvdImage()
        self.session.call(
            "Pickup Color Image", self.session.sdk.pickup_color_image,
            record, image, self.import_para
        )
        logger.debug(
            f"ImageType: {image.attribute}, Width: {image.width}, Height: {image.height}"
        )
        return image
