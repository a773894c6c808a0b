"""
Negotiation of camera parameters before the first release.
"""

import logging
from typing import Tuple

from ..hardware import CameraMode, ImportPara, DeviceSession
from ..options import CameraOverrides, FilterFlags, ScanOptions

logger = logging.getLogger(__name__)

# Order in which overrides are applied to the camera mode
OVERRIDE_ORDER = ('distance', 'gain', 'r_mode', 'threshold', 'auto_read', 'color', 'laser_power')


def apply_overrides(mode: CameraMode, overrides: CameraOverrides) -> CameraMode:
    """
    Replace every field of `mode` for which an override is given.

    Fields whose override is None keep their current value. Applying the
    same overrides twice gives the same result.

    Args:
        mode: Camera mode to update in place
        overrides: Requested values

    Returns:
        The updated mode (same object)
    """
    for name in OVERRIDE_ORDER:
        value = getattr(overrides, name)
        if value is not None:
            logger.debug(f"Setting {name} to {value}...")
            setattr(mode, name, value)
    return mode


def apply_filter_flags(import_para: ImportPara, flags: FilterFlags) -> ImportPara:
    """
    Enable the requested import filters on `import_para` in place.

    Args:
        import_para: Filter parameters used later by the image extractor
        flags: Requested filters

    Returns:
        The updated parameters (same object)
    """
    if flags.fill_hole:
        logger.debug("Using fillhole filter...")
        import_para.fill_hole = 1
    if flags.dark:
        logger.debug("Using color dark correction filter...")
        import_para.dark = 1
    if flags.subsampling is not None:
        logger.debug(f"Using subsampling filter ({flags.subsampling})...")
        import_para.reduce = flags.subsampling
    if flags.noise is not None:
        logger.debug(f"Using noise filter ({flags.noise})...")
        import_para.filter = flags.noise
    return import_para


class ParameterNegotiator:
    """
    Reads the camera mode, runs the assist operations, applies overrides
    and writes the result back.

    The write-back happens once per session; a second commit is refused.
    """

    def __init__(self, session: DeviceSession):
        self.session = session
        self._committed = False

    def read_current(self) -> CameraMode:
        """Query the current camera mode from the device."""
        logger.debug("Reading camera parameters...")
        mode = CameraMode()
        self.session.call("Read Camera Mode", self.session.sdk.read_parameter, mode)
        logger.debug(f"Camera mode: {mode.to_dict()}")
        return mode

    def apply_assist(self, mode: CameraMode, passive_af: bool = False,
                     active_af: bool = False, active_af_ae: bool = False) -> CameraMode:
        """
        Run the requested autofocus/autoexposure steps in fixed order.

        Each step updates `mode` with what the camera measured.

        Raises:
            DeviceProtocolError: If an assist step fails
            UnsupportedDevice: If AF/AE is requested on a model without it
        """
        sdk = self.session.sdk
        if passive_af:
            logger.debug("Performing Passive AF...")
            self.session.call("Passive AF", sdk.passive_af, mode)
        if active_af:
            logger.debug("Performing Active AF...")
            self.session.call("Active AF", sdk.active_af, mode)
        if active_af_ae:
            logger.debug("Performing Active AF/AE...")
            self.session.call("Active AF/AE", sdk.active_af_ae, mode)
        return mode

    apply_overrides = staticmethod(apply_overrides)
    apply_filter_flags = staticmethod(apply_filter_flags)

    def commit(self, mode: CameraMode):
        """
        Write the camera mode back to the device.

        Raises:
            RuntimeError: If parameters were already written in this session
            DeviceProtocolError: If the device rejects the parameters
        """
        if self._committed:
            raise RuntimeError("Camera parameters already written for this session")
        logger.debug("Writing parameters...")
        self.session.call("Write Camera Mode", self.session.sdk.write_parameter, mode)
        self._committed = True

    @property
    def committed(self) -> bool:
        return self._committed

    def negotiate(self, options: ScanOptions) -> Tuple[CameraMode, ImportPara]:
        """
        Run the full negotiation: read, assist, overrides, filters, commit.

        Returns:
            Tuple of (committed camera mode, import filter parameters)
        """
        mode = self.read_current()
        self.apply_assist(
            mode,
            passive_af=options.passive_af,
            active_af=options.active_af,
            active_af_ae=options.active_af_ae
        )
        apply_overrides(mode, options.overrides)
        import_para = apply_filter_flags(ImportPara(), options.filters)
        self.commit(mode)
        logger.info(f"Camera parameters written: {mode.to_dict()}")
        return mode, import_para


def format_status(mode: CameraMode) -> str:
    """Render the camera mode as the status report."""
    lines = [
        "VividII Camera Status:",
        "----------------------",
        f"Distance:         {mode.distance}mm",
        f"Laser Power:      {mode.laser_power}",
        f"Gain:             {mode.gain}",
        f"RMode:            {mode.r_mode}",
        f"Threshold:        {mode.threshold}",
        f"Auto Read:        {mode.auto_read}",
        f"Color correction: {mode.color}",
    ]
    return "\n".join(lines)
