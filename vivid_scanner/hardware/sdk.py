"""
VIVID SDK interface: a ctypes binding for the vendor library and a simulator.

Every device call returns VVD_TRUE, VVD_FALSE or VVD_ILLEGAL, mirroring the
vendor API. Converting those statuses into exceptions is the job of
DeviceSession.call().
"""

import ctypes as C
import ctypes.util
import logging
from typing import Dict, List, Optional, Tuple

import numpy as np

from .records import CameraMode, CameraData, ImportPara, VvdImage
from ..errors import ErrorCode
from ..config import (
    SDK_LIBRARY,
    VVD_TRUE,
    VVD_FALSE,
    VVD_ILLEGAL,
    RASTER_WIDTH,
    RASTER_HEIGHT,
    BYTES_PER_PIXEL,
    SIMULATION_DISTANCE,
    SIMULATION_SEED
)

logger = logging.getLogger(__name__)


# =============================================================================
# Vendor structures
# =============================================================================

class _CameraMode(C.Structure):
    _fields_ = [
        ('distance', C.c_int),
        ('laserPower', C.c_int),
        ('gain', C.c_int),
        ('r_mode', C.c_int),
        ('threshold', C.c_int),
        ('autoRead', C.c_int),
        ('color', C.c_int),
    ]


class _CameraData(C.Structure):
    _fields_ = [
        ('data3d', C.POINTER(C.c_ulong)),
        ('color', C.POINTER(C.c_ubyte)),
    ]


class _Image(C.Structure):
    _fields_ = [
        ('attribute', C.c_int),
        ('width', C.c_int),
        ('height', C.c_int),
        ('pixels', C.POINTER(C.c_ubyte)),
    ]


_MODE_FIELDS = (
    ('distance', 'distance'),
    ('laser_power', 'laserPower'),
    ('gain', 'gain'),
    ('r_mode', 'r_mode'),
    ('threshold', 'threshold'),
    ('auto_read', 'autoRead'),
    ('color', 'color'),
)


def _to_struct(mode: CameraMode) -> _CameraMode:
    raw = _CameraMode()
    for attr, name in _MODE_FIELDS:
        setattr(raw, name, getattr(mode, attr))
    return raw


def _from_struct(raw: _CameraMode, mode: CameraMode):
    for attr, name in _MODE_FIELDS:
        setattr(mode, attr, getattr(raw, name))


def bind(lib):
    """Declare argument and return types of the SDK entry points."""
    mode_p = C.POINTER(_CameraMode)
    data_pp = C.POINTER(C.POINTER(_CameraData))

    lib.VividIISCSIInitialize.restype = C.c_int
    lib.VividIISCSIFinish.restype = C.c_int
    lib.VividGetErrorStatus.restype = C.c_int

    for name in ('VividIISCSIReadParameter', 'VividIISCSIWriteParameter',
                 'VividIISCSIPassiveAF', 'VividIISCSIActiveAF',
                 'VividIISCSIActiveAFAE_910'):
        func = getattr(lib, name)
        func.argtypes = [mode_p]
        func.restype = C.c_int

    lib.VividIISCSIRelease.restype = C.c_int
    lib.VividIISCSIReadPitch.argtypes = [data_pp]
    lib.VividIISCSIReadPitch.restype = C.c_int
    lib.VividIISCSIReadColor.argtypes = [data_pp, C.c_int]
    lib.VividIISCSIReadColor.restype = C.c_int
    lib.VividIISCSIScanRead910.argtypes = [data_pp, C.c_int, C.c_int, C.c_int, C.c_int]
    lib.VividIISCSIScanRead910.restype = C.c_int

    lib.VividIIPickupColorImage.argtypes = [
        C.POINTER(_CameraData), C.POINTER(C.POINTER(_Image))
    ]
    lib.VividIIPickupColorImage.restype = C.c_int
    lib.VividIIFreeCameraData.argtypes = [data_pp]
    lib.VividIIFreeCameraData.restype = None


# =============================================================================
# ctypes binding
# =============================================================================

class VividSDK:
    """
    Binding for the vendor vividIIsdk shared library.

    The library is loaded on initialize(); when it cannot be found the call
    reports failure and get_error_status() returns SERR_NOTFOUND.
    """

    def __init__(self, library: Optional[str] = None):
        """
        Args:
            library: Path to the SDK library (default: looked up by name)
        """
        self.library = library
        self._lib = None

    def initialize(self) -> int:
        path = self.library or ctypes.util.find_library(SDK_LIBRARY)
        if path is None:
            logger.error(f"{SDK_LIBRARY} library not found")
            return VVD_FALSE

        try:
            self._lib = C.CDLL(path)
            bind(self._lib)
        except (OSError, AttributeError) as e:
            logger.error(f"Failed to load {path}: {e}")
            self._lib = None
            return VVD_FALSE

        logger.debug(f"Loaded SDK from {path}")
        return self._lib.VividIISCSIInitialize()

    def finish(self):
        if self._lib is not None:
            self._lib.VividIISCSIFinish()

    def get_error_status(self) -> int:
        if self._lib is None:
            return int(ErrorCode.SERR_NOTFOUND)
        return self._lib.VividGetErrorStatus()

    def _mode_call(self, func, mode: CameraMode) -> int:
        raw = _to_struct(mode)
        status = func(C.byref(raw))
        if status == VVD_TRUE:
            _from_struct(raw, mode)
        return status

    def read_parameter(self, mode: CameraMode) -> int:
        return self._mode_call(self._lib.VividIISCSIReadParameter, mode)

    def write_parameter(self, mode: CameraMode) -> int:
        return self._mode_call(self._lib.VividIISCSIWriteParameter, mode)

    def passive_af(self, mode: CameraMode) -> int:
        return self._mode_call(self._lib.VividIISCSIPassiveAF, mode)

    def active_af(self, mode: CameraMode) -> int:
        return self._mode_call(self._lib.VividIISCSIActiveAF, mode)

    def active_af_ae(self, mode: CameraMode) -> int:
        return self._mode_call(self._lib.VividIISCSIActiveAFAE_910, mode)

    def release(self) -> int:
        return self._lib.VividIISCSIRelease()

    def _handle(self, data: CameraData):
        if data.handle is None:
            data.handle = C.pointer(_CameraData())
        return data.handle

    def _copy_range(self, data: CameraData):
        raw = data.handle.contents
        if raw.data3d:
            samples = np.ctypeslib.as_array(raw.data3d, shape=(RASTER_HEIGHT * RASTER_WIDTH,))
            data.data3d = samples.reshape(RASTER_HEIGHT, RASTER_WIDTH).astype(np.uint32)

    def _copy_color(self, data: CameraData, r_mode: int):
        raw = data.handle.contents
        if raw.color:
            data.color = C.string_at(raw.color, RASTER_WIDTH * RASTER_HEIGHT * BYTES_PER_PIXEL)
            data.color_mode = r_mode

    def read_pitch(self, data: CameraData) -> int:
        handle = self._handle(data)
        status = self._lib.VividIISCSIReadPitch(C.byref(handle))
        if status == VVD_TRUE:
            self._copy_range(data)
        return status

    def read_color(self, data: CameraData, r_mode: int) -> int:
        handle = self._handle(data)
        status = self._lib.VividIISCSIReadColor(C.byref(handle), r_mode)
        if status == VVD_TRUE:
            self._copy_color(data, r_mode)
        return status

    def scan_read_910(self, data: CameraData, distance: int, laser_power: int, gain: int) -> int:
        handle = self._handle(data)
        status = self._lib.VividIISCSIScanRead910(
            C.byref(handle), distance, laser_power, gain, 1
        )
        if status == VVD_TRUE:
            self._copy_range(data)
            self._copy_color(data, -1)
        return status

    def pickup_color_image(self, data: CameraData, image: VvdImage,
                           import_para: Optional[ImportPara] = None) -> int:
        # The vendor pickup entry point takes no filter parameters.
        raw_image = C.POINTER(_Image)()
        status = self._lib.VividIIPickupColorImage(self._handle(data), C.byref(raw_image))
        if status == VVD_TRUE:
            contents = raw_image.contents
            image.attribute = contents.attribute
            image.width = contents.width
            image.height = contents.height
            image.pixels = bytearray(
                C.string_at(contents.pixels, contents.width * contents.height * BYTES_PER_PIXEL)
            )
        return status

    def free_camera_data(self, data: CameraData):
        if self._lib is not None and data.handle is not None:
            self._lib.VividIIFreeCameraData(C.byref(data.handle))
        data.handle = None
        data.clear()


# =============================================================================
# Simulator
# =============================================================================

DEFAULT_SIMULATED_MODE = CameraMode(
    distance=1000,
    laser_power=128,
    gain=3,
    r_mode=0,
    threshold=65535,
    auto_read=0,
    color=10
)


class SimulatedVividSDK:
    """
    In-memory stand-in for the camera, used in simulation mode.

    Generates a synthetic range buffer (a dome in front of a flat
    background) and a 4-byte-per-pixel color buffer. Faults can be
    injected per call name, e.g. faults={'release': ErrorCode.SERR_BUSY}.
    Every call is recorded in `calls`.
    """

    def __init__(self, model: str = 'VIVID 910',
                 mode: Optional[CameraMode] = None,
                 faults: Optional[Dict[str, int]] = None,
                 seed: int = SIMULATION_SEED):
        self.model = model
        self.mode = (mode or DEFAULT_SIMULATED_MODE).copy()
        self.faults = dict(faults or {})
        self.calls: List[Tuple] = []
        self.initialized = False
        self.finish_count = 0
        self._error = 0
        self._rng = np.random.default_rng(seed)
        self._released = False

    @property
    def supports_910(self) -> bool:
        return '910' in self.model

    def _enter(self, name: str, *args) -> bool:
        """Record a call and apply any injected fault. Returns True on success."""
        self.calls.append((name,) + args)
        code = self.faults.get(name)
        if code is not None:
            self._error = int(code)
            return False
        return True

    def call_names(self) -> List[str]:
        return [call[0] for call in self.calls]

    def initialize(self) -> int:
        if not self._enter('initialize'):
            return VVD_FALSE
        self.initialized = True
        logger.info(f"Simulated {self.model} initialized")
        return VVD_TRUE

    def finish(self):
        self.calls.append(('finish',))
        self.finish_count += 1
        self.initialized = False

    def get_error_status(self) -> int:
        return self._error

    def read_parameter(self, mode: CameraMode) -> int:
        if not self._enter('read_parameter'):
            return VVD_FALSE
        for key, value in self.mode.to_dict().items():
            setattr(mode, key, value)
        return VVD_TRUE

    def write_parameter(self, mode: CameraMode) -> int:
        if not self._enter('write_parameter', mode.copy()):
            return VVD_FALSE
        self.mode = mode.copy()
        return VVD_TRUE

    def passive_af(self, mode: CameraMode) -> int:
        if not self._enter('passive_af'):
            return VVD_FALSE
        mode.distance = SIMULATION_DISTANCE
        return VVD_TRUE

    def active_af(self, mode: CameraMode) -> int:
        if not self._enter('active_af'):
            return VVD_FALSE
        mode.distance = SIMULATION_DISTANCE + 50
        return VVD_TRUE

    def active_af_ae(self, mode: CameraMode) -> int:
        if not self.supports_910:
            self.calls.append(('active_af_ae',))
            return VVD_ILLEGAL
        if not self._enter('active_af_ae'):
            return VVD_FALSE
        mode.distance = SIMULATION_DISTANCE + 50
        mode.laser_power = 160
        mode.gain = 2
        return VVD_TRUE

    def release(self) -> int:
        if not self._enter('release'):
            return VVD_FALSE
        self._released = True
        return VVD_TRUE

    def _range_buffer(self, distance: int) -> np.ndarray:
        y, x = np.mgrid[0:RASTER_HEIGHT, 0:RASTER_WIDTH]
        r2 = ((x - RASTER_WIDTH / 2) ** 2 + (y - RASTER_HEIGHT / 2) ** 2) / (RASTER_HEIGHT / 2) ** 2
        dome = np.where(r2 < 1.0, 200.0 * np.sqrt(np.clip(1.0 - r2, 0.0, 1.0)), 0.0)
        noise = self._rng.integers(-2, 3, size=(RASTER_HEIGHT, RASTER_WIDTH))
        return np.clip(distance - dome + noise, 0, None).astype(np.uint32)

    def _color_buffer(self) -> bytes:
        pixels = self._rng.integers(0, 256, size=RASTER_WIDTH * RASTER_HEIGHT * BYTES_PER_PIXEL,
                                    dtype=np.uint8)
        return pixels.tobytes()

    def read_pitch(self, data: CameraData) -> int:
        if not self._enter('read_pitch'):
            return VVD_FALSE
        data.data3d = self._range_buffer(self.mode.distance)
        return VVD_TRUE

    def read_color(self, data: CameraData, r_mode: int) -> int:
        if not self._enter('read_color', r_mode):
            return VVD_FALSE
        data.color = self._color_buffer()
        data.color_mode = r_mode
        return VVD_TRUE

    def scan_read_910(self, data: CameraData, distance: int, laser_power: int, gain: int) -> int:
        if not self.supports_910:
            self.calls.append(('scan_read_910', distance, laser_power, gain))
            return VVD_ILLEGAL
        if not self._enter('scan_read_910', distance, laser_power, gain):
            return VVD_FALSE
        data.data3d = self._range_buffer(distance)
        data.color = self._color_buffer()
        data.color_mode = -1
        return VVD_TRUE

    def pickup_color_image(self, data: CameraData, image: VvdImage,
                           import_para: Optional[ImportPara] = None) -> int:
        if not self._enter('pickup_color_image', import_para):
            return VVD_FALSE
        if data.color is None:
            self._error = int(ErrorCode.VERROR_NO_IMAGE)
            return VVD_FALSE

        pixels = np.frombuffer(data.color, dtype=np.uint8).reshape(
            RASTER_HEIGHT, RASTER_WIDTH, BYTES_PER_PIXEL
        )
        # Subsampling rate n keeps every n-th pixel in both directions
        step = import_para.reduce if import_para is not None and import_para.reduce > 1 else 1
        pixels = np.ascontiguousarray(pixels[::step, ::step])

        image.attribute = data.color_mode if data.color_mode is not None else 0
        image.height, image.width = pixels.shape[:2]
        image.pixels = bytearray(pixels.tobytes())
        return VVD_TRUE

    def free_camera_data(self, data: CameraData):
        self.calls.append(('free_camera_data',))
        data.handle = None
        data.clear()
