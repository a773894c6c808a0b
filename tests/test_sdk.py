"""
ctypes binding tests

The vendor library is replaced by an object whose entry points read and
write the structures passed by reference, the way the C functions do.
"""

import ctypes as C
import ctypes.util

import numpy as np
import pytest

from vivid_scanner.hardware import DeviceSession, VividSDK, CameraMode, CameraData, VvdImage
from vivid_scanner.hardware.sdk import _MODE_FIELDS, _CameraMode, _Image
from vivid_scanner.errors import DeviceUnavailable, ErrorCode
from vivid_scanner.config import (
    VVD_TRUE,
    VVD_FALSE,
    RASTER_WIDTH,
    RASTER_HEIGHT,
    BYTES_PER_PIXEL
)


# One distinct value per vendor field, so a swapped mapping shows up
DEVICE_VALUES = {
    'distance': 1234,
    'laserPower': 201,
    'gain': 5,
    'r_mode': 2,
    'threshold': 777,
    'autoRead': 1,
    'color': 9,
}


class FakeLibrary:
    """Stands in for the loaded vividIIsdk shared library."""

    def __init__(self, status=VVD_TRUE):
        self.status = status
        self.error = 0
        self.written = None
        self.freed = []
        self.samples = (C.c_ulong * (RASTER_WIDTH * RASTER_HEIGHT))(
            *range(RASTER_WIDTH * RASTER_HEIGHT)
        )
        self.color = (C.c_ubyte * (RASTER_WIDTH * RASTER_HEIGHT * BYTES_PER_PIXEL)).from_buffer_copy(
            bytes([1, 2, 3, 4]) * (RASTER_WIDTH * RASTER_HEIGHT)
        )
        self.pixels = (C.c_ubyte * (2 * 3 * BYTES_PER_PIXEL))(*range(24))
        self.image = _Image(attribute=1, width=3, height=2,
                            pixels=C.cast(self.pixels, C.POINTER(C.c_ubyte)))

    def VividIISCSIInitialize(self):
        return self.status

    def VividIISCSIFinish(self):
        return VVD_TRUE

    def VividGetErrorStatus(self):
        return self.error

    def VividIISCSIReadParameter(self, ref):
        if self.status == VVD_TRUE:
            for name, value in DEVICE_VALUES.items():
                setattr(ref._obj, name, value)
        return self.status

    def VividIISCSIWriteParameter(self, ref):
        self.written = {name: getattr(ref._obj, name) for _, name in _MODE_FIELDS}
        return self.status

    def VividIISCSIPassiveAF(self, ref):
        ref._obj.distance = 900
        return self.status

    def VividIISCSIActiveAF(self, ref):
        ref._obj.distance = 950
        return self.status

    def VividIISCSIActiveAFAE_910(self, ref):
        ref._obj.distance = 960
        ref._obj.laserPower = 150
        ref._obj.gain = 4
        return self.status

    def VividIISCSIRelease(self):
        return self.status

    def VividIISCSIReadPitch(self, ref):
        ref._obj.contents.data3d = C.cast(self.samples, C.POINTER(C.c_ulong))
        return self.status

    def VividIISCSIReadColor(self, ref, r_mode):
        ref._obj.contents.color = C.cast(self.color, C.POINTER(C.c_ubyte))
        return self.status

    def VividIISCSIScanRead910(self, ref, distance, laser_power, gain, flag):
        self.VividIISCSIReadPitch(ref)
        self.VividIISCSIReadColor(ref, -1)
        return self.status

    def VividIIPickupColorImage(self, handle, ref):
        ref._obj.contents = self.image
        return self.status

    def VividIIFreeCameraData(self, ref):
        self.freed.append(ref._obj)


@pytest.fixture
def lib():
    return FakeLibrary()


@pytest.fixture
def vivid(lib):
    sdk = VividSDK()
    sdk._lib = lib
    return sdk


def device_mode():
    """CameraMode expected after reading DEVICE_VALUES"""
    return CameraMode(**{attr: DEVICE_VALUES[name] for attr, name in _MODE_FIELDS})


class TestModeFields:
    """CameraMode <-> vendor structure conversion"""

    def test_mapping_covers_structure(self):
        assert sorted(name for _, name in _MODE_FIELDS) == \
            sorted(name for name, _ in _CameraMode._fields_)
        assert sorted(attr for attr, _ in _MODE_FIELDS) == \
            sorted(CameraMode().to_dict())

    def test_read_parameter(self, vivid):
        mode = CameraMode()
        assert vivid.read_parameter(mode) == VVD_TRUE
        assert mode == device_mode()
        assert mode.laser_power == 201
        assert mode.auto_read == 1

    def test_write_parameter(self, vivid, lib):
        mode = device_mode()
        assert vivid.write_parameter(mode) == VVD_TRUE
        assert lib.written == DEVICE_VALUES

    def test_failed_call_leaves_mode_untouched(self, vivid, lib):
        lib.status = VVD_FALSE
        mode = CameraMode(distance=1100, laser_power=100)
        assert vivid.active_af_ae(mode) == VVD_FALSE
        assert mode == CameraMode(distance=1100, laser_power=100)

    def test_assist_updates_mode(self, vivid):
        mode = CameraMode(distance=1100, laser_power=100, gain=1)
        vivid.passive_af(mode)
        assert mode.distance == 900
        vivid.active_af(mode)
        assert mode.distance == 950
        vivid.active_af_ae(mode)
        assert (mode.distance, mode.laser_power, mode.gain) == (960, 150, 4)


class TestReadout:
    """range and color buffers"""

    def test_read_pitch_row_major(self, vivid):
        data = CameraData()
        assert vivid.read_pitch(data) == VVD_TRUE
        assert data.data3d.shape == (RASTER_HEIGHT, RASTER_WIDTH)
        assert data.data3d.dtype == np.uint32
        assert data.data3d[0, 1] == 1
        assert data.data3d[1, 0] == RASTER_WIDTH
        assert data.data3d[-1, -1] == RASTER_WIDTH * RASTER_HEIGHT - 1

    def test_read_pitch_copies_buffer(self, vivid, lib):
        data = CameraData()
        vivid.read_pitch(data)
        lib.samples[0] = 99
        assert data.data3d[0, 0] == 0

    def test_read_color(self, vivid):
        data = CameraData()
        assert vivid.read_color(data, 2) == VVD_TRUE
        assert len(data.color) == RASTER_WIDTH * RASTER_HEIGHT * BYTES_PER_PIXEL
        assert data.color[:8] == bytes([1, 2, 3, 4, 1, 2, 3, 4])
        assert data.color_mode == 2

    def test_scan_read_910_fills_both(self, vivid):
        data = CameraData()
        assert vivid.scan_read_910(data, 1000, 128, 3) == VVD_TRUE
        assert data.has_range
        assert data.color is not None
        assert data.color_mode == -1

    def test_failed_read_copies_nothing(self, vivid, lib):
        lib.status = VVD_FALSE
        data = CameraData()
        assert vivid.read_pitch(data) == VVD_FALSE
        assert data.data3d is None

    def test_handle_reused_across_reads(self, vivid):
        data = CameraData()
        vivid.read_pitch(data)
        handle = data.handle
        vivid.read_color(data, 0)
        assert data.handle is handle


class TestPickupAndFree:
    """image pickup and camera data release"""

    def test_pickup_color_image(self, vivid):
        data = CameraData()
        vivid.read_color(data, 0)
        image = VvdImage()
        assert vivid.pickup_color_image(data, image) == VVD_TRUE
        assert (image.width, image.height, image.attribute) == (3, 2, 1)
        assert image.pixels == bytearray(range(24))
        assert image.buffer_length == len(image.pixels)

    def test_free_camera_data(self, vivid, lib):
        data = CameraData()
        vivid.read_pitch(data)
        vivid.free_camera_data(data)
        assert len(lib.freed) == 1
        assert data.handle is None
        assert data.data3d is None

    def test_free_without_handle_skips_library(self, vivid, lib):
        vivid.free_camera_data(CameraData())
        assert lib.freed == []


class TestLibraryLoading:
    """missing vendor library"""

    def test_missing_library_reports_not_found(self):
        sdk = VividSDK('/nonexistent/libvividIIsdk.so')
        assert sdk.initialize() == VVD_FALSE
        assert sdk.get_error_status() == ErrorCode.SERR_NOTFOUND

    def test_session_open_raises_device_unavailable(self):
        session = DeviceSession(VividSDK('/nonexistent/libvividIIsdk.so'))
        with pytest.raises(DeviceUnavailable) as excinfo:
            session.open()
        assert excinfo.value.code == ErrorCode.SERR_NOTFOUND
        assert 'vivid not found' in str(excinfo.value)
        assert not session.is_open

    def test_library_not_on_search_path(self, monkeypatch):
        monkeypatch.setattr(ctypes.util, 'find_library', lambda name: None)
        sdk = VividSDK()
        assert sdk.initialize() == VVD_FALSE
        assert sdk.get_error_status() == ErrorCode.SERR_NOTFOUND
