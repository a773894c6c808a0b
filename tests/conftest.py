"""
pytest configuration and shared fixtures
"""

import pytest
import numpy as np

from vivid_scanner.hardware import SimulatedVividSDK, DeviceSession
from vivid_scanner.options import ScanOptions


class RecordingTurntable:
    """Turntable stand-in that remembers every requested angle."""

    def __init__(self):
        self.angles = []

    def rotate(self, angle):
        self.angles.append(angle)


@pytest.fixture
def sdk():
    """Simulated VIVID 910"""
    return SimulatedVividSDK()


@pytest.fixture
def sdk_900():
    """Simulated VIVID without the 910-only functions"""
    return SimulatedVividSDK(model='VIVID 9i')


@pytest.fixture
def session(sdk):
    """Open session on the simulated camera"""
    session = DeviceSession(sdk)
    session.open()
    yield session
    session.close()


@pytest.fixture
def turntable():
    return RecordingTurntable()


@pytest.fixture
def make_options(tmp_path):
    """Factory for run options writing below tmp_path"""
    def factory(**kwargs):
        if 'output' in kwargs and kwargs['output'] is not None:
            kwargs['output'] = str(tmp_path / kwargs['output'])
        return ScanOptions(**kwargs)
    return factory


@pytest.fixture
def range_buffer():
    """640x480 range buffer with a distinct value per sample"""
    return np.arange(640 * 480, dtype=np.uint32).reshape(480, 640)
