"""
Configuration for the VIVID laser scanner tool.
Device limits, output defaults and collaborator settings.
"""

# =============================================================================
# Application
# =============================================================================

APP_NAME = 'vivid-scan'
APP_VERSION = '1.0'

# =============================================================================
# Device SDK
# =============================================================================

SDK_LIBRARY = 'vividIIsdk'  # Shared library name passed to ctypes.util.find_library

# Status values returned by every SDK device call
VVD_TRUE = 1
VVD_FALSE = 0
VVD_ILLEGAL = -1  # Function not supported by the connected model

# =============================================================================
# Sensor Raster
# =============================================================================

RASTER_WIDTH = 640
RASTER_HEIGHT = 480
BYTES_PER_PIXEL = 4  # VVD_Pixel is 4 samples of 8 bits

# =============================================================================
# Parameter Ranges (inclusive)
# =============================================================================

DISTANCE_RANGE = (500, 2500)   # mm
LASER_POWER_RANGE = (0, 255)   # 0 = laser off
GAIN_RANGE = (0, 7)
RELEASE_MODE_RANGE = (0, 7)
THRESHOLD_RANGE = (0, 1023)
THRESHOLD_AUTO = 65535
AUTOREAD_RANGE = (0, 1)        # 0 = pitch with color, 1 = only pitch
COLOR_RANGE = (0, 10)          # 10 = auto
SUBSAMPLING_RANGE = (1, 4)     # 1:1/1, 2:1/4, 3:1/9, 4:1/16
NOISE_RANGE = (0, 3)           # 0:no, 1:noise, 2:hq, 3:noise & hq

RELEASE_MODES = {
    0: 'FINE&COLOR',
    1: 'FAST&COLOR',
    2: 'COLOR(8bit)',
    3: 'COLOR(10bit)',
    4: 'MONITOR(8bit)',
    5: 'R(8bit)',
    6: 'G(8bit)',
    7: 'B(8bit)',
}

# =============================================================================
# Output
# =============================================================================

DEFAULT_FORMAT = 'TIFF'
DEFAULT_SCAN_OUTPUT = 'image.hdr'  # Volumetric text output base name
DEFAULT_IMAGE_OUTPUT = 'image'     # Raster output base name
SUPPORTED_IMAGE_FORMATS = ('TIFF',)

VOLUME_HEADER = (
    'IBRraw.xdr',
    '@@ImageDim = 3',
    f'@@ImageSize = {RASTER_WIDTH} {RASTER_HEIGHT}',
    '@@buffer-channels-0 = 3',
    '@@buffer-primtype-0 = byte',
    '@@buffer-type-0 = color',
    '---end-of-header---',
)

# =============================================================================
# Turntable
# =============================================================================

STAGE_COMMAND = 'stage.exe'  # External rotation tool, invoked as: stage.exe -r <angle>
FULL_ROTATION = 360.0

# =============================================================================
# Simulation
# =============================================================================

SIMULATION_DISTANCE = 1000  # Base range value for synthetic buffers (mm)
SIMULATION_SEED = 910
