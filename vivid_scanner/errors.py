"""
Error types raised by the scanner and the table of SDK fault codes.
"""

from enum import IntEnum
from typing import Optional


class ErrorCode(IntEnum):
    """Fault codes reported by VividGetErrorStatus."""
    # SCSI layer
    SERR_BUSY = 1
    SERR_WRITE = 2
    SERR_READ = 3
    SERR_BLOCK = 4
    SERR_POWERON = 5
    SERR_HARD = 6
    SERR_PCFORMAT = 7
    SERR_NONATA = 8
    SERR_NOPCCARD = 9
    SERR_PARITY = 10
    SERR_READY = 11
    SERR_OUTOFDIST = 12
    SERR_HDDRESET = 13
    SERR_NOTFOUND = 14
    SERR_ANY = 15
    SERR_MEMORY = 16
    SERR_ARGUMENT = 17
    # SDK layer
    VERROR_MEM_ALLOC = 101
    VERROR_OPEN_FILE = 102
    VERROR_READ_FILE = 103
    VERROR_NOT_PRODUCT = 104
    VERROR_INVALID_MAGIC = 105
    VERROR_UNKNOWN_TYPE = 106
    VERROR_INVALID_ARGS = 107
    VERROR_WRITE_FILE = 108
    VERROR_NO_IMAGE = 109
    VERROR_MULT_DATA = 110
    VERROR_SINGLE_DATA = 111


ERROR_DESCRIPTIONS = {
    ErrorCode.SERR_BUSY: 'timeout error',
    ErrorCode.SERR_WRITE: 'scsi write error',
    ErrorCode.SERR_READ: 'scsi read error',
    ErrorCode.SERR_BLOCK: 'block error',
    ErrorCode.SERR_POWERON: 'power on reset error',
    ErrorCode.SERR_HARD: 'hardware error',
    ErrorCode.SERR_PCFORMAT: 'pccard format error',
    ErrorCode.SERR_NONATA: 'non supported pccard',
    ErrorCode.SERR_NOPCCARD: 'no pccard present',
    ErrorCode.SERR_PARITY: 'scsi parity error',
    ErrorCode.SERR_READY: 'ready command error',
    ErrorCode.SERR_OUTOFDIST: 'out of distance',
    ErrorCode.SERR_HDDRESET: 'unit reset or hdd changed',
    ErrorCode.SERR_NOTFOUND: 'vivid not found',
    ErrorCode.SERR_ANY: 'any error',
    ErrorCode.SERR_MEMORY: 'scsi memory error',
    ErrorCode.SERR_ARGUMENT: 'scsi argument error',
    ErrorCode.VERROR_MEM_ALLOC: 'memory allocation error',
    ErrorCode.VERROR_OPEN_FILE: 'file open error',
    ErrorCode.VERROR_READ_FILE: 'file read error',
    ErrorCode.VERROR_NOT_PRODUCT: 'not a vivid file',
    ErrorCode.VERROR_INVALID_MAGIC: 'invalid magic number',
    ErrorCode.VERROR_UNKNOWN_TYPE: 'unknown type',
    ErrorCode.VERROR_INVALID_ARGS: 'invalid argument',
    ErrorCode.VERROR_WRITE_FILE: 'file write error',
    ErrorCode.VERROR_NO_IMAGE: 'has no image',
    ErrorCode.VERROR_MULT_DATA: 'not a single data file',
    ErrorCode.VERROR_SINGLE_DATA: 'not a multi data file',
}


def describe_error(code: int) -> str:
    """
    Translate an SDK fault code into a human-readable description.

    Args:
        code: Value returned by the SDK error status query

    Returns:
        Description text, 'unknown error' for codes outside the table
    """
    try:
        return ERROR_DESCRIPTIONS[ErrorCode(code)]
    except ValueError:
        return 'unknown error'


class VividError(Exception):
    """Base class for all scanner errors."""


class DeviceUnavailable(VividError):
    """The SCSI link to the camera could not be established."""

    def __init__(self, code: Optional[int] = None):
        self.code = None if code is None else int(code)
        if code is None:
            message = 'SCSI Initialize failed'
        else:
            message = f'SCSI Initialize Error {self.code} ({describe_error(code)})'
        super().__init__(message)


class DeviceProtocolError(VividError):
    """A device operation failed; carries the SDK fault code."""

    def __init__(self, stage: str, code: int):
        self.stage = stage
        self.code = int(code)
        super().__init__(f'{stage} Error {self.code} ({describe_error(self.code)})')

    @property
    def description(self) -> str:
        return describe_error(self.code)


class UnsupportedDevice(VividError):
    """The connected camera model does not support the requested function."""

    def __init__(self, stage: str, model: str = 'Vivid 910'):
        self.stage = stage
        super().__init__(f'{stage} Error (No {model})')


class OutputOpenError(VividError):
    """An output file could not be opened for writing."""

    def __init__(self, path: str):
        self.path = str(path)
        super().__init__(f"Couldn't open {self.path} for writing!")


class UnsupportedFormat(VividError):
    """The requested output encoding is not implemented."""

    def __init__(self, name: str, supported=('TIFF',)):
        self.name = name
        super().__init__(
            f"Unknown format! Supported formats: {', '.join(supported)}"
        )


class RotationError(VividError):
    """The turntable tool could not be launched."""

    def __init__(self, command: str, reason: str = ''):
        self.command = command
        message = f'Rotation failed: {command}'
        if reason:
            message += f' ({reason})'
        super().__init__(message)
