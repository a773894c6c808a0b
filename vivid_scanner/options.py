"""
Immutable run options built once from the validated command line.
"""

from dataclasses import dataclass, field
from typing import Optional

from .config import DEFAULT_FORMAT, STAGE_COMMAND

COMMANDS = ('status', 'scan', 'image')


@dataclass(frozen=True)
class CameraOverrides:
    """Requested device parameters. None leaves the device value unchanged."""
    distance: Optional[int] = None
    gain: Optional[int] = None
    r_mode: Optional[int] = None
    threshold: Optional[int] = None
    auto_read: Optional[int] = None
    color: Optional[int] = None
    laser_power: Optional[int] = None


@dataclass(frozen=True)
class FilterFlags:
    """Requested import filters. None/False leaves the filter disabled."""
    fill_hole: bool = False
    dark: bool = False
    subsampling: Optional[int] = None
    noise: Optional[int] = None


@dataclass(frozen=True)
class ScanOptions:
    """Everything a run needs, fixed for the whole invocation."""
    command: str = 'status'
    overrides: CameraOverrides = field(default_factory=CameraOverrides)
    filters: FilterFlags = field(default_factory=FilterFlags)
    passive_af: bool = False
    active_af: bool = False
    active_af_ae: bool = False
    dynamic_range: bool = False
    count: int = 1
    start_angle: float = 0.0
    output: Optional[str] = None
    format: str = DEFAULT_FORMAT
    verbose: bool = False
    simulate: bool = False
    stage_command: str = STAGE_COMMAND

    def __post_init__(self):
        if self.command not in COMMANDS:
            raise ValueError(f"Unknown command {self.command!r}, expected one of {COMMANDS}")
        if self.count < 1:
            raise ValueError(f"Shot count must be at least 1, got {self.count}")

    @property
    def multi_view(self) -> bool:
        return self.count > 1
