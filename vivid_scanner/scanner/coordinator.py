"""
Scan coordinator that runs the status, scan and image commands.
"""

import logging
from enum import Enum
from typing import Optional, Callable, List
from dataclasses import dataclass, field

from ..hardware import CameraMode, ImportPara, CameraData, DeviceSession, Turntable
from ..export import VolumeWriter, TIFFWriter
from ..errors import UnsupportedFormat
from ..options import ScanOptions
from .parameters import ParameterNegotiator
from .capture import CaptureTrigger, ImageExtractor
from ..config import DEFAULT_SCAN_OUTPUT, DEFAULT_IMAGE_OUTPUT, FULL_ROTATION

logger = logging.getLogger(__name__)


class ScanState(Enum):
    """Scanner state enumeration."""
    INIT = "init"
    CONFIGURING = "configuring"
    ROTATING = "rotating"
    CAPTURING = "capturing"
    EXTRACTING = "extracting"
    SERIALIZING = "serializing"
    DONE = "done"
    ERROR = "error"


@dataclass
class ScanProgress:
    """Current loop progress information."""
    state: ScanState
    iteration: int
    total_iterations: int
    angle: Optional[float]
    filename: Optional[str]
    files_written: int

    def to_dict(self) -> dict:
        """Convert to dictionary for logging."""
        return {
            'state': self.state.value,
            'iteration': self.iteration,
            'total_iterations': self.total_iterations,
            'angle': self.angle,
            'filename': self.filename,
            'files_written': self.files_written,
            'progress_percent': (self.iteration / self.total_iterations * 100) if self.total_iterations > 0 else 0
        }


@dataclass
class ScanResult:
    """Outcome of one command run."""
    command: str
    mode: Optional[CameraMode] = None
    import_para: Optional[ImportPara] = None
    written: List[str] = field(default_factory=list)
    skipped: List[int] = field(default_factory=list)
    angles: List[float] = field(default_factory=list)


def rotation_angles(start: float, count: int) -> List[float]:
    """
    Turntable angles for a multi-view run.

    Starts at `start` and advances by 360/count per shot.
    """
    step = FULL_ROTATION / count
    angles = []
    angle = start
    for _ in range(count):
        angles.append(angle)
        angle += step
    return angles


def output_filenames(base: str, count: int, format_name: str, single_name: str) -> List[str]:
    """
    Output file names for each shot.

    Args:
        base: Base output name
        count: Number of shots
        format_name: Extension used for numbered names
        single_name: Name used when only one shot is taken

    Returns:
        [single_name] when count == 1, else '{base}{i}.{format}' for i in 1..count
    """
    if count == 1:
        return [single_name]
    return [f"{base}{i}.{format_name}" for i in range(1, count + 1)]


class ScanCoordinator:
    """
    Coordinates one run of the scanner.

    Run pattern:
    1. Open the device session
    2. Negotiate parameters once (read, assist, overrides, write back)
    3. For each shot: rotate the turntable (multi-view only), release,
       pick up the image (image command), write the file
    4. Close the session

    Any failure except an unsupported image format aborts the run; the
    session is closed before the error propagates.
    """

    def __init__(self, options: ScanOptions, sdk=None,
                 turntable: Optional[Turntable] = None,
                 volume_writer: Optional[VolumeWriter] = None,
                 tiff_writer: Optional[TIFFWriter] = None):
        """
        Initialize the scan coordinator.

        Args:
            options: Run options
            sdk: SDK object (default chosen by options.simulate)
            turntable: Rotation collaborator (default: stage tool)
            volume_writer: Writer for the scan command
            tiff_writer: Writer for the image command
        """
        self.options = options
        self.session = DeviceSession(sdk, simulate=options.simulate)
        self.turntable = turntable or Turntable(options.stage_command, simulate=options.simulate)
        self.volume_writer = volume_writer or VolumeWriter()
        self.tiff_writer = tiff_writer or TIFFWriter()

        # State
        self._state = ScanState.INIT
        self.mode: Optional[CameraMode] = None
        self.import_para: Optional[ImportPara] = None

        # Progress tracking
        self._current_iteration = 0
        self._current_angle: Optional[float] = None
        self._current_filename: Optional[str] = None
        self._files_written = 0

        # Callbacks for progress updates
        self._on_progress: List[Callable[[ScanProgress], None]] = []
        self._on_state_change: List[Callable[[ScanState], None]] = []

    def run(self) -> ScanResult:
        """Run the configured command."""
        handlers = {
            'status': self.run_status,
            'scan': self.run_scan,
            'image': self.run_image,
        }
        return handlers[self.options.command]()

    def run_status(self) -> ScanResult:
        """Negotiate parameters and report them. Never writes files or rotates."""
        return self._run('status', lambda result: None)

    def run_scan(self) -> ScanResult:
        """Capture range data and write one volumetric text file per shot."""
        base = self.options.output or DEFAULT_SCAN_OUTPUT
        filenames = output_filenames(base, self.options.count, self.options.format, base)
        return self._run('scan', lambda result: self._loop(filenames, self._write_scan, result))

    def run_image(self) -> ScanResult:
        """Capture color images and write one TIFF per shot."""
        base = self.options.output or DEFAULT_IMAGE_OUTPUT
        filenames = output_filenames(
            base, self.options.count, self.options.format, f"{base}.{self.options.format}"
        )
        return self._run('image', lambda result: self._loop(filenames, self._write_image, result))

    def _run(self, command: str, body: Callable[[ScanResult], None]) -> ScanResult:
        result = ScanResult(command=command)
        self._set_state(ScanState.INIT)

        try:
            with self.session:
                self._set_state(ScanState.CONFIGURING)
                negotiator = ParameterNegotiator(self.session)
                self.mode, self.import_para = negotiator.negotiate(self.options)
                result.mode = self.mode
                result.import_para = self.import_para
                body(result)
        except Exception:
            self._set_state(ScanState.ERROR)
            raise

        self._set_state(ScanState.DONE)
        return result

    def _loop(self, filenames: List[str], write_shot, result: ScanResult):
        """Run every shot of the multi-view loop in order."""
        trigger = CaptureTrigger(self.session, self.mode, dynamic_range=self.options.dynamic_range)
        extractor = ImageExtractor(self.session, self.import_para)
        angles = rotation_angles(self.options.start_angle, self.options.count)

        for index, (filename, angle) in enumerate(zip(filenames, angles), start=1):
            self._current_iteration = index
            self._current_filename = filename

            if self.options.multi_view:
                self._set_state(ScanState.ROTATING)
                self._current_angle = angle
                self.turntable.rotate(angle)
                result.angles.append(angle)

            self._set_state(ScanState.CAPTURING)
            record = trigger.release()
            write_shot(index, record, filename, extractor, result)
            self._notify_progress()

        logger.info(f"{result.command} finished: {len(result.written)} file(s) written")

    def _write_scan(self, index: int, record: CameraData, filename: str,
                    extractor: ImageExtractor, result: ScanResult):
        self._set_state(ScanState.SERIALIZING)
        result.written.append(self.volume_writer.write(filename, record.data3d))
        self._files_written += 1

    def _write_image(self, index: int, record: CameraData, filename: str,
                     extractor: ImageExtractor, result: ScanResult):
        self._set_state(ScanState.EXTRACTING)
        image = extractor.extract(record)

        self._set_state(ScanState.SERIALIZING)
        try:
            result.written.append(self.tiff_writer.write(filename, image, self.options.format))
        except UnsupportedFormat as e:
            # Format is not checked up front; the shot is skipped and the loop goes on
            logger.error(f"Shot {index}: {e} (requested {e.name})")
            result.skipped.append(index)
            return
        self._files_written += 1

    def _set_state(self, state: ScanState):
        """Set scanner state and notify listeners."""
        old_state = self._state
        self._state = state

        if old_state != state:
            logger.debug(f"Scanner state: {old_state.value} → {state.value}")
            for callback in self._on_state_change:
                try:
                    callback(state)
                except Exception as e:
                    logger.error(f"Error in state callback: {e}")

    def _notify_progress(self):
        """Notify listeners of current progress."""
        progress = self.get_progress()
        for callback in self._on_progress:
            try:
                callback(progress)
            except Exception as e:
                logger.error(f"Error in progress callback: {e}")

    def get_progress(self) -> ScanProgress:
        """Get current loop progress."""
        return ScanProgress(
            state=self._state,
            iteration=self._current_iteration,
            total_iterations=self.options.count,
            angle=self._current_angle,
            filename=self._current_filename,
            files_written=self._files_written
        )

    def get_state(self) -> ScanState:
        """Get current scanner state."""
        return self._state

    def on_progress(self, callback: Callable[[ScanProgress], None]):
        """Register callback for progress updates."""
        self._on_progress.append(callback)

    def on_state_change(self, callback: Callable[[ScanState], None]):
        """Register callback for state changes."""
        self._on_state_change.append(callback)

    def close(self):
        """Close the device session if it is still open."""
        self.session.close()
