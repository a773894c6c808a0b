"""
Turntable driven through the external stage tool.
"""

import logging
import subprocess
from typing import List

from ..errors import RotationError
from ..config import STAGE_COMMAND

logger = logging.getLogger(__name__)


def format_angle(angle: float) -> str:
    """
    Format an angle for the stage tool command line.

    Whole angles print as integers (90.0 -> '90'); others keep every digit
    of the accumulated value (360 / 7 -> '51.42857142857143').
    """
    angle = float(angle)
    if angle.is_integer():
        return str(int(angle))
    return repr(angle)


class Turntable:
    """
    Rotates the turntable by running `stage.exe -r <angle>`.

    The tool is waited for and assumed to have finished the move when it
    exits; its exit status is only logged since it reports nothing useful.
    """

    def __init__(self, command: str = STAGE_COMMAND, simulate: bool = False):
        """
        Initialize the turntable.

        Args:
            command: Stage tool executable
            simulate: If True, log rotations without running the tool
        """
        self.command = command
        self.simulate = simulate

    def build_command(self, angle: float) -> List[str]:
        return [self.command, '-r', format_angle(angle)]

    def rotate(self, angle: float):
        """
        Rotate to an absolute angle and wait for the tool to exit.

        Args:
            angle: Target angle in degrees

        Raises:
            RotationError: If the stage tool cannot be launched
        """
        args = self.build_command(angle)
        logger.debug(f"Rotating: {' '.join(args)}...")

        if self.simulate:
            logger.info(f"Simulated turntable rotation to {format_angle(angle)} degrees")
            return

        try:
            completed = subprocess.run(args, check=False)
        except OSError as e:
            raise RotationError(' '.join(args), str(e)) from e

        if completed.returncode != 0:
            logger.warning(f"{self.command} exited with status {completed.returncode}")