#!/usr/bin/env python3
"""
VIVID Scan - Main Entry Point

Command line tool for VIVID laser range cameras:
- Reads and writes camera parameters (distance, laser power, gain, ...)
- Passive/active autofocus and autoexposure before the shot
- Range scans written as IBRraw.xdr text files
- Color images written as LZW-compressed TIFF files
- Multi-view capture with an external turntable tool

Usage:
    python -m vivid_scanner.main [options] status|scan|image
"""

import argparse
import logging
import sys

from vivid_scanner.scanner import ScanCoordinator, format_status
from vivid_scanner.options import ScanOptions, CameraOverrides, FilterFlags, COMMANDS
from vivid_scanner.errors import VividError
from vivid_scanner.config import (
    APP_NAME,
    APP_VERSION,
    DEFAULT_FORMAT,
    STAGE_COMMAND,
    DISTANCE_RANGE,
    LASER_POWER_RANGE,
    GAIN_RANGE,
    RELEASE_MODE_RANGE,
    RELEASE_MODES,
    THRESHOLD_RANGE,
    THRESHOLD_AUTO,
    AUTOREAD_RANGE,
    COLOR_RANGE,
    SUBSAMPLING_RANGE,
    NOISE_RANGE
)

logger = logging.getLogger(__name__)


def ranged(name: str, limits: tuple, *extra: int):
    """Build an argparse type accepting integers within limits (or one of extra)."""
    low, high = limits

    def parse(text: str) -> int:
        try:
            value = int(text)
        except ValueError:
            raise argparse.ArgumentTypeError(f"{name} must be an integer, got {text!r}")
        if not (low <= value <= high) and value not in extra:
            allowed = f"{low}-{high}"
            if extra:
                allowed += ' or ' + ', '.join(str(v) for v in extra)
            raise argparse.ArgumentTypeError(f"{name} has to be between {allowed}")
        return value

    return parse


def build_parser() -> argparse.ArgumentParser:
    """Create the command line parser."""
    modes = ' '.join(f"{k}:{v}" for k, v in RELEASE_MODES.items())
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description='VIVID laser scanner capture tool',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Show the camera parameters
    vivid-scan status

    # Range scan at 1200mm, written to part.hdr
    vivid-scan -d 1200 -o part.hdr scan

    # Eight color images around the turntable, starting at 0 degrees
    vivid-scan -r 8 0 -o view image

    # Try the whole pipeline without a camera
    vivid-scan --simulate -v image
        """
    )

    parser.add_argument('command', choices=COMMANDS,
                        help='status: show scanner status, scan: perform scan, '
                             'image: get image from scanner')

    parser.add_argument('-v', '--verbose', action='store_true', help='be verbose')
    parser.add_argument('-V', '--version', action='version',
                        version=f'{APP_NAME} - version {APP_VERSION}')
    parser.add_argument('--simulate', action='store_true',
                        help='Run against a simulated camera and turntable')

    assist = parser.add_argument_group('assist')
    assist.add_argument('-p', '--passiveaf', action='store_true',
                        help='perform passive AF before scan')
    assist.add_argument('-a', '--activeaf', action='store_true',
                        help='perform active AF before scan')
    assist.add_argument('-e', '--activeafae', action='store_true',
                        help='perform active AF/AE before scan (VIVID910)')
    assist.add_argument('-x', '--dynrangeexp', action='store_true',
                        help='scan in dynamic range expansion mode (VIVID910)')

    output = parser.add_argument_group('output')
    output.add_argument('-r', '--rotate', nargs=2, type=int, metavar=('N', 'START'),
                        help='rotate turntable: shoot N times, starting from START angle')
    output.add_argument('-o', '--output', metavar='FILE',
                        help='use FILE as output (for scan and image)')
    output.add_argument('-f', '--format', default=DEFAULT_FORMAT,
                        help=f'use FORMAT for output (default: {DEFAULT_FORMAT})')
    output.add_argument('--stage-command', default=STAGE_COMMAND,
                        help=f'turntable tool (default: {STAGE_COMMAND})')

    params = parser.add_argument_group('parameters')
    params.add_argument('-d', '--distance', type=ranged('distance', DISTANCE_RANGE),
                        help='distance in mm (500-2500)')
    params.add_argument('-l', '--laserpower', type=ranged('laserpower', LASER_POWER_RANGE),
                        help='laser power (0-255, 0:laser off)')
    params.add_argument('-g', '--gain', type=ranged('gain', GAIN_RANGE),
                        help='gain (0-7)')
    params.add_argument('-m', '--mode', type=ranged('rmode', RELEASE_MODE_RANGE),
                        help=f'release mode (0-7) {modes}')
    params.add_argument('-t', '--threshold', type=ranged('threshold', THRESHOLD_RANGE, THRESHOLD_AUTO),
                        help='threshold (0-1023, 65535:auto)')
    params.add_argument('-u', '--autoread', type=ranged('autoread', AUTOREAD_RANGE),
                        help='autoread (0:on/pitch with color, 1:off/only pitch)')
    params.add_argument('-c', '--color', type=ranged('color', COLOR_RANGE),
                        help='color (0-10, 10:auto)')

    filters = parser.add_argument_group('filters')
    filters.add_argument('-b', '--subsampling', type=ranged('subsampling', SUBSAMPLING_RANGE),
                         help='subsampling rate (1-4, 1:1/1, 2:1/4, 3:1/9, 4:1/16)')
    filters.add_argument('-n', '--noise', type=ranged('noise', NOISE_RANGE),
                         help='noise filter (0-3) 0:no, 1:noise, 2:hq, 3:noise & hq')
    filters.add_argument('-i', '--fillhole', action='store_true', help='fill holes')
    filters.add_argument('-k', '--dark', action='store_true', help='color dark correction')

    return parser


def options_from_args(args: argparse.Namespace) -> ScanOptions:
    """Build the immutable run options from parsed arguments."""
    count, start = (1, 0) if args.rotate is None else args.rotate
    if count < 1:
        raise ValueError(f"rotate count has to be at least 1, got {count}")

    return ScanOptions(
        command=args.command,
        overrides=CameraOverrides(
            distance=args.distance,
            gain=args.gain,
            r_mode=args.mode,
            threshold=args.threshold,
            auto_read=args.autoread,
            color=args.color,
            laser_power=args.laserpower
        ),
        filters=FilterFlags(
            fill_hole=args.fillhole,
            dark=args.dark,
            subsampling=args.subsampling,
            noise=args.noise
        ),
        passive_af=args.passiveaf,
        active_af=args.activeaf,
        active_af_ae=args.activeafae,
        dynamic_range=args.dynrangeexp,
        count=count,
        start_angle=float(start),
        output=args.output,
        format=args.format,
        verbose=args.verbose,
        simulate=args.simulate,
        stage_command=args.stage_command
    )


def setup_logging(verbose: bool = False):
    """Configure root logging to stdout."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.debug("Debug logging enabled")


def main(argv=None, sdk=None, turntable=None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        options = options_from_args(args)
    except ValueError as e:
        parser.error(str(e))

    setup_logging(options.verbose)

    if options.simulate:
        logger.warning("Running in simulation mode - no real hardware will be used")

    coordinator = ScanCoordinator(options, sdk=sdk, turntable=turntable)

    try:
        result = coordinator.run()
    except VividError as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 1
    finally:
        coordinator.close()

    if options.command == 'status':
        print(format_status(result.mode))
    elif result.skipped:
        logger.warning(f"Skipped shot(s) {result.skipped}: no file written")

    return 0


if __name__ == '__main__':
    sys.exit(main())
