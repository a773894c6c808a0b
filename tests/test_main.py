"""
Command line entry point tests
"""

import os

import pytest

from vivid_scanner.main import main, build_parser, options_from_args
from vivid_scanner.hardware import SimulatedVividSDK
from vivid_scanner.errors import ErrorCode


def parse(argv):
    return options_from_args(build_parser().parse_args(argv))


class TestOptions:
    """argument parsing into ScanOptions"""

    def test_defaults(self):
        options = parse(['status'])
        assert options.command == 'status'
        assert options.count == 1
        assert options.format == 'TIFF'
        assert options.output is None
        assert options.overrides.distance is None
        assert not options.filters.fill_hole

    def test_overrides_and_filters(self):
        options = parse(['-d', '1500', '-l', '0', '-g', '7', '-m', '2', '-t', '65535',
                         '-u', '1', '-c', '10', '-b', '4', '-n', '3', '-i', '-k', 'scan'])
        assert options.overrides.distance == 1500
        assert options.overrides.laser_power == 0
        assert options.overrides.gain == 7
        assert options.overrides.r_mode == 2
        assert options.overrides.threshold == 65535
        assert options.overrides.auto_read == 1
        assert options.overrides.color == 10
        assert options.filters.subsampling == 4
        assert options.filters.noise == 3
        assert options.filters.fill_hole
        assert options.filters.dark

    def test_rotate(self):
        options = parse(['-r', '6', '30', '-o', 'view', 'image'])
        assert options.count == 6
        assert options.start_angle == 30.0
        assert options.multi_view

    def test_assist_flags(self):
        options = parse(['-p', '-a', '-e', '-x', 'scan'])
        assert options.passive_af and options.active_af and options.active_af_ae
        assert options.dynamic_range

    @pytest.mark.parametrize('argv', [
        ['-d', '499', 'scan'],
        ['-d', '2501', 'scan'],
        ['-l', '256', 'scan'],
        ['-g', '8', 'scan'],
        ['-t', '1024', 'scan'],
        ['-u', '2', 'scan'],
        ['-c', '11', 'scan'],
        ['-b', '0', 'scan'],
        ['-n', '4', 'scan'],
        ['-r', '0', '0', 'scan'],
        ['bogus'],
    ])
    def test_invalid_arguments(self, argv):
        with pytest.raises(SystemExit):
            main(argv, sdk=SimulatedVividSDK())


class TestMain:
    """main()"""

    def test_status_prints_report(self, capsys, turntable):
        code = main(['-d', '1800', 'status'], sdk=SimulatedVividSDK(), turntable=turntable)
        out = capsys.readouterr().out
        assert code == 0
        assert "VividII Camera Status:" in out
        assert "Distance:         1800mm" in out
        assert turntable.angles == []

    def test_device_error_exit_code(self, turntable):
        sdk = SimulatedVividSDK(faults={'release': ErrorCode.SERR_BUSY})
        code = main(['scan'], sdk=sdk, turntable=turntable)
        assert code == 1
        assert sdk.finish_count == 1

    def test_scan_simulated(self, tmp_path, turntable):
        output = str(tmp_path / 'view')
        code = main(['--simulate', '-r', '2', '0', '-o', output, 'image'], turntable=turntable)
        assert code == 0
        assert sorted(os.listdir(tmp_path)) == ['view1.TIFF', 'view2.TIFF']

    def test_unsupported_format_still_succeeds(self, tmp_path, turntable):
        output = str(tmp_path / 'view')
        code = main(['-f', 'BMP', '-o', output, 'image'], sdk=SimulatedVividSDK(), turntable=turntable)
        assert code == 0
        assert os.listdir(tmp_path) == []

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            main(['--version'])
        assert excinfo.value.code == 0
        assert 'vivid-scan - version 1.0' in capsys.readouterr().out
