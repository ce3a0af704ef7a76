# -*- coding: utf-8 -*-
"""
CLI Tests - Argument parsing and exit codes of the winavg command.

Dependencies
------------
pytest
rasterio (end-to-end runs only)

Author
------
Steven Siebert

License
-------
MIT License
Copyright (c) 2024 geoint.org
See LICENSE file for full text.

Created
-------
2026-10-19

Modified
--------
2026-10-19
"""

import json

import numpy as np
import pytest

from winavg.cli import build_parser, main


@pytest.fixture
def input_tif(tmp_path, grid, grid_mask):
    rasterio = pytest.importorskip('rasterio')
    path = tmp_path / "scene.tif"
    with rasterio.open(
        str(path), 'w', driver='GTiff', height=4, width=4, count=2,
        dtype='float64', nodata=float('nan'),
    ) as ds:
        ds.write(np.stack([grid, grid_mask.astype(np.float64)]))
        ds.set_band_description(1, 'B1')
        ds.set_band_description(2, 'M')
    return path


class TestParser:
    """Command-line parsing."""

    def test_defaults(self):
        args = build_parser().parse_args(
            ['in.tif', 'out.tif', '-b', 'B1', 'B2', '-m', 'B1 > 0']
        )
        assert args.bands == ['B1', 'B2']
        assert args.window_size == 3
        assert args.tile_size == 512
        assert args.workers is None
        assert args.format is None
        assert not args.verbose

    def test_bands_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(['in.tif', 'out.tif', '-m', 'B1 > 0'])

    def test_format_choices(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(
                ['in.tif', 'out', '-b', 'B1', '-m', 'x', '--format', 'png']
            )


class TestMain:
    """Exit codes and end-to-end runs."""

    def test_even_window_rejected(self, tmp_path):
        code = main([
            str(tmp_path / 'in.tif'), str(tmp_path / 'out.tif'),
            '-b', 'B1', '-w', '4', '-m', 'B1 > 0',
        ])
        assert code == 2

    def test_missing_input(self, tmp_path):
        code = main([
            str(tmp_path / 'absent.tif'), str(tmp_path / 'out.tif'),
            '-b', 'B1', '-m', 'B1 > 0',
        ])
        assert code == 1

    def test_unknown_band(self, input_tif, tmp_path):
        code = main([
            str(input_tif), str(tmp_path / 'out.tif'),
            '-b', 'B7', '-m', 'M > 0',
        ])
        assert code == 2

    def test_unknown_output_extension(self, input_tif, tmp_path):
        code = main([
            str(input_tif), str(tmp_path / 'out.png'),
            '-b', 'B1', '-m', 'M > 0',
        ])
        assert code == 1

    def test_writes_npz(self, input_tif, tmp_path):
        out = tmp_path / 'scene_avg.npz'
        code = main([
            str(input_tif), str(out), '-b', 'B1', '-m', 'M > 0',
            '--tile-size', '2', '--workers', '2',
        ])
        assert code == 0
        with np.load(out) as archive:
            assert archive['B1_avg'][0, 0] == pytest.approx(9.0)
            assert archive['B1_cnt'][0, 0] == 3
            assert np.isnan(archive['B1_avg'][3, 3])
        with open(str(out) + '.json') as f:
            assert json.load(f)['mask_expression'] == 'M > 0'

    def test_writes_geotiff(self, input_tif, tmp_path):
        from winavg.IO.geotiff import GeoTIFFReader

        out = tmp_path / 'scene_avg.tif'
        code = main([
            str(input_tif), str(out), '-b', 'B1', '-w', '3', '-m', 'M > 0',
        ])
        assert code == 0
        with GeoTIFFReader(out) as reader:
            assert reader.band_names == ['B1_avg', 'B1_cnt']
            data = reader.read_full()
        assert data[0, 1, 2] == pytest.approx(32.0 / 3.0)
        assert data[1, 1, 2] == 3
