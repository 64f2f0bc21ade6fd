# -*- coding: utf-8 -*-
"""
GeoTIFF IO Tests - Line-wise writing and metadata tag round trip.

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
2026-02-12

Modified
--------
2026-03-02
"""

import numpy as np
import pytest

try:
    import rasterio
    _HAS_RASTERIO = True
except ImportError:
    _HAS_RASTERIO = False

from terrcorr.exceptions import RasterIOError
from terrcorr.IO import open_raster
from terrcorr.image_processing.terrain.pipeline import TerrainCorrectionPipeline
from terrcorr.IO.numpy_io import ArrayRasterReader
from terrcorr.vocabulary import ImageType

pytestmark = pytest.mark.skipif(
    not _HAS_RASTERIO, reason="rasterio not installed")


class TestGeoTIFF:

    def test_roundtrip(self, tmp_path, make_metadata, rng):
        from terrcorr.IO.geotiff import GeoTIFFReader, GeoTIFFWriter

        data = rng.random((2, 5, 7)).astype(np.float32)
        meta = make_metadata(5, 7, band_count=2, band_names=['HH', 'HV'],
                             no_data=0.0)
        path = tmp_path / "scene.tif"
        with GeoTIFFWriter(path, meta) as w:
            w.write(data)

        with GeoTIFFReader(path) as r:
            assert r.metadata.band_names == ['HH', 'HV']
            assert r.metadata.slant_range_per_pixel == pytest.approx(12.5)
            assert r.metadata.image_type is ImageType.SLANT_RANGE
            np.testing.assert_array_equal(r.read_full(band=1), data[1])
            np.testing.assert_array_equal(r.read_line(2), data[0, 2])

    def test_plain_tiff_without_tag(self, tmp_path):
        from terrcorr.IO.geotiff import GeoTIFFReader

        path = tmp_path / "plain.tif"
        with rasterio.open(str(path), 'w', driver='GTiff', height=3, width=4,
                           count=1, dtype='float32') as ds:
            ds.write(np.ones((1, 3, 4), dtype=np.float32))
        with GeoTIFFReader(path) as r:
            assert r.get_shape() == (3, 4)
            assert r.metadata.slant_range_first is None

    def test_missing_file(self, tmp_path):
        from terrcorr.IO.geotiff import GeoTIFFReader

        with pytest.raises(RasterIOError):
            GeoTIFFReader(tmp_path / "missing.tif")

    def test_pipeline_writes_geotiff(self, tmp_path, make_metadata):
        dem = ArrayRasterReader(np.zeros((4, 64), dtype=np.float32),
                                make_metadata(4, 64))
        out = tmp_path / "dem_gr.tif"
        (TerrainCorrectionPipeline()
         .with_slant_dem(dem)
         .with_output(out)
         .run())
        with open_raster(out) as r:
            assert r.metadata.image_type is ImageType.GROUND_RANGE
            assert r.get_shape() == (4, 64)
