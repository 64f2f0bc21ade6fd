# -*- coding: utf-8 -*-
"""
IO Tests - Scene metadata, NumPy rasters, in-memory rasters, format registry.

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

import json

import numpy as np
import pytest

from terrcorr.exceptions import RasterIOError, ValidationError
from terrcorr.IO import (
    ArrayRasterReader,
    ArrayRasterWriter,
    NumpyRasterReader,
    NumpyRasterWriter,
    SceneMetadata,
    create_writer,
    open_raster,
)
from terrcorr.IO.numpy_io import sidecar_path
from terrcorr.vocabulary import ImageType


# ---------------------------------------------------------------------------
# SceneMetadata
# ---------------------------------------------------------------------------

class TestSceneMetadata:

    def test_band_names_generated(self):
        meta = SceneMetadata(line_count=4, sample_count=5, band_count=3)
        assert meta.band_names == ['01', '02', '03']

    def test_image_type_from_code(self):
        meta = SceneMetadata(line_count=1, sample_count=1, image_type='G')
        assert meta.image_type is ImageType.GROUND_RANGE
        assert not meta.is_map_projected

    def test_invalid_size(self):
        with pytest.raises(ValidationError):
            SceneMetadata(line_count=-1, sample_count=5)
        with pytest.raises(ValidationError):
            SceneMetadata(line_count=1, sample_count=5, band_count=0)

    def test_dict_roundtrip_keeps_extras(self, make_metadata):
        meta = make_metadata(10, 20)
        d = meta.to_dict()
        d['mission'] = 'ERS-1'
        assert d['image_type'] == 'S'
        back = SceneMetadata.from_dict(d)
        assert back.extras == {'mission': 'ERS-1'}
        assert back['mission'] == 'ERS-1'
        assert back.slant_range_first == meta.slant_range_first
        assert back.to_dict() == d

    def test_from_dict_missing_keys(self):
        with pytest.raises(ValidationError, match="sample_count"):
            SceneMetadata.from_dict({'line_count': 3})

    def test_dict_access(self, make_metadata):
        meta = make_metadata(10, 20)
        assert meta['sample_count'] == 20
        assert 'earth_radius' in meta
        assert 'extras' not in meta
        assert meta.get('nothing', 7) == 7
        with pytest.raises(KeyError):
            meta['nothing']

    def test_copy_is_independent(self, make_metadata):
        meta = make_metadata(10, 20)
        meta.extras['a'] = 1
        other = meta.copy(sample_count=30)
        other.extras['b'] = 2
        other.band_names.append('x')
        assert meta.sample_count == 20
        assert 'b' not in meta.extras
        assert meta.band_names == ['01']

    def test_copy_band_count_regenerates_names(self, make_metadata):
        meta = make_metadata(10, 20)
        assert meta.copy(band_count=2).band_names == ['01', '02']

    def test_slant_geometry(self, make_metadata):
        meta = make_metadata(10, 20, start_sample=4, sample_increment=2)
        first, spacing = meta.slant_geometry()
        assert first == pytest.approx(meta.slant_range_first + 4 * 12.5)
        assert spacing == pytest.approx(25.0)

    def test_slant_geometry_missing(self):
        with pytest.raises(ValidationError):
            SceneMetadata(line_count=1, sample_count=1).slant_geometry()


# ---------------------------------------------------------------------------
# NumPy rasters
# ---------------------------------------------------------------------------

class TestNumpyRaster:

    def test_write_then_read(self, tmp_path, make_metadata, rng):
        data = rng.random((2, 6, 8)).astype(np.float32)
        meta = make_metadata(6, 8, band_count=2, band_names=['HH', 'HV'])
        path = tmp_path / "cube.npy"
        with NumpyRasterWriter(path, meta) as w:
            for b in range(2):
                for y in range(6):
                    w.write_line(y, data[b, y], band=b)
        assert sidecar_path(path).exists()

        with NumpyRasterReader(path) as r:
            assert r.metadata.band_names == ['HH', 'HV']
            assert r.metadata.image_type is ImageType.SLANT_RANGE
            assert r.get_shape() == (6, 8)
            np.testing.assert_array_equal(r.read_line(3, band=1), data[1, 3])
            np.testing.assert_array_equal(r.read_full(), data[0])

    def test_sidecar_contents(self, tmp_path, make_metadata):
        path = tmp_path / "dem.npy"
        NumpyRasterWriter(path, make_metadata(3, 4)).close()
        with open(sidecar_path(path)) as f:
            content = json.load(f)
        assert content['shape'] == [1, 3, 4]
        assert content['earth_radius'] == pytest.approx(6371000.0)

    def test_read_without_sidecar(self, tmp_path):
        path = tmp_path / "plain.npy"
        np.save(path, np.ones((3, 5)))
        with NumpyRasterReader(path) as r:
            assert (r.metadata.line_count, r.metadata.sample_count) == (3, 5)
            assert r.metadata.slant_range_first is None

    def test_sidecar_size_mismatch(self, tmp_path, make_metadata):
        path = tmp_path / "bad.npy"
        NumpyRasterWriter(path, make_metadata(3, 4)).close()
        np.save(path, np.ones((3, 5)))
        with pytest.raises(ValidationError):
            NumpyRasterReader(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(RasterIOError, match="missing.npy"):
            NumpyRasterReader(tmp_path / "missing.npy")

    def test_line_length_checked(self, tmp_path, make_metadata):
        with NumpyRasterWriter(tmp_path / "x.npy", make_metadata(3, 4)) as w:
            with pytest.raises(ValidationError):
                w.write_line(0, np.zeros(5))
            with pytest.raises(ValidationError):
                w.write_line(3, np.zeros(4))


# ---------------------------------------------------------------------------
# In-memory rasters
# ---------------------------------------------------------------------------

class TestArrayRaster:

    def test_reader_line_and_index_errors(self):
        r = ArrayRasterReader(np.arange(12.0).reshape(3, 4))
        np.testing.assert_array_equal(r.read_line(1), [4, 5, 6, 7])
        assert r.read_line(0).dtype == np.float32
        with pytest.raises(ValidationError):
            r.read_line(3)
        with pytest.raises(ValidationError):
            r.read_line(0, band=1)

    def test_reader_metadata_must_match(self, make_metadata):
        with pytest.raises(ValidationError):
            ArrayRasterReader(np.zeros((3, 4)), make_metadata(3, 5))

    def test_writer_collects_lines(self, make_metadata):
        w = ArrayRasterWriter(make_metadata(2, 3))
        w.write(np.array([[1, 2, 3], [4, 5, 6]]))
        assert w.lines_written == 2
        assert w.filepath is None
        np.testing.assert_array_equal(w.data[0], [[1, 2, 3], [4, 5, 6]])


# ---------------------------------------------------------------------------
# Format registry
# ---------------------------------------------------------------------------

class TestRegistry:

    def test_suffix_dispatch(self, tmp_path, make_metadata):
        path = tmp_path / "a.npy"
        w = create_writer(path, make_metadata(2, 2))
        assert isinstance(w, NumpyRasterWriter)
        w.close()
        with open_raster(path) as r:
            assert isinstance(r, NumpyRasterReader)

    def test_explicit_format(self, tmp_path, make_metadata):
        path = tmp_path / "a.data"
        create_writer(path, make_metadata(2, 2), format='numpy').close()
        with open_raster(path, format='NUMPY') as r:
            assert r.get_shape() == (2, 2)

    def test_unknown_format(self, tmp_path, make_metadata):
        with pytest.raises(ValidationError, match="Supported formats"):
            create_writer(tmp_path / "a.xyz", make_metadata(2, 2))
        with pytest.raises(ValidationError):
            open_raster(tmp_path / "a.npy", format='envi')
