""" Unit tests for raster import, export and the plain PPM codec

"""
import logging
import os
import shutil
import tempfile
import unittest

import numpy
from astropy.io import fits

from rasterlib.data_models.errors import FormatError, InvalidArgument
from rasterlib.data_models.memory_data_models import Pixel
from rasterlib.data_models.parameters import rasterlib_data_path, rasterlib_path
from rasterlib.processing_components import decode_raster, encode_raster, create_raster, create_raster_from_pixels
from rasterlib.processing_components.raster.codec import encode_raster_bytes, import_raster_from_ppm, \
    export_raster_to_ppm, import_raster_from_fits, export_raster_to_fits, import_raster_from_file, \
    export_raster_to_file
from rasterlib.processing_components.simulation import create_test_raster

log = logging.getLogger('logger')

log.setLevel(logging.WARNING)


class TestRasterCodec(unittest.TestCase):

    def setUp(self):
        self.persist = os.getenv("RASTERLIB_PERSIST", False)
        if self.persist:
            self.dir = rasterlib_path('test_results')
            os.makedirs(self.dir, exist_ok=True)
        else:
            self.dir = tempfile.mkdtemp()
        self.raster = create_test_raster(width=7, height=5, seed=2024)

    def tearDown(self):
        if not self.persist:
            shutil.rmtree(self.dir)

    def test_decode(self):
        raster = decode_raster("P3\n2 1\n255\n1 2 3 4 5 6\n")
        assert raster.width == 2
        assert raster.height == 1
        assert raster.max_channel == 255
        assert raster.pixel(0, 0) == Pixel(1, 2, 3)
        assert raster.pixel(1, 0) == Pixel(4, 5, 6)
        assert decode_raster(b"P3 2 1 255 1 2 3 4 5 6") == raster

    def test_decode_comments(self):
        content = "# leading comment\nP3\n# width and height\n1 1\n  # indented comment\n15\n1 2 3\n"
        raster = decode_raster(content)
        assert raster.max_channel == 15
        assert raster.pixel(0, 0) == Pixel(1, 2, 3)

    def test_encode(self):
        raster = create_raster_from_pixels([[(1, 2, 3), (4, 5, 6)]])
        assert encode_raster(raster) == "P3\n2\n1\n255\n1\n2\n3\n4\n5\n6\n"
        assert encode_raster_bytes(raster) == b"P3\n2\n1\n255\n1\n2\n3\n4\n5\n6\n"

    def test_round_trip(self):
        assert decode_raster(encode_raster(self.raster)) == self.raster
        assert decode_raster(encode_raster_bytes(self.raster)) == self.raster
        content = encode_raster_bytes(self.raster)
        assert encode_raster_bytes(decode_raster(content)) == content

    def test_decode_invalid(self):
        for content in ["",
                        "# only a comment\n",
                        "P6\n1 1\n255\n0 0 0\n",
                        "P3\n",
                        "P3\n1\n",
                        "P3\n1 1\n",
                        "P3\n0 1\n255\n",
                        "P3\n1 -1\n255\n0 0 0\n",
                        "P3\n1 1\n0\n0 0 0\n",
                        "P3\nwide 1\n255\n0 0 0\n",
                        "P3\n1 1\n255\n0 0\n",
                        "P3\n1 1\n255\n0 0 0 0\n",
                        "P3\n1 1\n255\n0 x 0\n",
                        "P3\n1 1\n255\n0 256 0\n",
                        "P3\n1 1\n255\n0 -1 0\n",
                        "P3\n2 1\n15\n0 0 0 16 0 0\n",
                        "P3\n1 1\n255\n1_0 0 0\n",
                        "P3\n1 1\n255\n+5 0 0\n",
                        "P3\n+1 1\n255\n0 0 0\n",
                        "P3\n1 1\n255\n\u0663 0 0\n",
                        "P3\n1 1\n255\n1000000000000000000000000000000 0 0\n",
                        b"P3\n1 1\n255\n\xff\xfe\n"]:
            with self.assertRaises(FormatError):
                decode_raster(content)
        with self.assertRaises(ValueError):
            decode_raster("P3\n1 1\n255\n0 256 0\n")

    def test_import_ppm(self):
        raster = import_raster_from_ppm(rasterlib_data_path('images/tiny.ppm'))
        assert raster.width == 4
        assert raster.height == 2
        assert raster.pixel(0, 0) == Pixel(255, 0, 0)
        assert raster.pixel(3, 0) == Pixel(255, 255, 255)
        assert raster.pixel(3, 1) == Pixel(200, 150, 100)

    def test_export_ppm(self):
        filename = '%s/test_export.ppm' % self.dir
        export_raster_to_ppm(self.raster, filename)
        assert import_raster_from_ppm(filename) == self.raster
        with open(filename, 'rb') as f:
            assert f.read() == encode_raster_bytes(self.raster)

    def test_fits(self):
        filename = '%s/test_export.fits' % self.dir
        export_raster_to_fits(self.raster, filename)
        assert import_raster_from_fits(filename) == self.raster

        raster = create_raster(3, 2, max_channel=1023, fill=(1000, 3, 512))
        export_raster_to_file(raster, filename)
        assert import_raster_from_file(filename) == raster

    def test_fits_greyscale(self):
        filename = '%s/test_grey.fits' % self.dir
        fits.writeto(filename, numpy.array([[0, 10], [20, 30]], dtype='int16'), overwrite=True)
        raster = import_raster_from_fits(filename)
        assert raster.max_channel == 255
        assert raster.is_greyscale()
        assert raster.pixel(1, 1) == Pixel(30, 30, 30)

        fits.writeto(filename, numpy.zeros([2, 2, 2], dtype='int16'), overwrite=True)
        with self.assertRaises(FormatError):
            import_raster_from_fits(filename)

    def test_png(self):
        filename = '%s/test_export.png' % self.dir
        export_raster_to_file(self.raster, filename)
        assert import_raster_from_file(filename) == self.raster

    def test_png_rescaled(self):
        filename = '%s/test_rescaled.png' % self.dir
        raster = create_raster(2, 2, max_channel=15, fill=(15, 0, 5))
        export_raster_to_file(raster, filename)
        imported = import_raster_from_file(filename)
        assert imported.max_channel == 255
        assert imported.pixel(1, 1) == Pixel(255, 0, 85)
        assert import_raster_from_file(filename, max_channel=15) == raster

    def test_file_dispatch_ppm(self):
        filename = '%s/test_dispatch.ppm' % self.dir
        export_raster_to_file(self.raster, filename)
        assert import_raster_from_ppm(filename) == self.raster
        assert import_raster_from_file(filename) == self.raster

    def test_unreadable_image(self):
        filename = '%s/not_an_image.png' % self.dir
        with open(filename, 'w') as f:
            f.write("This is not a PNG file\n")
        with self.assertRaises(FormatError):
            import_raster_from_file(filename)

    def test_unknown_extension(self):
        with self.assertRaises(InvalidArgument):
            export_raster_to_file(self.raster, '%s/test_export.unknown' % self.dir)


if __name__ == '__main__':
    unittest.main()
