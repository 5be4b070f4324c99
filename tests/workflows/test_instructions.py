""" Unit tests for the instruction workflow

"""
import io
import logging
import os
import shutil
import tempfile
import unittest

from rasterlib.data_models.memory_data_models import Pixel, RasterStore
from rasterlib.data_models.parameters import rasterlib_data_path
from rasterlib.processing_components import import_raster_from_file, export_raster_to_file
from rasterlib.processing_components.simulation import create_test_raster
from rasterlib.workflows.serial.instructions import control, main, menu_text, process_instruction, \
    run_instruction_script, INSTRUCTIONS

log = logging.getLogger('logger')

log.setLevel(logging.WARNING)


class TestInstructions(unittest.TestCase):

    def setUp(self):
        self.dir = tempfile.mkdtemp()
        self.store = RasterStore()
        self.output = io.StringIO()
        self.tiny = rasterlib_data_path('images/tiny.ppm')

    def tearDown(self):
        shutil.rmtree(self.dir)

    def process(self, line):
        return process_instruction(self.store, line.split(), self.output)

    def test_menu(self):
        text = menu_text()
        for name, _ in INSTRUCTIONS:
            assert name in text
        assert self.process('menu')
        assert self.output.getvalue() == text

    def test_load_brighten_save(self):
        assert self.process('load %s tiny' % self.tiny)
        assert self.process('brighten 10 tiny tiny-bright')
        assert self.store.get('tiny').pixel(1, 1) == Pixel(128, 128, 128)
        assert self.store.get('tiny-bright').pixel(1, 1) == Pixel(138, 138, 138)
        assert self.store.get('tiny-bright').pixel(0, 0) == Pixel(255, 10, 10)

        filename = os.path.join(self.dir, 'tiny-bright.ppm')
        assert self.process('save %s tiny-bright' % filename)
        assert import_raster_from_file(filename) == self.store.get('tiny-bright')
        assert self.output.getvalue() == ""

    def test_flips_and_greyscale(self):
        assert self.process('load %s tiny' % self.tiny)
        assert self.process('horizontal-flip tiny tiny-h')
        assert self.process('vertical-flip tiny tiny-v')
        assert self.process('greyscale luma-component tiny tiny-grey')
        assert self.store.get('tiny-h').pixel(0, 0) == Pixel(255, 255, 255)
        assert self.store.get('tiny-v').pixel(0, 0) == Pixel(0, 0, 0)
        assert self.store.get('tiny-grey').is_greyscale()

    def test_split_combine(self):
        assert self.process('load %s tiny' % self.tiny)
        assert self.process('rgb-split tiny tiny-r tiny-g tiny-b')
        assert self.store.get('tiny-r').pixel(3, 1) == Pixel(200, 200, 200)
        assert self.process('rgb-combine tiny-again tiny-r tiny-g tiny-b')
        assert self.store.get('tiny-again') == self.store.get('tiny')

    def test_failed_combine_stores_nothing(self):
        self.store.put('big', create_test_raster(width=4, height=4))
        self.store.put('small', create_test_raster(width=2, height=2))
        assert self.process('rgb-split big r g b')
        assert not self.process('rgb-combine result r g small')
        assert 'result' not in self.store
        assert self.output.getvalue().startswith("Error: ")

    def test_commands(self):
        assert self.process('load %s tiny' % self.tiny)
        for name in ['image-blur', 'image-sharpen', 'grey-scaled', 'sepia', 'dither']:
            assert self.process('%s tiny tiny-%s' % (name, name)), name
            assert self.store.get('tiny-%s' % name).shape == self.store.get('tiny').shape
        assert self.store.get('tiny-grey-scaled').is_greyscale()

    def test_undefined_instruction(self):
        assert not self.process('emboss tiny tiny-emboss')
        assert self.output.getvalue() == "Undefined instruction: emboss\n"

    def test_errors(self):
        assert not self.process('brighten 10 missing result')
        assert self.output.getvalue() == "Error: No raster named 'missing'\n"
        assert 'result' not in self.store

        self.store.put('koala', create_test_raster(width=3, height=3))
        for line in ['brighten ten koala result',
                     'brighten 10 koala',
                     'greyscale alpha-component koala result',
                     'load %s/missing.ppm result' % self.dir,
                     'save %s/koala.unknown koala' % self.dir,
                     'run %s/missing.txt' % self.dir]:
            self.output = io.StringIO()
            assert not self.process(line), line
            assert self.output.getvalue().startswith("Error: "), line
        assert 'result' not in self.store

    def test_brighten_large_delta(self):
        assert self.process('load %s tiny' % self.tiny)
        assert self.process('brighten %d tiny bright' % (10 ** 20))
        assert self.process('brighten %d tiny dark' % (-2 ** 63))
        assert self.store.get('bright').pixel(0, 1) == Pixel(255, 255, 255)
        assert self.store.get('dark').pixel(3, 0) == Pixel(0, 0, 0)
        assert self.output.getvalue() == ""

    def test_run_recursive(self):
        first = os.path.join(self.dir, 'first.txt')
        second = os.path.join(self.dir, 'second.txt')
        with open(first, 'w') as f:
            f.write("load %s tiny\nrun %s\n" % (self.tiny, second))
        with open(second, 'w') as f:
            f.write("vertical-flip tiny tiny-v\nrun %s\n" % first)
        assert not self.process('run %s' % first)
        assert 'tiny-v' in self.store
        assert self.output.getvalue() == "Error: recursive run of %s\n" % first

        self.output = io.StringIO()
        with open(second, 'w') as f:
            f.write("vertical-flip tiny tiny-v\n")
        with open(first, 'w') as f:
            f.write("run %s\nrun %s\n" % (second, second))
        assert self.process('run %s' % first)
        assert self.output.getvalue() == ""

    def test_run_script(self):
        source = os.path.join(self.dir, 'source.png')
        export_raster_to_file(create_test_raster(width=6, height=4, seed=3), source)
        result = os.path.join(self.dir, 'result.ppm')
        script = os.path.join(self.dir, 'script.txt')
        with open(script, 'w') as f:
            f.write("# Sharpen then save\n"
                    "\n"
                    "load %s source\n"
                    "image-sharpen source sharp\n"
                    "save %s sharp\n" % (source, result))
        assert self.process('run %s' % script)
        assert os.path.exists(result)
        assert import_raster_from_file(result) == self.store.get('sharp')

    def test_run_instruction_script_continues(self):
        lines = ["load %s tiny" % self.tiny,
                 "emboss tiny tiny2",
                 "vertical-flip tiny tiny-v"]
        assert not run_instruction_script(self.store, lines, self.output)
        assert 'tiny-v' in self.store

    def test_control(self):
        input_stream = io.StringIO("load %s tiny\n\nbrighten 5 tiny tiny2\nq\nbrighten 5 tiny tiny3\n" %
                                   self.tiny)
        control(self.store, input_stream, self.output)
        text = self.output.getvalue()
        assert text.startswith("Welcome to the Image Manipulation program!\n")
        assert text.endswith("Thank you for using this program!\n")
        assert text.count("Type instruction: ") == 4
        assert 'tiny2' in self.store
        assert 'tiny3' not in self.store

    def test_control_prompts_before_reading(self):
        menu = menu_text()
        control(self.store, io.StringIO("menu\n"), self.output)
        text = self.output.getvalue()
        expected = "Welcome to the Image Manipulation program!\n" + menu + "Type instruction: " + menu + \
            "Type instruction: " + "Thank you for using this program!\n"
        assert text == expected

    def test_control_end_of_input(self):
        control(self.store, io.StringIO("menu\n"), self.output)
        assert self.output.getvalue().endswith("Thank you for using this program!\n")

    def test_main(self):
        result = os.path.join(self.dir, 'result.png')
        script = os.path.join(self.dir, 'script.txt')
        with open(script, 'w') as f:
            f.write("load %s tiny\nsepia tiny tiny-sepia\nsave %s tiny-sepia\n" % (self.tiny, result))
        assert main(['--script', script]) == 0
        assert os.path.exists(result)

        with open(script, 'w') as f:
            f.write("save %s missing\n" % result)
        assert main(['--script', script]) == 1


if __name__ == '__main__':
    unittest.main()
