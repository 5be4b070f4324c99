""" Instruction workflow: a text interface for editing named Rasters held in a RasterStore

Each instruction is a line of whitespace separated tokens, for example::

    load images/koala.ppm koala
    brighten 10 koala koala-brighter
    greyscale luma-component koala koala-grey
    save koala-grey.png koala-grey

Errors in an instruction are reported to the output and processing continues with the next one.

"""

__all__ = ['control',
           'main',
           'menu_text',
           'process_instruction',
           'run_instruction_script',
           'INSTRUCTIONS']

import argparse
import logging
import os
import sys

from rasterlib.data_models.errors import InvalidArgument, RasterError
from rasterlib.data_models.memory_data_models import RasterStore
from rasterlib.data_models.parameters import get_parameter
from rasterlib.processing_components.commands.commands import create_command_registry
from rasterlib.processing_components.raster.codec import import_raster_from_file, export_raster_to_file
from rasterlib.processing_components.raster.operations import brighten_raster, flip_raster_horizontal, \
    flip_raster_vertical, greyscale_raster, split_raster, combine_rasters

log = logging.getLogger('logger')

INSTRUCTIONS = [
    ('load', 'file-path object-name (call the image with this name)'),
    ('brighten', 'value src-object-name dest-object-name'),
    ('vertical-flip', 'src-object-name dest-object-name'),
    ('horizontal-flip', 'src-object-name dest-object-name'),
    ('greyscale', 'value/red/green/blue/intensity/luma-component src-object-name dest-object-name'),
    ('save', 'file-path object-name'),
    ('rgb-split', 'src-object-name object-name-red object-name-green object-name-blue'),
    ('rgb-combine', 'dest-object-name src-name-red src-name-green src-name-blue'),
    ('image-blur', 'src-obj-name dest-obj-name'),
    ('image-sharpen', 'src-obj-name dest-obj-name'),
    ('grey-scaled', 'src-obj-name dest-obj-name'),
    ('sepia', 'src-obj-name dest-obj-name'),
    ('dither', 'src-obj-name dest-obj-name'),
    ('run', 'file-path'),
    ('menu', '(print supported instruction list)'),
    ('q or quit', '(quit the program)')]

QUIT_INSTRUCTIONS = ('q', 'quit')


def menu_text():
    """ Text listing the supported instructions
    """
    s = "Supported user instructions are:\n"
    for name, arguments in INSTRUCTIONS:
        s += "%s %s\n" % (name, arguments)
    return s


def _arguments(tokens, count, usage):
    if len(tokens) - 1 < count:
        raise ValueError("%s expects %d arguments: %s" % (tokens[0], count, usage))
    return tokens[1:count + 1]


def _usage(name):
    return dict(INSTRUCTIONS).get(name, '')


def process_instruction(store: RasterStore, tokens, output, registry=None, **kwargs):
    """ Execute one tokenised instruction against a store

    Failures are written to output as 'Error: <message>' and logged. Quit instructions are not
    handled here, see control. A script that runs itself, directly or through other scripts, is
    reported as an error.

    :param store: RasterStore holding the named rasters
    :param tokens: List of tokens, the first is the instruction name
    :param output: Object with a write method e.g. sys.stdout
    :param registry: Commands by name (default is create_command_registry())
    :return: True if the instruction succeeded
    """
    assert isinstance(store, RasterStore), store
    if registry is None:
        registry = create_command_registry()

    if len(tokens) == 0:
        return True
    name = tokens[0]
    usage = _usage(name)
    log.debug("process_instruction: %s" % " ".join(tokens))
    try:
        if name == 'load':
            filename, dest = _arguments(tokens, 2, usage)
            store.put(dest, import_raster_from_file(filename, **kwargs))
        elif name == 'save':
            filename, src = _arguments(tokens, 2, usage)
            export_raster_to_file(store.get(src), filename, **kwargs)
        elif name == 'brighten':
            value, src, dest = _arguments(tokens, 3, usage)
            delta = int(value)
            store.update(src, dest, lambda raster: brighten_raster(raster, delta))
        elif name == 'horizontal-flip':
            src, dest = _arguments(tokens, 2, usage)
            store.update(src, dest, flip_raster_horizontal)
        elif name == 'vertical-flip':
            src, dest = _arguments(tokens, 2, usage)
            store.update(src, dest, flip_raster_vertical)
        elif name == 'greyscale':
            component, src, dest = _arguments(tokens, 3, usage)
            store.update(src, dest, lambda raster: greyscale_raster(raster, component))
        elif name == 'rgb-split':
            src, red_dest, green_dest, blue_dest = _arguments(tokens, 4, usage)
            store.update_many([src], [red_dest, green_dest, blue_dest], split_raster)
        elif name == 'rgb-combine':
            dest, red_src, green_src, blue_src = _arguments(tokens, 4, usage)
            store.update_many([red_src, green_src, blue_src], [dest], combine_rasters)
        elif name in registry:
            src, dest = _arguments(tokens, 2, usage)
            store.update(src, dest, registry[name].apply)
        elif name == 'run':
            filename, = _arguments(tokens, 1, usage)
            active = get_parameter(kwargs, 'active_scripts', frozenset())
            path = os.path.realpath(filename)
            if path in active:
                raise InvalidArgument("recursive run of %s" % filename)
            with open(filename, 'r') as f:
                lines = f.readlines()
            kwargs = dict(kwargs, active_scripts=active | {path})
            return run_instruction_script(store, lines, output, registry, **kwargs)
        elif name == 'menu':
            output.write(menu_text())
        else:
            output.write("Undefined instruction: %s\n" % name)
            return False
    except (RasterError, ValueError, OSError) as err:
        log.error("process_instruction: %s failed: %s" % (name, err))
        output.write("Error: %s\n" % err)
        return False
    return True


def run_instruction_script(store: RasterStore, lines, output, registry=None, **kwargs):
    """ Execute the instructions in a script, one per line

    Blank lines and lines starting with # are skipped.

    :param store: RasterStore
    :param lines: Iterable of lines
    :param output: Object with a write method
    :param registry: Commands by name
    :return: True if every instruction succeeded
    """
    if registry is None:
        registry = create_command_registry()
    succeeded = True
    for line in lines:
        tokens = line.split()
        if len(tokens) == 0 or tokens[0].startswith('#'):
            continue
        succeeded = process_instruction(store, tokens, output, registry, **kwargs) and succeeded
    return succeeded


def control(store: RasterStore, input_stream, output, **kwargs):
    """ Interactive loop: prompt for instructions until quit or end of input

    :param store: RasterStore
    :param input_stream: Stream with a readline method e.g. sys.stdin
    :param output: Object with a write method
    :param prompt: Prompt written before each instruction ('Type instruction: ')
    """
    prompt = get_parameter(kwargs, 'prompt', 'Type instruction: ')
    registry = create_command_registry()

    output.write("Welcome to the Image Manipulation program!\n")
    output.write(menu_text())
    while True:
        output.write(prompt)
        output.flush()
        line = input_stream.readline()
        if line == "":
            break
        tokens = line.split()
        if len(tokens) == 0:
            continue
        if tokens[0] in QUIT_INSTRUCTIONS:
            break
        process_instruction(store, tokens, output, registry, **kwargs)
    output.write("Thank you for using this program!\n")


def main(argv=None):
    """ Command line entry point

    With --script the instructions in the file are run, otherwise instructions are read from stdin.
    """
    parser = argparse.ArgumentParser(description='Edit images with text instructions')
    parser.add_argument('--script', type=str, default=None, help='File of instructions to run')
    parser.add_argument('--loglevel', type=str, default='WARNING', help='Logging level e.g. DEBUG, INFO')
    parser.add_argument('--logfile', type=str, default=None, help='Write log messages to this file')
    args = parser.parse_args(argv)

    logging.basicConfig(filename=args.logfile,
                        format='%(asctime)s,%(msecs)d %(name)s %(levelname)s %(message)s',
                        datefmt='%H:%M:%S',
                        level=getattr(logging, args.loglevel.upper(), logging.WARNING))

    store = RasterStore()
    if args.script is not None:
        with open(args.script, 'r') as f:
            succeeded = run_instruction_script(store, f.readlines(), sys.stdout)
        return 0 if succeeded else 1

    control(store, sys.stdin, sys.stdout)
    return 0


if __name__ == '__main__':
    sys.exit(main())
