""" Commands: Raster transforms that can be registered under a name and applied uniformly

Each command carries only its fixed parameters (a kernel or a colour matrix) and exposes apply.

For example::

    registry = create_command_registry()
    sharpened = get_command('image-sharpen', registry).apply(raster)

"""

__all__ = ['Command',
           'ColorTransformCommand',
           'ConvolutionCommand',
           'DitherCommand',
           'create_command_registry',
           'get_command']

import logging

import numpy

from rasterlib.data_models.errors import InvalidArgument, NotFound
from rasterlib.data_models.memory_data_models import Raster
from rasterlib.processing_components.filters.color_transform import transform_raster_colors, \
    validate_color_matrix, greyscale_matrix, sepia_matrix
from rasterlib.processing_components.filters.convolution import convolve_raster, validate_kernel, \
    blur_kernel, sharpen_kernel
from rasterlib.processing_components.filters.dither import dither_raster

log = logging.getLogger('logger')


class Command:
    """ A transform of one Raster into another

    Subclasses implement apply.
    """

    def apply(self, raster: Raster) -> Raster:
        """ Apply the command to a raster, returning a new Raster

        :param raster: Raster
        :return: Raster
        """
        raise NotImplementedError("%s does not implement apply" % type(self).__name__)

    def execute(self, raster: Raster, width, height, max_channel) -> Raster:
        """ Apply the command, given the raster's dimensions and channel ceiling explicitly

        :param raster: Raster
        :param width: Width of raster
        :param height: Height of raster
        :param max_channel: Channel ceiling of raster
        :return: Raster
        """
        assert isinstance(raster, Raster), raster
        if (width, height, max_channel) != (raster.width, raster.height, raster.max_channel):
            raise InvalidArgument("Arguments %d x %d, ceiling %d do not describe %s" %
                                  (width, height, max_channel, repr(raster)))
        return self.apply(raster)

    def __call__(self, raster: Raster) -> Raster:
        return self.apply(raster)


class ConvolutionCommand(Command):
    """ Convolution with a fixed kernel
    """

    def __init__(self, kernel):
        self.kernel = validate_kernel(kernel)
        self.kernel.flags.writeable = False

    def apply(self, raster: Raster) -> Raster:
        return convolve_raster(raster, self.kernel)

    def __repr__(self):
        return "ConvolutionCommand(kernel=%s)" % numpy.array2string(self.kernel, separator=', ')


class ColorTransformCommand(Command):
    """ Colour transform with a fixed 3x3 matrix
    """

    def __init__(self, matrix):
        self.matrix = validate_color_matrix(matrix)
        self.matrix.flags.writeable = False

    def apply(self, raster: Raster) -> Raster:
        return transform_raster_colors(raster, self.matrix)

    def __repr__(self):
        return "ColorTransformCommand(matrix=%s)" % numpy.array2string(self.matrix, separator=', ')


class DitherCommand(Command):
    """ Error diffusion dithering
    """

    def apply(self, raster: Raster) -> Raster:
        return dither_raster(raster)

    def __repr__(self):
        return "DitherCommand()"


def create_command_registry():
    """ Create a registry of the standard commands

    :return: dict mapping instruction name to Command
    """
    return {'image-blur': ConvolutionCommand(blur_kernel()),
            'image-sharpen': ConvolutionCommand(sharpen_kernel()),
            'grey-scaled': ColorTransformCommand(greyscale_matrix()),
            'sepia': ColorTransformCommand(sepia_matrix()),
            'dither': DitherCommand()}


def get_command(name, registry=None) -> Command:
    """ Look up a command by name

    :param name: Instruction name e.g. 'sepia'
    :param registry: dict of commands (default is the standard registry)
    :return: Command
    """
    if registry is None:
        registry = create_command_registry()
    try:
        return registry[name]
    except KeyError:
        raise NotFound("No command named %r: known commands are %s" % (name, ", ".join(sorted(registry.keys()))))
