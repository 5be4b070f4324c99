"""
Functions that aid testing in various ways.

"""

__all__ = ['create_test_raster', 'create_greyscale_test_raster']

import logging

import numpy

from rasterlib.data_models.memory_data_models import Raster
from rasterlib.processing_components.raster.operations import create_raster_from_array

log = logging.getLogger('logger')


def create_test_raster(width=16, height=12, max_channel=255, seed=None) -> Raster:
    """Create a test raster

    Without a seed the raster is a deterministic pattern: red ramps from left to right, green ramps from
    top to bottom and blue is a checkerboard. With a seed the channels are uniform random integers.

    :param width: Number of columns
    :param height: Number of rows
    :param max_channel: Channel ceiling
    :param seed: Seed for numpy.random, or None for the deterministic pattern
    :return: Raster
    """
    if seed is not None:
        rng = numpy.random.default_rng(seed)
        data = rng.integers(0, max_channel, size=[height, width, 3], endpoint=True)
    else:
        y, x = numpy.mgrid[0:height, 0:width]
        data = numpy.zeros([height, width, 3], dtype='int64')
        data[..., 0] = x * max_channel // max(width - 1, 1)
        data[..., 1] = y * max_channel // max(height - 1, 1)
        data[..., 2] = ((x + y) % 2) * max_channel

    return create_raster_from_array(data, max_channel)


def create_greyscale_test_raster(width=16, height=12, max_channel=255, seed=None) -> Raster:
    """Create a greyscale test raster

    As create_test_raster, with all three channels equal to the red channel.

    :return: Raster
    """
    raster = create_test_raster(width, height, max_channel, seed)
    data = numpy.repeat(raster.data[..., 0:1], 3, axis=2)
    return create_raster_from_array(data, max_channel)
