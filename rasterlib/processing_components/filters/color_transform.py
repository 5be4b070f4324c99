""" Linear colour transforms of Rasters

A colour matrix M is 3x3 and maps each pixel (r, g, b) to M . (r, g, b). The results are clamped to
[0, max_channel] and truncated to integers.

"""

__all__ = ['greyscale_matrix',
           'luma_greyscale_raster',
           'sepia_matrix',
           'sepia_raster',
           'transform_raster_colors',
           'validate_color_matrix']

import logging

import numpy

from rasterlib.data_models.errors import InvalidArgument
from rasterlib.data_models.memory_data_models import Raster, LUMA_WEIGHTS
from rasterlib.processing_components.raster.operations import clamp_channels, create_raster_from_array

log = logging.getLogger('logger')


def greyscale_matrix():
    """ Colour matrix giving luma in all three channels

    :return: numpy.array [3, 3]
    """
    return numpy.array([LUMA_WEIGHTS, LUMA_WEIGHTS, LUMA_WEIGHTS])


def sepia_matrix():
    """ Colour matrix for a sepia tone

    :return: numpy.array [3, 3]
    """
    return numpy.array([[0.393, 0.769, 0.189],
                        [0.349, 0.686, 0.168],
                        [0.272, 0.534, 0.131]])


def validate_color_matrix(matrix) -> numpy.array:
    """ Check that a colour matrix is 3x3

    :param matrix: Array-like
    :return: numpy.array of floats
    """
    matrix = numpy.array(matrix, dtype='float')
    if matrix.shape != (3, 3):
        raise InvalidArgument("Colour matrix must be 3 x 3, got shape %s" % str(matrix.shape))
    return matrix


def transform_raster_colors(raster: Raster, matrix) -> Raster:
    """ Apply a colour matrix to every pixel of a raster

    For example::

        sepia = transform_raster_colors(raster, sepia_matrix())

    :param raster: Raster
    :param matrix: 3x3 array; row i gives the weights of (r, g, b) for output channel i
    :return: Raster
    """
    assert isinstance(raster, Raster), raster
    matrix = validate_color_matrix(matrix)

    newdata = numpy.einsum('ij,yxj->yxi', matrix, raster.data.astype('float'))

    log.debug("transform_raster_colors: applied colour matrix to %s" % repr(raster))
    return create_raster_from_array(clamp_channels(newdata, raster.max_channel), raster.max_channel)


def luma_greyscale_raster(raster: Raster) -> Raster:
    """ Greyscale a raster using luma
    """
    return transform_raster_colors(raster, greyscale_matrix())


def sepia_raster(raster: Raster) -> Raster:
    """ Sepia tone a raster
    """
    return transform_raster_colors(raster, sepia_matrix())
