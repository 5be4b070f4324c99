""" Kernel convolution of Rasters

A kernel is an odd-sized square array of weights. Each output channel is the weighted sum over the
neighbourhood centred on the pixel, computed independently for each channel. Neighbours outside the
raster contribute zero.

"""

__all__ = ['blur_kernel',
           'blur_raster',
           'convolve_raster',
           'sharpen_kernel',
           'sharpen_raster',
           'validate_kernel']

import logging

import numpy
from scipy.ndimage import correlate

from rasterlib.data_models.errors import InvalidArgument
from rasterlib.data_models.memory_data_models import Raster
from rasterlib.processing_components.raster.operations import clamp_channels, create_raster_from_array

log = logging.getLogger('logger')


def blur_kernel():
    """ 3x3 Gaussian blur kernel

    :return: numpy.array [3, 3]
    """
    return numpy.array([[1.0, 2.0, 1.0],
                        [2.0, 4.0, 2.0],
                        [1.0, 2.0, 1.0]]) / 16.0


def sharpen_kernel():
    """ 5x5 sharpening kernel

    The centre is 1, the eight cells around it 1/4 and the outer ring -1/8.

    :return: numpy.array [5, 5]
    """
    kernel = -numpy.ones([5, 5]) / 8.0
    kernel[1:4, 1:4] = 0.25
    kernel[2, 2] = 1.0
    return kernel


def validate_kernel(kernel) -> numpy.array:
    """ Check that a kernel is an odd-sized square array of numbers

    :param kernel: Array-like
    :return: numpy.array of floats
    """
    kernel = numpy.array(kernel, dtype='float')
    if kernel.ndim != 2 or kernel.shape[0] != kernel.shape[1]:
        raise InvalidArgument("Kernel must be square, got shape %s" % str(kernel.shape))
    if kernel.shape[0] % 2 == 0:
        raise InvalidArgument("Kernel size must be odd, got %d" % kernel.shape[0])
    return kernel


def convolve_raster(raster: Raster, kernel) -> Raster:
    """ Convolve a raster with a kernel, padding with zeros at the borders

    Each output channel is clamped to [0, max_channel] and truncated to an integer.

    For example::

        blurred = convolve_raster(raster, blur_kernel())

    :param raster: Raster
    :param kernel: Odd-sized square array of weights
    :return: Raster
    """
    assert isinstance(raster, Raster), raster
    kernel = validate_kernel(kernel)

    data = raster.data.astype('float')
    newdata = numpy.zeros_like(data)
    for channel in range(3):
        newdata[..., channel] = correlate(data[..., channel], kernel, mode='constant', cval=0.0)

    log.debug("convolve_raster: applied %d x %d kernel to %s" % (kernel.shape[0], kernel.shape[1], repr(raster)))
    return create_raster_from_array(clamp_channels(newdata, raster.max_channel), raster.max_channel)


def blur_raster(raster: Raster) -> Raster:
    """ Blur a raster with the 3x3 Gaussian kernel
    """
    return convolve_raster(raster, blur_kernel())


def sharpen_raster(raster: Raster) -> Raster:
    """ Sharpen a raster with the 5x5 sharpening kernel
    """
    return convolve_raster(raster, sharpen_kernel())
