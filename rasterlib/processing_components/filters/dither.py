""" Error diffusion dithering of Rasters

"""

__all__ = ['dither_raster', 'DIFFUSION_WEIGHTS']

import logging

import numpy

from rasterlib.data_models.memory_data_models import Raster
from rasterlib.processing_components.raster.operations import greyscale_component, create_raster_from_array

log = logging.getLogger('logger')

# (dx, dy, weight) for the neighbours not yet visited in raster order
DIFFUSION_WEIGHTS = ((1, 0, 7.0 / 16.0),
                     (-1, 1, 3.0 / 16.0),
                     (0, 1, 5.0 / 16.0),
                     (1, 1, 1.0 / 16.0))


def dither_raster(raster: Raster) -> Raster:
    """ Convert a raster to two levels of luma by error diffusion

    The luma of each pixel is quantised to 0 or max_channel, visiting pixels row by row from the top
    left. The quantisation error is added to the neighbours not yet visited, with weights 7/16 (right),
    3/16 (below left), 5/16 (below) and 1/16 (below right). Each adjusted neighbour is clamped to
    [0, max_channel] at once and neighbours outside the raster are skipped.

    The pixels must be visited in order since every update is read by later pixels.

    :param raster: Raster
    :return: Raster whose channels are all 0 or max_channel
    """
    assert isinstance(raster, Raster), raster
    max_channel = raster.max_channel
    midpoint = (max_channel + 1) / 2.0

    luma = greyscale_component(raster, 'luma')
    height, width = luma.shape
    for y in range(height):
        for x in range(width):
            old = luma[y, x]
            new = 0.0 if old < midpoint else float(max_channel)
            error = old - new
            for dx, dy, weight in DIFFUSION_WEIGHTS:
                nx, ny = x + dx, y + dy
                if 0 <= nx < width and ny < height:
                    luma[ny, nx] = min(max(luma[ny, nx] + error * weight, 0.0), max_channel)
            luma[y, x] = new

    levels = luma.astype('int64')
    log.debug("dither_raster: dithered %s" % repr(raster))
    return create_raster_from_array(numpy.repeat(levels[..., numpy.newaxis], 3, axis=2), max_channel)
