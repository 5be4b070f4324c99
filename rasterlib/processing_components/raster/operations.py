""" Raster operations visible to the instruction workflows as Components

All operations return a new Raster. The input Raster is never modified.

"""

__all__ = ['brighten_raster',
           'clamp_channels',
           'combine_rasters',
           'create_raster',
           'create_raster_from_array',
           'create_raster_from_pixels',
           'flip_raster_horizontal',
           'flip_raster_vertical',
           'greyscale_component',
           'greyscale_raster',
           'histogram_raster',
           'qa_raster',
           'raster_sizeof',
           'show_histogram',
           'show_raster',
           'split_raster',
           'GREYSCALE_COMPONENTS']

import logging

import numpy

from rasterlib.data_models.errors import InvalidArgument
from rasterlib.data_models.memory_data_models import Raster, QA, LUMA_WEIGHTS, assert_same_raster_shape
from rasterlib.data_models.parameters import get_parameter

log = logging.getLogger('logger')

GREYSCALE_COMPONENTS = ('red', 'green', 'blue', 'value', 'intensity', 'luma')
COMPONENT_SUFFIX = '-component'


def clamp_channels(values, max_channel):
    """ Clamp values to [0, max_channel] and truncate to integers

    Unlike a plain truncation, values are first rounded to 6 decimals. Floating point sums that
    should be whole then truncate to the intended integer, e.g. the luma of white is computed as
    254.99999999999997 and gives 255 rather than 254. Genuine fractions such as 37.5 still truncate.

    :param values: numpy.array of floats
    :param max_channel: Ceiling for channel values
    :return: numpy.array of int64
    """
    values = numpy.clip(numpy.round(values, 6), 0, max_channel)
    return numpy.floor(values).astype('int64')


def raster_sizeof(raster: Raster):
    """ Return size of raster in GB
    """
    return raster.size()


def create_raster_from_array(data: numpy.array, max_channel=255) -> Raster:
    """ Create a raster from an array of shape [height, width, 3]

    The array is copied: later changes to data do not affect the Raster.

    :param data: Numpy.array of integer channel values
    :param max_channel: Ceiling for channel values
    :return: Raster

    See also
        :py:func:`rasterlib.processing_components.raster.operations.create_raster`
    """
    fim = Raster(data, max_channel)

    if raster_sizeof(fim) >= 1.0:
        log.debug("create_raster_from_array: created %s raster of shape %s, size %.3f (GB)" %
                  (fim.data.dtype, str(fim.shape), raster_sizeof(fim)))

    assert isinstance(fim, Raster), "Type is %s" % type(fim)
    return fim


def create_raster(width, height, max_channel=255, fill=(0, 0, 0)) -> Raster:
    """ Create a raster filled with one colour

    :param width: Number of columns
    :param height: Number of rows
    :param max_channel: Ceiling for channel values
    :param fill: (red, green, blue) for every pixel
    :return: Raster
    """
    if width <= 0 or height <= 0:
        raise InvalidArgument("Raster must have positive width and height, got %s x %s" % (width, height))
    data = numpy.zeros([height, width, 3], dtype='int64')
    data[...] = numpy.array(fill, dtype='int64')
    return create_raster_from_array(data, max_channel)


def create_raster_from_pixels(rows, max_channel=255) -> Raster:
    """ Create a raster from rows of (red, green, blue) triples

    For example::

        raster = create_raster_from_pixels([[(10, 20, 30), (200, 210, 220)],
                                            [(0, 0, 0), (255, 255, 255)]])

    :param rows: List of rows, each a list of triples or Pixels
    :param max_channel: Ceiling for channel values
    :return: Raster
    """
    widths = set(len(row) for row in rows)
    if len(widths) > 1:
        raise InvalidArgument("All rows must have the same number of pixels, got %s" % sorted(widths))
    return create_raster_from_array([[tuple(p) for p in row] for row in rows], max_channel)


def brighten_raster(raster: Raster, delta) -> Raster:
    """ Add delta to every channel, clamping to [0, max_channel]

    :param raster: Raster
    :param delta: Signed integer increment
    :return: Raster
    """
    assert isinstance(raster, Raster), raster
    # Any delta beyond the ceiling saturates every channel
    delta = max(-raster.max_channel, min(int(delta), raster.max_channel))
    newdata = numpy.clip(raster.data + delta, 0, raster.max_channel)
    log.debug("brighten_raster: adding %d to %s" % (delta, repr(raster)))
    return create_raster_from_array(newdata, raster.max_channel)


def flip_raster_horizontal(raster: Raster) -> Raster:
    """ Reverse the order of pixels in each row

    :param raster: Raster
    :return: Raster
    """
    assert isinstance(raster, Raster), raster
    return create_raster_from_array(raster.data[:, ::-1, :], raster.max_channel)


def flip_raster_vertical(raster: Raster) -> Raster:
    """ Reverse the order of rows

    :param raster: Raster
    :return: Raster
    """
    assert isinstance(raster, Raster), raster
    return create_raster_from_array(raster.data[::-1, :, :], raster.max_channel)


def greyscale_component(raster: Raster, component: str) -> numpy.array:
    """ Per-pixel value of a greyscale component, as floats

    :param raster: Raster
    :param component: 'red', 'green', 'blue', 'value', 'intensity' or 'luma'. A '-component'
        suffix, as in 'luma-component', is accepted
    :return: numpy.array [height, width]
    """
    assert isinstance(raster, Raster), raster
    name = component
    if isinstance(component, str) and component.endswith(COMPONENT_SUFFIX):
        name = component[:-len(COMPONENT_SUFFIX)]
    data = raster.data.astype('float')
    if name == 'red':
        return data[..., 0]
    elif name == 'green':
        return data[..., 1]
    elif name == 'blue':
        return data[..., 2]
    elif name == 'value':
        return numpy.max(data, axis=2)
    elif name == 'intensity':
        return numpy.sum(data, axis=2) / 3.0
    elif name == 'luma':
        return LUMA_WEIGHTS[0] * data[..., 0] + LUMA_WEIGHTS[1] * data[..., 1] + LUMA_WEIGHTS[2] * data[..., 2]
    else:
        raise InvalidArgument("Unknown greyscale component %r: valid components are %s" %
                              (component, ", ".join(GREYSCALE_COMPONENTS)))


def greyscale_raster(raster: Raster, component: str) -> Raster:
    """ Replace all three channels of each pixel by a greyscale component

    Non-integer components (intensity, luma) are truncated.

    :param raster: Raster
    :param component: 'red', 'green', 'blue', 'value', 'intensity' or 'luma'
    :return: Raster
    """
    grey = greyscale_component(raster, component)
    grey = clamp_channels(grey, raster.max_channel)
    return create_raster_from_array(numpy.repeat(grey[..., numpy.newaxis], 3, axis=2), raster.max_channel)


def split_raster(raster: Raster) -> (Raster, Raster, Raster):
    """ Split into three greyscale rasters holding the red, green, blue channels

    For example::

        red, green, blue = split_raster(raster)
        assert combine_rasters(red, green, blue) == raster

    :param raster: Raster
    :return: red Raster, green Raster, blue Raster
    """
    return tuple(greyscale_raster(raster, component) for component in ['red', 'green', 'blue'])


def combine_rasters(red: Raster, green: Raster, blue: Raster) -> Raster:
    """ Combine three greyscale rasters into one RGB raster

    All three rasters must have the same width and height and every pixel of each must be greyscale.
    Both conditions are checked before the output is constructed.

    :param red: Greyscale Raster supplying the red channel
    :param green: Greyscale Raster supplying the green channel
    :param blue: Greyscale Raster supplying the blue channel
    :return: Raster with the channel ceiling of red
    """
    for name, source in (('red', red), ('green', green), ('blue', blue)):
        if not isinstance(source, Raster):
            raise InvalidArgument("The %s source is not a Raster: %r" % (name, source))
    assert_same_raster_shape(red, green)
    assert_same_raster_shape(red, blue)
    for name, source in (('red', red), ('green', green), ('blue', blue)):
        if not source.is_greyscale():
            raise InvalidArgument("The %s source is not a greyscale raster" % name)

    newdata = numpy.stack([red.data[..., 0], green.data[..., 1], blue.data[..., 2]], axis=2)
    return create_raster_from_array(numpy.clip(newdata, 0, red.max_channel), red.max_channel)


def histogram_raster(raster: Raster):
    """ Histograms of the red, green, blue channels and of intensity

    :param raster: Raster
    :return: dict of numpy.array, each of length max_channel + 1
    """
    assert isinstance(raster, Raster), raster
    nbins = raster.max_channel + 1
    hist = dict()
    for channel, name in enumerate(['red', 'green', 'blue']):
        hist[name] = numpy.bincount(raster.data[..., channel].ravel(), minlength=nbins)
    intensity = (numpy.sum(raster.data, axis=2) // 3).ravel()
    hist['intensity'] = numpy.bincount(intensity, minlength=nbins)
    return hist


def qa_raster(raster, context="") -> QA:
    """Assess the quality of a raster

    QA is a standard set of statistics of a raster; max, min, mean of each channel and the mean luma

    :param raster:
    :return: QA
    """
    assert isinstance(raster, Raster), raster
    data = {'shape': str(raster.data.shape),
            'max_channel': raster.max_channel,
            'max': numpy.max(raster.data),
            'min': numpy.min(raster.data)}
    for channel, name in enumerate(['red', 'green', 'blue']):
        data['mean_%s' % name] = numpy.mean(raster.data[..., channel])
    data['mean_luma'] = numpy.mean(greyscale_component(raster, 'luma'))
    data['greyscale'] = raster.is_greyscale()

    qa = QA(origin="qa_raster", data=data, context=context)
    return qa


def show_raster(raster: Raster, fig=None, title: str = '', **kwargs):
    """ Show a Raster using matplotlib

    :param raster: Raster
    :param fig: Matplotlib figure
    :param title: String for title of plot
    :return: Matplotlib figure
    """
    import matplotlib.pyplot as plt

    assert isinstance(raster, Raster), raster

    if fig is None:
        fig = plt.figure()
    ax = fig.add_subplot(1, 1, 1)

    interpolation = get_parameter(kwargs, "interpolation", "nearest")
    ax.imshow(raster.data / raster.max_channel, origin='upper', interpolation=interpolation)
    ax.set_xlabel('x')
    ax.set_ylabel('y')
    ax.set_title(title)

    return fig


def show_histogram(raster: Raster, fig=None, title: str = 'Histogram', **kwargs):
    """ Plot the channel and intensity histograms of a Raster using matplotlib

    :param raster: Raster
    :param fig: Matplotlib figure
    :param title: String for title of plot
    :return: Matplotlib figure
    """
    import matplotlib.pyplot as plt

    assert isinstance(raster, Raster), raster

    if fig is None:
        fig = plt.figure()
    ax = fig.add_subplot(1, 1, 1)

    colours = get_parameter(kwargs, "colours", {'red': 'red', 'green': 'green', 'blue': 'blue',
                                                'intensity': 'grey'})
    levels = numpy.arange(raster.max_channel + 1)
    for name, counts in histogram_raster(raster).items():
        ax.plot(levels, counts, color=colours.get(name, 'black'), label=name)
    ax.set_xlabel('Value')
    ax.set_ylabel('Count')
    ax.set_title(title)
    ax.legend()

    return fig
