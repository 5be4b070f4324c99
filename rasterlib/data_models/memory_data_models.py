"""The data models used in rasterlib:

- Pixel: an immutable triple of channel values
- Raster: a grid of pixels with a declared channel ceiling
- RasterStore: a named collection of Rasters
- QA: quality assessment of a Raster

"""

__all__ = ['Pixel',
           'Raster',
           'RasterStore',
           'QA',
           'LUMA_WEIGHTS',
           'assert_same_raster_shape'
           ]

import logging
import threading

import numpy

from rasterlib.data_models.errors import InvalidArgument, NotFound

log = logging.getLogger('logger')

# Weights for the perceptual brightness of (red, green, blue)
LUMA_WEIGHTS = (0.2126, 0.7152, 0.0722)


class Pixel:
    """ Pixel with three channel values: red, green, blue

    The derived values value, intensity and luma are computed from the channels on demand.
    """

    __slots__ = ('_channels',)

    def __init__(self, red=0, green=0, blue=0):
        """ Create Pixel

        :param red: Red channel
        :param green: Green channel
        :param blue: Blue channel
        """
        object.__setattr__(self, '_channels', (int(red), int(green), int(blue)))

    def __setattr__(self, key, value):
        raise AttributeError("Pixel is immutable")

    @property
    def red(self):
        """ Red channel
        """
        return self._channels[0]

    @property
    def green(self):
        """ Green channel
        """
        return self._channels[1]

    @property
    def blue(self):
        """ Blue channel
        """
        return self._channels[2]

    @property
    def value(self):
        """ Maximum of the three channels
        """
        return max(self._channels)

    @property
    def intensity(self):
        """ Average of the three channels
        """
        return sum(self._channels) / 3.0

    @property
    def luma(self):
        """ Perceptual brightness 0.2126 red + 0.7152 green + 0.0722 blue
        """
        return sum(w * c for w, c in zip(LUMA_WEIGHTS, self._channels))

    def is_greyscale(self):
        """ True if all three channels are equal
        """
        return self.red == self.green == self.blue

    def as_tuple(self):
        return self._channels

    def __iter__(self):
        return iter(self._channels)

    def __eq__(self, other):
        if not isinstance(other, Pixel):
            return NotImplemented
        return self._channels == other._channels

    def __hash__(self):
        return hash(self._channels)

    def __repr__(self):
        return "Pixel(%d, %d, %d)" % self._channels


class Raster:
    """Raster class with pixel data (as a read-only numpy.array) and a channel ceiling

    The data array has shape [height, width, 3] and holds integer channel values (red, green, blue)
    in the closed range [0, max_channel]. Rows run from top to bottom, columns from left to right.

    A Raster is never modified after construction: the data array is copied and marked read-only.
    All processing components return a new Raster.

    .. warning::
        Indexing is (y, x) in the numpy array but pixel() takes (x, y).

    """

    def __init__(self, data, max_channel=255):
        """ Create Raster

        :param data: Array-like of shape [height, width, 3] with integer channel values
        :param max_channel: Ceiling for channel values e.g. 255
        """
        try:
            max_channel = int(max_channel)
        except (TypeError, ValueError):
            raise InvalidArgument("Channel ceiling must be an integer, got %r" % (max_channel,))
        if max_channel <= 0:
            raise InvalidArgument("Channel ceiling must be positive, got %d" % max_channel)

        array = numpy.array(data)
        if array.ndim != 3 or array.shape[2] != 3:
            raise InvalidArgument("Raster data must have shape [height, width, 3], got %s" % str(array.shape))
        if array.shape[0] == 0 or array.shape[1] == 0:
            raise InvalidArgument("Raster must have positive width and height, got %s" % str(array.shape))
        if not numpy.issubdtype(array.dtype, numpy.integer):
            if not numpy.issubdtype(array.dtype, numpy.number) or numpy.any(array != numpy.floor(array)):
                raise InvalidArgument("Raster data must be integer valued")
        array = array.astype('int64')
        if numpy.min(array) < 0 or numpy.max(array) > max_channel:
            raise InvalidArgument("Raster channel values must lie in [0, %d]" % max_channel)

        array.flags.writeable = False
        self._data = array
        self._max_channel = max_channel

    @property
    def data(self):
        """ Read-only channel array [height, width, 3]
        """
        return self._data

    @property
    def max_channel(self):
        """ Ceiling for channel values
        """
        return self._max_channel

    @property
    def height(self):
        """ Number of pixels height i.e. y
        """
        return self._data.shape[0]

    @property
    def width(self):
        """ Number of pixels width i.e. x
        """
        return self._data.shape[1]

    @property
    def shape(self):
        """ Shape of data array
        """
        return self._data.shape

    def size(self):
        """ Return size in GB
        """
        size = 0
        size += self._data.nbytes
        return size / 1024.0 / 1024.0 / 1024.0

    def pixel(self, x, y):
        """ Pixel at column x, row y

        :param x: Column, 0 at the left
        :param y: Row, 0 at the top
        :return: Pixel
        """
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise InvalidArgument("Pixel (%d, %d) lies outside %d x %d raster" % (x, y, self.width, self.height))
        return Pixel(*self._data[y, x])

    @property
    def pixels(self):
        """ Pixels as a list of rows, each a list of Pixel
        """
        return [[Pixel(*channels) for channels in row] for row in self._data.tolist()]

    def is_greyscale(self):
        """ True if every pixel has red == green == blue
        """
        return bool(numpy.all(self._data[..., 0] == self._data[..., 1]) and
                    numpy.all(self._data[..., 1] == self._data[..., 2]))

    def __eq__(self, other):
        if not isinstance(other, Raster):
            return NotImplemented
        return self._max_channel == other._max_channel and self._data.shape == other._data.shape and \
            bool(numpy.array_equal(self._data, other._data))

    def __hash__(self):
        return hash((self._max_channel, self._data.shape, self._data.tobytes()))

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        memo[id(self)] = self
        return self

    def __str__(self):
        """Default printer for Raster

        """
        s = "Raster:\n"
        s += "\tShape: %s\n" % str(self._data.shape)
        s += "\tWidth: %d\n" % self.width
        s += "\tHeight: %d\n" % self.height
        s += "\tMaximum channel value: %d\n" % self._max_channel
        return s

    def __repr__(self):
        return "Raster(width=%d, height=%d, max_channel=%d)" % (self.width, self.height, self._max_channel)


class RasterStore:
    """ Named collection of Rasters, last write wins

    The store is the only mutable state in rasterlib. Access is serialised by a lock so that a get
    followed by a derived put (see update) observes a consistent snapshot.

    For example::

        store = RasterStore()
        store.put('koala', import_raster_from_file('koala.ppm'))
        store.update('koala', 'koala-bright', lambda r: brighten_raster(r, 50))

    """

    def __init__(self):
        self._rasters = dict()
        self._lock = threading.RLock()

    def get(self, name):
        """ Get the Raster stored under name

        :param name: Name of raster
        :return: Raster
        """
        with self._lock:
            try:
                return self._rasters[name]
            except KeyError:
                raise NotFound("No raster named %r" % (name,))

    def put(self, name, raster):
        """ Store a Raster under name, replacing any existing entry

        :param name: Non-empty name
        :param raster: Raster
        """
        if not isinstance(name, str) or len(name) == 0:
            raise InvalidArgument("Raster name must be a non-empty string, got %r" % (name,))
        if not isinstance(raster, Raster):
            raise InvalidArgument("Only a Raster can be stored, got %s" % type(raster).__name__)
        with self._lock:
            self._rasters[name] = raster
        log.debug("RasterStore.put: stored %r as %s" % (name, repr(raster)))

    def update(self, source, destination, function):
        """ Apply function to the Raster named source and store the result as destination

        The get and put happen under one acquisition of the lock.

        :param source: Name of input raster
        :param destination: Name for output raster
        :param function: Function taking and returning a Raster
        :return: The new Raster
        """
        with self._lock:
            result = function(self.get(source))
            self.put(destination, result)
            return result

    def update_many(self, sources, destinations, function):
        """ Apply function to several named Rasters and store several results

        For example::

            store.update_many(['koala'], ['red', 'green', 'blue'], split_raster)

        All gets and puts happen under one acquisition of the lock. Nothing is stored unless
        function succeeds.

        :param sources: List of input raster names
        :param destinations: List of output raster names
        :param function: Function taking one Raster per source and returning one Raster per destination
        :return: Tuple of new Rasters
        """
        for name in destinations:
            if not isinstance(name, str) or len(name) == 0:
                raise InvalidArgument("Raster name must be a non-empty string, got %r" % (name,))
        with self._lock:
            results = function(*[self.get(name) for name in sources])
            if isinstance(results, Raster):
                results = (results,)
            results = tuple(results)
            if len(results) != len(destinations):
                raise InvalidArgument("Expected %d results, got %d" % (len(destinations), len(results)))
            for result in results:
                if not isinstance(result, Raster):
                    raise InvalidArgument("Only a Raster can be stored, got %s" % type(result).__name__)
            for name, result in zip(destinations, results):
                self.put(name, result)
            return results

    def names(self):
        """ Sorted list of stored names
        """
        with self._lock:
            return sorted(self._rasters.keys())

    def __contains__(self, name):
        with self._lock:
            return name in self._rasters

    def __len__(self):
        with self._lock:
            return len(self._rasters)

    def __str__(self):
        """Default printer for RasterStore

        """
        s = "RasterStore:\n"
        for name in self.names():
            s += "\t%s: %s\n" % (name, repr(self._rasters[name]))
        return s


class QA:
    """ Summary statistics of a Raster, tagged with where and why they were taken

    For example::

        qa = qa_raster(sharpened, context='after image-sharpen')
        if qa['max'] == qa['max_channel']:
            log.warning(str(qa))

    """

    def __init__(self, origin=None, data=None, context=None):
        """ Create QA

        :param origin: Name of the function that made the assessment e.g. "qa_raster"
        :param data: dict of statistic name to value
        :param context: Free text e.g. "after sharpen"
        """
        self.origin = origin
        self.data = dict() if data is None else dict(data)
        self.context = context

    def __getitem__(self, key):
        return self.data[key]

    def __contains__(self, key):
        return key in self.data

    def __str__(self):
        """Default printer for QA

        Floating point statistics are shown to 6 significant figures.
        """
        s = "Quality assessment of raster:\n"
        s += "\tOrigin: %s\n" % self.origin
        s += "\tContext: %s\n" % self.context
        for name in sorted(self.data.keys()):
            value = self.data[name]
            if isinstance(value, (float, numpy.floating)):
                s += "\t%s: %.6g\n" % (name, value)
            else:
                s += "\t%s: %s\n" % (name, value)
        return s


def assert_same_raster_shape(r1: Raster, r2: Raster):
    """ Raise InvalidArgument if two rasters differ in width or height

    :param r1: Raster
    :param r2: Raster
    """
    if r1.width != r2.width or r1.height != r2.height:
        raise InvalidArgument("Rasters have different dimensions: %d x %d and %d x %d" %
                              (r1.width, r1.height, r2.width, r2.height))
