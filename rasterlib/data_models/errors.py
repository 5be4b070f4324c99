"""The exceptions raised by rasterlib

All derive from RasterError. The concrete errors also derive from the closest built-in exception
so that callers catching ValueError or KeyError continue to work.
"""

__all__ = ['RasterError',
           'FormatError',
           'InvalidArgument',
           'NotFound']


class RasterError(Exception):
    """ Base class for rasterlib errors"""
    pass


class FormatError(RasterError, ValueError):
    """ Malformed or out-of-range raster content e.g. a bad PPM header
    """
    pass


class InvalidArgument(RasterError, ValueError):
    """ An argument that cannot be processed e.g. an unknown greyscale component
    """
    pass


class NotFound(RasterError, KeyError):
    """ A name that is not present in a store or registry
    """

    def __str__(self):
        # KeyError quotes its argument
        return Exception.__str__(self)
