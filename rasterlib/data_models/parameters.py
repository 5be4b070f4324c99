"""We use the standard kwargs mechanism for arguments. For example::

    raster = import_raster_from_file('koala.png', max_channel=255)

get_parameter picks out the value of a keyword, or returns the default.

Paths to data and results are resolved relative to the project root. The environment variable
RASTERLIB overrides the root and RASTERLIB_DATA overrides the data directory.

"""

__all__ = ['rasterlib_path', 'rasterlib_data_path', 'get_parameter']

import os


def rasterlib_path(path):
    """Converts a path that might be relative to the rasterlib root into an absolute path::

        rasterlib_path('test_results')
        '/Users/jane/Code/rasterlib/test_results'

    :param path:
    :return: absolute path
    """
    project_root = os.path.abspath(os.path.join(os.path.dirname(os.path.realpath(__file__)), "..", ".."))
    rasterlibhome = os.getenv('RASTERLIB', project_root)
    return os.path.join(rasterlibhome, path)


def rasterlib_data_path(path):
    """Converts a path that might be relative to the rasterlib data directory into an absolute path::

        rasterlib_data_path('images/tiny.ppm')
        '/Users/jane/Code/rasterlib/data/images/tiny.ppm'

    :param path:
    :return: absolute path
    """
    datahome = os.getenv('RASTERLIB_DATA', rasterlib_path('data'))
    return os.path.join(datahome, path)


def get_parameter(kwargs, key, default=None):
    """ Get a specified named value for this (calling) function

    The parameter is searched for in kwargs

    :param kwargs: Parameter dictionary
    :param key: Key e.g. 'max_channel'
    :param default: Default value
    :return: result
    """

    if kwargs is None:
        return default

    value = default
    if key in kwargs.keys():
        value = kwargs[key]
    return value
