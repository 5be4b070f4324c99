""" rasterlib processing components. These are the processing components exposed to the instruction
workflows

"""
__all__ = [
    'commands',
    'filters',
    'raster',
    'simulation']

from .commands import *
from .filters import *
from .raster import *
from .simulation import *
