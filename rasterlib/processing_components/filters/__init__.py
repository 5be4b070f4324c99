""" Filters applied to whole Rasters: kernel convolution, colour matrix transforms and dithering

"""
from .color_transform import *
from .convolution import *
from .dither import *
