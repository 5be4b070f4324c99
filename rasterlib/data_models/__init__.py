""" rasterlib data models: Pixel, Raster, RasterStore, QA, the error classes and parameter handling

"""
from .errors import *
from .memory_data_models import *
from .parameters import *
