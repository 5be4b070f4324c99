""" Named commands wrapping the Raster filters

"""
from .commands import *
