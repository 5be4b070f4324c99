""" Functions for operations on Rasters: creation, brightness, flips, greyscale, channel split and combine,
statistics and display, and conversion to and from external formats.

"""
from .codec import *
from .operations import *
