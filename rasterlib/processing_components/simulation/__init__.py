""" Simulation of test Rasters

"""
from .testing_support import *
