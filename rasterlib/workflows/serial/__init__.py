""" Serial workflows: instructions executed one after another against a RasterStore

"""
from .instructions import *
