""" Processing workflows using the processing components

"""

from .serial import *
