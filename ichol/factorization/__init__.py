from ._helper_classes import *
from .csc_ichol import *
