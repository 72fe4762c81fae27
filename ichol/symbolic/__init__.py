from .pattern import *
