from .exceptions import *
from .symbolic import *
from .factorization import *
