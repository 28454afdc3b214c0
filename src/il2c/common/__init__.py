from .config import *
from .enum import *
from .errors import *
