'''Code Generators'''

from .c import *

__all__ = [
    'CGenerator',
    'generate_c',
    'write_c',
]
