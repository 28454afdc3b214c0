'''IL tree, IL provider and IL dump'''

from .il import *
from .il_formatter import *
from .loader import *

__all__ = [
    # Enums
    'OpCode',
    'ContainerKind',
    'BlockKind',
    'ComparisonKind',
    'BinaryNumericOperator',
    'PrimitiveType',

    # Variables
    'ILVariable',

    # Base class
    'ILInstruction',

    # Expressions
    'LdcI4',
    'LdLoc',
    'Comp',
    'BinaryNumericInstruction',

    # Statements
    'Nop',
    'StLoc',
    'Branch',
    'IfInstruction',
    'Call',
    'Leave',

    # Structure
    'Block',
    'BlockContainer',

    # Function
    'ILFunction',

    # Formatter
    'ILFormatter',
    'format_il',

    # Provider
    'ILModuleLoader',
    'load_module',
    'loads_module',
]
