'''IL - Structured, goto-free IL tree consumed by the C generator'''

from typing import List, Optional, Tuple
from ..common import *


class OpCode(IntEnum2):
    '''IL instruction opcodes'''

    # Statements
    NOP                         = 0
    STLOC                       = 1
    BRANCH                      = 2
    LEAVE                       = 3
    IF_INSTRUCTION              = 4
    CALL                        = 5

    # Structure
    BLOCK                       = 10
    BLOCK_CONTAINER             = 11

    # Expressions
    LDC_I4                      = 20
    LDLOC                       = 21
    COMP                        = 22
    BINARY_NUMERIC              = 23


class ContainerKind(IntEnum2):
    '''Kind of a block container, decided by upstream loop detection'''
    NORMAL                      = 0
    LOOP                        = 1
    SWITCH                      = 2
    WHILE                       = 3
    DO_WHILE                    = 4
    FOR                         = 5


class BlockKind(IntEnum2):
    '''Kind of a block'''
    CONTROL_FLOW                = 0
    ARRAY_INITIALIZER           = 1
    COLLECTION_INITIALIZER      = 2
    OBJECT_INITIALIZER          = 3
    CALL_INLINE_ASSIGN          = 4
    CALL_WITH_NAMED_ARGS        = 5


class ComparisonKind(IntEnum2):
    EQUALITY                    = 0
    INEQUALITY                  = 1
    LESS_THAN                   = 2
    LESS_THAN_OR_EQUAL          = 3
    GREATER_THAN                = 4
    GREATER_THAN_OR_EQUAL       = 5


class BinaryNumericOperator(IntEnum2):
    ADD                         = 0
    SUB                         = 1
    MUL                         = 2
    DIV                         = 3
    REM                         = 4
    BIT_AND                     = 5
    BIT_OR                      = 6
    BIT_XOR                     = 7
    SHIFT_LEFT                  = 8
    SHIFT_RIGHT                 = 9


class PrimitiveType(IntEnum2):
    '''Variable types as resolved upstream'''
    I1                          = 0
    I2                          = 1
    I4                          = 2
    I8                          = 3
    U1                          = 4
    U2                          = 5
    U4                          = 6
    U8                          = 7
    R4                          = 8
    R8                          = 9
    BOOL                        = 10
    STRING                      = 11
    OBJECT                      = 12


# IL notation, used by __str__ and the IL dump
COMPARISON_KIND_STR = {
    ComparisonKind.EQUALITY:                '==',
    ComparisonKind.INEQUALITY:              '!=',
    ComparisonKind.LESS_THAN:               '<',
    ComparisonKind.LESS_THAN_OR_EQUAL:      '<=',
    ComparisonKind.GREATER_THAN:            '>',
    ComparisonKind.GREATER_THAN_OR_EQUAL:   '>=',
}


# ============================================================================
# Variables
# ============================================================================

class ILVariable:
    '''Local variable with its resolved type'''

    def __init__(self, name: str, type: PrimitiveType, index: Optional[int] = None):
        self.name = name
        self.type = type
        self.index = index

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f'ILVariable({self.name}: {self.type})'

    def __eq__(self, other) -> bool:
        if not isinstance(other, ILVariable):
            return False
        return self.name == other.name and self.index == other.index

    def __hash__(self) -> int:
        return hash(self.name)


# ============================================================================
# Base class
# ============================================================================

class ILInstruction:
    '''Base class for all IL instructions

    The match_* queries classify a node: each returns the node's parts when
    the node is of the queried form and None otherwise.
    '''

    def __init__(self, opcode: OpCode):
        self.opcode = opcode

    def match_stloc(self) -> Optional[Tuple[ILVariable, 'ILInstruction']]:
        return None

    def match_branch(self) -> Optional['Block']:
        return None

    def match_if_instruction(self) -> Optional[Tuple['ILInstruction', 'ILInstruction', 'ILInstruction']]:
        return None

    def match_leave(self) -> Optional[Tuple['BlockContainer', 'ILInstruction']]:
        return None

    def match_ldc_i4(self) -> Optional[int]:
        return None

    def match_ldloc(self) -> Optional[ILVariable]:
        return None

    def match_binary_numeric_instruction(self) -> Optional[Tuple[BinaryNumericOperator, 'ILInstruction', 'ILInstruction']]:
        return None

    def match_nop(self) -> bool:
        return False

    def is_empty_statement(self) -> bool:
        '''True when the instruction lowers to nothing (an absent else-arm)'''
        return False

    def __str__(self) -> str:
        return self.opcode.name.lower()

    def __repr__(self) -> str:
        return f'{self.__class__.__name__}()'


# ============================================================================
# Expressions
# ============================================================================

class LdcI4(ILInstruction):
    '''32-bit integer constant'''

    def __init__(self, value: int):
        super().__init__(OpCode.LDC_I4)
        self.value = value

    def match_ldc_i4(self) -> Optional[int]:
        return self.value

    def __str__(self) -> str:
        return f'ldc.i4 {self.value}'

    def __repr__(self) -> str:
        return f'LdcI4({self.value})'


class LdLoc(ILInstruction):
    '''Load of a local variable'''

    def __init__(self, variable: ILVariable):
        super().__init__(OpCode.LDLOC)
        self.variable = variable

    def match_ldloc(self) -> Optional[ILVariable]:
        return self.variable

    def __str__(self) -> str:
        return f'ldloc {self.variable}'

    def __repr__(self) -> str:
        return f'LdLoc({self.variable.name})'


class Comp(ILInstruction):
    '''Comparison: left kind right'''

    def __init__(self, kind: ComparisonKind, left: ILInstruction, right: ILInstruction):
        super().__init__(OpCode.COMP)
        self.kind = kind
        self.left = left
        self.right = right

    def __str__(self) -> str:
        return f'comp({self.left} {COMPARISON_KIND_STR[self.kind]} {self.right})'

    def __repr__(self) -> str:
        return f'Comp({self.kind})'


class BinaryNumericInstruction(ILInstruction):
    '''Binary arithmetic: left operator right'''

    def __init__(self, operator: BinaryNumericOperator, left: ILInstruction, right: ILInstruction):
        super().__init__(OpCode.BINARY_NUMERIC)
        self.operator = operator
        self.left = left
        self.right = right

    def match_binary_numeric_instruction(self) -> Optional[Tuple[BinaryNumericOperator, ILInstruction, ILInstruction]]:
        return self.operator, self.left, self.right

    def __str__(self) -> str:
        return f'binary.{self.operator.name.lower()}({self.left}, {self.right})'

    def __repr__(self) -> str:
        return f'BinaryNumericInstruction({self.operator})'


# ============================================================================
# Statements
# ============================================================================

class Nop(ILInstruction):
    '''Empty statement, also the canonical absent else-arm'''

    def __init__(self):
        super().__init__(OpCode.NOP)

    def match_nop(self) -> bool:
        return True

    def is_empty_statement(self) -> bool:
        return True


class StLoc(ILInstruction):
    '''Store to a local variable: variable = value'''

    def __init__(self, variable: ILVariable, value: ILInstruction):
        super().__init__(OpCode.STLOC)
        self.variable = variable
        self.value = value

    def match_stloc(self) -> Optional[Tuple[ILVariable, ILInstruction]]:
        return self.variable, self.value

    def __str__(self) -> str:
        return f'stloc {self.variable}({self.value})'

    def __repr__(self) -> str:
        return f'StLoc({self.variable.name})'


class Branch(ILInstruction):
    '''Unconditional jump to a block of the enclosing container'''

    def __init__(self, target_block: 'Block'):
        super().__init__(OpCode.BRANCH)
        self.target_block = target_block

    def match_branch(self) -> Optional['Block']:
        return self.target_block

    def __str__(self) -> str:
        return f'br {self.target_block.label}'

    def __repr__(self) -> str:
        return f'Branch({self.target_block.label})'


class IfInstruction(ILInstruction):
    '''Structured conditional: if (condition) true_inst else false_inst'''

    def __init__(self, condition: ILInstruction, true_inst: ILInstruction, false_inst: Optional[ILInstruction] = None):
        super().__init__(OpCode.IF_INSTRUCTION)
        self.condition = condition
        self.true_inst = true_inst
        self.false_inst = false_inst if false_inst is not None else Nop()

    def match_if_instruction(self) -> Optional[Tuple[ILInstruction, ILInstruction, ILInstruction]]:
        return self.condition, self.true_inst, self.false_inst

    def __str__(self) -> str:
        if self.false_inst.is_empty_statement():
            return f'if ({self.condition}) {self.true_inst}'
        return f'if ({self.condition}) {self.true_inst} else {self.false_inst}'

    def __repr__(self) -> str:
        return f'IfInstruction(cond={self.condition})'


class Call(ILInstruction):
    '''Call of the external print-integer primitive'''

    def __init__(self, arguments: List[ILInstruction], method: str = 'print'):
        super().__init__(OpCode.CALL)
        self.arguments = arguments
        self.method = method

    def __str__(self) -> str:
        args_str = ', '.join(str(arg) for arg in self.arguments)
        return f'call {self.method}({args_str})'

    def __repr__(self) -> str:
        return f'Call({self.method}, {len(self.arguments)} args)'


class Leave(ILInstruction):
    '''Structured early exit from target_container'''

    def __init__(self, target_container: 'BlockContainer', value: Optional[ILInstruction] = None):
        super().__init__(OpCode.LEAVE)
        self.target_container = target_container
        self.value = value if value is not None else Nop()

    def match_leave(self) -> Optional[Tuple['BlockContainer', ILInstruction]]:
        return self.target_container, self.value

    def __str__(self) -> str:
        if self.value.match_nop():
            return f'leave {self.target_container.label}'
        return f'leave {self.target_container.label} ({self.value})'

    def __repr__(self) -> str:
        return f'Leave({self.target_container.label})'


# ============================================================================
# Structure
# ============================================================================

class Block(ILInstruction):
    '''Ordered sequence of instructions'''

    def __init__(self, kind: BlockKind = BlockKind.CONTROL_FLOW, instructions: Optional[List[ILInstruction]] = None,
                 label: Optional[str] = None):
        super().__init__(OpCode.BLOCK)
        self.kind = kind
        self.instructions = instructions or []
        self.label = label or 'Block'

    def add_instruction(self, inst: ILInstruction):
        self.instructions.append(inst)

    def is_empty_statement(self) -> bool:
        return self.kind == BlockKind.CONTROL_FLOW and all(inst.is_empty_statement() for inst in self.instructions)

    def __str__(self) -> str:
        return f'Block {self.label} ({len(self.instructions)} instructions)'

    def __repr__(self) -> str:
        return f'Block({self.label}, {self.kind})'


class BlockContainer(ILInstruction):
    '''Structural scope made of blocks; execution starts at the first block'''

    def __init__(self, kind: ContainerKind = ContainerKind.NORMAL, blocks: Optional[List[Block]] = None,
                 label: Optional[str] = None):
        super().__init__(OpCode.BLOCK_CONTAINER)
        self.kind = kind
        self.blocks = blocks or []
        self.label = label or 'BlockContainer'

    def add_block(self, block: Block):
        self.blocks.append(block)

    def __str__(self) -> str:
        return f'BlockContainer {self.label} ({self.kind})'

    def __repr__(self) -> str:
        return f'BlockContainer({self.label}, {self.kind})'


# ============================================================================
# Function
# ============================================================================

class ILFunction:
    '''A function as handed over by the IL provider'''

    def __init__(self, name: str, variables: Optional[List[ILVariable]] = None, body: Optional[ILInstruction] = None):
        self.name = name
        self.variables: List[ILVariable] = variables or []
        self.body = body if body is not None else BlockContainer()

    def __str__(self) -> str:
        return f'ILFunction({self.name}, {len(self.variables)} variables)'

    def __repr__(self) -> str:
        return f'ILFunction({self.name})'
