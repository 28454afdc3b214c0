'''C Code Generator - structured IL to a C translation unit'''

import sys
import logging
from typing import List, Optional, TextIO
from ..common import *
from ..ir.il import *

logger = logging.getLogger(__name__)


C_INCLUDES = [
    'stdint.h',
    'stdbool.h',
    'stdio.h',
]

C_TYPES = {
    PrimitiveType.I4:   'int32_t',
    PrimitiveType.BOOL: 'bool',
}

C_COMPARISON_OPS = {
    ComparisonKind.GREATER_THAN_OR_EQUAL:   '>=',
    ComparisonKind.GREATER_THAN:            '>',
    ComparisonKind.LESS_THAN:               '<',
    ComparisonKind.EQUALITY:                '==',
}

# Only addition is supported: without further operators no operand ever needs parentheses
C_BINARY_OPS = {
    BinaryNumericOperator.ADD: '+',
}

PRINT_INT = 'printf("%d\\n", {0});'

EMPTY_STATEMENT = ';'


class CGenerator:
    '''Lowers IL functions to C

    Unsupported nodes, operators, kinds and types are replaced by an inline
    'Error: ...' diagnostic and lowering continues with the siblings. With
    strict=True the first UnsupportedConstructError propagates instead.
    '''

    def __init__(self, strict: bool = False):
        self.strict = strict

    def _recover(self, error: UnsupportedConstructError) -> str:
        if self.strict:
            raise error

        logger.warning(error.diagnostic)
        return error.diagnostic

    # ========================================================================
    # Declarations
    # ========================================================================

    @classmethod
    def _format_type(cls, var: ILVariable) -> str:
        c_type = C_TYPES.get(var.type)
        if c_type is None:
            raise UnsupportedConstructError(f'variable type {var.type} {var.name}')

        return c_type

    def format_declaration(self, var: ILVariable) -> str:
        try:
            return f'{self._format_type(var)} {var.name};'

        except UnsupportedConstructError as e:
            return self._recover(e)

    # ========================================================================
    # Expressions
    # ========================================================================

    def format_expr(self, expr: ILInstruction) -> str:
        try:
            return self._format_expr(expr)

        except UnsupportedConstructError as e:
            return self._recover(e)

    def _format_expr(self, expr: ILInstruction) -> str:
        value = expr.match_ldc_i4()
        if value is not None:
            return str(value)

        if isinstance(expr, Comp):
            op_str = C_COMPARISON_OPS.get(expr.kind)
            if op_str is None:
                raise UnsupportedConstructError(f'comparison {expr.kind}')

            return f'{self.format_expr(expr.left)} {op_str} {self.format_expr(expr.right)}'

        var = expr.match_ldloc()
        if var is not None:
            return var.name

        binary = expr.match_binary_numeric_instruction()
        if binary is not None:
            operator, left, right = binary
            op_str = C_BINARY_OPS.get(operator)
            if op_str is None:
                raise UnsupportedConstructError(f'binary operator {operator}')

            return f'{self.format_expr(left)} {op_str} {self.format_expr(right)}'

        raise UnsupportedConstructError(f'expression {expr.__class__.__name__}')

    # ========================================================================
    # Statements
    # ========================================================================

    def format_statement(self, inst: ILInstruction) -> str:
        try:
            return self._format_statement(inst)

        except UnsupportedConstructError as e:
            return self._recover(e)

    def _format_statement(self, inst: ILInstruction) -> str:
        store = inst.match_stloc()
        if store is not None:
            var, value = store
            return f'{var.name} = {self.format_expr(value)};'

        # Loop detection only leaves branches back to the loop head
        if inst.match_branch() is not None:
            return 'continue;'

        if_parts = inst.match_if_instruction()
        if if_parts is not None:
            condition, true_inst, false_inst = if_parts
            cond_str = self.format_expr(condition)
            true_str = self.format_statement(true_inst)

            if false_inst.is_empty_statement():
                return f'if ({cond_str}) {{ {true_str} }}'

            return f'if ({cond_str}) {{ {true_str} }} else {{ {self.format_statement(false_inst)} }}'

        if isinstance(inst, Call):
            if len(inst.arguments) != 1:
                raise UnsupportedConstructError(f'call {inst.method} with {len(inst.arguments)} arguments')

            return PRINT_INT.format(self.format_expr(inst.arguments[0]))

        if isinstance(inst, BlockContainer):
            return self._format_container(inst)

        if isinstance(inst, Block):
            return self.format_block(inst)

        leave = inst.match_leave()
        if leave is not None:
            container, value = leave
            if container.kind == ContainerKind.LOOP:
                return 'break;'

            elif container.kind == ContainerKind.NORMAL:
                return 'return;'

            raise UnsupportedConstructError(f'leave {container.kind} {value}')

        raise UnsupportedConstructError(f'statement {inst.__class__.__name__}')

    def _format_container(self, container: BlockContainer) -> str:
        if container.kind == ContainerKind.LOOP:
            head = 'while (1) {'

        elif container.kind == ContainerKind.NORMAL:
            head = '{'

        else:
            raise UnsupportedConstructError(f'block container {container.kind}')

        body = '\n'.join(self.format_block(block) for block in container.blocks)
        return f'{head} {body} }}'

    # ========================================================================
    # Blocks
    # ========================================================================

    def format_block(self, block: Block) -> str:
        try:
            if block.kind != BlockKind.CONTROL_FLOW:
                raise UnsupportedConstructError(f'block {block.kind}')

            if not block.instructions:
                return EMPTY_STATEMENT

            return '\n'.join(self.format_statement(inst) for inst in block.instructions)

        except UnsupportedConstructError as e:
            return self._recover(e)

    # ========================================================================
    # Functions
    # ========================================================================

    def generate_function(self, func: ILFunction) -> List[str]:
        logger.debug(f'Generating C for {func.name}')
        lines = [f'#include <{header}>' for header in C_INCLUDES]
        lines.append('')

        lines.append(f'void {func.name.lower()}() {{')

        for var in func.variables:
            lines.append(self.format_declaration(var))

        lines.append(self.format_statement(func.body))
        lines.append('}')
        return lines


def generate_c(func: ILFunction, strict: bool = False) -> str:
    lines = CGenerator(strict).generate_function(func)
    return '\n'.join(lines)


def write_c(func: ILFunction, stream: Optional[TextIO] = None, strict: bool = False):
    '''Write the translation unit for func to stream (stdout by default)'''
    stream = stream if stream is not None else sys.stdout
    stream.write(generate_c(func, strict) + '\n')
