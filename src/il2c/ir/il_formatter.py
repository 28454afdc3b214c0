'''IL Formatter - Format the IL tree for debugging'''

from typing import List
from ..common import *
from .il import *


class ILFormatter:
    '''Format IL functions for debugging'''

    @classmethod
    def format_function(cls, func: ILFunction) -> List[str]:
        '''Format an IL function for debugging'''
        lines = [f'function {func.name}']

        for var in func.variables:
            lines.append(f'{default_indent()}var {var.name}: {var.type}')

        lines.extend(cls.format_instruction(func.body, indent = 1))
        return lines

    @classmethod
    def format_instruction(cls, inst: ILInstruction, indent: int = 0) -> List[str]:
        '''Format an instruction, expanding nested structure over several lines'''
        indent_str = default_indent() * indent
        lines = []

        if isinstance(inst, BlockContainer):
            lines.append(f'{indent_str}BlockContainer {inst.label} ({inst.kind}) {{')
            for block in inst.blocks:
                lines.extend(cls.format_instruction(block, indent + 1))
            lines.append(f'{indent_str}}}')

        elif isinstance(inst, Block):
            lines.append(f'{indent_str}Block {inst.label} ({inst.kind}) {{')
            for child in inst.instructions:
                lines.extend(cls.format_instruction(child, indent + 1))
            lines.append(f'{indent_str}}}')

        elif isinstance(inst, IfInstruction):
            lines.append(f'{indent_str}if ({inst.condition}) {{')
            lines.extend(cls.format_instruction(inst.true_inst, indent + 1))

            if not inst.false_inst.is_empty_statement():
                lines.append(f'{indent_str}}} else {{')
                lines.extend(cls.format_instruction(inst.false_inst, indent + 1))

            lines.append(f'{indent_str}}}')

        else:
            lines.append(f'{indent_str}{inst}')

        return lines


def format_il(func: ILFunction) -> str:
    return '\n'.join(ILFormatter.format_function(func))
