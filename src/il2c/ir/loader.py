'''IL provider - builds IL functions from a JSON5 module document

Document layout:

    {
        functions: [
            {
                name: 'Main',
                variables: [ { name: 'i', type: 'I4' } ],
                body: { op: 'BlockContainer', kind: 'Normal', blocks: [ ... ] },
            },
        ],
    }

Every node is an object with an 'op' key. Branch targets are block labels of
the innermost enclosing container; leave targets are labels of an enclosing
container and default to the innermost one.
'''

import json5
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional
from ..common import *
from .il import *

logger = logging.getLogger(__name__)

INT32_MIN = -2 ** 31
INT32_MAX = 2 ** 31 - 1


class ILModuleLoader:
    '''Builds ILFunction trees from parsed module data'''

    def __init__(self, settings: Optional[DecompilerSettings] = None):
        self.settings = settings or DecompilerSettings()
        self._variables: Dict[str, ILVariable] = {}
        self._containers: List[BlockContainer] = []
        self._builders = {
            'nop':              self._build_nop,
            'ldc.i4':           self._build_ldc_i4,
            'ldloc':            self._build_ldloc,
            'stloc':            self._build_stloc,
            'comp':             self._build_comp,
            'binary':           self._build_binary,
            'if':               self._build_if,
            'call':             self._build_call,
            'br':               self._build_branch,
            'leave':            self._build_leave,
            'Block':            self._build_block,
            'BlockContainer':   self._build_container,
        }

    def loads(self, text: str) -> List[ILFunction]:
        '''Parse a module document and return the functions selected by the settings'''
        try:
            data = json5.loads(text)

        except ValueError as e:
            raise ILFormatError(f'Invalid JSON5 module: {e}') from e

        return self.build_module(data)

    def load(self, path: str | Path) -> List[ILFunction]:
        with open(path, 'r', encoding = 'utf-8') as f:
            return self.loads(f.read())

    def build_module(self, data: Any) -> List[ILFunction]:
        if not isinstance(data, dict) or not isinstance(data.get('functions'), list):
            raise ILFormatError("Module must be an object with a 'functions' list")

        functions = []
        for func_data in data['functions']:
            name = func_data.get('name') if isinstance(func_data, dict) else None
            if not isinstance(name, str):
                raise ILFormatError('Every function needs a name')

            if self.settings.method_filter not in name:
                logger.debug(f'Skipping {name}: does not match {self.settings.method_filter!r}')
                continue

            functions.append(self.build_function(func_data))

        return functions

    def build_function(self, data: Dict[str, Any]) -> ILFunction:
        name = data.get('name')
        if not isinstance(name, str):
            raise ILFormatError('Every function needs a name')

        self._variables = {}
        self._containers = []

        variables = []
        for index, var_data in enumerate(data.get('variables', [])):
            var = self._build_variable(var_data, index)
            if var.name in self._variables:
                raise ILFormatError(f'{name}: variable {var.name} declared twice')

            self._variables[var.name] = var
            variables.append(var)

        if 'body' not in data:
            raise ILFormatError(f'{name}: missing body')

        body = self._build_node(data['body'])
        if not isinstance(body, (Block, BlockContainer)):
            raise ILFormatError(f'{name}: body must be a Block or BlockContainer, got {body.opcode}')

        logger.debug(f'Loaded {name}: {len(variables)} variables')
        return ILFunction(name, variables, body)

    # ========================================================================
    # Helpers
    # ========================================================================

    @classmethod
    def _parse_enum(cls, enum_cls, value: Any, what: str):
        if not isinstance(value, str):
            raise ILFormatError(f'{what} must be a string, got {value!r}')

        try:
            return enum_cls.from_name(value)

        except KeyError:
            raise ILFormatError(f'Unknown {what} {value!r}') from None

    @classmethod
    def _require(cls, data: Dict[str, Any], key: str) -> Any:
        if key not in data:
            raise ILFormatError(f"'{data['op']}' node is missing '{key}'")
        return data[key]

    def _build_variable(self, data: Any, index: int) -> ILVariable:
        if not isinstance(data, dict) or not isinstance(data.get('name'), str):
            raise ILFormatError(f'Variable #{index} needs a name')

        var_type = self._parse_enum(PrimitiveType, data.get('type'), 'variable type')
        return ILVariable(data['name'], var_type, index)

    def _lookup_variable(self, data: Dict[str, Any]) -> ILVariable:
        name = self._require(data, 'var')
        try:
            return self._variables[name]

        except (KeyError, TypeError):
            raise ILFormatError(f'Undeclared variable {name!r}') from None

    def _build_node(self, data: Any) -> ILInstruction:
        if not isinstance(data, dict) or 'op' not in data:
            raise ILFormatError(f"Expected a node object with an 'op' key, got {data!r}")

        builder = self._builders.get(data['op'])
        if builder is None:
            raise ILFormatError(f"Unknown op {data['op']!r}")

        return builder(data)

    def _fill_block(self, block: Block, data: Dict[str, Any]):
        for inst_data in data.get('instructions', []):
            inst = self._build_node(inst_data)
            if self.settings.remove_dead_code and inst.match_nop():
                continue

            block.add_instruction(inst)

    # ========================================================================
    # Node builders
    # ========================================================================

    def _build_nop(self, data: Dict[str, Any]) -> ILInstruction:
        return Nop()

    def _build_ldc_i4(self, data: Dict[str, Any]) -> ILInstruction:
        value = self._require(data, 'value')
        if not isinstance(value, int) or isinstance(value, bool):
            raise ILFormatError(f'ldc.i4 needs an integer value, got {value!r}')

        if not INT32_MIN <= value <= INT32_MAX:
            raise ILFormatError(f'ldc.i4 value {value} is outside the int32 range')

        return LdcI4(value)

    def _build_ldloc(self, data: Dict[str, Any]) -> ILInstruction:
        return LdLoc(self._lookup_variable(data))

    def _build_stloc(self, data: Dict[str, Any]) -> ILInstruction:
        var = self._lookup_variable(data)
        return StLoc(var, self._build_node(self._require(data, 'value')))

    def _build_comp(self, data: Dict[str, Any]) -> ILInstruction:
        kind = self._parse_enum(ComparisonKind, self._require(data, 'kind'), 'comparison kind')
        return Comp(kind, self._build_node(self._require(data, 'left')), self._build_node(self._require(data, 'right')))

    def _build_binary(self, data: Dict[str, Any]) -> ILInstruction:
        operator = self._parse_enum(BinaryNumericOperator, self._require(data, 'operator'), 'binary operator')
        return BinaryNumericInstruction(
            operator,
            self._build_node(self._require(data, 'left')),
            self._build_node(self._require(data, 'right')),
        )

    def _build_if(self, data: Dict[str, Any]) -> ILInstruction:
        condition = self._build_node(self._require(data, 'condition'))
        true_inst = self._build_node(self._require(data, 'true'))
        false_inst = self._build_node(data['false']) if data.get('false') is not None else None
        return IfInstruction(condition, true_inst, false_inst)

    def _build_call(self, data: Dict[str, Any]) -> ILInstruction:
        args = data.get('args', [])
        if not isinstance(args, list):
            raise ILFormatError(f'call args must be a list, got {args!r}')

        return Call([self._build_node(arg) for arg in args], data.get('method', 'print'))

    def _build_branch(self, data: Dict[str, Any]) -> ILInstruction:
        label = self._require(data, 'target')
        if not self._containers:
            raise ILFormatError(f'br {label} outside of a block container')

        for block in self._containers[-1].blocks:
            if block.label == label:
                return Branch(block)

        raise ILFormatError(f'br target {label!r} is not a block of {self._containers[-1].label}')

    def _build_leave(self, data: Dict[str, Any]) -> ILInstruction:
        if not self._containers:
            raise ILFormatError('leave outside of a block container')

        label = data.get('target')
        value = self._build_node(data['value']) if data.get('value') is not None else None

        if label is None:
            return Leave(self._containers[-1], value)

        for container in reversed(self._containers):
            if container.label == label:
                return Leave(container, value)

        raise ILFormatError(f'leave target {label!r} is not an enclosing container')

    def _build_block(self, data: Dict[str, Any]) -> ILInstruction:
        kind = self._parse_enum(BlockKind, data.get('kind', 'ControlFlow'), 'block kind')
        block = Block(kind, label = data.get('label'))
        self._fill_block(block, data)
        return block

    def _build_container(self, data: Dict[str, Any]) -> ILInstruction:
        kind = self._parse_enum(ContainerKind, data.get('kind', 'Normal'), 'container kind')
        container = BlockContainer(kind, label = data.get('label') or f'BlockContainer{len(self._containers)}')

        blocks_data = data.get('blocks', [])
        if not isinstance(blocks_data, list):
            raise ILFormatError(f'{container.label}: blocks must be a list')

        # Create all blocks first so branches may target later blocks
        for index, block_data in enumerate(blocks_data):
            if not isinstance(block_data, dict):
                raise ILFormatError(f'{container.label}: block #{index} is not an object')

            kind = self._parse_enum(BlockKind, block_data.get('kind', 'ControlFlow'), 'block kind')
            container.add_block(Block(kind, label = block_data.get('label') or f'IL_{index:04x}'))

        self._containers.append(container)
        try:
            for block, block_data in zip(container.blocks, blocks_data):
                self._fill_block(block, block_data)

        finally:
            self._containers.pop()

        return container


def loads_module(text: str, settings: Optional[DecompilerSettings] = None) -> List[ILFunction]:
    return ILModuleLoader(settings).loads(text)


def load_module(path: str | Path, settings: Optional[DecompilerSettings] = None) -> List[ILFunction]:
    '''Load the functions of a JSON5 module file selected by settings.method_filter'''
    return ILModuleLoader(settings).load(path)
