#!/usr/bin/env python3
'''
il2c command-line interface

Loads a JSON5 IL module and writes one C translation unit per selected function.
'''

import sys
import argparse
import logging
from typing import List, TextIO
from .common import *
from .ir import *
from .codegen import *

logger = logging.getLogger(__name__)


def emit_functions(functions: List[ILFunction], stream: TextIO, strict: bool = False, dump_il: bool = False):
    '''Write every function to stream, in order'''
    for func in functions:
        if dump_il:
            stream.write(format_il(func) + '\n')

        else:
            write_c(func, stream, strict)

        logger.debug(f'Emitted {func.name}')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog = 'il2c',
        description = 'Lower structured IL functions to C',
        parents = [Config.build_parser()],
    )

    parser.add_argument('input', help = 'IL module (JSON5)')
    parser.add_argument('-o', '--output', help = 'Write to this file instead of stdout')
    parser.add_argument('--dump-il', action = 'store_true', help = 'Print the loaded IL instead of C')

    return parser


def main(argv: List[str] = None) -> int:
    '''Main entry point'''
    if argv is None:
        argv = sys.argv[1:]

    args = build_parser().parse_args(argv)

    init_config(argv)
    config = get_config()

    logging.basicConfig(
        level = config.log_level,
        format = '%(levelname)s %(name)s: %(message)s',
    )

    try:
        functions = load_module(args.input, config.decompiler_settings())

    except OSError as e:
        logger.error(f'Cannot read {args.input}: {e}')
        return 1

    except ILFormatError as e:
        logger.error(f'{args.input}: {e}')
        return 1

    if not functions:
        logger.warning(f'No function in {args.input} matches {config.method_filter!r}')

    try:
        if args.output:
            with open(args.output, 'w', encoding = 'utf-8') as stream:
                emit_functions(functions, stream, config.strict, args.dump_il)

        else:
            emit_functions(functions, sys.stdout, config.strict, args.dump_il)

    except OSError as e:
        logger.error(f'Cannot write {args.output}: {e}')
        return 1

    except UnsupportedConstructError as e:
        logger.error(f'{args.input}: {e.diagnostic}')
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
