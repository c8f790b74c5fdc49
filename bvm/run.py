#!/usr/bin/env python3

import bvminst
import bvminterpreter
import bvmparser

import optparse
import sys

from typing import Optional

EXAMPLE = [
    'iconst 10',
    'iconst 20',
    'iadd',
    'istore 0',
    'iload 0',
    'iconst 30',
    'if_icmpeq 9',
    'iconst 0',
    'goto 10',
    'iconst 1',
    'ireturn',
]

def parse_args(argv: list[str]) -> tuple[optparse.Values, list[str]]:
    usage = 'usage: %prog [options] [filename]'
    p = optparse.OptionParser(usage=usage)
    p.add_option('--example',
                 action='store_true',
                 default=False,
                 help='run the built-in example program'
                 )
    p.add_option('--trace',
                 action='store_true',
                 default=False,
                 help='display the machine state step by step'
                 )
    p.add_option('--dis',
                 action='store_true',
                 default=False,
                 help='disassemble program'
                 )
    p.add_option('--locals',
                 metavar='N',
                 action='store',
                 type='int',
                 default=bvminterpreter.NLOCALS,
                 dest='nlocals',
                 help='size of the local variable table [default: %default]'
                 )
    return p.parse_args(argv)

def run(program: list[str], nlocals: int, trace: bool) -> Optional[int]:
    prog = bvmparser.decode_program(program)
    sink = bvminterpreter.print_trace if trace else None
    vm = bvminterpreter.Vm(prog, nlocals, sink, program)
    result = vm.run()
    print(result)

def dis(program: list[str]) -> Optional[int]:
    prog = bvmparser.decode_program(program)
    for i, inst in enumerate(prog):
        print(f'{i:04} {bvminst.disassemble(inst)}')

def main(argv: list[str]) -> Optional[int]:
    options, args = parse_args(argv)
    if options.nlocals < 0:
        print('error: --locals must not be negative', file=sys.stderr)
        return 1
    try:
        if options.example:
            filename = '<example>'
            program = EXAMPLE
        else:
            filename = args[1]
            program = bvmparser.read_file(filename)
    except IndexError:
        print('error: no file provided', file=sys.stderr)
        return 1
    except OSError as os_err:
        print(f'error: {os_err.filename}: {os_err.strerror}', file=sys.stderr)
        return 1
    try:
        if options.dis:
            return dis(program)
        else:
            return run(program, options.nlocals, options.trace)
    except bvminst.BVMError as e:
        print(f'{filename}:{e.args[0]}', file=sys.stderr)
        return 1

if __name__ == '__main__':
    status = main(sys.argv)
    sys.exit(status)
