#!/usr/bin/env python3

import pyparsing as pp

from typing import Iterable, TextIO

from bvminst import *

token = pp.Regex(r'(?:(?!//)\S)+')
token.set_name('token')
instruction = token('mnemonic') + pp.Group(token[...])('operands')
instruction.ignore(pp.dbl_slash_comment)
instruction.set_name('instruction')

integer = pp.Regex(r'[+-]?[0-9]+')
integer.set_parse_action(lambda toks: int(toks[0]))
integer.set_name('integer')

def decode(line: str, position: int = 0) -> Inst:
    try:
        res = instruction.parse_string(line, parse_all=True)
    except pp.ParseException:
        raise UnknownOpcode('', position) from None
    name = res['mnemonic']
    operands = res['operands'].as_list()
    try:
        op, takes_operand = mnemonics[name]
    except KeyError:
        raise UnknownOpcode(name, position) from None
    if not takes_operand:
        if operands:
            raise MalformedOperand(position, line.strip())
        return Inst(op, 0)
    if len(operands) != 1:
        raise MalformedOperand(position, line.strip())
    try:
        arg, = integer.parse_string(operands[0], parse_all=True)
    except pp.ParseException:
        raise MalformedOperand(position, line.strip()) from None
    if not INT_MIN <= arg <= INT_MAX:
        raise MalformedOperand(position, line.strip())
    return Inst(op, arg)

def decode_program(lines: Iterable[str]) -> list[Inst]:
    return [decode(line, i) for i, line in enumerate(lines)]

def _is_code(line: str) -> bool:
    line = line.strip()
    return line != '' and not line.startswith('//')

def read_program(f: TextIO) -> list[str]:
    return [line.strip() for line in f if _is_code(line)]

def read_file(filename: str) -> list[str]:
    with open(filename, 'r') as f:
        return read_program(f)
