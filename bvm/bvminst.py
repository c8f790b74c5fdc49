#!/usr/bin/env python3

from typing import NamedTuple
from enum import IntEnum, auto, unique

INT_MIN = -2**31
INT_MAX = 2**31 - 1

@unique
class Opcode(IntEnum):
    CONST = 0           # push arg
    LOAD = auto()       # push locals[arg]
    STORE = auto()      # locals[arg] <- pop
    ADD = auto()        # a <- pop; b <- pop; push a + b
    SUB = auto()        # a <- pop; b <- pop; push a - b
    MUL = auto()        # a <- pop; b <- pop; push a * b
    DIV = auto()        # a <- pop; b <- pop; push a / b
    JMP_EQ = auto()     # a <- pop; b <- pop; if a == b goto arg
    JMP_NE = auto()     # a <- pop; b <- pop; if a != b goto arg
    JMP = auto()        # goto arg
    RET = auto()        # return pop

Inst = NamedTuple('Inst', op=Opcode, arg=int)

# mnemonic -> (opcode, takes an operand)
mnemonics: dict[str, tuple[Opcode, bool]] = {
    'iconst': (Opcode.CONST, True),
    'bipush': (Opcode.CONST, True),
    'iload': (Opcode.LOAD, True),
    'istore': (Opcode.STORE, True),
    'iadd': (Opcode.ADD, False),
    'isub': (Opcode.SUB, False),
    'imul': (Opcode.MUL, False),
    'idiv': (Opcode.DIV, False),
    'if_icmpeq': (Opcode.JMP_EQ, True),
    'if_icmpne': (Opcode.JMP_NE, True),
    'goto': (Opcode.JMP, True),
    'ireturn': (Opcode.RET, False),
}

# canonical spelling of every opcode, bipush is only an input alias
names: dict[Opcode, str] = {}
for _name, (_op, _) in mnemonics.items():
    names.setdefault(_op, _name)

def has_operand(op: Opcode) -> bool:
    return mnemonics[names[op]][1]

def disassemble(inst: Inst) -> str:
    name = names[inst.op]
    if has_operand(inst.op):
        return f'{name} {inst.arg}'
    return name

class BVMError(RuntimeError):
    pass

class DecodeError(BVMError):
    def __init__(self, position: int, msg: str):
        super().__init__(f'{position}: error: {msg}')
        self.position = position

class UnknownOpcode(DecodeError):
    def __init__(self, mnemonic: str, position: int):
        msg = f'unknown opcode `{mnemonic}`' if mnemonic else 'empty instruction'
        super().__init__(position, msg)
        self.mnemonic = mnemonic

class MalformedOperand(DecodeError):
    def __init__(self, position: int, text: str):
        super().__init__(position, f'malformed operand in `{text}`')
        self.text = text

class ExecutionError(BVMError):
    def __init__(self, ip: int, msg: str):
        super().__init__(f'{ip}: error: {msg}')
        self.ip = ip

class StackUnderflow(ExecutionError):
    def __init__(self, required: int, available: int, ip: int):
        super().__init__(ip, f'stack underflow: expected at least {required} operands but found {available}')
        self.required = required
        self.available = available

class DivisionByZero(ExecutionError):
    def __init__(self, ip: int):
        super().__init__(ip, 'division by zero')

class IndexOutOfRange(ExecutionError):
    def __init__(self, kind: str, index: int, ip: int):
        super().__init__(ip, f'{kind} {index} out of range')
        self.kind = kind
        self.index = index

class MissingReturn(ExecutionError):
    def __init__(self, ip: int):
        super().__init__(ip, 'end of program reached without return')
