#!/usr/bin/env python3

import sys

from typing import Callable, Iterable, NamedTuple, Optional, Sequence, TextIO, Union

import bvmparser

from bvminst import *

NLOCALS = 10

# persistent operand stack: pushing shares the cells below
class Cell(NamedTuple):
    value: int
    rest: Optional['Cell']
    depth: int

Stack = Optional[Cell]

def depth(stack: Stack) -> int:
    return 0 if stack is None else stack.depth

def push(stack: Stack, value: int) -> Cell:
    return Cell(value, stack, depth(stack) + 1)

def stack_of(values: Iterable[int]) -> Stack:
    stack: Stack = None
    for value in values:
        stack = push(stack, value)
    return stack

def flatten(stack: Stack) -> tuple[int, ...]:
    values = []
    while stack is not None:
        values.append(stack.value)
        stack = stack.rest
    values.reverse()
    return tuple(values)

class State(NamedTuple):
    ip: int
    stack: Stack
    locals: tuple[int, ...]

Returned = NamedTuple('Returned', value=int)

TraceRecord = NamedTuple('TraceRecord', ip=int, text=str, stack=tuple[int, ...], locals=tuple[int, ...])
TraceSink = Callable[[TraceRecord], None]

def print_trace(record: TraceRecord, file: Optional[TextIO] = None):
    if file is None:
        file = sys.stderr
    print(f'Instruction Pointer: {record.ip}', file=file)
    print(f'Current Instruction: {record.text}', file=file)
    print(f'Operand Stack: {list(record.stack)}', file=file)
    print(f'Local Variables: {list(record.locals)}', file=file)

def _wrap(value: int) -> int:
    return (value - INT_MIN) % 2**32 + INT_MIN

def _truncdiv(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return -q if (a < 0) != (b < 0) else q

def _require(state: State, n: int):
    available = depth(state.stack)
    if available < n:
        raise StackUnderflow(n, available, state.ip)

def _slot(state: State, index: int) -> int:
    if not 0 <= index < len(state.locals):
        raise IndexOutOfRange('local', index, state.ip)
    return index

def _target(state: State, target: int, length: int) -> int:
    # length itself is the end of the program
    if not 0 <= target <= length:
        raise IndexOutOfRange('jump target', target, state.ip)
    return target

def _pop2(state: State) -> tuple[int, int, Stack]:
    _require(state, 2)
    top = state.stack
    assert top is not None and top.rest is not None
    return top.value, top.rest.value, top.rest.rest

# a is popped first, b second
def _binary(f: Callable[[int, int], int]) -> Callable[[State, Inst, int], State]:
    def apply(state: State, _inst: Inst, _length: int) -> State:
        a, b, rest = _pop2(state)
        return State(state.ip + 1, push(rest, _wrap(f(a, b))), state.locals)
    return apply

def _branch(cond: Callable[[int, int], bool]) -> Callable[[State, Inst, int], State]:
    def apply(state: State, inst: Inst, length: int) -> State:
        a, b, rest = _pop2(state)
        if cond(a, b):
            ip = _target(state, inst.arg, length)
        else:
            ip = state.ip + 1
        return State(ip, rest, state.locals)
    return apply

def const(state: State, inst: Inst, _length: int) -> State:
    return State(state.ip + 1, push(state.stack, inst.arg), state.locals)

def load(state: State, inst: Inst, _length: int) -> State:
    i = _slot(state, inst.arg)
    return State(state.ip + 1, push(state.stack, state.locals[i]), state.locals)

def store(state: State, inst: Inst, _length: int) -> State:
    _require(state, 1)
    i = _slot(state, inst.arg)
    top = state.stack
    assert top is not None
    table = state.locals[:i] + (top.value,) + state.locals[i+1:]
    return State(state.ip + 1, top.rest, table)

def div(state: State, _inst: Inst, _length: int) -> State:
    a, b, rest = _pop2(state)
    if b == 0:
        raise DivisionByZero(state.ip)
    return State(state.ip + 1, push(rest, _wrap(_truncdiv(a, b))), state.locals)

def jmp(state: State, inst: Inst, length: int) -> State:
    return State(_target(state, inst.arg, length), state.stack, state.locals)

def ret(state: State, _inst: Inst, _length: int) -> Returned:
    _require(state, 1)
    assert state.stack is not None
    return Returned(state.stack.value)

code: list = [None] * len(Opcode)
code[Opcode.CONST] = const
code[Opcode.LOAD] = load
code[Opcode.STORE] = store
code[Opcode.ADD] = _binary(lambda a, b: a + b)
code[Opcode.SUB] = _binary(lambda a, b: a - b)
code[Opcode.MUL] = _binary(lambda a, b: a * b)
code[Opcode.DIV] = div
code[Opcode.JMP_EQ] = _branch(lambda a, b: a == b)
code[Opcode.JMP_NE] = _branch(lambda a, b: a != b)
code[Opcode.JMP] = jmp
code[Opcode.RET] = ret
assert all(f is not None for f in code), 'opcode without handler'

def initial_state(nlocals: int = NLOCALS) -> State:
    return State(0, None, (0,) * nlocals)

def step(prog: list[Inst], state: State) -> Union[State, Returned]:
    if not 0 <= state.ip < len(prog):
        raise IndexOutOfRange('instruction pointer', state.ip, state.ip)
    inst = prog[state.ip]
    return code[inst.op](state, inst, len(prog))

class Vm:
    def __init__(self, prog: list[Inst], nlocals: int = NLOCALS, trace: Optional[TraceSink] = None,
                 source: Optional[Sequence[str]] = None):
        if nlocals < 0:
            raise ValueError(f'negative local table size {nlocals}')
        if source is not None and len(source) != len(prog):
            raise ValueError('source lines do not match the program')
        self.prog = prog
        self.nlocals = nlocals
        self.trace = trace
        self.source = source

    def _text(self, ip: int) -> str:
        if self.source is None:
            return disassemble(self.prog[ip])
        return self.source[ip].strip()

    def run(self) -> int:
        prog = self.prog
        length = len(prog)
        state = initial_state(self.nlocals)
        while state.ip < length:
            if self.trace is not None:
                record = TraceRecord(state.ip, self._text(state.ip), flatten(state.stack), state.locals)
                self.trace(record)
            res = step(prog, state)
            if isinstance(res, Returned):
                return res.value
            state = res
        raise MissingReturn(state.ip)

def execute(program: Iterable[str], nlocals: int = NLOCALS, trace: Optional[TraceSink] = None) -> int:
    lines = list(program)
    prog = bvmparser.decode_program(lines)
    return Vm(prog, nlocals, trace, lines).run()
