#!/usr/bin/env python3

import contextlib
import io
import os
import unittest

import run

PROGRAMS = os.path.join(os.path.dirname(__file__), 'programs')

class TestRun(unittest.TestCase):
    def _main(self, *args: str) -> tuple[int | None, str, str]:
        out = io.StringIO()
        err = io.StringIO()
        with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
            status = run.main(['run.py', *args])
        return status, out.getvalue(), err.getvalue()

    def _program(self, name: str) -> str:
        return os.path.join(PROGRAMS, name)

    def test_example(self):
        status, out, err = self._main('--example')
        self.assertIsNone(status)
        self.assertEqual(out, '1\n')
        self.assertEqual(err, '')

    def test_file(self):
        status, out, _ = self._main(self._program('sum.bvm'))
        self.assertIsNone(status)
        self.assertEqual(out, '15\n')

    def test_trace(self):
        status, out, err = self._main('--trace', '--example')
        self.assertIsNone(status)
        self.assertEqual(out, '1\n')
        self.assertEqual(err.count('Instruction Pointer:'), 9)
        self.assertTrue(err.startswith('Instruction Pointer: 0\nCurrent Instruction: iconst 10\n'))

    def test_dis(self):
        status, out, _ = self._main('--dis', self._program('sum.bvm'))
        self.assertIsNone(status)
        lines = out.splitlines()
        self.assertEqual(len(lines), 18)
        self.assertEqual(lines[0], '0000 iconst 5')
        self.assertEqual(lines[6], '0006 if_icmpeq 16')
        self.assertEqual(lines[17], '0017 ireturn')

    def test_runtime_error(self):
        status, out, err = self._main(self._program('divzero.bvm'))
        self.assertEqual(status, 1)
        self.assertEqual(out, '')
        self.assertTrue(err.endswith('divzero.bvm:2: error: division by zero\n'))

    def test_decode_error(self):
        status, _, err = self._main(self._program('typo.bvm'))
        self.assertEqual(status, 1)
        self.assertIn('typo.bvm:3: error: unknown opcode `iret`', err)

    def test_locals_option(self):
        status, _, err = self._main('--locals', '0', '--example')
        self.assertEqual(status, 1)
        self.assertIn('<example>:3: error: local 0 out of range', err)
        status, _, err = self._main('--locals', '-1', '--example')
        self.assertEqual(status, 1)
        self.assertIn('must not be negative', err)

    def test_no_file(self):
        status, _, err = self._main()
        self.assertEqual(status, 1)
        self.assertEqual(err, 'error: no file provided\n')

    def test_missing_file(self):
        status, _, err = self._main(self._program('nonexistent.bvm'))
        self.assertEqual(status, 1)
        self.assertTrue(err.startswith('error: '))
        self.assertIn('nonexistent.bvm', err)

if __name__ == '__main__':
    unittest.main()
