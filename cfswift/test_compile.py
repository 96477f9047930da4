import io
import os
import os.path
import shutil
import tempfile
import unittest
import unittest.mock

import cf2swift
import cfswift.compile
from cfswift import location


GRAMMAR = '\n'.join([
    'comment "--" ;',
    'Prog. Program ::= [Stm] ;',
    'SExp. Stm ::= Exp ";" ;',
    'EAdd. Exp ::= Exp "+" Exp1 ;',
    'EVar. Exp1 ::= Ident ;',
    'EInt. Exp1 ::= Integer ;',
    'terminator Stm "" ;',
    'coercions Exp 1 ;',
    '',
])


class CompileTestCase(unittest.TestCase):
    def setUp(self):
        self.dir = tempfile.mkdtemp()
        self.out = io.StringIO()
        self.status = location.CompileStatus(out=self.out)

    def tearDown(self):
        shutil.rmtree(self.dir)

    def write_grammar(self, text, name='Calc.cf'):
        path = os.path.join(self.dir, name)
        with open(path, 'w') as f:
            f.write(text)
        return path

    def read(self, name):
        with open(os.path.join(self.dir, name)) as f:
            return f.read()


class TestCompile(CompileTestCase):
    def test_generates_both_files(self):
        path = self.write_grammar(GRAMMAR)
        cfswift.compile.compile_grammar(path, self.dir, 'CCalc', self.status)
        self.assertEqual(self.status.errors, 0)

        ast = self.read('AbstractSyntax.swift')
        self.assertTrue(ast.startswith('//\n//  AbstractSyntax.swift\n//  Generated by cf2swift from Calc.cf\n'))
        self.assertIn('public indirect enum Exp {\n    case eAdd(Exp, Exp)\n', ast)
        self.assertTrue(ast.endswith('}\n'))

        bridge = self.read('CCalcToSwiftBridge.swift')
        self.assertIn('import CCalc\n', bridge)
        self.assertIn('    switch value.kind {\n    case 0:\n        return .eAdd(', bridge)
        self.assertIn('if let cTree = CCalc.pProgram(file) {', bridge)

        self.assertIn('generated file AbstractSyntax.swift', self.out.getvalue())
        self.assertIn('generated file CCalcToSwiftBridge.swift', self.out.getvalue())

    def test_output_is_reproducible(self):
        path = self.write_grammar(GRAMMAR)
        first = cfswift.compile.compile_grammar(path, self.dir, 'CCalc', self.status)
        second = cfswift.compile.compile_grammar(path, self.dir, 'CCalc', self.status)
        self.assertEqual(first, second)

    def test_unchanged_files_are_not_rewritten(self):
        path = self.write_grammar(GRAMMAR)
        self.status.debug = True
        cfswift.compile.compile_grammar(path, self.dir, 'CCalc', self.status)
        cfswift.compile.compile_grammar(path, self.dir, 'CCalc', self.status)
        self.assertIn('file AbstractSyntax.swift is unchanged', self.out.getvalue())

    def test_extra_cases_and_boxing(self):
        path = self.write_grammar(GRAMMAR)
        cfswift.compile.compile_grammar(path, self.dir, 'CCalc', self.status, {'Stm': ['sNop']}, 'cycles')
        ast = self.read('AbstractSyntax.swift')
        self.assertIn('public enum Stm {\n    case sExp(Exp)\n    //additional cases\n    case sNop\n}', ast)
        self.assertIn('public enum Program {', ast)
        self.assertIn('public indirect enum Exp {', ast)

    def test_parse_error(self):
        path = self.write_grammar('EInt. Exp ::= Integer ;\nFoo Bar ::= ;\n')
        with self.assertRaises(location.HaltCompilation):
            cfswift.compile.compile_grammar(path, self.dir, 'CCalc', self.status)
        self.assertEqual(self.status.errors, 1)
        self.assertIn('Calc.cf:2: error: invalid rule', self.out.getvalue())
        self.assertIn('\nFoo Bar ::= ;\n', self.out.getvalue())
        self.assertFalse(os.path.exists(os.path.join(self.dir, 'AbstractSyntax.swift')))

    def test_inconsistent_grammar(self):
        path = self.write_grammar('EInt. Id ::= Integer ;\ntoken Id letter+ ;\n')
        with self.assertRaises(location.HaltCompilation):
            cfswift.compile.compile_grammar(path, self.dir, 'CCalc', self.status)
        self.assertIn('Calc.cf:2: error: type Id is declared both', self.out.getvalue())

    def test_missing_grammar(self):
        with self.assertRaises(location.HaltCompilation):
            cfswift.compile.compile_grammar(os.path.join(self.dir, 'nope.cf'), self.dir, 'CCalc', self.status)
        self.assertIn('cannot read grammar', self.out.getvalue())

    def test_grammar_not_utf8(self):
        path = os.path.join(self.dir, 'Calc.cf')
        with open(path, 'wb') as f:
            f.write(b'EInt. Exp ::= Integer ; -- \xff\xfe\n')
        with self.assertRaises(location.HaltCompilation):
            cfswift.compile.compile_grammar(path, self.dir, 'CCalc', self.status)
        self.assertEqual(self.status.errors, 1)
        self.assertIn('Calc.cf: error: cannot read grammar', self.out.getvalue())

    def test_output_not_utf8_is_replaced(self):
        path = self.write_grammar(GRAMMAR)
        with open(os.path.join(self.dir, 'AbstractSyntax.swift'), 'wb') as f:
            f.write(b'\xff\xfe')
        cfswift.compile.compile_grammar(path, self.dir, 'CCalc', self.status)
        self.assertEqual(self.status.errors, 0)
        self.assertIn('public indirect enum Exp {', self.read('AbstractSyntax.swift'))

    def test_write_failures_are_reported_per_file(self):
        path = self.write_grammar(GRAMMAR)
        # A directory in the way of the first output file.
        os.mkdir(os.path.join(self.dir, 'AbstractSyntax.swift'))
        with self.assertRaises(location.HaltCompilation):
            cfswift.compile.compile_grammar(path, self.dir, 'CCalc', self.status)
        self.assertEqual(self.status.errors, 1)
        self.assertIn('writing file at path', self.out.getvalue())
        self.assertTrue(os.path.isfile(os.path.join(self.dir, 'CCalcToSwiftBridge.swift')))


class TestCommandLine(CompileTestCase):
    def test_run(self):
        path = self.write_grammar(GRAMMAR)
        code = cf2swift.run([path, '-o', self.dir, '-m', ' CCalc ', '--extra-case', 'Stm=sNop'])
        self.assertEqual(code, 0)
        self.assertIn('case sNop', self.read('AbstractSyntax.swift'))
        self.assertTrue(os.path.isfile(os.path.join(self.dir, 'CCalcToSwiftBridge.swift')))

    def test_run_failure(self):
        path = self.write_grammar('EInt. Exp ::= Integer\n')
        code = cf2swift.run([path, '-o', self.dir])
        self.assertEqual(code, 1)

    def test_run_failure_on_bad_encoding(self):
        path = os.path.join(self.dir, 'Calc.cf')
        with open(path, 'wb') as f:
            f.write(b'EInt. Exp ::= Integer ; -- \xff\xfe\n')
        with unittest.mock.patch('sys.stdout', io.StringIO()) as out:
            code = cf2swift.run([path, '-o', self.dir])
        self.assertEqual(code, 1)
        self.assertIn('cannot read grammar', out.getvalue())

    def test_extra_case_argument(self):
        self.assertEqual(cf2swift.extra_case('Stm = case sNop'), ('Stm', 'case sNop'))
        self.assertEqual(cf2swift.group_extra_cases([('A', 'x'), ('B', 'y'), ('A', 'z')]),
                         {'A': ['x', 'z'], 'B': ['y']})

    def test_usage_errors(self):
        path = self.write_grammar(GRAMMAR)
        for argv in [
            [path, '-o', self.dir, '-m', '  '],
            [path, '-o', os.path.join(self.dir, 'missing')],
            [path, '--extra-case', 'Stm'],
            [path, '--box', 'some'],
        ]:
            with self.assertRaises(SystemExit):
                with unittest.mock.patch('sys.stderr', io.StringIO()):
                    cf2swift.parse_args(argv)


if __name__ == '__main__':
    unittest.main()
