'''
Test the il2c command-line entry point
'''

from contextlib import redirect_stdout
from pathlib import Path
import io
import sys
import tempfile
import unittest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from il2c.cli import main
from il2c.common import *

SAMPLE = str(Path(__file__).parent.parent / 'samples' / 'break_continue.json5')

UNSUPPORTED = '''
{
    functions: [
        {
            name: 'Main',
            variables: [ { name: 'd', type: 'R8' }, { name: 'i', type: 'I4' } ],
            body: { op: 'BlockContainer', blocks: [ { instructions: [
                { op: 'stloc', var: 'i', value: { op: 'ldc.i4', value: 1 } },
                { op: 'leave' },
            ] } ] },
        },
    ],
}
'''


class TestCLI(unittest.TestCase):

    def setUp(self):
        get_config().reset()
        self.tmp = tempfile.TemporaryDirectory()

    def tearDown(self):
        get_config().reset()
        self.tmp.cleanup()

    def run_main(self, *argv):
        out = io.StringIO()
        with redirect_stdout(out):
            status = main(list(argv))
        return status, out.getvalue()

    def write(self, name, text):
        path = Path(self.tmp.name) / name
        path.write_text(text, encoding = 'utf-8')
        return str(path)

    def test_emit_sample(self):
        status, out = self.run_main(SAMPLE)
        self.assertEqual(status, 0)
        self.assertTrue(out.startswith('#include <stdint.h>\n#include <stdbool.h>\n#include <stdio.h>\n'))
        self.assertIn('void main() {', out)
        self.assertNotIn('void helper() {', out)

    def test_all_methods(self):
        status, out = self.run_main(SAMPLE, '--method', '')
        self.assertEqual(status, 0)
        self.assertLess(out.index('void main() {'), out.index('void helper() {'))
        self.assertEqual(out.count('#include <stdio.h>'), 2)

    def test_output_file(self):
        target = Path(self.tmp.name) / 'main.c'
        status, out = self.run_main(SAMPLE, '-o', str(target))
        self.assertEqual(status, 0)
        self.assertEqual(out, '')
        self.assertIn('while (1) {', target.read_text(encoding = 'utf-8'))

    def test_dump_il(self):
        status, out = self.run_main(SAMPLE, '--dump-il')
        self.assertEqual(status, 0)
        self.assertTrue(out.startswith('function Main\n'))
        self.assertNotIn('#include', out)

    def test_unsupported_is_best_effort(self):
        status, out = self.run_main(self.write('bad.json5', UNSUPPORTED))
        self.assertEqual(status, 0)
        self.assertIn('Error: variable type R8 d\nint32_t i;', out)
        self.assertIn('{ i = 1;\nreturn; }', out)

    def test_strict_fails(self):
        status, out = self.run_main(self.write('bad.json5', UNSUPPORTED), '--strict')
        self.assertEqual(status, 1)
        self.assertEqual(out, '')

    def test_missing_input(self):
        status, out = self.run_main(str(Path(self.tmp.name) / 'missing.json5'))
        self.assertEqual(status, 1)

    def test_unwritable_output(self):
        target = Path(self.tmp.name) / 'missing_dir' / 'main.c'
        with self.assertLogs('il2c.cli', level = 'ERROR'):
            status, out = self.run_main(SAMPLE, '-o', str(target))
        self.assertEqual(status, 1)
        self.assertFalse(target.exists())

    def test_malformed_input(self):
        status, out = self.run_main(self.write('bad.json5', '{ functions: [ { name: "Main" } ] }'))
        self.assertEqual(status, 1)
        self.assertEqual(out, '')

    def test_config_file(self):
        config = self.write('il2c.json5', "{ method_filter: 'Helper' }")
        status, out = self.run_main(SAMPLE, '--config', config)
        self.assertEqual(status, 0)
        self.assertIn('void helper() {', out)
        self.assertNotIn('void main() {', out)


if __name__ == '__main__':
    unittest.main()
