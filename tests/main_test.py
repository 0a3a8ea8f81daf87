import io
import os
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout

from sanskriti.lang.error import EX_DATAERR, EX_NOINPUT
from sanskriti.main import build_parser, main


class MainTestCase(unittest.TestCase):

    def setUp(self):
        self.dir = tempfile.TemporaryDirectory()
        self.stdout = io.StringIO()
        self.stderr = io.StringIO()

    def tearDown(self):
        self.dir.cleanup()

    def write(self, source):
        path = os.path.join(self.dir.name, "test.san")
        with open(path, "w", encoding="utf-8") as file:
            file.write(source)
        return path

    def main(self, *argv):
        """Runs main with argv, returning its exit code (0 if it returned normally)."""
        with redirect_stdout(self.stdout), redirect_stderr(self.stderr):
            try:
                main(list(argv))
            except SystemExit as exc:
                return exc.code
        return 0

    def test_arguments(self):
        parser = build_parser()
        args = parser.parse_args(["-v", "run", "x.san"])
        self.assertEqual(("run", "x.san", True, False), (args.mode, args.file, args.verbose, args.no_translate))

        args = parser.parse_args(["--no-translate", "tokenize", "y.san"])
        self.assertEqual(("tokenize", False, True), (args.mode, args.verbose, args.no_translate))

        self.assertIsNone(parser.parse_args([]).mode)

    def test_bad_arguments(self):
        should_fail = [("compile", "x.san"), ("run",), ("run", "a.san", "b.san")]
        for case in should_fail:
            self.assertEqual(2, self.main(*case), case)

    def test_tokenize(self):
        self.assertEqual(0, self.main("tokenize", self.write("print 1;")))
        self.assertEqual("PRINT print null\nNUMBER 1 1.0\nSEMICOLON ; null\nEOF  null\n", self.stdout.getvalue())

    def test_tokenize_errors(self):
        self.assertEqual(EX_DATAERR, self.main("tokenize", self.write("\"abc")))
        self.assertEqual("EOF  null\n", self.stdout.getvalue())
        self.assertIn("[line 1] Error: Unterminated string.", self.stderr.getvalue())

    def test_parse(self):
        self.assertEqual(0, self.main("parse", self.write("(1 + 2) * -3")))
        self.assertEqual("(* (group (+ 1.0 2.0)) (- 3.0))\n", self.stdout.getvalue())

    def test_parse_errors(self):
        self.assertEqual(EX_DATAERR, self.main("parse", self.write("(72 +)")))
        self.assertEqual("", self.stdout.getvalue())
        self.assertIn("[line 1] Error at ')': Expect expression.", self.stderr.getvalue())

    def test_run(self):
        path = self.write("var x = 1;\nwhile (x < 4) {\n  print x;\n  x = x + 1;\n}\n")
        self.assertEqual(0, self.main("run", path))
        self.assertEqual("1.0\n2.0\n3.0\n", self.stdout.getvalue())

    def test_run_sanskrit(self):
        path = self.write("पुरा (चर i = 0; i < 3; i = i + 1) कथय i;\nकथय \"a\" + 1;\nकथय नेति == असत्य;")
        self.assertEqual(0, self.main("run", path))
        self.assertEqual("0.0\n1.0\n2.0\na1.0\nfalse\n", self.stdout.getvalue())

    def test_no_translate(self):
        self.assertEqual(EX_DATAERR, self.main("--no-translate", "run", self.write("कथय 1;")))
        self.assertEqual("", self.stdout.getvalue())
        self.assertIn("Unexpected character", self.stderr.getvalue())

    def test_run_syntax_error(self):
        self.assertEqual(EX_DATAERR, self.main("run", self.write("print \"before\";\nprint;")))
        self.assertEqual("", self.stdout.getvalue())
        self.assertIn("[line 2] Error at ';': Expect expression.", self.stderr.getvalue())

    def test_missing_file(self):
        self.assertEqual(EX_NOINPUT, self.main("run", os.path.join(self.dir.name, "missing.san")))
        self.assertIn("could not be opened", self.stderr.getvalue())


if __name__ == '__main__':
    unittest.main()
