import io
import re
import unittest
from contextlib import redirect_stderr

from sanskriti.lang.error import EX_DATAERR, EX_INTERRUPTED, EX_NOINPUT, EX_SOFTWARE, ErrorHandler, InternalError, \
    ParseError, SanskritiError, SourceError, UnexpectedCharacterError, UnterminatedStringError


def plain(text):
    """Strips terminal colours, which termcolor adds when attached to a terminal."""
    return re.sub(r"\x1b\[[0-9;]*m", "", text)


class ErrorMessageTestCase(unittest.TestCase):

    def test_messages(self):
        cases = {
            UnexpectedCharacterError("@", 3, 0): "[line 3] Error: Unexpected character: @",
            UnterminatedStringError(1, 4): "[line 1] Error: Unterminated string.",
            ParseError("Expect expression.", 2, 5, ")"): "[line 2] Error at ')': Expect expression.",
            ParseError("Expect ';' after value.", 1, 7): "[line 1] Error at end: Expect ';' after value.",
            SourceError("'x.san' could not be opened"): "Error: 'x.san' could not be opened",
            InternalError("oops"): "[internal] Error: oops",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, str(case), expected)

    def test_exit_codes(self):
        cases = {
            UnexpectedCharacterError("@", 1, 0): EX_DATAERR,
            ParseError("Expect expression.", 1, 0): EX_DATAERR,
            SourceError("missing"): EX_NOINPUT,
            InternalError("oops"): EX_SOFTWARE,
            InternalError("interrupted", exit_code=EX_INTERRUPTED): EX_INTERRUPTED,
        }
        for case, expected in cases.items():
            self.assertEqual(expected, case.exit_code, case)


class ErrorHandlerTestCase(unittest.TestCase):

    def setUp(self):
        self.stderr = io.StringIO()

    def test_diagnose(self):
        handler = ErrorHandler()
        handler.register_source("var x = 1;\nprint x @ 2;")

        diagnosis = handler.diagnose(UnexpectedCharacterError("@", 2, 8))
        self.assertEqual(["  print x @ 2;", "          ^"], plain(diagnosis).split("\n"))

        diagnosis = handler.diagnose(ParseError("Expect ';' after value.", 2, 6, "x"))
        self.assertEqual("        ^", plain(diagnosis).split("\n")[1])

        diagnosis = handler.diagnose(ParseError("Expect expression.", 1, 0, "var"))
        self.assertEqual("  ^~~", plain(diagnosis).split("\n")[1])

    def test_diagnose_without_location(self):
        handler = ErrorHandler()
        self.assertIsNone(handler.diagnose(ParseError("Expect expression.", 1, 0)))  # no source registered

        handler.register_source("print 1;")
        should_be_none = [SourceError("missing"), UnexpectedCharacterError("@", 9, 0),
                          UnexpectedCharacterError("@", 0, 0)]
        for case in should_be_none:
            self.assertIsNone(handler.diagnose(case), case)

    def test_report(self):
        handler = ErrorHandler()
        handler.register_source("1 # 2")

        with redirect_stderr(self.stderr):
            handler.report(UnexpectedCharacterError("#", 1, 2))

        self.assertTrue(handler.had_error)
        self.assertIn("[line 1] Error: Unexpected character: #", plain(self.stderr.getvalue()))
        self.assertIn("1 # 2", plain(self.stderr.getvalue()))

    def test_throw(self):
        with redirect_stderr(self.stderr):
            with self.assertRaises(SystemExit) as context:
                ErrorHandler().throw(SourceError("missing"))
            self.assertEqual(EX_NOINPUT, context.exception.code)

            ErrorHandler(fatal=False).throw(SourceError("missing"))  # reported only

        self.assertEqual(2, plain(self.stderr.getvalue()).count("Error: missing"))

    def test_exit_codes(self):
        cases = {
            ParseError("Expect expression.", 1, 0): EX_DATAERR,
            SourceError("missing"): EX_NOINPUT,
            KeyboardInterrupt(): EX_INTERRUPTED,
            RecursionError(): EX_SOFTWARE,
            ValueError("bug"): EX_SOFTWARE,
        }
        for case, expected in cases.items():
            with redirect_stderr(self.stderr):
                with self.assertRaises(SystemExit) as context:
                    with ErrorHandler():
                        raise case
            self.assertEqual(expected, context.exception.code, case)

        self.assertIn("[internal] Error: unknown error: 'ValueError: bug'", plain(self.stderr.getvalue()))

    def test_system_exit_propagates(self):
        with self.assertRaises(SystemExit) as context:
            with ErrorHandler():
                raise SystemExit(3)
        self.assertEqual(3, context.exception.code)
        self.assertEqual("", plain(self.stderr.getvalue()))

    def test_not_fatal(self):
        handler = ErrorHandler(fatal=False)
        with redirect_stderr(self.stderr):
            with handler:
                raise ParseError("Expect expression.", 1, 0)
            with handler:
                raise SanskritiError("generic")

        self.assertTrue(handler.had_error)
        self.assertIn("Error at end: Expect expression.", plain(self.stderr.getvalue()))
        self.assertIn("Error: generic", plain(self.stderr.getvalue()))

    def test_no_error(self):
        handler = ErrorHandler()
        with handler:
            pass
        self.assertFalse(handler.had_error)


if __name__ == '__main__':
    unittest.main()
