"""Error handling for the sanskriti language. Only SanskritiErrors should be encountered during a session: if another
type of error makes it all the way to ErrorHandler, it is assumed to be an internal issue.

Exit codes follow sysexits(3): bad input data is EX_DATAERR, an unreadable file is EX_NOINPUT and anything internal is
EX_SOFTWARE.
"""

import sys

from termcolor import colored


EX_DATAERR = 65
EX_NOINPUT = 66
EX_SOFTWARE = 70
EX_INTERRUPTED = 130


class SanskritiError(Exception):
    """Templates an error message so that it can be reported by ErrorHandler. line and column locate the offending
    lexeme in the registered source (1-based line, 0-based column); width is the lexeme's length.
    """
    exit_code = EX_DATAERR

    def __init__(self, msg, line=None, column=None, width=1, where="", diagnosis=True, exit_code=None):
        super().__init__(msg)
        self.msg = msg
        self.line = line
        self.column = column
        self.width = width
        self.where = where  # e.g. " at 'x'", used by parse errors
        self.diagnosis = diagnosis

        if exit_code is not None:
            self.exit_code = exit_code

    def __str__(self):
        prefix = f"[line {self.line}] " if self.line is not None else ""
        return f"{prefix}Error{self.where}: {self.msg}"


class LexicalError(SanskritiError):
    """Raised (or yielded, by the Lexer) for source text that begins no valid token."""


class UnexpectedCharacterError(LexicalError):

    def __init__(self, char, line, column):
        super().__init__(f"Unexpected character: {char}", line, column)
        self.char = char


class UnterminatedStringError(LexicalError):

    def __init__(self, line, column):
        super().__init__("Unterminated string.", line, column)


class ParseError(SanskritiError):
    """Malformed token sequence. lexeme is None when the parser ran into the end of input."""

    def __init__(self, msg, line, column, lexeme=None):
        where = " at end" if lexeme is None else f" at '{lexeme}'"
        super().__init__(msg, line, column, width=len(lexeme or " "), where=where)
        self.lexeme = lexeme


class SourceError(SanskritiError):
    """A source file could not be read."""
    exit_code = EX_NOINPUT

    def __init__(self, msg):
        super().__init__(msg, diagnosis=False)


class InternalError(SanskritiError):
    """Anything that isn't the user's fault."""
    exit_code = EX_SOFTWARE

    def __init__(self, msg, exit_code=None):
        super().__init__(msg, diagnosis=False, exit_code=exit_code)

    def __str__(self):
        return f"[internal] {super().__str__()}"


class ErrorHandler:
    """Context manager that reports sanskriti errors on stderr and turns them into exit codes. If not fatal (shell
    mode), errors are reported and then suppressed.
    """
    ERROR = "red"

    def __init__(self, fatal=True):
        self.fatal = fatal
        self.source = None
        self.had_error = False

    def register_source(self, source):
        """Registers the source text that line/column information in errors refers to."""
        self.source = source

    def diagnose(self, error):
        """Returns the offending source line with the offending lexeme highlighted and underlined, or None if error
        cannot be located in the registered source.
        """
        if self.source is None or error.line is None or error.column is None:
            return None

        lines = self.source.split("\n")
        if not 0 < error.line <= len(lines):
            return None

        line = lines[error.line - 1].rstrip("\r")
        start = min(error.column, len(line))
        end = min(start + max(error.width, 1), max(len(line), start + 1))

        diagnosis = "  " + line[:start]
        diagnosis += colored(line[start:end], ErrorHandler.ERROR, attrs=["bold"])
        diagnosis += line[end:] + "\n"

        diagnosis += "  " + " " * start
        diagnosis += colored("^" + "~" * (end - start - 1), ErrorHandler.ERROR, attrs=["bold"])

        return diagnosis

    def report(self, error):
        """Prints error without exiting. Used directly for lexical errors, which are not fatal on their own."""
        self.had_error = True
        print(colored(str(error), ErrorHandler.ERROR, attrs=["bold"]), file=sys.stderr)

        if error.diagnosis:
            diagnosis = self.diagnose(error)
            if diagnosis:
                print(diagnosis, file=sys.stderr)

    def throw(self, error):
        """Reports error, then exits with error.exit_code if this handler is fatal."""
        self.report(error)
        if self.fatal:
            sys.exit(error.exit_code)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            return False

        do_exit = False
        if issubclass(exc_type, KeyboardInterrupt):
            self.throw(InternalError("keyboard interrupt", exit_code=EX_INTERRUPTED))
        elif issubclass(exc_type, SystemExit):
            do_exit = True
        elif issubclass(exc_type, RecursionError):
            self.throw(InternalError("program is nested too deeply: maximum recursion depth exceeded"))
        elif issubclass(exc_type, SanskritiError):
            self.throw(exc_val)
        else:
            self.throw(InternalError(f"unknown error: '{exc_type.__name__}: {exc_val}'"))

        return not do_exit
