"""Session control for the sanskriti language. Loads a source file, translates its keywords and drives the pure
pipeline (lexer, parser, interpreter) for each command-line mode, or for the lines typed in command-line mode.
"""

import logging
import sys

from sanskriti.lang.error import LexicalError, SourceError, UnterminatedStringError
from sanskriti.lang.translator import translate
from sanskriti.pure.evaluation import Interpreter
from sanskriti.pure.lexical import Lexer, Token, TokenKind
from sanskriti.pure.syntax import Parser


logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


class Session:
    """Governs a sanskriti session. The session's interpreter (and so its variables) lives as long as the session."""
    SH_FILE = "<in>"  # command-line interpreter filename
    BALANCE = {TokenKind.LEFT_BRACE: ("{", 1), TokenKind.RIGHT_BRACE: ("{", -1),  # tokens that open or close a line
               TokenKind.LEFT_PAREN: ("(", 1), TokenKind.RIGHT_PAREN: ("(", -1)}

    def __init__(self, error_handler, path, cmd_line=False, translate=True, out=None):
        self.error_handler = error_handler
        self.path = path              # used for logging
        self.cmd_line = cmd_line      # whether or not in command-line mode
        self.translate = translate    # whether or not to translate Sanskrit keywords
        self.out = out                # stream for tokens, trees and print output (sys.stdout if None)

        self.interpreter = Interpreter(out)
        self.source = ""

        if self.cmd_line:
            self.error_handler.fatal = False

        if path != Session.SH_FILE:
            try:
                with open(path, "r", encoding="utf-8") as file:
                    source = file.read()
            except (OSError, UnicodeDecodeError):
                raise SourceError(f"'{path}' could not be opened")

            logger.debug("read %d characters from '%s'", len(source), path)
            self.source = self.preprocess(source)

        elif not cmd_line:
            raise SourceError(f"'{Session.SH_FILE}' is a reserved filename")

        self.error_handler.register_source(self.source)

    def preprocess(self, source):
        """Translates Sanskrit keywords in source, unless translation is turned off."""
        return translate(source) if self.translate else source

    @staticmethod
    def preprocess_line(line):
        """Checks a line typed in command-line mode. Returns line and whether or not it is incomplete, i.e. whether a
        brace, a parenthesis or a string is still open and the next line should be added to it. Comments and string
        contents are skipped by the Lexer, so neither is counted.
        """
        depth = {"{": 0, "(": 0}
        for item in Lexer(line):
            if isinstance(item, UnterminatedStringError):
                return line, True
            elif isinstance(item, Token) and item.kind in Session.BALANCE:
                opener, step = Session.BALANCE[item.kind]
                depth[opener] += step

        return line, any(count > 0 for count in depth.values())

    def tokenize(self):
        """Writes every token of the source, reporting lexical errors as they come. Returns whether or not any
        lexical error was found.
        """
        had_error = False
        for item in Lexer(self.source):
            if isinstance(item, LexicalError):
                had_error = True
                self.error_handler.report(item)
            else:
                self.write(item)
        return had_error

    def parse(self):
        """Parses the source as a single expression and writes its syntax tree."""
        tree = Parser(self.source).parse_expression()
        self.write(tree)
        return tree

    def run(self, source=None):
        """Parses source (by default, the session's file) as a program and executes it. Nothing is executed if the
        program does not parse.
        """
        if source is None:
            source = self.source
        else:
            source = self.preprocess(source)
            self.error_handler.register_source(source)

        program = Parser(source).parse_program()
        logger.debug("parsed %d statements from '%s'", len(program), self.path)

        self.interpreter.run(program)

    def write(self, obj):
        print(obj, file=self.out if self.out is not None else sys.stdout)
