"""Syntax tree (TokenTree) generation for pure Lox, by recursive descent with precedence climbing.

Formally, the accepted grammar is

```
<program>     ::= <declaration>* EOF
<declaration> ::= "fun" IDENT "(" <params>? ")" <block>      ; parsed, never evaluated
                | "var" IDENT ( "=" <expression> )? ";"
                | <statement>
<statement>   ::= "print" <expression> ";"
                | <block>
                | "if" "(" <expression> ")" <statement> ( "else" <statement> )?
                | "while" "(" <expression> ")" <statement>
                | "for" "(" ( <var> | <expr_stmt> | ";" ) <expression>? ";" <expression>? ")" <statement>
                | "return" <expression>? ";"
                | <expression> ";"
<block>       ::= "{" <declaration>* "}"

<expression>  ::= IDENT "=" <expression>                     ; right-associative
                | <binary>
<binary>      ::= or < and < == != < > >= < <= < + - < * /   ; lowest to highest, all left-associative
<unary>       ::= ( "!" | "-" ) <unary> | <call>
<call>        ::= <primary> ( "(" <arguments>? ")" )*
<primary>     ::= NUMBER | STRING | "true" | "false" | "nil" | "this" | "super" | IDENT | "(" <expression> ")"
```

`for` loops do not get a node of their own: they are rewritten into `var`/`while`/`group` nodes while parsing.
Classes are not part of the language and are rejected.
"""

from dataclasses import dataclass
from enum import Enum

from sanskriti.lang.error import LexicalError, ParseError
from sanskriti.pure.lexical import Lexer, TokenKind, format_number


class Op(Enum):
    """Operators of Cons nodes. Values are their display form."""
    MINUS = "-"
    PLUS = "+"
    STAR = "*"
    SLASH = "/"
    BANG = "!"
    BANG_EQUAL = "!="
    EQUAL_EQUAL = "=="
    LESS = "<"
    LESS_EQUAL = "<="
    GREATER = ">"
    GREATER_EQUAL = ">="
    AND = "and"
    OR = "or"
    ASSIGN = "="
    GROUP = "group"
    VAR = "var"
    PRINT = "print"
    WHILE = "while"
    RETURN = "return"

    def __str__(self):
        return self.value


class AtomKind(Enum):
    NUMBER = "number"
    STRING = "string"
    BOOL = "bool"
    NIL = "nil"
    IDENT = "identifier"
    THIS = "this"
    SUPER = "super"


class TokenTree:
    """Superclass of all syntax tree nodes. Nodes are immutable and the tree has no back-edges. str() of any node is
    its S-expression.
    """


@dataclass(frozen=True)
class Atom(TokenTree):
    """Terminal node: a literal, an identifier, or the this/super markers."""
    kind: AtomKind
    value: object = None

    def __str__(self):
        if self.kind is AtomKind.NUMBER:
            return format_number(self.value)
        elif self.kind in (AtomKind.STRING, AtomKind.IDENT):
            return self.value
        elif self.kind is AtomKind.BOOL:
            return "true" if self.value else "false"
        return self.kind.value


@dataclass(frozen=True)
class Cons(TokenTree):
    """Operator application. The arity of children depends on op:
    - MINUS, BANG: 1 (unary) and MINUS also 2 (binary)
    - binary operators, AND, OR, ASSIGN (IDENT atom, value), VAR (IDENT atom, value), WHILE (condition, body): 2
    - PRINT: 1, RETURN: 0 or 1, GROUP: any (a parenthesised expression has 1, a block has one per statement)
    """
    op: Op
    children: tuple = ()

    def __str__(self):
        return "(" + " ".join([str(self.op)] + [str(child) for child in self.children]) + ")"


@dataclass(frozen=True)
class If(TokenTree):
    condition: TokenTree
    yes: TokenTree
    no: TokenTree = None

    def __str__(self):
        branches = [self.condition, self.yes] + ([self.no] if self.no is not None else [])
        return "(if " + " ".join(str(branch) for branch in branches) + ")"


@dataclass(frozen=True)
class Fun(TokenTree):
    """Function declaration. Supported by the parser only: evaluation treats it as a no-op."""
    name: str
    parameters: tuple
    body: TokenTree

    def __str__(self):
        return f"(fun {self.name} ({' '.join(self.parameters)}) {self.body})"


@dataclass(frozen=True)
class Call(TokenTree):
    """Function call. Supported by the parser only: evaluation treats it as nil."""
    callee: TokenTree
    arguments: tuple = ()

    def __str__(self):
        return "(call " + " ".join(str(node) for node in (self.callee,) + self.arguments) + ")"


NIL = Atom(AtomKind.NIL)
TRUE = Atom(AtomKind.BOOL, True)


class Parser:
    """Builds TokenTrees from source text. Tokens are pulled lazily from a Lexer; a LexicalError met on the way is
    raised as-is, and any syntax error raises a ParseError for the offending token. Nothing is recovered: the first
    error ends the parse.
    """
    MAX_ARGS = 255

    # binary operator levels, lowest precedence first
    BINARY = (
        {TokenKind.OR: Op.OR},
        {TokenKind.AND: Op.AND},
        {TokenKind.BANG_EQUAL: Op.BANG_EQUAL, TokenKind.EQUAL_EQUAL: Op.EQUAL_EQUAL},
        {TokenKind.GREATER: Op.GREATER, TokenKind.GREATER_EQUAL: Op.GREATER_EQUAL,
         TokenKind.LESS: Op.LESS, TokenKind.LESS_EQUAL: Op.LESS_EQUAL},
        {TokenKind.MINUS: Op.MINUS, TokenKind.PLUS: Op.PLUS},
        {TokenKind.SLASH: Op.SLASH, TokenKind.STAR: Op.STAR},
    )
    UNARY = {TokenKind.BANG: Op.BANG, TokenKind.MINUS: Op.MINUS}

    LITERALS = {
        TokenKind.TRUE: TRUE,
        TokenKind.FALSE: Atom(AtomKind.BOOL, False),
        TokenKind.NIL: NIL,
        TokenKind.THIS: Atom(AtomKind.THIS),
        TokenKind.SUPER: Atom(AtomKind.SUPER),
    }

    def __init__(self, source):
        self._tokens = iter(Lexer(source))
        self._peeked = None

    def parse_expression(self):
        """Parses a single expression. Tokens after the expression are left unread."""
        return self.expression()

    def parse_program(self):
        """Parses a whole program, returning its statements as a list of TokenTrees."""
        statements = []
        while not self.check(TokenKind.EOF):
            statements.append(self.declaration())
        return statements

    # ─── token stream ──────────────────────────────────

    def peek(self):
        """Returns the next Token without consuming it."""
        if self._peeked is None:
            item = next(self._tokens)
            if isinstance(item, LexicalError):
                raise item
            self._peeked = item
        return self._peeked

    def advance(self):
        """Consumes and returns the next Token. EOF is never consumed."""
        token = self.peek()
        if token.kind is not TokenKind.EOF:
            self._peeked = None
        return token

    def check(self, kind):
        return self.peek().kind is kind

    def match(self, *kinds):
        """Consumes and returns the next Token if it is one of kinds, otherwise returns None."""
        if self.peek().kind in kinds:
            return self.advance()
        return None

    def consume(self, kind, msg):
        if self.check(kind):
            return self.advance()
        raise self.error(self.peek(), msg)

    @staticmethod
    def error(token, msg):
        lexeme = None if token.kind is TokenKind.EOF else token.lexeme
        return ParseError(msg, token.line, token.column, lexeme)

    # ─── statements ────────────────────────────────────

    def declaration(self):
        if self.match(TokenKind.FUN):
            return self.function()
        if self.match(TokenKind.VAR):
            return self.var_declaration()
        if self.check(TokenKind.CLASS):
            raise self.error(self.peek(), "Classes are not supported.")
        return self.statement()

    def function(self):
        name = self.consume(TokenKind.IDENTIFIER, "Expect function name.")
        self.consume(TokenKind.LEFT_PAREN, "Expect '(' after function name.")

        parameters = []
        if not self.check(TokenKind.RIGHT_PAREN):
            while True:
                if len(parameters) >= Parser.MAX_ARGS:
                    raise self.error(self.peek(), f"Can't have more than {Parser.MAX_ARGS} parameters.")
                parameters.append(self.consume(TokenKind.IDENTIFIER, "Expect parameter name.").lexeme)
                if not self.match(TokenKind.COMMA):
                    break

        self.consume(TokenKind.RIGHT_PAREN, "Expect ')' after parameters.")
        self.consume(TokenKind.LEFT_BRACE, "Expect '{' before function body.")
        return Fun(name.lexeme, tuple(parameters), self.block())

    def var_declaration(self):
        name = self.consume(TokenKind.IDENTIFIER, "Expect variable name.")
        value = self.expression() if self.match(TokenKind.EQUAL) else NIL
        self.consume(TokenKind.SEMICOLON, "Expect ';' after variable declaration.")
        return Cons(Op.VAR, (Atom(AtomKind.IDENT, name.lexeme), value))

    def statement(self):
        if self.match(TokenKind.PRINT):
            value = self.expression()
            self.consume(TokenKind.SEMICOLON, "Expect ';' after value.")
            return Cons(Op.PRINT, (value,))
        if self.match(TokenKind.LEFT_BRACE):
            return self.block()
        if self.match(TokenKind.IF):
            return self.if_statement()
        if self.match(TokenKind.WHILE):
            return self.while_statement()
        if self.match(TokenKind.FOR):
            return self.for_statement()
        if self.match(TokenKind.RETURN):
            value = () if self.check(TokenKind.SEMICOLON) else (self.expression(),)
            self.consume(TokenKind.SEMICOLON, "Expect ';' after return value.")
            return Cons(Op.RETURN, value)
        return self.expression_statement()

    def block(self):
        """Parses the statements of a block whose "{" was already consumed."""
        statements = []
        while not self.check(TokenKind.RIGHT_BRACE) and not self.check(TokenKind.EOF):
            statements.append(self.declaration())
        self.consume(TokenKind.RIGHT_BRACE, "Expect '}' after block.")
        return Cons(Op.GROUP, tuple(statements))

    def if_statement(self):
        self.consume(TokenKind.LEFT_PAREN, "Expect '(' after 'if'.")
        condition = self.expression()
        self.consume(TokenKind.RIGHT_PAREN, "Expect ')' after if condition.")

        yes = self.statement()
        no = self.statement() if self.match(TokenKind.ELSE) else None
        return If(condition, yes, no)

    def while_statement(self):
        self.consume(TokenKind.LEFT_PAREN, "Expect '(' after 'while'.")
        condition = self.expression()
        self.consume(TokenKind.RIGHT_PAREN, "Expect ')' after condition.")
        return Cons(Op.WHILE, (condition, self.statement()))

    def for_statement(self):
        """for (init; condition; increment) body => group[init, while[condition, group[body, increment]]]."""
        self.consume(TokenKind.LEFT_PAREN, "Expect '(' after 'for'.")

        if self.match(TokenKind.SEMICOLON):
            initializer = None
        elif self.match(TokenKind.VAR):
            initializer = self.var_declaration()
        else:
            initializer = self.expression_statement()

        condition = TRUE if self.check(TokenKind.SEMICOLON) else self.expression()
        self.consume(TokenKind.SEMICOLON, "Expect ';' after loop condition.")

        increment = None if self.check(TokenKind.RIGHT_PAREN) else self.expression()
        self.consume(TokenKind.RIGHT_PAREN, "Expect ')' after for clauses.")

        body = self.statement()
        if increment is not None:
            body = Cons(Op.GROUP, (body, increment))

        loop = Cons(Op.WHILE, (condition, body))
        if initializer is not None:
            loop = Cons(Op.GROUP, (initializer, loop))
        return loop

    def expression_statement(self):
        expr = self.expression()
        self.consume(TokenKind.SEMICOLON, "Expect ';' after expression.")
        return expr

    # ─── expressions ───────────────────────────────────

    def expression(self):
        return self.assignment()

    def assignment(self):
        expr = self.binary()

        if self.check(TokenKind.EQUAL):
            equals = self.advance()
            value = self.assignment()

            if isinstance(expr, Atom) and expr.kind is AtomKind.IDENT:
                return Cons(Op.ASSIGN, (expr, value))
            raise self.error(equals, "Invalid assignment target.")

        return expr

    def binary(self, level=0):
        """Precedence climbing over Parser.BINARY: parses operands at level + 1 and folds them to the left."""
        if level == len(Parser.BINARY):
            return self.unary()

        operators = Parser.BINARY[level]
        expr = self.binary(level + 1)

        while self.peek().kind in operators:
            op = operators[self.advance().kind]
            expr = Cons(op, (expr, self.binary(level + 1)))

        return expr

    def unary(self):
        if self.peek().kind in Parser.UNARY:
            op = Parser.UNARY[self.advance().kind]
            return Cons(op, (self.unary(),))
        return self.call()

    def call(self):
        expr = self.primary()

        while self.match(TokenKind.LEFT_PAREN):
            arguments = []
            if not self.check(TokenKind.RIGHT_PAREN):
                while True:
                    if len(arguments) >= Parser.MAX_ARGS:
                        raise self.error(self.peek(), f"Can't have more than {Parser.MAX_ARGS} arguments.")
                    arguments.append(self.expression())
                    if not self.match(TokenKind.COMMA):
                        break

            self.consume(TokenKind.RIGHT_PAREN, "Expect ')' after arguments.")
            expr = Call(expr, tuple(arguments))

        return expr

    def primary(self):
        token = self.peek()

        if token.kind in Parser.LITERALS:
            self.advance()
            return Parser.LITERALS[token.kind]
        if token.kind is TokenKind.NUMBER:
            self.advance()
            return Atom(AtomKind.NUMBER, token.literal)
        if token.kind is TokenKind.STRING:
            self.advance()
            return Atom(AtomKind.STRING, token.literal)
        if token.kind is TokenKind.IDENTIFIER:
            self.advance()
            return Atom(AtomKind.IDENT, token.lexeme)

        if self.match(TokenKind.LEFT_PAREN):
            expr = self.expression()
            self.consume(TokenKind.RIGHT_PAREN, "Expect ')' after expression.")
            return Cons(Op.GROUP, (expr,))

        raise self.error(token, "Expect expression.")
