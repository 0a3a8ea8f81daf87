"""Tree-walking evaluation of pure Lox TokenTrees.

Runtime values are plain Python objects: None (nil), float (number), bool and str. They are immutable, so nothing is
ever aliased.

Evaluation is fail-soft: it never raises for a type mismatch. Every binary operator has a table of rules keyed by the
kinds of its two operands, and a fallback value used when no rule matches:

```
operator        rules                                   fallback
+               number + number, string + anything      nil
- * /           number (op) number                      nil       ; x / 0 is nil
< <= > >=       number (op) number                      false
==              same kind, compared by value            false     ; != is the negation of ==
```
"""

import logging
import operator
import sys
from enum import Enum

from sanskriti.pure.lexical import format_number
from sanskriti.pure.syntax import Atom, AtomKind, Call, Cons, Fun, If, Op


logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


class ValueKind(Enum):
    NIL = "nil"
    NUMBER = "number"
    BOOL = "bool"
    STRING = "string"

    @staticmethod
    def of(value):
        """Kind of a runtime value. bool is checked before number since bool is an int subclass."""
        if value is None:
            return ValueKind.NIL
        elif isinstance(value, bool):
            return ValueKind.BOOL
        elif isinstance(value, (int, float)):
            return ValueKind.NUMBER
        elif isinstance(value, str):
            return ValueKind.STRING
        raise TypeError(f"'{value!r}' is not a runtime value")


def is_truthy(value):
    """nil and false are falsy, everything else (including 0 and "") is truthy."""
    return value is not None and value is not False


def display(value):
    """Display form of a value, as written by print."""
    kind = ValueKind.of(value)
    if kind is ValueKind.NIL:
        return "nil"
    elif kind is ValueKind.BOOL:
        return "true" if value else "false"
    elif kind is ValueKind.NUMBER:
        return format_number(value)
    return value


def _concat(left, right):
    return display(left) + display(right)


def _divide(left, right):
    if right == 0.0:
        return None
    return left / right


NUMBERS = (ValueKind.NUMBER, ValueKind.NUMBER)

BINARY_RULES = {
    Op.PLUS: ({
        NUMBERS: operator.add,
        **{(ValueKind.STRING, kind): _concat for kind in ValueKind},
        **{(kind, ValueKind.STRING): _concat for kind in ValueKind},
    }, None),
    Op.MINUS: ({NUMBERS: operator.sub}, None),
    Op.STAR: ({NUMBERS: operator.mul}, None),
    Op.SLASH: ({NUMBERS: _divide}, None),
    Op.LESS: ({NUMBERS: operator.lt}, False),
    Op.LESS_EQUAL: ({NUMBERS: operator.le}, False),
    Op.GREATER: ({NUMBERS: operator.gt}, False),
    Op.GREATER_EQUAL: ({NUMBERS: operator.ge}, False),
    Op.EQUAL_EQUAL: ({(kind, kind): operator.eq for kind in ValueKind}, False),
}


def apply_binary(op, left, right):
    """Applies binary operator op to two already evaluated operands using BINARY_RULES."""
    rules, fallback = BINARY_RULES[op]
    rule = rules.get((ValueKind.of(left), ValueKind.of(right)))
    if rule is None:
        return fallback
    return rule(left, right)


class Environment:
    """Single flat namespace of variables. There are no nested scopes: blocks read and write the same bindings."""

    def __init__(self):
        self.values = {}

    def define(self, name, value):
        self.values[name] = value

    def assign(self, name, value):
        """Overwrites name, creating it if it isn't bound yet."""
        self.values[name] = value

    def get(self, name):
        """Unbound names are nil."""
        return self.values.get(name)

    def __contains__(self, name):
        return name in self.values


class Interpreter:
    """Executes programs (lists of statement TokenTrees) against one Environment. print output goes to out, or to
    sys.stdout if out is None.

    Nodes whose children don't have the shape their operator expects are not errors: as statements they do nothing
    and as expressions they are nil.
    """

    def __init__(self, out=None):
        self.environment = Environment()
        self.out = out

    def run(self, program):
        """Executes every statement of program in order."""
        for statement in program:
            self.execute(statement)

    def execute(self, node):
        """Executes node as a statement, for its side effects."""
        if isinstance(node, If):
            if is_truthy(self.evaluate(node.condition)):
                self.execute(node.yes)
            elif node.no is not None:
                self.execute(node.no)

        elif isinstance(node, Cons) and node.op is Op.GROUP:
            for statement in node.children:
                self.execute(statement)

        elif isinstance(node, Cons) and node.op is Op.VAR:
            if len(node.children) == 2 and self._is_ident(node.children[0]):
                name, expr = node.children
                self.environment.define(name.value, self.evaluate(expr))

        elif isinstance(node, Cons) and node.op is Op.PRINT:
            if len(node.children) == 1:
                self.write(display(self.evaluate(node.children[0])))

        elif isinstance(node, Cons) and node.op is Op.WHILE:
            if len(node.children) == 2:
                condition, body = node.children
                while is_truthy(self.evaluate(condition)):
                    self.execute(body)

        elif isinstance(node, Fun):
            logger.debug("function '%s' declared but functions are not evaluated", node.name)

        else:
            self.evaluate(node)

    def evaluate(self, node):
        """Evaluates node as an expression and returns its value."""
        if isinstance(node, Atom):
            return self._evaluate_atom(node)
        elif isinstance(node, Cons):
            return self._evaluate_cons(node)
        elif isinstance(node, Call):
            logger.debug("call to %s is not evaluated", node.callee)
        return None  # If, Fun and Call have no value

    def write(self, text):
        print(text, file=self.out if self.out is not None else sys.stdout)

    def _evaluate_atom(self, atom):
        if atom.kind is AtomKind.IDENT:
            return self.environment.get(atom.value)
        elif atom.kind is AtomKind.NUMBER:
            return float(atom.value)
        elif atom.kind in (AtomKind.STRING, AtomKind.BOOL):
            return atom.value
        return None  # nil, this, super

    def _evaluate_cons(self, cons):
        op, children = cons.op, cons.children

        if op is Op.GROUP:
            return self.evaluate(children[0]) if children else None

        if len(children) == 1:
            if op is Op.MINUS:
                value = self.evaluate(children[0])
                return -value if ValueKind.of(value) is ValueKind.NUMBER else None
            elif op is Op.BANG:
                return not is_truthy(self.evaluate(children[0]))

        elif len(children) == 2:
            left, right = children

            if op is Op.ASSIGN and self._is_ident(left):
                value = self.evaluate(right)
                self.environment.assign(left.value, value)
                return value

            elif op is Op.AND:
                value = self.evaluate(left)
                return self.evaluate(right) if is_truthy(value) else value

            elif op is Op.OR:
                value = self.evaluate(left)
                return value if is_truthy(value) else self.evaluate(right)

            elif op is Op.BANG_EQUAL:
                return not self._evaluate_cons(Cons(Op.EQUAL_EQUAL, children))

            elif op in BINARY_RULES:
                return apply_binary(op, self.evaluate(left), self.evaluate(right))

        return None

    @staticmethod
    def _is_ident(node):
        return isinstance(node, Atom) and node.kind is AtomKind.IDENT
