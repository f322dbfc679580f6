# Copyright (C) 2014-2018 Olzhas Rakhimov
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.
"""Boolean expressions of fault trees and their compilation into evaluators.

Equations are written with "*" for AND, "+" for OR, and parentheses,
for example, "(B * (C + D)) * (A + (B * C))".
The compiled evaluator follows the arithmetic reading of the equation:
products for AND and sums for OR over 0/1 inputs.
Zero means no failure; any value of 1 or more means failure.
"""

import functools
import inspect
import re

from pyfta.fault_tree import NAME_SIG, check_name, FaultTreeError


class ParsingError(Exception):
    """Errors in parsing Boolean equations."""

    pass


class Literal(object):
    """A basic event as a Boolean variable.

    Attributes:
        name: The name of the basic event.
    """

    def __init__(self, name):
        """Initializes a literal with the event name."""
        self.name = name

    def evaluate(self, values):
        """Returns the value of the event from the mapping of values."""
        return values[self.name]

    def events(self):
        """Returns the set of event names in the expression."""
        return set([self.name])

    def __eq__(self, other):
        return isinstance(other, Literal) and self.name == other.name

    def __hash__(self):
        return hash(self.name)

    def __str__(self):
        return self.name

    def __repr__(self):
        return "Literal(%r)" % self.name


class Connective(object):
    """Base class for AND/OR formulas over sub-expressions.

    Attributes:
        args: The list of argument expressions.
    """

    symbol = None

    def __init__(self, args):
        """Initializes the formula.

        Args:
            args: A non-empty collection of expressions.
        """
        self.args = list(args)
        assert self.args

    def events(self):
        """Returns the set of event names in the expression."""
        names = set()
        for arg in self.args:
            names |= arg.events()
        return names

    def __eq__(self, other):
        return type(self) is type(other) and self.args == other.args

    def __hash__(self):
        return hash((type(self).__name__, tuple(self.args)))

    def __str__(self):
        if len(self.args) == 1:
            return str(self.args[0])
        div = " " + self.symbol + " "
        return "(" + div.join(str(x) for x in self.args) + ")"

    def __repr__(self):
        return "%s(%r)" % (type(self).__name__, self.args)


class And(Connective):
    """Conjunction of arguments (product)."""

    symbol = "*"

    def evaluate(self, values):
        result = 1
        for arg in self.args:
            result = result * arg.evaluate(values)
        return result


class Or(Connective):
    """Disjunction of arguments (sum)."""

    symbol = "+"

    def evaluate(self, values):
        result = 0
        for arg in self.args:
            result = result + arg.evaluate(values)
        return result


_RE_TOKEN = re.compile(r"\s*(?:(?P<name>" + NAME_SIG + r")|(?P<op>[()+*]))")


def tokenize(equation):
    """Splits an equation into name and operator tokens.

    Args:
        equation: The equation string.

    Returns:
        A list of (kind, text, position) tuples with kind "name" or "op".

    Raises:
        ParsingError: Unknown characters in the equation.
    """
    tokens = []
    pos = 0
    end = len(equation.rstrip())
    while pos < end:
        match = _RE_TOKEN.match(equation, pos)
        if not match:
            raise ParsingError("Unexpected character at position %d:\n%s" %
                               (pos, equation))
        kind = "name" if match.group("name") else "op"
        tokens.append((kind, match.group(kind), match.start(kind)))
        pos = match.end()
    return tokens


class _Parser(object):  # pylint: disable=too-few-public-methods
    """Recursive-descent parser for sum-of-products equations.

    Grammar:
        expr   := term ('+' term)*
        term   := factor ('*' factor)*
        factor := NAME | '(' expr ')'
    """

    def __init__(self, equation):
        self.equation = equation
        self.tokens = tokenize(equation)
        self.index = 0

    def __error(self, message):
        if self.index < len(self.tokens):
            where = "position %d" % self.tokens[self.index][2]
        else:
            where = "the end"
        raise ParsingError("%s at %s:\n%s" % (message, where, self.equation))

    def __peek(self):
        if self.index < len(self.tokens):
            return self.tokens[self.index]
        return (None, None, None)

    def parse(self):
        if not self.tokens:
            raise ParsingError("Empty equation")
        expression = self.__expr()
        if self.index != len(self.tokens):
            self.__error("Unexpected token " + repr(self.__peek()[1]))
        return expression

    def __expr(self):
        args = [self.__term()]
        while self.__peek()[1] == "+":
            self.index += 1
            args.append(self.__term())
        return args[0] if len(args) == 1 else Or(args)

    def __term(self):
        args = [self.__factor()]
        while self.__peek()[1] == "*":
            self.index += 1
            args.append(self.__factor())
        return args[0] if len(args) == 1 else And(args)

    def __factor(self):
        kind, text, _ = self.__peek()
        if kind == "name":
            self.index += 1
            try:
                check_name(text)
            except FaultTreeError as err:
                raise ParsingError(str(err))
            return Literal(text)
        if text == "(":
            self.index += 1
            expression = self.__expr()
            if self.__peek()[1] != ")":
                self.__error("Missing closing parenthesis")
            self.index += 1
            return expression
        if text is None:
            self.__error("Missing argument")
        self.__error("Unexpected token " + repr(text))
        return None  # unreachable


def parse(equation):
    """Parses an equation into an expression tree.

    Args:
        equation: The equation string.

    Returns:
        The root Literal, And, or Or expression.

    Raises:
        ParsingError: The equation is malformed.
    """
    return _Parser(equation).parse()


def extract_events(equation):
    """Returns the sorted unique event names of an equation."""
    values = re.split(r"[()+*]", equation)
    return sorted(set(x.strip() for x in values if x.strip()))


class Evaluator(object):
    """Compiled fault tree equation.

    The evaluator is called like a function
    with one argument per basic event in the sorted order of names.
    The arguments may be numbers or numpy arrays of 0/1 values;
    arrays are evaluated element-wise.

    Attributes:
        equation: The source equation.
        expression: The parsed expression tree.
        parameters: The sorted tuple of basic event names.
    """

    def __init__(self, equation, expression):
        self.equation = equation
        self.expression = expression
        self.parameters = tuple(extract_events(equation))
        self.__signature__ = inspect.Signature([
            inspect.Parameter(x, inspect.Parameter.POSITIONAL_OR_KEYWORD)
            for x in self.parameters
        ])
        self.truth_table = None  # filled lazily by calculate()

    def __call__(self, *args, **kwargs):
        bound = self.__signature__.bind(*args, **kwargs)
        return self.expression.evaluate(bound.arguments)

    def evaluate(self, values):
        """Evaluates the equation with a mapping of event values.

        Args:
            values: A mapping with a value for every parameter.

        Raises:
            KeyError: Some parameter has no value.
        """
        return self.expression.evaluate(values)

    def __repr__(self):
        return "Evaluator(%r)" % self.equation


@functools.lru_cache(maxsize=8)
def formulate(equation):
    """Compiles an equation into an evaluator.

    The evaluator is memoized by the equation string.
    Evaluators hold their truth tables,
    so only the few most recent ones are kept.

    Args:
        equation: The fault tree equation.

    Returns:
        Evaluator with the basic events as parameters.

    Raises:
        ParsingError: The equation is malformed.
    """
    return Evaluator(equation, parse(equation))
