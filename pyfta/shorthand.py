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
"""Reads fault trees in the shorthand notation.

The shorthand notation is described as follows:
The fault tree name:               name
AND gate:                          gate_name := (arg1 & arg2 & ...)
OR gate:                           gate_name := (arg1 | arg2 | ...)
NULL gate:                         gate_name := arg
Probability of a basic event:      p(event_name) = probability

Some requirements and additions to the shorthand format:
1. The names are case-sensitive identifiers.
2. Arguments that are not defined as gates are basic events.
3. Name clashes or redefinitions are errors.
4. Cycles in the graph are detected as errors.
5. The top gate is detected as the only gate without parents.
6. Repeated arguments are considered an error.
7. Parentheses are optional.

The top event of the resulting fault tree is named after the fault tree
and has the top gate as its only argument.
Gates and basic events referenced in several places
become separate nodes with the same event name.
"""

import re

from pyfta.expression import ParsingError
from pyfta.fault_tree import (NAME_SIG, FaultTreeError, FaultTree, Node, Edge,
                              raise_cycle)


class FormatError(Exception):
    """Common errors in writing the shorthand format."""

    pass


_RE_FT_NAME = re.compile(r"^(" + NAME_SIG + r")$")  # Fault tree name
# Probability description for a basic event
_RE_PROB = re.compile(r"^p\(\s*(?P<name>" + NAME_SIG +
                      r")\s*\)\s*=\s*(?P<prob>1|0|0\.\d+|1\.0+)$")
# General gate name and pattern
_GATE_SIG = r"^(?P<name>" + NAME_SIG + r")\s*:=\s*"
_RE_GATE = re.compile(_GATE_SIG + r"(?P<formula>.+)$")
# Optional parentheses for formulas
_RE_PAREN = re.compile(r"\(([^()]+)\)$")
# Gate type identifications
_RE_AND = re.compile(r"(" + NAME_SIG + r"(\s*&\s*" + NAME_SIG + r"\s*)+)$")
_RE_OR = re.compile(r"(" + NAME_SIG + r"(\s*\|\s*" + NAME_SIG + r"\s*)+)$")
_RE_NULL = re.compile(r"(" + NAME_SIG + r")$")


class ShorthandTree(object):
    """Collection of gate definitions before the tree is built.

    Attributes:
        name: The name of the fault tree.
        gates: Gate definitions as (operator, arguments) by gate name.
        order: Gate names in the order of definition.
        probabilities: Basic event probabilities by name.
    """

    def __init__(self):
        """Initializes an empty collection."""
        self.name = None
        self.gates = {}
        self.order = []
        self.probabilities = {}

    def __check_redefinition(self, name):
        """Checks if an event is being redefined.

        Raises:
            FaultTreeError: The given name already exists.
        """
        if name in self.gates or name in self.probabilities:
            raise FaultTreeError("Redefinition of an event: " + name)

    def add_gate(self, name, operator, arguments):
        """Adds a new gate definition.

        Raises:
            FaultTreeError: The given name already exists.
        """
        self.__check_redefinition(name)
        self.gates[name] = (operator, arguments)
        self.order.append(name)

    def add_basic_event(self, name, prob):
        """Adds the probability of a basic event.

        Raises:
            FaultTreeError: The given name already exists.
        """
        self.__check_redefinition(name)
        self.probabilities[name] = float(prob)

    def __visit(self, name, marks):
        """Recursively visits the given gate sub-tree to detect a cycle.

        Returns:
            None if no cycle is found.
            A list of gate names in a detected cycle path in reverse order.
        """
        if not marks.get(name):
            marks[name] = "temp"
            for child in self.gates[name][1]:
                if child in self.gates:
                    cycle = self.__visit(child, marks)
                    if cycle:
                        cycle.append(name)
                        return cycle
            marks[name] = "perm"
        elif marks[name] == "temp":
            return [name]  # a cycle is detected
        return None  # the permanent mark

    def detect_top(self):
        """Detects the top gate.

        Returns:
            The name of the top gate.

        Raises:
            FaultTreeError: Multiple or no top gates are detected.
        """
        arguments = set()
        for _, args in self.gates.values():
            arguments.update(args)
        top_gates = [x for x in self.order if x not in arguments]
        if len(top_gates) > 1:
            raise FaultTreeError("Detected multiple top gates:\n" +
                                 str(top_gates))
        if not top_gates:
            raise FaultTreeError("No top gate is detected")
        return top_gates[0]

    def detect_cycle(self, top_gate):
        """Checks if the gates have a cycle.

        Raises:
            FaultTreeError: There is a cycle or detached gates.
        """
        marks = {}
        cycle = self.__visit(top_gate, marks)
        if cycle:
            raise_cycle(cycle)

        detached_gates = [x for x in self.order if not marks.get(x)]
        if detached_gates:
            error_msg = "Detected detached gates that may be in a cycle\n"
            error_msg += str(detached_gates)
            try:
                for gate in detached_gates:
                    cycle = self.__visit(gate, marks)
                    if cycle:
                        raise_cycle(cycle)
            except FaultTreeError as error:
                error_msg += "\n" + str(error)
            raise FaultTreeError(error_msg)

    def build(self):
        """Expands the gate definitions into a fault tree graph.

        Returns:
            A validated FaultTree.

        Raises:
            FaultTreeError: There are problems with the fault tree.
        """
        top_gate = self.detect_top()
        self.detect_cycle(top_gate)
        if self.name in self.gates:
            raise FaultTreeError("The fault tree name clashes with a gate: " +
                                 self.name)
        nodes = [Node(1, self.name, "top")]
        edges = []

        def expand(name, parent_id):
            """Adds a new node occurrence for the event under the parent."""
            node_id = len(nodes) + 1
            if name in self.gates:
                operator, arguments = self.gates[name]
                nodes.append(Node(node_id, name, operator))
                edges.append(Edge(parent_id, node_id))
                for argument in arguments:
                    expand(argument, node_id)
            else:
                nodes.append(Node(node_id, name, "basic"))
                edges.append(Edge(parent_id, node_id))

        expand(top_gate, 1)
        return FaultTree(nodes, edges, self.name, self.probabilities)


def get_arguments(arguments_string, splitter):
    """Splits the input string into arguments of a formula.

    Args:
        arguments_string: String contaning arguments.
        splitter: Splitter specific to the operator, i.e. "&", "|".

    Returns:
        arguments list from the input string.

    Raises:
        FaultTreeError: Repeated arguments for the formula.
    """
    arguments = arguments_string.strip().split(splitter)
    arguments = [x.strip() for x in arguments]
    if len(arguments) > len(set(arguments)):
        raise FaultTreeError("Repeated arguments:\n" + arguments_string)
    return arguments


def get_formula(line):
    """Constructs formula from the given line.

    Args:
        line: A string containing a Boolean equation.

    Returns:
        A formula operator and arguments.

    Raises:
        ParsingError: Parsing is unsuccessful.
        FaultTreeError: Problems in the structure of the formula.
    """
    line = line.strip()
    if _RE_PAREN.match(line):
        line = _RE_PAREN.match(line).group(1).strip()
    if _RE_OR.match(line):
        arguments = get_arguments(_RE_OR.match(line).group(1), "|")
        operator = "or"
    elif _RE_AND.match(line):
        arguments = get_arguments(_RE_AND.match(line).group(1), "&")
        operator = "and"
    elif _RE_NULL.match(line):
        arguments = [_RE_NULL.match(line).group(1).strip()]
        operator = "and"  # pass-through
    else:
        raise ParsingError("Cannot interpret the formula:\n" + line)
    return operator, arguments


def interpret_line(line, shorthand_tree):
    """Interprets a line from the shorthand format input.

    Args:
        line: The line in the shorthand format.
        shorthand_tree: The gate definitions to update.

    Raises:
        ParsingError: Parsing is unsuccessful.
        FormatError: Formatting problems in the input.
        FaultTreeError: Problems in the structure of the fault tree.
    """
    line = line.strip()
    if not line:
        return
    if _RE_GATE.match(line):
        gate_name, formula_line = _RE_GATE.match(line).group("name", "formula")
        operator, arguments = get_formula(formula_line)
        shorthand_tree.add_gate(gate_name, operator, arguments)
    elif _RE_PROB.match(line):
        event_name, prob = _RE_PROB.match(line).group("name", "prob")
        shorthand_tree.add_basic_event(event_name, prob)
    elif _RE_FT_NAME.match(line):
        if shorthand_tree.name:
            raise FormatError("Redefinition of the fault tree name:\n%s to %s" %
                              (shorthand_tree.name, line))
        shorthand_tree.name = _RE_FT_NAME.match(line).group(1)
    else:
        raise ParsingError("Cannot interpret the line.")


def parse_input(shorthand_file):
    """Parses an input with a shorthand description of a fault tree.

    Args:
        shorthand_file: The input file open for reads or lines of text.

    Returns:
        The fault tree described in the input.

    Raises:
        ParsingError: Parsing is unsuccessful.
        FormatError: Formatting problems in the input.
        FaultTreeError: Problems in the structure of the fault tree.
    """
    shorthand_tree = ShorthandTree()
    line_num = 0
    line = None
    try:
        for line in shorthand_file:
            line_num += 1
            interpret_line(line, shorthand_tree)
    except ParsingError as err:
        raise ParsingError(str(err) + "\nIn line %d:\n" % line_num + line)
    except FormatError as err:
        raise FormatError(str(err) + "\nIn line %d:\n" % line_num + line)
    except FaultTreeError as err:
        raise FaultTreeError(str(err) + "\nIn line %d:\n" % line_num + line)
    if shorthand_tree.name is None:
        raise FormatError("The fault tree name is not given.")
    if not shorthand_tree.gates:
        raise FormatError("No gates are defined.")
    return shorthand_tree.build()


def parse_text(text):
    """Parses a shorthand description given as a string."""
    return parse_input(text.splitlines())
