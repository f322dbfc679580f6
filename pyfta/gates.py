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
"""Gate tables and the flattening of gates into a single equation.

The gate table holds one record per gate name
with the Boolean fragment over the immediate arguments of the gate.
The equation of the whole tree is produced
by inlining gate fragments into their parents down to basic events.
"""

from pyfta.expression import Literal, And, Or
from pyfta.fault_tree import FaultTreeError, raise_cycle


class Gate(object):  # pylint: disable=too-few-public-methods
    """Record of a gate with the names of its immediate arguments.

    Attributes:
        name: The event name of the gate.
        kind: "top", "and", or "or".
        role: "top" for the top event, "gate" otherwise.
        children: Ordered names of argument events.
        fragment: The Boolean formula over the arguments, e.g., "(A * G2)".
    """

    def __init__(self, name, kind, children):
        """Initializes a gate record.

        Args:
            name: The event name of the gate.
            kind: The kind of the gate.
            children: The names of the argument events.

        Raises:
            FaultTreeError: The gate has no arguments.
        """
        if not children:
            raise FaultTreeError("Gate %s has no arguments" % name)
        self.name = name
        self.kind = kind
        self.role = "top" if kind == "top" else "gate"
        self.children = list(children)
        div = " + " if kind == "or" else " * "
        self.fragment = "(" + div.join(self.children) + ")"

    def __repr__(self):
        return "Gate(%r, %r, %r)" % (self.name, self.kind, self.children)


def curate(fault_tree):
    """Reduces the fault tree graph to one record per gate.

    Args:
        fault_tree: A valid fault tree.

    Returns:
        A list of Gate records with the top gate first
        and the rest sorted by name.
    """
    gates = {}
    for node in fault_tree.gate_nodes():
        if node.event in gates:
            continue  # repeated gates have the same definition
        gates[node.event] = Gate(
            node.event, node.kind,
            [x.event for x in fault_tree.children(node.id)])
    top = gates.pop(fault_tree.top.event)
    return [top] + [gates[x] for x in sorted(gates)]


def gate_map(gates):
    """Maps gate names to gate records.

    Args:
        gates: A collection of Gate records.

    Returns:
        A dictionary of gates by name and the top gate.

    Raises:
        FaultTreeError: Missing or multiple top gates, or repeated names.
    """
    mapping = {}
    tops = []
    for gate in gates:
        if gate.name in mapping:
            raise FaultTreeError("Redefinition of a gate: " + gate.name)
        mapping[gate.name] = gate
        if gate.role == "top":
            tops.append(gate)
    if not tops:
        raise FaultTreeError("No top gate is detected")
    if len(tops) > 1:
        raise FaultTreeError("Detected multiple top gates:\n" +
                             str([x.name for x in tops]))
    return mapping, tops[0]


def check_acyclic(gates):
    """Checks that the gate table has no cycles.

    Args:
        gates: A collection of Gate records.

    Raises:
        FaultTreeError: There is a cycle in the gate table.
    """
    mapping, top = gate_map(gates)
    marks = {}

    def visit(gate):
        """Returns a reversed cycle path or None."""
        if not marks.get(gate.name):
            marks[gate.name] = "temp"
            for child in gate.children:
                if child in mapping:
                    cycle = visit(mapping[child])
                    if cycle:
                        cycle.append(gate.name)
                        return cycle
            marks[gate.name] = "perm"
        elif marks[gate.name] == "temp":
            return [gate.name]
        return None

    for gate in [top] + list(mapping.values()):
        cycle = visit(gate)
        if cycle:
            raise_cycle(cycle)


def build_expression(gates):
    """Builds the expression tree of the top gate.

    Gate references are inlined recursively;
    references are matched by whole names only.

    Args:
        gates: A collection of Gate records.

    Returns:
        The expression over basic events.

    Raises:
        FaultTreeError: Missing top gate or cycles in the gates.
    """
    check_acyclic(gates)
    mapping, top = gate_map(gates)
    inlined = {}

    def inline(name):
        """Returns the expression for an event name."""
        if name not in mapping:
            return Literal(name)
        if name not in inlined:
            gate = mapping[name]
            args = [inline(x) for x in gate.children]
            if len(args) == 1:
                inlined[name] = args[0]
            elif gate.kind == "or":
                inlined[name] = Or(args)
            else:
                inlined[name] = And(args)
        return inlined[name]

    return inline(top.name)


def equate(gates):
    """Produces the Boolean equation of the fault tree.

    Args:
        gates: A collection of Gate records from curate().

    Returns:
        The equation string with basic events only.

    Raises:
        FaultTreeError: Missing top gate or cycles in the gates.
    """
    return str(build_expression(gates))
