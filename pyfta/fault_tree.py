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
"""Fault tree graph model: nodes, edges, and validation."""

from collections import deque
import keyword
import logging
import re

KINDS = ("top", "and", "or", "basic")
GATE_KINDS = ("top", "and", "or")

# "not" (a gate) is the basic event marker in older node tables.
_KIND_ALIASES = {"not": "basic"}

# Pattern for event names
NAME_SIG = r"[a-zA-Z]\w*"
_RE_NAME = re.compile(r"^" + NAME_SIG + r"$")

# Column name of the truth table outcome
RESERVED_NAMES = ("outcome",)


class FaultTreeError(Exception):
    """Indication of problems in the fault tree."""

    pass


def check_name(name):
    """Verifies that an event name is usable as a Boolean variable.

    Args:
        name: The event name.

    Raises:
        FaultTreeError: The name is not a valid identifier.
    """
    if not isinstance(name, str) or not _RE_NAME.match(name):
        raise FaultTreeError("Invalid event name: " + repr(name))
    if keyword.iskeyword(name) or name in RESERVED_NAMES:
        raise FaultTreeError("Reserved word as an event name: " + name)


class Node(object):  # pylint: disable=too-few-public-methods
    """Representation of a node in a fault tree graph.

    Attributes:
        id: A unique integer identifier of the node.
        event: The event name. Several nodes may share the same event.
        kind: One of "top", "and", "or", "basic".
    """

    def __init__(self, id, event, kind):  # pylint: disable=redefined-builtin
        """Initializes a node.

        Args:
            id: Unique identifier for the node.
            event: The name of the event the node stands for.
            kind: The kind of the node (case-insensitive).

        Raises:
            FaultTreeError: The kind is not recognized.
        """
        kind = str(kind).lower()
        kind = _KIND_ALIASES.get(kind, kind)
        if kind not in KINDS:
            raise FaultTreeError("Unknown kind of node %s: %s" % (id, kind))
        self.id = int(id)
        self.event = event
        self.kind = kind

    def is_gate(self):
        """Indicates if this node is a gate or the top event."""
        return self.kind in GATE_KINDS

    def __repr__(self):
        return "Node(%d, %r, %r)" % (self.id, self.event, self.kind)


class Edge(object):  # pylint: disable=too-few-public-methods
    """Representation of a link from a gate to one of its arguments.

    Attributes:
        source: The id of the parent node.
        target: The id of the child node.
    """

    def __init__(self, source, target):
        """Initializes an edge between two node ids."""
        self.source = int(source)
        self.target = int(target)

    def __repr__(self):
        return "Edge(%d, %d)" % (self.source, self.target)


class FaultTree(object):
    """Representation of a fault tree as a graph of nodes and edges.

    The tree is validated upon construction.
    Event names are not unique:
    the same basic event may appear at several nodes,
    and the same gate may appear at several nodes
    as long as every occurrence has the same definition.

    Attributes:
        name: The name of the system described by the fault tree.
        nodes: A list of nodes in input order.
        edges: A list of edges in input order.
        top: The top event node.
        probabilities: Optional mapping of basic event names to probabilities.
    """

    def __init__(self, nodes, edges, name=None, probabilities=None):
        """Constructs and validates a fault tree.

        Args:
            nodes: Collection of Node objects.
            edges: Collection of Edge objects.
            name: The name of the fault tree.
            probabilities: Probabilities of basic events.

        Raises:
            FaultTreeError: The graph is not a valid fault tree.
        """
        self.name = name
        self.nodes = list(nodes)
        self.edges = list(edges)
        self.probabilities = dict(probabilities or {})
        self.top = None
        self.__nodes = {}
        self.__children = {}
        self.__validate()

    @classmethod
    def from_frames(cls, nodes, edges, name=None, probabilities=None):
        """Constructs a fault tree from node and edge tables.

        Args:
            nodes: DataFrame with "id", "event", and "type" or "kind" columns.
            edges: DataFrame with "from" and "to" columns.
            name: The name of the fault tree.
            probabilities: Probabilities of basic events.

        Returns:
            A validated fault tree.

        Raises:
            FaultTreeError: Missing columns or an invalid graph.
        """
        kind_column = "kind" if "kind" in nodes.columns else "type"
        for column in ("id", "event", kind_column):
            if column not in nodes.columns:
                raise FaultTreeError("Node table misses column: " + column)
        for column in ("from", "to"):
            if column not in edges.columns:
                raise FaultTreeError("Edge table misses column: " + column)
        node_list = [
            Node(row.id, row.event, getattr(row, kind_column))
            for row in nodes.itertuples(index=False)
        ]
        edge_list = [
            Edge(source, target)
            for source, target in zip(edges["from"], edges["to"])
        ]
        return cls(node_list, edge_list, name, probabilities)

    def __validate(self):
        """Checks the structure of the graph.

        Raises:
            FaultTreeError: There are problems with the fault tree.
        """
        for node in self.nodes:
            if node.id in self.__nodes:
                raise FaultTreeError("Duplicate node id: %d" % node.id)
            check_name(node.event)
            self.__nodes[node.id] = node
            self.__children[node.id] = []

        tops = [x for x in self.nodes if x.kind == "top"]
        if not tops:
            raise FaultTreeError("No top event is detected")
        if len(tops) > 1:
            raise FaultTreeError("Detected multiple top events:\n" +
                                 str([x.event for x in tops]))
        self.top = tops[0]

        has_parent = set()
        for edge in self.edges:
            for node_id in (edge.source, edge.target):
                if node_id not in self.__nodes:
                    raise FaultTreeError("Edge %r refers to unknown node %d" %
                                         (edge, node_id))
            parent = self.__nodes[edge.source]
            if not parent.is_gate():
                raise FaultTreeError("Basic event %s (node %d) has arguments" %
                                     (parent.event, parent.id))
            if self.__nodes[edge.target].kind == "top":
                raise FaultTreeError("The top event cannot be an argument")
            self.__children[edge.source].append(edge.target)
            has_parent.add(edge.target)

        for node in self.gate_nodes():
            if not self.__children[node.id]:
                raise FaultTreeError("Gate %s (node %d) has no arguments" %
                                     (node.event, node.id))

        self.__detect_cycle()
        self.__check_events()

        for node in self.nodes:
            if node is not self.top and node.id not in has_parent:
                logging.warning("Orphan node %d: %s", node.id, node.event)

    def __visit(self, node_id, marks):
        """Recursively visits the given sub-tree to detect a cycle.

        Args:
            node_id: The current gate node.
            marks: Node marks, "temp" or "perm".

        Returns:
            None if no cycle is found.
            A list of event names in a detected cycle path in reverse order.
        """
        mark = marks.get(node_id)
        if not mark:
            marks[node_id] = "temp"
            for child in self.__children[node_id]:
                cycle = self.__visit(child, marks)
                if cycle:
                    cycle.append(self.__nodes[node_id].event)
                    return cycle
            marks[node_id] = "perm"
        elif mark == "temp":
            return [self.__nodes[node_id].event]  # a cycle is detected
        return None  # the permanent mark

    def __detect_cycle(self):
        """Checks if the graph has a cycle.

        Raises:
            FaultTreeError: There is a cycle in the graph.
        """
        marks = {}
        for node in [self.top] + self.nodes:
            cycle = self.__visit(node.id, marks)
            if cycle:
                raise_cycle(cycle)

    def __check_events(self):
        """Checks that event names are used consistently.

        Raises:
            FaultTreeError: Conflicting definitions of an event.
        """
        definitions = {}
        for node in self.nodes:
            if node.kind == "basic":
                definition = ("basic", ())
            else:
                definition = (node.kind, tuple(
                    self.__nodes[x].event for x in self.__children[node.id]))
            known = definitions.setdefault(node.event, definition)
            if known[0] != definition[0] and "basic" in (known[0],
                                                         definition[0]):
                raise FaultTreeError("Event %s is both a gate and a basic "
                                     "event" % node.event)
            if known != definition:
                raise FaultTreeError("Redefinition of a gate: " + node.event)

    def node(self, node_id):
        """Returns the node with the given id."""
        return self.__nodes[node_id]

    def children(self, node_id):
        """Returns the child nodes of a node in the edge order."""
        return [self.__nodes[x] for x in self.__children[node_id]]

    def gate_nodes(self):
        """Returns the top and gate nodes."""
        return [x for x in self.nodes if x.is_gate()]

    def basic_events(self):
        """Returns the sorted unique names of basic events."""
        return sorted(set(x.event for x in self.nodes if x.kind == "basic"))

    def repeated_events(self):
        """Returns the sorted names of events appearing at several nodes."""
        counts = {}
        for node in self.nodes:
            counts[node.event] = counts.get(node.event, 0) + 1
        return sorted(x for x, count in counts.items() if count > 1)

    def to_xml(self, printer):
        """Produces the Open-PSA MEF XML definition of the fault tree.

        The gates are produced in topological order,
        and every repeated gate is defined once.
        The output XML representation is not formatted for human readability.

        Args:
            printer: The output stream.
        """
        printer('<opsa-mef>')
        printer('<define-fault-tree name="', self.name or self.top.event,
                '">')
        defined = set()
        for node in toposort_gates(self):
            if node.event in defined:
                continue
            defined.add(node.event)
            operator = "or" if node.kind == "or" else "and"
            printer('<define-gate name="', node.event, '">')
            printer('<', operator, '>')
            for child in self.children(node.id):
                type_str = "gate" if child.is_gate() else "basic-event"
                printer('<', type_str, ' name="', child.event, '"/>')
            printer('</', operator, '>')
            printer('</define-gate>')
        printer('</define-fault-tree>')

        printer('<model-data>')
        for event in self.basic_events():
            printer('<define-basic-event name="', event, '">')
            if event in self.probabilities:
                printer('<float value="', self.probabilities[event], '"/>')
            printer('</define-basic-event>')
        printer('</model-data>')
        printer('</opsa-mef>')


def raise_cycle(cycle):
    """Raises an error with the detected cycle.

    Args:
        cycle: A list of event names in the cycle path in reverse order.

    Raises:
        FaultTreeError: Error with a message containing the cycle.
    """
    start = cycle[0]
    cycle.reverse()  # print top-down
    raise FaultTreeError("Detected a cycle: " +
                         "->".join(cycle[cycle.index(start):]))


def toposort_gates(fault_tree):
    """Sorts gate nodes topologically starting from the top event.

    Args:
        fault_tree: A valid fault tree.

    Returns:
        A deque of sorted gate nodes reachable from the top event.
    """
    marks = {}

    def visit(node, final_list):
        """Recursively visits the given gate sub-tree to include into the list.

        Args:
            node: The current gate node.
            final_list: A deque of sorted gate nodes.
        """
        assert marks.get(node.id) != "temp"
        if not marks.get(node.id):
            marks[node.id] = "temp"
            for arg in reversed(fault_tree.children(node.id)):
                if arg.is_gate():
                    visit(arg, final_list)
            marks[node.id] = "perm"
            final_list.appendleft(node)

    sorted_gates = deque()
    visit(fault_tree.top, sorted_gates)
    return sorted_gates
