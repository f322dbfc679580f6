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
"""Tests for gate tables and equation building."""

from unittest import TestCase

import pytest

from pyfta.datasets import demo_nodes, demo_edges, agent_nodes, agent_edges
from pyfta.expression import extract_events
from pyfta.fault_tree import FaultTree, FaultTreeError
from pyfta.gates import Gate, curate, equate, gate_map, check_acyclic
from pyfta.shorthand import parse_text


@pytest.fixture()
def demo_gates():
    """Gate table of the demonstration tree."""
    return curate(FaultTree.from_frames(demo_nodes(), demo_edges()))


def test_curate(demo_gates):
    """The top gate is first, other gates are unique and sorted."""
    assert [x.name for x in demo_gates] == ["T", "G1", "G2", "G3", "G4", "G5"]
    assert [x.role for x in demo_gates] == ["top"] + ["gate"] * 5
    fragments = dict((x.name, x.fragment) for x in demo_gates)
    assert fragments == {
        "T": "(G1)",
        "G1": "(G2 * G3)",
        "G2": "(B * G5)",
        "G3": "(A + G4)",
        "G4": "(B * C)",
        "G5": "(C + D)",
    }


def test_equate_demo(demo_gates):
    """Gates are inlined down to basic events."""
    assert equate(demo_gates) == "((B * (C + D)) * (A + (B * C)))"


def test_equate_agent():
    """The top event combines a gate and a basic event."""
    gates = curate(FaultTree.from_frames(agent_nodes(), agent_edges()))
    assert gates[0].fragment == "(G3 * CWE)"
    assert equate(gates) == "((AF + TO + RL) * CWE)"


def test_equation_has_only_basic_events(demo_gates):
    """No gate name survives in the equation."""
    equation = equate(demo_gates)
    assert extract_events(equation) == ["A", "B", "C", "D"]


def test_name_prefix_collision():
    """Gate names that are prefixes of other names are not confused."""
    gates = [
        Gate("T", "top", ["G1"]),
        Gate("G1", "or", ["G10", "A"]),
        Gate("G10", "and", ["B", "C"]),
    ]
    assert equate(gates) == "((B * C) + A)"


def test_shared_subtree():
    """Repeated gates are inlined at every reference."""
    fault_tree = parse_text("FT\n"
                            "top := g1 & g2\n"
                            "g1 := a | g3\n"
                            "g2 := b | g3\n"
                            "g3 := c & d\n")
    assert equate(curate(fault_tree)) == "((a + (c * d)) * (b + (c * d)))"


class GateTableTestCase(TestCase):
    """Malformed gate tables."""

    def test_no_children(self):
        """Gates without arguments are rejected."""
        self.assertRaises(FaultTreeError, Gate, "G1", "and", [])

    def test_missing_top(self):
        """There must be a top gate."""
        gates = [Gate("G1", "and", ["A", "B"])]
        self.assertRaises(FaultTreeError, gate_map, gates)
        self.assertRaises(FaultTreeError, equate, gates)

    def test_multiple_tops(self):
        """Only one top gate is allowed."""
        gates = [Gate("T", "top", ["A"]), Gate("U", "top", ["B"])]
        self.assertRaises(FaultTreeError, gate_map, gates)

    def test_repeated_names(self):
        """Each gate name has a single record."""
        gates = [Gate("T", "top", ["G1"]), Gate("G1", "and", ["A", "B"]),
                 Gate("G1", "or", ["A", "B"])]
        self.assertRaises(FaultTreeError, gate_map, gates)

    def test_cycle(self):
        """Cycles among gates are detected before inlining."""
        gates = [Gate("T", "top", ["G1"]), Gate("G1", "and", ["A", "G2"]),
                 Gate("G2", "or", ["B", "G1"])]
        self.assertRaises(FaultTreeError, check_acyclic, gates)
        self.assertRaises(FaultTreeError, equate, gates)
