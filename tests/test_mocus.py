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
"""Tests for MOCUS cut set generation."""

import pytest

from pyfta.config import Limits, LimitError
from pyfta.datasets import demo_nodes, demo_edges, agent_nodes, agent_edges
from pyfta.fault_tree import FaultTree, FaultTreeError
from pyfta.gates import Gate, curate
from pyfta.mocus import mocus


@pytest.fixture(autouse=True)
def limits():
    """Restores the default limits after every test."""
    yield Limits
    Limits.reset()


@pytest.fixture()
def demo_gates():
    """Gate table of the demonstration tree."""
    return curate(FaultTree.from_frames(demo_nodes(), demo_edges()))


def test_demo_cut_sets(demo_gates):
    """Raw cut sets are not minimized."""
    assert mocus(demo_gates) == [("A", "B", "C"), ("A", "B", "D"),
                                 ("B", "C"), ("B", "C", "D")]


def test_agent_cut_sets():
    """An OR gate under the top splits into one set per argument."""
    gates = curate(FaultTree.from_frames(agent_nodes(), agent_edges()))
    assert sorted(mocus(gates)) == [("AF", "CWE"), ("CWE", "RL"),
                                    ("CWE", "TO")]


def test_basic_events_only(demo_gates):
    """Cut sets have no gates and no repeated events."""
    names = set(x.name for x in demo_gates)
    for cut_set in mocus(demo_gates):
        assert not names.intersection(cut_set)
        assert len(cut_set) == len(set(cut_set))


def test_missing_top():
    """The expansion starts at the top gate."""
    with pytest.raises(FaultTreeError):
        mocus([Gate("G1", "or", ["A", "B"])])


def test_cycle():
    """Cycles would never terminate the expansion."""
    gates = [Gate("T", "top", ["G1"]), Gate("G1", "or", ["A", "G1"])]
    with pytest.raises(FaultTreeError):
        mocus(gates)


def test_set_limit(demo_gates, limits):
    """The number of cut sets is limited."""
    with pytest.raises(LimitError):
        mocus(demo_gates, max_sets=2)
    limits.set_max_sets(2)
    with pytest.raises(LimitError):
        mocus(demo_gates)
    assert len(mocus(demo_gates, max_sets=10)) == 4
