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
"""Small example fault trees as node and edge tables."""

import pandas as pd


def demo_nodes():
    """Nodes of the demonstration fault tree.

    Events B and C appear at two nodes each.
    """
    return pd.DataFrame(
        [
            (1, "T", "top"),
            (2, "G1", "and"),
            (3, "G2", "and"),
            (4, "G3", "or"),
            (5, "G4", "and"),
            (6, "G5", "or"),
            (7, "A", "basic"),
            (8, "B", "basic"),
            (9, "B", "basic"),
            (10, "C", "basic"),
            (11, "C", "basic"),
            (12, "D", "basic"),
        ],
        columns=["id", "event", "type"])


def demo_edges():
    """Edges of the demonstration fault tree.

    T -> G1 (AND) -> {G2 (AND) -> {B, G5 (OR) -> {C, D}},
                      G3 (OR) -> {A, G4 (AND) -> {B, C}}}
    """
    return pd.DataFrame(
        [(1, 2), (2, 3), (3, 8), (3, 6), (6, 10), (6, 12), (2, 4), (4, 7),
         (4, 5), (5, 9), (5, 11)],
        columns=["from", "to"])


def agent_nodes():
    """Nodes of the AI agent task failure tree.

    AF: API failure, TO: timeout, RL: rate limit,
    CWE: context window exceeded.
    """
    return pd.DataFrame(
        [
            (1, "T", "top"),
            (2, "G3", "or"),
            (3, "AF", "basic"),
            (4, "TO", "basic"),
            (5, "RL", "basic"),
            (6, "CWE", "basic"),
        ],
        columns=["id", "event", "type"])


def agent_edges():
    """Edges of the AI agent task failure tree."""
    return pd.DataFrame([(1, 2), (2, 3), (2, 4), (2, 5), (1, 6)],
                        columns=["from", "to"])
