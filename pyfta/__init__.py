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
"""Fault tree analysis with minimal cut sets and exact probabilities.

The analysis is a pipeline of pure functions:

    curate -> equate -> formulate -> calculate -> concentrate -> tabulate

with MOCUS feeding the minimization directly from the gate table,
and quantify/quantify_prob evaluating scenarios with the compiled equation.
"""

from collections import namedtuple

from pyfta.config import Limits, LimitError, ConfigError
from pyfta.coverage import tabulate, CoverageError
from pyfta.expression import formulate, parse, ParsingError
from pyfta.fault_tree import FaultTree, Node, Edge, FaultTreeError
from pyfta.gates import curate, equate, Gate
from pyfta.minimize import concentrate, render_sum
from pyfta.mocus import mocus
from pyfta.quantify import quantify, quantify_prob, populate, ScenarioError
from pyfta.truth_table import calculate

__version__ = "0.4.0"

Analysis = namedtuple(
    "Analysis",
    ["gates", "equation", "evaluator", "truth_table", "cut_sets", "coverage"])


def analyze(fault_tree, method="mocus", probabilities=None):
    """Runs the full analysis of a fault tree.

    Args:
        fault_tree: A valid FaultTree.
        method: The minimization method, "mocus" or "ccubes".
        probabilities: Optional event probabilities
            for the weighted coverage.

    Returns:
        Analysis record with all intermediate results.
    """
    gates = curate(fault_tree)
    equation = equate(gates)
    evaluator = formulate(equation)
    truth_table = calculate(evaluator)
    if method.lower() == "mocus":
        cut_sets = concentrate(gates, method)
    else:
        cut_sets = concentrate(truth_table, method)
    coverage = tabulate(cut_sets, truth_table, probabilities)
    return Analysis(gates, equation, evaluator, truth_table, cut_sets,
                    coverage)


__all__ = [
    "Analysis", "analyze", "calculate", "concentrate", "ConfigError",
    "CoverageError", "curate", "Edge", "equate", "FaultTree",
    "FaultTreeError", "formulate", "Gate", "LimitError", "Limits", "mocus",
    "Node", "parse", "ParsingError", "populate", "quantify", "quantify_prob",
    "render_sum", "ScenarioError", "tabulate"
]
