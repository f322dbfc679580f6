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
"""Tests for binary and probability scenarios."""

import logging
from unittest import TestCase

import pandas as pd
import pytest

from pyfta.expression import formulate
from pyfta.quantify import ScenarioError, quantify, quantify_prob, populate
from pyfta.truth_table import calculate

DEMO = "((B * (C + D)) * (A + (B * C)))"
PROBS = {"A": 0.1, "B": 0.2, "C": 0.3, "D": 0.4}


@pytest.fixture()
def evaluator():
    """The compiled demonstration equation."""
    return formulate(DEMO)


def test_binary_scenarios(evaluator):
    """Outcomes are added to a copy of the scenarios."""
    scenarios = pd.DataFrame({
        "scenario": ["s1", "s2", "s3"],
        "A": [1, 0, True],
        "B": [1, 0, True],
        "C": [1, 0, False],
        "D": [0, 0, True],
    })
    result = quantify(evaluator, scenarios)
    assert result["outcome"].tolist() == [True, False, True]
    assert result["outcome"].dtype == bool
    assert "outcome" not in scenarios.columns
    assert result["scenario"].tolist() == ["s1", "s2", "s3"]


def test_single_binary_scenario(evaluator):
    """A single scenario gives a single boolean."""
    assert quantify(evaluator, {"A": 1, "B": 1, "C": 1, "D": 0}) is True
    assert quantify(evaluator, [0, 0, 0, 0]) is False
    assert quantify(evaluator, (False, True, True, False)) is True


def test_missing_events(evaluator):
    """Errors name the basic events without values."""
    scenarios = pd.DataFrame({"A": [1], "B": [1]})
    with pytest.raises(ScenarioError) as err:
        quantify(evaluator, scenarios)
    assert "C, D" in str(err.value)
    with pytest.raises(ScenarioError):
        quantify(evaluator, [1, 1])
    with pytest.raises(ScenarioError):
        quantify_prob(evaluator, {"A": 0.5})


def test_exact_probability(evaluator):
    """The probability sums over all failure rows."""
    assert quantify_prob(evaluator, PROBS) == pytest.approx(0.0656)
    assert quantify_prob(evaluator, [0.5] * 4) == pytest.approx(5 / 16)


def test_probability_bounds(evaluator):
    """Certain events give certain outcomes."""
    assert quantify_prob(evaluator, [0, 0, 0, 0]) == 0
    assert quantify_prob(evaluator, [1, 1, 1, 1]) == pytest.approx(1)


def test_probability_table(evaluator):
    """Several scenarios give a series aligned with the input rows."""
    table = pd.DataFrame([PROBS, {"A": 0.5, "B": 0.5, "C": 0.5, "D": 0.5}],
                         index=["low", "half"])
    result = quantify_prob(evaluator, table)
    assert isinstance(result, pd.Series)
    assert list(result.index) == ["low", "half"]
    assert result.tolist() == pytest.approx([0.0656, 5 / 16])


def test_single_row_table(evaluator):
    """A table with one row gives a number."""
    result = quantify_prob(evaluator, pd.DataFrame([PROBS]))
    assert isinstance(result, float)
    assert result == pytest.approx(0.0656)


def test_reused_truth_table(evaluator):
    """A precomputed truth table gives the same result."""
    table = calculate(evaluator)
    assert quantify_prob(evaluator, PROBS, table) == pytest.approx(0.0656)


def test_out_of_range(evaluator, caplog):
    """Invalid probabilities are reported but computed."""
    with caplog.at_level(logging.WARNING):
        result = quantify_prob(evaluator, [0.5, 1.5, 0.5, 0.5])
    assert "outside [0, 1]" in caplog.text
    assert isinstance(result, float)


class PopulateTestCase(TestCase):
    """Conversion of binary scenarios into probability scenarios."""

    def setUp(self):
        self.binary = pd.DataFrame(
            {
                "scenario": ["s1", "s2"],
                "A": [1, 0],
                "B": [0, 1],
                "outcome": [True, False],
            },
            index=[10, 20])

    def test_mapping(self):
        """Ones become probabilities and zeros stay zeros."""
        result = populate(self.binary, {"A": 0.1, "B": 0.2})
        self.assertEqual(list(result.columns), list(self.binary.columns))
        self.assertEqual(list(result.index), [10, 20])
        self.assertEqual(result["A"].tolist(), [0.1, 0.0])
        self.assertEqual(result["B"].tolist(), [0.0, 0.2])
        self.assertEqual(result["scenario"].tolist(), ["s1", "s2"])
        self.assertEqual(result["outcome"].tolist(), [True, False])
        self.assertEqual(self.binary["A"].tolist(), [1, 0])

    def test_table(self):
        """Probabilities may come as an event table."""
        table = pd.DataFrame({"event": ["B", "A"], "probability": [0.2, 0.1]})
        result = populate(self.binary, table)
        self.assertEqual(result["A"].tolist(), [0.1, 0.0])

    def test_missing(self):
        """Every event column needs a probability."""
        self.assertRaises(ScenarioError, populate, self.binary, {"A": 0.1})
        self.assertRaises(ScenarioError, populate, self.binary,
                          pd.DataFrame({"event": ["A"]}))
        self.assertRaises(ScenarioError, populate, [[1, 0]], {"A": 0.1})


@pytest.mark.parametrize("values", [
    [1, float("nan")], [1, 2], [1, 0.5], [1, None]
])
def test_non_binary_scenarios(evaluator, values):
    """Missing or non-binary values are rejected with the event name."""
    scenarios = pd.DataFrame({"A": [1, 1], "B": [1, 1], "C": values,
                              "D": [0, 0]})
    with pytest.raises(ScenarioError) as err:
        quantify(evaluator, scenarios)
    assert "C" in str(err.value)


def test_non_binary_single_scenario(evaluator):
    """Single scenarios with missing or non-numeric values are rejected."""
    with pytest.raises(ScenarioError):
        quantify(evaluator, {"A": 1, "B": 1, "C": float("nan"), "D": 0})
    with pytest.raises(ScenarioError):
        quantify(evaluator, ["yes", 1, 1, 0])
