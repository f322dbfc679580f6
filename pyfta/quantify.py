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
"""Evaluation of fault tree scenarios.

Binary scenarios give the failure of the top event directly.
Probability scenarios give the exact top event probability
by summing the probabilities of all failure rows of the truth table
under the assumption of independent basic events.
"""

from collections.abc import Mapping
import logging

import numpy as np
import pandas as pd

from pyfta.truth_table import calculate, event_columns

# Columns of scenario tables that are not basic events
_NON_EVENT_COLUMNS = ("scenario", "outcome")


class ScenarioError(Exception):
    """Scenarios do not match the basic events of the fault tree."""

    pass


def _check_missing(parameters, names, what):
    """Raises an error naming the parameters without values."""
    missing = [x for x in parameters if x not in names]
    if missing:
        raise ScenarioError("%s must contain values for all basic events. "
                            "Missing: %s" % (what, ", ".join(missing)))


def _as_mapping(evaluator, scenario, what):
    """Converts a single scenario into a mapping by event names.

    Args:
        evaluator: The compiled equation.
        scenario: A mapping by event names or a sequence in parameter order.
        what: The description of the scenario for error messages.

    Raises:
        ScenarioError: Missing events or wrong length of the sequence.
    """
    parameters = evaluator.parameters
    if isinstance(scenario, Mapping):
        _check_missing(parameters, scenario, what)
        return {x: scenario[x] for x in parameters}
    values = list(scenario)
    if len(values) != len(parameters):
        raise ScenarioError("%s length must match the number of basic events "
                            "(%d)" % (what, len(parameters)))
    return dict(zip(parameters, values))


def _to_binary(values, name):
    """Coerces booleans or 0/1 numbers into integers.

    Raises:
        ScenarioError: Missing or non-binary values of the event.
    """
    try:
        values = np.asarray(values, dtype=float)
    except (TypeError, ValueError):
        raise ScenarioError("Non-numeric values for event " + name)
    if not np.all((values == 0) | (values == 1)):
        raise ScenarioError("Values for event %s must be 0 or 1 "
                            "(missing values are not allowed)" % name)
    return values.astype(np.int64)


def quantify(evaluator, scenarios):
    """Determines the failure of the top event in binary scenarios.

    Args:
        evaluator: The compiled equation from formulate().
        scenarios: DataFrame with one column per basic event,
            or a single scenario as a mapping or a sequence.

    Returns:
        A copy of the DataFrame with the boolean "outcome" column,
        or a single boolean.

    Raises:
        ScenarioError: Some basic events are missing or not binary.
    """
    if isinstance(scenarios, pd.DataFrame):
        _check_missing(evaluator.parameters, scenarios.columns, "scenarios")
        values = evaluator(
            *[_to_binary(scenarios[x], x) for x in evaluator.parameters])
        result = scenarios.copy()
        result["outcome"] = np.asarray(values) >= 1
        return result
    values = _as_mapping(evaluator, scenarios, "scenarios")
    binary = {x: int(_to_binary([y], x)[0]) for x, y in values.items()}
    return bool(evaluator(**binary) >= 1)


def _check_range(probs):
    """Warns about values outside of [0, 1]."""
    probs = np.asarray(probs, dtype=float)
    if np.any((probs < 0) | (probs > 1)):
        logging.warning("Some probabilities are outside [0, 1]; "
                        "results may not be valid probabilities.")


def quantify_prob(evaluator, probabilities, truth_table=None):
    """Computes the exact probability of the top event.

    Args:
        evaluator: The compiled equation from formulate().
        probabilities: Probabilities of basic events:
            a mapping or a sequence for a single scenario,
            or a DataFrame with one scenario per row.
        truth_table: The truth table to reuse across calls.

    Returns:
        The probability as a float for a single scenario
        or a Series aligned with the rows of the DataFrame.

    Raises:
        ScenarioError: Some basic events are missing.
    """
    parameters = evaluator.parameters
    single = not isinstance(probabilities, pd.DataFrame)
    if not single and len(probabilities) == 1:
        single = True
        probabilities = probabilities.iloc[0].to_dict()
    if single:
        scenario = _as_mapping(evaluator, probabilities, "probabilities")
        matrix = np.array([[float(scenario[x]) for x in parameters]])
        index = None
    else:
        _check_missing(parameters, probabilities.columns, "probabilities")
        matrix = probabilities[list(parameters)].to_numpy(dtype=float)
        index = probabilities.index
    _check_range(matrix)

    if truth_table is None:
        truth_table = calculate(evaluator)
    columns = event_columns(truth_table)
    _check_missing(parameters, columns, "truth_table")

    failures = truth_table.loc[truth_table["outcome"] >= 1,
                               list(parameters)].to_numpy()
    # terms[s, r, i] is the probability of event i in row r under scenario s
    terms = np.where(failures[None, :, :] == 1, matrix[:, None, :],
                     1 - matrix[:, None, :])
    result = terms.prod(axis=2).sum(axis=1)
    if single:
        return float(result[0])
    return pd.Series(result, index=index, name="probability")


def probability_lookup(probabilities):
    """Converts event probabilities into a dictionary.

    Args:
        probabilities: A mapping or a DataFrame
            with "event" and "probability" columns.

    Raises:
        ScenarioError: The table has no "event" or "probability" column.
    """
    if isinstance(probabilities, pd.DataFrame):
        for column in ("event", "probability"):
            if column not in probabilities.columns:
                raise ScenarioError(
                    "Event probabilities need the column: " + column)
        return dict(zip(probabilities["event"], probabilities["probability"]))
    return dict(probabilities)


def populate(binary, probabilities):
    """Replaces occurrences of events with their probabilities.

    Every 1 in an event column becomes the probability of the event,
    and every 0 stays 0.
    The "scenario" and "outcome" columns are kept as they are.

    Args:
        binary: DataFrame of binary scenarios.
        probabilities: A mapping or a DataFrame
            with "event" and "probability" columns.

    Returns:
        A new DataFrame with the same rows, index, and column order.

    Raises:
        ScenarioError: Some events have no probabilities.
    """
    if not isinstance(binary, pd.DataFrame):
        raise ScenarioError("Binary scenarios must be a DataFrame")
    lookup = probability_lookup(probabilities)
    columns = [x for x in binary.columns if x not in _NON_EVENT_COLUMNS]
    missing = [x for x in columns if x not in lookup]
    if missing:
        raise ScenarioError("Missing probabilities for events: " +
                            ", ".join(missing))
    result = binary.copy()
    for column in columns:
        result[column] = np.where(binary[column] == 1,
                                  float(lookup[column]), 0.0)
    return result
