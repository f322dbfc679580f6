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
"""Exhaustive truth tables of compiled fault tree equations.

The time and memory complexity is O(2^N * N)
for N basic events in the equation.
The number of events is limited by the configuration
(see pyfta.config.Limits.max_events)
so that large trees fail early instead of exhausting memory.
"""

import logging

import numpy as np
import pandas as pd

from pyfta import config


def enumerate_states(num_events):
    """Generates all binary assignments of the given number of variables.

    The first variable changes the slowest.

    Args:
        num_events: The number of variables.

    Returns:
        A (2^N, N) integer numpy array.
    """
    rows = np.arange(2 ** num_events, dtype=np.int64)
    shifts = np.arange(num_events - 1, -1, -1, dtype=np.int64)
    return (rows[:, None] >> shifts) & 1


def calculate(evaluator, max_events=None):
    """Computes the truth table of the evaluator.

    The table is computed once per evaluator and cached;
    every call returns a copy.

    Args:
        evaluator: The compiled equation from formulate().
        max_events: The limit on the number of basic events.

    Returns:
        DataFrame with one column per basic event and the "outcome" column,
        failure rows (outcome == 1) first.

    Raises:
        LimitError: Too many basic events for exhaustive enumeration.
    """
    num_events = len(evaluator.parameters)
    limit = config.max_events(max_events)
    if num_events > limit:
        raise config.LimitError(
            "The truth table of %d basic events exceeds the limit of %d "
            "events (2^%d rows)" % (num_events, limit, num_events))
    if evaluator.truth_table is None:
        states = enumerate_states(num_events)
        values = evaluator(*[states[:, i] for i in range(num_events)])
        table = pd.DataFrame(states, columns=list(evaluator.parameters))
        table["outcome"] = (np.asarray(values) >= 1).astype(np.int64)
        table = table.sort_values("outcome", ascending=False,
                                  kind="mergesort").reset_index(drop=True)
        logging.debug("Truth table of %d rows with %d failures", len(table),
                      table["outcome"].sum())
        evaluator.truth_table = table
    return evaluator.truth_table.copy()


def event_columns(table):
    """Returns the basic event columns of a truth table."""
    return [x for x in table.columns if x != "outcome"]


def row_probabilities(table, probabilities):
    """Computes the probability of every row of a truth table.

    The basic events are assumed independent.

    Args:
        table: The truth table.
        probabilities: A mapping with the probability of every event column.

    Returns:
        numpy array with one probability per row.

    Raises:
        KeyError: Missing probability of some event.
    """
    columns = event_columns(table)
    states = table[columns].to_numpy()
    probs = np.array([probabilities[x] for x in columns], dtype=float)
    return np.where(states == 1, probs, 1 - probs).prod(axis=1)
