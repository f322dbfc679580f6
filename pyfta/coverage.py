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
"""Coverage of truth table failures by minimal cut sets."""

import pandas as pd

from pyfta.expression import Evaluator
from pyfta.minimize import to_term, render_term
from pyfta.truth_table import calculate, row_probabilities


class CoverageError(Exception):
    """The coverage cannot be computed."""

    pass


def build_query(mincut):
    """Builds the truth table query for a minimal cut set.

    Args:
        mincut: A "*"-joined cut set string or a collection of event names.

    Returns:
        A query string for pandas.DataFrame.query,
        e.g., "A == 1 and B == 1 and outcome == 1".
    """
    labels = ["%s == %d" % (name, int(positive))
              for name, positive in sorted(to_term(mincut))]
    return " and ".join(labels + ["outcome == 1"])


def tabulate(mincuts, source, probabilities=None):
    """Computes the coverage of failure rows by every minimal cut set.

    The coverage is the fraction of truth table rows with failure
    where all the events of the cut set occur.
    Rows are counted with equal weight.
    If probabilities are given,
    the probability-weighted coverage is reported in addition.

    Args:
        mincuts: Minimal cut sets from concentrate().
        source: A truth table or an Evaluator.
        probabilities: Optional mapping of event probabilities.

    Returns:
        DataFrame with columns "mincut", "query", "cutsets", "failures",
        "coverage", and, with probabilities, "mass" and "mass_coverage".

    Raises:
        CoverageError: The truth table has no failure rows.
    """
    table = calculate(source) if isinstance(source, Evaluator) else source
    failures = int((table["outcome"] == 1).sum())
    if not failures:
        raise CoverageError("The truth table has no failure rows")
    weights = None
    if probabilities is not None:
        weights = pd.Series(row_probabilities(table, probabilities),
                            index=table.index)
        failure_mass = weights[table["outcome"] == 1].sum()
        if not failure_mass:
            raise CoverageError("The failure rows have zero probability")

    records = []
    for mincut in mincuts:
        query = build_query(mincut)
        matches = table.query(query)
        record = {
            "mincut": (mincut if isinstance(mincut, str) else
                       render_term(to_term(mincut))),
            "query": query,
            "cutsets": len(matches),
            "failures": failures,
            "coverage": len(matches) / failures,
        }
        if weights is not None:
            record["mass"] = weights[matches.index].sum()
            record["mass_coverage"] = record["mass"] / failure_mass
        records.append(record)
    columns = ["mincut", "query", "cutsets", "failures", "coverage"]
    if weights is not None:
        columns += ["mass", "mass_coverage"]
    return pd.DataFrame(records, columns=columns)
