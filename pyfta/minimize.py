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
"""Minimal cut sets from MOCUS output or from truth tables.

Two methods are available:

    "mocus"  -- MOCUS cut sets simplified with absorption and consensus.
    "ccubes" -- Prime implicants of the failure rows of the truth table
                (Quine-McCluskey minimization).

Both return minimal cut sets as "*"-joined strings, e.g., ["B*C", "A*B*D"].
Complemented events are prefixed with "~".
"""

import logging

import pandas as pd
from sympy import Symbol, And, Or, Not
from sympy.logic.boolalg import SOPform

from pyfta.expression import Evaluator
from pyfta.fault_tree import FaultTree
from pyfta.gates import curate
from pyfta.mocus import mocus
from pyfta.truth_table import calculate, event_columns

METHODS = ("mocus", "ccubes")


def to_term(cut_set):
    """Converts a cut set into a product term.

    Args:
        cut_set: Iterable of event names, optionally prefixed with "~",
            or a "*"-joined string.

    Returns:
        frozenset of (name, positive) literal pairs.
    """
    if isinstance(cut_set, str):
        cut_set = cut_set.split("*")
    literals = []
    for event in cut_set:
        event = event.strip()
        if event.startswith("~"):
            literals.append((event[1:].strip(), False))
        else:
            literals.append((event, True))
    return frozenset(literals)


def render_term(term):
    """Renders a product term as a "*"-joined string."""
    return "*".join(("" if positive else "~") + name
                    for name, positive in sorted(term))


def render_sum(cut_sets):
    """Renders cut sets as a sum-of-products equation."""
    return " + ".join(
        x if isinstance(x, str) else render_term(to_term(x)) for x in cut_sets)


def _sort_key(term):
    return len(term), render_term(term)


def absorb(terms):
    """Removes duplicate terms and supersets of other terms.

    Args:
        terms: Collection of product terms.

    Returns:
        A list of terms where no term contains another.
    """
    kept = []
    for term in sorted(set(terms), key=_sort_key):
        if not any(x <= term for x in kept):
            kept.append(term)
    return kept


def consensus(first, second):
    """Produces the consensus of two terms.

    Returns:
        The consensus term if the terms have exactly one complementary pair,
        None otherwise.
    """
    opposed = [(name, positive) for name, positive in first
               if (name, not positive) in second]
    if len(opposed) != 1:
        return None
    name = opposed[0][0]
    return (first | second) - frozenset([(name, True), (name, False)])


def simplify_terms(terms):
    """Reduces a sum of products to the sum of its prime implicants.

    Absorption and consensus are applied until nothing changes.
    Without complemented events only absorption takes effect.

    Args:
        terms: Collection of product terms.

    Returns:
        A list of prime implicant terms sorted by size and name.
    """
    current = absorb(terms)
    changed = True
    while changed:
        changed = False
        for i, first in enumerate(current):
            for second in current[i + 1:]:
                term = consensus(first, second)
                if term is None or any(x <= term for x in current):
                    continue
                current = absorb(current + [term])
                changed = True
                break
            if changed:
                break
    return current


def _fallback(simplified, raw):
    """Returns the raw terms if the simplification gave nothing."""
    if simplified:
        return simplified
    logging.warning("No valid reduction of %d terms; "
                    "returning the unsimplified terms", len(raw))
    return sorted(set(raw), key=_sort_key)


def concentrate_mocus(source):
    """Minimal cut sets from the MOCUS cut sets.

    Args:
        source: Gate records from curate() or a FaultTree.

    Returns:
        A list of terms.
    """
    if isinstance(source, FaultTree):
        source = curate(source)
    raw = [to_term(x) for x in mocus(source)]
    logging.debug("Simplifying %s",
                  " + ".join("(" + render_term(x).replace("*", " * ") + ")"
                             for x in raw))
    return _fallback(simplify_terms(raw), raw)


def _split_sop(expression):
    """Splits a sympy sum-of-products into product terms.

    Returns:
        A list of terms or None if the expression is not decomposable.
    """
    if isinstance(expression, Or):
        products = expression.args
    else:
        products = [expression]
    terms = []
    for product in products:
        factors = product.args if isinstance(product, And) else [product]
        literals = []
        for factor in factors:
            if isinstance(factor, Symbol):
                literals.append((factor.name, True))
            elif isinstance(factor, Not) and isinstance(factor.args[0],
                                                        Symbol):
                literals.append((factor.args[0].name, False))
            else:
                return None
        terms.append(frozenset(literals))
    return terms


def concentrate_ccubes(source):
    """Minimal cut sets as the prime implicants of the truth table.

    Args:
        source: A truth table from calculate() or an Evaluator.

    Returns:
        A list of terms.
    """
    if isinstance(source, Evaluator):
        source = calculate(source)
    if not isinstance(source, pd.DataFrame) or "outcome" not in source:
        raise ValueError("CCubes minimization requires a truth table")
    columns = event_columns(source)
    failures = source.loc[source["outcome"] == 1, columns]
    minterms = failures.astype(int).values.tolist()
    raw = [
        frozenset((name, bool(value)) for name, value in zip(columns, row))
        for row in minterms
    ]
    if not minterms:
        return []
    expression = SOPform([Symbol(x) for x in columns], minterms)
    terms = _split_sop(expression)
    return _fallback(sorted(terms or [], key=_sort_key), raw)


def concentrate(source, method="mocus"):
    """Finds the minimal cut sets of a fault tree.

    Args:
        source: Gate records or a FaultTree for the "mocus" method;
            a truth table or an Evaluator for the "ccubes" method.
        method: "mocus" or "ccubes" (case-insensitive).

    Returns:
        A list of minimal cut sets as "*"-joined strings.

    Raises:
        ValueError: Unknown method or unsuitable source.
    """
    method = method.lower()
    if method == "mocus":
        terms = concentrate_mocus(source)
    elif method == "ccubes":
        terms = concentrate_ccubes(source)
    else:
        raise ValueError("Unknown minimization method: %s (expected one of %s)"
                         % (method, ", ".join(METHODS)))
    return [render_term(x) for x in terms]
