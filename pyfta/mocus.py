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
"""Method of Obtaining Cut Sets (MOCUS).

The gates are expanded top-down starting from the top gate:
an AND gate is replaced by all its arguments within the same set,
and an OR gate splits the set into one set per argument.
The resulting cut sets contain basic events only
but may be non-minimal or duplicate.
"""

from collections import deque
import logging

from pyfta import config
from pyfta.gates import gate_map, check_acyclic


def _unique(events):
    """Removes repeated events preserving the order."""
    seen = set()
    result = []
    for event in events:
        if event not in seen:
            seen.add(event)
            result.append(event)
    return result


def mocus(gates, max_sets=None):
    """Generates cut sets of the fault tree.

    Args:
        gates: A collection of Gate records from curate().
        max_sets: The limit on the number of open cut sets.

    Returns:
        A list of raw cut sets as sorted tuples of basic event names.

    Raises:
        FaultTreeError: Missing top gate, gates without arguments, or cycles.
        LimitError: Too many cut sets.
    """
    check_acyclic(gates)
    mapping, top = gate_map(gates)
    limit = config.max_sets(max_sets)

    open_sets = deque([[top.name]])
    cut_sets = []
    while open_sets:
        cut_set = open_sets.popleft()
        gate_refs = [x for x in cut_set if x in mapping]
        if not gate_refs:
            cut_sets.append(tuple(sorted(set(cut_set))))
            continue
        gate = mapping[gate_refs[0]]
        rest = [x for x in cut_set if x != gate.name]
        if gate.kind == "or":
            for child in gate.children:
                open_sets.append(_unique(rest + [child]))
        else:
            open_sets.appendleft(_unique(rest + gate.children))
        if len(open_sets) + len(cut_sets) > limit:
            raise config.LimitError("MOCUS exceeds the limit of %d cut sets" %
                                    limit)
    logging.debug("MOCUS produced %d cut sets", len(cut_sets))
    return cut_sets
