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
"""Size limits of the analysis.

The truth table and its minimization grow as 2^N
with the number N of basic events,
and MOCUS may grow exponentially with the number of OR gates.
These limits turn such blow-ups into errors instead of hangs.
"""

import logging


class ConfigError(Exception):
    """Errors in configuring the analysis limits."""

    pass


class LimitError(Exception):
    """The analysis exceeds the configured size limits."""

    pass


class Limits(object):
    """Storage for the analysis limits.

    Attributes:
        max_events: The largest number of basic events in a truth table.
        max_sets: The largest number of open cut sets in MOCUS.
    """

    max_events = 20
    max_sets = 100000

    __MAX_EVENTS_BOUND = 30  # 2^30 rows do not fit into memory anyway

    @staticmethod
    def set_max_events(value):
        """Sets the maximum number of basic events for truth tables.

        Args:
            value: A positive integer.

        Raises:
            ConfigError: Invalid value.
        """
        if int(value) != value or value < 1:
            raise ConfigError("max_events must be a positive integer.")
        if value > Limits.__MAX_EVENTS_BOUND:
            raise ConfigError("max_events can't exceed " +
                              str(Limits.__MAX_EVENTS_BOUND) + ".")
        Limits.max_events = int(value)

    @staticmethod
    def set_max_sets(value):
        """Sets the maximum number of open cut sets in MOCUS.

        Args:
            value: A positive integer.

        Raises:
            ConfigError: Invalid value.
        """
        if int(value) != value or value < 1:
            raise ConfigError("max_sets must be a positive integer.")
        Limits.max_sets = int(value)

    @staticmethod
    def configure(args):
        """Adjusts the limits with the command-line arguments."""
        if args.max_events is not None:
            logging.info("Limiting truth tables to %d events", args.max_events)
            Limits.set_max_events(args.max_events)
        if args.max_sets is not None:
            logging.info("Limiting MOCUS to %d cut sets", args.max_sets)
            Limits.set_max_sets(args.max_sets)

    @staticmethod
    def reset():
        """Restores the default limits."""
        Limits.max_events = 20
        Limits.max_sets = 100000


def max_events(value=None):
    """Returns the given limit or the configured default."""
    return Limits.max_events if value is None else value


def max_sets(value=None):
    """Returns the given limit or the configured default."""
    return Limits.max_sets if value is None else value
