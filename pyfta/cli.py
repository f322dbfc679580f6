#!/usr/bin/env python
#
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
"""Runs the fault tree analysis from the command line.

The input is either a file in the shorthand notation
(see pyfta.shorthand)
or a pair of CSV files with node ("id", "event", "type")
and edge ("from", "to") tables.
The report contains the equation of the fault tree,
the minimal cut sets with their coverage of failures,
and, if probabilities are given, the probability of the top event.
"""

import logging
import sys

import argparse as ap
import pandas as pd

from pyfta import analyze, quantify_prob
from pyfta.config import Limits, LimitError, ConfigError
from pyfta.coverage import CoverageError
from pyfta.expression import ParsingError
from pyfta.fault_tree import FaultTree, FaultTreeError
from pyfta.minimize import METHODS
from pyfta.quantify import ScenarioError, probability_lookup
from pyfta.shorthand import parse_input, FormatError


def manage_cmd_args(argv=None):
    """Manages command-line description and arguments.

    Args:
        argv: An optional list containing the command-line arguments.
            If None, the command-line arguments from sys will be used.

    Returns:
        Arguments that are collected from the command line.

    Raises:
        ArgumentTypeError: There are problems with the arguments.
    """
    parser = ap.ArgumentParser(description="Fault Tree Analysis",
                               formatter_class=ap.ArgumentDefaultsHelpFormatter)
    parser.add_argument("input_file", type=str, nargs="?",
                        help="input file with the shorthand notation")
    parser.add_argument("--nodes", type=str, metavar="path",
                        help="CSV file with the node table")
    parser.add_argument("--edges", type=str, metavar="path",
                        help="CSV file with the edge table")
    parser.add_argument("--probs", type=str, metavar="path",
                        help="CSV file with 'event' and 'probability' columns")
    parser.add_argument("-m", "--method", choices=METHODS, default="mocus",
                        help="minimization method for cut sets")
    parser.add_argument("--max-events", type=int, metavar="int",
                        help="max # of basic events for truth tables")
    parser.add_argument("--max-sets", type=int, metavar="int",
                        help="max # of cut sets in MOCUS")
    parser.add_argument("--probability", action="store_true",
                        help="report the probability of the top event")
    parser.add_argument("--xml", type=str, metavar="path",
                        help="a file to write the fault tree in the MEF XML")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="report the progress of the analysis")
    args = parser.parse_args(argv)
    if args.input_file and (args.nodes or args.edges):
        raise ap.ArgumentTypeError(
            "Give either the shorthand input or the node and edge tables")
    if not args.input_file and not (args.nodes and args.edges):
        raise ap.ArgumentTypeError(
            "Both node and edge tables are required without shorthand input")
    return args


def read_fault_tree(args):
    """Reads the fault tree from the files given in the arguments.

    Args:
        args: Command-line arguments with input file paths.

    Returns:
        A valid fault tree.

    Raises:
        IOError: Input files are not accessible.
        ParsingError: Problems parsing the shorthand input.
        FormatError: Formatting issues in the shorthand input.
        FaultTreeError: The input fault tree is malformed.
        ScenarioError: The probability table misses columns.
    """
    if args.input_file:
        with open(args.input_file, "r") as shorthand_file:
            fault_tree = parse_input(shorthand_file)
    else:
        fault_tree = FaultTree.from_frames(pd.read_csv(args.nodes),
                                           pd.read_csv(args.edges))
    if args.probs:
        table = pd.read_csv(args.probs)
        fault_tree.probabilities.update(probability_lookup(table))
    return fault_tree


def get_size_summary(fault_tree):
    """Gathers information about the size of the fault tree.

    Args:
        fault_tree: A valid fault tree.

    Returns:
        A text snippet to be embedded in a XML summary.
    """
    gates = set((x.event, x.kind) for x in fault_tree.gate_nodes())
    and_gates = [x for x in gates if x[1] == "and"]
    or_gates = [x for x in gates if x[1] == "or"]
    return (
        "The number of nodes: %d" % len(fault_tree.nodes) + "\n"
        "The number of basic events: %d" % len(fault_tree.basic_events()) +
        "\n"
        "The number of gates: %d" % len(gates) + "\n"
        "    AND gates: %d" % len(and_gates) + "\n"
        "    OR gates: %d" % len(or_gates) + "\n"
        "Repeated events: %s" % ", ".join(fault_tree.repeated_events()) +
        "\n")


def write_summary(fault_tree, printer):
    """Writes the summary of the fault tree as an XML comment.

    Args:
        fault_tree: A valid fault tree.
        printer: The output stream.
    """
    printer("<!--\nThe fault tree has the following metrics:\n")
    printer(get_size_summary(fault_tree), "-->")


def write_xml(fault_tree, path):
    """Writes the fault tree into a file in the Open-PSA MEF XML.

    Args:
        fault_tree: A valid fault tree.
        path: The output file path.
    """
    with open(path, "w") as tree_file:

        def printer(*args):
            """Prints into the output file."""
            print(*args, sep='', file=tree_file)

        printer('<?xml version="1.0"?>')
        write_summary(fault_tree, printer)
        fault_tree.to_xml(printer)


def write_report(analysis, printer, probability=None):
    """Writes the human-readable analysis report.

    Args:
        analysis: The Analysis record.
        printer: The output stream.
        probability: The probability of the top event if computed.
    """
    printer("Equation: ", analysis.equation)
    printer("Basic events: ", ", ".join(analysis.evaluator.parameters))
    printer("Minimal cut sets: ", len(analysis.cut_sets))
    printer(analysis.coverage.drop(columns="query").to_string(index=False))
    if probability is not None:
        printer("Top event probability: ", probability)


def main(argv=None):
    """Verifies arguments and runs the analysis.

    Args:
        argv: An optional list containing the command-line arguments.

    Raises:
        ArgumentTypeError: Problems with the arguments.
        IOError: Input or output files are not accessible.
        ParsingError: Problems parsing the input file.
        FormatError: Formatting issues in the input.
        FaultTreeError: The input fault tree is malformed.
        ConfigError: Invalid limits.
        LimitError: The fault tree is too large for the analysis.
        ScenarioError: Missing probabilities of basic events.
    """
    args = manage_cmd_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING)
    Limits.configure(args)
    fault_tree = read_fault_tree(args)
    logging.info("Analyzing %s with %d basic events",
                 fault_tree.name or fault_tree.top.event,
                 len(fault_tree.basic_events()))
    if args.xml:
        write_xml(fault_tree, args.xml)

    analysis = analyze(fault_tree, args.method)
    probability = None
    if args.probability:
        probability = quantify_prob(analysis.evaluator,
                                    fault_tree.probabilities,
                                    analysis.truth_table)

    def printer(*args):
        """Prints the report to the standard output."""
        print(*args, sep='')

    write_report(analysis, printer, probability)


def run(argv=None):
    """Runs main() and converts errors into exit statuses."""
    try:
        main(argv)
    except ap.ArgumentTypeError as err:
        print("Argument Error:\n" + str(err))
        sys.exit(2)
    except IOError as err:
        print("IO Error:\n" + str(err))
        sys.exit(1)
    except ParsingError as err:
        print("Parsing Error:\n" + str(err))
        sys.exit(1)
    except FormatError as err:
        print("Format Error:\n" + str(err))
        sys.exit(1)
    except FaultTreeError as err:
        print("Error in the fault tree:\n" + str(err))
        sys.exit(1)
    except (ConfigError, LimitError) as err:
        print("Error in limits:\n" + str(err))
        sys.exit(1)
    except (ScenarioError, CoverageError) as err:
        print("Analysis Error:\n" + str(err))
        sys.exit(1)


if __name__ == "__main__":
    run()
