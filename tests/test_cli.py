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
"""Tests for the command-line interface."""

import argparse as ap

from lxml import etree
import pandas as pd
import pytest

from pyfta.cli import main, run, manage_cmd_args, get_size_summary
from pyfta.config import Limits
from pyfta.datasets import demo_nodes, demo_edges
from pyfta.fault_tree import FaultTree

DEMO = """Demo
G1 := G2 & G3
G2 := B & G5
G3 := A | G4
G4 := B & C
G5 := C | D
p(A) = 0.1
p(B) = 0.2
p(C) = 0.3
p(D) = 0.4
"""


@pytest.fixture(autouse=True)
def limits():
    """Restores the default limits after every test."""
    yield Limits
    Limits.reset()


@pytest.fixture()
def shorthand(tmp_path):
    """The demonstration tree in a shorthand input file."""
    path = tmp_path / "demo.txt"
    path.write_text(DEMO)
    return str(path)


@pytest.fixture()
def tables(tmp_path):
    """The demonstration tree as node and edge CSV files."""
    nodes = str(tmp_path / "nodes.csv")
    edges = str(tmp_path / "edges.csv")
    demo_nodes().to_csv(nodes, index=False)
    demo_edges().to_csv(edges, index=False)
    return nodes, edges


def test_report(shorthand, capsys):
    """The report lists the equation and the minimal cut sets."""
    main([shorthand])
    out = capsys.readouterr().out
    assert "Equation: ((B * (C + D)) * (A + (B * C)))" in out
    assert "Basic events: A, B, C, D" in out
    assert "Minimal cut sets: 2" in out
    assert "B*C" in out
    assert "A*B*D" in out
    assert "probability" not in out


def test_probability(shorthand, capsys):
    """The top event probability is reported on request."""
    main([shorthand, "--probability"])
    out = capsys.readouterr().out
    line = [x for x in out.splitlines() if x.startswith("Top event")][0]
    assert float(line.split(":")[1]) == pytest.approx(0.0656)


def test_tables(tables, tmp_path, capsys):
    """Node and edge tables with a separate probability table."""
    probs = str(tmp_path / "probs.csv")
    pd.DataFrame({"event": list("ABCD"),
                  "probability": [0.5] * 4}).to_csv(probs, index=False)
    main(["--nodes", tables[0], "--edges", tables[1], "--probs", probs,
          "--method", "ccubes", "--probability"])
    out = capsys.readouterr().out
    assert "Minimal cut sets: 2" in out
    line = [x for x in out.splitlines() if x.startswith("Top event")][0]
    assert float(line.split(":")[1]) == pytest.approx(5 / 16)


def test_xml_output(shorthand, tmp_path):
    """The fault tree is written in the MEF XML format."""
    out = str(tmp_path / "demo.xml")
    main([shorthand, "--xml", out])
    root = etree.parse(out).getroot()
    assert root.tag == "opsa-mef"
    tree = root.find("define-fault-tree")
    assert tree.get("name") == "Demo"
    names = [x.get("name") for x in tree.findall("define-gate")]
    assert sorted(names) == ["Demo", "G1", "G2", "G3", "G4", "G5"]
    floats = root.findall("model-data/define-basic-event/float")
    assert [x.get("value") for x in floats] == ["0.1", "0.2", "0.3", "0.4"]


def test_size_summary():
    """The summary counts unique gates."""
    summary = get_size_summary(
        FaultTree.from_frames(demo_nodes(), demo_edges()))
    assert "The number of nodes: 12" in summary
    assert "The number of basic events: 4" in summary
    assert "The number of gates: 6" in summary
    assert "AND gates: 3" in summary
    assert "OR gates: 2" in summary
    assert "Repeated events: B, C" in summary


@pytest.mark.parametrize("argv", [
    [],
    ["--nodes", "nodes.csv"],
    ["input.txt", "--nodes", "nodes.csv", "--edges", "edges.csv"],
])
def test_argument_errors(argv):
    """Conflicting or missing inputs."""
    with pytest.raises(ap.ArgumentTypeError):
        manage_cmd_args(argv)


def test_exit_codes(shorthand, tmp_path):
    """Errors are converted into exit statuses."""
    with pytest.raises(SystemExit) as err:
        run([])
    assert err.value.code == 2
    with pytest.raises(SystemExit) as err:
        run([str(tmp_path / "missing.txt")])
    assert err.value.code == 1
    bad = tmp_path / "bad.txt"
    bad.write_text("FT\ng1 := a ^ b\n")
    with pytest.raises(SystemExit) as err:
        run([str(bad)])
    assert err.value.code == 1
    with pytest.raises(SystemExit) as err:
        run([shorthand, "--max-events", "2"])
    assert err.value.code == 1
    with pytest.raises(SystemExit) as err:
        run([shorthand, "--max-events", "0"])
    assert err.value.code == 1


def test_missing_probabilities(tmp_path):
    """The probability needs every basic event."""
    path = tmp_path / "partial.txt"
    path.write_text("FT\ng1 := a | b\np(a) = 0.5\n")
    with pytest.raises(SystemExit) as err:
        run([str(path), "--probability"])
    assert err.value.code == 1


def test_probability_table_columns(tmp_path, capsys):
    """A probability table without the expected columns is rejected."""
    source = tmp_path / "pair.txt"
    source.write_text("Demo\nG1 := A & B\n")
    probs = tmp_path / "probs.csv"
    probs.write_text("name,p\nA,0.1\n")
    with pytest.raises(SystemExit) as err:
        run([str(source), "--probs", str(probs)])
    assert err.value.code == 1
    assert "event" in capsys.readouterr().out
