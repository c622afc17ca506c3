import pytest

from rtxconf.core.builder import GraphBuilder
from rtxconf.core.cycles import CircularDependencyError, LinkGraph
from rtxconf.core.settings import LoaderSettings


def test_graph_detects_circular_dependency():
    g = LinkGraph()
    g.add_node("A", ["C"])
    g.add_node("B", ["A"])
    g.add_node("C", ["B"])

    with pytest.raises(CircularDependencyError):
        g.topological_sort()

    assert g.find_cycles() == [["A", "C", "B"]]


def test_topological_sort_puts_upstream_first():
    g = LinkGraph()
    g.add_node("total", ["smoothed", "raw"])
    g.add_node("smoothed", ["raw"])
    g.add_node("raw", [])

    assert g.topological_sort() == ["raw", "smoothed", "total"]


def test_cycles_are_reported_not_rejected(tmp_path):
    b = GraphBuilder(tmp_path / "doc.yaml")
    b.declare({"timeseries": [
        {"name": "a", "type": "Offset", "source": "b"},
        {"name": "b", "type": "Offset", "source": "a"},
        {"name": "self", "type": "Resampler", "source": "self"},
    ]})
    b.link()

    assert b.timeseries["a"].source is b.timeseries["b"]
    assert b.timeseries["self"].source is b.timeseries["self"]
    cycles = sorted(d.data["cycle"] for d in b.diagnostics.by_code("link.cycle"))
    assert cycles == [["a", "b"], ["self"]]
    assert any("self -> self" in d.message for d in b.diagnostics.by_code("link.cycle"))


def test_cycle_detection_can_be_disabled(tmp_path):
    b = GraphBuilder(tmp_path / "doc.yaml", settings=LoaderSettings(detect_cycles=False))
    b.declare({"timeseries": [{"name": "self", "type": "Resampler", "source": "self"}]})
    b.link()

    assert b.diagnostics.codes() == []


def test_long_link_chain_is_walked_without_recursion(tmp_path):
    names = [f"c{i:04d}" for i in range(2000)]
    entries = [{"name": names[0], "type": "TimeSeries"}]
    entries += [{"name": n, "type": "Offset", "source": prev} for prev, n in zip(names, names[1:])]

    b = GraphBuilder(tmp_path / "doc.yaml")
    b.declare({"timeseries": entries})
    b.link()

    assert b.diagnostics.by_code("link.cycle") == []
    assert b.timeseries[names[-1]].source is b.timeseries[names[-2]]
    assert LinkGraph.from_timeseries(b.timeseries).topological_sort() == names


def test_long_cycle_is_reported_once():
    g = LinkGraph()
    names = [f"c{i:04d}" for i in range(2000)]
    for prev, n in zip(names, names[1:]):
        g.add_node(n, [prev])
    g.add_node(names[0], [names[-1]])

    [cycle] = g.find_cycles()

    assert cycle[0] == "c0000"
    assert len(cycle) == 2000
