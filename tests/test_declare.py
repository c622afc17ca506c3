import logging

import pytest

from rtxconf.core.builder import BuilderPhase, GraphBuilder
from rtxconf.core.errors import BuilderStateError
from rtxconf.core.units import DIMENSIONLESS
from rtxconf.records import CsvPointRecord
from rtxconf.timeseries.kinds import ConstantTimeSeries, MovingAverage


def _builder(tmp_path):
    return GraphBuilder(tmp_path / "doc.yaml")


def test_declare_registers_nodes_by_name(tmp_path):
    b = _builder(tmp_path)
    b.declare({
        "timeseries": [
            {"name": "raw", "type": "TimeSeries", "units": "gpm"},
            {"name": "avg", "type": "MovingAverage", "window": 4},
        ]
    })

    assert b.phase is BuilderPhase.DECLARED
    assert set(b.timeseries) == {"raw", "avg"}
    assert isinstance(b.timeseries["avg"], MovingAverage)
    assert b.timeseries["avg"].window == 4
    assert b.timeseries["avg"].kind == "MovingAverage"
    assert b.timeseries["raw"].units.name == "gpm"
    assert len(b.diagnostics) == 0


def test_duplicate_name_later_declaration_wins(tmp_path):
    b = _builder(tmp_path)
    b.declare({
        "timeseries": [
            {"name": "x", "type": "Constant", "value": 1},
            {"name": "x", "type": "Constant", "value": 2},
        ]
    })

    assert b.timeseries["x"].value == 2.0
    assert b.diagnostics.codes() == ["declare.duplicate_name"]
    assert b.diagnostics.by_code("declare.duplicate_name")[0].severity == "info"


def test_duplicate_name_drops_earlier_pending_links(tmp_path):
    b = _builder(tmp_path)
    b.declare({
        "timeseries": [
            {"name": "a", "type": "TimeSeries"},
            {"name": "x", "type": "MovingAverage", "window": 2, "source": "a"},
            {"name": "x", "type": "Constant", "value": 2},
        ]
    })

    assert len(b.pending) == 0


def test_unknown_tag_skips_only_that_declaration(tmp_path):
    b = _builder(tmp_path)
    b.declare({
        "timeseries": [
            {"name": "ok1", "type": "TimeSeries"},
            {"name": "bad", "type": "FancyFilter"},
            {"name": "ok2", "type": "Constant"},
        ]
    })

    assert set(b.timeseries) == {"ok1", "ok2"}
    assert b.diagnostics.codes() == ["declare.unknown_tag"]
    d = b.diagnostics.by_code("declare.unknown_tag")[0]
    assert d.data["name"] == "bad"
    assert "FancyFilter" in d.message


def test_missing_required_field_drops_declaration(tmp_path):
    b = _builder(tmp_path)
    b.declare({"timeseries": [{"name": "avg", "type": "MovingAverage"}]})

    assert "avg" not in b.timeseries
    assert b.diagnostics.codes() == ["declare.construct_failed"]


def test_nameless_series_is_reported(tmp_path):
    b = _builder(tmp_path)
    b.declare({"timeseries": [{"type": "TimeSeries"}]})

    assert b.timeseries == {}
    assert b.diagnostics.codes() == ["declare.missing_name"]


def test_clock_and_record_resolve_when_declared_in_earlier_sections(tmp_path):
    b = _builder(tmp_path)
    b.declare({
        "timeseries": [{"name": "raw", "type": "TimeSeries", "clock": "hourly", "pointRecord": "hist"}],
        "clocks": [{"name": "hourly", "period": 3600}],
        "records": [{"name": "hist", "type": "CSV", "path": "data"}],
    })

    raw = b.timeseries["raw"]
    assert raw.clock is b.clocks["hourly"]
    assert raw.record is b.records["hist"]
    assert isinstance(raw.record, CsvPointRecord)


def test_unresolved_clock_and_record_are_reported(tmp_path):
    b = _builder(tmp_path)
    b.declare({
        "timeseries": [{"name": "raw", "type": "TimeSeries", "clock": "nope", "pointRecord": "gone"}],
    })

    raw = b.timeseries["raw"]
    assert raw.clock is None
    assert raw.record is None
    assert b.diagnostics.codes() == ["declare.unresolved_clock", "declare.unresolved_record"]


def test_unknown_units_keep_dimensionless(tmp_path):
    b = _builder(tmp_path)
    b.declare({"timeseries": [{"name": "raw", "type": "TimeSeries", "units": "furlongs/fortnight"}]})

    assert b.timeseries["raw"].units is DIMENSIONLESS
    assert b.diagnostics.codes() == ["declare.unknown_units"]


def test_source_on_constant_is_ignored(tmp_path):
    b = _builder(tmp_path)
    b.declare({
        "timeseries": [
            {"name": "a", "type": "TimeSeries"},
            {"name": "c", "type": "Constant", "value": 3.5, "source": "a"},
        ]
    })

    assert isinstance(b.timeseries["c"], ConstantTimeSeries)
    assert len(b.pending) == 0
    assert b.diagnostics.codes() == ["declare.source_ignored"]


def test_invalid_clock_period_is_reported(tmp_path):
    b = _builder(tmp_path)
    b.declare({"clocks": [{"name": "bad", "period": 0}, {"name": "good", "period": 60}]})

    assert set(b.clocks) == {"good"}
    assert b.diagnostics.codes() == ["declare.construct_failed"]


def test_record_without_name_gets_index_name(tmp_path):
    b = _builder(tmp_path)
    b.declare({"records": [{"type": "MySQL", "connection": "db"}, {"type": "MySQL", "connection": "db2"}]})

    assert set(b.records) == {"Record 0", "Record 1"}
    assert b.records["Record 1"].name == "Record 1"


def test_non_group_entry_is_reported(tmp_path):
    b = _builder(tmp_path)
    b.declare({"timeseries": ["raw", {"name": "ok", "type": "TimeSeries"}]})

    assert set(b.timeseries) == {"ok"}
    assert b.diagnostics.codes() == ["declare.invalid_entry"]


def test_diagnostics_are_logged(tmp_path, caplog):
    b = _builder(tmp_path)
    with caplog.at_level(logging.WARNING, logger="rtxconf"):
        b.declare({"timeseries": [{"name": "bad", "type": "FancyFilter"}]})

    assert any(r.name == "rtxconf.declare" and "declare.unknown_tag" in r.getMessage() for r in caplog.records)


def test_phases_run_once_and_in_order(tmp_path):
    b = _builder(tmp_path)
    with pytest.raises(BuilderStateError):
        b.link()
    b.declare({})
    with pytest.raises(BuilderStateError):
        b.declare({})
