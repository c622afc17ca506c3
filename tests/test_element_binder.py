import logging

from rtxconf.core.binder import ElementBinding, bind_elements, parse_bindings
from rtxconf.core.builder import GraphBuilder
from rtxconf.core.diagnostics import DiagnosticLog
from rtxconf.core.registry import default_registries
from rtxconf.core.settings import LoaderSettings
from rtxconf.network import Capability, EpanetModel


def _model(path):
    m = EpanetModel()
    m.load_model_from_file(path)
    return m


def _series(tmp_path):
    b = GraphBuilder(tmp_path / "doc.yaml")
    b.declare({"timeseries": [
        {"name": "flow1", "type": "TimeSeries"},
        {"name": "head1", "type": "TimeSeries"},
        {"name": "level", "type": "TimeSeries"},
    ]})
    b.link()
    return b.timeseries


def test_bind_attaches_series_to_capable_slots(tmp_path, network_inp):
    model = _model(network_inp)
    series = _series(tmp_path)
    diagnostics = DiagnosticLog()

    stats = bind_elements(
        model,
        [
            ElementBinding("P1", "flow", "flow1"),
            ElementBinding("J1", "headmeasure", "head1"),
            ElementBinding("T1", "levelmeasure", "level"),
        ],
        series,
        default_registries().parameters,
        diagnostics,
    )

    assert stats.attached == 3
    assert model.elements_named("P1")[0].slot(Capability.FLOW_MEASURE) is series["flow1"]
    assert model.elements_named("J1")[0].slot(Capability.HEAD_MEASURE) is series["head1"]
    assert model.elements_named("T1")[0].slot(Capability.LEVEL_MEASURE) is series["level"]
    assert len(diagnostics) == 0


def test_capability_mismatch_is_silent_by_default(tmp_path, network_inp, caplog):
    model = _model(network_inp)
    diagnostics = DiagnosticLog()

    with caplog.at_level(logging.DEBUG, logger="rtxconf.bind"):
        stats = bind_elements(
            model,
            [ElementBinding("J1", "levelmeasure", "level")],
            _series(tmp_path),
            default_registries().parameters,
            diagnostics,
        )

    assert stats.mismatched == 1
    assert stats.attached == 0
    assert len(diagnostics) == 0
    assert model.elements_named("J1")[0].slots == {}
    assert any("no slot for parameter" in r.getMessage() for r in caplog.records)


def test_capability_mismatch_is_reported_in_strict_mode(tmp_path, network_inp):
    model = _model(network_inp)
    diagnostics = DiagnosticLog()

    bind_elements(
        model,
        [ElementBinding("P1", "headmeasure", "head1")],
        _series(tmp_path),
        default_registries().parameters,
        diagnostics,
        strict=True,
    )

    [d] = diagnostics.by_code("bind.capability_mismatch")
    assert d.data["element_kind"] == "pipe"


def test_bind_failures_are_isolated(tmp_path, network_inp):
    model = _model(network_inp)
    diagnostics = DiagnosticLog()

    stats = bind_elements(
        model,
        [
            ElementBinding("NOPE", "flow", "flow1"),
            ElementBinding("P1", "pressure_gauge", "flow1"),
            ElementBinding("P2", "flow", "missing"),
            ElementBinding("P2", "flow", "flow1"),
        ],
        _series(tmp_path),
        default_registries().parameters,
        diagnostics,
    )

    assert stats.attached == 1
    assert stats.skipped == 3
    assert diagnostics.codes() == [
        "bind.element_not_found",
        "bind.unknown_parameter",
        "bind.unresolved_timeseries",
    ]


def test_parse_bindings_reports_incomplete_entries():
    diagnostics = DiagnosticLog()

    out = parse_bindings(
        [
            {"model_id": "J1", "parameter": "quality", "timeseries": "q"},
            {"model_id": "J2", "parameter": "quality"},
            "J3",
        ],
        diagnostics,
    )

    assert out == [ElementBinding("J1", "quality", "q")]
    assert diagnostics.codes() == ["bind.invalid_entry", "bind.invalid_entry"]


def test_builder_bind_without_model_reports_once(tmp_path):
    b = GraphBuilder(tmp_path / "doc.yaml", settings=LoaderSettings(strict_capabilities=True))
    b.declare({})
    b.link()
    b.bind(None, [{"model_id": "J1", "parameter": "quality", "timeseries": "q"}])

    assert b.diagnostics.codes() == ["bind.no_model"]


def test_binder_returning_none_counts_as_attached(tmp_path, network_inp):
    model = _model(network_inp)
    series = _series(tmp_path)
    registries = default_registries()

    def bind_tag(element, ts):
        element.attach(Capability.QUALITY_SOURCE, ts)

    registries.parameters.register("tag", bind_tag)

    stats = bind_elements(
        model,
        [ElementBinding("J1", "tag", "flow1")],
        series,
        registries.parameters,
        DiagnosticLog(),
        strict=True,
    )

    assert stats.attached == 1
    assert stats.mismatched == 0
    assert model.elements_named("J1")[0].slot(Capability.QUALITY_SOURCE) is series["flow1"]


def test_tank_takes_boundary_head(tmp_path, network_inp):
    model = _model(network_inp)
    series = _series(tmp_path)

    stats = bind_elements(
        model,
        [ElementBinding("T1", "boundaryhead", "head1"), ElementBinding("R1", "boundaryhead", "head1")],
        series,
        default_registries().parameters,
        DiagnosticLog(),
        strict=True,
    )

    assert stats.attached == 2
    assert model.elements_named("T1")[0].slot(Capability.BOUNDARY_HEAD) is series["head1"]
