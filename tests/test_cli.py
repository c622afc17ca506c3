import json

from rtxconf.cli import EXIT_DOCUMENT_ERROR, EXIT_OK, main


def test_check_prints_summary(full_doc, capsys):
    rc = main(["check", str(full_doc)])

    out = capsys.readouterr().out
    assert rc == EXIT_OK
    assert "timeseries:  3" in out
    assert "elements:    2 bound of 10" in out
    assert "zones:       2" in out


def test_check_json_prints_snapshot(full_doc, capsys):
    rc = main(["check", str(full_doc), "--json"])

    snapshot = json.loads(capsys.readouterr().out)
    assert rc == EXIT_OK
    assert snapshot["default_record"] == "csv"
    assert snapshot["timeseries"]["smoothed"]["parameters"] == {"window": 5}


def test_check_lists_diagnostics_with_strict_capabilities(write_doc, network_inp, capsys):
    p = write_doc("""\
        version: "1.0"
        configuration:
          timeseries:
            - {name: raw, type: TimeSeries}
          model: {type: epanet, file: net.inp}
          elements:
            - {model_id: J1, parameter: setting, timeseries: raw}
          save: {staterecord: missing}
        """)

    assert main(["check", str(p)]) == EXIT_OK
    assert "bind.capability_mismatch" not in capsys.readouterr().out

    assert main(["check", str(p), "--strict-capabilities", "--log-level", "error"]) == EXIT_OK
    assert "[warn] bind.capability_mismatch" in capsys.readouterr().out


def test_check_document_error_exit_code(write_doc, capsys):
    p = write_doc("configuration:\n  records: {name: x}\n")

    rc = main(["check", str(p)])

    assert rc == EXIT_DOCUMENT_ERROR
    assert "configuration.records" in capsys.readouterr().err


def test_check_non_utf8_document_exit_code(tmp_path, capsys):
    p = tmp_path / "latin1.yaml"
    p.write_bytes(b'version: "1.0"\nconfiguration:\n  clocks:\n    - name: d\xe9bit\n      period: 60\n')

    rc = main(["check", str(p)])

    assert rc == EXIT_DOCUMENT_ERROR
    assert "invalid UTF-8" in capsys.readouterr().err
