import pytest

from rtxconf.core.document import read_document, section_group
from rtxconf.core.errors import DocumentError
from rtxconf.core.loader import load_config


def test_yaml_syntax_error_carries_location(write_doc):
    p = write_doc("""\
        version: "1.0"
        configuration:
          clocks: [ {name: a, period: 1}
        """)

    with pytest.raises(DocumentError) as ei:
        read_document(p)

    err = ei.value
    assert err.line is not None
    assert err.column is not None
    assert str(err).startswith(f"{p}:{err.line}:{err.column}: ")


def test_json_documents_are_read(write_doc):
    p = write_doc('{"version": "1.0", "configuration": {"clocks": [{"name": "a", "period": 60}]}}', "doc.json")

    data = read_document(p)

    assert data["configuration"]["clocks"][0]["period"] == 60


def test_json_syntax_error_carries_location(write_doc):
    p = write_doc('{"version": "1.0",\n "configuration": {,}}', "doc.json")

    with pytest.raises(DocumentError) as ei:
        read_document(p)

    assert ei.value.line == 2


def test_missing_file_is_a_document_error(tmp_path):
    with pytest.raises(DocumentError) as ei:
        read_document(tmp_path / "absent.yaml")

    assert "I/O error" in ei.value.reason


def test_root_must_be_a_mapping(write_doc):
    with pytest.raises(DocumentError):
        read_document(write_doc("- a\n- b\n"))


def test_section_of_wrong_shape_is_a_document_error(write_doc):
    p = write_doc("""\
        version: "1.0"
        configuration:
          timeseries:
            name: raw
        """)

    with pytest.raises(DocumentError) as ei:
        load_config(p)

    assert "configuration.timeseries" in ei.value.reason


def test_missing_configuration_is_empty(write_doc):
    data = read_document(write_doc('version: "1.0"\n'))

    assert data["configuration"] == {}


def test_section_group_prefers_first_present_key():
    config = {"zone-detection": {"auto_detect": True}}

    assert section_group(config, "zones", "zone-detection") == {"auto_detect": True}
    assert section_group(config, "save") is None


def test_non_utf8_bytes_are_a_document_error(tmp_path):
    p = tmp_path / "latin1.yaml"
    p.write_bytes(b'version: "1.0"\nconfiguration:\n  records:\n    - name: caf\xe9\n')

    with pytest.raises(DocumentError) as ei:
        read_document(p)

    assert "invalid UTF-8" in ei.value.reason
    assert ei.value.line == 4
    assert ei.value.column == 16
