import textwrap
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from rtxconf.api.main import create_app
from rtxconf.core.loader import ConfigLoader
from rtxconf.core.settings import LoaderSettings

NETWORK_INP = """\
[TITLE]
small test network

[JUNCTIONS]
;ID   Elev  Demand
 J1   100   10
 J2   100   10
 J3   100   10

[RESERVOIRS]
 R1   200

[TANKS]
 T1   150   10   0   20   50   0

[PIPES]
;ID  Node1  Node2  Length  Diam  Rough  MLoss  Status
 P1  R1     J1     1000    12    100    0      Open
 P2  J1     J2     1000    12    100    0      Open
 P3  J2     J3     1000    12    100    0      Closed

[PUMPS]
 PU1  J3  T1  HEAD C1

[VALVES]
 V1  J2  J3  12  PRV  50  0

[CONTROLS]
 LINK P3 OPEN AT TIME 2

[TIMES]
 Duration            24:00
 Hydraulic Timestep  1:00
 Quality Timestep    0:05

[END]
"""

FULL_DOCUMENT = """\
version: "1.0"
configuration:
  records:
    - name: csv
      type: CSV
      path: data
    - name: scada
      type: SCADA
      connection: "DSN=scada"
      connectorType: wonderware_mssql
      querySyntax:
        Table: history
        DateColumn: ts
        TagColumn: tag
        ValueColumn: value
        QualityColumn: quality
  clocks:
    - name: hourly
      period: 3600
    - name: daily
      period: 86400
  timeseries:
    - name: total
      type: Aggregator
      clock: daily
      units: mgd
      sources:
        - source: smoothed
        - source: raw
          multiplier: 2
    - name: smoothed
      type: MovingAverage
      window: 5
      source: raw
      clock: hourly
    - name: raw
      type: TimeSeries
      pointRecord: scada
      units: gpm
  model:
    type: epanet
    file: net.inp
  elements:
    - model_id: P1
      parameter: flow
      timeseries: raw
    - model_id: J1
      parameter: headmeasure
      timeseries: smoothed
  simulation:
    time:
      hydraulic: 1800
      quality: 60
  zones:
    auto_detect: true
    detect_closed_links: true
  save:
    staterecord: csv
    save_states: [measured]
"""


@pytest.fixture()
def network_inp(tmp_path: Path) -> Path:
    p = tmp_path / "net.inp"
    p.write_text(NETWORK_INP, encoding="utf-8")
    return p


@pytest.fixture()
def write_doc(tmp_path: Path):
    """Write a document (dedented) next to the test network and return its path."""

    def _write(text: str, name: str = "config.yaml") -> Path:
        p = tmp_path / name
        p.write_text(textwrap.dedent(text), encoding="utf-8")
        return p

    return _write


@pytest.fixture()
def full_doc(write_doc, network_inp) -> Path:
    return write_doc(FULL_DOCUMENT)


@pytest.fixture()
def loader() -> ConfigLoader:
    return ConfigLoader(LoaderSettings())


@pytest.fixture()
def client(loader):
    return TestClient(create_app(loader))
