"""
Reading configuration documents.

Documents are YAML (``.yaml``/``.yml``/anything else) or JSON (``.json``).
The root must be a mapping holding ``version`` and a ``configuration``
group. Any read or syntax problem raises :class:`DocumentError` with the
file location; nothing past this point is fatal.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from .errors import DocumentError

_log = logging.getLogger("rtxconf.document")

CONFIG_VERSION = "1.0"

_LIST_SECTIONS = ("records", "clocks", "timeseries", "elements")
_GROUP_SECTIONS = ("model", "simulation", "zones", "zone-detection", "save")


def read_document(path: Path | str) -> Dict[str, Any]:
    p = Path(path)
    try:
        raw = p.read_bytes()
    except OSError as e:
        raise DocumentError(str(p), f"I/O error while reading file: {e.strerror or e}") from e
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        line = raw.count(b"\n", 0, e.start) + 1
        column = e.start - raw.rfind(b"\n", 0, e.start)
        raise DocumentError(str(p), f"invalid UTF-8: {e.reason}", line=line, column=column) from e

    if p.suffix.lower() == ".json":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise DocumentError(str(p), f"parse error: {e.msg}", line=e.lineno, column=e.colno) from e
    else:
        try:
            data = yaml.safe_load(text)
        except yaml.MarkedYAMLError as e:
            mark = e.problem_mark or e.context_mark
            line = mark.line + 1 if mark is not None else None
            column = mark.column + 1 if mark is not None else None
            raise DocumentError(str(p), f"parse error: {e.problem or e}", line=line, column=column) from e
        except yaml.YAMLError as e:
            raise DocumentError(str(p), f"parse error: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise DocumentError(str(p), f"document root must be a mapping, got {type(data).__name__}")

    config = data.get("configuration")
    if config is None:
        data["configuration"] = {}
    elif not isinstance(config, dict):
        raise DocumentError(str(p), "'configuration' must be a group")
    else:
        _check_sections(p, config)

    _log.debug("Read document %s", p)
    return data


def _check_sections(path: Path, config: Mapping[str, Any]) -> None:
    for key in _LIST_SECTIONS:
        value = config.get(key)
        if value is not None and not isinstance(value, list):
            raise DocumentError(str(path), f"'configuration.{key}' must be a list")
    for key in _GROUP_SECTIONS:
        value = config.get(key)
        if value is not None and not isinstance(value, dict):
            raise DocumentError(str(path), f"'configuration.{key}' must be a group")


def section_list(config: Mapping[str, Any], key: str) -> List[Any]:
    return list(config.get(key) or [])


def section_group(config: Mapping[str, Any], *keys: str) -> Optional[Mapping[str, Any]]:
    for key in keys:
        value = config.get(key)
        if value is not None:
            return value
    return None
