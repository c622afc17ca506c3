"""Command line checker: load a document and report what was assembled."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from rtxconf.core.errors import DocumentError
from rtxconf.core.loader import LoadedConfig, load_config
from rtxconf.core.settings import LoaderSettings

EXIT_OK = 0
EXIT_DOCUMENT_ERROR = 2


def _summary(loaded: LoadedConfig) -> List[str]:
    elements = loaded.model.elements if loaded.model is not None else []
    bound = sum(1 for e in elements if e.slots)
    zones = len(loaded.model.zones) if loaded.model is not None else 0
    lines = [
        f"document:    {loaded.document_path}",
        f"version:     {loaded.version or '-'}",
        f"records:     {len(loaded.records)}",
        f"clocks:      {len(loaded.clocks)}",
        f"timeseries:  {len(loaded.timeseries)}",
        f"elements:    {bound} bound of {len(elements)}",
        f"zones:       {zones}",
        f"diagnostics: {len(loaded.diagnostics)} ({len(loaded.warnings)} warnings, {len(loaded.errors)} errors)",
    ]
    for d in loaded.diagnostics:
        lines.append(f"  [{d.severity}] {d.code}: {d.message}")
    return lines


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(prog="rtxconf")
    sub = ap.add_subparsers(dest="command", required=True)

    check = sub.add_parser("check", help="load a configuration document and report the assembled graph")
    check.add_argument("document")
    check.add_argument("--json", action="store_true", help="print the graph snapshot as JSON")
    check.add_argument("--strict-capabilities", action="store_true")
    check.add_argument("--log-level", default=None)

    args = ap.parse_args(argv)

    settings = LoaderSettings.from_env()
    if args.strict_capabilities:
        settings = settings.model_copy(update={"strict_capabilities": True})
    if args.log_level:
        settings = settings.model_copy(update={"log_level": args.log_level.upper()})
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        loaded = load_config(args.document, settings=settings)
    except DocumentError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_DOCUMENT_ERROR

    if args.json:
        print(json.dumps(loaded.to_dict(), indent=2, sort_keys=True))
    else:
        print("\n".join(_summary(loaded)))
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
