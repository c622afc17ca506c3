from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Mapping

from pydantic import BaseModel, ConfigDict

from rtxconf.core.context import DeclareContext

from .base import PointRecord


class CsvRecordSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    path: str
    readonly: bool = False


class CsvPointRecord(PointRecord):
    kind = "CSV"

    def __init__(self, path: Path, *, read_only: bool = False) -> None:
        super().__init__()
        self.path = path
        self.read_only = read_only

    def describe(self) -> Dict[str, Any]:
        return {"path": str(self.path)}


def create_csv_point_record(settings: Mapping[str, Any], ctx: DeclareContext) -> PointRecord:
    s = CsvRecordSettings.model_validate(settings)
    # the directory is relative to the document, not the working directory
    return CsvPointRecord(ctx.resolve_path(s.path), read_only=s.readonly)
