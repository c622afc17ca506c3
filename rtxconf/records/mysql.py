from __future__ import annotations

from typing import Any, Dict, Mapping

from pydantic import BaseModel, ConfigDict

from rtxconf.core.context import DeclareContext

from .base import PointRecord


class MysqlRecordSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    connection: str


class MysqlPointRecord(PointRecord):
    kind = "MySQL"

    def __init__(self, connection: str) -> None:
        super().__init__()
        self.connection = connection

    def describe(self) -> Dict[str, Any]:
        return {}


def create_mysql_point_record(settings: Mapping[str, Any], ctx: DeclareContext) -> PointRecord:
    s = MysqlRecordSettings.model_validate(settings)
    return MysqlPointRecord(s.connection)
