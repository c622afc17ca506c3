from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Mapping, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from rtxconf.core.context import DeclareContext

from .base import PointRecord


class ConnectorType(str, Enum):
    WONDERWARE_MSSQL = "wonderware_mssql"
    ORACLE = "oracle"

    @classmethod
    def for_name(cls, name: str) -> Optional["ConnectorType"]:
        try:
            return cls(name.strip().lower())
        except ValueError:
            return None


class QuerySyntax(BaseModel):
    model_config = ConfigDict(extra="ignore")

    table: str = Field(validation_alias=AliasChoices("table", "Table"))
    date_column: str = Field(validation_alias=AliasChoices("dateColumn", "DateColumn"))
    tag_column: str = Field(validation_alias=AliasChoices("tagColumn", "TagColumn"))
    value_column: str = Field(validation_alias=AliasChoices("valueColumn", "ValueColumn"))
    quality_column: str = Field(validation_alias=AliasChoices("qualityColumn", "QualityColumn"))


class OdbcRecordSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    connection: str
    query_syntax: Optional[QuerySyntax] = Field(None, alias="querySyntax")
    connector_type: Optional[str] = Field(None, alias="connectorType")


class OdbcPointRecord(PointRecord):
    kind = "SCADA"

    def __init__(self, connection: str) -> None:
        super().__init__()
        self.connection = connection
        self.query_syntax: Optional[QuerySyntax] = None
        self.connector_type: Optional[ConnectorType] = None

    def describe(self) -> Dict[str, Any]:
        return {
            "connector_type": self.connector_type.value if self.connector_type else None,
            "query_syntax": self.query_syntax.model_dump() if self.query_syntax else None,
        }


def create_odbc_point_record(settings: Mapping[str, Any], ctx: DeclareContext) -> PointRecord:
    s = OdbcRecordSettings.model_validate(settings)
    record = OdbcPointRecord(s.connection)
    record.query_syntax = s.query_syntax
    name = settings.get("name")

    if s.connector_type is None:
        ctx.diagnostics.warn("declare.invalid_entry", f"record {name!r}: connector type not specified", record=name)
    else:
        conn = ConnectorType.for_name(s.connector_type)
        if conn is None:
            ctx.diagnostics.warn(
                "declare.invalid_entry",
                f"record {name!r}: connector type {s.connector_type!r} not recognized",
                record=name,
                connector_type=s.connector_type,
            )
        record.connector_type = conn
    return record
