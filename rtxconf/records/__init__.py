from rtxconf.core.registry import TypeRegistry

from .base import PointRecord
from .csv import CsvPointRecord, create_csv_point_record
from .mysql import MysqlPointRecord, create_mysql_point_record
from .odbc import ConnectorType, OdbcPointRecord, create_odbc_point_record

RECORD_TYPES = TypeRegistry("record")
RECORD_TYPES.register("CSV", create_csv_point_record)
RECORD_TYPES.register("SCADA", create_odbc_point_record)
RECORD_TYPES.register("MySQL", create_mysql_point_record)

__all__ = [
    "ConnectorType",
    "CsvPointRecord",
    "MysqlPointRecord",
    "OdbcPointRecord",
    "PointRecord",
    "RECORD_TYPES",
]
