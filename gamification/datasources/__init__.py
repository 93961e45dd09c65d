from .base import DataSource, DataSourceError
from .spreadsheet import SpreadsheetDataSource

__all__ = [
    "DataSource",
    "DataSourceError",
    "SpreadsheetDataSource",
]
