"""Food record sources consumed by index rebuilds."""

from .base import RecordSource, record_from_dict
from .json_file import JsonRecordSource
from .memory import InMemoryRecordSource

__all__ = ["RecordSource", "record_from_dict", "JsonRecordSource", "InMemoryRecordSource"]
