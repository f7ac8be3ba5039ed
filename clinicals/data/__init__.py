"""
Data intake and storage module.

This package handles record validation, the store seam, and dataset loading.
"""

from .loader import DataLoader
from .parser import ParsedDataset, RecordParser, RejectedRecord
from .store import InMemoryRecordStore, RecordStore

__all__ = [
    "DataLoader",
    "ParsedDataset",
    "RecordParser",
    "RejectedRecord",
    "InMemoryRecordStore",
    "RecordStore",
]
