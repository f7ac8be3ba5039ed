"""
Dataset loading.

This module reads a JSON dataset file and hands it to RecordParser, producing
a ready-to-query InMemoryRecordStore.
"""

import json
import logging
from pathlib import Path
from typing import Union

from .parser import ParsedDataset, RecordParser
from .store import InMemoryRecordStore

logger = logging.getLogger(__name__)


class DataLoader:
    """
    Loads a dataset file into an InMemoryRecordStore.

    The file holds the same keys the desktop app's backup export uses
    ("students", "clinicalLogs", "vrCompletions", ...). Bad records are
    skipped and kept on `self.last_dataset.rejected` for reporting.

    Usage:
        loader = DataLoader()
        store = loader.load("cohort.json")
        print(len(loader.last_dataset.rejected), "records rejected")
    """

    def __init__(self, parser: RecordParser = None):
        self.parser = parser or RecordParser()
        self.last_dataset = None

    def load(self, path: Union[str, Path]) -> InMemoryRecordStore:
        path = Path(path)
        with open(path, "r") as f:
            raw = json.load(f)
        logger.info("Loaded dataset %s", path)
        return self.load_dict(raw)

    def load_dict(self, raw: dict) -> InMemoryRecordStore:
        dataset: ParsedDataset = self.parser.parse_dataset(raw)
        self.last_dataset = dataset
        logger.info(
            "Parsed %d students, %d clinical logs, %d VR completions, %d submissions",
            len(dataset.students), len(dataset.clinical_logs),
            len(dataset.vr_completions), len(dataset.hour_submissions),
        )
        return InMemoryRecordStore.from_dataset(dataset)
