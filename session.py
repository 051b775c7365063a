"""
Results session state.

One ResultsSession holds the currently loaded year group and its records.
Every load replaces the previous records in full; nothing is merged
across loads.
"""

from pathlib import Path
from typing import List, Optional, Tuple, Union

from config import AVERAGING_POLICY
from load_data import Record, extract_records, read_grid, resolve_year_file
from metrics import (
    KPI,
    Series,
    compute_class_series,
    compute_kpis,
    compute_subject_series,
    list_subjects,
)

STATUS_EMPTY = "empty"
STATUS_OK = "ok"
STATUS_NO_RECORDS = "no records"
STATUS_LOAD_ERROR = "load error"


class ResultsSession:
    """Current dataset plus its load status."""

    def __init__(self, data_dir: Optional[Union[str, Path]] = None,
                 policy: str = AVERAGING_POLICY):
        self.data_dir = data_dir
        self.policy = policy
        self.year: Optional[str] = None
        self.records: Tuple[Record, ...] = ()
        self.status = STATUS_EMPTY
        self.message = "No data loaded."

    def load_year(self, year: str) -> Tuple[Record, ...]:
        """Load the workbook configured for a year group."""
        self.year = str(year)
        try:
            grid = read_grid(resolve_year_file(self.year, self.data_dir))
        except Exception as e:
            print(f"  Warning: Failed to load Year {self.year}: {e}")
            return self._fail(f"Failed to load file for Year {self.year}")
        return self._install(extract_records(grid))

    def load_bytes(self, data: bytes, label: str = "upload") -> Tuple[Record, ...]:
        """Load an uploaded workbook in place of the current year's file."""
        self.year = label
        try:
            grid = read_grid(data)
        except Exception as e:
            print(f"  Warning: Failed to read {label}: {e}")
            return self._fail(f"Failed to load file {label}")
        return self._install(extract_records(grid))

    def _install(self, records: List[Record]) -> Tuple[Record, ...]:
        self.records = tuple(records)
        if self.records:
            self.status = STATUS_OK
            self.message = f"Loaded {len(self.records)} records."
        else:
            self.status = STATUS_NO_RECORDS
            self.message = "File loaded but contains no valid records."
        return self.records

    def _fail(self, message: str) -> Tuple[Record, ...]:
        self.records = ()
        self.status = STATUS_LOAD_ERROR
        self.message = message
        return self.records

    @property
    def has_records(self) -> bool:
        return bool(self.records)

    @property
    def subjects(self) -> List[str]:
        return list_subjects(self.records)

    def kpis(self) -> List[KPI]:
        return compute_kpis(self.records, self.policy)

    def class_series(self, subject: str, metric: str) -> Series:
        return compute_class_series(self.records, subject, metric)

    def subject_series(self, metric: str) -> Series:
        return compute_subject_series(self.records, metric)
