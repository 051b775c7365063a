"""
Exam Results Data Loader - Workbook Edition

Loads year-group results workbooks and transforms the subject blocks
inside them into dashboard-ready records.

Parses the results sheet layout:
- Subject label: a row a fixed distance above each block header
- Block header: "Class" in column A, "Total" in column C
- Detail rows: one per class plus an "Overall" row per subject
- Blank row: ends the block
"""

import json
import math
import sys
from dataclasses import asdict, dataclass, fields
from io import BytesIO
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

import pandas as pd
from openpyxl import load_workbook

from config import (
    DATA_DIR,
    FIRST_VALUE_COLUMN,
    HEADER_MARKERS,
    RECORD_COLUMNS,
    SUBJECT_LOOKBACK,
    YEAR_FILES,
)

Number = Union[int, float]
Grid = Sequence[Sequence[Any]]


@dataclass(frozen=True)
class Record:
    """One class's (or the subject's Overall) result summary for one subject."""
    subject: str
    class_name: str
    total: Number = 0
    Astar: Number = 0
    A2: Number = 0
    B3: Number = 0
    B4: Number = 0
    C5: Number = 0
    C6: Number = 0
    D7: Number = 0
    E8: Number = 0
    U: Number = 0
    total1_6: Number = 0
    pct1_6: Number = 0
    total1_8: Number = 0
    pct1_8: Number = 0


# ==================== CELL NORMALIZATION ====================

def to_number(value: Any) -> Number:
    """
    Coerce a cell value to a number.

    Blank, missing and non-numeric cells become 0 (never NaN, never an
    exception). Integral values come back as int, so "42" -> 42.
    """
    if value is None:
        return 0

    if isinstance(value, str):
        value = value.strip()
        if not value:
            return 0
        try:
            return int(value)
        except ValueError:
            pass

    try:
        number = float(value)
    except (ValueError, TypeError):
        return 0

    if math.isnan(number) or math.isinf(number):
        return 0

    return int(number) if number.is_integer() else number


def cell_text(value: Any) -> str:
    """Stringify and trim a cell; blank and NaN cells become ""."""
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value).strip()


def get_cell(row: Optional[Sequence[Any]], index: int) -> Any:
    """Cell at index, or None when the row is missing or too short."""
    if not row or index >= len(row):
        return None
    return row[index]


def is_blank_row(row: Optional[Sequence[Any]]) -> bool:
    """True when every cell of the row is empty (or the row has no cells)."""
    if not row:
        return True
    return all(cell_text(cell) == "" for cell in row)


def is_header_row(row: Optional[Sequence[Any]]) -> bool:
    """A block header has "Class" in column A and "Total" in column C."""
    return all(
        cell_text(get_cell(row, index)) == marker
        for index, marker in HEADER_MARKERS.items()
    )


# ==================== BLOCK EXTRACTION ====================

def read_subject_label(grid: Grid, header_idx: int, lookback: int = SUBJECT_LOOKBACK) -> str:
    """Subject name from the first cell `lookback` rows above the header."""
    label_idx = header_idx - lookback
    if label_idx < 0:
        return ""
    return cell_text(get_cell(grid[label_idx], 0))


def parse_detail_row(row: Sequence[Any], subject: str) -> Optional[Record]:
    """
    Build a Record from one detail row of a subject block.

    The class name comes from column A, or column B when A is blank.
    Rows with no class name at all are skipped (returns None).
    """
    class_name = cell_text(get_cell(row, 0)) or cell_text(get_cell(row, 1))
    if not class_name:
        return None

    values = {
        name: to_number(get_cell(row, FIRST_VALUE_COLUMN + offset))
        for offset, name in enumerate(RECORD_COLUMNS)
    }
    return Record(subject=subject, class_name=class_name, **values)


def extract_records(grid: Grid, lookback: int = SUBJECT_LOOKBACK) -> List[Record]:
    """
    Extract every subject block from a raw sheet grid.

    Scans top to bottom for header rows. Each header opens a block whose
    detail rows run until the next blank row (or the end of the grid).
    A header row met inside a block also closes it and opens the next
    block, so back-to-back blocks without a blank separator are read
    separately and the inner header is never emitted as a record.

    Args:
        grid: Rows of cell values as read from the sheet
        lookback: How many rows above the header the subject label sits

    Returns:
        Records for all blocks, in sheet order (empty when no header found).
        A block ends at the first blank row or at the next header row,
        whichever comes first.
    """
    records: List[Record] = []
    if not grid:
        return records

    i = 0
    while i < len(grid):
        if not is_header_row(grid[i]):
            i += 1
            continue

        subject = read_subject_label(grid, i, lookback)

        j = i + 1
        while j < len(grid):
            row = grid[j]
            if is_blank_row(row) or is_header_row(row):
                break
            record = parse_detail_row(row, subject)
            if record is not None:
                records.append(record)
            j += 1

        i = j

    return records


# ==================== WORKBOOK LOADING ====================

def read_grid(source: Union[str, Path, bytes]) -> List[List[Any]]:
    """
    Read the first worksheet of an .xlsx workbook into a raw grid.

    Args:
        source: Path to the workbook, or its raw bytes (e.g. an upload)

    Returns:
        List of rows, each a list of cell values (blank rows kept)
    """
    if isinstance(source, (bytes, bytearray)):
        handle = BytesIO(source)
    else:
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(f"Results workbook not found: {path}")
        handle = str(path)

    wb = load_workbook(handle, data_only=True)
    try:
        ws = wb.worksheets[0]
        return [list(row) for row in ws.iter_rows(values_only=True)]
    finally:
        wb.close()


def resolve_year_file(year: str, data_dir: Optional[Union[str, Path]] = None) -> Path:
    """Workbook path for a year group (e.g. "7" -> assets/year7.xlsx)."""
    year = str(year).strip()
    if year not in YEAR_FILES:
        raise ValueError(f"Unknown year group: {year!r} (expected one of {list(YEAR_FILES)})")
    return Path(data_dir or DATA_DIR) / YEAR_FILES[year]


def load_year_records(year: str, data_dir: Optional[Union[str, Path]] = None) -> List[Record]:
    """
    Load and extract all records for one year group.

    This is the main entry point for data loading.
    """
    file_path = resolve_year_file(year, data_dir)
    grid = read_grid(file_path)
    records = extract_records(grid)
    print(f"  Loaded: {file_path.name} -> Year {year} ({len(records)} records)")
    return records


def records_to_dataframe(records: Iterable[Record]) -> pd.DataFrame:
    """One row per record, columns in record field order."""
    columns = [f.name for f in fields(Record)]
    return pd.DataFrame([asdict(r) for r in records], columns=columns)


def save_records(records: Iterable[Record],
                 output_path: str = "output/records.json") -> None:
    """Save extracted records to JSON for downstream consumers."""
    Path(output_path).parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump([asdict(r) for r in records], f, indent=2, ensure_ascii=False)
    print(f"\nRecords saved to {output_path}")


def load_records(json_path: str = "output/records.json") -> List[Record]:
    """Load records previously written by save_records."""
    with open(json_path, 'r', encoding='utf-8') as f:
        return [Record(**item) for item in json.load(f)]


def export_years(years: Iterable[str],
                 data_dir: Optional[Union[str, Path]] = None,
                 output_dir: str = "output") -> Dict[str, List[Record]]:
    """
    Load, save and summarise each year group in turn.

    A year whose workbook is missing or unreadable is reported with a
    warning and skipped; the remaining years are still processed.

    Returns:
        Dict mapping each successfully loaded year to its records
    """
    from metrics import compute_kpis, list_subjects

    loaded = {}
    for year in years:
        try:
            records = load_year_records(year, data_dir)
        except Exception as e:
            print(f"  Warning: Failed to load Year {year}: {e}")
            continue

        save_records(records, str(Path(output_dir) / f"year{year}_records.json"))
        loaded[year] = records

        print("\n" + "=" * 60)
        print(f"Data Summary - Year {year}")
        print("=" * 60)
        print(f"  Subjects: {list_subjects(records)}")
        print(f"  Total Records: {len(records)}")
        for kpi in compute_kpis(records):
            print(f"  {kpi.label}: {kpi.display}")

    return loaded


# CLI entry point
if __name__ == "__main__":
    print("=" * 60)
    print("Exam Results Data Loader")
    print("=" * 60)

    export_years(sys.argv[1:] or list(YEAR_FILES))
