"""
TSV file loading utilities.

This module decodes BIDS tab-separated tables (events, channels,
electrodes, participants) and the whitespace-separated gradient tables
(.bval/.bvec) of diffusion data.
"""

import csv
import gzip
import warnings
from pathlib import Path

import numpy as np

from ..core.exceptions import MetadataDecodeError
from .logging_config import get_logger

logger = get_logger(__name__)


def _read_table(file_path: Path) -> list[list[str]]:
    """Read the raw rows of a (possibly gzipped) TSV file."""
    file_path = Path(file_path)
    opener = gzip.open if file_path.name.endswith('.gz') else open
    try:
        with opener(file_path, 'rt', encoding='utf-8-sig', newline='') as f:
            reader = csv.reader(f, delimiter='\t', quoting=csv.QUOTE_NONE)
            return [row for row in reader if row]
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        raise MetadataDecodeError(file_path, str(e)) from e


def load_tsv_file(file_path: Path) -> dict[str, list[str]]:
    """
    Load a TSV file with a header row into a column mapping.

    Args:
        file_path: Path to the TSV file (.tsv or .tsv.gz).

    Returns:
        Ordered mapping from column name to the column's values, one string
        per row. Empty if the file is empty.

    Raises:
        MetadataDecodeError: If the file cannot be read or a row does not
            have as many values as the header has columns.
    """
    rows = _read_table(file_path)
    if not rows:
        logger.debug(f"Empty TSV file: {file_path}")
        return {}

    header = [name.strip() for name in rows[0]]
    columns = {name: [] for name in header}
    for line_number, row in enumerate(rows[1:], start=2):
        if len(row) != len(header):
            raise MetadataDecodeError(
                file_path,
                f"line {line_number} has {len(row)} values, expected {len(header)}"
            )
        for name, value in zip(header, row):
            columns[name].append(value.strip())

    logger.debug(f"Loaded {len(rows) - 1} rows from {Path(file_path).name}")
    return columns


def load_tsv_rows(file_path: Path) -> list[dict[str, str]]:
    """
    Load a TSV file and return list of row dictionaries.

    Raises:
        MetadataDecodeError: As for load_tsv_file.
    """
    columns = load_tsv_file(file_path)
    if not columns:
        return []
    names = list(columns)
    row_count = len(columns[names[0]])
    return [{name: columns[name][i] for name in names} for i in range(row_count)]


def load_gradient_file(file_path: Path) -> list:
    """
    Load a .bval or .bvec file.

    Values are whitespace separated, one line per row: a single row of
    b-values, or three rows (x, y, z) of gradient directions.

    Returns:
        A flat list of floats for a single-row file, a list of rows otherwise.

    Raises:
        MetadataDecodeError: If the file cannot be read, is empty or holds
            non-numeric values.
    """
    try:
        with warnings.catch_warnings():
            # numpy warns on empty input, reported below instead
            warnings.simplefilter("ignore", UserWarning)
            values = np.loadtxt(file_path, dtype=float, ndmin=2)
    except (OSError, ValueError) as e:
        raise MetadataDecodeError(Path(file_path), str(e)) from e

    if values.size == 0:
        raise MetadataDecodeError(Path(file_path), "no values")

    if values.shape[0] == 1:
        return values[0].tolist()
    return values.tolist()
