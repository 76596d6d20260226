"""
bidslayout - index a BIDS dataset into an in-memory catalog.

This package scans a directory tree organised under the BIDS naming
convention and catalogues every recognised data file by subject, session
and modality, together with the metadata parsed from its filename and
sidecar files.
"""

__version__ = "0.1.0"

from pathlib import Path
from typing import Callable, Optional

from .core.models import BIDSDataset
from .infrastructure.bids_loader import BidsLoader


def layout(
    root_path: Path,
    tolerant: bool = False,
    progress_callback: Optional[Callable[[int, int, str], None]] = None
) -> BIDSDataset:
    """
    Build the catalog of a BIDS dataset.

    Args:
        root_path: Path to the root directory of a BIDS dataset.
        tolerant: Downgrade dataset description problems to warnings.
        progress_callback: Optional callback function(current, total, message).

    Returns:
        The BIDSDataset catalog.
    """
    return BidsLoader(root_path, tolerant=tolerant, progress_callback=progress_callback).load()
