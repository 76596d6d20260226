"""
Repository pattern for accessing a BIDS layout.

This module provides the entry point used by applications: it picks the
loading mode from the settings, keeps the loaded catalog and answers simple
questions about it.
"""

from pathlib import Path
from typing import Callable, Optional

from .exceptions import RootNotFoundError
from .models import BIDSDataset, BIDSSubject
from ..config.settings import get_settings
from ..infrastructure.bids_loader import BidsLoader


class BidsRepository:
    """
    Repository for loading and accessing a BIDS dataset.
    """

    def __init__(self, root_path: Path, tolerant: Optional[bool] = None):
        """
        Initialize the repository with a BIDS dataset root path.

        Args:
            root_path: Path to the root directory of a BIDS dataset.
            tolerant: Loading mode; taken from the settings when None.

        Raises:
            RootNotFoundError: If the root path does not exist.
        """
        self.root_path = Path(root_path)
        self._dataset: Optional[BIDSDataset] = None

        if not self.root_path.is_dir():
            raise RootNotFoundError(self.root_path)

        if tolerant is None:
            tolerant = get_settings().tolerant
        self.tolerant = tolerant

    def load(self, progress_callback: Optional[Callable[[int, int, str], None]] = None) -> BIDSDataset:
        """
        Load and index the BIDS dataset.

        Args:
            progress_callback: Optional callback function(current, total, message).

        Returns:
            The loaded BIDSDataset.

        Raises:
            BIDSLayoutError: As raised by BidsLoader.load().
        """
        loader = BidsLoader(self.root_path, tolerant=self.tolerant, progress_callback=progress_callback)
        self._dataset = loader.load()
        return self._dataset

    def get_dataset(self) -> Optional[BIDSDataset]:
        """
        Get the currently loaded dataset.

        Returns:
            The loaded BIDSDataset, or None if not yet loaded.
        """
        return self._dataset

    def get_subject(self, name: str, session: str = '') -> Optional[BIDSSubject]:
        """
        Retrieve a subject/session record from the loaded dataset.

        Returns:
            The BIDSSubject if found, None otherwise (or if nothing is loaded).
        """
        if self._dataset is None:
            return None
        return self._dataset.get_subject(name, session)

    def get_summary_statistics(self) -> dict:
        """
        Get summary statistics about the loaded dataset.

        Returns:
            Dictionary with subject, session and per-modality file counts and
            the task names. Empty if nothing is loaded.
        """
        if self._dataset is None:
            return {}

        dataset = self._dataset
        files_per_modality = {}
        for modality in sorted(dataset.get_all_modalities()):
            files_per_modality[modality] = sum(1 for _ in dataset.iter_files(modality))

        return {
            'subjects': len({subject.name for subject in dataset.subjects}),
            'sessions': len({subject.session for subject in dataset.subjects if subject.session}),
            'files': files_per_modality,
            'tasks': dataset.get_all_entity_values('task'),
            'issues': len(dataset.issues),
        }
