"""
BIDS dataset loading and indexing.

This module reads a BIDS dataset from the filesystem and builds its
catalog: dataset description, participants table and one record per
subject/session directory, each holding the files found by the modality
scanners.
"""

from pathlib import Path
from typing import Callable, Optional

from ..core.entity_config import MODALITIES
from ..core.exceptions import (
    BIDSLayoutError,
    DescriptionDecodeError,
    MetadataDecodeError,
    MissingDescriptionError,
    MissingRequiredFieldError,
    NoSubjectsFoundError,
    RootNotFoundError,
)
from ..core.issues import (
    DESCRIPTION_DECODE,
    MISSING_DESCRIPTION,
    MISSING_REQUIRED_FIELD,
    NO_SESSIONS,
    PARTICIPANTS_DECODE,
    Issue,
    Severity,
)
from ..core.models import BIDSDataset, BIDSSubject, ParticipantsTable
from .json_loader import load_json_file
from .logging_config import get_logger
from .paths import list_matching
from .scanners import scan_modality
from .tsv_loader import load_tsv_file

logger = get_logger(__name__)

REQUIRED_DESCRIPTION_FIELDS = ('BIDSVersion', 'Name')

SUBJECT_DIR_PATTERN = r'^sub-[a-zA-Z0-9]+$'
SESSION_DIR_PATTERN = r'^ses-[a-zA-Z0-9]+$'


class BidsLoader:
    """
    Loads and indexes BIDS datasets from the filesystem.

    In strict mode the first problem with the dataset description or the
    participants table raises. In tolerant mode these problems are logged
    as warnings, recorded on the dataset's issue list, and the build goes
    on with empty defaults. A missing root and a dataset without subjects
    always raise.
    """

    def __init__(
        self,
        root_path: Path,
        tolerant: bool = False,
        progress_callback: Optional[Callable[[int, int, str], None]] = None
    ):
        """
        Initialize the loader with a dataset root path.

        Args:
            root_path: Path to the root directory of a BIDS dataset.
            tolerant: Downgrade description and participants errors to warnings.
            progress_callback: Optional callback function(current, total, message)
                called once per subject directory.
        """
        self.root_path = Path(root_path).resolve()
        self.tolerant = tolerant
        self.progress_callback = progress_callback
        self._issues: list[Issue] = []

    def load(self) -> BIDSDataset:
        """
        Load and index the BIDS dataset.

        Returns:
            A fully populated BIDSDataset.

        Raises:
            RootNotFoundError: If root_path does not exist.
            NoSubjectsFoundError: If there is no sub-<label> directory.
            DatasetDescriptionError: In strict mode, if dataset_description.json
                is missing, unreadable or lacks a required field.
            MetadataDecodeError: If a participants file (strict mode) or a
                table or sidecar attached by a scanner is malformed.
        """
        logger.info(f"Loading BIDS dataset from: {self.root_path}")
        self._issues = []

        if not self.root_path.is_dir():
            raise RootNotFoundError(self.root_path)

        description = self._load_dataset_description()
        self._check_required_fields(description)
        logger.debug(f"Dataset: {description.get('Name', 'Unknown')}")

        participants = self._load_participants()

        subjects = self._scan_subjects()
        logger.info(f"Indexed {len(subjects)} subject/session directories")

        return BIDSDataset(
            root_path=self.root_path,
            description=description,
            participants=participants,
            subjects=subjects,
            issues=list(self._issues)
        )

    def _tolerate(self, error: BIDSLayoutError, code: str, file_path: Optional[Path] = None) -> None:
        """Raise error in strict mode; log and record it in tolerant mode."""
        if not self.tolerant:
            raise error
        logger.warning(str(error))
        self._issues.append(Issue(
            code=code,
            severity=Severity.WARNING,
            message=str(error),
            file_path=str(file_path) if file_path else None
        ))

    def _load_dataset_description(self) -> dict:
        """
        Load the dataset_description.json file.

        Returns:
            Dictionary with dataset description metadata, empty when it is
            missing or unreadable (tolerant mode).
        """
        desc_path = self.root_path / "dataset_description.json"

        if not desc_path.is_file():
            self._tolerate(MissingDescriptionError(self.root_path), MISSING_DESCRIPTION, desc_path)
            return {}

        try:
            description = load_json_file(desc_path)
        except MetadataDecodeError as e:
            self._tolerate(
                DescriptionDecodeError(f"BIDS dataset description could not be read: {e.reason}"),
                DESCRIPTION_DECODE,
                desc_path
            )
            return {}

        if not isinstance(description, dict):
            self._tolerate(
                DescriptionDecodeError("BIDS dataset description could not be read: not a JSON object"),
                DESCRIPTION_DECODE,
                desc_path
            )
            return {}

        return description

    def _check_required_fields(self, description: dict) -> None:
        """Check each required description field independently."""
        for field_name in REQUIRED_DESCRIPTION_FIELDS:
            if field_name not in description:
                self._tolerate(
                    MissingRequiredFieldError(field_name),
                    MISSING_REQUIRED_FIELD,
                    self.root_path / "dataset_description.json"
                )

    def _load_participants(self) -> Optional[ParticipantsTable]:
        """
        Load participants.tsv and its participants.json sidecar.

        Returns:
            The participants table, or None if neither file exists.
        """
        tsv_path = self.root_path / "participants.tsv"
        json_path = self.root_path / "participants.json"

        if not tsv_path.is_file() and not json_path.is_file():
            logger.info("participants.tsv not found, skipping participants table")
            return None

        participants = ParticipantsTable()

        if tsv_path.is_file():
            try:
                participants.columns = load_tsv_file(tsv_path)
            except MetadataDecodeError as e:
                self._tolerate(e, PARTICIPANTS_DECODE, tsv_path)

        if json_path.is_file():
            try:
                metadata = load_json_file(json_path)
            except MetadataDecodeError as e:
                self._tolerate(e, PARTICIPANTS_DECODE, json_path)
            else:
                if isinstance(metadata, dict):
                    participants.metadata = metadata
                else:
                    self._tolerate(
                        MetadataDecodeError(json_path, "not a JSON object"),
                        PARTICIPANTS_DECODE,
                        json_path
                    )

        logger.debug(f"Loaded {len(participants.columns.get('participant_id', []))} participants")
        return participants

    def get_subject_names(self) -> list[str]:
        """
        Get the subject directory names of the dataset without scanning them.

        Returns:
            Sorted list of 'sub-<label>' names.
        """
        return list_matching(self.root_path, SUBJECT_DIR_PATTERN, directories=True)

    def _scan_subjects(self) -> list[BIDSSubject]:
        """
        Scan every subject/session directory pair.

        A subject without any ses-<label> directory yields no record; this
        is recorded as an INFO issue.

        Raises:
            NoSubjectsFoundError: If there is no subject directory.
        """
        subject_names = self.get_subject_names()
        if not subject_names:
            raise NoSubjectsFoundError(self.root_path)

        subjects = []
        total_subjects = len(subject_names)

        for idx, subject_name in enumerate(subject_names):
            logger.debug(f"Scanning subject: {subject_name}")

            if self.progress_callback:
                self.progress_callback(idx + 1, total_subjects, f"Loading subject: {subject_name}")

            session_names = list_matching(
                self.root_path / subject_name, SESSION_DIR_PATTERN, directories=True
            )
            if not session_names:
                message = f"{subject_name} has no session directory and was not indexed"
                logger.info(message)
                self._issues.append(Issue(
                    code=NO_SESSIONS,
                    severity=Severity.INFO,
                    message=message,
                    file_path=str(self.root_path / subject_name)
                ))
                continue

            for session_name in session_names:
                subjects.append(self.parse_subject(subject_name, session_name))

        return subjects

    def parse_subject(self, subject_name: str, session_name: str = '') -> BIDSSubject:
        """
        Build the record of one subject/session directory.

        Every modality scanner runs, in MODALITIES order, against the
        directory root/subject_name/session_name.

        Args:
            subject_name: Subject directory name ('sub-<label>').
            session_name: Session directory name ('ses-<label>'), or '' to
                scan the subject directory itself.

        Returns:
            The assembled BIDSSubject.
        """
        subject_path = self.root_path / subject_name
        if session_name:
            subject_path = subject_path / session_name
            logger.debug(f"  Scanning session: {session_name}")

        scanned = {
            modality: scan_modality(subject_path, subject_name, modality, root=self.root_path)
            for modality in MODALITIES
        }

        return BIDSSubject(
            name=subject_name,
            session=session_name,
            path=subject_path,
            **scanned
        )


def is_bids_dataset(path: Path) -> bool:
    """
    Quick check if a directory appears to be a BIDS dataset.

    Args:
        path: Path to check.

    Returns:
        True if the directory contains a dataset_description.json file.
    """
    return (Path(path) / "dataset_description.json").is_file()


def get_bids_version(dataset_path: Path) -> Optional[str]:
    """
    Get the BIDS version of a dataset.

    Args:
        dataset_path: Path to the BIDS dataset root.

    Returns:
        BIDS version string, or None if not found.
    """
    desc_path = Path(dataset_path) / "dataset_description.json"

    if not desc_path.is_file():
        logger.warning(f"dataset_description.json not found at: {desc_path}")
        return None

    try:
        desc = load_json_file(desc_path)
    except MetadataDecodeError as e:
        logger.error(str(e))
        return None

    bids_version = desc.get("BIDSVersion") if isinstance(desc, dict) else None
    if bids_version is None:
        logger.warning(f"BIDSVersion field missing in: {desc_path}")
    return bids_version
