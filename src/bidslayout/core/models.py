"""
Core domain models for the BIDS layout.

This module contains pure data models: the catalog of a dataset, its
subject/session records and the file records produced by the modality
scanners. Models compare structurally, so two layouts of the same tree
are equal.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator, Optional

from .entity_config import MODALITIES
from .issues import Issue


@dataclass
class BIDSFile:
    """Represents a single catalogued file in a BIDS dataset."""

    filename: str
    """Name of the file (e.g., 'sub-01_task-rest_bold.nii.gz')."""

    path: Path
    """Absolute path to the file."""

    modality: Optional[str] = None
    """Modality directory the file was found in (e.g., 'anat', 'func')."""

    suffix: Optional[str] = None
    """File suffix (e.g., 'T1w', 'bold', 'events')."""

    extension: Optional[str] = None
    """File extension, multi-part extensions kept whole (e.g., '.nii.gz')."""

    entities: dict[str, str] = field(default_factory=dict)
    """Entities extracted from the filename, in encounter order."""

    metadata: Any = field(default_factory=dict)
    """Decoded sidecar content; an empty dict when none applies.

    A JSON sidecar decodes to a dict, a TSV table to a column mapping and a
    phase1/phase2 fieldmap pair to a 2-tuple of dicts.
    """


@dataclass
class FieldmapFile(BIDSFile):
    """A fieldmap record grouping its companion images."""

    type: str = ''
    """Grouping pattern: 'phasediff', 'phase12', 'fieldmap' or 'epi'."""

    magnitude: list[str] = field(default_factory=list)
    """Magnitude image filenames derived from the fieldmap name."""

    phase: list[str] = field(default_factory=list)
    """Both phase image filenames of a 'phase12' set, empty otherwise."""


@dataclass
class DiffusionFile(BIDSFile):
    """A diffusion image with its gradient tables."""

    bval: Optional[list[float]] = None
    """b-values, one per volume, when a .bval file was found."""

    bvec: Optional[list[list[float]]] = None
    """Gradient directions (3 rows), when a .bvec file was found."""


@dataclass
class ParticipantsTable:
    """Content of participants.tsv and its participants.json sidecar."""

    columns: dict[str, list[str]] = field(default_factory=dict)
    """Column name to column values, one value per participant."""

    metadata: dict = field(default_factory=dict)
    """Column descriptions from participants.json."""

    def row(self, participant_id: str) -> dict[str, str]:
        """
        Get one participant's values.

        Args:
            participant_id: Participant identifier, with or without 'sub-'.

        Returns:
            Column name to value mapping, empty if the participant is not listed.
        """
        ids = self.columns.get('participant_id', [])
        if not participant_id.startswith('sub-'):
            participant_id = f"sub-{participant_id}"
        if participant_id not in ids:
            return {}
        index = ids.index(participant_id)
        return {name: values[index] for name, values in self.columns.items()}


@dataclass
class BIDSSubject:
    """Represents one subject/session directory of a BIDS dataset."""

    name: str
    """Subject directory name ('sub-<label>')."""

    session: str = ''
    """Session directory name ('' or 'ses-<label>')."""

    path: Optional[Path] = None
    """Absolute path to the subject/session directory."""

    anat: list[BIDSFile] = field(default_factory=list)
    func: list[BIDSFile] = field(default_factory=list)
    fmap: list[FieldmapFile] = field(default_factory=list)
    beh: list[BIDSFile] = field(default_factory=list)
    dwi: list[DiffusionFile] = field(default_factory=list)
    eeg: list[BIDSFile] = field(default_factory=list)
    meg: list[BIDSFile] = field(default_factory=list)
    ieeg: list[BIDSFile] = field(default_factory=list)
    pet: list[BIDSFile] = field(default_factory=list)

    def get_files(self, modality: str) -> list[BIDSFile]:
        """
        Get the records of one modality.

        Raises:
            ValueError: If modality is not a known modality directory.
        """
        if modality not in MODALITIES:
            raise ValueError(f"Unknown modality: {modality}")
        return getattr(self, modality)

    def all_files(self) -> list[BIDSFile]:
        """Get every record of the subject, in modality scan order."""
        files = []
        for modality in MODALITIES:
            files.extend(getattr(self, modality))
        return files


@dataclass
class BIDSDataset:
    """Represents the catalog of a complete BIDS dataset."""

    root_path: Path
    """Absolute root directory of the BIDS dataset."""

    description: dict = field(default_factory=dict)
    """Contents of dataset_description.json."""

    participants: Optional[ParticipantsTable] = None
    """Contents of participants.tsv/json, None when neither exists."""

    subjects: list[BIDSSubject] = field(default_factory=list)
    """One record per subject/session directory."""

    issues: list[Issue] = field(default_factory=list)
    """Diagnostics recorded while building the catalog."""

    def get_subject(self, name: str, session: str = '') -> Optional[BIDSSubject]:
        """
        Retrieve a subject record by name and session.

        Args:
            name: Subject name, with or without the 'sub-' prefix.
            session: Session name, with or without the 'ses-' prefix.

        Returns:
            The BIDSSubject if found, None otherwise.
        """
        if not name.startswith('sub-'):
            name = f"sub-{name}"
        if session and not session.startswith('ses-'):
            session = f"ses-{session}"

        for subject in self.subjects:
            if subject.name == name and subject.session == session:
                return subject
        return None

    def iter_files(self, modality: Optional[str] = None) -> Iterator[BIDSFile]:
        """
        Iterate over catalogued files.

        Args:
            modality: Restrict to one modality; all modalities when None.
        """
        for subject in self.subjects:
            if modality is None:
                yield from subject.all_files()
            else:
                yield from subject.get_files(modality)

    def get_all_modalities(self) -> set[str]:
        """
        Get all modalities with at least one catalogued file.

        Returns:
            Set of modality strings (e.g., {'anat', 'func', 'dwi'}).
        """
        modalities = set()
        for subject in self.subjects:
            for modality in MODALITIES:
                if getattr(subject, modality):
                    modalities.add(modality)
        return modalities

    def get_all_entity_values(self, entity: str) -> list[str]:
        """
        Get all unique non-empty values of an entity.

        Args:
            entity: The entity code (e.g., 'sub', 'task', 'run').

        Returns:
            Sorted list of unique values for that entity.
        """
        values = set()
        for bids_file in self.iter_files():
            value = bids_file.entities.get(entity)
            if value:
                values.add(value)
        return sorted(values)
