"""
Modality directory scanners.

Each modality directory (anat, func, eeg, ...) is described by a
ModalityRules entry: the entities its filenames may use and an ordered
tuple of ScanRules. A rule is a filename pattern plus what to do with the
files it matches (which extensions to keep, which metadata to attach).
Rules are applied in order, each one listing the directory again, so a
modality's records come out grouped by rule.

Fieldmaps group several images per record and are handled by the fieldmap
module; scan_modality dispatches to it.
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

from ..core.entity_config import MODALITIES, get_permitted_entities
from ..core.exceptions import FilenameError
from ..core.filename_parser import parse_filename, split_extension
from ..core.models import BIDSFile, DiffusionFile
from .fieldmap import scan_fieldmaps
from .logging_config import get_logger
from .paths import list_matching
from .sidecar import decode_sidecar, find_sidecar
from .tsv_loader import load_tsv_file

logger = get_logger(__name__)


@dataclass(frozen=True)
class ScanContext:
    """Where a scan takes place."""

    subject_name: str
    directory: Path
    """The modality directory being scanned."""

    root: Optional[Path] = None
    """Dataset root, bounding sidecar inheritance lookups."""


def _table_metadata(path: Path, context: ScanContext) -> Any:
    return load_tsv_file(path)


def _attach_gradients(record: DiffusionFile, context: ScanContext) -> None:
    """Attach the .bval/.bvec tables of a diffusion image, with inheritance."""
    bval_path = find_sidecar(record.path, '.bval', root=context.root)
    if bval_path is None:
        # bvec is only looked up alongside a bval
        return
    record.bval = decode_sidecar(bval_path)

    bvec_path = find_sidecar(record.path, '.bvec', root=context.root)
    if bvec_path is not None:
        record.bvec = decode_sidecar(bvec_path)


@dataclass(frozen=True)
class ScanRule:
    """One filename pattern of a modality directory."""

    pattern: str
    """Regex for the part of the name following '<subject>_'."""

    load_metadata: Optional[Callable[[Path, ScanContext], Any]] = None
    """Decodes the record's metadata from the file itself; empty when None."""

    primary_extensions: Optional[frozenset[str]] = None
    """Extensions catalogued; any extension when None."""

    companion_extensions: frozenset[str] = frozenset()
    """Extensions of files that belong to a primary recording, skipped."""

    directory_fallback: bool = False
    """List matching directories when no plain file matches."""

    record_type: type = BIDSFile

    finalize: Optional[Callable[[Any, ScanContext], None]] = None
    """Attaches extra sidecar content right after the record is built."""

    def compile(self, subject_name: str) -> re.Pattern:
        return re.compile(rf'^{re.escape(subject_name)}_{self.pattern}')


@dataclass(frozen=True)
class ModalityRules:
    """Scan rules of one modality directory."""

    modality: str
    rules: tuple[ScanRule, ...]

    @property
    def entities(self) -> tuple[str, ...]:
        return get_permitted_entities(self.modality)


_NIFTI = r'\.nii(?:\.gz)?$'
_ANY_SUFFIX = r'(?:.*_)?[a-zA-Z0-9]+' + _NIFTI


def _task(suffix_pattern: str) -> str:
    """Pattern of a task file: task-<label> somewhere before the suffix."""
    return rf'(?:.*_)?task-.*_{suffix_pattern}'


def _recording(suffix: str) -> str:
    """Pattern of a task recording of any extension except .json."""
    return _task(rf'{suffix}\.(?!json$).+$')


_EVENTS = ScanRule(_task(r'events\.tsv$'), load_metadata=_table_metadata)
_CHANNELS = ScanRule(_task(r'channels\.tsv$'), load_metadata=_table_metadata)
_EEG_COMPANIONS = frozenset({'.vmrk', '.eeg', '.fdt'})


MODALITY_RULES = {
    'anat': ModalityRules('anat', (
        ScanRule(_ANY_SUFFIX),
    )),
    'func': ModalityRules('func', (
        ScanRule(_task('bold' + _NIFTI)),
        _EVENTS,
        ScanRule(_task(r'(?:physio|stim)\.tsv\.gz$')),
    )),
    'eeg': ModalityRules('eeg', (
        ScanRule(
            _recording('eeg'),
            primary_extensions=frozenset({'.edf', '.vhdr', '.set', '.bdf'}),
            companion_extensions=_EEG_COMPANIONS,
        ),
        _EVENTS,
        _CHANNELS,
        ScanRule(r'(?:.*_)?(?:electrodes\.tsv|photo\.jpg|coordsystem\.json|headshape\..+)$'),
    )),
    'meg': ModalityRules('meg', (
        ScanRule(_recording('meg'), directory_fallback=True),
        _EVENTS,
        _CHANNELS,
        ScanRule(r'(?:.*_)?(?:photo\.jpg|coordsystem\.json|headshape\..+)$'),
    )),
    'beh': ModalityRules('beh', (
        ScanRule(r'(?:.*_)?(?:events\.tsv|beh\.json|physio\.tsv\.gz|stim\.tsv\.gz)$'),
    )),
    'dwi': ModalityRules('dwi', (
        ScanRule(_ANY_SUFFIX, record_type=DiffusionFile, finalize=_attach_gradients),
    )),
    'pet': ModalityRules('pet', (
        ScanRule(_task('pet' + _NIFTI)),
    )),
    'ieeg': ModalityRules('ieeg', (
        ScanRule(
            _recording('ieeg'),
            primary_extensions=frozenset({'.edf', '.vhdr', '.set', '.nwb', '.mef'}),
            companion_extensions=_EEG_COMPANIONS,
        ),
        _EVENTS,
        _CHANNELS,
        ScanRule(r'(?:.*_)?(?:electrodes\.tsv|photo\.jpg|coordsystem\.json)$'),
    )),
}


def _list_rule(rule: ScanRule, context: ScanContext) -> list[str]:
    regex = rule.compile(context.subject_name)
    names = list_matching(context.directory, regex)
    if not names and rule.directory_fallback:
        names = list_matching(context.directory, regex, directories=True)
    return names


def apply_rule(rule: ScanRule, rules: ModalityRules, context: ScanContext) -> list[BIDSFile]:
    """
    Build the records of the files one rule matches.

    Files whose extension is not catalogued, and files whose name does not
    parse, are skipped.
    """
    records = []
    for filename in _list_rule(rule, context):
        if rule.primary_extensions is not None:
            _, extension = split_extension(filename)
            if extension in rule.companion_extensions:
                logger.debug(f"Skipping companion file: {filename}")
                continue
            if extension not in rule.primary_extensions:
                logger.debug(f"Skipping unknown {rules.modality} file: {filename}")
                continue

        try:
            record = parse_filename(
                filename,
                rules.entities,
                directory=context.directory,
                modality=rules.modality,
                record_type=rule.record_type
            )
        except FilenameError as e:
            logger.debug(f"Skipping {filename}: {e}")
            continue

        if rule.load_metadata is not None:
            record.metadata = rule.load_metadata(record.path, context)
        if rule.finalize is not None:
            rule.finalize(record, context)
        records.append(record)

    return records


def scan_modality(
    subject_path: Path,
    subject_name: str,
    modality: str,
    root: Optional[Path] = None
) -> list[BIDSFile]:
    """
    Scan one modality directory of a subject/session.

    Args:
        subject_path: Subject (or subject/session) directory.
        subject_name: Subject name ('sub-<label>'); only files starting with
            it are considered.
        modality: One of MODALITIES.
        root: Dataset root, bounding sidecar inheritance lookups.

    Returns:
        The modality's records in rule order; empty if the directory is absent.

    Raises:
        ValueError: If modality is not one of MODALITIES.
        MetadataDecodeError: If an attached table or sidecar is malformed.
    """
    if modality not in MODALITIES:
        raise ValueError(f"Unknown modality: {modality}")
    if modality == 'fmap':
        return scan_fieldmaps(subject_path, subject_name)

    directory = Path(subject_path) / modality
    if not directory.is_dir():
        return []

    rules = MODALITY_RULES[modality]
    context = ScanContext(subject_name=subject_name, directory=directory, root=root)

    records = []
    for rule in rules.rules:
        records.extend(apply_rule(rule, rules, context))

    logger.debug(f"    {modality}: {len(records)} file(s) in {directory}")
    return records
