"""
Fieldmap grouping.

A fieldmap is usually stored as several images that only make sense
together. Four layouts are recognised, each keyed by the suffix of the image
that owns the record:

- phasediff: one phase difference image plus magnitude1/magnitude2
- phase12: two phase images (phase1/phase2) plus magnitude1/magnitude2
- fieldmap: one real fieldmap image plus one magnitude image
- epi: one image per phase-encoding direction (dir-<label> required)

Companion images are recorded by name on the owning record; they are not
catalogued on their own and their existence is not checked.
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

from ..core.models import FieldmapFile
from .logging_config import get_logger
from .paths import list_matching
from .sidecar import load_sidecar

logger = get_logger(__name__)

_LABEL = r'[a-zA-Z0-9]+'


def _fieldmap_regex(suffix: str, with_direction: bool = False) -> re.Pattern:
    """Build the fixed-position regex of one fieldmap layout."""
    direction = rf'_dir-(?P<dir>{_LABEL})' if with_direction else ''
    return re.compile(
        rf'^sub-(?P<sub>{_LABEL})'
        rf'(?:_ses-(?P<ses>{_LABEL}))?'
        rf'(?:_acq-(?P<acq>{_LABEL}))?'
        rf'{direction}'
        rf'(?:_run-(?P<run>{_LABEL}))?'
        rf'_{suffix}(?P<ext>\.nii(?:\.gz)?)$'
    )


def _single_sidecar(path: Path, phase: list[str]) -> Any:
    return load_sidecar(path, '.json')


def _phase_pair_sidecars(path: Path, phase: list[str]) -> Any:
    return tuple(load_sidecar(path.parent / name, '.json') for name in phase)


@dataclass(frozen=True)
class FieldmapPattern:
    """One fieldmap layout: how to recognise it and what to group with it."""

    type: str
    suffix: str
    regex: re.Pattern
    magnitude: tuple[str, ...] = ()
    """Suffixes of the magnitude images, substituted for the owning suffix."""

    phase: tuple[str, ...] = ()
    """Suffixes of the phase images, substituted for the owning suffix."""

    load_metadata: Callable[[Path, list[str]], Any] = _single_sidecar

    def companions(self, filename: str, suffixes: tuple[str, ...]) -> list[str]:
        """Derive companion filenames by suffix substitution."""
        return [
            filename.replace(f'_{self.suffix}.nii', f'_{other}.nii')
            for other in suffixes
        ]


# Evaluated in this order against the same listing
FIELDMAP_PATTERNS = (
    FieldmapPattern(
        type='phasediff',
        suffix='phasediff',
        regex=_fieldmap_regex('phasediff'),
        magnitude=('magnitude1', 'magnitude2'),
    ),
    FieldmapPattern(
        type='phase12',
        suffix='phase1',
        regex=_fieldmap_regex('phase1'),
        magnitude=('magnitude1', 'magnitude2'),
        phase=('phase1', 'phase2'),
        load_metadata=_phase_pair_sidecars,
    ),
    FieldmapPattern(
        type='fieldmap',
        suffix='fieldmap',
        regex=_fieldmap_regex('fieldmap'),
        magnitude=('magnitude',),
    ),
    FieldmapPattern(
        type='epi',
        suffix='epi',
        regex=_fieldmap_regex('epi', with_direction=True),
    ),
)


def build_fieldmap(pattern: FieldmapPattern, match: re.Match, directory: Path) -> FieldmapFile:
    """
    Build the record of one matched fieldmap image.

    Session, acquisition and run default to empty strings so every fieldmap
    record carries the same entity keys.
    """
    filename = match.string
    entities = {
        'sub': match.group('sub'),
        'ses': match.group('ses') or '',
        'acq': match.group('acq') or '',
    }
    if 'dir' in pattern.regex.groupindex:
        entities['dir'] = match.group('dir')
    entities['run'] = match.group('run') or ''

    path = directory / filename
    phase = pattern.companions(filename, pattern.phase)

    return FieldmapFile(
        filename=filename,
        path=path,
        modality='fmap',
        suffix=pattern.suffix,
        extension=match.group('ext'),
        entities=entities,
        metadata=pattern.load_metadata(path, phase),
        type=pattern.type,
        magnitude=pattern.companions(filename, pattern.magnitude),
        phase=phase,
    )


def scan_fieldmaps(subject_path: Path, subject_name: str) -> list[FieldmapFile]:
    """
    Scan the fmap directory of a subject/session.

    Args:
        subject_path: Subject (or subject/session) directory.
        subject_name: Subject name ('sub-<label>').

    Returns:
        Fieldmap records, grouped by layout in FIELDMAP_PATTERNS order.
        Empty if there is no fmap directory.
    """
    directory = Path(subject_path) / 'fmap'
    if not directory.is_dir():
        return []

    file_list = list_matching(directory, rf'^{re.escape(subject_name)}_.*\.nii(?:\.gz)?$')

    records = []
    for pattern in FIELDMAP_PATTERNS:
        for filename in file_list:
            match = pattern.regex.match(filename)
            if match is None:
                continue
            records.append(build_fieldmap(pattern, match, directory))

    logger.debug(f"    fmap: {len(records)} fieldmap(s) in {directory}")
    return records
