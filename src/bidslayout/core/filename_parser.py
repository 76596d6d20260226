"""
BIDS filename grammar.

A BIDS filename is a sequence of ``key-value`` entities joined by
underscores, followed by a suffix and an extension::

    sub-01_ses-pre_task-rest_run-1_bold.nii.gz
    |-------- entities ---------|suffix|extension

Everything after the first dot is the extension, so multi-part extensions
such as ``.nii.gz`` or ``.tsv.gz`` are kept whole.
"""

import re
from pathlib import Path
from typing import Iterable, Optional

from .exceptions import MalformedFilenameError, UnknownEntityError
from .models import BIDSFile

_ENTITY_RE = re.compile(r'^([a-zA-Z]+)-([a-zA-Z0-9]+)$')
_SUFFIX_RE = re.compile(r'^[a-zA-Z0-9]+$')


def split_extension(filename: str) -> tuple[str, str]:
    """
    Split a filename at its first dot.

    Returns:
        Tuple of (stem, extension); the extension keeps its leading dot and
        is empty when the name has no dot.
    """
    stem, dot, rest = filename.partition('.')
    return stem, (dot + rest) if dot else ''


def split_filename(filename: str) -> tuple[dict[str, str], Optional[str], str]:
    """
    Split a filename into entities, suffix and extension without validation.

    Segments that are not ``key-value`` pairs are ignored, except the last
    one which is taken as the suffix. Used to compare candidate sidecars
    that may live above the subject level (e.g. ``task-rest_bold.json``).

    Returns:
        Tuple of (entities, suffix, extension). The suffix is None when the
        last segment is itself an entity.
    """
    stem, extension = split_extension(filename)
    segments = stem.split('_')
    suffix = None
    if segments and '-' not in segments[-1]:
        suffix = segments.pop()

    entities = {}
    for segment in segments:
        key, dash, value = segment.partition('-')
        if dash:
            entities[key] = value
    return entities, suffix, extension


def parse_filename(
    filename: str,
    permitted_entities: Iterable[str],
    directory: Optional[Path] = None,
    modality: Optional[str] = None,
    record_type: type = BIDSFile
) -> BIDSFile:
    """
    Parse a BIDS filename into a file record.

    Args:
        filename: Name of the file (no directory part).
        permitted_entities: Entity keys allowed for the caller's modality.
        directory: Directory holding the file; used to build the record's path.
        modality: Modality directory name stored on the record.
        record_type: BIDSFile subclass to build (e.g. DiffusionFile).

    Returns:
        A BIDSFile with entities in encounter order and empty metadata.

    Raises:
        MalformedFilenameError: If the name does not start with sub-<label>,
            has no extension, or is not a sequence of entities plus a suffix.
        UnknownEntityError: If an entity key is not in permitted_entities.
    """
    permitted = tuple(permitted_entities)

    stem, extension = split_extension(filename)
    if not extension or extension == '.':
        raise MalformedFilenameError(filename, "missing extension")

    segments = stem.split('_')
    if not _ENTITY_RE.match(segments[0]) or not segments[0].startswith('sub-'):
        raise MalformedFilenameError(filename, "must start with sub-<label>")
    if len(segments) < 2:
        raise MalformedFilenameError(filename, "expected entities followed by a suffix")

    suffix = segments[-1]
    if not _SUFFIX_RE.match(suffix):
        raise MalformedFilenameError(filename, f"invalid suffix '{suffix}'")

    entities = {}
    for segment in segments[:-1]:
        match = _ENTITY_RE.match(segment)
        if match is None:
            raise MalformedFilenameError(filename, f"invalid entity '{segment}'")
        key, value = match.groups()
        if key not in permitted:
            raise UnknownEntityError(filename, key, permitted)
        entities[key] = value

    path = Path(directory) / filename if directory is not None else Path(filename)

    return record_type(
        filename=filename,
        path=path,
        modality=modality,
        suffix=suffix,
        extension=extension,
        entities=entities
    )


def build_filename(entities: dict[str, str], suffix: str, extension: str) -> str:
    """
    Assemble a filename from its parts.

    Entities with an empty value are left out, so fieldmap records (which
    carry empty-string placeholders) rebuild their original name.
    """
    parts = [f"{key}-{value}" for key, value in entities.items() if value]
    parts.append(suffix)
    return '_'.join(parts) + extension
