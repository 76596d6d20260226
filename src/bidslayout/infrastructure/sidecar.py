"""
Sidecar resolution.

A sidecar is a metadata file associated with a data file by name: the
data file's suffix and/or extension is swapped for the sidecar's, e.g.
``sub-01_task-rest_bold.nii.gz`` -> ``sub-01_task-rest_bold.json`` or
``sub-01_task-rest_events.tsv``.

Under the BIDS inheritance principle a sidecar may also live higher up the
tree with fewer entities, e.g. ``task-rest_bold.json`` at the dataset root
applies to every rest run of every subject. The closest match wins.
"""

from pathlib import Path
from typing import Any, Callable, Optional

from ..core.filename_parser import split_extension, split_filename
from .json_loader import load_json_file
from .logging_config import get_logger
from .paths import ancestors_up_to
from .tsv_loader import load_gradient_file, load_tsv_file

logger = get_logger(__name__)

# Decoder per sidecar extension
SIDECAR_DECODERS: dict[str, Callable[[Path], Any]] = {
    '.json': load_json_file,
    '.tsv': load_tsv_file,
    '.tsv.gz': load_tsv_file,
    '.bval': load_gradient_file,
    '.bvec': load_gradient_file,
}


def sidecar_path(data_path: Path, extension: str, suffix: Optional[str] = None) -> Path:
    """
    Build the same-directory sidecar path of a data file.

    Args:
        data_path: Path to the data file.
        extension: Sidecar extension, with its leading dot (e.g. '.json').
        suffix: Sidecar suffix replacing the data file's own (e.g. 'events');
            the data file's suffix is kept when None.

    Returns:
        Path of the candidate sidecar (which may not exist).
    """
    data_path = Path(data_path)
    stem, _ = split_extension(data_path.name)
    if suffix is not None:
        head, sep, _ = stem.rpartition('_')
        stem = f"{head}{sep}{suffix}"
    return data_path.parent / f"{stem}{extension}"


def _is_applicable(candidate: str, entities: dict[str, str], suffix: str, extension: str) -> bool:
    """Check that a candidate sidecar name applies to a file with these entities."""
    cand_entities, cand_suffix, cand_extension = split_filename(candidate)
    if cand_suffix != suffix or cand_extension != extension:
        return False
    return all(entities.get(key) == value for key, value in cand_entities.items())


def find_sidecar(
    data_path: Path,
    extension: str,
    suffix: Optional[str] = None,
    root: Optional[Path] = None
) -> Optional[Path]:
    """
    Locate the sidecar of a data file.

    The same-directory sidecar is tried first. When it is absent and root is
    given, each directory from the data file's own up to root is searched for
    a sidecar whose entities are a subset of the data file's. At a single
    level the candidate with the most entities wins, ties broken by name.

    Args:
        data_path: Path to the data file.
        extension: Sidecar extension (e.g. '.json', '.bval').
        suffix: Sidecar suffix; the data file's suffix when None.
        root: Dataset root bounding the inheritance walk; no walk when None.

    Returns:
        Path to the sidecar, or None when none applies.
    """
    data_path = Path(data_path)
    local = sidecar_path(data_path, extension, suffix)
    if local.is_file():
        return local
    if root is None:
        return None

    entities, data_suffix, _ = split_filename(data_path.name)
    if suffix is None:
        suffix = data_suffix

    for directory in ancestors_up_to(data_path.parent, Path(root)):
        candidates = [
            child.name for child in directory.iterdir()
            if child.is_file() and _is_applicable(child.name, entities, suffix, extension)
        ]
        if candidates:
            best = min(candidates, key=lambda name: (-len(split_filename(name)[0]), name))
            logger.debug(f"Inherited sidecar for {data_path.name}: {directory / best}")
            return directory / best

    return None


def decode_sidecar(path: Path) -> Any:
    """
    Decode a sidecar according to its extension.

    Raises:
        MetadataDecodeError: If the sidecar is malformed.
        ValueError: If the extension has no known decoder.
    """
    _, extension = split_extension(Path(path).name)
    decoder = SIDECAR_DECODERS.get(extension)
    if decoder is None:
        raise ValueError(f"No decoder for sidecar extension '{extension}': {path}")
    return decoder(path)


def load_sidecar(
    data_path: Path,
    extension: str,
    suffix: Optional[str] = None,
    root: Optional[Path] = None
) -> Any:
    """
    Find and decode the sidecar of a data file.

    Returns:
        The decoded content, or an empty dict when no sidecar applies.

    Raises:
        MetadataDecodeError: If the sidecar found is malformed.
    """
    path = find_sidecar(data_path, extension, suffix, root)
    if path is None:
        return {}
    return decode_sidecar(path)


def get_metadata(data_path: Path, root: Path) -> dict:
    """
    Get the JSON metadata of a data file, following inheritance up to root.

    Returns:
        The decoded JSON sidecar, or an empty dict when none applies.
    """
    return load_sidecar(data_path, '.json', root=root)
