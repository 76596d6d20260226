"""
Exceptions raised while building a BIDS layout.

Dataset-level errors abort the build (some of them only in strict mode).
Filename errors are raised by the parser and caught by the modality
scanners, which skip the offending file.
"""

from pathlib import Path
from typing import Optional


class BIDSLayoutError(Exception):
    """Base exception for all bidslayout errors."""

    pass


class RootNotFoundError(BIDSLayoutError, FileNotFoundError):
    """Raised when the dataset root directory does not exist."""

    def __init__(self, root_path: Path):
        super().__init__(f"BIDS directory does not exist: '{root_path}'")
        self.root_path = root_path


class DatasetDescriptionError(BIDSLayoutError):
    """Base class for problems with dataset_description.json."""

    pass


class MissingDescriptionError(DatasetDescriptionError):
    """Raised when dataset_description.json is absent (strict mode)."""

    def __init__(self, root_path: Path):
        super().__init__(
            f"BIDS directory not valid: missing dataset_description.json: '{root_path}'"
        )
        self.root_path = root_path


class DescriptionDecodeError(DatasetDescriptionError):
    """Raised when dataset_description.json cannot be decoded (strict mode)."""

    pass


class MissingRequiredFieldError(DatasetDescriptionError):
    """Raised when a required description field is missing (strict mode)."""

    def __init__(self, field_name: str):
        super().__init__(
            f"BIDS dataset description not valid: missing {field_name} field."
        )
        self.field_name = field_name


class NoSubjectsFoundError(BIDSLayoutError):
    """Raised when the dataset root holds no sub-<label> directory."""

    def __init__(self, root_path: Path):
        super().__init__(f"No subjects found in BIDS directory: '{root_path}'")
        self.root_path = root_path


class MetadataDecodeError(BIDSLayoutError, ValueError):
    """Raised when a JSON, TSV or gradient file cannot be decoded."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Unable to decode {path}: {reason}")
        self.path = path
        self.reason = reason


class FilenameError(BIDSLayoutError, ValueError):
    """Base class for filenames that do not follow the naming grammar."""

    def __init__(self, filename: str, message: str):
        super().__init__(f"{filename}: {message}")
        self.filename = filename


class MalformedFilenameError(FilenameError):
    """Raised when a filename does not have the minimal required shape."""

    pass


class UnknownEntityError(FilenameError):
    """Raised when a filename uses an entity not permitted for the modality."""

    def __init__(self, filename: str, entity: str, permitted: Optional[tuple] = None):
        message = f"unknown entity '{entity}'"
        if permitted:
            message += f" (permitted: {', '.join(permitted)})"
        super().__init__(filename, message)
        self.entity = entity
