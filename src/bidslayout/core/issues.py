"""
Structured diagnostics recorded while building a layout.

In tolerant mode, problems that would otherwise abort the build are logged
and kept on the dataset as Issue objects so callers can decide what to do
with them.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Severity(Enum):
    """Issue severity levels."""
    WARNING = "WARNING"
    INFO = "INFO"


# Issue codes
MISSING_DESCRIPTION = "BIDS001"
DESCRIPTION_DECODE = "BIDS002"
MISSING_REQUIRED_FIELD = "BIDS003"
PARTICIPANTS_DECODE = "BIDS004"
NO_SESSIONS = "BIDS005"


@dataclass
class Issue:
    """
    A single diagnostic.

    Attributes:
        code: Issue code (e.g., "BIDS003").
        severity: WARNING or INFO.
        message: Human-readable message.
        file_path: Path of the affected file or directory, if any.
    """
    code: str
    severity: Severity
    message: str
    file_path: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to a dictionary for JSON serialization."""
        return {
            "code": self.code,
            "severity": self.severity.value,
            "message": self.message,
            "file_path": self.file_path,
        }

    def __str__(self) -> str:
        text = f"[{self.code}] {self.severity.value}: {self.message}"
        if self.file_path:
            text += f"\n  File: {self.file_path}"
        return text


def warnings_only(issues: list[Issue]) -> list[Issue]:
    """Return the issues of WARNING severity."""
    return [issue for issue in issues if issue.severity == Severity.WARNING]
