"""
Path utilities and constants.

This module provides directory listing helpers used by the scanners and the
locations of the persistent settings and log files.
"""

import platform
import re
from pathlib import Path
from typing import Union


def list_matching(
    directory: Path,
    pattern: Union[str, re.Pattern],
    directories: bool = False
) -> list[str]:
    """
    List the immediate children of a directory whose name matches a pattern.

    Args:
        directory: Directory to list.
        pattern: Regular expression matched against each child's name with
            re.match; anchor it with '$' to match the whole name.
        directories: If True, list directories only; otherwise regular files only.

    Returns:
        Sorted list of names. Empty if the directory does not exist.
    """
    directory = Path(directory)
    if not directory.is_dir():
        return []

    regex = re.compile(pattern) if isinstance(pattern, str) else pattern

    matches = []
    for child in sorted(directory.iterdir()):
        if directories != child.is_dir():
            continue
        if regex.match(child.name):
            matches.append(child.name)
    return matches


def ancestors_up_to(path: Path, root: Path) -> list[Path]:
    """
    Get the directories from a path's own directory up to a root, inclusive.

    Args:
        path: A file or directory inside root.
        root: The topmost directory to return.

    Returns:
        List of directories, innermost first. Only path's own directory is
        returned when it does not lie inside root.
    """
    start = path if path.is_dir() else path.parent
    levels = [start]
    if start == root or root not in start.parents:
        return levels
    for parent in start.parents:
        levels.append(parent)
        if parent == root:
            break
    return levels


def get_persistent_data_directory() -> Path:
    """
    Get the persistent data directory for the application (cross-platform).

    Returns:
        Path to the persistent data directory.

    Platform-specific locations:
        - Windows: %APPDATA%/LocalLow/bidslayout
        - macOS: ~/Library/Application Support/bidslayout
        - Linux: ~/.config/bidslayout
    """
    system = platform.system()
    app_name = "bidslayout"

    if system == "Windows":
        base = Path.home() / "AppData" / "LocalLow"
    elif system == "Darwin":
        base = Path.home() / "Library" / "Application Support"
    else:
        base = Path.home() / ".config"

    data_dir = base / app_name
    data_dir.mkdir(parents=True, exist_ok=True)

    return data_dir


def get_settings_file_path() -> Path:
    """Get the path to the settings.json file."""
    return get_persistent_data_directory() / "settings.json"


def get_log_file_path() -> Path:
    """Get the path to the main log file (log.txt)."""
    return get_persistent_data_directory() / "log.txt"

